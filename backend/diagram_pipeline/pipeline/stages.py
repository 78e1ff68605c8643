import logging

from diagram_pipeline.compiler.connection_optimizer import optimize_connections
from diagram_pipeline.dsl.architecture_parser import analyze_architecture
from diagram_pipeline.dsl.families import detect_family
from diagram_pipeline.dsl.mermaid import preprocess_notation
from diagram_pipeline.ir.diagram import DiagramFamily
from diagram_pipeline.ir.validation import ValidationResult
from diagram_pipeline.pipeline.context import PipelineContext
from diagram_pipeline.pipeline.stage import PipelineStage
from diagram_pipeline.validation.notation_validator import NotationValidator

logger = logging.getLogger(__name__)


def _is_architecture(context: PipelineContext) -> bool:
    family = context.family or detect_family(context.text)
    return family == DiagramFamily.ARCHITECTURE


class PreprocessStage(PipelineStage):
    name = "preprocess"

    def run(self, context: PipelineContext) -> ValidationResult:
        context.text = preprocess_notation(context.source.text, context.family)
        if not context.text:
            return ValidationResult.failure("Diagram code cannot be empty")
        return ValidationResult.success()


class StructureStage(PipelineStage):
    """Builds the architecture graph; other families skip it."""
    name = "structure"

    def run(self, context: PipelineContext) -> ValidationResult:
        if _is_architecture(context):
            context.architecture = analyze_architecture(context.text)
        return ValidationResult.success()


class OptimizeStage(PipelineStage):
    name = "optimize"

    def run(self, context: PipelineContext) -> ValidationResult:
        if context.architecture is None:
            return ValidationResult.success()

        context.optimization = optimize_connections(context.architecture)
        context.text = context.optimization.text
        return ValidationResult.success()


class ValidateStage(PipelineStage):
    name = "validate"

    def __init__(self, validator: NotationValidator = None):
        # Text arrives preprocessed; running the preprocessor again is a no-op
        self.validator = validator or NotationValidator(preprocess=False)

    def run(self, context: PipelineContext) -> ValidationResult:
        context.report = self.validator.inspect(context.text, context.family)
        for issue in context.report.issues:
            logger.debug("[VALIDATOR] %s: %s", issue.code, issue.message)
        return context.report.to_result()
