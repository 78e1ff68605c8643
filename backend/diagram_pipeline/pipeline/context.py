from dataclasses import dataclass, field
from typing import List, Optional

from diagram_pipeline.compiler.connection_optimizer import OptimizationResult
from diagram_pipeline.ir.architecture import ArchitectureDocument
from diagram_pipeline.ir.diagram import DiagramFamily, DiagramSource
from diagram_pipeline.ir.validation import ValidationResult
from diagram_pipeline.validation.notation_validator import ValidationReport


@dataclass
class PipelineContext:
    # Raw input (authoritative)
    source: DiagramSource

    # Working text, replaced by each stage that rewrites it
    text: str = ""

    architecture: Optional[ArchitectureDocument] = None
    optimization: Optional[OptimizationResult] = None

    report: Optional[ValidationReport] = None
    validation: Optional[ValidationResult] = None

    completed_stages: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def family(self) -> Optional[DiagramFamily]:
        return self.source.family

    @property
    def is_valid(self) -> bool:
        return self.validation is not None and self.validation.valid

    def add_error(self, message: str):
        self.errors.append(message)
