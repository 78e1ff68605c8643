import asyncio
import logging
from typing import List, Optional

from diagram_pipeline.ir.diagram import DiagramSource
from diagram_pipeline.ir.validation import ValidationResult
from diagram_pipeline.pipeline.context import PipelineContext
from diagram_pipeline.pipeline.stage import PipelineStage
from diagram_pipeline.pipeline.stages import (
    OptimizeStage,
    PreprocessStage,
    StructureStage,
    ValidateStage,
)
from diagram_pipeline.renderer.controller import (
    RenderController,
    RenderFailure,
    RenderOutcome,
    new_render_id,
)
from diagram_pipeline.renderer.errors import extract_error_line
from diagram_pipeline.renderer.fallback import PlaceholderState, fallback_svg
from diagram_pipeline.validation.notation_validator import NotationValidator

logger = logging.getLogger(__name__)

# Rejections of the input itself rather than of its notation
INPUT_ERROR_MESSAGES = frozenset({"Diagram code cannot be empty", "Invalid diagram code"})


class PipelineController:
    """
    Prepares notation for rendering:

        preprocess -> structure -> optimize -> validate

    and hands valid text to the render controller. A failing stage stops
    the run; there are no retries since every stage is deterministic.
    """

    def __init__(
        self,
        validator: Optional[NotationValidator] = None,
        render_controller: Optional[RenderController] = None,
    ):
        self.render_controller = render_controller or RenderController()
        self.stages: List[PipelineStage] = [
            PreprocessStage(),
            StructureStage(),
            OptimizeStage(),
            ValidateStage(validator),
        ]

    def run(self, text, family=None) -> PipelineContext:
        """NEVER throws: the outcome is always readable from the context."""
        context = PipelineContext(source=DiagramSource.from_raw(text, family))
        if not isinstance(text, str):
            context.validation = ValidationResult.failure("Invalid diagram code")
            context.add_error(context.validation.message)
            return context

        for stage in self.stages:
            try:
                result = stage.run(context)
            except Exception:
                logger.exception("[PIPELINE] Stage '%s' raised", stage.name)
                result = ValidationResult.failure("Invalid diagram code")

            context.validation = result
            if not result.valid:
                context.add_error(result.message)
                logger.info("[PIPELINE] Stopped at '%s': %s", stage.name, result.message)
                break  # hard stop on failure
            context.completed_stages.append(stage.name)

        return context

    async def render(self, text, family=None, fallback: Optional[str] = None, view=None) -> RenderOutcome:
        """Prepare then render. Validation failures never reach the engine."""
        # The grammar check may shell out, keep it off the event loop
        context = await asyncio.to_thread(self.run, text, family)
        if not context.is_valid:
            message = context.validation.message if context.validation else "Invalid diagram code"
            syntax_error = message not in INPUT_ERROR_MESSAGES
            state = PlaceholderState.SYNTAX_ERROR if syntax_error else PlaceholderState.ERROR
            return RenderFailure(
                message=message,
                fallback_svg=fallback or fallback_svg(state),
                render_id=new_render_id(),
                syntax_error=syntax_error,
                line=extract_error_line(message) if syntax_error else None,
            )
        return await self.render_controller.render(context.text, fallback=fallback, view=view)
