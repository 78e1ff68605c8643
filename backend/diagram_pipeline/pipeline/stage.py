from abc import ABC, abstractmethod

from diagram_pipeline.ir.validation import ValidationResult
from diagram_pipeline.pipeline.context import PipelineContext


class PipelineStage(ABC):
    name: str

    @abstractmethod
    def run(self, context: PipelineContext) -> ValidationResult:
        """
        Must:
        - read from context
        - write to context
        - NEVER call other stages
        """
        pass
