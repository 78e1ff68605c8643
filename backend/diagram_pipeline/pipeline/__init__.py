from diagram_pipeline.pipeline.context import PipelineContext
from diagram_pipeline.pipeline.controller import PipelineController

__all__ = ["PipelineContext", "PipelineController"]
