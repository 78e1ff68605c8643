from diagram_pipeline.renderer.controller import (
    RenderController,
    RenderFailure,
    RenderSession,
    RenderState,
    RenderSuccess,
    new_render_id,
)
from diagram_pipeline.renderer.document import DiagramView, SharedDocument
from diagram_pipeline.renderer.engine import (
    KrokiRenderEngine,
    MermaidCliRenderEngine,
    RenderEngine,
    get_render_engine,
)
from diagram_pipeline.renderer.errors import RenderEngineError, is_syntax_error
from diagram_pipeline.renderer.fallback import PlaceholderState, fallback_svg
from diagram_pipeline.renderer.janitor import ErrorNodeJanitor
from diagram_pipeline.renderer.sanitizer import sanitize_svg

__all__ = [
    "DiagramView",
    "ErrorNodeJanitor",
    "KrokiRenderEngine",
    "MermaidCliRenderEngine",
    "PlaceholderState",
    "RenderController",
    "RenderEngine",
    "RenderEngineError",
    "RenderFailure",
    "RenderSession",
    "RenderState",
    "RenderSuccess",
    "SharedDocument",
    "fallback_svg",
    "get_render_engine",
    "is_syntax_error",
    "new_render_id",
    "sanitize_svg",
]
