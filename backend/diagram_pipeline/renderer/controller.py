"""
Render/recovery controller.

Runs one render request through the engine and turns whatever happens into
a RenderOutcome. A failure never reaches the caller as an exception: it comes
back as a RenderFailure carrying the message and a fallback SVG to show.
"""

import logging
import secrets
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from diagram_pipeline.renderer.engine import RenderEngine, get_render_engine
from diagram_pipeline.renderer.errors import (
    RenderEngineError,
    describe_render_error,
    extract_error_line,
    is_syntax_error,
)
from diagram_pipeline.renderer.fallback import PlaceholderState, fallback_svg
from diagram_pipeline.renderer.sanitizer import ErrorDiagramError, InvalidSvgError, sanitize_svg

logger = logging.getLogger(__name__)


class RenderState(str, Enum):
    IDLE = "idle"
    RENDERING = "rendering"
    RENDERED = "rendered"
    FAILED = "failed"


@dataclass
class RenderSuccess:
    svg: str
    render_id: str
    ok: bool = True

    def to_dict(self) -> dict:
        return {"ok": True, "render_id": self.render_id, "svg": self.svg}


@dataclass
class RenderFailure:
    message: str
    fallback_svg: str
    render_id: str
    syntax_error: bool = False
    line: Optional[int] = None
    ok: bool = False

    def to_dict(self) -> dict:
        return {
            "ok": False,
            "render_id": self.render_id,
            "message": self.message,
            "fallback_svg": self.fallback_svg,
            "syntax_error": self.syntax_error,
            "line": self.line,
        }


RenderOutcome = Union[RenderSuccess, RenderFailure]


def new_render_id() -> str:
    return f"diagram-{int(time.time() * 1000)}-{secrets.token_hex(4)}"


@dataclass
class RenderSession:
    text: str
    render_id: str = field(default_factory=new_render_id)
    state: RenderState = RenderState.IDLE
    started_at: Optional[float] = None
    finished_at: Optional[float] = None
    outcome: Optional[RenderOutcome] = None

    @property
    def elapsed(self) -> Optional[float]:
        if self.started_at is None or self.finished_at is None:
            return None
        return self.finished_at - self.started_at


class RenderController:
    def __init__(self, engine: Optional[RenderEngine] = None):
        self._engine = engine

    @property
    def engine(self) -> RenderEngine:
        if self._engine is None:
            self._engine = get_render_engine()
        return self._engine

    def _fail(self, session: RenderSession, message: str, fallback: Optional[str], syntax_error=None) -> RenderFailure:
        if syntax_error is None:
            syntax_error = is_syntax_error(message)
        state = PlaceholderState.SYNTAX_ERROR if syntax_error else PlaceholderState.ERROR

        outcome = RenderFailure(
            message=message,
            fallback_svg=fallback or fallback_svg(state),
            render_id=session.render_id,
            syntax_error=syntax_error,
            line=extract_error_line(message) if syntax_error else None,
        )
        session.state = RenderState.FAILED
        session.outcome = outcome
        session.finished_at = time.monotonic()
        logger.warning("[RENDER] %s failed: %s", session.render_id, message)
        return outcome

    async def render_session(self, session: RenderSession, fallback: Optional[str] = None, view=None) -> RenderOutcome:
        session.started_at = time.monotonic()

        if not isinstance(session.text, str) or not session.text.strip():
            return self._fail(session, "Diagram code cannot be empty", fallback, syntax_error=False)

        session.state = RenderState.RENDERING
        if view is not None:
            view.latest_render_id = session.render_id
            # Engines may inject error nodes while and after rendering
            view.watch()

        try:
            markup = await self.engine.render(session.render_id, session.text)
            svg = sanitize_svg(markup)
        except RenderEngineError as exc:
            return self._fail(session, describe_render_error(exc), fallback, exc.syntax_error)
        except ErrorDiagramError as exc:
            return self._fail(session, str(exc), fallback, syntax_error=True)
        except InvalidSvgError as exc:
            return self._fail(session, str(exc), fallback, syntax_error=False)
        except Exception as exc:
            logger.exception("[RENDER] Engine call raised")
            return self._fail(session, describe_render_error(exc), fallback)

        outcome = RenderSuccess(svg=svg, render_id=session.render_id)
        session.state = RenderState.RENDERED
        session.outcome = outcome
        session.finished_at = time.monotonic()

        if view is not None:
            self._mount(view, session)

        logger.info("[RENDER] %s rendered (%d bytes)", session.render_id, len(svg))
        return outcome

    def _mount(self, view, session: RenderSession) -> None:
        if view.latest_render_id != session.render_id:
            logger.info("[RENDER] %s is stale, not mounting", session.render_id)
            return
        try:
            view.mount(session.outcome.svg)
        except Exception:
            # The outcome stays a success; the view keeps its previous content
            logger.exception("[RENDER] Mounting %s failed", session.render_id)

    async def render(self, text, fallback: Optional[str] = None, view=None) -> RenderOutcome:
        """
        Render ``text`` and, when a view is given, mount the SVG into it if
        this is still the latest request for that view.

        NEVER throws.
        """
        try:
            session = RenderSession(text=text)
            return await self.render_session(session, fallback=fallback, view=view)
        except Exception:
            logger.exception("[RENDER] Unexpected render failure")
            return RenderFailure(
                message="Unexpected render failure",
                fallback_svg=fallback or fallback_svg(PlaceholderState.ERROR),
                render_id=new_render_id(),
            )
