import asyncio
import logging
import shutil
import subprocess
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

import requests

from diagram_pipeline.config import KROKI_BASE_URL, MMDC_PATH, RENDER_ENGINE, RENDER_TIMEOUT_SECONDS
from diagram_pipeline.renderer.errors import RenderEngineError

logger = logging.getLogger(__name__)

MAX_ERROR_DETAIL = 500


def _trim(detail: str) -> str:
    detail = (detail or "").strip()
    if len(detail) > MAX_ERROR_DETAIL:
        detail = detail[:MAX_ERROR_DETAIL] + "..."
    return detail


class RenderEngine(ABC):
    """Turns notation into SVG markup. Raises RenderEngineError on rejection."""

    name: str

    @abstractmethod
    async def render(self, render_id: str, text: str) -> str:
        pass


class KrokiRenderEngine(RenderEngine):
    name = "kroki"

    def __init__(self, base_url: str = KROKI_BASE_URL, timeout: float = RENDER_TIMEOUT_SECONDS):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _post(self, text: str) -> str:
        url = f"{self.base_url}/mermaid/svg"
        try:
            response = requests.post(
                url,
                data=text.encode("utf-8"),
                headers={"Content-Type": "text/plain"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise RenderEngineError(f"Rendering service unavailable: {exc}", syntax_error=False) from exc

        if response.status_code == 400:
            # Kroki answers 400 with the parser message as the body
            raise RenderEngineError(_trim(response.text) or "Invalid diagram code")

        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise RenderEngineError(f"Rendering service error: {exc}", syntax_error=False) from exc

        return response.text

    async def render(self, render_id: str, text: str) -> str:
        logger.debug("[RENDER] %s -> %s", render_id, self.base_url)
        return await asyncio.to_thread(self._post, text)


class MermaidCliRenderEngine(RenderEngine):
    name = "mmdc"

    def __init__(self, executable: str = MMDC_PATH, timeout: float = RENDER_TIMEOUT_SECONDS):
        self.executable = executable
        self.timeout = timeout

    def _run(self, render_id: str, text: str) -> str:
        executable = shutil.which(self.executable)
        if not executable:
            raise RenderEngineError(f"Mermaid CLI '{self.executable}' is not installed", syntax_error=False)

        with tempfile.TemporaryDirectory(prefix=f"{render_id}-") as workdir:
            source = Path(workdir) / "input.mmd"
            target = Path(workdir) / "output.svg"
            source.write_text(text, encoding="utf-8")

            try:
                proc = subprocess.run(
                    [executable, "-i", str(source), "-o", str(target), "-q"],
                    text=True,
                    capture_output=True,
                    check=False,
                    timeout=self.timeout,
                )
            except subprocess.TimeoutExpired as exc:
                raise RenderEngineError(
                    f"Mermaid CLI timed out after {self.timeout:.0f}s", syntax_error=False
                ) from exc
            except OSError as exc:
                raise RenderEngineError(f"Failed to execute Mermaid CLI: {exc}", syntax_error=False) from exc

            if proc.returncode != 0 or not target.exists():
                raise RenderEngineError(_trim(proc.stderr or proc.stdout) or "Mermaid CLI failed")

            return target.read_text(encoding="utf-8")

    async def render(self, render_id: str, text: str) -> str:
        return await asyncio.to_thread(self._run, render_id, text)


ENGINES = {
    KrokiRenderEngine.name: KrokiRenderEngine,
    MermaidCliRenderEngine.name: MermaidCliRenderEngine,
}


def get_render_engine(kind: str = RENDER_ENGINE) -> RenderEngine:
    try:
        return ENGINES[kind.strip().lower()]()
    except KeyError:
        raise ValueError(f"Unknown render engine '{kind}'. Expected one of: {', '.join(ENGINES)}") from None
