"""
Grammar check through an external Mermaid parser.

The Mermaid grammar lives in the JavaScript package, so the only faithful
check is to ask the Mermaid CLI (``mmdc``) to compile the notation. When the
CLI is not installed the check is skipped and only the structural checks of
the validator apply.
"""

import logging
import re
import shutil
import subprocess
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from diagram_pipeline.config import GRAMMAR_CHECK_ENABLED, GRAMMAR_CHECK_TIMEOUT_SECONDS, MMDC_PATH

logger = logging.getLogger(__name__)

LINE_ERROR_RE = re.compile(r"error on line (\d+):\s*(.+)", re.IGNORECASE | re.DOTALL)
MAX_DETAIL_LENGTH = 240


class GrammarError(Exception):
    """The grammar engine rejected the notation."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def translate_grammar_error(raw: str) -> str:
    """
    Turn raw parser output into the user-facing message.

    ``Parse error on line 3: ...`` becomes ``Error on line 3: ...``; anything
    else is returned trimmed.
    """
    text = (raw or "").strip()
    if not text:
        return "Invalid syntax in diagram code"

    match = LINE_ERROR_RE.search(text)
    if not match:
        return text

    line_number, detail = match.groups()
    detail = " ".join(detail.split())
    if len(detail) > MAX_DETAIL_LENGTH:
        detail = detail[:MAX_DETAIL_LENGTH] + "..."
    return f"Error on line {line_number}: {detail}"


class GrammarParser(ABC):
    @abstractmethod
    def parse(self, text: str) -> None:
        """Raise GrammarError when the notation does not parse."""


class MermaidCliParser(GrammarParser):
    def __init__(self, executable: str, timeout: float = GRAMMAR_CHECK_TIMEOUT_SECONDS):
        self.executable = executable
        self.timeout = timeout

    def parse(self, text: str) -> None:
        with tempfile.TemporaryDirectory(prefix="diagram-grammar-") as workdir:
            source = Path(workdir) / "input.mmd"
            target = Path(workdir) / "output.svg"
            source.write_text(text, encoding="utf-8")

            try:
                proc = subprocess.run(
                    [self.executable, "-i", str(source), "-o", str(target), "-q"],
                    text=True,
                    capture_output=True,
                    check=False,
                    timeout=self.timeout,
                )
            except subprocess.TimeoutExpired:
                # A slow parser is not proof of a bad diagram
                logger.warning("[VALIDATOR] Grammar check timed out after %.1fs", self.timeout)
                return
            except OSError as exc:
                logger.warning("[VALIDATOR] Grammar check could not start: %s", exc)
                return

        if proc.returncode != 0:
            raise GrammarError(translate_grammar_error(proc.stderr or proc.stdout))


def get_grammar_parser() -> Optional[GrammarParser]:
    if not GRAMMAR_CHECK_ENABLED:
        return None
    executable = shutil.which(MMDC_PATH)
    if not executable:
        logger.debug("[VALIDATOR] '%s' not found, grammar check disabled", MMDC_PATH)
        return None
    return MermaidCliParser(executable)
