import re
from typing import Optional

# Wording the engine uses for problems in the notation itself
SYNTAX_ERROR_MARKERS = (
    "Syntax error",
    "Parse error",
    "Lexical error",
    "Invalid",
    "Expected",
    "Expecting",
    "Unexpected token",
    "not defined",
    "missing",
)

LINE_NUMBER_RE = re.compile(r"\bline (\d+)", re.IGNORECASE)


class RenderEngineError(Exception):
    """The rendering engine rejected the notation or could not be reached."""

    def __init__(self, message: str, syntax_error: Optional[bool] = None):
        super().__init__(message)
        self.message = message
        self.syntax_error = syntax_error


def is_syntax_error(message) -> bool:
    if not message:
        return False
    return any(marker in message for marker in SYNTAX_ERROR_MARKERS)


def extract_error_line(message) -> Optional[int]:
    match = LINE_NUMBER_RE.search(message or "")
    return int(match.group(1)) if match else None


def describe_render_error(exc: BaseException) -> str:
    message = getattr(exc, "message", None) or str(exc)
    return message.strip() or "Unexpected render failure"
