"""
Placeholder artwork shown while a diagram is loading or after it failed.

The artwork never contains text: the failure message travels next to it as
metadata so the engine's wording is never drawn on the canvas.
"""

from enum import Enum


class PlaceholderState(str, Enum):
    LOADING = "loading"
    PROCESSING = "processing"
    ERROR = "error"
    SYNTAX_ERROR = "syntax_error"


# background, border, accent
_PALETTE = {
    PlaceholderState.LOADING: ("#F9FAFB", "#E5E7EB", "#9CA3AF"),
    PlaceholderState.PROCESSING: ("#EFF6FF", "#BFDBFE", "#3B82F6"),
    PlaceholderState.ERROR: ("#FEF2F2", "#FECACA", "#EF4444"),
    PlaceholderState.SYNTAX_ERROR: ("#FFFBEB", "#FDE68A", "#F59E0B"),
}


def _shapes(state: PlaceholderState, accent: str) -> str:
    if state == PlaceholderState.LOADING:
        return "".join(
            f'<circle cx="{x}" cy="150" r="10" fill="{accent}" opacity="{o}"/>'
            for x, o in ((370, "0.4"), (400, "0.7"), (430, "1"))
        )
    if state == PlaceholderState.PROCESSING:
        return (
            f'<circle cx="400" cy="150" r="36" fill="none" stroke="{accent}" stroke-width="6" '
            f'stroke-dasharray="170 60" stroke-linecap="round"/>'
        )
    if state == PlaceholderState.SYNTAX_ERROR:
        return (
            f'<path d="M400 105 L445 185 L355 185 Z" fill="none" stroke="{accent}" '
            f'stroke-width="6" stroke-linejoin="round"/>'
            f'<rect x="397" y="130" width="6" height="30" rx="3" fill="{accent}"/>'
            f'<circle cx="400" cy="172" r="4" fill="{accent}"/>'
        )
    return (
        f'<circle cx="400" cy="150" r="40" fill="none" stroke="{accent}" stroke-width="6"/>'
        f'<path d="M385 135 L415 165 M415 135 L385 165" stroke="{accent}" '
        f'stroke-width="6" stroke-linecap="round"/>'
    )


def fallback_svg(state=PlaceholderState.ERROR) -> str:
    """Text-free placeholder SVG for the given state (unknown states draw the error art)."""
    try:
        state = PlaceholderState(state)
    except ValueError:
        state = PlaceholderState.ERROR

    background, border, accent = _PALETTE[state]
    return (
        '<svg xmlns="http://www.w3.org/2000/svg" width="100%" height="300" '
        'viewBox="0 0 800 300" preserveAspectRatio="xMidYMid meet" '
        f'data-placeholder="{state.value}">'
        f'<rect x="4" y="4" width="792" height="292" rx="12" ry="12" '
        f'fill="{background}" stroke="{border}" stroke-width="2"/>'
        f"{_shapes(state, accent)}"
        "</svg>"
    )
