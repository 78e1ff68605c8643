"""
SVG sanitizing.

The rendering engine sometimes draws its own error artwork (a bomb icon and
"Syntax error in text") into an otherwise valid SVG. Those nodes are removed
before the markup is shown, together with scripts and inline event handlers.
"""

import logging
import re
import xml.etree.ElementTree as ET
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
ET.register_namespace("", SVG_NS)
ET.register_namespace("xlink", "http://www.w3.org/1999/xlink")
ET.register_namespace("xhtml", "http://www.w3.org/1999/xhtml")

ERROR_CLASSES = frozenset(
    {
        "error",
        "error-icon",
        "error-text",
        "error-message",
        "mermaid-error",
        "diagramError",
        "diagram-error",
        "syntax-error",
    }
)
ERROR_ROLE_DESCRIPTIONS = frozenset({"error", "syntax-error"})

DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 600


class InvalidSvgError(ValueError):
    """Markup is not an SVG document."""


class ErrorDiagramError(ValueError):
    """The whole SVG is the engine's error artwork."""


def local_name(tag) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _classes(element: ET.Element) -> List[str]:
    return (element.get("class") or "").split()


def is_error_node(element: ET.Element) -> bool:
    """True when the element is error artwork injected by the engine."""
    classes = _classes(element)
    if ERROR_CLASSES.intersection(classes):
        return True
    if "marker" in classes and "cross" in classes:
        return True
    if local_name(element.tag) == "g" and "error" in (element.get("class") or "").lower():
        return True
    if "error" in (element.get("id") or "").lower():
        return True
    return (element.get("aria-roledescription") or "").lower() in ERROR_ROLE_DESCRIPTIONS


def is_document_error_node(element: ET.Element) -> bool:
    """Narrower match used outside the diagram container."""
    classes = _classes(element)
    if ERROR_CLASSES.intersection(classes):
        return True
    if "mermaid-error" in (element.get("id") or ""):
        return True
    return (element.get("aria-roledescription") or "").lower() in ERROR_ROLE_DESCRIPTIONS


def find_matching(root: ET.Element, predicate, include_root: bool = False) -> List[Tuple[ET.Element, ET.Element]]:
    """(parent, child) pairs below root whose child matches; matches are not descended into."""
    found: List[Tuple[ET.Element, ET.Element]] = []

    def _walk(node: ET.Element) -> None:
        for child in list(node):
            if child.tag is ET.Comment:
                continue
            if predicate(child):
                found.append((node, child))
            else:
                _walk(child)

    _walk(root)
    return found


def strip_error_nodes(root: ET.Element) -> int:
    removed = 0
    for parent, child in find_matching(root, is_error_node):
        parent.remove(child)
        removed += 1
    return removed


def strip_active_content(root: ET.Element) -> int:
    removed = 0
    for parent, child in find_matching(root, lambda e: local_name(e.tag) == "script"):
        parent.remove(child)
        removed += 1
    for element in root.iter():
        for name in [a for a in element.attrib if a.lower().startswith("on")]:
            del element.attrib[name]
            removed += 1
    return removed


def _viewbox_size(root: ET.Element) -> Tuple[Optional[float], Optional[float]]:
    parts = re.split(r"[\s,]+", (root.get("viewBox") or "").strip())
    if len(parts) != 4:
        return None, None
    try:
        width, height = float(parts[2]), float(parts[3])
    except ValueError:
        return None, None
    return (width or None), (height or None)


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def ensure_svg_dimensions(root: ET.Element) -> ET.Element:
    """Fill width/height from the viewBox (or 800x600) and add preserveAspectRatio."""
    vb_width, vb_height = _viewbox_size(root)
    if not root.get("width"):
        root.set("width", _format_number(vb_width or DEFAULT_WIDTH))
    if not root.get("height"):
        root.set("height", _format_number(vb_height or DEFAULT_HEIGHT))
    if not root.get("preserveAspectRatio"):
        root.set("preserveAspectRatio", "xMidYMid meet")
    return root


def looks_like_svg(markup) -> bool:
    return isinstance(markup, str) and "<svg" in markup and "</svg>" in markup


def parse_svg(markup: str) -> ET.Element:
    if not looks_like_svg(markup):
        raise InvalidSvgError("Rendering engine did not return SVG markup")
    root = ET.fromstring(markup.strip())
    if local_name(root.tag) != "svg":
        raise InvalidSvgError("Rendering engine did not return SVG markup")
    return root


def serialize_svg(root: ET.Element) -> str:
    return ET.tostring(root, encoding="unicode")


def repair_svg(markup: str) -> ET.Element:
    """
    Re-read malformed SVG with a recovering XML parser.

    Engines emit HTML inside foreignObject (an unclosed <br> is enough to
    break strict XML). Raises InvalidSvgError when no SVG root survives.
    """
    soup = BeautifulSoup(markup, "xml")
    root = soup.find(True)
    if root is None or root.name != "svg":
        raise InvalidSvgError("Rendering engine returned malformed SVG markup")
    try:
        return ET.fromstring(str(root))
    except ET.ParseError as exc:
        raise InvalidSvgError(f"Rendering engine returned malformed SVG markup: {exc}") from None


def sanitize_svg(markup: str) -> str:
    """
    Clean engine output for display.

    Raises InvalidSvgError when the markup is not SVG (or cannot be recovered)
    and ErrorDiagramError when the root itself is error artwork.
    """
    try:
        root = parse_svg(markup)
    except ET.ParseError as exc:
        logger.warning("[RENDER] SVG is not well-formed (%s), re-reading with recovery", exc)
        root = repair_svg(markup)

    if is_error_node(root):
        raise ErrorDiagramError("Rendering engine produced an error diagram")

    removed = strip_error_nodes(root)
    removed += strip_active_content(root)
    if removed:
        logger.debug("[RENDER] Removed %d error/script nodes from SVG", removed)

    ensure_svg_dimensions(root)
    return serialize_svg(root)
