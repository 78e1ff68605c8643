"""
Static knowledge about diagram families: opening keywords, detection and
starter templates.
"""

import logging
import os
import re
from typing import Dict, Optional, Tuple

import yaml

from diagram_pipeline.config import DEFAULT_FLOW_DIRECTION
from diagram_pipeline.ir.diagram import DiagramFamily, resolve_family

logger = logging.getLogger(__name__)


# Opening keywords accepted for each family. The first entry is canonical.
FAMILY_KEYWORDS: Dict[DiagramFamily, Tuple[str, ...]] = {
    DiagramFamily.FLOWCHART: ("flowchart", "graph"),
    DiagramFamily.SEQUENCE: ("sequenceDiagram",),
    DiagramFamily.CLASS: ("classDiagram",),
    DiagramFamily.STATE: ("stateDiagram-v2", "stateDiagram"),
    DiagramFamily.ER: ("erDiagram",),
    DiagramFamily.GANTT: ("gantt",),
    DiagramFamily.PIE: ("pie",),
    DiagramFamily.MINDMAP: ("mindmap",),
    DiagramFamily.TIMELINE: ("timeline",),
    DiagramFamily.SANKEY: ("sankey-beta", "sankey"),
    DiagramFamily.GIT: ("gitGraph",),
    DiagramFamily.JOURNEY: ("journey",),
    DiagramFamily.ARCHITECTURE: ("architecture-beta",),
}

# Keywords the validator accepts as the first token of any diagram
RECOGNIZED_OPENING_KEYWORDS = (
    "graph",
    "flowchart",
    "sequenceDiagram",
    "classDiagram",
    "stateDiagram",
    "erDiagram",
    "journey",
    "gantt",
    "pie",
    "gitGraph",
    "mindmap",
    "timeline",
    "C4Context",
    "sankey-beta",
    "architecture-beta",
)

ARCHITECTURE_KEYWORD = "architecture-beta"

FENCED_BLOCK_RE = re.compile(r"```(?:mermaid)?\s*([\s\S]*?)```", re.IGNORECASE)


def canonical_keyword(family: DiagramFamily) -> str:
    """Keyword line prepended when a declared family has no opening keyword."""
    if family == DiagramFamily.FLOWCHART:
        return f"flowchart {DEFAULT_FLOW_DIRECTION}"
    return FAMILY_KEYWORDS[family][0]


def opening_line(text: str) -> Tuple[Optional[int], str]:
    """
    Return (index, stripped line) of the line that must carry the diagram
    keyword. Blank lines, ``%%`` comments and a leading ``---`` front-matter
    block are skipped. Returns (None, "") when there is no such line.
    """
    lines = text.split("\n")
    in_front_matter = False
    seen_content = False
    for index, raw in enumerate(lines):
        line = raw.strip()
        if in_front_matter:
            if line == "---":
                in_front_matter = False
            continue
        if not line or line.startswith("%%"):
            continue
        if line == "---" and not seen_content:
            in_front_matter = True
            seen_content = True
            continue
        return index, line
    return None, ""


def first_token(text: str) -> str:
    _, line = opening_line(text)
    parts = line.split()
    return parts[0] if parts else ""


def starts_with_family_keyword(text: str, family: DiagramFamily) -> bool:
    token = first_token(text).lower()
    if not token:
        return False
    return any(token.startswith(kw.lower()) for kw in FAMILY_KEYWORDS[family])


def detect_family(text) -> Optional[DiagramFamily]:
    """Infer the family from the opening keyword, or None."""
    if not isinstance(text, str):
        return None
    token = first_token(text).lower()
    if not token:
        return None
    if token.startswith("architecture"):
        return DiagramFamily.ARCHITECTURE
    for family, keywords in FAMILY_KEYWORDS.items():
        if any(token.startswith(kw.lower()) for kw in keywords):
            return family
    return None


_EXTRACTION_PATTERNS = {
    DiagramFamily.FLOWCHART: re.compile(r"(?:graph|flowchart)\s+(?:TB|BT|RL|LR|TD)", re.IGNORECASE),
    DiagramFamily.SEQUENCE: re.compile(r"sequenceDiagram", re.IGNORECASE),
    DiagramFamily.CLASS: re.compile(r"classDiagram", re.IGNORECASE),
    DiagramFamily.STATE: re.compile(r"stateDiagram(?:-v2)?", re.IGNORECASE),
    DiagramFamily.ER: re.compile(r"erDiagram", re.IGNORECASE),
    DiagramFamily.GANTT: re.compile(r"^\s*gantt\b", re.IGNORECASE),
    DiagramFamily.PIE: re.compile(r"^\s*pie\b", re.IGNORECASE),
    DiagramFamily.TIMELINE: re.compile(r"^\s*timeline\b", re.IGNORECASE),
    DiagramFamily.MINDMAP: re.compile(r"^\s*mindmap\b", re.IGNORECASE),
    DiagramFamily.JOURNEY: re.compile(r"^\s*journey\b", re.IGNORECASE),
    DiagramFamily.ARCHITECTURE: re.compile(r"^\s*architecture(?:-beta)?\b", re.IGNORECASE),
}


def extract_notation(text, family=None) -> str:
    """
    Pull the diagram out of surrounding prose.

    A fenced block wins; otherwise the text from the first line carrying the
    family keyword; otherwise the text unchanged.
    """
    if not isinstance(text, str):
        return ""

    match = FENCED_BLOCK_RE.search(text)
    if match and match.group(1).strip():
        return match.group(1).strip()

    resolved = resolve_family(family)
    pattern = _EXTRACTION_PATTERNS.get(resolved) if resolved else None
    if pattern:
        lines = text.split("\n")
        for index, line in enumerate(lines):
            if pattern.search(line):
                return "\n".join(lines[index:])

    return text


TEMPLATES_PATH = os.path.join(os.path.dirname(__file__), "templates.yml")

_templates_cache: Dict[DiagramFamily, str] = {}


def load_templates(path: str = TEMPLATES_PATH) -> Dict[DiagramFamily, str]:
    """Read the starter templates file. Unknown family keys are skipped."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    templates: Dict[DiagramFamily, str] = {}
    for key, code in (data.get("templates") or {}).items():
        family = resolve_family(key)
        if family is None:
            logger.warning("[FAMILIES] Ignoring template for unknown family '%s'", key)
            continue
        templates[family] = str(code).strip()
    return templates


def new_diagram_template(family=None) -> str:
    """Starter notation for a new diagram; flowchart when the family is unknown."""
    if not _templates_cache:
        _templates_cache.update(load_templates())
    resolved = resolve_family(family) or DiagramFamily.FLOWCHART
    return _templates_cache.get(resolved) or _templates_cache[DiagramFamily.FLOWCHART]
