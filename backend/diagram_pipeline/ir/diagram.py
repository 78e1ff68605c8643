from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DiagramFamily(str, Enum):
    FLOWCHART = "flowchart"
    SEQUENCE = "sequence"
    CLASS = "class"
    STATE = "state"
    ER = "er"
    GANTT = "gantt"
    PIE = "pie"
    MINDMAP = "mindmap"
    TIMELINE = "timeline"
    SANKEY = "sankey"
    GIT = "git"
    JOURNEY = "journey"
    ARCHITECTURE = "architecture"


# Tokens callers send that are not the canonical family value
FAMILY_ALIASES = {
    "flow": DiagramFamily.FLOWCHART,
    "graph": DiagramFamily.FLOWCHART,
    "erd": DiagramFamily.ER,
    "entity-relation": DiagramFamily.ER,
    "entity_relation": DiagramFamily.ER,
    "gitgraph": DiagramFamily.GIT,
    "architecture-beta": DiagramFamily.ARCHITECTURE,
}


def resolve_family(token) -> Optional[DiagramFamily]:
    """
    Map a caller-supplied family token onto DiagramFamily.

    Accepts enum members, canonical values and aliases (case-insensitive).
    Anything else means "no declared family".
    """
    if token is None:
        return None
    if isinstance(token, DiagramFamily):
        return token
    if not isinstance(token, str):
        return None

    key = token.strip().lower()
    if not key:
        return None
    if key in FAMILY_ALIASES:
        return FAMILY_ALIASES[key]
    try:
        return DiagramFamily(key)
    except ValueError:
        return None


@dataclass(frozen=True)
class DiagramSource:
    """One edit/generation event: the notation text plus its declared family."""
    text: str
    family: Optional[DiagramFamily] = None

    @classmethod
    def from_raw(cls, text, family=None) -> "DiagramSource":
        return cls(
            text=text if isinstance(text, str) else "",
            family=resolve_family(family),
        )
