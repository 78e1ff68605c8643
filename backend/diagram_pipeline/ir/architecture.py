from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class Side(str, Enum):
    TOP = "T"
    BOTTOM = "B"
    LEFT = "L"
    RIGHT = "R"

    @property
    def opposite(self) -> "Side":
        return _OPPOSITES[self]


_OPPOSITES = {
    Side.TOP: Side.BOTTOM,
    Side.BOTTOM: Side.TOP,
    Side.LEFT: Side.RIGHT,
    Side.RIGHT: Side.LEFT,
}


class ConnectorKind(str, Enum):
    PLAIN = "--"
    ARROW = "-->"
    DASHED_ARROW = "-.->"

    @property
    def token(self) -> str:
        return self.value


class LineKind(str, Enum):
    OPENING = "opening"
    GROUP = "group"
    SERVICE = "service"
    JUNCTION = "junction"
    CONNECTION = "connection"
    PASSTHROUGH = "passthrough"


@dataclass
class GroupNode:
    id: str
    parent_id: Optional[str] = None
    icon: Optional[str] = None
    label: Optional[str] = None


@dataclass
class ServiceNode:
    id: str
    group_id: Optional[str] = None
    icon: Optional[str] = None
    label: Optional[str] = None


@dataclass
class Junction:
    id: str
    group_id: Optional[str] = None
    synthetic: bool = False

    def declaration(self) -> str:
        if self.group_id:
            return f"junction {self.id} in {self.group_id}"
        return f"junction {self.id}"


@dataclass
class Connection:
    from_id: str
    from_side: Side
    to_id: str
    to_side: Side
    connector: ConnectorKind = ConnectorKind.PLAIN
    line_index: Optional[int] = None

    @property
    def is_same_side(self) -> bool:
        return self.from_side == self.to_side

    @property
    def is_bottom_to_top(self) -> bool:
        return self.from_side == Side.BOTTOM and self.to_side == Side.TOP

    @property
    def is_overlap_prone(self) -> bool:
        return self.is_same_side or self.is_bottom_to_top

    def with_sides(self, from_side: Side, to_side: Side) -> "Connection":
        return Connection(
            from_id=self.from_id,
            from_side=from_side,
            to_id=self.to_id,
            to_side=to_side,
            connector=self.connector,
            line_index=self.line_index,
        )

    def render(self) -> str:
        return (
            f"{self.from_id}:{self.from_side.value} {self.connector.token} "
            f"{self.to_side.value}:{self.to_id}"
        )


@dataclass
class SourceLine:
    """A line of the original text, kept verbatim for re-emission."""
    index: int
    text: str
    kind: LineKind = LineKind.PASSTHROUGH

    @property
    def indent(self) -> str:
        return self.text[: len(self.text) - len(self.text.lstrip())]


@dataclass
class ArchitectureDocument:
    lines: List[SourceLine] = field(default_factory=list)
    groups: List[GroupNode] = field(default_factory=list)
    services: List[ServiceNode] = field(default_factory=list)
    junctions: List[Junction] = field(default_factory=list)
    connections: List[Connection] = field(default_factory=list)
    opening_index: Optional[int] = None

    @property
    def service_ids(self) -> List[str]:
        return [s.id for s in self.services]

    def node_ids(self) -> set:
        ids = {s.id for s in self.services}
        ids.update(g.id for g in self.groups)
        ids.update(j.id for j in self.junctions)
        return ids

    def connections_by_line(self) -> Dict[int, Connection]:
        return {c.line_index: c for c in self.connections if c.line_index is not None}
