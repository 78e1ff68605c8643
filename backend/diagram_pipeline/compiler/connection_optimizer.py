"""
Connection optimizer for architecture diagrams.

Connector lines that leave and enter nodes on the same side (T-T, B-B, L-L,
R-R), or run bottom-to-top, tend to cut through neighbouring labels. This
module rewrites those endpoints and, for complex diagrams, routes conflicting
connections through synthetic junction nodes.

The graph model is built first (dsl.architecture_parser), routes are planned
over the model, and text is only produced at the end
(compiler.render_architecture).
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, List, Optional, Set, Tuple

from diagram_pipeline.compiler.render_architecture import render_architecture
from diagram_pipeline.config import COMPLEX_CONNECTION_THRESHOLD, HUB_DEGREE_THRESHOLD
from diagram_pipeline.dsl.architecture_parser import analyze_architecture
from diagram_pipeline.ir.architecture import (
    ArchitectureDocument,
    Connection,
    Junction,
    Side,
)

logger = logging.getLogger(__name__)


@dataclass
class GraphComplexity:
    degrees: Dict[str, int] = field(default_factory=dict)
    hubs: List[str] = field(default_factory=list)
    crossing_pairs: List[Tuple[int, int]] = field(default_factory=list)
    is_complex: bool = False


@dataclass
class ConnectionRoute:
    """How one source connection is emitted: itself, rewritten, or split."""
    original: Connection
    segments: List[Connection]
    junction: Optional[Junction] = None

    @property
    def changed(self) -> bool:
        if self.junction is not None:
            return True
        only = self.segments[0]
        return (only.from_side, only.to_side) != (self.original.from_side, self.original.to_side)


@dataclass
class OptimizationResult:
    text: str
    complex: bool = False
    junctions: List[Junction] = field(default_factory=list)
    rewritten: int = 0


# ============================================================
# CLASSIFICATION
# ============================================================

def simple_rewrite(connection: Connection) -> Connection:
    """
    Direct endpoint rewrite for overlap-prone connections:
      T-T / B-B -> L-R
      L-L / R-R -> T-B
      B-T       -> R-L
    Anything else is returned as is. The connector kind is preserved.
    """
    if connection.is_same_side:
        if connection.from_side in (Side.TOP, Side.BOTTOM):
            return connection.with_sides(Side.LEFT, Side.RIGHT)
        return connection.with_sides(Side.TOP, Side.BOTTOM)
    if connection.is_bottom_to_top:
        return connection.with_sides(Side.RIGHT, Side.LEFT)
    return connection


def is_crossing_pair(a: Connection, b: Connection) -> bool:
    return a.from_side == b.from_side.opposite and a.to_side == b.to_side.opposite


def assess_complexity(
    connections: List[Connection],
    hub_threshold: int = HUB_DEGREE_THRESHOLD,
    connection_threshold: int = COMPLEX_CONNECTION_THRESHOLD,
) -> GraphComplexity:
    degrees: Dict[str, int] = defaultdict(int)
    for connection in connections:
        degrees[connection.from_id] += 1
        degrees[connection.to_id] += 1

    hubs = [node for node, degree in degrees.items() if degree > hub_threshold]

    crossing_pairs = [
        (i, j)
        for (i, a), (j, b) in combinations(enumerate(connections), 2)
        if is_crossing_pair(a, b)
    ]

    is_complex = bool(hubs or crossing_pairs) and len(connections) > connection_threshold

    return GraphComplexity(
        degrees=dict(degrees),
        hubs=hubs,
        crossing_pairs=crossing_pairs,
        is_complex=is_complex,
    )


def shared_attachment_points(connections: List[Connection]) -> Set[int]:
    """Indices of connections attached to a (node, side) that another connection also uses."""
    users: Dict[Tuple[str, Side], List[int]] = defaultdict(list)
    for index, connection in enumerate(connections):
        users[(connection.from_id, connection.from_side)].append(index)
        users[(connection.to_id, connection.to_side)].append(index)

    colliding: Set[int] = set()
    for indices in users.values():
        if len(set(indices)) > 1:
            colliding.update(indices)
    return colliding


# ============================================================
# ROUTING
# ============================================================

class JunctionAllocator:
    """Hands out junction_1, junction_2, ... skipping ids already in use."""

    def __init__(self, taken: Set[str], group_id: Optional[str]):
        self.taken = set(taken)
        self.group_id = group_id
        self.counter = 0
        self.allocated: List[Junction] = []

    def allocate(self) -> Junction:
        self.counter += 1
        while f"junction_{self.counter}" in self.taken:
            self.counter += 1
        junction = Junction(id=f"junction_{self.counter}", group_id=self.group_id, synthetic=True)
        self.taken.add(junction.id)
        self.allocated.append(junction)
        return junction


def split_through_junction(connection: Connection, junction: Junction) -> List[Connection]:
    return [
        Connection(
            from_id=connection.from_id,
            from_side=connection.from_side,
            to_id=junction.id,
            to_side=Side.LEFT,
            connector=connection.connector,
            line_index=connection.line_index,
        ),
        Connection(
            from_id=junction.id,
            from_side=Side.RIGHT,
            to_id=connection.to_id,
            to_side=connection.to_side,
            connector=connection.connector,
            line_index=connection.line_index,
        ),
    ]


def _junction_group(document: ArchitectureDocument) -> Optional[str]:
    for service in document.services:
        if service.group_id:
            return service.group_id
    return None


def plan_routes(
    document: ArchitectureDocument,
    complexity: GraphComplexity,
) -> Tuple[List[ConnectionRoute], List[Junction]]:
    connections = document.connections

    if not complexity.is_complex:
        routes = [ConnectionRoute(original=c, segments=[simple_rewrite(c)]) for c in connections]
        return routes, []

    conflicting: Set[int] = shared_attachment_points(connections)
    for i, j in complexity.crossing_pairs:
        conflicting.update((i, j))

    allocator = JunctionAllocator(document.node_ids(), _junction_group(document))
    routes: List[ConnectionRoute] = []

    for index, connection in enumerate(connections):
        # Same-side rewrite takes precedence over junction routing
        if connection.is_same_side:
            routes.append(ConnectionRoute(original=connection, segments=[simple_rewrite(connection)]))
        elif index in conflicting:
            junction = allocator.allocate()
            routes.append(
                ConnectionRoute(
                    original=connection,
                    segments=split_through_junction(connection, junction),
                    junction=junction,
                )
            )
        else:
            routes.append(ConnectionRoute(original=connection, segments=[simple_rewrite(connection)]))

    return routes, allocator.allocated


# ============================================================
# ENTRY POINT
# ============================================================

def optimize_document(document: ArchitectureDocument) -> OptimizationResult:
    complexity = assess_complexity(document.connections)
    routes, junctions = plan_routes(document, complexity)

    logger.info(
        "[OPTIMIZER] %s path: %d connections, hubs=%s, crossing pairs=%d, junctions=%d",
        "complex" if complexity.is_complex else "simple",
        len(document.connections),
        complexity.hubs,
        len(complexity.crossing_pairs),
        len(junctions),
    )

    return OptimizationResult(
        text=render_architecture(document, routes, junctions),
        complex=complexity.is_complex,
        junctions=junctions,
        rewritten=sum(1 for route in routes if route.changed),
    )


def optimize_connections(code) -> OptimizationResult:
    """
    Rewrite architecture connections to avoid line/label overlap.

    Accepts notation text or an already analyzed ArchitectureDocument.
    NEVER throws: on any internal failure the input text is returned unchanged.
    """
    if isinstance(code, ArchitectureDocument):
        document, text = code, "\n".join(line.text for line in code.lines)
    elif isinstance(code, str):
        document, text = None, code
    else:
        return OptimizationResult(text="")

    try:
        if document is None:
            document = analyze_architecture(text)
        return optimize_document(document)
    except Exception:
        logger.exception("[OPTIMIZER] Optimization failed, passing input through")
        return OptimizationResult(text=text)
