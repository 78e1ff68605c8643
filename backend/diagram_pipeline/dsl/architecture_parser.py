"""
Structural analyzer for architecture-beta notation.

Scans the text line by line and builds an ArchitectureDocument: groups,
services, authored junctions and connections, plus every original line for
verbatim re-emission. Nothing is validated here; a line that matches no
pattern is kept as passthrough text.
"""

import logging
import re

from diagram_pipeline.ir.architecture import (
    ArchitectureDocument,
    Connection,
    ConnectorKind,
    GroupNode,
    Junction,
    LineKind,
    ServiceNode,
    Side,
    SourceLine,
)

logger = logging.getLogger(__name__)

_ID = r"[\w-]+"

GROUP_RE = re.compile(
    rf"^\s*group\s+(?P<id>{_ID})"
    r"(?:\((?P<icon>[^)]*)\))?"
    r"(?:\[(?P<label>[^\]]*)\])?"
    rf"(?:\s+in\s+(?P<parent>{_ID}))?\s*$"
)

SERVICE_RE = re.compile(
    rf"^\s*service\s+(?P<id>{_ID})"
    r"(?:\((?P<icon>[^)]*)\))?"
    r"(?:\[(?P<label>[^\]]*)\])?"
    rf"(?:\s+in\s+(?P<group>{_ID}))?\s*$"
)

JUNCTION_RE = re.compile(
    rf"^\s*junction\s+(?P<id>{_ID})(?:\s+in\s+(?P<group>{_ID}))?\s*$"
)

CONNECTION_RE = re.compile(
    rf"^\s*(?P<from>{_ID}(?:\{{group\}})?):(?P<from_side>[TBLRtblr])"
    r"\s*(?P<connector>-\.->|-->|--)\s*"
    rf"(?P<to_side>[TBLRtblr]):(?P<to>{_ID}(?:\{{group\}})?)\s*;?\s*$"
)

OPENING_RE = re.compile(r"^\s*architecture(?:-beta)?\b", re.IGNORECASE)

_CONNECTORS = {kind.token: kind for kind in ConnectorKind}


def parse_connection(line: str, index=None):
    """Parse one connection statement, or return None."""
    match = CONNECTION_RE.match(line)
    if not match:
        return None
    return Connection(
        from_id=match.group("from"),
        from_side=Side(match.group("from_side").upper()),
        to_id=match.group("to"),
        to_side=Side(match.group("to_side").upper()),
        connector=_CONNECTORS[match.group("connector")],
        line_index=index,
    )


def analyze_architecture(code) -> ArchitectureDocument:
    """Build the structural model of an architecture diagram."""
    document = ArchitectureDocument()
    if not isinstance(code, str):
        return document

    seen_services = set()

    for index, text in enumerate(code.split("\n")):
        line = SourceLine(index=index, text=text)
        document.lines.append(line)

        if document.opening_index is None and OPENING_RE.match(text):
            line.kind = LineKind.OPENING
            document.opening_index = index
            continue

        match = SERVICE_RE.match(text)
        if match:
            line.kind = LineKind.SERVICE
            service_id = match.group("id")
            if service_id in seen_services:
                logger.debug("[ANALYZER] Duplicate service '%s' on line %d", service_id, index + 1)
                continue
            seen_services.add(service_id)
            document.services.append(
                ServiceNode(
                    id=service_id,
                    group_id=match.group("group"),
                    icon=match.group("icon"),
                    label=match.group("label"),
                )
            )
            continue

        match = GROUP_RE.match(text)
        if match:
            line.kind = LineKind.GROUP
            document.groups.append(
                GroupNode(
                    id=match.group("id"),
                    parent_id=match.group("parent"),
                    icon=match.group("icon"),
                    label=match.group("label"),
                )
            )
            continue

        match = JUNCTION_RE.match(text)
        if match:
            line.kind = LineKind.JUNCTION
            document.junctions.append(
                Junction(id=match.group("id"), group_id=match.group("group"))
            )
            continue

        connection = parse_connection(text, index)
        if connection:
            line.kind = LineKind.CONNECTION
            document.connections.append(connection)

    logger.debug(
        "[ANALYZER] %d services, %d groups, %d connections, %d passthrough lines",
        len(document.services),
        len(document.groups),
        len(document.connections),
        sum(1 for l in document.lines if l.kind == LineKind.PASSTHROUGH),
    )
    return document
