# backend/diagram_pipeline/compiler/render_architecture.py

from typing import Dict, List

from diagram_pipeline.ir.architecture import ArchitectureDocument, Junction, LineKind

DEFAULT_INDENT = "    "


def _declaration_indent(document: ArchitectureDocument) -> str:
    for line in document.lines:
        if line.kind == LineKind.SERVICE:
            return line.indent
    return DEFAULT_INDENT


def render_architecture(document: ArchitectureDocument, routes, junctions: List[Junction]) -> str:
    changed: Dict[int, list] = {
        route.original.line_index: route.segments
        for route in routes
        if route.changed and route.original.line_index is not None
    }

    indent = _declaration_indent(document)
    declarations = [f"{indent}{junction.declaration()}" for junction in junctions]

    lines: List[str] = []

    # -------------------------
    # No opening line: junctions go first
    # -------------------------
    if document.opening_index is None:
        lines.extend(declarations)

    for line in document.lines:
        segments = changed.get(line.index)
        if line.kind == LineKind.CONNECTION and segments:
            lines.extend(f"{line.indent}{segment.render()}" for segment in segments)
        else:
            lines.append(line.text)

        if line.index == document.opening_index:
            lines.extend(declarations)

    return "\n".join(lines)
