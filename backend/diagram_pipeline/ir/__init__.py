from diagram_pipeline.ir.diagram import DiagramFamily, DiagramSource, resolve_family
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
from diagram_pipeline.ir.validation import ValidationResult

__all__ = [
    "ArchitectureDocument",
    "Connection",
    "ConnectorKind",
    "DiagramFamily",
    "DiagramSource",
    "GroupNode",
    "Junction",
    "LineKind",
    "ServiceNode",
    "Side",
    "SourceLine",
    "ValidationResult",
    "resolve_family",
]
