from diagram_pipeline.dsl.architecture_parser import analyze_architecture, parse_connection
from diagram_pipeline.dsl.families import (
    detect_family,
    extract_notation,
    new_diagram_template,
)
from diagram_pipeline.dsl.mermaid import preprocess_notation

__all__ = [
    "analyze_architecture",
    "detect_family",
    "extract_notation",
    "new_diagram_template",
    "parse_connection",
    "preprocess_notation",
]
