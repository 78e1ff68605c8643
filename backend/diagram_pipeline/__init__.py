"""
Diagram notation preparation and recovery pipeline.

Takes untrusted Mermaid-style notation, usually written by a language model,
and makes it renderable: normalize, analyze, untangle architecture
connections, validate, render, and fall back to placeholder art on failure.
"""

from diagram_pipeline.compiler.connection_optimizer import OptimizationResult, optimize_connections
from diagram_pipeline.dsl.architecture_parser import analyze_architecture
from diagram_pipeline.dsl.families import detect_family, extract_notation, new_diagram_template
from diagram_pipeline.dsl.mermaid import preprocess_notation
from diagram_pipeline.ir.diagram import DiagramFamily, resolve_family
from diagram_pipeline.ir.validation import ValidationResult
from diagram_pipeline.pipeline.controller import PipelineController
from diagram_pipeline.renderer.controller import RenderController, RenderFailure, RenderSuccess
from diagram_pipeline.renderer.document import DiagramView, SharedDocument
from diagram_pipeline.renderer.fallback import PlaceholderState, fallback_svg
from diagram_pipeline.renderer.janitor import ErrorNodeJanitor
from diagram_pipeline.validation.notation_validator import validate_notation

__all__ = [
    "DiagramFamily",
    "DiagramView",
    "ErrorNodeJanitor",
    "OptimizationResult",
    "PipelineController",
    "PlaceholderState",
    "RenderController",
    "RenderFailure",
    "RenderSuccess",
    "SharedDocument",
    "ValidationResult",
    "analyze_architecture",
    "detect_family",
    "extract_notation",
    "fallback_svg",
    "new_diagram_template",
    "optimize_connections",
    "preprocess_notation",
    "resolve_family",
    "validate_notation",
]
