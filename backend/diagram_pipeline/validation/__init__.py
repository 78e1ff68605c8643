"""
Validation module for diagram notation.
"""

from diagram_pipeline.validation.grammar import (
    GrammarError,
    GrammarParser,
    MermaidCliParser,
    get_grammar_parser,
    translate_grammar_error,
)
from diagram_pipeline.validation.notation_validator import (
    NotationValidator,
    ValidationIssue,
    ValidationReport,
    ValidationSeverity,
    inspect_notation,
    validate_notation,
)

__all__ = [
    "GrammarError",
    "GrammarParser",
    "MermaidCliParser",
    "NotationValidator",
    "ValidationIssue",
    "ValidationReport",
    "ValidationSeverity",
    "get_grammar_parser",
    "inspect_notation",
    "translate_grammar_error",
    "validate_notation",
]
