"""
Notation Validator - Decides whether diagram notation is acceptable to render.

Checks, in order (the first error wins):
- Input is a non-empty string
- Brackets are balanced: {} () []
- The opening line carries a recognized diagram keyword
- Architecture diagrams open with architecture-beta and declare a service
- The grammar engine accepts the text (only when one is available)
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from diagram_pipeline.dsl.architecture_parser import analyze_architecture
from diagram_pipeline.dsl.families import (
    ARCHITECTURE_KEYWORD,
    FAMILY_KEYWORDS,
    RECOGNIZED_OPENING_KEYWORDS,
    first_token,
)
from diagram_pipeline.dsl.mermaid import preprocess_notation
from diagram_pipeline.ir.diagram import DiagramFamily, resolve_family
from diagram_pipeline.ir.validation import ValidationResult
from diagram_pipeline.validation.grammar import GrammarError, GrammarParser, get_grammar_parser

logger = logging.getLogger(__name__)


class ValidationSeverity(Enum):
    ERROR = "error"      # Diagram will not render
    WARNING = "warning"  # Diagram renders but looks wrong
    INFO = "info"


@dataclass
class ValidationIssue:
    """A single problem found in the notation"""
    severity: ValidationSeverity
    code: str           # Machine-readable issue code
    message: str        # User-facing description
    node_id: Optional[str] = None
    suggestion: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "node_id": self.node_id,
            "suggestion": self.suggestion,
        }


@dataclass
class ValidationReport:
    issues: List[ValidationIssue] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return self.first_error is None

    @property
    def first_error(self) -> Optional[ValidationIssue]:
        return next((i for i in self.issues if i.severity == ValidationSeverity.ERROR), None)

    @property
    def error_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == ValidationSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == ValidationSeverity.WARNING)

    def to_result(self) -> ValidationResult:
        error = self.first_error
        if error is None:
            return ValidationResult.success()
        return ValidationResult.failure(error.message)

    def to_dict(self) -> dict:
        return {
            **self.to_result().to_dict(),
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "issues": [i.to_dict() for i in self.issues],
            "stats": self.stats,
        }

    def get_summary(self) -> str:
        status = "Valid" if self.is_valid else "Invalid"
        return f"{status} | Errors: {self.error_count}, Warnings: {self.warning_count}"


def _error(code: str, message: str, suggestion: Optional[str] = None) -> ValidationIssue:
    return ValidationIssue(
        severity=ValidationSeverity.ERROR,
        code=code,
        message=message,
        suggestion=suggestion,
    )


class NotationValidator:
    """
    Validates diagram notation before it reaches the rendering engine.

    Usage:
        validator = NotationValidator()
        result = validator.validate(code, "architecture")

        if not result.valid:
            print(result.message)
    """

    BALANCE_PAIRS = (
        ("{", "}", "UNBALANCED_CURLY", "Unbalanced curly braces {} in diagram code"),
        ("(", ")", "UNBALANCED_PARENS", "Unbalanced parentheses () in diagram code"),
        ("[", "]", "UNBALANCED_SQUARE", "Unbalanced square brackets [] in diagram code"),
    )

    def __init__(
        self,
        grammar_parser: Optional[GrammarParser] = None,
        use_grammar: bool = True,
        preprocess: bool = True,
    ):
        if grammar_parser is None and use_grammar:
            grammar_parser = get_grammar_parser()
        self.grammar_parser = grammar_parser
        self.preprocess = preprocess

    def _inspect(self, code, family=None) -> ValidationReport:
        report = ValidationReport()

        if not isinstance(code, str):
            report.issues.append(_error("INVALID_INPUT", "Invalid diagram code"))
            return report
        if not code.strip():
            report.issues.append(_error("EMPTY_DIAGRAM", "Diagram code cannot be empty"))
            return report

        declared = resolve_family(family)
        text = preprocess_notation(code, declared) if self.preprocess else code
        report.stats = {"lines": len(text.split("\n")), "characters": len(text)}

        for check in (self._check_balance, self._check_opening_keyword):
            issues = check(text, declared)
            report.issues.extend(issues)
            if report.first_error:
                return report

        if self._is_architecture(text, declared):
            report.issues.extend(self._check_architecture(text, report.stats))
            if report.first_error:
                return report

        report.issues.extend(self._check_grammar(text))
        return report

    def inspect(self, code, family=None) -> ValidationReport:
        """Run every check and return the full report. NEVER throws."""
        try:
            return self._inspect(code, family)
        except Exception:
            logger.exception("[VALIDATOR] Unexpected failure")
            return ValidationReport(issues=[_error("INTERNAL_ERROR", "Invalid diagram code")])

    def validate(self, code, family=None) -> ValidationResult:
        result = self.inspect(code, family).to_result()
        if not result.valid:
            logger.info("[VALIDATOR] Rejected: %s", result.message)
        return result

    # ------------------------------------------------------------------

    def _check_balance(self, text: str, declared) -> List[ValidationIssue]:
        for opening, closing, code, message in self.BALANCE_PAIRS:
            if text.count(opening) != text.count(closing):
                return [_error(code, message, suggestion=f"Match every '{opening}' with a '{closing}'")]
        return []

    def _check_opening_keyword(self, text: str, declared) -> List[ValidationIssue]:
        token = first_token(text)
        lowered = token.lower()
        if any(keyword.lower() in lowered for keyword in RECOGNIZED_OPENING_KEYWORDS):
            return []

        expected = FAMILY_KEYWORDS[declared][0] if declared else "flowchart"
        return [
            _error(
                "MISSING_DIAGRAM_TYPE",
                f"Diagram must start with a valid type like '{expected}'. Found: '{token}'",
                suggestion=f"Start the diagram with '{expected}'",
            )
        ]

    @staticmethod
    def _is_architecture(text: str, declared) -> bool:
        return declared == DiagramFamily.ARCHITECTURE or first_token(text).lower().startswith("architecture")

    def _check_architecture(self, text: str, stats: Dict[str, int]) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []

        if first_token(text) != ARCHITECTURE_KEYWORD:
            issues.append(
                _error(
                    "ARCHITECTURE_KEYWORD",
                    "Architecture diagram must start with 'architecture-beta'",
                )
            )
            return issues

        document = analyze_architecture(text)
        stats["services"] = len(document.services)
        stats["connections"] = len(document.connections)

        if not document.services:
            issues.append(
                _error(
                    "NO_SERVICES",
                    "Architecture diagram must declare at least one service",
                    suggestion="Add a line like 'service api(server)[API]'",
                )
            )
            return issues

        for connection in document.connections:
            if connection.is_same_side:
                logger.info(
                    "[VALIDATOR] Same-side connection %s may overlap labels",
                    connection.render(),
                )
                issues.append(
                    ValidationIssue(
                        severity=ValidationSeverity.WARNING,
                        code="SAME_SIDE_CONNECTION",
                        message=f"Connection '{connection.render()}' leaves and enters on the same side",
                        node_id=connection.from_id,
                        suggestion="Run the connection optimizer before rendering",
                    )
                )
        return issues

    def _check_grammar(self, text: str) -> List[ValidationIssue]:
        if self.grammar_parser is None:
            return []
        try:
            self.grammar_parser.parse(text)
        except GrammarError as exc:
            return [_error("GRAMMAR", exc.message)]
        return []


def validate_notation(code, family=None, grammar_parser: Optional[GrammarParser] = None) -> ValidationResult:
    """Convenience function to validate notation for a family."""
    validator = NotationValidator(grammar_parser=grammar_parser)
    return validator.validate(code, family)


def inspect_notation(code, family=None) -> ValidationReport:
    """Full report for the notation, with warnings and stats."""
    return NotationValidator().inspect(code, family)
