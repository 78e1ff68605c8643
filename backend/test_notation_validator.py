"""Tests for the notation validator and grammar error translation."""

import pytest

from diagram_pipeline.validation.grammar import GrammarError, GrammarParser, translate_grammar_error
from diagram_pipeline.validation.notation_validator import (
    NotationValidator,
    ValidationSeverity,
    validate_notation,
)


def make_validator(**kwargs) -> NotationValidator:
    kwargs.setdefault("use_grammar", False)
    return NotationValidator(**kwargs)


class RejectingParser(GrammarParser):
    def __init__(self, message):
        self.message = message
        self.calls = []

    def parse(self, text):
        self.calls.append(text)
        raise GrammarError(self.message)


def test_flowchart_with_alias_family_is_valid():
    result = make_validator().validate("graph LR\nA-->B", "flow")

    assert result.valid is True
    assert result.message is None
    assert result.to_dict() == {"valid": True, "message": None}


def test_unbalanced_curly_braces():
    code = "classDiagram\nclass A {\n}\nclass B {\n}\nclass C {"
    result = make_validator().validate(code, "class")

    assert not result.valid
    assert result.message == "Unbalanced curly braces {} in diagram code"


@pytest.mark.parametrize(
    "code, message",
    [
        ("graph TD\nA(Start --> B", "Unbalanced parentheses () in diagram code"),
        ("graph TD\nA[Start --> B", "Unbalanced square brackets [] in diagram code"),
        ("sequenceDiagram\nA->>B: {oops", "Unbalanced curly braces {} in diagram code"),
        ("architecture-beta\nservice a(server[A]", "Unbalanced parentheses () in diagram code"),
    ],
)
def test_unbalanced_brackets_are_rejected_for_every_family(code, message):
    assert make_validator().validate(code).message == message


def test_balance_is_checked_before_the_keyword():
    result = make_validator().validate("hello {")
    assert result.message == "Unbalanced curly braces {} in diagram code"


@pytest.mark.parametrize("value, message", [(None, "Invalid diagram code"), (12, "Invalid diagram code"), ("  ", "Diagram code cannot be empty")])
def test_missing_input(value, message):
    assert make_validator().validate(value).message == message


def test_unknown_opening_keyword():
    result = make_validator().validate("hello world")
    assert result.message == "Diagram must start with a valid type like 'flowchart'. Found: 'hello'"


def test_unknown_opening_keyword_names_declared_family():
    result = make_validator(preprocess=False).validate("hello", "sequence")
    assert result.message == "Diagram must start with a valid type like 'sequenceDiagram'. Found: 'hello'"


def test_declared_family_keyword_is_added_before_checking():
    assert make_validator().validate("A->>B: hi", "sequence").valid


def test_architecture_must_open_with_architecture_beta():
    result = make_validator(preprocess=False).validate("flowchart TD\nA-->B", "architecture")
    assert result.message == "Architecture diagram must start with 'architecture-beta'"


def test_architecture_needs_a_service():
    result = make_validator().validate("architecture-beta\n    group g(cloud)[G]", "architecture")
    assert result.message == "Architecture diagram must declare at least one service"


def test_same_side_connection_is_only_a_warning():
    code = "architecture-beta\nservice a(server)[A]\nservice b(server)[B]\na:T -- T:b"
    report = make_validator().inspect(code, "architecture")

    assert report.is_valid
    assert report.warning_count == 1
    assert report.issues[0].severity == ValidationSeverity.WARNING
    assert report.issues[0].code == "SAME_SIDE_CONNECTION"
    assert report.stats["services"] == 2


def test_grammar_errors_are_translated():
    parser = RejectingParser(translate_grammar_error("Error: Parse error on line 3:\n...A-->\n----^\nExpecting 'AMP', got 'EOF'"))
    result = make_validator(grammar_parser=parser).validate("graph TD\nA-->")

    assert result.message.startswith("Error on line 3: ")
    assert "Expecting 'AMP', got 'EOF'" in result.message
    assert parser.calls == ["graph TD\nA-->"]


def test_grammar_is_not_consulted_after_a_structural_error():
    parser = RejectingParser("should not be used")
    make_validator(grammar_parser=parser).validate("graph TD\nA[-->B")
    assert parser.calls == []


def test_translate_grammar_error_passes_other_messages_through():
    assert translate_grammar_error("  Lexical error somewhere  ") == "Lexical error somewhere"
    assert translate_grammar_error("") == "Invalid syntax in diagram code"


def test_translate_grammar_error_truncates_long_details():
    message = translate_grammar_error("Parse error on line 1: " + "x" * 500)
    assert message.endswith("...")
    assert len(message) < 280


def test_validation_does_not_mutate_and_is_idempotent():
    code = "flowchart\nA-->B\nclassDef end fill:#f00"
    validator = make_validator()

    first = validator.validate(code, "flowchart")
    second = validator.validate(code, "flowchart")

    assert first == second
    assert code == "flowchart\nA-->B\nclassDef end fill:#f00"


def test_validate_notation_never_throws(monkeypatch):
    def explode(self, code, family=None):
        raise RuntimeError("boom")

    monkeypatch.setattr(NotationValidator, "_inspect", explode)
    assert validate_notation("graph TD\nA-->B").message == "Invalid diagram code"


class CrashingParser(GrammarParser):
    def parse(self, text):
        raise OSError("mmdc vanished")


def test_inspect_never_throws_when_the_grammar_engine_crashes():
    validator = make_validator(grammar_parser=CrashingParser())

    report = validator.inspect("graph TD\nA-->B")

    assert not report.is_valid
    assert report.first_error.code == "INTERNAL_ERROR"
    assert report.first_error.message == "Invalid diagram code"
    assert validator.validate("graph TD\nA-->B").message == "Invalid diagram code"


def test_report_summary():
    report = make_validator().inspect("graph TD\nA{-->B")
    assert report.get_summary() == "Invalid | Errors: 1, Warnings: 0"
    assert report.to_dict()["valid"] is False


def test_bare_sankey_keyword_is_accepted_after_preprocessing():
    assert make_validator().validate("sankey\nA,B,10").valid
    assert make_validator().validate("sankey\nA,B,10", "sankey").valid
