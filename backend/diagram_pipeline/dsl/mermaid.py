"""
Notation preprocessor.

Best-effort text-to-text normalizer that fixes the mistakes language models
most often make in Mermaid notation before anything else looks at it.
Every rule is a targeted patch; text that matches no rule passes through.
The output is a fixed point: preprocessing it again changes nothing.
"""

import logging
import re
from typing import List, Optional

from diagram_pipeline.config import DEFAULT_FLOW_DIRECTION
from diagram_pipeline.dsl.families import (
    ARCHITECTURE_KEYWORD,
    canonical_keyword,
    detect_family,
    opening_line,
    starts_with_family_keyword,
)
from diagram_pipeline.ir.diagram import DiagramFamily, resolve_family

logger = logging.getLogger(__name__)

FENCE_RE = re.compile(r"```[ \t]*(?:mermaid)?", re.IGNORECASE)
FLOW_HEADER_RE = re.compile(r"^(\s*)(flowchart|graph)(\s*;?.*)$", re.IGNORECASE)
FLOW_DIRECTION_RE = re.compile(r"^\s+(TD|TB|BT|RL|LR)\b", re.IGNORECASE)

CLASSDEF_END_RE = re.compile(r"^(\s*classDef\s+)end(?=\s|;|$)", re.MULTILINE)
CLASS_ASSIGN_END_RE = re.compile(r"^(\s*class\s+\S+\s+)end(\s*;?\s*)$", re.MULTILINE)
SHORTHAND_END_RE = re.compile(r":::end(?!\w)(?!-\w)")
STYLE_DECL_RE = re.compile(r"^\s*(classDef|style)\s+\S+\s+\S")

# Families whose grammar has classDef; None covers undetected fragments
END_CLASS_FAMILIES = {None, DiagramFamily.FLOWCHART, DiagramFamily.STATE, DiagramFamily.CLASS}

GANTT_DATE_FORMAT_RE = re.compile(r"^\s*dateFormat\b", re.MULTILINE)
GANTT_SECTION_RE = re.compile(r"^\s*section\b", re.MULTILINE)

# Bare opening keywords the renderer only accepts in their full form
KEYWORD_UPGRADES = {
    DiagramFamily.ARCHITECTURE: ("architecture", ARCHITECTURE_KEYWORD),
    DiagramFamily.SANKEY: ("sankey", "sankey-beta"),
}


def _strip_fences(code: str) -> str:
    code = FENCE_RE.sub("", code).strip()

    # A fence label written on its own line leaves a bare "mermaid" behind
    lines = code.split("\n")
    while lines and lines[0].strip().lower() in ("mermaid", ""):
        lines.pop(0)
    return "\n".join(lines).strip()


def _effective_family(code: str, family: Optional[DiagramFamily]) -> Optional[DiagramFamily]:
    return family or detect_family(code)


def _upgrade_opening_keyword(code: str, bare: str, keyword: str) -> str:
    index, line = opening_line(code)
    if index is None:
        return code
    parts = line.split(None, 1)
    if parts and parts[0].lower() == bare:
        lines = code.split("\n")
        rest = f" {parts[1]}" if len(parts) > 1 else ""
        lines[index] = f"{keyword}{rest}"
        return "\n".join(lines)
    return code


def _ensure_family_keyword(code: str, family: DiagramFamily) -> str:
    if starts_with_family_keyword(code, family):
        return code
    keyword = canonical_keyword(family)
    logger.debug("[PREPROCESS] Prepending missing keyword '%s'", keyword)
    return f"{keyword}\n{code}"


def _ensure_flow_direction(code: str) -> str:
    index, _ = opening_line(code)
    if index is None:
        return code

    lines = code.split("\n")
    match = FLOW_HEADER_RE.match(lines[index])
    if not match:
        return code

    indent, keyword, rest = match.groups()
    if FLOW_DIRECTION_RE.match(rest):
        return code
    # "flowchart-elk" and friends are a different keyword, leave them alone
    if rest and not (rest[0].isspace() or rest[0] == ";"):
        return code
    if rest.strip() and not rest.strip().startswith(";"):
        return code

    lines[index] = f"{indent}{keyword} {DEFAULT_FLOW_DIRECTION}{rest.strip()}"
    return "\n".join(lines)


def _rename_end_class(code: str) -> str:
    code = CLASSDEF_END_RE.sub(r"\1endClass", code)
    code = CLASS_ASSIGN_END_RE.sub(r"\1endClass\2", code)
    return SHORTHAND_END_RE.sub(":::endClass", code)


def _terminate_style_lines(code: str) -> str:
    lines: List[str] = []
    for line in code.split("\n"):
        stripped = line.rstrip()
        if STYLE_DECL_RE.match(stripped) and not stripped.endswith(";"):
            line = f"{stripped};"
        lines.append(line)
    return "\n".join(lines)


def _sanitize_gantt(code: str) -> str:
    if not GANTT_DATE_FORMAT_RE.search(code):
        index, _ = opening_line(code)
        lines = code.split("\n")
        insert_at = 0 if index is None else index + 1
        lines.insert(insert_at, "    dateFormat YYYY-MM-DD")
        code = "\n".join(lines)
    if not GANTT_SECTION_RE.search(code):
        code = f"{code}\n    section Tasks"
    return code


def preprocess_notation(code, family=None) -> str:
    """
    Normalize raw notation for the given (optional) family.

    NEVER throws. Non-string input yields an empty string; on an unexpected
    internal error the input is returned unchanged.
    """
    if not isinstance(code, str):
        return ""
    if not code.strip():
        return ""

    try:
        declared = resolve_family(family)

        processed = code.replace("\r\n", "\n").replace("\r", "\n").strip()
        processed = _strip_fences(processed)
        if not processed:
            return ""

        detected = detect_family(processed)
        for upgraded, (bare, keyword) in KEYWORD_UPGRADES.items():
            if upgraded in (declared, detected):
                processed = _upgrade_opening_keyword(processed, bare, keyword)

        if declared is not None:
            processed = _ensure_family_keyword(processed, declared)

        effective = _effective_family(processed, declared)

        if effective in END_CLASS_FAMILIES:
            processed = _rename_end_class(processed)

        if effective == DiagramFamily.FLOWCHART:
            processed = _ensure_flow_direction(processed)
            processed = _terminate_style_lines(processed)

        if effective == DiagramFamily.GANTT:
            processed = _sanitize_gantt(processed)

        return processed.strip()
    except Exception:
        logger.exception("[PREPROCESS] Normalization failed, passing input through")
        return code
