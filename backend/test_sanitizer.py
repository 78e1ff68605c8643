"""Tests for SVG sanitizing and fallback artwork."""

import xml.etree.ElementTree as ET

import pytest

from diagram_pipeline.renderer.fallback import PlaceholderState, fallback_svg
from diagram_pipeline.renderer.sanitizer import (
    ErrorDiagramError,
    InvalidSvgError,
    is_error_node,
    sanitize_svg,
)

SVG_NS = "http://www.w3.org/2000/svg"

DIRTY_SVG = (
    f'<svg xmlns="{SVG_NS}" id="diagram-1" viewBox="0 0 120 80" onload="alert(1)">'
    '<g class="node"><rect width="10" height="10"/><text>Orders</text></g>'
    '<g class="error-icon"><path d="M0 0"/></g>'
    '<text class="error-text">Syntax error in text</text>'
    '<g class="root-error-wrapper"><rect/></g>'
    '<path class="marker cross" d="M1 1"/>'
    '<rect id="mermaid-error-box"/>'
    '<script>alert(1)</script>'
    "</svg>"
)


def element(tag, **attrs):
    return ET.Element(f"{{{SVG_NS}}}{tag}", {k.replace("_", "-"): v for k, v in attrs.items()})


def test_error_nodes_scripts_and_handlers_are_removed():
    cleaned = sanitize_svg(DIRTY_SVG)

    assert "Orders" in cleaned
    for fragment in ("error-icon", "Syntax error", "root-error-wrapper", "marker cross", "mermaid-error-box", "<script", "onload"):
        assert fragment not in cleaned


def test_missing_dimensions_come_from_viewbox():
    cleaned = sanitize_svg(DIRTY_SVG)

    assert 'width="120"' in cleaned
    assert 'height="80"' in cleaned
    assert 'preserveAspectRatio="xMidYMid meet"' in cleaned


def test_missing_dimensions_without_viewbox_use_defaults():
    cleaned = sanitize_svg(f'<svg xmlns="{SVG_NS}"><rect/></svg>')

    assert 'width="800"' in cleaned
    assert 'height="600"' in cleaned


def test_existing_dimensions_are_kept():
    cleaned = sanitize_svg(f'<svg xmlns="{SVG_NS}" width="100%" height="42" viewBox="0 0 10 10"></svg>')

    assert 'width="100%"' in cleaned
    assert 'height="42"' in cleaned


def test_error_diagram_root_is_rejected():
    markup = f'<svg xmlns="{SVG_NS}" aria-roledescription="error"><g class="error-icon"/></svg>'
    with pytest.raises(ErrorDiagramError):
        sanitize_svg(markup)


@pytest.mark.parametrize("markup", ["", "Parse error on line 1", "<html></html>", None])
def test_non_svg_markup_is_rejected(markup):
    with pytest.raises(InvalidSvgError):
        sanitize_svg(markup)


def test_malformed_svg_is_recovered_and_cleaned():
    markup = (
        f'<svg xmlns="{SVG_NS}" viewBox="0 0 10 10">'
        '<g class="error-icon"><path d="M0 0"/></g>'
        '<text class="error-text">Syntax error in text</text>'
        "<script>alert(1)</script>"
        "<foreignObject><div>a<br>b</div></foreignObject>"
        "</svg>"
    )

    cleaned = sanitize_svg(markup)

    assert cleaned.startswith("<svg")
    assert "error-icon" not in cleaned
    assert "Syntax error in text" not in cleaned
    assert "<script" not in cleaned
    assert "alert(1)" not in cleaned
    assert "foreignObject" in cleaned
    assert 'viewBox="0 0 10 10"' in cleaned


def test_unclosed_group_is_recovered():
    cleaned = sanitize_svg("<svg><g></svg>")

    assert cleaned.startswith("<svg")
    assert 'width="800"' in cleaned


def test_malformed_markup_without_svg_root_is_rejected():
    with pytest.raises(InvalidSvgError):
        sanitize_svg("<div><p>oops</div><svg></svg>")


@pytest.mark.parametrize(
    "node, expected",
    [
        (element("g", **{"class": "error"}), True),
        (element("text", **{"class": "label error-message"}), True),
        (element("g", **{"class": "diagramError"}), True),
        (element("g", **{"class": "someErrorThing"}), True),
        (element("rect", id="node-error-1"), True),
        (element("svg", aria_roledescription="syntax-error"), True),
        (element("path", **{"class": "marker cross"}), True),
        (element("path", **{"class": "marker"}), False),
        (element("rect", **{"class": "terror-zone"}), False),
        (element("g", **{"class": "node"}), False),
    ],
)
def test_is_error_node(node, expected):
    assert is_error_node(node) is expected


@pytest.mark.parametrize("state", list(PlaceholderState))
def test_fallback_art_has_no_text(state):
    svg = fallback_svg(state)
    root = ET.fromstring(svg)

    assert root.tag == f"{{{SVG_NS}}}svg"
    assert root.get("data-placeholder") == state.value
    assert "<text" not in svg
    assert len(list(root)) >= 2


def test_fallback_art_accepts_plain_strings_and_unknown_states():
    assert fallback_svg("loading") == fallback_svg(PlaceholderState.LOADING)
    assert fallback_svg("bogus") == fallback_svg(PlaceholderState.ERROR)
