"""Tests for the shared document and the error-node janitor."""

import asyncio
import xml.etree.ElementTree as ET

from diagram_pipeline.renderer.document import SharedDocument
from diagram_pipeline.renderer.janitor import ErrorNodeJanitor

SVG_NS = "http://www.w3.org/2000/svg"

DIAGRAM = (
    f'<svg xmlns="{SVG_NS}" id="diagram-1-abcdef12" viewBox="0 0 10 10">'
    '<g class="node"/><g class="error"><text class="error-text">Syntax error</text></g>'
    "</svg>"
)


def make_view():
    document = SharedDocument()
    view = document.create_view("preview")
    view.mount(DIAGRAM)
    return document, view


def classes_in(element):
    return [e.get("class") for e in element.iter() if e.get("class")]


def test_remove_is_idempotent():
    document = SharedDocument()
    node = document.append(document.root, ET.Element("div"))

    assert document.remove(node) is True
    assert document.remove(node) is False
    assert not document.contains(node)


def test_subscribers_see_mutations_until_unsubscribed():
    document = SharedDocument()
    seen = []
    unsubscribe = document.subscribe(lambda record: seen.append(record.kind))

    node = document.append(document.root, ET.Element("div"))
    document.remove(node)
    unsubscribe()
    document.append(document.root, ET.Element("div"))

    assert seen == ["added", "removed"]


def test_start_sweeps_immediately():
    document, view = make_view()
    debris = document.append(view.container, ET.Element("div", {"id": "dmermaid-1"}))
    stray = document.append(document.root, ET.Element("div", {"id": "dmermaid-error-7"}))
    keep = document.append(document.root, ET.Element("div", {"class": "toolbar"}))

    janitor = ErrorNodeJanitor(view, clean_document=True).start()
    try:
        assert janitor.removed == 3
        assert classes_in(view.container) == ["mermaid", "node"]
        assert not document.contains(debris)
        assert not document.contains(stray)
        assert document.contains(keep)
    finally:
        janitor.stop()


def test_document_outside_view_is_left_alone_when_disabled():
    document, view = make_view()
    stray = document.append(document.root, ET.Element("div", {"class": "error"}))

    janitor = ErrorNodeJanitor(view, clean_document=False).start()
    janitor.stop()

    assert document.contains(stray)


def test_new_error_nodes_are_removed_on_mutation():
    document, view = make_view()
    janitor = ErrorNodeJanitor(view).start()

    injected = document.append(document.root, ET.Element("div", {"class": "error-message"}))
    assert not document.contains(injected)

    janitor.stop()
    late = document.append(document.root, ET.Element("div", {"class": "error-message"}))
    assert document.contains(late)


def test_polling_catches_unobserved_writes():
    document, view = make_view()

    async def scenario():
        async with ErrorNodeJanitor(view, interval=0.01, max_sweeps=20) as janitor:
            # written straight into the tree, so no mutation is reported
            view.children[0].append(ET.Element(f"{{{SVG_NS}}}g", {"class": "error-icon"}))
            await asyncio.sleep(0.1)
        return janitor

    janitor = asyncio.run(scenario())

    assert "error-icon" not in classes_in(view.container)
    assert janitor.sweeps >= 2
    assert not janitor.running


def test_polling_stops_after_max_sweeps():
    _, view = make_view()

    async def scenario():
        janitor = ErrorNodeJanitor(view, interval=0.001, max_sweeps=3)
        janitor.start()
        await asyncio.sleep(0.1)
        janitor.stop()
        await janitor.wait_stopped()
        return janitor

    assert asyncio.run(scenario()).sweeps == 3


def test_janitor_keeps_the_mounted_diagram():
    document, view = make_view()
    janitor = ErrorNodeJanitor(view).start()

    view.mount(DIAGRAM.replace("diagram-1-abcdef12", "diagram-2-abcdef12"))
    janitor.stop()

    assert [child.get("id") for child in view.children] == ["diagram-2-abcdef12"]
    assert "error" not in classes_in(view.container)
