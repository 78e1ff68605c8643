"""Tests for the HTTP surface."""

import pytest
from fastapi.testclient import TestClient

from diagram_pipeline.api import routes
from diagram_pipeline.main import app
from diagram_pipeline.renderer.controller import RenderController
from diagram_pipeline.renderer.engine import RenderEngine
from diagram_pipeline.validation import notation_validator
from diagram_pipeline.validation.grammar import GrammarParser

SVG = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 40 20"><g class="node"/></svg>'


class StaticEngine(RenderEngine):
    name = "static"

    async def render(self, render_id, text):
        return SVG


class FailingEngine(RenderEngine):
    name = "failing"

    async def render(self, render_id, text):
        raise Exception("boom")


@pytest.fixture
def client():
    return TestClient(app)


def use_engine(monkeypatch, engine):
    monkeypatch.setattr(routes.controller, "render_controller", RenderController(engine=engine))


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_prepare_optimizes_architecture(client):
    response = client.post(
        "/diagrams/prepare",
        json={
            "code": "```mermaid\narchitecture-beta\n service a(server)[A]\n service b(server)[B]\n a:T -- T:b\n```",
            "family": "architecture",
        },
    )
    body = response.json()

    assert response.status_code == 200
    assert "a:L -- R:b" in body["code"]
    assert body["family"] == "architecture"
    assert body["rewritten"] == 1
    assert body["validation"]["valid"] is True


def test_validate_endpoint(client):
    ok = client.post("/diagrams/validate", json={"code": "graph LR\nA-->B", "family": "flow"}).json()
    assert ok["valid"] is True
    assert ok["message"] is None

    bad = client.post("/diagrams/validate", json={"code": "graph LR\nA-->B{"}).json()
    assert bad["valid"] is False
    assert bad["message"] == "Unbalanced curly braces {} in diagram code"
    assert bad["issues"][0]["code"] == "UNBALANCED_CURLY"


def test_validate_endpoint_survives_a_crashing_grammar_engine(client, monkeypatch):
    class CrashingParser(GrammarParser):
        def parse(self, text):
            raise UnicodeEncodeError("utf-8", text, 0, 1, "surrogates not allowed")

    monkeypatch.setattr(notation_validator, "get_grammar_parser", lambda: CrashingParser())
    response = client.post("/diagrams/validate", json={"code": "graph LR\nA-->B"})

    assert response.status_code == 200
    assert response.json()["valid"] is False
    assert response.json()["message"] == "Invalid diagram code"


def test_render_success(client, monkeypatch):
    use_engine(monkeypatch, StaticEngine())
    body = client.post("/diagrams/render", json={"code": "graph TD\nA-->B"}).json()

    assert body["ok"] is True
    assert body["render_id"].startswith("diagram-")
    assert 'width="40"' in body["svg"]


def test_render_failure_returns_fallback(client, monkeypatch):
    use_engine(monkeypatch, FailingEngine())
    body = client.post("/diagrams/render", json={"code": "graph TD\nA-->B"}).json()

    assert body["ok"] is False
    assert body["message"] == "boom"
    assert body["fallback_svg"].startswith("<svg")
    assert "<text" not in body["fallback_svg"]


def test_fallback_endpoint(client):
    response = client.get("/diagrams/fallback/loading")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("image/svg+xml")
    assert 'data-placeholder="loading"' in response.text

    assert client.get("/diagrams/fallback/bogus").status_code == 422


def test_template_endpoint(client):
    body = client.get("/diagrams/templates/erd").json()
    assert body["family"] == "er"
    assert body["code"].startswith("erDiagram")

    assert client.get("/diagrams/templates/nope").status_code == 404


def test_detect_family_endpoint(client):
    text = "Here you go:\n```mermaid\nsequenceDiagram\nA->>B: hi\n```"
    body = client.post("/diagrams/detect-family", json={"text": text}).json()

    assert body == {"family": "sequence", "code": "sequenceDiagram\nA->>B: hi"}
    assert client.post("/diagrams/detect-family", json={"text": "no diagram"}).status_code == 400
