"""Tests for the architecture structural analyzer."""

from diagram_pipeline.dsl.architecture_parser import analyze_architecture, parse_connection
from diagram_pipeline.ir.architecture import ConnectorKind, LineKind, Side

SAMPLE = """architecture-beta
    group cloud(cloud)[Cloud Platform]
    group data(database)[Data Tier] in cloud

    service api(internet)[API Gateway] in cloud
    service worker(server)[Worker (batch)] in cloud
    service db(database)[Orders DB] in data
    service cdn(logos:cloudflare)[CDN]
    junction hub in cloud

    api:R --> L:worker
    worker:B -.-> T:db
    cdn:B--T:api
    %% a comment
    this line means nothing"""


def test_groups_services_and_junctions_are_registered():
    document = analyze_architecture(SAMPLE)

    assert [g.id for g in document.groups] == ["cloud", "data"]
    assert document.groups[1].parent_id == "cloud"
    assert document.groups[0].label == "Cloud Platform"

    assert document.service_ids == ["api", "worker", "db", "cdn"]
    assert document.services[1].label == "Worker (batch)"
    assert document.services[2].group_id == "data"
    assert document.services[3].group_id is None
    assert document.services[3].icon == "logos:cloudflare"

    assert [j.id for j in document.junctions] == ["hub"]
    assert not document.junctions[0].synthetic


def test_connections_keep_connector_kind_and_line():
    document = analyze_architecture(SAMPLE)
    first, second, third = document.connections

    assert (first.from_id, first.from_side, first.to_side, first.to_id) == ("api", Side.RIGHT, Side.LEFT, "worker")
    assert first.connector == ConnectorKind.ARROW
    assert second.connector == ConnectorKind.DASHED_ARROW
    assert third.connector == ConnectorKind.PLAIN
    assert third.is_bottom_to_top
    assert document.lines[third.line_index].text.strip() == "cdn:B--T:api"


def test_every_line_is_retained_in_order():
    document = analyze_architecture(SAMPLE)

    assert [line.text for line in document.lines] == SAMPLE.split("\n")
    assert document.opening_index == 0
    assert document.lines[-1].kind == LineKind.PASSTHROUGH
    assert document.lines[-2].kind == LineKind.PASSTHROUGH


def test_duplicate_service_keeps_first_declaration():
    document = analyze_architecture(
        "architecture-beta\n"
        "service api(server)[First]\n"
        "service api(cloud)[Second]"
    )

    assert len(document.services) == 1
    assert document.services[0].label == "First"
    assert document.lines[2].kind == LineKind.SERVICE


def test_parse_connection_variants():
    lowercase = parse_connection("a:r -- l:b")
    assert (lowercase.from_side, lowercase.to_side) == (Side.RIGHT, Side.LEFT)

    grouped = parse_connection("a{group}:B --> T:b{group};", 4)
    assert grouped.from_id == "a{group}"
    assert grouped.to_id == "b{group}"
    assert grouped.line_index == 4

    assert parse_connection("service a(server)[A]") is None
    assert parse_connection("a:X -- L:b") is None
    assert parse_connection("A --> B") is None


def test_connection_render_round_trips_through_parser():
    connection = parse_connection("svcA:T -.-> T:svcB")
    assert connection.render() == "svcA:T -.-> T:svcB"


def test_non_string_input_yields_empty_document():
    document = analyze_architecture(None)
    assert document.lines == []
    assert document.opening_index is None
