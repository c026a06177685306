from structlog.testing import capture_logs

from access_audit.audits.normalizer import DEFAULT_DESCRIPTION, ResultNormalizer
from access_audit.collectors.scanner import RawScanResult
from access_audit.models import Category

from conftest import axe_payload, rule


def _normalize(payload, url="https://example.com/"):
    return ResultNormalizer().normalize(RawScanResult(url=url, payload=payload))


def test_buckets_are_mapped_onto_report_categories():
    report = _normalize(axe_payload())
    assert [item.id for item in report.violations] == ["image-alt", "color-contrast"]
    assert len(report.passes) == 3
    assert [item.id for item in report.incomplete] == ["frame-tested"]
    assert [item.id for item in report.inapplicable] == ["video-caption"]
    assert report.url == "https://example.com/"
    assert report.engine.name == "axe-core"
    assert report.engine.version == "4.8.2"


def test_tests_run_concatenates_every_bucket():
    report = _normalize(axe_payload())
    assert [item.id for item in report.tests_run] == [
        "html-has-lang",
        "document-title",
        "button-name",
        "image-alt",
        "color-contrast",
        "video-caption",
        "frame-tested",
    ]
    assert all(item.impact is None and not item.nodes for item in report.tests_run)
    assert report.tests_run[0].help == "html-has-lang help"


def test_missing_impact_and_description_get_defaults():
    payload = {"passes": [{"id": "region", "tags": ["cat.keyboard"]}]}
    item = _normalize(payload).passes[0]
    assert item.impact == "N/A"
    assert item.description == DEFAULT_DESCRIPTION
    assert item.nodes == ()


def test_unknown_impact_becomes_not_applicable():
    item = _normalize({"violations": [rule("label", impact="catastrophic")]}).violations[0]
    assert item.impact == "N/A"


def test_engine_internal_fields_are_stripped():
    raw = rule("label", any=[{"id": "aria-label"}], all=[], none=[])
    item = _normalize({"violations": [raw]}).violations[0]
    assert set(item.to_dict()) == {"id", "impact", "description", "help", "helpUrl", "tags", "nodes"}


def test_nodes_keep_html_and_target_path():
    nodes = [{"html": "<a href='#'></a>", "target": [["iframe", "a.link"]], "failureSummary": "Fix this"}]
    item = _normalize({"violations": [rule("link-name", nodes=nodes)]}).violations[0]
    assert item.nodes[0].html == "<a href='#'></a>"
    assert item.nodes[0].target == ("iframe >>> a.link",)
    assert item.nodes[0].failure_summary == "Fix this"


def test_item_without_id_is_dropped_and_logged():
    payload = axe_payload()
    payload["violations"].append({"impact": "serious", "description": "no id here", "tags": []})
    payload["passes"].append({"id": "   ", "tags": []})

    with capture_logs() as logs:
        report = _normalize(payload)

    assert report.total_items == _normalize(axe_payload()).total_items
    assert report.dropped == 2
    assert all(item.id for category in Category for item in report.items(category))
    dropped_events = [entry for entry in logs if entry["event"] == "dropped result item"]
    assert len(dropped_events) == 2
    assert {entry["bucket"] for entry in dropped_events} == {"violations", "passes"}
    assert all(entry["log_level"] == "warning" for entry in dropped_events)


def test_non_object_items_and_buckets_are_quarantined():
    payload = {"violations": ["image-alt", None], "passes": "not-a-list"}
    report = _normalize(payload)
    assert report.total_items == 0
    assert report.dropped == 3


def test_missing_buckets_yield_empty_collections():
    report = _normalize({})
    assert report.counts() == {category: 0 for category in Category}
    assert report.engine is None


def test_non_list_tags_drop_only_that_item():
    payload = {"violations": [{"id": "image-alt", "tags": 5}, {"id": "label", "tags": ["wcag2a"]}]}

    with capture_logs() as logs:
        report = _normalize(payload)

    assert [item.id for item in report.violations] == ["label"]
    assert report.dropped == 1
    dropped_events = [entry for entry in logs if entry["event"] == "dropped result item"]
    assert [entry["rule_id"] for entry in dropped_events] == ["image-alt"]


def test_single_string_tag_is_kept_whole():
    item = _normalize({"violations": [{"id": "label", "tags": "wcag2a"}]}).violations[0]
    assert item.tags == ("wcag2a",)


def test_non_string_text_fields_are_coerced_not_dropped():
    payload = {"violations": [{"id": "label", "impact": 3, "description": 42, "helpUrl": ["x"], "tags": []}]}
    report = _normalize(payload)

    item = report.violations[0]
    assert report.dropped == 0
    assert item.impact == "N/A"
    assert item.description == "42"
    assert item.help_url is None
