import httpx
import pytest

from access_audit.client.api import AuditClient, AuditRequestFailed
from access_audit.models import Category

from conftest import rule


def _client(handler):
    return AuditClient("http://service.test/", transport=httpx.MockTransport(handler))


def test_audit_posts_url_and_parses_report():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = request.content
        return httpx.Response(
            200,
            json={
                "violations": [rule("image-alt", impact="critical")],
                "passes": [],
                "incomplete": [],
                "inapplicable": [],
                "testsRun": [{"id": "image-alt", "impact": None, "description": "d", "tags": [], "nodes": []}],
                "url": "https://example.com/",
                "engine": {"name": "axe-core", "version": "4.8.2"},
                "timestamp": None,
            },
        )

    report = _client(handler).audit("https://example.com/")

    assert seen["path"] == "/audit"
    assert b"https://example.com/" in seen["body"]
    assert report.items(Category.VIOLATIONS)[0].help_url.endswith("image-alt")
    assert report.tests_run[0].impact is None
    assert report.engine.version == "4.8.2"


def test_service_error_is_translated():
    def handler(request):
        return httpx.Response(504, json={"error": {"code": "NAVIGATION_TIMEOUT", "message": "too slow"}})

    with pytest.raises(AuditRequestFailed) as excinfo:
        _client(handler).audit("https://slow.example.com/")
    assert excinfo.value.code == "NAVIGATION_TIMEOUT"
    assert excinfo.value.status_code == 504


def test_non_json_error_body():
    def handler(request):
        return httpx.Response(502, text="Bad Gateway")

    with pytest.raises(AuditRequestFailed) as excinfo:
        _client(handler).audit("https://example.com/")
    assert excinfo.value.code == "HTTP_ERROR"


def test_unreachable_service():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(AuditRequestFailed) as excinfo:
        _client(handler).audit("https://example.com/")
    assert excinfo.value.code == "SERVICE_UNREACHABLE"


def test_timeout():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(AuditRequestFailed) as excinfo:
        _client(handler).audit("https://example.com/")
    assert excinfo.value.code == "TIMEOUT"


def test_unreadable_report():
    def handler(request):
        return httpx.Response(200, json=["not", "a", "report"])

    with pytest.raises(AuditRequestFailed) as excinfo:
        _client(handler).audit("https://example.com/")
    assert excinfo.value.code == "BAD_RESPONSE"


def test_health():
    assert _client(lambda request: httpx.Response(200, json={"status": "healthy"})).health()
    assert not _client(lambda request: httpx.Response(503)).health()

    def down(request):
        raise httpx.ConnectError("refused", request=request)

    assert not _client(down).health()
