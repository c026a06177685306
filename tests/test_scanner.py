import json

import pytest
from selenium.common.exceptions import TimeoutException, WebDriverException

from access_audit.collectors.session import SessionHandle
from access_audit.errors import NavigationTimeout, ScanFailed

from conftest import FakeDriver, axe_payload, make_executor


def _handle(driver):
    return SessionHandle(session_id="test", driver=driver)


def test_run_navigates_and_returns_engine_payload():
    driver = FakeDriver()
    result = make_executor(navigation_timeout=5).run(_handle(driver), "https://example.com/")

    assert driver.visited == ["https://example.com/"]
    assert driver.page_load_timeout == 5
    assert result.url == "https://example.com/"
    assert result.payload["violations"] == axe_payload()["violations"]


def test_page_load_timeout_becomes_navigation_timeout():
    driver = FakeDriver(page_load_error=TimeoutException("timed out"))
    with pytest.raises(NavigationTimeout) as excinfo:
        make_executor().run(_handle(driver), "https://slow.example.com/")
    assert excinfo.value.url == "https://slow.example.com/"


def test_page_that_never_finishes_loading_times_out():
    driver = FakeDriver(ready_state="loading")
    with pytest.raises(NavigationTimeout):
        make_executor(navigation_timeout=0.1).run(_handle(driver), "https://example.com/")


def test_unreachable_host_becomes_navigation_timeout():
    driver = FakeDriver(page_load_error=WebDriverException("net::ERR_NAME_NOT_RESOLVED"))
    with pytest.raises(NavigationTimeout):
        make_executor().run(_handle(driver), "https://nowhere.invalid/")


def test_injection_failure_is_surfaced_as_scan_failed():
    def blocked(driver):
        raise WebDriverException("cross-origin frame")

    with pytest.raises(ScanFailed) as excinfo:
        make_executor(injector=blocked).run(_handle(FakeDriver()), "https://example.com/")
    assert excinfo.value.url == "https://example.com/"
    assert "inject" in excinfo.value.message


def test_engine_error_payload_is_surfaced_as_scan_failed():
    driver = FakeDriver(raw_result=json.dumps({"error": "axe is not defined"}))
    with pytest.raises(ScanFailed) as excinfo:
        make_executor().run(_handle(driver), "https://example.com/")
    assert "axe is not defined" in excinfo.value.message


def test_unparseable_engine_output_is_scan_failed():
    driver = FakeDriver(raw_result="{not json")
    with pytest.raises(ScanFailed):
        make_executor().run(_handle(driver), "https://example.com/")


def test_script_timeout_is_scan_failed():
    driver = FakeDriver(script_error=TimeoutException("script timeout"))
    with pytest.raises(ScanFailed):
        make_executor().run(_handle(driver), "https://example.com/")
