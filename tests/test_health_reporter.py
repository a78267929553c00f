"""Tests for the daily health report."""

import json
import platform

from fakes import json_result, transport_error


def test_report_posts_site_url_and_metrics(manager, http) -> None:
    assert manager.health.send_daily_report() is True

    [request] = http.requests
    assert request["method"] == "POST"
    assert request["url"] == "https://admin.example.com/api/update"
    assert request["timeout"] == 15
    assert set(request["data"]) == {"site_url", "health_metrics"}
    assert request["data"]["site_url"] == "https://site.example.com"

    metrics = json.loads(request["data"]["health_metrics"])
    assert metrics == {
        "runtime_version": platform.python_version(),
        "platform_version": "6.5.2",
        "product_version": "1.3.0",
        "active_plugins": ["akismet/akismet.php", "hello.php"],
    }


def test_report_and_registration_share_version_field_names(manager, http) -> None:
    manager.health.send_daily_report()
    manager.registration.send_registration_request()

    metrics = json.loads(http.requests_to("/update")[0]["data"]["health_metrics"])
    registration = http.requests_to("/register")[0]["data"]

    version_keys = {"runtime_version", "platform_version", "product_version"}
    assert version_keys <= set(metrics)
    assert version_keys <= set(registration)
    for key in version_keys:
        assert metrics[key] == registration[key]


def test_snapshot_reflects_current_configuration(manager) -> None:
    manager.settings.THEME_VERSION = "1.4.0"
    manager.settings.ACTIVE_PLUGINS = []

    snapshot = manager.health.build_snapshot()

    assert snapshot.product_version == "1.4.0"
    assert snapshot.active_plugins == []


def test_transport_failure_is_absorbed(manager, http, store) -> None:
    http.queue(transport_error("timed out"))

    assert manager.health.send_daily_report() is False
    assert store.get_option("registration_status") is None


def test_server_error_is_absorbed(manager, http) -> None:
    http.queue(json_result({"error": "boom"}, status_code=502))

    assert manager.health.send_daily_report() is False
    assert len(http.requests) == 1
