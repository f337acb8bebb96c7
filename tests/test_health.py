from __future__ import annotations

from conftest import FIXED_NOW, FakeClient, upstream_failure

from perkboard.service.health import HealthChecker, TtlCache
from perkboard.upstream.errors import ConfigurationError


class _Clock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def _checker(client: FakeClient, clock: _Clock) -> HealthChecker:
    return HealthChecker(client, cache=TtlCache(30.0, clock=clock), clock=lambda: FIXED_NOW)  # type: ignore[arg-type]


def test_ttl_cache_expires_after_ttl() -> None:
    clock = _Clock()
    cache: TtlCache[str] = TtlCache(30.0, clock=clock)

    assert cache.get() is None
    cache.set("value")
    clock.now += 29
    assert cache.get() == "value"
    clock.now += 1
    assert cache.get() is None

    cache.set("again")
    cache.clear()
    assert cache.get() is None


def test_all_probes_ok_is_healthy_and_uses_page_size_one() -> None:
    client = FakeClient(list_offers={}, list_vendors={}, list_categories={})

    report = _checker(client, _Clock()).check()

    assert report.status == "healthy"
    assert [check.endpoint for check in report.checks] == ["offers", "vendors", "categories"]
    assert client.calls_to("list_offers") == [((), {"page_size": 1})]
    assert client.calls_to("list_categories") == [((), {"page_size": 1})]


def test_non_critical_failure_is_degraded() -> None:
    client = FakeClient(list_offers={}, list_vendors={}, list_categories=upstream_failure())

    report = _checker(client, _Clock()).check()

    assert report.status == "degraded"
    assert report.checks[2].error_code == "GETPROVEN_ERROR"


def test_critical_failure_is_down() -> None:
    client = FakeClient(
        list_offers=ConfigurationError("GetProven API token is not configured"),
        list_vendors={},
        list_categories={},
    )

    report = _checker(client, _Clock()).check()

    assert report.status == "down"
    assert report.checks[0].error_code == "MISSING_API_TOKEN"


def test_results_are_cached_within_ttl() -> None:
    clock = _Clock()
    client = FakeClient(list_offers={}, list_vendors={}, list_categories={})
    checker = _checker(client, clock)

    first = checker.check()
    clock.now += 10
    second = checker.check()
    clock.now += 25
    checker.check()

    assert second is first
    assert len(client.calls_to("list_offers")) == 2
    checker.check(force=True)
    assert len(client.calls_to("list_offers")) == 3


def test_report_hides_checks_from_non_admins() -> None:
    client = FakeClient(list_offers={}, list_vendors={}, list_categories=upstream_failure())

    report = _checker(client, _Clock()).check()

    assert report.to_dict() == {"status": "degraded", "timestamp": "2026-03-01T12:00:00Z"}
    admin_payload = report.to_dict(admin=True)
    assert [check["status"] for check in admin_payload["checks"]] == ["ok", "ok", "error"]
    assert admin_payload["checks"][0]["critical"] is True
