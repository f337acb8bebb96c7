from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Callable, Generic, Literal, Optional, TypeVar

from perkboard.upstream.client import GetProvenClient
from perkboard.upstream.errors import GetProvenError

logger = logging.getLogger(__name__)

T = TypeVar("T")

HealthStatus = Literal["healthy", "degraded", "down"]
CheckStatus = Literal["ok", "error"]

DEFAULT_HEALTH_TTL_SECONDS = 30.0


class TtlCache(Generic[T]):
    """Single-slot cache; a value older than `ttl_seconds` reads as missing."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_HEALTH_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be >= 0.")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._value: Optional[T] = None
        self._expires_at: float | None = None

    def get(self) -> Optional[T]:
        if self._expires_at is None or self._clock() >= self._expires_at:
            return None
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        self._expires_at = self._clock() + self.ttl_seconds

    def clear(self) -> None:
        self._value = None
        self._expires_at = None


@dataclass(frozen=True, slots=True)
class HealthCheck:
    endpoint: str
    status: CheckStatus
    critical: bool
    error_code: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    def to_dict(self) -> dict[str, Any]:
        return {
            "endpoint": self.endpoint,
            "status": self.status,
            "critical": self.critical,
            "error_code": self.error_code,
        }


@dataclass(frozen=True, slots=True)
class HealthReport:
    status: HealthStatus
    checks: tuple[HealthCheck, ...]
    timestamp: datetime

    def to_dict(self, *, admin: bool = False) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "status": self.status,
            "timestamp": self.timestamp.isoformat().replace("+00:00", "Z"),
        }
        if admin:
            payload["checks"] = [check.to_dict() for check in self.checks]
        return payload


def overall_status(checks: tuple[HealthCheck, ...]) -> HealthStatus:
    if all(check.ok for check in checks):
        return "healthy"
    if any(check.critical and not check.ok for check in checks):
        return "down"
    return "degraded"


DEFAULT_HEALTH_CACHE: TtlCache[HealthReport] = TtlCache()


class HealthChecker:
    """Probe the upstream endpoints the dashboard depends on."""

    def __init__(
        self,
        client: GetProvenClient,
        *,
        cache: TtlCache[HealthReport] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = client
        self._cache = cache if cache is not None else DEFAULT_HEALTH_CACHE
        self._clock = clock or (lambda: datetime.now(UTC))

    def _probes(self) -> list[tuple[str, bool, Callable[[], Any]]]:
        return [
            ("offers", True, lambda: self._client.list_offers(page_size=1)),
            ("vendors", True, lambda: self._client.list_vendors(page_size=1)),
            ("categories", False, lambda: self._client.list_categories(page_size=1)),
        ]

    def _run_probe(self, endpoint: str, critical: bool, probe: Callable[[], Any]) -> HealthCheck:
        try:
            probe()
        except GetProvenError as exc:
            logger.warning("Health probe %s failed: %s (%s)", endpoint, exc.code, exc.message)
            return HealthCheck(endpoint, "error", critical, exc.code)
        except Exception:
            logger.exception("Health probe %s failed with an unexpected error", endpoint)
            return HealthCheck(endpoint, "error", critical, "UNKNOWN_ERROR")
        return HealthCheck(endpoint, "ok", critical)

    def check(self, *, force: bool = False) -> HealthReport:
        if not force:
            cached = self._cache.get()
            if cached is not None:
                return cached

        checks = tuple(self._run_probe(*probe) for probe in self._probes())
        report = HealthReport(status=overall_status(checks), checks=checks, timestamp=self._clock())
        if report.status != "healthy":
            logger.warning("Upstream health is %s", report.status)
        self._cache.set(report)
        return report
