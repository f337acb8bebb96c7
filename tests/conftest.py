from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from perkboard.config import GetProvenSettings
from perkboard.upstream.errors import GetProvenError

RESOURCES_DIR = Path(__file__).resolve().parent / "resources"
FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def load_resource(name: str) -> Any:
    return json.loads((RESOURCES_DIR / name).read_text(encoding="utf-8"))


class FakeClient:
    """In-memory stand-in for `GetProvenClient` keyed by method name.

    A registered exception instance is raised instead of returned.
    """

    def __init__(self, **responses: Any) -> None:
        self.settings = GetProvenSettings(api_token="test-token")
        self.responses = responses
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []

    def _respond(self, name: str, *args: Any, **kwargs: Any) -> Any:
        self.calls.append((name, args, kwargs))
        response = self.responses.get(name)
        if callable(response):
            response = response(*args, **kwargs)
        if isinstance(response, Exception):
            raise response
        return response

    def __enter__(self) -> FakeClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        return None

    def calls_to(self, name: str) -> list[tuple[tuple[Any, ...], dict[str, Any]]]:
        return [(args, kwargs) for call_name, args, kwargs in self.calls if call_name == name]

    def list_offers(self, **kwargs: Any) -> Any:
        return self._respond("list_offers", **kwargs)

    def get_offer(self, offer_id: Any) -> Any:
        return self._respond("get_offer", offer_id)

    def list_categories(self, **kwargs: Any) -> Any:
        return self._respond("list_categories", **kwargs)

    def list_vendors(self, **kwargs: Any) -> Any:
        return self._respond("list_vendors", **kwargs)

    def get_vendor(self, vendor_id: Any) -> Any:
        return self._respond("get_vendor", vendor_id)

    def list_vendor_clients(self, vendor_id: Any) -> Any:
        return self._respond("list_vendor_clients", vendor_id)

    def list_vendor_users(self, vendor_id: Any) -> Any:
        return self._respond("list_vendor_users", vendor_id)

    def follow_next(self, next_url: str) -> Any:
        return self._respond("follow_next", next_url)


def upstream_failure(message: str = "boom", status: int = 502) -> GetProvenError:
    return GetProvenError(message, status=status)


@pytest.fixture
def offers_page() -> dict[str, Any]:
    return load_resource("offers_page_sample.json")
