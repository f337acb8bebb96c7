from __future__ import annotations

from dataclasses import dataclass
from typing import Any


def _is_set(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def build_query_params(values: dict[str, Any]) -> dict[str, Any]:
    """Drop unset filters so nothing is ever sent as an empty string."""

    params: dict[str, Any] = {}
    for key, value in values.items():
        if not _is_set(value):
            continue
        params[key] = value.strip() if isinstance(value, str) else value
    return params


@dataclass(frozen=True, slots=True)
class OfferFilters:
    search: str | None = None
    category: str | None = None
    investment_level: str | None = None
    ordering: str | None = None

    def to_params(self) -> dict[str, Any]:
        return build_query_params(
            {
                "search": self.search,
                "category": self.category,
                "investment_levels": self.investment_level,
                "ordering": self.ordering,
            }
        )


@dataclass(frozen=True, slots=True)
class VendorFilters:
    search: str | None = None
    service_name: str | None = None
    group_name: str | None = None
    ordering: str | None = None

    def to_params(self) -> dict[str, Any]:
        return build_query_params(
            {
                "search": self.search,
                "service_name": self.service_name,
                "group_name": self.group_name,
                "ordering": self.ordering,
            }
        )
