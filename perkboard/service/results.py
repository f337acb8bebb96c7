from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Mapping, Optional, TypeVar

from perkboard.normalize.schema import NormalizedPerk, NormalizedVendor
from perkboard.upstream.errors import ServiceError

T = TypeVar("T")

NOT_FOUND = ServiceError(code="NOT_FOUND", message="Perk not found", status=404)
FETCH_ERROR = ServiceError(code="FETCH_ERROR", message="Unable to load perk details", status=500)
VENDOR_NOT_FOUND = ServiceError(code="NOT_FOUND", message="Vendor not found", status=404)
VENDOR_FETCH_ERROR = ServiceError(
    code="FETCH_ERROR", message="Unable to load vendor details", status=500
)


def _to_payload(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(value, (list, tuple)):
        return [_to_payload(item) for item in value]
    if isinstance(value, Mapping):
        return {key: _to_payload(item) for key, item in value.items()}
    return value


@dataclass(frozen=True, slots=True)
class ServiceResult(Generic[T]):
    """`{success: true, data}` or `{success: false, error: {code, message, status}}`."""

    success: bool
    data: Optional[T] = None
    error: Optional[ServiceError] = None

    def __post_init__(self) -> None:
        if not self.success and self.error is None:
            raise ValueError("A failed ServiceResult needs an error.")

    @classmethod
    def ok(cls, data: T) -> ServiceResult[T]:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: ServiceError) -> ServiceResult[T]:
        return cls(success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        if self.success or self.error is None:
            return {"success": True, "data": _to_payload(self.data)}
        return {"success": False, "error": self.error.to_dict()}


@dataclass(frozen=True, slots=True)
class Pagination:
    count: int = 0
    next: Optional[str] = None
    previous: Optional[str] = None

    @property
    def has_more(self) -> bool:
        return self.next is not None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Pagination:
        count = payload.get("count")
        return cls(
            count=int(count) if isinstance(count, (int, float)) else 0,
            next=payload.get("next") or None,
            previous=payload.get("previous") or None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "next": self.next,
            "previous": self.previous,
            "has_more": self.has_more,
        }


@dataclass(frozen=True, slots=True)
class Page(Generic[T]):
    """One page of normalized records.

    `degraded=True` marks an empty page that stands in for an upstream failure.
    """

    items: list[T] = field(default_factory=list)
    pagination: Pagination = field(default_factory=Pagination)
    degraded: bool = False

    @classmethod
    def empty(cls, *, degraded: bool = False) -> Page[T]:
        return cls(items=[], pagination=Pagination(), degraded=degraded)

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": _to_payload(self.items),
            "pagination": self.pagination.to_dict(),
            "degraded": self.degraded,
        }


PerkPage = Page[NormalizedPerk]
VendorPage = Page[NormalizedVendor]


@dataclass(frozen=True, slots=True)
class VendorPerkCounts:
    counts: dict[str, int] = field(default_factory=dict)
    degraded: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"counts": dict(self.counts), "degraded": self.degraded}


def computed_page(items: list[T], *, degraded: bool = False) -> Page[T]:
    """Wrap a locally computed list; `degraded` marks an upstream failure behind it."""

    return Page(items=list(items), pagination=Pagination(count=len(items)), degraded=degraded)
