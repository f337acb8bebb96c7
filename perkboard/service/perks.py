from __future__ import annotations

import concurrent.futures
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterable, Optional

from perkboard.normalize.offers import normalize_category, normalize_offer, normalize_offers
from perkboard.normalize.schema import NormalizedCategory, NormalizedPerk, NormalizedVendor
from perkboard.normalize.text import sanitize_text
from perkboard.normalize.vendors import normalize_vendor
from perkboard.rank.featured import compute_featured_perks, compute_recommended_perks
from perkboard.rank.similarity import find_similar_perks
from perkboard.rank.totals import DashboardStats, compute_dashboard_stats, count_perks_by_vendor
from perkboard.rank.weights import FeaturedPolicy, SimilarityWeights
from perkboard.service.results import (
    FETCH_ERROR,
    NOT_FOUND,
    Page,
    Pagination,
    ServiceResult,
    VendorPerkCounts,
    computed_page,
)
from perkboard.upstream.client import GetProvenClient
from perkboard.upstream.errors import GetProvenError, NotFoundError
from perkboard.upstream.filters import OfferFilters

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 12
AGGREGATE_PAGE_SIZE = 50
FULL_SET_PAGE_SIZE = 1000
DEFAULT_MAX_PAGES = 10


def raw_results(payload: Any) -> list[dict[str, Any]]:
    if isinstance(payload, dict):
        results = payload.get("results")
        if isinstance(results, list):
            return [item for item in results if isinstance(item, dict)]
    if isinstance(payload, list):
        return [item for item in payload if isinstance(item, dict)]
    return []


def log_upstream_failure(operation: str, exc: Exception) -> None:
    """Full detail stays in server logs; callers only get generic envelopes."""

    if isinstance(exc, GetProvenError):
        logger.error(
            "%s failed: code=%s status=%s message=%s",
            operation,
            exc.code,
            exc.status,
            exc.message,
        )
    else:
        logger.exception("%s failed with an unexpected error", operation)


def is_not_found(exc: GetProvenError) -> bool:
    return isinstance(exc, NotFoundError) or exc.status == 404


@dataclass(frozen=True, slots=True)
class OfferDetail:
    perk: NormalizedPerk
    vendor: Optional[NormalizedVendor] = None
    similar: list[NormalizedPerk] = field(default_factory=list)
    # True when the vendor or the similar-perk pool could not be fetched.
    degraded: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "perk": self.perk.to_dict(),
            "vendor": self.vendor.to_dict() if self.vendor is not None else None,
            "similar": [perk.to_dict() for perk in self.similar],
            "degraded": self.degraded,
        }


class PerksService:
    """Entry point for perk reads: fetch, normalize, rank, wrap in an envelope.

    List reads never fail: upstream errors turn into an empty page flagged
    `degraded=True`. Single-record reads return `NOT_FOUND` or `FETCH_ERROR`.
    """

    def __init__(
        self,
        client: GetProvenClient,
        *,
        now: Callable[[], datetime] | None = None,
        max_pages: int = DEFAULT_MAX_PAGES,
        similarity_weights: SimilarityWeights | None = None,
        featured_policy: FeaturedPolicy | None = None,
    ) -> None:
        if max_pages < 1:
            raise ValueError("max_pages must be >= 1.")
        self._client = client
        self._now = now
        self._max_pages = max_pages
        self._similarity_weights = similarity_weights or SimilarityWeights.baseline()
        self._featured_policy = featured_policy or FeaturedPolicy.baseline()

    def _current_time(self) -> datetime | None:
        return self._now() if self._now is not None else None

    def _fetch_page(
        self,
        *,
        page: int = 1,
        page_size: int | None = None,
        filters: OfferFilters | None = None,
        next_cursor: str | None = None,
    ) -> Page[NormalizedPerk]:
        if next_cursor:
            payload = self._client.follow_next(next_cursor)
        else:
            payload = self._client.list_offers(page=page, page_size=page_size, filters=filters)
        payload = payload if isinstance(payload, dict) else {"results": raw_results(payload)}
        return Page(
            items=normalize_offers(raw_results(payload), now=self._current_time()),
            pagination=Pagination.from_payload(payload),
        )

    def _fetch_all(
        self,
        *,
        page_size: int = FULL_SET_PAGE_SIZE,
        filters: OfferFilters | None = None,
    ) -> list[NormalizedPerk]:
        page = self._fetch_page(page=1, page_size=page_size, filters=filters)
        items = list(page.items)
        next_cursor = page.pagination.next
        pages_fetched = 1
        while next_cursor and pages_fetched < self._max_pages:
            page = self._fetch_page(next_cursor=next_cursor)
            items.extend(page.items)
            next_cursor = page.pagination.next
            pages_fetched += 1
        if next_cursor:
            logger.warning(
                "Stopped following offer pagination after %d pages; aggregates may be partial.",
                pages_fetched,
            )
        return items

    def _load_aggregate_set(self, operation: str, *, full: bool) -> tuple[list[NormalizedPerk], bool]:
        try:
            if full:
                return self._fetch_all(), False
            return list(self._fetch_page(page=1, page_size=AGGREGATE_PAGE_SIZE).items), False
        except Exception as exc:
            log_upstream_failure(operation, exc)
            return [], True

    def list_perks(
        self,
        page_size: int = DEFAULT_PAGE_SIZE,
        filters: OfferFilters | None = None,
        next_cursor: str | None = None,
        *,
        page: int = 1,
    ) -> ServiceResult[Page[NormalizedPerk]]:
        try:
            return ServiceResult.ok(
                self._fetch_page(
                    page=page,
                    page_size=page_size,
                    filters=filters,
                    next_cursor=next_cursor,
                )
            )
        except Exception as exc:
            log_upstream_failure("list_perks", exc)
            return ServiceResult.ok(Page.empty(degraded=True))

    def get_perk(self, id_or_slug: str) -> ServiceResult[NormalizedPerk]:
        key = sanitize_text(id_or_slug)
        if not key:
            return ServiceResult.fail(NOT_FOUND)

        try:
            perks = self._fetch_all()
        except Exception as exc:
            log_upstream_failure("get_perk", exc)
            return ServiceResult.fail(FETCH_ERROR)

        for perk in perks:
            if perk.id == key:
                return ServiceResult.ok(perk)
        for perk in perks:
            if perk.slug == key:
                return ServiceResult.ok(perk)
        logger.info("Perk %s not found among %d fetched offers", key, len(perks))
        return ServiceResult.fail(NOT_FOUND)

    def get_offer_by_id(self, offer_id: str) -> ServiceResult[NormalizedPerk]:
        key = sanitize_text(offer_id)
        if not key:
            return ServiceResult.fail(NOT_FOUND)
        try:
            raw = self._client.get_offer(key)
        except GetProvenError as exc:
            log_upstream_failure("get_offer_by_id", exc)
            return ServiceResult.fail(NOT_FOUND if is_not_found(exc) else FETCH_ERROR)
        except Exception as exc:
            log_upstream_failure("get_offer_by_id", exc)
            return ServiceResult.fail(FETCH_ERROR)
        return ServiceResult.ok(normalize_offer(raw, now=self._current_time()))

    def _fetch_vendor(self, vendor_id: str) -> tuple[NormalizedVendor | None, bool]:
        try:
            return normalize_vendor(self._client.get_vendor(vendor_id)), False
        except Exception as exc:
            log_upstream_failure("get_offer_detail.vendor", exc)
            return None, True

    def get_offer_detail(self, offer_id: str, similar_limit: int = 3) -> ServiceResult[OfferDetail]:
        offer_result = self.get_offer_by_id(offer_id)
        if not offer_result.success:
            return ServiceResult.fail(offer_result.error)
        perk = offer_result.data

        with concurrent.futures.ThreadPoolExecutor(max_workers=2) as executor:
            vendor_future = (
                executor.submit(self._fetch_vendor, perk.vendor_id) if perk.vendor_id else None
            )
            pool_future = executor.submit(self._load_aggregate_set, "get_offer_detail.similar", full=True)
            candidates, pool_degraded = pool_future.result()
            vendor, vendor_degraded = (
                vendor_future.result() if vendor_future is not None else (None, False)
            )

        similar = find_similar_perks(
            perk,
            candidates,
            similar_limit,
            weights=self._similarity_weights,
        )
        return ServiceResult.ok(
            OfferDetail(
                perk=perk,
                vendor=vendor,
                similar=similar,
                degraded=pool_degraded or vendor_degraded,
            )
        )

    def find_similar_perks(self, offer_id: str, limit: int = 3) -> ServiceResult[Page[NormalizedPerk]]:
        detail = self.get_offer_detail(offer_id, similar_limit=limit)
        if not detail.success:
            return ServiceResult.fail(detail.error)
        return ServiceResult.ok(computed_page(detail.data.similar, degraded=detail.data.degraded))

    def list_categories(self) -> ServiceResult[Page[NormalizedCategory]]:
        try:
            payload = self._client.list_categories()
        except Exception as exc:
            log_upstream_failure("list_categories", exc)
            return ServiceResult.ok(Page.empty(degraded=True))

        payload = payload if isinstance(payload, dict) else {"results": raw_results(payload)}
        categories = [normalize_category(raw) for raw in raw_results(payload)]
        return ServiceResult.ok(
            Page(items=categories, pagination=Pagination.from_payload(payload))
        )

    def get_featured_perks(self, limit: int = 4) -> ServiceResult[Page[NormalizedPerk]]:
        perks, degraded = self._load_aggregate_set("get_featured_perks", full=False)
        featured = compute_featured_perks(perks, limit, policy=self._featured_policy)
        return ServiceResult.ok(computed_page(featured, degraded=degraded))

    def get_recommended_perks(
        self,
        exclude_ids: Iterable[str] = (),
        limit: int = 3,
    ) -> ServiceResult[Page[NormalizedPerk]]:
        perks, degraded = self._load_aggregate_set("get_recommended_perks", full=False)
        recommended = compute_recommended_perks(perks, exclude_ids, limit)
        return ServiceResult.ok(computed_page(recommended, degraded=degraded))

    def get_dashboard_stats(self) -> DashboardStats:
        perks, degraded = self._load_aggregate_set("get_dashboard_stats", full=True)
        return compute_dashboard_stats(perks, degraded=degraded)

    def count_perks_by_vendor(self) -> VendorPerkCounts:
        perks, degraded = self._load_aggregate_set("count_perks_by_vendor", full=True)
        return VendorPerkCounts(counts=count_perks_by_vendor(perks), degraded=degraded)
