from __future__ import annotations

import concurrent.futures
import logging
from dataclasses import dataclass, replace
from typing import Any

from perkboard.normalize.schema import NormalizedVendor, VendorClient, VendorContact
from perkboard.normalize.text import sanitize_text
from perkboard.normalize.vendors import (
    filter_contacts,
    normalize_client,
    normalize_user,
    normalize_vendor,
    normalize_vendors,
)
from perkboard.rank.totals import VendorFilterOptions, collect_vendor_filter_options
from perkboard.service.perks import FULL_SET_PAGE_SIZE, is_not_found, log_upstream_failure, raw_results
from perkboard.service.results import (
    VENDOR_FETCH_ERROR,
    VENDOR_NOT_FOUND,
    Page,
    Pagination,
    ServiceResult,
)
from perkboard.upstream.client import GetProvenClient
from perkboard.upstream.errors import GetProvenError
from perkboard.upstream.filters import VendorFilters

logger = logging.getLogger(__name__)

DEFAULT_VENDOR_PAGE_SIZE = 24


@dataclass(frozen=True, slots=True)
class VendorDetail:
    """Vendor profile with clients and contacts joined in.

    `users` is only filled for the admin view and keeps every role and phone.
    """

    vendor: NormalizedVendor
    users: tuple[VendorContact, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "vendor": self.vendor.to_dict(),
            "users": [user.to_dict() for user in self.users],
        }


class VendorsService:
    def __init__(self, client: GetProvenClient) -> None:
        self._client = client

    def list_vendors(
        self,
        page_size: int = DEFAULT_VENDOR_PAGE_SIZE,
        filters: VendorFilters | None = None,
        next_cursor: str | None = None,
        *,
        page: int = 1,
    ) -> ServiceResult[Page[NormalizedVendor]]:
        try:
            if next_cursor:
                payload = self._client.follow_next(next_cursor)
            else:
                payload = self._client.list_vendors(page=page, page_size=page_size, filters=filters)
        except Exception as exc:
            log_upstream_failure("list_vendors", exc)
            return ServiceResult.ok(Page.empty(degraded=True))

        payload = payload if isinstance(payload, dict) else {"results": raw_results(payload)}
        return ServiceResult.ok(
            Page(
                items=normalize_vendors(raw_results(payload)),
                pagination=Pagination.from_payload(payload),
            )
        )

    def get_vendor(self, vendor_id: str) -> ServiceResult[NormalizedVendor]:
        key = sanitize_text(vendor_id)
        if not key:
            return ServiceResult.fail(VENDOR_NOT_FOUND)
        try:
            raw = self._client.get_vendor(key)
        except GetProvenError as exc:
            log_upstream_failure("get_vendor", exc)
            return ServiceResult.fail(VENDOR_NOT_FOUND if is_not_found(exc) else VENDOR_FETCH_ERROR)
        except Exception as exc:
            log_upstream_failure("get_vendor", exc)
            return ServiceResult.fail(VENDOR_FETCH_ERROR)
        return ServiceResult.ok(normalize_vendor(raw))

    def _raw_users(self, vendor_id: str, operation: str) -> list[dict[str, Any]]:
        try:
            return self._client.list_vendor_users(vendor_id)
        except Exception as exc:
            log_upstream_failure(operation, exc)
            return []

    def get_vendor_clients(self, vendor_id: str) -> ServiceResult[list[VendorClient]]:
        try:
            raws = self._client.list_vendor_clients(vendor_id)
        except Exception as exc:
            log_upstream_failure("get_vendor_clients", exc)
            return ServiceResult.ok([])
        return ServiceResult.ok([normalize_client(raw) for raw in raws])

    def get_vendor_contacts(self, vendor_id: str) -> ServiceResult[list[VendorContact]]:
        return ServiceResult.ok(filter_contacts(self._raw_users(vendor_id, "get_vendor_contacts")))

    def get_all_vendor_users(self, vendor_id: str) -> ServiceResult[list[VendorContact]]:
        raws = self._raw_users(vendor_id, "get_all_vendor_users")
        return ServiceResult.ok([normalize_user(raw, admin=True) for raw in raws])

    def get_vendor_detail(self, vendor_id: str, *, admin: bool = False) -> ServiceResult[VendorDetail]:
        key = sanitize_text(vendor_id)
        with concurrent.futures.ThreadPoolExecutor(max_workers=3) as executor:
            vendor_future = executor.submit(self.get_vendor, key)
            clients_future = executor.submit(self.get_vendor_clients, key)
            users_future = executor.submit(self._raw_users, key, "get_vendor_detail.users")
            vendor_result = vendor_future.result()
            clients_result = clients_future.result()
            raw_users = users_future.result()

        if not vendor_result.success:
            return ServiceResult.fail(vendor_result.error)

        vendor = replace(
            vendor_result.data,
            clients=tuple(clients_result.data or []),
            contacts=tuple(filter_contacts(raw_users, admin=admin)),
        )
        users = tuple(normalize_user(raw, admin=True) for raw in raw_users) if admin else ()
        return ServiceResult.ok(VendorDetail(vendor=vendor, users=users))

    def get_filter_options(self) -> ServiceResult[VendorFilterOptions]:
        result = self.list_vendors(page_size=FULL_SET_PAGE_SIZE)
        vendors = result.data.items if result.data is not None else []
        return ServiceResult.ok(collect_vendor_filter_options(vendors))
