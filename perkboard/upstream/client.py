from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Mapping
from urllib.parse import quote, urlparse, urlunparse

import requests
from requests import Response
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from perkboard.config import GetProvenSettings
from perkboard.upstream.errors import (
    ConfigurationError,
    GetProvenError,
    InvalidCursorError,
    NotFoundError,
    TransportError,
    UpstreamHttpError,
)
from perkboard.upstream.filters import OfferFilters, VendorFilters, build_query_params

logger = logging.getLogger(__name__)
_SLOW_REQUEST_SECONDS = 5.0

OFFERS_PATH = "/offers/"
VENDORS_PATH = "/vendors/"
CATEGORIES_PATH = "/categories/"


def _quote_id(value: Any) -> str:
    return quote(str(value).strip(), safe="")


def _host(url: str) -> str:
    return urlparse(url).netloc.lower()


def _results(payload: Any) -> list[dict[str, Any]]:
    if isinstance(payload, list):
        return [item for item in payload if isinstance(item, dict)]
    if isinstance(payload, Mapping):
        results = payload.get("results")
        if isinstance(results, list):
            return [item for item in results if isinstance(item, dict)]
    return []


def _http_error(response: Response) -> GetProvenError:
    details: dict[str, Any] = {}
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        details = payload

    detail = details.get("detail")
    if detail:
        message = str(detail)
    else:
        message = f"API request failed: {response.reason or response.status_code}"
    error_cls = NotFoundError if response.status_code == 404 else UpstreamHttpError
    return error_cls(message, status=response.status_code, details=details)


@dataclass(slots=True)
class GetProvenClient:
    """Authenticated GET-only wrapper around the GetProven catalog API.

    Every call is a single attempt. List calls return the raw
    `{count, next, previous, results}` payload; `follow_next` fetches an
    upstream pagination cursor verbatim.
    """

    settings: GetProvenSettings = field(default_factory=GetProvenSettings)
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = requests.Session()
        self._session.headers.update(
            {
                "User-Agent": self.settings.user_agent,
                "Accept": "application/json",
            }
        )

        retry = Retry(
            total=self.settings.max_retries,
            connect=self.settings.max_retries,
            read=self.settings.max_retries,
            status=self.settings.max_retries,
            backoff_factor=0.0,
            allowed_methods=frozenset({"GET"}),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GetProvenClient:
        return cls(settings=GetProvenSettings.from_env(environ))

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> GetProvenClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def list_offers(
        self,
        *,
        page: int | None = 1,
        page_size: int | None = None,
        filters: OfferFilters | None = None,
    ) -> dict[str, Any]:
        params = build_query_params({"page": page, "page_size": page_size})
        params.update((filters or OfferFilters()).to_params())
        return self.get_json(self._url(OFFERS_PATH), params=params)

    def get_offer(self, offer_id: Any) -> dict[str, Any]:
        return self.get_json(self._url(f"{OFFERS_PATH}{_quote_id(offer_id)}/"))

    def list_categories(self, *, page_size: int | None = None) -> dict[str, Any]:
        params = build_query_params({"page_size": page_size})
        return self.get_json(self._url(CATEGORIES_PATH), params=params or None)

    def list_vendors(
        self,
        *,
        page: int | None = 1,
        page_size: int | None = None,
        filters: VendorFilters | None = None,
    ) -> dict[str, Any]:
        params = build_query_params({"page": page, "page_size": page_size})
        params.update((filters or VendorFilters()).to_params())
        return self.get_json(self._url(VENDORS_PATH), params=params)

    def get_vendor(self, vendor_id: Any) -> dict[str, Any]:
        return self.get_json(self._url(f"{VENDORS_PATH}{_quote_id(vendor_id)}/"))

    def list_vendor_clients(self, vendor_id: Any) -> list[dict[str, Any]]:
        payload = self.get_json(self._url(f"{VENDORS_PATH}{_quote_id(vendor_id)}/clients/"))
        return _results(payload)

    def list_vendor_users(self, vendor_id: Any) -> list[dict[str, Any]]:
        payload = self.get_json(self._url(f"{VENDORS_PATH}{_quote_id(vendor_id)}/users/"))
        return _results(payload)

    def follow_next(self, next_url: str) -> dict[str, Any]:
        # The cursor may carry filter/sort state we do not track; never rebuild it.
        cleaned = (next_url or "").strip()
        if not cleaned or _host(cleaned) != _host(self.settings.api_url):
            raise InvalidCursorError("Pagination cursor does not point at the configured API host.")
        # Proxied upstreams can emit http:// cursors; keep the configured scheme.
        parsed = urlparse(cleaned)
        scheme = urlparse(self.settings.api_url).scheme
        return self.get_json(urlunparse(parsed._replace(scheme=scheme)))

    def get_json(self, url: str, *, params: dict[str, Any] | None = None) -> Any:
        response = self._request("GET", url, params=params)
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(f"Upstream returned a non-JSON body for {url}") from exc

    def _url(self, path: str) -> str:
        return f"{self.settings.api_url.rstrip('/')}{path}"

    def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
    ) -> Response:
        if not self.settings.has_token:
            raise ConfigurationError("GetProven API token is not configured")

        started_at = time.monotonic()
        try:
            response = self._session.request(
                method=method,
                url=url,
                params=params,
                headers={"Authorization": f"Token {self.settings.api_token}"},
                timeout=self.settings.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        elapsed = time.monotonic() - started_at
        if elapsed > _SLOW_REQUEST_SECONDS:
            logger.warning("Slow HTTP %s %.3fs %s", method, elapsed, url)
        logger.debug("HTTP %s %s -> %s", method, url, response.status_code)

        if not response.ok:
            raise _http_error(response)
        return response
