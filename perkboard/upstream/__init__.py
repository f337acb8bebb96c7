"""GetProven catalog API access."""

from perkboard.upstream.client import GetProvenClient
from perkboard.upstream.errors import (
    ConfigurationError,
    GetProvenError,
    InvalidCursorError,
    NotFoundError,
    ServiceError,
    TransportError,
    UpstreamHttpError,
)
from perkboard.upstream.filters import OfferFilters, VendorFilters

__all__ = [
    "ConfigurationError",
    "GetProvenClient",
    "GetProvenError",
    "InvalidCursorError",
    "NotFoundError",
    "OfferFilters",
    "ServiceError",
    "TransportError",
    "UpstreamHttpError",
    "VendorFilters",
]
