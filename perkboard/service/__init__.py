"""Service facade over the GetProven catalog."""

from perkboard.service.feed import PaginatedFeed
from perkboard.service.health import HealthChecker, HealthReport, TtlCache
from perkboard.service.perks import OfferDetail, PerksService
from perkboard.service.results import Page, Pagination, ServiceResult, VendorPerkCounts
from perkboard.service.vendors import VendorDetail, VendorsService

__all__ = [
    "HealthChecker",
    "HealthReport",
    "OfferDetail",
    "Page",
    "PaginatedFeed",
    "Pagination",
    "PerksService",
    "ServiceResult",
    "TtlCache",
    "VendorDetail",
    "VendorPerkCounts",
    "VendorsService",
]
