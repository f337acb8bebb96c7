"""Upstream record normalization."""

from perkboard.normalize.offers import (
    normalize_category,
    normalize_offer,
    normalize_offers,
    parse_redemption_type,
    parse_status,
    parse_value,
)
from perkboard.normalize.schema import (
    CreditsValue,
    CustomValue,
    NormalizedCategory,
    NormalizedPerk,
    NormalizedVendor,
    PercentageValue,
    PerkValue,
)
from perkboard.normalize.text import generate_slug
from perkboard.normalize.vendors import (
    filter_contacts,
    normalize_client,
    normalize_user,
    normalize_vendor,
)

__all__ = [
    "CreditsValue",
    "CustomValue",
    "NormalizedCategory",
    "NormalizedPerk",
    "NormalizedVendor",
    "PercentageValue",
    "PerkValue",
    "filter_contacts",
    "generate_slug",
    "normalize_category",
    "normalize_client",
    "normalize_offer",
    "normalize_offers",
    "normalize_user",
    "normalize_vendor",
    "parse_redemption_type",
    "parse_status",
    "parse_value",
]
