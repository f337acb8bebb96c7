"""Map raw GetProven offers onto `NormalizedPerk`.

This module and `vendors` are the only places that know upstream field names.
Two record shapes are accepted: the older "deal" payload (`title`,
`company_name`, `discount_value`, `promo_code`, ...) and the current "offer"
payload (`name`, `vendor_id`, `estimated_value`, `coupon_code`, ...).
"""

from __future__ import annotations

import logging
import re
from datetime import UTC, datetime
from typing import Any, Iterable

from perkboard.normalize.schema import (
    CreditsValue,
    CustomValue,
    NormalizedCategory,
    NormalizedPerk,
    PercentageValue,
    PerkCategory,
    PerkStatus,
    PerkValue,
    Provider,
    Redemption,
    RedemptionType,
)
from perkboard.normalize.text import (
    first_text,
    generate_slug,
    names,
    optional_int,
    optional_number,
    optional_text,
    sanitize_text,
    strip_html,
)

logger = logging.getLogger(__name__)

SHORT_DESCRIPTION_LENGTH = 200
UNTITLED_PERK = "Untitled Perk"
UNKNOWN_PROVIDER = "Unknown Provider"
NO_DESCRIPTION = "No description available."
UNCATEGORIZED = "Uncategorized"

_AMOUNT_PATTERN = re.compile(r"\d[\d,]*")
_FALSE_FLAGS = frozenset({"", "0", "false", "no", "off"})


def _format_number(value: float) -> str:
    return f"{value:,.0f}" if float(value).is_integer() else f"{value:,.2f}"


def resolve_discount_text(raw: dict[str, Any]) -> str:
    text = sanitize_text(raw.get("discount_value"))
    if text:
        return text

    discount = optional_number(raw.get("discount"))
    if discount:
        if "percent" in sanitize_text(raw.get("discount_type")).lower():
            return f"{discount:g}% off"
        return f"${_format_number(discount)} off"

    estimated_value = optional_number(raw.get("estimated_value"))
    if estimated_value:
        return f"${_format_number(estimated_value)} value"
    return ""


def parse_value(raw: dict[str, Any]) -> PerkValue:
    text = resolve_discount_text(raw)
    discount_type = sanitize_text(raw.get("discount_type")).lower()

    match = _AMOUNT_PATTERN.search(text)
    amount = int(match.group(0).replace(",", "")) if match else None

    if "%" in text or "percent" in discount_type:
        return PercentageValue(description=text or "Discount available", amount=amount)
    if "$" in text or "credit" in text.lower():
        return CreditsValue(description=text or "Credits available", amount=amount, currency="USD")
    return CustomValue(description=text or "Special offer available", amount=amount)


def parse_expiration(value: Any) -> datetime | None:
    text = sanitize_text(value)
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Ignoring unparseable expiration date %r", text)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def is_flag_off(value: Any) -> bool:
    """Explicitly switched-off flag; None means the field is absent."""

    if value is None:
        return False
    if isinstance(value, str):
        return value.strip().lower() in _FALSE_FLAGS
    return not value


def parse_status(raw: dict[str, Any], *, now: datetime | None = None) -> PerkStatus:
    if is_flag_off(raw.get("is_active")):
        return "expired"

    expires_at = parse_expiration(raw.get("expiration_date"))
    if expires_at is not None:
        current = now or datetime.now(tz=UTC)
        if current.tzinfo is None:
            current = current.replace(tzinfo=UTC)
        if expires_at < current:
            return "expired"
    return "active"


def _promo_code(raw: dict[str, Any]) -> str:
    return first_text(raw, "promo_code", "coupon_code")


def _redemption_url(raw: dict[str, Any]) -> str:
    return first_text(raw, "redemption_url", "details_url")


def parse_redemption_type(raw: dict[str, Any]) -> RedemptionType:
    if _promo_code(raw):
        return "code"
    if _redemption_url(raw):
        return "link"
    return "contact"


def parse_redemption(raw: dict[str, Any]) -> Redemption:
    code = _promo_code(raw)
    url = _redemption_url(raw)
    redemption_type = parse_redemption_type(raw)
    if redemption_type == "code":
        instructions = f"Use code {code} at checkout"
    elif redemption_type == "link":
        instructions = "Click the button below to redeem"
    else:
        instructions = "Contact the provider to redeem"
    return Redemption(
        type=redemption_type,
        instructions=instructions,
        code=code or None,
        url=url or None,
    )


def category_from_text(value: Any) -> PerkCategory:
    name = sanitize_text(value) or UNCATEGORIZED
    slug = generate_slug(name, "uncategorized")
    return PerkCategory(id=slug, name=name, slug=slug)


def _log_missing_fields(raw: dict[str, Any], offer_id: str) -> None:
    missing: list[str] = []
    if not first_text(raw, "title", "name"):
        missing.append("title")
    if not first_text(raw, "description"):
        missing.append("description")
    if not first_text(raw, "company_name", "vendor_name"):
        missing.append("company_name")
    if missing:
        logger.warning("Offer %s missing fields: %s", offer_id or "<no id>", ", ".join(missing))


def normalize_offer(raw: dict[str, Any], *, now: datetime | None = None) -> NormalizedPerk:
    offer_id = sanitize_text(raw.get("id"))
    _log_missing_fields(raw, offer_id)

    title = first_text(raw, "title", "name") or UNTITLED_PERK
    description = first_text(raw, "description")
    offer_categories = names(raw.get("offer_categories"))
    category_names = names(raw.get("category")) or offer_categories
    company_name = first_text(raw, "company_name", "vendor_name")
    vendor_id = optional_text(raw.get("vendor_id"))

    return NormalizedPerk(
        id=offer_id,
        slug=generate_slug(title, offer_id or "untitled"),
        title=title,
        short_description=sanitize_text(strip_html(description), SHORT_DESCRIPTION_LENGTH)
        or NO_DESCRIPTION,
        full_description=description or NO_DESCRIPTION,
        category=category_from_text(category_names[0] if category_names else None),
        provider=Provider(
            id=vendor_id or generate_slug(company_name, "unknown"),
            name=company_name or UNKNOWN_PROVIDER,
            logo=first_text(raw, "company_logo", "vendor_logo", "picture") or None,
            website=first_text(raw, "company_website", "vendor_website") or None,
        ),
        value=parse_value(raw),
        status=parse_status(raw, now=now),
        redemption=parse_redemption(raw),
        expires_at=optional_text(raw.get("expiration_date")),
        featured=False,
        vendor_id=vendor_id,
        deal_type=optional_text(raw.get("deal_type")),
        offer_categories=offer_categories,
        investment_levels=names(raw.get("investment_levels")),
        estimated_value=optional_number(raw.get("estimated_value")),
        discount=optional_number(raw.get("discount")),
        discount_type=optional_text(raw.get("discount_type")),
        old_price=optional_number(raw.get("old_price")),
        new_price=optional_number(raw.get("new_price")),
        terms_text=optional_text(raw.get("terms_and_conditions_text")),
        terms_url=optional_text(raw.get("terms_and_conditions")),
        contact_email=optional_text(raw.get("contact_email")),
        redeem_steps=optional_text(raw.get("redeem_steps")),
    )


def normalize_offers(
    raws: Iterable[dict[str, Any]], *, now: datetime | None = None
) -> list[NormalizedPerk]:
    return [normalize_offer(raw, now=now) for raw in raws if isinstance(raw, dict)]


def normalize_category(raw: dict[str, Any]) -> NormalizedCategory:
    category_id = sanitize_text(raw.get("id"))
    name = sanitize_text(raw.get("name")) or UNCATEGORIZED
    perk_count = optional_int(raw.get("deal_count"))
    if perk_count is None:
        perk_count = optional_int(raw.get("offer_count"))
    return NormalizedCategory(
        id=category_id or generate_slug(name, "uncategorized"),
        name=name,
        slug=sanitize_text(raw.get("slug")) or generate_slug(name, category_id or "uncategorized"),
        perk_count=perk_count or 0,
    )
