from __future__ import annotations

import logging
import re
from typing import Any, Iterable

from perkboard.normalize.schema import NormalizedVendor, VendorClient, VendorContact
from perkboard.normalize.text import (
    first_text,
    names,
    optional_int,
    optional_text,
    sanitize_text,
)

logger = logging.getLogger(__name__)

UNKNOWN_VENDOR = "Unknown Vendor"
CONTACT_ROLES = ("owner", "contact_person")

_YOUTUBE_ID_PATTERN = re.compile(
    r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/)([^&\s]+)"
)


def format_employee_range(employee_min: int | None, employee_max: int | None) -> str | None:
    if employee_min is not None and employee_max is not None:
        return f"{employee_min} - {employee_max}"
    if employee_min is not None:
        return f"{employee_min}+"
    if employee_max is not None:
        return f"Up to {employee_max}"
    return None


def youtube_embed_url(url: str | None) -> str | None:
    if not url:
        return None
    match = _YOUTUBE_ID_PATTERN.search(url)
    if match:
        return f"https://www.youtube.com/embed/{match.group(1)}"
    return url


def normalize_client(raw: dict[str, Any]) -> VendorClient:
    return VendorClient(
        id=sanitize_text(raw.get("id")),
        name=first_text(raw, "name", "company_name") or "Unnamed client",
        logo=first_text(raw, "logo", "company_logo") or None,
        verified=raw.get("verified") is True,
    )


def _user_role(raw: dict[str, Any]) -> str | None:
    role = first_text(raw, "role", "user_role", "type")
    return role.lower() if role else None


def normalize_user(raw: dict[str, Any], *, admin: bool = False) -> VendorContact:
    """Founder projections never carry phone numbers; admin ones keep them."""

    return VendorContact(
        id=sanitize_text(raw.get("id")),
        first_name=sanitize_text(raw.get("first_name")),
        last_name=sanitize_text(raw.get("last_name")),
        position=optional_text(raw.get("position")),
        email=optional_text(raw.get("email")),
        avatar=optional_text(raw.get("avatar")),
        role=_user_role(raw),
        phone=(first_text(raw, "phone", "phone_number") or None) if admin else None,
    )


def filter_contacts(
    users: Iterable[dict[str, Any]], *, admin: bool = False
) -> list[VendorContact]:
    return [
        normalize_user(raw, admin=admin)
        for raw in users
        if isinstance(raw, dict) and _user_role(raw) in CONTACT_ROLES
    ]


def normalize_vendor(
    raw: dict[str, Any],
    *,
    clients: Iterable[VendorClient] = (),
    contacts: Iterable[VendorContact] = (),
) -> NormalizedVendor:
    vendor_id = sanitize_text(raw.get("id"))
    name = sanitize_text(raw.get("name"))
    if not name:
        logger.warning("Vendor %s missing fields: name", vendor_id or "<no id>")

    employee_min = optional_int(raw.get("employee_min"))
    employee_max = optional_int(raw.get("employee_max"))
    video = optional_text(raw.get("video"))

    return NormalizedVendor(
        id=vendor_id,
        name=name or UNKNOWN_VENDOR,
        logo=optional_text(raw.get("logo")),
        description=optional_text(raw.get("description")),
        story=optional_text(raw.get("story")),
        website=optional_text(raw.get("website")),
        linkedin=optional_text(raw.get("linkedin")),
        facebook=optional_text(raw.get("facebook")),
        twitter=optional_text(raw.get("twitter")),
        video=video,
        video_embed_url=youtube_embed_url(video),
        brochure=optional_text(raw.get("brochure")),
        primary_service=optional_text(raw.get("primary_service")),
        employee_min=employee_min,
        employee_max=employee_max,
        employee_range=format_employee_range(employee_min, employee_max),
        founded=optional_int(raw.get("founded")),
        services=names(raw.get("services")),
        industries=names(raw.get("industries")),
        vendor_groups=names(raw.get("vendor_groups")),
        clients=tuple(clients),
        contacts=tuple(contacts),
    )


def normalize_vendors(raws: Iterable[dict[str, Any]]) -> list[NormalizedVendor]:
    return [normalize_vendor(raw) for raw in raws if isinstance(raw, dict)]
