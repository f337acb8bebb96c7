from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from typing import Any, Literal, Optional

PerkStatus = Literal["active", "expired"]
RedemptionType = Literal["code", "link", "contact"]
ValueType = Literal["percentage", "credits", "custom"]


@dataclass(frozen=True, slots=True)
class PerkCategory:
    id: str
    name: str
    slug: str


@dataclass(frozen=True, slots=True)
class Provider:
    id: str
    name: str
    logo: Optional[str] = None
    website: Optional[str] = None


@dataclass(frozen=True, slots=True)
class PerkValue(ABC):
    """Base of the value union; consumers branch on the concrete subclass."""

    description: str
    amount: Optional[int] = None

    @property
    @abstractmethod
    def type(self) -> ValueType:
        """Tag of the concrete value kind."""

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, **asdict(self)}


@dataclass(frozen=True, slots=True)
class PercentageValue(PerkValue):
    @property
    def type(self) -> ValueType:
        return "percentage"


@dataclass(frozen=True, slots=True)
class CreditsValue(PerkValue):
    currency: str = "USD"

    @property
    def type(self) -> ValueType:
        return "credits"


@dataclass(frozen=True, slots=True)
class CustomValue(PerkValue):
    @property
    def type(self) -> ValueType:
        return "custom"


@dataclass(frozen=True, slots=True)
class Redemption:
    type: RedemptionType
    instructions: str
    code: Optional[str] = None
    url: Optional[str] = None


@dataclass(frozen=True, slots=True)
class NormalizedPerk:
    """Canonical perk record produced from one upstream offer."""

    id: str
    slug: str
    title: str
    short_description: str
    full_description: str
    category: PerkCategory
    provider: Provider
    value: PerkValue
    status: PerkStatus
    redemption: Redemption
    expires_at: Optional[str] = None
    featured: bool = False
    vendor_id: Optional[str] = None
    deal_type: Optional[str] = None
    offer_categories: tuple[str, ...] = ()
    investment_levels: tuple[str, ...] = ()
    estimated_value: Optional[float] = None
    discount: Optional[float] = None
    discount_type: Optional[str] = None
    old_price: Optional[float] = None
    new_price: Optional[float] = None
    terms_text: Optional[str] = None
    terms_url: Optional[str] = None
    contact_email: Optional[str] = None
    redeem_steps: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["value"] = self.value.to_dict()
        payload["offer_categories"] = list(self.offer_categories)
        payload["investment_levels"] = list(self.investment_levels)
        return payload


@dataclass(frozen=True, slots=True)
class NormalizedCategory:
    id: str
    name: str
    slug: str
    perk_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class VendorClient:
    id: str
    name: str
    logo: Optional[str] = None
    verified: bool = False


@dataclass(frozen=True, slots=True)
class VendorContact:
    id: str
    first_name: str
    last_name: str
    position: Optional[str] = None
    email: Optional[str] = None
    avatar: Optional[str] = None
    role: Optional[str] = None
    phone: Optional[str] = None

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    def to_dict(self) -> dict[str, Any]:
        return {**asdict(self), "full_name": self.full_name}


@dataclass(frozen=True, slots=True)
class NormalizedVendor:
    id: str
    name: str
    logo: Optional[str] = None
    description: Optional[str] = None
    story: Optional[str] = None
    website: Optional[str] = None
    linkedin: Optional[str] = None
    facebook: Optional[str] = None
    twitter: Optional[str] = None
    video: Optional[str] = None
    video_embed_url: Optional[str] = None
    brochure: Optional[str] = None
    primary_service: Optional[str] = None
    employee_min: Optional[int] = None
    employee_max: Optional[int] = None
    employee_range: Optional[str] = None
    founded: Optional[int] = None
    services: tuple[str, ...] = ()
    industries: tuple[str, ...] = ()
    vendor_groups: tuple[str, ...] = ()
    clients: tuple[VendorClient, ...] = field(default=())
    contacts: tuple[VendorContact, ...] = field(default=())

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        for key in ("services", "industries", "vendor_groups"):
            payload[key] = list(payload[key])
        payload["clients"] = [asdict(client) for client in self.clients]
        payload["contacts"] = [contact.to_dict() for contact in self.contacts]
        return payload
