from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Sequence

import pandas as pd

from perkboard.normalize.schema import NormalizedPerk, NormalizedVendor

# Sentinel the dashboard checks for to drop the "in savings" clause.
NO_DATA = "No data"


def _round_half_up(value: Decimal | float | int, places: int) -> Decimal:
    quantum = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)


def _plain_number(value: float | int) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def format_total_value(total: float | int) -> str:
    """Render a savings total.

    Rounds half-up at the displayed precision: 2500 -> "$3K+",
    1_250_000 -> "$1.3M+", 999_999 -> "$1000K+".
    """

    if total >= 1_000_000:
        return f"${_round_half_up(Decimal(str(total)) / Decimal(1_000_000), 1)}M+"
    if total >= 1_000:
        return f"${_round_half_up(Decimal(str(total)) / Decimal(1_000), 0)}K+"
    if total > 0:
        return f"${_plain_number(total)}+"
    return NO_DATA


def sum_perk_value(perks: Iterable[NormalizedPerk]) -> int:
    return sum(perk.value.amount or 0 for perk in perks if perk.is_active)


@dataclass(frozen=True, slots=True)
class DashboardStats:
    total_perks: int
    total_amount: int
    total_value: str
    degraded: bool = False

    @property
    def has_value(self) -> bool:
        return self.total_value != NO_DATA

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_perks": self.total_perks,
            "total_amount": self.total_amount,
            "total_value": self.total_value,
            "degraded": self.degraded,
        }


def compute_dashboard_stats(
    perks: Sequence[NormalizedPerk], *, degraded: bool = False
) -> DashboardStats:
    active = [perk for perk in perks if perk.is_active]
    total_amount = sum_perk_value(active)
    return DashboardStats(
        total_perks=len(active),
        total_amount=total_amount,
        total_value=format_total_value(total_amount),
        degraded=degraded,
    )


def count_perks_by_vendor(perks: Iterable[NormalizedPerk]) -> dict[str, int]:
    vendor_ids = pd.Series([perk.vendor_id for perk in perks], dtype="object").dropna()
    if vendor_ids.empty:
        return {}
    counts = vendor_ids.value_counts(sort=False)
    return {str(vendor_id): int(count) for vendor_id, count in counts.items()}


@dataclass(frozen=True, slots=True)
class VendorFilterOptions:
    services: tuple[str, ...] = ()
    vendor_groups: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, list[str]]:
        return {"services": list(self.services), "vendor_groups": list(self.vendor_groups)}


def _distinct_sorted(values: Iterable[str]) -> tuple[str, ...]:
    unique: dict[str, str] = {}
    for value in values:
        unique.setdefault(value.lower(), value)
    return tuple(sorted(unique.values(), key=str.lower))


def collect_vendor_filter_options(vendors: Iterable[NormalizedVendor]) -> VendorFilterOptions:
    vendor_list = list(vendors)
    return VendorFilterOptions(
        services=_distinct_sorted(service for vendor in vendor_list for service in vendor.services),
        vendor_groups=_distinct_sorted(
            group for vendor in vendor_list for group in vendor.vendor_groups
        ),
    )
