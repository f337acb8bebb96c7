from __future__ import annotations

import pytest
from conftest import FIXED_NOW

from perkboard.normalize.offers import normalize_offer, normalize_offers
from perkboard.normalize.vendors import normalize_vendor
from perkboard.rank.totals import (
    NO_DATA,
    collect_vendor_filter_options,
    compute_dashboard_stats,
    count_perks_by_vendor,
    format_total_value,
    sum_perk_value,
)


@pytest.mark.parametrize(
    ("total", "expected"),
    [
        (0, NO_DATA),
        (999, "$999+"),
        (1_000, "$1K+"),
        (2_500, "$3K+"),
        (2_499, "$2K+"),
        (999_999, "$1000K+"),
        (1_000_000, "$1.0M+"),
        (1_250_000, "$1.3M+"),
        (1_500_000, "$1.5M+"),
    ],
)
def test_format_total_value_rounds_half_up(total: int, expected: str) -> None:
    assert format_total_value(total) == expected


def test_no_data_sentinel_is_literal() -> None:
    assert NO_DATA == "No data"
    assert format_total_value(-5) == NO_DATA


def test_dashboard_stats_from_fixture(offers_page) -> None:  # noqa: ANN001
    perks = normalize_offers(offers_page["results"], now=FIXED_NOW)

    stats = compute_dashboard_stats(perks)

    assert stats.total_perks == 3
    assert stats.total_amount == 25_050
    assert stats.total_value == "$25K+"
    assert stats.has_value is True
    assert stats.to_dict()["degraded"] is False


def test_missing_amounts_count_as_zero() -> None:
    perks = [
        normalize_offer({"id": "1", "discount_value": "Free onboarding"}, now=FIXED_NOW),
        normalize_offer({"id": "2", "discount_value": "$700 off"}, now=FIXED_NOW),
    ]

    assert sum_perk_value(perks) == 700
    assert compute_dashboard_stats([]).total_value == NO_DATA
    assert compute_dashboard_stats([], degraded=True).has_value is False


def test_count_perks_by_vendor_skips_unknown_vendor() -> None:
    perks = [
        normalize_offer({"id": "1", "vendor_id": "v1"}, now=FIXED_NOW),
        normalize_offer({"id": "2", "vendor_id": "v2"}, now=FIXED_NOW),
        normalize_offer({"id": "3", "vendor_id": "v1"}, now=FIXED_NOW),
        normalize_offer({"id": "4"}, now=FIXED_NOW),
    ]

    assert count_perks_by_vendor(perks) == {"v1": 2, "v2": 1}
    assert count_perks_by_vendor([]) == {}


def test_collect_vendor_filter_options_sorted_and_distinct() -> None:
    vendors = [
        normalize_vendor({"id": 1, "name": "A", "services": ["Payments", "Banking"], "vendor_groups": ["Fintech"]}),
        normalize_vendor({"id": 2, "name": "B", "services": ["payments", "Analytics"], "vendor_groups": []}),
    ]

    options = collect_vendor_filter_options(vendors)

    assert options.services == ("Analytics", "Banking", "Payments")
    assert options.to_dict() == {"services": ["Analytics", "Banking", "Payments"], "vendor_groups": ["Fintech"]}
