from __future__ import annotations

from conftest import FIXED_NOW, FakeClient, upstream_failure

from perkboard.service.feed import PaginatedFeed
from perkboard.service.perks import PerksService
from perkboard.service.vendors import VendorsService
from perkboard.upstream.filters import OfferFilters

NEXT_URL = "https://provendeals.getproven.com/api/ext/v1/offers/?page=2&search=cloud"


def _offer(perk_id: str) -> dict[str, str]:
    return {"id": perk_id, "title": f"Perk {perk_id}", "description": "d", "company_name": "Co"}


def test_load_more_appends_and_load_replaces() -> None:
    client = FakeClient(
        list_offers={"count": 3, "next": NEXT_URL, "results": [_offer("1"), _offer("2")]},
        follow_next={"count": 3, "next": None, "results": [_offer("3")]},
    )
    feed = PaginatedFeed.for_perks(PerksService(client, now=lambda: FIXED_NOW))  # type: ignore[arg-type]
    filters = OfferFilters(search="cloud")

    assert feed.load(filters) is True
    assert [perk.id for perk in feed.items] == ["1", "2"]
    assert feed.has_more is True

    assert feed.load_more() is True
    assert [perk.id for perk in feed.items] == ["1", "2", "3"]
    assert feed.has_more is False
    assert feed.load_more() is False
    assert client.calls_to("follow_next") == [((NEXT_URL,), {})]

    feed.load(filters)
    assert [perk.id for perk in feed.items] == ["1", "2"]
    assert client.calls_to("list_offers")[1][1]["filters"] == filters


def test_failed_load_more_keeps_items_and_flags_degraded() -> None:
    client = FakeClient(
        list_offers={"count": 3, "next": NEXT_URL, "results": [_offer("1")]},
        follow_next=upstream_failure(),
    )
    feed = PaginatedFeed.for_perks(PerksService(client, now=lambda: FIXED_NOW))  # type: ignore[arg-type]
    feed.load()

    assert feed.load_more() is False
    assert [perk.id for perk in feed.items] == ["1"]
    assert feed.degraded is True
    assert feed.has_more is True


def test_failed_load_clears_previous_results() -> None:
    responses = [
        {"count": 1, "next": None, "results": [_offer("1")]},
        upstream_failure(),
    ]
    client = FakeClient(list_offers=lambda **kwargs: responses.pop(0))
    feed = PaginatedFeed.for_perks(PerksService(client, now=lambda: FIXED_NOW))  # type: ignore[arg-type]

    assert feed.load() is True
    assert feed.load() is False
    assert feed.items == []
    assert feed.count == 0
    assert feed.degraded is True


def test_vendor_feed_uses_vendor_listing() -> None:
    client = FakeClient(list_vendors={"count": 1, "next": None, "results": [{"id": 1, "name": "Stripe"}]})
    feed = PaginatedFeed.for_vendors(VendorsService(client), page_size=12)  # type: ignore[arg-type]

    feed.load()

    assert [vendor.name for vendor in feed.items] == ["Stripe"]
    assert feed.count == 1
    assert client.calls_to("list_vendors")[0][1]["page_size"] == 12
