from __future__ import annotations

import pytest
from conftest import FIXED_NOW

from perkboard.normalize.offers import normalize_offer
from perkboard.rank.similarity import (
    comparable_value,
    find_similar_perks,
    score_similar_perks,
    value_bucket,
)
from perkboard.rank.weights import SimilarityWeights


def _offer(perk_id: str, vendor_id: str | None = None, **fields):  # noqa: ANN003, ANN202
    raw = {"id": perk_id, "name": f"Offer {perk_id}", "description": "desc", "vendor_name": "V"}
    if vendor_id is not None:
        raw["vendor_id"] = vendor_id
    raw.update(fields)
    return normalize_offer(raw, now=FIXED_NOW)


def test_value_bucket_boundaries() -> None:
    assert value_bucket(999) == 0
    assert value_bucket(1_000) == 1
    assert value_bucket(9_999.99) == 1
    assert value_bucket(10_000) == 2
    assert value_bucket(100_000) == 3
    assert value_bucket(None) is None


def test_comparable_value_prefers_estimated_value_then_credits_amount() -> None:
    assert comparable_value(_offer("a", estimated_value=2500, discount_value="$10 off")) == 2500.0
    assert comparable_value(_offer("b", discount_value="$3,000 credits")) == 3000.0
    assert comparable_value(_offer("c", discount_value="20% off")) is None


def test_similar_excludes_target_and_same_vendor() -> None:
    target = _offer("t", "v1", deal_type="credits")
    candidates = [
        target,
        _offer("same-vendor", "v1", deal_type="credits"),
        _offer("other", "v2", deal_type="credits"),
    ]

    assert [perk.id for perk in find_similar_perks(target, candidates)] == ["other"]


def test_similar_keeps_same_vendor_when_target_vendor_unknown() -> None:
    target = _offer("t")
    candidates = [_offer("x"), _offer("y", "v9")]

    assert [perk.id for perk in find_similar_perks(target, candidates)] == ["x", "y"]


def test_similar_scores_signals_with_weights() -> None:
    target = _offer(
        "t",
        "v1",
        deal_type="Credits",
        offer_categories=["Cloud"],
        investment_levels=["Seed"],
        estimated_value=5_000,
    )
    candidates = [
        _offer("bucket-only", "v2", estimated_value=2_000),
        _offer("all", "v3", deal_type="credits", offer_categories=["cloud"], investment_levels=["seed"], estimated_value=9_000),
        _offer("category", "v4", offer_categories=["Cloud", "AI"]),
    ]

    scored_df = score_similar_perks(target, candidates)

    assert scored_df["perk_id"].tolist() == ["all", "category", "bucket-only"]
    assert scored_df["similarity_score"].tolist() == pytest.approx([1.0, 0.35, 0.15])
    assert bool(scored_df.loc[0, "deal_type_match"]) is True


def test_similar_ties_keep_input_order() -> None:
    target = _offer("t", "v1", offer_categories=["Cloud"])
    candidates = [_offer(f"c{index}", f"v{index + 2}", offer_categories=["Cloud"]) for index in range(5)]

    first = [perk.id for perk in find_similar_perks(target, candidates, limit=5)]
    second = [perk.id for perk in find_similar_perks(target, candidates, limit=5)]

    assert first == ["c0", "c1", "c2", "c3", "c4"]
    assert first == second


def test_similar_includes_zero_score_candidates_and_honors_limit() -> None:
    target = _offer("t", "v1", deal_type="credits")
    candidates = [_offer("a", "v2"), _offer("b", "v3", deal_type="credits"), _offer("c", "v4")]

    assert [perk.id for perk in find_similar_perks(target, candidates, limit=2)] == ["b", "a"]
    assert find_similar_perks(target, candidates, limit=0) == []
    assert find_similar_perks(target, []) == []


def test_custom_weights_change_ranking() -> None:
    target = _offer("t", "v1", deal_type="credits", investment_levels=["Seed"])
    candidates = [_offer("deal", "v2", deal_type="credits"), _offer("level", "v3", investment_levels=["Seed"])]
    weights = SimilarityWeights(deal_type=0.1, category=0.1, investment_level=0.7, value_bucket=0.1)

    assert [perk.id for perk in find_similar_perks(target, candidates)] == ["deal", "level"]
    assert [perk.id for perk in find_similar_perks(target, candidates, weights=weights)] == ["level", "deal"]
