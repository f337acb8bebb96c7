from __future__ import annotations

from typing import Sequence

import numpy as np
import pandas as pd

from perkboard.normalize.schema import CreditsValue, NormalizedPerk
from perkboard.rank.weights import SimilarityWeights

# Bucket edges in USD: <1k, 1k-10k, 10k-100k, >=100k.
VALUE_BUCKET_EDGES = np.array([1_000.0, 10_000.0, 100_000.0])

SCORE_COLUMNS = (
    "deal_type_match",
    "category_match",
    "investment_level_match",
    "value_bucket_match",
)


def value_bucket(amount: float | None) -> int | None:
    if amount is None or not np.isfinite(amount):
        return None
    return int(np.digitize(amount, VALUE_BUCKET_EDGES))


def comparable_value(perk: NormalizedPerk) -> float | None:
    if perk.estimated_value is not None:
        return perk.estimated_value
    if isinstance(perk.value, CreditsValue) and perk.value.amount is not None:
        return float(perk.value.amount)
    return None


def _lowered(values: Sequence[str]) -> set[str]:
    return {value.strip().lower() for value in values if value and value.strip()}


def _category_keys(perk: NormalizedPerk) -> set[str]:
    keys = _lowered(perk.offer_categories)
    return keys or {perk.category.name.lower()}


def _same_vendor(target: NormalizedPerk, candidate: NormalizedPerk) -> bool:
    return target.vendor_id is not None and target.vendor_id == candidate.vendor_id


def score_similar_perks(
    target: NormalizedPerk,
    candidates: Sequence[NormalizedPerk],
    *,
    weights: SimilarityWeights | None = None,
) -> pd.DataFrame:
    """Score candidates against `target`, best first.

    Candidates from the target's vendor and the target itself are dropped.
    Ties keep the input order.
    """

    active_weights = weights or SimilarityWeights.baseline()
    pool = [
        (position, candidate)
        for position, candidate in enumerate(candidates)
        if candidate.id != target.id and not _same_vendor(target, candidate)
    ]
    columns = ["position", "perk_id", *SCORE_COLUMNS, "similarity_score"]
    if not pool:
        return pd.DataFrame(columns=columns)

    target_deal_type = (target.deal_type or "").strip().lower()
    target_categories = _category_keys(target)
    target_levels = _lowered(target.investment_levels)
    target_bucket = value_bucket(comparable_value(target))

    rows: list[dict[str, object]] = []
    for position, candidate in pool:
        candidate_deal_type = (candidate.deal_type or "").strip().lower()
        candidate_bucket = value_bucket(comparable_value(candidate))
        rows.append(
            {
                "position": position,
                "perk_id": candidate.id,
                "deal_type_match": bool(target_deal_type) and candidate_deal_type == target_deal_type,
                "category_match": bool(target_categories & _category_keys(candidate)),
                "investment_level_match": bool(
                    target_levels & _lowered(candidate.investment_levels)
                ),
                "value_bucket_match": target_bucket is not None and candidate_bucket == target_bucket,
            }
        )

    scored_df = pd.DataFrame(rows, columns=columns[:-1])
    signal_matrix = scored_df[list(SCORE_COLUMNS)].to_numpy(dtype=float)
    weight_vector = np.array(
        [
            active_weights.deal_type,
            active_weights.category,
            active_weights.investment_level,
            active_weights.value_bucket,
        ],
        dtype=float,
    )
    scored_df["similarity_score"] = signal_matrix @ weight_vector

    scored_df = scored_df.sort_values(
        by=["similarity_score", "position"],
        ascending=[False, True],
        kind="mergesort",
    )
    return scored_df.reset_index(drop=True)


def find_similar_perks(
    target: NormalizedPerk,
    candidates: Sequence[NormalizedPerk],
    limit: int = 3,
    *,
    weights: SimilarityWeights | None = None,
) -> list[NormalizedPerk]:
    if limit <= 0:
        return []
    scored_df = score_similar_perks(target, candidates, weights=weights)
    positions = scored_df["position"].head(limit).astype(int).tolist()
    return [candidates[position] for position in positions]
