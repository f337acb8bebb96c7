from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from perkboard.normalize.schema import NormalizedPerk
from perkboard.rank.weights import FeaturedPolicy


def perk_amounts(perks: Sequence[NormalizedPerk]) -> np.ndarray:
    return np.array([float(perk.value.amount or 0) for perk in perks], dtype=float)


def compute_featured_perks(
    perks: Sequence[NormalizedPerk],
    limit: int = 4,
    *,
    policy: FeaturedPolicy | None = None,
) -> list[NormalizedPerk]:
    """Active perks, priority categories first, then by parsed amount.

    The returned records are copies flagged `featured=True`; inputs are untouched.
    """

    active_policy = policy or FeaturedPolicy.baseline()
    active = [perk for perk in perks if perk.is_active]
    if not active or limit <= 0:
        return []

    ranking_df = pd.DataFrame(
        {
            "position": np.arange(len(active)),
            "is_priority": [active_policy.is_priority(perk.category.slug) for perk in active],
            "amount": perk_amounts(active),
        }
    )
    ranking_df = ranking_df.sort_values(
        by=["is_priority", "amount", "position"],
        ascending=[False, False, True],
        kind="mergesort",
    )
    positions = ranking_df["position"].head(limit).tolist()
    return [replace(active[position], featured=True) for position in positions]


def compute_recommended_perks(
    perks: Iterable[NormalizedPerk],
    exclude_ids: Iterable[str] = (),
    limit: int = 3,
) -> list[NormalizedPerk]:
    excluded = {str(perk_id) for perk_id in exclude_ids}
    seen_categories: set[str] = set()
    recommended: list[NormalizedPerk] = []
    for perk in perks:
        if len(recommended) >= limit:
            break
        if not perk.is_active or perk.id in excluded:
            continue
        # first-seen wins per category
        if perk.category.slug in seen_categories:
            continue
        seen_categories.add(perk.category.slug)
        recommended.append(perk)
    return recommended
