from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping

WEIGHT_TOLERANCE = 1e-6
DEFAULT_PRIORITY_CATEGORIES = ("cloud", "infrastructure", "developer", "payment", "finance")


@dataclass(frozen=True, slots=True)
class SimilarityWeights:
    """Per-signal weights for `find_similar_perks`; they must sum to 1.0."""

    deal_type: float
    category: float
    investment_level: float
    value_bucket: float

    def __post_init__(self) -> None:
        for field_name in ("deal_type", "category", "investment_level", "value_bucket"):
            value = float(getattr(self, field_name))
            if not math.isfinite(value):
                raise ValueError(f"Similarity weight '{field_name}' must be finite.")
            if value < 0.0 or value > 1.0:
                raise ValueError(f"Similarity weight '{field_name}' must be between 0.0 and 1.0.")

        total = self.deal_type + self.category + self.investment_level + self.value_bucket
        if not math.isclose(total, 1.0, abs_tol=WEIGHT_TOLERANCE):
            raise ValueError(
                "Similarity weights must sum to 1.0 "
                f"(received {total:.6f}, tolerance={WEIGHT_TOLERANCE})."
            )

    @classmethod
    def baseline(cls) -> SimilarityWeights:
        return cls(deal_type=0.30, category=0.35, investment_level=0.20, value_bucket=0.15)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> SimilarityWeights:
        values = payload or {}
        baseline = cls.baseline()
        return cls(
            deal_type=float(values.get("deal_type", baseline.deal_type)),
            category=float(values.get("category", baseline.category)),
            investment_level=float(values.get("investment_level", baseline.investment_level)),
            value_bucket=float(values.get("value_bucket", baseline.value_bucket)),
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "deal_type": self.deal_type,
            "category": self.category,
            "investment_level": self.investment_level,
            "value_bucket": self.value_bucket,
        }


@dataclass(frozen=True, slots=True)
class FeaturedPolicy:
    priority_categories: tuple[str, ...] = DEFAULT_PRIORITY_CATEGORIES

    def __post_init__(self) -> None:
        cleaned = tuple(item.strip().lower() for item in self.priority_categories if item.strip())
        if not cleaned:
            raise ValueError("FeaturedPolicy needs at least one priority category.")
        object.__setattr__(self, "priority_categories", cleaned)

    @classmethod
    def baseline(cls) -> FeaturedPolicy:
        return cls()

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> FeaturedPolicy:
        values = payload or {}
        categories = values.get("priority_categories", DEFAULT_PRIORITY_CATEGORIES)
        return cls(priority_categories=tuple(str(item) for item in categories))

    def is_priority(self, category_slug: str) -> bool:
        lowered = category_slug.lower()
        return any(keyword in lowered for keyword in self.priority_categories)

    def to_dict(self) -> dict[str, Any]:
        return {"priority_categories": list(self.priority_categories)}
