"""Blend caregiver preferences with recent history and age-based defaults.

Used for the feeding quick-log suggestions (amount and duration). Sources that
are missing hand their weight to the remaining sources in proportion to those
sources' own weights, so the effective weights always sum to 1.
"""
from __future__ import annotations

import math
from typing import List, Optional

from .schemas import BlendContribution, BlendResult, BlendSource

DEFAULT_CUSTOM_WEIGHT = 0.4
DEFAULT_RECENT_WEIGHT = 0.4
DEFAULT_AGE_BASED_WEIGHT = 0.2


def round_half_up(value: float) -> float:
    return float(math.floor(value + 0.5))


def _age_based_only(recent: Optional[float], age_based: float) -> BlendResult:
    return BlendResult(
        value=age_based,
        source=BlendSource.AGE_BASED,
        custom=BlendContribution(),
        recent=BlendContribution(value=recent),
        age_based=BlendContribution(value=age_based, weight=1.0, contribution=age_based),
    )


def _redistribute(missing: float, first: float, second: float) -> tuple[float, float]:
    total = first + second
    if total <= 0:
        return first, second
    return first + missing * (first / total), second + missing * (second / total)


def blend_preference(
    custom: Optional[float],
    recent: Optional[float],
    age_based: float,
    *,
    custom_weight: float = DEFAULT_CUSTOM_WEIGHT,
    recent_weight: float = DEFAULT_RECENT_WEIGHT,
    age_based_weight: float = DEFAULT_AGE_BASED_WEIGHT,
) -> BlendResult:
    """Weighted blend of a custom preference, a recent average and an age-based default.

    Example: custom 150 ml, recent 140 ml, age-based 120 ml with the default
    weights gives 150*0.4 + 140*0.4 + 120*0.2 = 140 ml, attributed to "custom".
    """

    has_custom = custom is not None
    has_recent = recent is not None

    if has_custom and not has_recent:
        return BlendResult(
            value=custom,
            source=BlendSource.CUSTOM,
            custom=BlendContribution(value=custom, weight=1.0, contribution=custom),
            recent=BlendContribution(),
            age_based=BlendContribution(value=age_based),
        )
    if not has_custom and not has_recent:
        return _age_based_only(recent, age_based)

    weights = [max(custom_weight, 0.0), max(recent_weight, 0.0), max(age_based_weight, 0.0)]
    if not has_custom:
        weights[1], weights[2] = _redistribute(weights[0], weights[1], weights[2])
        weights[0] = 0.0

    total_weight = sum(weights)
    if total_weight <= 0:
        return _age_based_only(recent, age_based)
    # Normalise so effective weights sum to 1 even when declared weights do not.
    custom_w, recent_w, age_w = (weight / total_weight for weight in weights)

    custom_contribution = custom * custom_w if has_custom else 0.0
    recent_contribution = recent * recent_w
    age_contribution = age_based * age_w
    blended = custom_contribution + recent_contribution + age_contribution

    return BlendResult(
        value=round_half_up(blended),
        source=_dominant_source(custom_contribution, recent_contribution, age_contribution),
        custom=BlendContribution(value=custom, weight=custom_w, contribution=custom_contribution),
        recent=BlendContribution(value=recent, weight=recent_w, contribution=recent_contribution),
        age_based=BlendContribution(value=age_based, weight=age_w, contribution=age_contribution),
    )


def _dominant_source(custom: float, recent: float, age_based: float) -> BlendSource:
    if custom > recent and custom > age_based:
        return BlendSource.CUSTOM
    if recent > custom and recent > age_based:
        return BlendSource.RECENT
    if age_based > custom and age_based > recent:
        return BlendSource.AGE_BASED
    return BlendSource.BLENDED


def describe_blend_source(result: BlendResult) -> str:
    if result.source == BlendSource.CUSTOM:
        return "Based on your preference"
    if result.source == BlendSource.RECENT:
        return "Based on recent activity"
    if result.source == BlendSource.AGE_BASED:
        return "Based on baby's age"

    sources: List[str] = []
    if result.custom.weight > 0:
        sources.append("your preference")
    if result.recent.weight > 0:
        sources.append("recent activity")
    if result.age_based.weight > 0:
        sources.append("age guidelines")
    return f"Blend of {', '.join(sources)}"
