"""Confidence-tiered interval blending.

Every forecastable activity family is described by an ``ActivityPolicy``: which
event types count, how much history to look at, which gaps are believable, the
tiered weight schedule and the clamp applied to the result. The blender itself
is the same for every family.

A weighted term whose source is missing (no recent average, no correlation
signal) is filled with the age baseline instead of being dropped, so the tier
weights are applied as declared and sparse data leans toward the baseline.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Tuple

from .correlation import CorrelationFactors
from .intervals import mean
from .schemas import (
    ActivityFamily,
    ActivityType,
    CalculationBreakdown,
    ConfidenceTier,
    TierWeights,
)


@dataclass(frozen=True)
class TierRule:
    min_samples: int
    tier: ConfidenceTier
    weights: TierWeights


@dataclass(frozen=True)
class ActivityPolicy:
    family: ActivityFamily
    activity_types: FrozenSet[ActivityType]
    truncation: int
    validity_ceiling: float
    clamp: Tuple[float, float]
    tiers: Tuple[TierRule, ...]
    correlation_sources: FrozenSet[ActivityFamily] = frozenset()


@dataclass(frozen=True)
class BlendOutcome:
    interval_hours: float
    tier: ConfidenceTier
    breakdown: CalculationBreakdown


BASELINE_ONLY = TierWeights(age_based=1.0)

_STANDARD_TIERS = (
    TierRule(3, ConfidenceTier.HIGH, TierWeights(age_based=0.4, recent_average=0.4, last_interval=0.2)),
    TierRule(1, ConfidenceTier.MEDIUM, TierWeights(age_based=0.5, recent_average=0.3, last_interval=0.2)),
    TierRule(0, ConfidenceTier.LOW, BASELINE_ONLY),
)

_DIAPER_TIERS = (
    TierRule(
        5,
        ConfidenceTier.HIGH,
        TierWeights(
            age_based=0.3,
            recent_average=0.3,
            last_interval=0.15,
            feeding_correlation=0.15,
            sleep_correlation=0.10,
        ),
    ),
    TierRule(
        2,
        ConfidenceTier.MEDIUM,
        TierWeights(age_based=0.4, recent_average=0.35, last_interval=0.15, feeding_correlation=0.10),
    ),
    TierRule(0, ConfidenceTier.LOW, TierWeights(age_based=0.85, feeding_correlation=0.15)),
)

FEEDING_TYPES = frozenset({ActivityType.BOTTLE, ActivityType.NURSING})

POLICIES: Dict[ActivityFamily, ActivityPolicy] = {
    ActivityFamily.FEEDING: ActivityPolicy(
        family=ActivityFamily.FEEDING,
        activity_types=FEEDING_TYPES,
        truncation=10,
        validity_ceiling=12,
        clamp=(1, 6),
        tiers=_STANDARD_TIERS,
    ),
    ActivityFamily.DIAPER: ActivityPolicy(
        family=ActivityFamily.DIAPER,
        activity_types=frozenset({ActivityType.DIAPER}),
        truncation=15,
        validity_ceiling=12,
        clamp=(1, 6),
        tiers=_DIAPER_TIERS,
        correlation_sources=frozenset({ActivityFamily.FEEDING, ActivityFamily.SLEEP}),
    ),
    ActivityFamily.SLEEP: ActivityPolicy(
        family=ActivityFamily.SLEEP,
        activity_types=frozenset({ActivityType.SLEEP}),
        truncation=10,
        validity_ceiling=24,
        clamp=(1, 12),
        tiers=_STANDARD_TIERS,
    ),
    ActivityFamily.PUMPING: ActivityPolicy(
        family=ActivityFamily.PUMPING,
        activity_types=frozenset({ActivityType.PUMPING}),
        truncation=10,
        validity_ceiling=12,
        clamp=(1, 6),
        tiers=_STANDARD_TIERS,
    ),
}


def policy_for(family: ActivityFamily) -> ActivityPolicy:
    try:
        return POLICIES[ActivityFamily(family)]
    except (KeyError, ValueError) as exc:
        raise ValueError(f"No forecasting policy for activity family {family!r}") from exc


def select_tier(policy: ActivityPolicy, valid_count: int) -> TierRule:
    for rule in policy.tiers:
        if valid_count >= rule.min_samples:
            return rule
    return policy.tiers[-1]


def clamp_interval(policy: ActivityPolicy, hours: float) -> float:
    low, high = policy.clamp
    return max(low, min(high, hours))


def blend_interval(
    policy: ActivityPolicy,
    age_based_interval: float,
    samples: List[float],
    factors: Optional[CorrelationFactors] = None,
) -> BlendOutcome:
    """Blend the age baseline with recent history using the tier picked by ``len(samples)``.

    ``samples`` are the valid interval samples, newest first.
    """

    factors = factors or CorrelationFactors()
    recent_average = mean(samples)
    last_interval = samples[0] if samples else None

    rule = select_tier(policy, len(samples))
    weights = rule.weights

    def term(value: Optional[float]) -> float:
        return age_based_interval if value is None else value

    predicted = (
        age_based_interval * weights.age_based
        + term(recent_average) * weights.recent_average
        + term(last_interval) * weights.last_interval
        + term(factors.feeding_hours) * weights.feeding_correlation
        + term(factors.sleep_hours) * weights.sleep_correlation
    )

    return BlendOutcome(
        interval_hours=clamp_interval(policy, predicted),
        tier=rule.tier,
        breakdown=CalculationBreakdown(
            age_based_interval=age_based_interval,
            recent_average_interval=recent_average,
            last_interval=last_interval,
            feeding_correlation_hours=factors.feeding_hours,
            sleep_correlation_hours=factors.sleep_hours,
            weights=weights,
            data_points=len(samples),
        ),
    )


def baseline_outcome(policy: ActivityPolicy, age_based_interval: float) -> BlendOutcome:
    """Forecast for a family with no history at all."""

    return BlendOutcome(
        interval_hours=clamp_interval(policy, age_based_interval),
        tier=ConfidenceTier.LOW,
        breakdown=CalculationBreakdown(
            age_based_interval=age_based_interval,
            weights=BASELINE_ONLY,
            data_points=0,
        ),
    )
