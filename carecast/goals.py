"""Daily count and volume goals that shift from age norms toward the baby's own pattern."""
from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Tuple

from .age import as_utc, baby_age_days
from .blender import policy_for
from .forecasters import forecast_activity
from .intervals import qualifying_events
from .norms import (
    age_based_interval,
    daily_dirty_diaper_goal,
    daily_nap_goal,
    daily_sleep_hours_goal,
    typical_feeding_amount_ml,
    wet_diaper_share,
)
from .preferences import round_half_up
from .schemas import ActivityFamily, BabyConfig, DailyGoals, Event

# (max data points, age weight, pattern weight)
ADAPTIVE_WEIGHT_TIERS = [
    (5, 1.0, 0.0),
    (10, 0.7, 0.3),
    (20, 0.5, 0.5),
]
MATURE_WEIGHTS = (0.3, 0.7)


def adaptive_weights(data_points: int) -> Tuple[float, float]:
    """(age weight, pattern weight) for the amount of history available."""
    for limit, age_weight, pattern_weight in ADAPTIVE_WEIGHT_TIERS:
        if data_points <= limit:
            return age_weight, pattern_weight
    return MATURE_WEIGHTS


def weighted_interval(age_interval: float, predicted_interval: float, data_points: int) -> float:
    age_weight, pattern_weight = adaptive_weights(data_points)
    return age_weight * age_interval + pattern_weight * predicted_interval


def weighted_daily_count(age_interval: float, predicted_interval: float, data_points: int) -> int:
    return int(round_half_up(24 / weighted_interval(age_interval, predicted_interval, data_points)))


def daily_goals(
    family: ActivityFamily,
    events: Iterable[Event],
    baby: Optional[BabyConfig],
    now: datetime,
) -> DailyGoals:
    baby = baby or BabyConfig()
    family = ActivityFamily(family)
    events = list(events)
    now = as_utc(now)
    age_days = baby_age_days(baby.birth_date, now)
    forecast = forecast_activity(family, events, baby, now)

    age_interval = age_based_interval(family, age_days)
    # Every logged event counts, not just the truncated history the forecast blends.
    data_points = len(qualifying_events(events, policy_for(family).activity_types))
    age_weight, pattern_weight = adaptive_weights(data_points)
    count = weighted_daily_count(age_interval, forecast.interval_hours, data_points)

    goals = DailyGoals(
        activity=family,
        count=count,
        age_weight=age_weight,
        pattern_weight=pattern_weight,
        age_based_interval=age_interval,
        predicted_interval=forecast.interval_hours,
        data_points=data_points,
    )
    if family == ActivityFamily.FEEDING:
        goals.amount_ml = int(round_half_up(count * typical_feeding_amount_ml(age_days)))
    elif family == ActivityFamily.DIAPER and age_days is not None:
        goals.wet_count = int(round_half_up(count * wet_diaper_share(age_days)))
        goals.dirty_count = daily_dirty_diaper_goal(age_days)
    elif family == ActivityFamily.SLEEP and age_days is not None:
        goals.nap_count = daily_nap_goal(age_days)
        goals.sleep_hours = daily_sleep_hours_goal(age_days)
    return goals
