"""Per-activity forecasters.

All families run through ``forecast_activity``; the family-specific entry points
add the quick-log suggestions each card shows next to the forecast.
"""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Union

from .age import as_utc, baby_age_days
from .blender import FEEDING_TYPES, ActivityPolicy, baseline_outcome, blend_interval, policy_for
from .correlation import (
    NO_CORRELATION,
    CorrelationFactors,
    correlation_factors,
    feeding_diaper_correlation,
    sleep_diaper_correlation,
)
from .intervals import interval_samples, latest_skip_time, mean, qualifying_events, valid_samples
from .norms import (
    age_based_interval,
    age_guidance,
    overdue_threshold,
    typical_feeding_amount_ml,
    typical_feeding_duration,
    typical_sleep_duration,
)
from .overdue import resolve_status
from .preferences import blend_preference, round_half_up
from .schemas import (
    ActivityFamily,
    ActivityType,
    BabyConfig,
    CustomPreferences,
    DiaperForecast,
    DiaperType,
    Event,
    EventAttributes,
    FeedingForecast,
    Forecast,
    PatternEntry,
    SleepForecast,
)

logger = logging.getLogger(__name__)

RECENT_PATTERN_SIZE = 5
CORRELATION_FEEDING_LIMIT = 20
CORRELATION_SLEEP_LIMIT = 15
DIAPER_TYPE_WINDOW = 5
MAX_SLEEP_DURATION_MINUTES = 480

AnyForecast = Union[FeedingForecast, DiaperForecast, SleepForecast, Forecast]


@dataclass(frozen=True)
class ForecastRun:
    forecast: Forecast
    history: List[Event]
    age_days: Optional[int]


def _baseline_interval(policy: ActivityPolicy, age_days: Optional[int], baby: BabyConfig) -> float:
    if (
        age_days is None
        and policy.family == ActivityFamily.FEEDING
        and baby.manual_interval_override_hours
    ):
        return baby.manual_interval_override_hours
    return age_based_interval(policy.family, age_days)


def _attributes(event: Event) -> EventAttributes:
    return EventAttributes(
        activity_type=event.activity_type,
        amount_ml=event.amount_ml,
        duration_minutes=event.effective_duration_minutes,
        diaper_type=event.diaper_type,
        sleep_type=event.sleep_type,
        logged_by=event.logged_by,
    )


def _recent_pattern(history: List[Event], gaps: List[float]) -> List[PatternEntry]:
    pattern: List[PatternEntry] = []
    for idx, event in enumerate(history[:RECENT_PATTERN_SIZE]):
        pattern.append(
            PatternEntry(
                time=event.start_time,
                interval_from_previous=gaps[idx] if idx < len(gaps) else None,
                **_attributes(event).model_dump(),
            )
        )
    return pattern


def _correlations(
    policy: ActivityPolicy,
    events: List[Event],
    diapers: List[Event],
    now: datetime,
) -> CorrelationFactors:
    feeding = sleep = NO_CORRELATION
    last_feeding_time: Optional[datetime] = None
    if ActivityFamily.FEEDING in policy.correlation_sources:
        feedings = qualifying_events(events, FEEDING_TYPES, CORRELATION_FEEDING_LIMIT)
        feeding = feeding_diaper_correlation(feedings, diapers)
        last_feeding_time = feedings[0].start_time if feedings else None
    if ActivityFamily.SLEEP in policy.correlation_sources:
        sleeps = qualifying_events(events, {ActivityType.SLEEP}, CORRELATION_SLEEP_LIMIT)
        sleep = sleep_diaper_correlation(sleeps, diapers)
    return correlation_factors(feeding, sleep, last_feeding_time, now)


def _run(
    family: ActivityFamily,
    events: Iterable[Event],
    baby: Optional[BabyConfig],
    now: datetime,
) -> ForecastRun:
    policy = policy_for(family)
    baby = baby or BabyConfig()
    events = list(events)
    now = as_utc(now)

    age_days = baby_age_days(baby.birth_date, now)
    baseline = _baseline_interval(policy, age_days, baby)
    history = qualifying_events(events, policy.activity_types, policy.truncation)
    skip_time = latest_skip_time(events, policy.activity_types, until=now)
    threshold = overdue_threshold(policy.family, age_days)

    gaps: List[float] = []
    if history:
        gaps = interval_samples(history)
        factors = None
        if policy.correlation_sources:
            factors = _correlations(policy, events, history, now)
        outcome = blend_interval(policy, baseline, valid_samples(gaps, policy.validity_ceiling), factors)
        last_event: Optional[Event] = history[0]
        next_time = history[0].start_time + timedelta(hours=outcome.interval_hours)
    else:
        outcome = baseline_outcome(policy, baseline)
        last_event = None
        next_time = now + timedelta(hours=outcome.interval_hours)

    state = resolve_status(next_time, now, threshold, outcome.interval_hours, skip_time)
    logger.debug(
        "forecast computed",
        extra={
            "activity": policy.family.value,
            "tier": outcome.tier.value,
            "data_points": outcome.breakdown.data_points,
            "interval_hours": outcome.interval_hours,
        },
    )

    forecast = Forecast(
        activity=policy.family,
        next_time=next_time,
        interval_hours=outcome.interval_hours,
        confidence_tier=outcome.tier,
        status=state.status,
        is_overdue=state.is_overdue,
        overdue_minutes=state.overdue_minutes,
        recovery_time=state.recovery_time,
        recent_skip_time=skip_time,
        last_event_time=last_event.start_time if last_event else None,
        last_event_attributes=_attributes(last_event) if last_event else None,
        age_days=age_days,
        guidance=age_guidance(policy.family, age_days),
        overdue_threshold_minutes=threshold,
        breakdown=outcome.breakdown,
        recent_pattern=_recent_pattern(history, gaps),
    )
    return ForecastRun(forecast=forecast, history=history, age_days=age_days)


def forecast_activity(
    family: ActivityFamily,
    events: Iterable[Event],
    baby: Optional[BabyConfig],
    now: datetime,
) -> Forecast:
    """Forecast the next event of ``family`` as seen at ``now``."""
    return _run(family, events, baby, now).forecast


def forecast_as_of(
    family: ActivityFamily,
    events: Iterable[Event],
    baby: Optional[BabyConfig],
    as_of: datetime,
) -> Forecast:
    """Forecast using only the events logged up to ``as_of``, with the baby's age at that instant."""
    as_of = as_utc(as_of)
    window = [event for event in events if event.start_time <= as_of]
    return forecast_activity(family, window, baby, as_of)


def forecast_feeding(events: Iterable[Event], baby: Optional[BabyConfig], now: datetime) -> FeedingForecast:
    baby = baby or BabyConfig()
    run = _run(ActivityFamily.FEEDING, events, baby, now)
    prefs = baby.custom_preferences or CustomPreferences()
    weights = {
        "custom_weight": prefs.custom_weight,
        "recent_weight": prefs.recent_weight,
        "age_based_weight": prefs.age_based_weight,
    }

    recent_amount = mean([event.amount_ml for event in run.history if event.amount_ml])
    recent_duration = mean(
        [
            event.effective_duration_minutes
            for event in run.history
            if event.activity_type == ActivityType.NURSING and event.effective_duration_minutes
        ]
    )
    return FeedingForecast(
        forecast=run.forecast,
        suggested_amount=blend_preference(
            prefs.amount_ml, recent_amount, typical_feeding_amount_ml(run.age_days), **weights
        ),
        suggested_duration=blend_preference(
            prefs.duration_minutes, recent_duration, typical_feeding_duration(run.age_days), **weights
        ),
        suggested_type=run.history[0].activity_type if run.history else None,
    )


def suggest_diaper_type(history: List[Event]) -> Optional[DiaperType]:
    """Most common diaper type among the latest changes; ties go to the most recent."""

    kinds = [event.diaper_type for event in history[:DIAPER_TYPE_WINDOW] if event.diaper_type]
    if not kinds:
        return None
    counts = Counter(kinds)
    return max(counts, key=lambda kind: (counts[kind], -kinds.index(kind)))


def forecast_diaper(events: Iterable[Event], baby: Optional[BabyConfig], now: datetime) -> DiaperForecast:
    run = _run(ActivityFamily.DIAPER, events, baby, now)
    return DiaperForecast(forecast=run.forecast, suggested_diaper_type=suggest_diaper_type(run.history))


def suggest_sleep_duration(age_days: Optional[int], history: List[Event]) -> int:
    baseline = typical_sleep_duration(age_days)
    durations = [
        minutes
        for minutes in (event.effective_duration_minutes for event in history)
        if minutes is not None and 0 < minutes < MAX_SLEEP_DURATION_MINUTES
    ]
    average = mean(durations)
    if average is None:
        return int(baseline)
    if len(durations) >= 3:
        return int(round_half_up(average * 0.6 + baseline * 0.4))
    return int(round_half_up(average * 0.4 + baseline * 0.6))


def forecast_sleep(events: Iterable[Event], baby: Optional[BabyConfig], now: datetime) -> SleepForecast:
    run = _run(ActivityFamily.SLEEP, events, baby, now)
    return SleepForecast(
        forecast=run.forecast,
        suggested_duration_minutes=suggest_sleep_duration(run.age_days, run.history),
    )


def forecast_pumping(events: Iterable[Event], baby: Optional[BabyConfig], now: datetime) -> Forecast:
    return forecast_activity(ActivityFamily.PUMPING, events, baby, now)


def forecast(
    family: ActivityFamily,
    events: Iterable[Event],
    baby: Optional[BabyConfig],
    now: datetime,
) -> AnyForecast:
    family = ActivityFamily(family)
    if family == ActivityFamily.FEEDING:
        return forecast_feeding(events, baby, now)
    if family == ActivityFamily.DIAPER:
        return forecast_diaper(events, baby, now)
    if family == ActivityFamily.SLEEP:
        return forecast_sleep(events, baby, now)
    return forecast_pumping(events, baby, now)
