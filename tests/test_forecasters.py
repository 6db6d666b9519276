from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import pytest

from carecast.blender import POLICIES
from carecast.forecasters import (
    forecast,
    forecast_activity,
    forecast_as_of,
    forecast_diaper,
    forecast_feeding,
    suggest_diaper_type,
    suggest_sleep_duration,
)
from carecast.schemas import (
    ActivityFamily,
    ActivityType,
    BabyConfig,
    BlendSource,
    ConfidenceTier,
    CustomPreferences,
    DiaperForecast,
    DiaperType,
    EventOutcome,
    FeedingForecast,
    Forecast,
    ForecastStatus,
    SleepForecast,
)

from .event_helpers import NOW, baby_aged, make_event, series


def _diaper(start, kind: DiaperType):
    return make_event(ActivityType.DIAPER, start, detail={"diaper_type": kind.value})


def test_newborn_with_no_history_uses_the_age_baseline() -> None:
    result = forecast_activity(ActivityFamily.DIAPER, [], baby_aged(5), NOW)

    assert result.interval_hours == 2.0
    assert result.confidence_tier == ConfidenceTier.LOW
    assert result.next_time == NOW + timedelta(hours=2)
    assert result.status == ForecastStatus.UPCOMING
    assert result.last_event_time is None
    assert result.breakdown.data_points == 0
    assert result.overdue_threshold_minutes == 30


def test_established_diaper_pattern_reaches_high_confidence() -> None:
    latest = NOW - timedelta(hours=1)
    events = series(ActivityType.DIAPER, [3, 2.5, 2, 3, 2.5], latest=latest)

    result = forecast_activity(ActivityFamily.DIAPER, events, baby_aged(20), NOW)

    assert result.confidence_tier == ConfidenceTier.HIGH
    assert result.interval_hours == pytest.approx(2.605)
    assert result.next_time == latest + timedelta(hours=result.interval_hours)
    assert result.breakdown.feeding_correlation_hours is None
    assert result.breakdown.sleep_correlation_hours is None
    assert len(result.recent_pattern) == 5
    assert result.recent_pattern[0].interval_from_previous == pytest.approx(3)
    assert result.is_overdue is False


def test_feeding_correlation_shortens_the_diaper_forecast() -> None:
    diapers = series(ActivityType.DIAPER, [3] * 5, latest=NOW - timedelta(hours=2))
    feedings = [make_event(ActivityType.BOTTLE, diaper.start_time - timedelta(hours=1)) for diaper in diapers]
    feedings.append(make_event(ActivityType.BOTTLE, NOW - timedelta(minutes=30)))

    result = forecast_activity(ActivityFamily.DIAPER, diapers + feedings, baby_aged(20), NOW)

    assert result.breakdown.feeding_correlation_hours == pytest.approx(0.5)
    assert result.interval_hours == pytest.approx(2.425)


def test_forecasts_are_deterministic_and_order_independent() -> None:
    events = series(ActivityType.NURSING, [2, 3, 2.5, 3], latest=NOW - timedelta(minutes=50))
    events += series(ActivityType.DIAPER, [2, 2], latest=NOW - timedelta(minutes=20))
    baby = baby_aged(40)

    for family in ActivityFamily:
        first = forecast(family, events, baby, NOW)
        again = forecast(family, events, baby, NOW)
        shuffled = forecast(family, list(reversed(events)), baby, NOW)
        assert first.model_dump() == again.model_dump() == shuffled.model_dump()


def test_long_gaps_do_not_count_as_samples() -> None:
    events = series(ActivityType.BOTTLE, [2, 40, 3], latest=NOW - timedelta(hours=1))

    result = forecast_activity(ActivityFamily.FEEDING, events, baby_aged(10), NOW)

    assert result.breakdown.data_points == 2
    assert result.confidence_tier == ConfidenceTier.MEDIUM
    assert result.interval_hours == pytest.approx(0.5 * 3.0 + 0.3 * 2.5 + 0.2 * 2.0)


def test_skipped_and_scheduled_events_are_not_history() -> None:
    latest = NOW - timedelta(hours=5)
    events = [
        make_event(ActivityType.BOTTLE, latest),
        make_event(ActivityType.BOTTLE, NOW + timedelta(hours=1), is_scheduled=True),
    ]
    overdue = forecast_activity(ActivityFamily.FEEDING, events, baby_aged(10), NOW)
    assert overdue.last_event_time == latest
    assert overdue.is_overdue is True
    assert overdue.recovery_time == NOW + timedelta(hours=1.8)

    skip = NOW - timedelta(minutes=30)
    events.append(make_event(ActivityType.BOTTLE, skip, outcome=EventOutcome.SKIPPED))
    suppressed = forecast_activity(ActivityFamily.FEEDING, events, baby_aged(10), NOW)
    assert suppressed.last_event_time == latest
    assert suppressed.is_overdue is False
    assert suppressed.recent_skip_time == skip
    assert suppressed.recovery_time == skip + timedelta(hours=1.8)


def test_manual_override_only_applies_to_feeding_without_birth_date() -> None:
    baby = BabyConfig(manual_interval_override_hours=2.0)
    assert forecast_activity(ActivityFamily.FEEDING, [], baby, NOW).interval_hours == 2.0
    assert forecast_activity(ActivityFamily.DIAPER, [], baby, NOW).interval_hours == 3.0

    aged = baby_aged(100, manual_interval_override_hours=2.0)
    assert forecast_activity(ActivityFamily.FEEDING, [], aged, NOW).interval_hours == 4.0


def test_feeding_suggestions_blend_recent_amounts() -> None:
    events = [
        make_event(ActivityType.BOTTLE, NOW - timedelta(hours=1), amount_ml=90),
        make_event(ActivityType.BOTTLE, NOW - timedelta(hours=4), amount_ml=110),
    ]

    result = forecast_feeding(events, baby_aged(10), NOW)

    assert result.suggested_type == ActivityType.BOTTLE
    assert result.suggested_amount.value == 97
    assert result.suggested_amount.source == BlendSource.RECENT
    assert result.suggested_duration.value == 25
    assert result.suggested_duration.source == BlendSource.AGE_BASED


def test_feeding_suggestions_honour_custom_preferences() -> None:
    events = [
        make_event(ActivityType.BOTTLE, NOW - timedelta(hours=1), amount_ml=90),
        make_event(ActivityType.BOTTLE, NOW - timedelta(hours=4), amount_ml=110),
    ]
    baby = baby_aged(10, custom_preferences=CustomPreferences(amount_ml=150))

    result = forecast_feeding(events, baby, NOW)

    assert result.suggested_amount.value == 118
    assert result.suggested_amount.source == BlendSource.CUSTOM


def test_nursing_durations_feed_the_duration_suggestion() -> None:
    events = [
        make_event(ActivityType.NURSING, NOW - timedelta(hours=1), end_time=NOW - timedelta(minutes=40)),
        make_event(ActivityType.NURSING, NOW - timedelta(hours=4), duration_minutes=20),
    ]
    result = forecast_feeding(events, baby_aged(10), NOW)
    assert result.suggested_duration.recent.value == pytest.approx(20)
    assert result.suggested_type == ActivityType.NURSING


def test_diaper_type_suggestion_breaks_ties_by_recency() -> None:
    kinds = [DiaperType.WET, DiaperType.DIRTY, DiaperType.WET, DiaperType.BOTH, DiaperType.DIRTY]
    history = [_diaper(NOW - timedelta(hours=idx), kind) for idx, kind in enumerate(kinds)]
    assert suggest_diaper_type(history) == DiaperType.WET

    history = [_diaper(NOW - timedelta(hours=idx), kind) for idx, kind in enumerate(kinds[1:])]
    assert suggest_diaper_type(history) == DiaperType.DIRTY
    assert suggest_diaper_type([]) is None


def test_diaper_forecast_carries_type_suggestion() -> None:
    history = [_diaper(NOW - timedelta(hours=idx * 2), DiaperType.DIRTY) for idx in range(3)]
    result = forecast_diaper(history, baby_aged(10), NOW)
    assert isinstance(result, DiaperForecast)
    assert result.suggested_diaper_type == DiaperType.DIRTY


def test_sleep_duration_suggestion() -> None:
    def sleeps(*durations):
        return [
            make_event(ActivityType.SLEEP, NOW - timedelta(hours=idx * 3), duration_minutes=minutes)
            for idx, minutes in enumerate(durations)
        ]

    assert suggest_sleep_duration(10, sleeps(60, 90, 30)) == 54
    assert suggest_sleep_duration(10, sleeps(60)) == 51
    assert suggest_sleep_duration(10, sleeps(600)) == 45
    assert suggest_sleep_duration(None, []) == 60


def test_dispatcher_returns_family_specific_results() -> None:
    assert isinstance(forecast(ActivityFamily.FEEDING, [], None, NOW), FeedingForecast)
    assert isinstance(forecast(ActivityFamily.SLEEP, [], None, NOW), SleepForecast)
    assert isinstance(forecast("pumping", [], None, NOW), Forecast)


def test_forecast_as_of_ignores_later_events() -> None:
    events = series(ActivityType.DIAPER, [3, 3, 3, 3], latest=NOW)
    as_of = NOW - timedelta(hours=6)
    baby = baby_aged(30)

    result = forecast_as_of(ActivityFamily.DIAPER, events, baby, as_of)

    assert result.last_event_time == as_of
    assert result.breakdown.data_points == 2
    assert result.age_days == 30
    assert result == forecast_activity(
        ActivityFamily.DIAPER, [event for event in events if event.start_time <= as_of], baby, as_of
    )


def test_policy_controls_which_correlations_run(monkeypatch) -> None:
    diaper_policy = POLICIES[ActivityFamily.DIAPER]
    monkeypatch.setitem(
        POLICIES,
        ActivityFamily.DIAPER,
        replace(diaper_policy, correlation_sources=frozenset({ActivityFamily.SLEEP})),
    )
    diapers = series(ActivityType.DIAPER, [3] * 5, latest=NOW - timedelta(hours=2))
    feedings = [make_event(ActivityType.BOTTLE, diaper.start_time - timedelta(hours=1)) for diaper in diapers]
    feedings.append(make_event(ActivityType.BOTTLE, NOW - timedelta(minutes=30)))

    result = forecast_activity(ActivityFamily.DIAPER, diapers + feedings, baby_aged(20), NOW)

    assert result.breakdown.feeding_correlation_hours is None
    assert result.interval_hours == pytest.approx(0.3 * 2.5 + 0.3 * 3 + 0.15 * 3 + 0.15 * 2.5 + 0.1 * 2.5)


def test_same_instant_events_do_not_depend_on_caller_order() -> None:
    small = make_event(ActivityType.BOTTLE, NOW - timedelta(hours=1), amount_ml=60)
    large = make_event(ActivityType.BOTTLE, NOW - timedelta(hours=1), amount_ml=120)
    older = make_event(ActivityType.NURSING, NOW - timedelta(hours=4), duration_minutes=15)

    first = forecast_feeding([small, large, older], baby_aged(10), NOW)
    swapped = forecast_feeding([large, small, older], baby_aged(10), NOW)
    assert first.model_dump() == swapped.model_dump()

    wet = _diaper(NOW - timedelta(hours=1), DiaperType.WET)
    dirty = _diaper(NOW - timedelta(hours=1), DiaperType.DIRTY)
    assert forecast_diaper([wet, dirty], baby_aged(10), NOW) == forecast_diaper([dirty, wet], baby_aged(10), NOW)


def test_naive_reference_time_is_treated_as_utc() -> None:
    events = [make_event(ActivityType.BOTTLE, NOW - timedelta(hours=1))]
    naive_now = NOW.replace(tzinfo=None)

    assert forecast_activity(ActivityFamily.FEEDING, events, baby_aged(10), naive_now) == forecast_activity(
        ActivityFamily.FEEDING, events, baby_aged(10), NOW
    )
    assert forecast_as_of(ActivityFamily.FEEDING, events, baby_aged(10), naive_now).last_event_time == events[0].start_time
