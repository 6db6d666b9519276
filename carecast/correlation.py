"""Cross-activity timing correlations used to nudge diaper forecasts."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from .intervals import mean
from .schemas import Event

FEEDING_WINDOW_MINUTES = 240
SLEEP_WINDOW_MINUTES = 120
FEEDING_SAMPLE_SIZE = 10
SLEEP_SAMPLE_SIZE = 8
MIN_FEEDING_CONFIDENCE = 0.3


@dataclass(frozen=True)
class CorrelationResult:
    offset_minutes: Optional[float]
    confidence: float
    matched: int = 0


@dataclass(frozen=True)
class CorrelationFactors:
    feeding_hours: Optional[float] = None
    sleep_hours: Optional[float] = None


NO_CORRELATION = CorrelationResult(offset_minutes=None, confidence=0.0)


def _minutes(later: datetime, earlier: datetime) -> float:
    return (later - earlier).total_seconds() / 60


def _summarize(offsets: List[float], sample_size: int) -> CorrelationResult:
    if not offsets:
        return NO_CORRELATION
    return CorrelationResult(
        offset_minutes=mean(offsets),
        confidence=min(len(offsets) / sample_size, 1.0),
        matched=len(offsets),
    )


def feeding_diaper_correlation(feedings: List[Event], diapers: List[Event]) -> CorrelationResult:
    """Average minutes from a feeding to the first diaper change after it."""

    offsets: List[float] = []
    for feeding in feedings:
        after = [
            _minutes(diaper.start_time, feeding.start_time)
            for diaper in diapers
            if 0 < _minutes(diaper.start_time, feeding.start_time) <= FEEDING_WINDOW_MINUTES
        ]
        if after:
            offsets.append(min(after))
    return _summarize(offsets, FEEDING_SAMPLE_SIZE)


def sleep_diaper_correlation(sleeps: List[Event], diapers: List[Event]) -> CorrelationResult:
    """Average minutes between a sleep and the diaper change closest before it."""

    offsets: List[float] = []
    for sleep in sleeps:
        before = [
            _minutes(sleep.start_time, diaper.start_time)
            for diaper in diapers
            if 0 < _minutes(sleep.start_time, diaper.start_time) <= SLEEP_WINDOW_MINUTES
        ]
        if before:
            offsets.append(min(before))
    return _summarize(offsets, SLEEP_SAMPLE_SIZE)


def correlation_factors(
    feeding: CorrelationResult,
    sleep: CorrelationResult,
    last_feeding_time: Optional[datetime],
    now: datetime,
) -> CorrelationFactors:
    """Convert correlations into hour-valued blend terms; None where no signal applies."""

    feeding_hours: Optional[float] = None
    if (
        feeding.offset_minutes is not None
        and feeding.confidence > MIN_FEEDING_CONFIDENCE
        and last_feeding_time is not None
    ):
        since_feeding = _minutes(now, last_feeding_time)
        if 0 <= since_feeding < FEEDING_WINDOW_MINUTES:
            expected_from_now = feeding.offset_minutes - since_feeding
            if expected_from_now > 0:
                feeding_hours = expected_from_now / 60

    sleep_hours: Optional[float] = None
    if sleep.offset_minutes is not None:
        sleep_hours = sleep.offset_minutes / 60

    return CorrelationFactors(feeding_hours=feeding_hours, sleep_hours=sleep_hours)
