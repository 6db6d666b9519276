"""Overdue / skip state for a forecast, derived fresh from the reference instant."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .config import CONFIG
from .schemas import ForecastStatus


@dataclass(frozen=True)
class OverdueState:
    status: ForecastStatus
    is_overdue: bool
    minutes_until: float
    overdue_minutes: Optional[float] = None
    recovery_time: Optional[datetime] = None
    skip_active: bool = False


def minutes_between(later: datetime, earlier: datetime) -> float:
    return (later - earlier).total_seconds() / 60


def soon_window(threshold_minutes: float) -> float:
    return min(CONFIG.soon_window_minutes, threshold_minutes / 2)


def classify(minutes_until: float, threshold_minutes: float) -> ForecastStatus:
    if minutes_until < -threshold_minutes:
        return ForecastStatus.OVERDUE
    if minutes_until <= soon_window(threshold_minutes):
        return ForecastStatus.SOON
    return ForecastStatus.UPCOMING


def skip_is_active(skip_time: Optional[datetime], now: datetime, interval_hours: float) -> bool:
    if skip_time is None:
        return False
    elapsed = now - skip_time
    return timedelta(0) <= elapsed < timedelta(hours=interval_hours)


def resolve_status(
    next_time: datetime,
    now: datetime,
    threshold_minutes: float,
    interval_hours: float,
    recent_skip_time: Optional[datetime] = None,
    recovery_factor: Optional[float] = None,
) -> OverdueState:
    """Derive upcoming/soon/overdue for ``next_time`` as seen at ``now``.

    A skip logged within the last ``interval_hours`` suppresses the overdue flag
    and reports ``skip + recovery_factor * interval`` as the recovery time. The
    status still comes from ``next_time``, with overdue downgraded to soon.
    """

    factor = CONFIG.recovery_factor if recovery_factor is None else recovery_factor
    recovery_delta = timedelta(hours=interval_hours * factor)
    minutes_until = minutes_between(next_time, now)

    if skip_is_active(recent_skip_time, now, interval_hours):
        recovery_time = recent_skip_time + recovery_delta
        status = (
            ForecastStatus.SOON
            if minutes_until <= soon_window(threshold_minutes)
            else ForecastStatus.UPCOMING
        )
        return OverdueState(
            status=status,
            is_overdue=False,
            minutes_until=minutes_until,
            recovery_time=recovery_time,
            skip_active=True,
        )

    status = classify(minutes_until, threshold_minutes)
    if status == ForecastStatus.OVERDUE:
        return OverdueState(
            status=status,
            is_overdue=True,
            minutes_until=minutes_until,
            overdue_minutes=abs(minutes_until),
            recovery_time=now + recovery_delta,
        )
    return OverdueState(status=status, is_overdue=False, minutes_until=minutes_until)
