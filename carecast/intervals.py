"""Interval extraction over a single activity family's event history."""
from __future__ import annotations

from datetime import datetime
from typing import Collection, Iterable, List, Optional

from .schemas import ActivityType, Event


def _chronological_key(event: Event):
    # Ties on start_time are broken by the event JSON.
    return event.start_time, event.model_dump_json()


def newest_first(events: Iterable[Event]) -> List[Event]:
    return sorted(events, key=_chronological_key, reverse=True)


def qualifying_events(
    events: Iterable[Event],
    activity_types: Collection[ActivityType],
    limit: Optional[int] = None,
) -> List[Event]:
    """Real (not scheduled, not skipped) events of the given types, newest first."""

    selected = newest_first(
        event
        for event in events
        if event.activity_type in activity_types and not event.is_scheduled and not event.is_skipped
    )
    if limit is not None:
        return selected[:limit]
    return selected


def latest_skip_time(
    events: Iterable[Event],
    activity_types: Collection[ActivityType],
    until: Optional[datetime] = None,
) -> Optional[datetime]:
    skips = [
        event.start_time
        for event in events
        if event.activity_type in activity_types
        and event.is_skipped
        and (until is None or event.start_time <= until)
    ]
    return max(skips) if skips else None


def hours_between(later: datetime, earlier: datetime) -> float:
    return (later - earlier).total_seconds() / 3600


def interval_samples(events: List[Event]) -> List[float]:
    """Hours between each event and the one before it.

    ``events`` must be newest first; the result is newest first and one element
    shorter than the input because the oldest event has no predecessor.
    """

    return [hours_between(newer.start_time, older.start_time) for newer, older in zip(events, events[1:])]


def valid_samples(samples: Iterable[float], ceiling: float) -> List[float]:
    # Zero gaps are duplicates; gaps past the ceiling are usually missed logs.
    return [hours for hours in samples if 0 < hours < ceiling]


def mean(values: List[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)
