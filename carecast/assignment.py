"""Suggest which caregiver should take the next feeding."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List, Sequence

from .age import as_utc
from .blender import FEEDING_TYPES
from .intervals import hours_between, qualifying_events
from .schemas import CaregiverScore, CaregiverSuggestion, Event

ROTATION_WINDOW = timedelta(hours=24)
POINTS_PER_FEEDING = 10
NEVER_FED_BONUS = 100


def score_caregiver(caregiver_id: str, events: Iterable[Event], now: datetime) -> CaregiverScore:
    now = as_utc(now)
    # Lower is better: recent feedings add points, time since their last one removes them.
    window_start = now - ROTATION_WINDOW
    feedings = [
        event
        for event in qualifying_events(events, FEEDING_TYPES)
        if event.logged_by == caregiver_id and window_start <= event.start_time <= now
    ]
    score = float(len(feedings) * POINTS_PER_FEEDING)
    hours_since = None
    if feedings:
        hours_since = hours_between(now, feedings[0].start_time)
        score -= hours_since
    else:
        score -= NEVER_FED_BONUS
    return CaregiverScore(
        caregiver_id=caregiver_id,
        score=score,
        feedings_last_24h=len(feedings),
        hours_since_last_feeding=hours_since,
    )


def suggest_caregiver(caregiver_ids: Sequence[str], events: Iterable[Event], now: datetime) -> CaregiverSuggestion:
    events = list(events)
    now = as_utc(now)
    ranking: List[CaregiverScore] = sorted(
        (score_caregiver(caregiver_id, events, now) for caregiver_id in dict.fromkeys(caregiver_ids)),
        key=lambda item: (item.score, item.caregiver_id),
    )
    return CaregiverSuggestion(suggested=ranking[0] if ranking else None, ranking=ranking)
