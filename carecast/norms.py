"""Age-banded developmental norms: baseline intervals, overdue thresholds and guidance."""
from __future__ import annotations

from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from .config import CONFIG
from .schemas import ActivityFamily

DEFAULT_INTERVAL_HOURS = CONFIG.default_interval_hours
DEFAULT_GUIDANCE = CONFIG.default_guidance


class AgeBand(NamedTuple):
    max_age_days: Optional[int]  # None = open-ended last band
    interval_hours: float
    guidance: str


INTERVAL_BANDS: Dict[ActivityFamily, List[AgeBand]] = {
    ActivityFamily.FEEDING: [
        AgeBand(7, 2.5, "Newborn tummies are tiny; expect feeds every 2–3 hours, day and night."),
        AgeBand(30, 3.0, "Feeds are settling into a rhythm of about every 3 hours."),
        AgeBand(60, 3.5, "Larger feeds mean slightly longer stretches, roughly every 3–4 hours."),
        AgeBand(180, 4.0, "Most babies this age feed about every 4 hours."),
        AgeBand(None, 4.5, "Established feeding pattern; feeds every 4–5 hours are typical."),
    ],
    ActivityFamily.DIAPER: [
        AgeBand(7, 2.0, "Newborns need 8–12 changes a day; check around every 2 hours."),
        AgeBand(30, 2.5, "Expect a change every 2–3 hours, usually after feeds."),
        AgeBand(90, 3.0, "Changes every ~3 hours keep skin comfortable."),
        AgeBand(180, 3.5, "Output is slowing down; check every 3–4 hours."),
        AgeBand(None, 4.0, "Older babies usually need a change every ~4 hours."),
    ],
    ActivityFamily.SLEEP: [
        AgeBand(7, 1.5, "Newborns drift off after 45–60 minute wake windows."),
        AgeBand(30, 2.0, "Aim for 60–90 minute wake windows between sleeps."),
        AgeBand(90, 2.5, "Wake windows stretch to 75–120 minutes."),
        AgeBand(180, 3.0, "Naps consolidate; expect 2–2.5 hour wake windows."),
        AgeBand(365, 4.0, "Two to three naps a day with 3–4 hour wake windows."),
        AgeBand(None, 5.0, "One or two naps with longer wake windows."),
    ],
    ActivityFamily.PUMPING: [
        AgeBand(7, 2.5, "Pump every 2–3 hours to establish supply."),
        AgeBand(30, 3.0, "Keep sessions about every 3 hours while supply builds."),
        AgeBand(90, 3.5, "Supply is established; every 3–4 hours maintains it."),
        AgeBand(None, 4.0, "Sessions every ~4 hours are usually enough to maintain supply."),
    ],
}

OVERDUE_THRESHOLD_BANDS: Dict[ActivityFamily, List[Tuple[Optional[int], float]]] = {
    ActivityFamily.FEEDING: [(7, 15), (14, 20), (30, 25), (60, 30), (90, 35), (None, 45)],
    ActivityFamily.SLEEP: [(7, 20), (14, 25), (30, 30), (60, 40), (90, 50), (None, 60)],
    ActivityFamily.DIAPER: [(7, 30), (14, 40), (30, 50), (60, 60), (90, 75), (None, 90)],
    ActivityFamily.PUMPING: [(7, 20), (14, 25), (30, 30), (60, 40), (90, 45), (None, 60)],
}

FEEDING_DURATION_BANDS: List[Tuple[Optional[int], float]] = [(7, 30), (30, 25), (90, 20), (None, 15)]
FEEDING_AMOUNT_BANDS: List[Tuple[Optional[int], float]] = [
    (2, 45),
    (7, 75),
    (14, 90),
    (30, 120),
    (60, 150),
    (None, 180),
]
SLEEP_DURATION_BANDS: List[Tuple[Optional[int], float]] = [(90, 45), (180, 75), (365, 90), (None, 105)]
DIRTY_DIAPER_BANDS: List[Tuple[Optional[int], float]] = [(7, 3), (60, 2), (None, 1)]
NAP_COUNT_BANDS: List[Tuple[Optional[int], float]] = [
    (7, 5),
    (90, 4),
    (270, 3),
    (547, 2),
    (None, 1),
]
SLEEP_HOURS_BANDS: List[Tuple[Optional[int], float]] = [
    (7, 16),
    (90, 15),
    (180, 14),
    (365, 13),
    (730, 12),
    (None, 11),
]

DEFAULT_FEEDING_DURATION = 20.0
DEFAULT_FEEDING_AMOUNT_ML = 120.0
DEFAULT_SLEEP_DURATION = 60.0


def _lookup(bands: Sequence[Tuple], age_days: int):
    for band in bands:
        if band[0] is None or age_days <= band[0]:
            return band
    return bands[-1]


def interval_band(family: ActivityFamily, age_days: int) -> AgeBand:
    return _lookup(INTERVAL_BANDS[family], age_days)


def age_based_interval(family: ActivityFamily, age_days: Optional[int]) -> float:
    """Baseline hours between events for a baby of ``age_days``."""
    if age_days is None:
        return DEFAULT_INTERVAL_HOURS
    return interval_band(family, age_days).interval_hours


def age_guidance(family: ActivityFamily, age_days: Optional[int]) -> str:
    if age_days is None:
        return DEFAULT_GUIDANCE
    return interval_band(family, age_days).guidance


def overdue_threshold(family: ActivityFamily, age_days: Optional[int]) -> float:
    """Minutes past the predicted time before a forecast counts as overdue.

    Unknown ages use the newborn (strictest) threshold.
    """
    return _lookup(OVERDUE_THRESHOLD_BANDS[family], age_days or 0)[1]


def overdue_threshold_description(family: ActivityFamily, age_days: Optional[int]) -> str:
    threshold = overdue_threshold(family, age_days)
    age = age_days or 0
    if age <= 7:
        context = "newborns need frequent care"
    elif age <= 30:
        context = "young babies need regular care"
    elif age <= 90:
        context = "babies this age are developing patterns"
    else:
        context = "babies this age have more flexible schedules"
    return f"Marked overdue after {threshold:g} minutes because {context}"


def typical_feeding_duration(age_days: Optional[int]) -> float:
    if age_days is None:
        return DEFAULT_FEEDING_DURATION
    return _lookup(FEEDING_DURATION_BANDS, age_days)[1]


def typical_feeding_amount_ml(age_days: Optional[int]) -> float:
    if age_days is None:
        return DEFAULT_FEEDING_AMOUNT_ML
    return _lookup(FEEDING_AMOUNT_BANDS, age_days)[1]


def typical_sleep_duration(age_days: Optional[int]) -> float:
    if age_days is None:
        return DEFAULT_SLEEP_DURATION
    return _lookup(SLEEP_DURATION_BANDS, age_days)[1]


def daily_dirty_diaper_goal(age_days: int) -> int:
    return int(_lookup(DIRTY_DIAPER_BANDS, age_days)[1])


def daily_nap_goal(age_days: int) -> int:
    return int(_lookup(NAP_COUNT_BANDS, age_days)[1])


def daily_sleep_hours_goal(age_days: int) -> float:
    return _lookup(SLEEP_HOURS_BANDS, age_days)[1]


def wet_diaper_share(age_days: int) -> float:
    return 0.7 if age_days <= 30 else 0.6
