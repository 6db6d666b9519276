"""Pydantic schemas shared across the engine and the API."""
from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ActivityType(str, Enum):
    BOTTLE = "bottle"
    NURSING = "nursing"
    SOLIDS = "solids"
    DIAPER = "diaper"
    SLEEP = "sleep"
    PUMPING = "pumping"
    OTHER = "other"


class ActivityFamily(str, Enum):
    FEEDING = "feeding"
    DIAPER = "diaper"
    SLEEP = "sleep"
    PUMPING = "pumping"


ACTIVITY_FAMILIES: Dict[ActivityType, Optional[ActivityFamily]] = {
    ActivityType.BOTTLE: ActivityFamily.FEEDING,
    ActivityType.NURSING: ActivityFamily.FEEDING,
    ActivityType.SOLIDS: ActivityFamily.FEEDING,
    ActivityType.DIAPER: ActivityFamily.DIAPER,
    ActivityType.SLEEP: ActivityFamily.SLEEP,
    ActivityType.PUMPING: ActivityFamily.PUMPING,
    ActivityType.OTHER: None,
}


class EventOutcome(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"


class DiaperType(str, Enum):
    WET = "wet"
    DIRTY = "dirty"
    BOTH = "both"


class FeedingDetail(BaseModel):
    kind: Literal["feeding"] = "feeding"
    side: Optional[str] = Field(default=None, description="left | right | both")
    notes: Optional[str] = None


class DiaperDetail(BaseModel):
    kind: Literal["diaper"] = "diaper"
    diaper_type: Optional[DiaperType] = None


class SleepDetail(BaseModel):
    kind: Literal["sleep"] = "sleep"
    sleep_type: Optional[str] = Field(default=None, description="nap | night")
    location: Optional[str] = None


class PumpingDetail(BaseModel):
    kind: Literal["pumping"] = "pumping"
    left_ml: Optional[float] = Field(default=None, ge=0)
    right_ml: Optional[float] = Field(default=None, ge=0)


EventDetail = Annotated[
    Union[FeedingDetail, DiaperDetail, SleepDetail, PumpingDetail],
    Field(discriminator="kind"),
]


def _as_activity_type(value: Any) -> Optional[ActivityType]:
    if isinstance(value, ActivityType):
        return value
    try:
        return ActivityType(value)
    except ValueError:
        return None


def _legacy_diaper_type(detail: Dict[str, Any]) -> Optional[str]:
    legacy = detail.get("type")
    if isinstance(legacy, str):
        return legacy
    if detail.get("wet") and detail.get("dirty"):
        return DiaperType.BOTH.value
    if detail.get("wet"):
        return DiaperType.WET.value
    if detail.get("dirty"):
        return DiaperType.DIRTY.value
    return None


class Event(BaseModel):
    """One logged or scheduled care event. Read-only once validated."""

    model_config = ConfigDict(frozen=True)

    activity_type: ActivityType
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_minutes: Optional[float] = Field(default=None, ge=0)
    amount_ml: Optional[float] = Field(default=None, ge=0)
    detail: Optional[EventDetail] = None
    is_scheduled: bool = False
    outcome: EventOutcome = EventOutcome.COMPLETED
    logged_by: Optional[str] = Field(default=None, description="Caregiver who logged the event")

    @model_validator(mode="before")
    @classmethod
    def _tag_detail(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        detail = data.get("detail")
        if not isinstance(detail, dict):
            return data
        data = dict(data)
        detail = dict(detail)
        # Older payloads carried the dismissal flag inside the detail map.
        if detail.pop("skipped", None) is True and "outcome" not in data:
            data["outcome"] = EventOutcome.SKIPPED
        if "kind" not in detail:
            activity_type = _as_activity_type(data.get("activity_type"))
            family = ACTIVITY_FAMILIES.get(activity_type) if activity_type else None
            if family is None:
                data["detail"] = None
                return data
            detail["kind"] = family.value
        if detail["kind"] == ActivityFamily.DIAPER.value and "diaper_type" not in detail:
            detail["diaper_type"] = _legacy_diaper_type(detail)
        data["detail"] = detail
        return data

    @field_validator("start_time", "end_time")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _detail_matches_activity(self) -> "Event":
        if self.detail is not None and self.detail.kind != getattr(self.family, "value", None):
            raise ValueError(
                f"{self.detail.kind} detail cannot be attached to a {self.activity_type.value} event"
            )
        return self

    @property
    def family(self) -> Optional[ActivityFamily]:
        return ACTIVITY_FAMILIES[self.activity_type]

    @property
    def is_skipped(self) -> bool:
        return self.outcome == EventOutcome.SKIPPED

    @property
    def diaper_type(self) -> Optional[DiaperType]:
        if isinstance(self.detail, DiaperDetail):
            return self.detail.diaper_type
        return None

    @property
    def sleep_type(self) -> Optional[str]:
        if isinstance(self.detail, SleepDetail):
            return self.detail.sleep_type
        return None

    @property
    def effective_duration_minutes(self) -> Optional[float]:
        if self.duration_minutes is not None:
            return self.duration_minutes
        if self.end_time is not None and self.end_time >= self.start_time:
            return (self.end_time - self.start_time).total_seconds() / 60
        return None


class CustomPreferences(BaseModel):
    amount_ml: Optional[float] = Field(default=None, ge=0)
    duration_minutes: Optional[float] = Field(default=None, ge=0)
    custom_weight: float = Field(default=0.4, ge=0)
    recent_weight: float = Field(default=0.4, ge=0)
    age_based_weight: float = Field(default=0.2, ge=0)


class BabyConfig(BaseModel):
    birth_date: Optional[date] = None
    manual_interval_override_hours: Optional[float] = Field(
        default=None,
        gt=0,
        description="Feeding interval used when the birth date is unknown",
    )
    custom_preferences: Optional[CustomPreferences] = None


class ConfidenceTier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


TIER_RANK = {ConfidenceTier.LOW: 0, ConfidenceTier.MEDIUM: 1, ConfidenceTier.HIGH: 2}


class ForecastStatus(str, Enum):
    UPCOMING = "upcoming"
    SOON = "soon"
    OVERDUE = "overdue"


class TierWeights(BaseModel):
    model_config = ConfigDict(frozen=True)

    age_based: float
    recent_average: float = 0.0
    last_interval: float = 0.0
    feeding_correlation: float = 0.0
    sleep_correlation: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.age_based
            + self.recent_average
            + self.last_interval
            + self.feeding_correlation
            + self.sleep_correlation
        )


class CalculationBreakdown(BaseModel):
    age_based_interval: float
    recent_average_interval: Optional[float] = None
    last_interval: Optional[float] = None
    feeding_correlation_hours: Optional[float] = None
    sleep_correlation_hours: Optional[float] = None
    weights: TierWeights
    data_points: int = 0


class EventAttributes(BaseModel):
    activity_type: ActivityType
    amount_ml: Optional[float] = None
    duration_minutes: Optional[float] = None
    diaper_type: Optional[DiaperType] = None
    sleep_type: Optional[str] = None
    logged_by: Optional[str] = None


class PatternEntry(EventAttributes):
    time: datetime
    interval_from_previous: Optional[float] = Field(
        default=None, description="Hours since the previous qualifying event"
    )


class Forecast(BaseModel):
    activity: ActivityFamily
    next_time: datetime
    interval_hours: float
    confidence_tier: ConfidenceTier
    status: ForecastStatus
    is_overdue: bool = False
    overdue_minutes: Optional[float] = None
    recovery_time: Optional[datetime] = None
    recent_skip_time: Optional[datetime] = None
    last_event_time: Optional[datetime] = None
    last_event_attributes: Optional[EventAttributes] = None
    age_days: Optional[int] = None
    guidance: str = ""
    overdue_threshold_minutes: float
    breakdown: CalculationBreakdown
    recent_pattern: List[PatternEntry] = Field(default_factory=list)


class BlendSource(str, Enum):
    CUSTOM = "custom"
    RECENT = "recent"
    AGE_BASED = "age-based"
    BLENDED = "blended"


class BlendContribution(BaseModel):
    value: Optional[float] = None
    weight: float = 0.0
    contribution: float = 0.0


class BlendResult(BaseModel):
    value: float
    source: BlendSource
    custom: BlendContribution
    recent: BlendContribution
    age_based: BlendContribution

    @property
    def total_weight(self) -> float:
        return self.custom.weight + self.recent.weight + self.age_based.weight


class FeedingForecast(BaseModel):
    model_config = ConfigDict(extra="forbid")

    forecast: Forecast
    suggested_amount: BlendResult
    suggested_duration: BlendResult
    suggested_type: Optional[ActivityType] = None


class DiaperForecast(BaseModel):
    model_config = ConfigDict(extra="forbid")

    forecast: Forecast
    suggested_diaper_type: Optional[DiaperType] = None


class SleepForecast(BaseModel):
    model_config = ConfigDict(extra="forbid")

    forecast: Forecast
    suggested_duration_minutes: int


class DailyGoals(BaseModel):
    activity: ActivityFamily
    count: int
    amount_ml: Optional[int] = None
    wet_count: Optional[int] = None
    dirty_count: Optional[int] = None
    nap_count: Optional[int] = None
    sleep_hours: Optional[float] = None
    age_weight: float
    pattern_weight: float
    age_based_interval: float
    predicted_interval: float
    data_points: int = 0


class CaregiverScore(BaseModel):
    caregiver_id: str
    score: float
    feedings_last_24h: int
    hours_since_last_feeding: Optional[float] = None


class CaregiverSuggestion(BaseModel):
    suggested: Optional[CaregiverScore] = None
    ranking: List[CaregiverScore] = Field(default_factory=list)
