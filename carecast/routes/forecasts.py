from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional, Union

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..age import as_utc
from ..assignment import suggest_caregiver
from ..forecasters import AnyForecast, forecast, forecast_as_of
from ..goals import daily_goals
from ..schemas import (
    ActivityFamily,
    BabyConfig,
    CaregiverSuggestion,
    DailyGoals,
    DiaperForecast,
    Event,
    FeedingForecast,
    Forecast,
    SleepForecast,
)

router = APIRouter(prefix="/api/v1", tags=["forecasts"])
logger = logging.getLogger(__name__)


class ForecastRequest(BaseModel):
    events: List[Event] = Field(default_factory=list)
    baby: BabyConfig = Field(default_factory=BabyConfig)
    now: Optional[datetime] = Field(
        default=None, description="Reference instant; defaults to the server clock"
    )


class AsOfRequest(BaseModel):
    events: List[Event] = Field(default_factory=list)
    baby: BabyConfig = Field(default_factory=BabyConfig)
    as_of: datetime


class AssignmentRequest(BaseModel):
    caregiver_ids: List[str] = Field(..., min_length=1)
    events: List[Event] = Field(default_factory=list)
    now: Optional[datetime] = None


def _reference_now(value: Optional[datetime]) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    return as_utc(value)


def _resolve_family(family: str) -> ActivityFamily:
    try:
        return ActivityFamily(family)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Unsupported activity: {family}") from exc


@router.post(
    "/forecasts/{family}",
    response_model=Union[FeedingForecast, DiaperForecast, SleepForecast, Forecast],
)
async def forecast_endpoint(family: str, payload: ForecastRequest) -> AnyForecast:
    """Forecast the next event for one activity family."""

    activity = _resolve_family(family)
    logger.info(
        "forecast request",
        extra={"activity": activity.value, "event_count": len(payload.events)},
    )
    return forecast(activity, payload.events, payload.baby, _reference_now(payload.now))


@router.post("/forecasts/{family}/as-of", response_model=Forecast)
async def forecast_as_of_endpoint(family: str, payload: AsOfRequest) -> Forecast:
    activity = _resolve_family(family)
    return forecast_as_of(activity, payload.events, payload.baby, _reference_now(payload.as_of))


@router.post("/goals/{family}", response_model=DailyGoals)
async def goals_endpoint(family: str, payload: ForecastRequest) -> DailyGoals:
    activity = _resolve_family(family)
    return daily_goals(activity, payload.events, payload.baby, _reference_now(payload.now))


@router.post("/assignments/suggest", response_model=CaregiverSuggestion)
async def assignment_endpoint(payload: AssignmentRequest) -> CaregiverSuggestion:
    logger.info(
        "caregiver rotation request",
        extra={"caregivers": len(payload.caregiver_ids), "event_count": len(payload.events)},
    )
    return suggest_caregiver(payload.caregiver_ids, payload.events, _reference_now(payload.now))
