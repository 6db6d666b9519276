from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Optional, Union


def as_utc(value: Union[date, datetime]) -> datetime:
    """Aware UTC datetime for ``value``; naive values and plain dates are taken as UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def baby_age_days(
    birth_date: Optional[Union[date, datetime]],
    reference: Union[date, datetime],
) -> Optional[int]:
    """Whole days elapsed since birth at ``reference``; None when the birth date is unknown.

    A reference earlier than the birth date clamps to 0.
    """

    if birth_date is None:
        return None
    elapsed = as_utc(reference) - as_utc(birth_date)
    if elapsed.total_seconds() <= 0:
        return 0
    return elapsed.days
