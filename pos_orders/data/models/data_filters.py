from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Union

from pydantic import BaseModel, Field, field_validator, model_validator


def to_local_naive(value: datetime) -> datetime:
    """Aware datetimes become local wall-clock time; naive ones are already local."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


class DateWindow(BaseModel):
    """Half-open time window [start_ts, end_ts) in local time."""
    start_ts: datetime = Field(description="Inclusive start of the window")
    end_ts: datetime = Field(description="Exclusive end of the window")

    @field_validator("start_ts", "end_ts")
    @classmethod
    def _local_time(cls, value: datetime) -> datetime:
        return to_local_naive(value)

    @model_validator(mode="after")
    def _ordered(self) -> "DateWindow":
        if self.end_ts < self.start_ts:
            raise ValueError("end_ts must not be before start_ts")
        return self


def start_of_day(value: Union[date, datetime]) -> datetime:
    """Local midnight of the calendar day containing value."""
    if isinstance(value, datetime):
        value = to_local_naive(value).date()
    return datetime.combine(value, time.min)


def day_window(value: Union[date, datetime]) -> DateWindow:
    """The local calendar day containing value, as [00:00, +24h)."""
    start = start_of_day(value)
    return DateWindow(start_ts=start, end_ts=start + timedelta(hours=24))
