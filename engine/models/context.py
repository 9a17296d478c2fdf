"""
Context model: the ambient moment (time of day, day of week, season).

Context is always passed explicitly into the engine. The server builds one from
the request (or from the wall clock) with Context.from_datetime().
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class TimeOfDay(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    LATE_NIGHT = "late_night"


class DayType(str, Enum):
    WEEKDAY = "weekday"
    FRIDAY = "friday"
    WEEKEND = "weekend"


class Season(str, Enum):
    WINTER = "winter"
    SPRING = "spring"
    SUMMER = "summer"
    AUTUMN = "autumn"


def time_of_day_for_hour(hour: int) -> TimeOfDay:
    """Bucket an hour (0-23): morning 5-12, afternoon 12-17, evening 17-22, else late night."""
    if 5 <= hour < 12:
        return TimeOfDay.MORNING
    if 12 <= hour < 17:
        return TimeOfDay.AFTERNOON
    if 17 <= hour < 22:
        return TimeOfDay.EVENING
    return TimeOfDay.LATE_NIGHT


def day_type_for_weekday(weekday: int) -> DayType:
    """weekday follows datetime.weekday(): Monday=0 .. Sunday=6."""
    if weekday == 4:
        return DayType.FRIDAY
    if weekday >= 5:
        return DayType.WEEKEND
    return DayType.WEEKDAY


def season_for_month(month: int) -> Season:
    if month in (12, 1, 2):
        return Season.WINTER
    if month in (3, 4, 5):
        return Season.SPRING
    if month in (6, 7, 8):
        return Season.SUMMER
    return Season.AUTUMN


class Context(BaseModel):
    """Ambient inputs for emotional mapping and greeting text."""

    time_of_day: TimeOfDay = TimeOfDay.EVENING
    day_type: DayType = DayType.WEEKDAY
    season: Optional[Season] = None

    @classmethod
    def from_datetime(cls, moment: datetime) -> "Context":
        return cls(
            time_of_day=time_of_day_for_hour(moment.hour),
            day_type=day_type_for_weekday(moment.weekday()),
            season=season_for_month(moment.month),
        )

    def label(self) -> str:
        """Short human label, e.g. 'late-night weekend'."""
        tod = self.time_of_day.value.replace("_", "-")
        return f"{tod} {self.day_type.value}"
