"""Pydantic models for tutor availability slots."""

from typing import ClassVar, List, Literal, Optional

from pydantic import Field

from .entity import CamelModel, Entity


DayOfWeek = Literal[
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
]


class AvailabilitySlot(Entity):
    # ``start_time < end_time`` is not checked.
    ID_PREFIX: ClassVar[str] = "avl"

    tutor_id: str
    day_of_week: DayOfWeek
    start_time: str
    end_time: str
    recurring: bool = True
    blocked_dates: List[str] = Field(default_factory=list)


class AvailabilityCreate(CamelModel):
    day_of_week: Optional[DayOfWeek] = None
    start_time: Optional[str] = Field(None, examples=["16:00"])
    end_time: Optional[str] = Field(None, examples=["18:00"])
    recurring: Optional[bool] = None
    blocked_dates: Optional[List[str]] = None


class AvailabilityUpdate(AvailabilityCreate):
    pass
