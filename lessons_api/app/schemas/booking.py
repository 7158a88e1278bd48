"""
Pydantic models for lesson bookings.

A booking is made by a parent for one of their children.  Its
``total`` is derived from the rate, duration and number of pupils when
the booking is created and is stored thereafter; changing the rate
later does not recompute it.
"""

from typing import ClassVar, Literal, Optional

from pydantic import Field

from .entity import CamelModel, Entity


LessonType = Literal["one_to_one", "group"]
BookingStatus = Literal["pending", "confirmed", "completed", "cancelled"]


class Booking(Entity):
    ID_PREFIX: ClassVar[str] = "bk"

    parent_id: str
    student_name: str
    # ``None`` means any available tutor.
    tutor_id: Optional[str] = None
    subject: str
    lesson_type: LessonType = "one_to_one"
    date: str  # YYYY-MM-DD
    slot: str  # HH:MM-HH:MM
    hours: float = 2
    pupils_count: int = 1
    rate_per_hour: float = 0
    total: float = 0
    currency: str = "GBP"
    status: BookingStatus = "pending"
    meeting_link: Optional[str] = None


class BookingCreate(CamelModel):
    """Schema for booking a lesson.

    ``rate_per_hour`` is optional; when omitted it is taken from the
    configured rate for ``lesson_type``.
    """

    student_name: Optional[str] = Field(None, examples=["Tom"])
    subject: Optional[str] = Field(None, examples=["Math"])
    lesson_type: Optional[LessonType] = Field(None, examples=["one_to_one"])
    date: Optional[str] = Field(None, examples=["2024-09-01"])
    slot: Optional[str] = Field(None, examples=["16:00-18:00"])
    tutor_id: Optional[str] = None
    pupils_count: Optional[int] = Field(None, ge=1)
    rate_per_hour: Optional[float] = Field(None, ge=0)


class BookingUpdate(CamelModel):
    """Fields a caller may change on an existing booking.

    Which of them a given role may actually change is decided by the
    service for that role.
    """

    tutor_id: Optional[str] = None
    subject: Optional[str] = None
    date: Optional[str] = None
    slot: Optional[str] = None
    status: Optional[BookingStatus] = None
    meeting_link: Optional[str] = None
    rate_per_hour: Optional[float] = Field(None, ge=0)
    total: Optional[float] = Field(None, ge=0)


class CheckoutRequest(CamelModel):
    payment_method: str = Field("card", examples=["card"])
