"""
Pydantic models for a tutor's own records: teaching materials, notes
kept against a lesson, earnings from completed lessons and payout
preferences.
"""

from typing import ClassVar, FrozenSet, List, Literal, Optional

from pydantic import Field

from .entity import CamelModel, Entity


EarningStatus = Literal["pending", "paid"]
PayoutSchedule = Literal["weekly", "fortnightly", "monthly"]


class LessonMaterial(Entity):
    ID_PREFIX: ClassVar[str] = "mat"

    tutor_id: str
    title: str
    description: Optional[str] = None
    subject: str = ""
    file_url: str
    file_type: str = ""
    booking_id: Optional[str] = None


class LessonMaterialCreate(CamelModel):
    title: Optional[str] = Field(None, examples=["Algebra basics"])
    description: Optional[str] = None
    subject: Optional[str] = None
    file_url: Optional[str] = Field(None, examples=["https://example.com/algebra.pdf"])
    file_type: Optional[str] = None
    booking_id: Optional[str] = None


class LessonMaterialUpdate(LessonMaterialCreate):
    pass


class LessonNote(Entity):
    """Private notes a tutor keeps for one booking; at most one per booking."""

    ID_PREFIX: ClassVar[str] = "note"
    IMMUTABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset({"id", "created_at", "tutor_id", "booking_id"})

    tutor_id: str
    booking_id: str
    content: str = ""
    topics_covered: List[str] = Field(default_factory=list)
    homework: Optional[str] = None


class LessonNoteWrite(CamelModel):
    content: Optional[str] = Field(None, examples=["Worked through long division."])
    topics_covered: Optional[List[str]] = None
    homework: Optional[str] = None


class Earning(Entity):
    """What a tutor is owed for one completed lesson."""

    ID_PREFIX: ClassVar[str] = "earn"
    MUTABLE_FIELDS: ClassVar[Optional[FrozenSet[str]]] = frozenset({"status", "paid_at"})

    tutor_id: str
    booking_id: str
    amount: float
    commission: float = 0
    net_amount: float
    currency: str = "GBP"
    status: EarningStatus = "pending"
    paid_at: Optional[str] = None


class PayoutSetting(Entity):
    ID_PREFIX: ClassVar[str] = "pst"
    IMMUTABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset({"id", "created_at", "tutor_id"})

    tutor_id: str
    payout_schedule: PayoutSchedule = "monthly"
    account_holder: Optional[str] = None
    sort_code: Optional[str] = None
    account_number: Optional[str] = None
    updated_at: Optional[str] = None


class PayoutSettingUpdate(CamelModel):
    payout_schedule: Optional[PayoutSchedule] = None
    account_holder: Optional[str] = None
    sort_code: Optional[str] = Field(None, examples=["12-34-56"])
    account_number: Optional[str] = None
