"""
Pydantic models for payment data.

Payments are recorded against a booking.  The amount is fixed once
recorded; only the status (and transaction date) may change
afterwards, e.g. when an admin marks a pending payment as failed.
"""

from typing import ClassVar, Dict, FrozenSet, Literal, Optional

from pydantic import Field

from .booking import Booking
from .entity import CamelModel, Entity


PaymentStatus = Literal["completed", "pending", "failed"]
PaymentMethod = Literal["card", "apple_pay", "google_pay", "paypal", "cash"]


class Payment(Entity):
    ID_PREFIX: ClassVar[str] = "pmt"
    IMMUTABLE_FIELDS: ClassVar[FrozenSet[str]] = Entity.IMMUTABLE_FIELDS | {"amount"}

    parent_id: str
    booking_id: Optional[str] = None
    amount: float
    currency: str = "GBP"
    payment_method: PaymentMethod = "card"
    status: PaymentStatus = "pending"
    transaction_date: str


class PaymentCreate(CamelModel):
    parent_id: Optional[str] = None
    booking_id: Optional[str] = None
    amount: Optional[float] = Field(None, ge=0, examples=[60.0])
    currency: Optional[str] = Field(None, examples=["GBP"])
    payment_method: Optional[PaymentMethod] = None
    status: Optional[PaymentStatus] = None
    transaction_date: Optional[str] = None


class PaymentStatusUpdate(CamelModel):
    status: PaymentStatus


class PaymentWithBooking(CamelModel):
    """A payment joined with the booking it references.

    ``booking`` is ``None`` when the booking has been deleted.
    """

    payment: Payment
    booking: Optional[Booking] = None


class MonthlyTotals(CamelModel):
    """Completed payment totals keyed by ``YYYY-MM``, newest month first."""

    total: float
    months: Dict[str, float]


class CheckoutResult(CamelModel):
    """Outcome of paying for a booking: the confirmed booking and its payment."""

    booking: Booking
    payment: Payment
