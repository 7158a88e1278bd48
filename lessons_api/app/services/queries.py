"""
Derived views over the raw tables.

Nothing here is persisted: every view is recomputed from
``Table.list()`` when it is asked for.  The helpers fall into three
groups:

* foreign-key lookups (bookings of a parent, availability of a tutor,
  messages of a conversation, ...);
* aggregations (unread counts, monthly totals, booking metrics,
  conversation summaries, attendance stats);
* ordering rules shared by the services (bookings newest date first,
  payments in insertion order).

Lookups that follow a reference to another table return ``None`` for
the missing side when the referenced record has been deleted.
"""

from typing import Dict, Iterable, List, Optional, Sequence, TypeVar

from ..core.errors import ValidationFailed
from ..core.store import LocalStore
from ..schemas.availability import AvailabilitySlot
from ..schemas.booking import Booking
from ..schemas.messaging import ConversationSummary, Message
from ..schemas.payment import MonthlyTotals, Payment, PaymentWithBooking
from ..schemas.student import AttendanceRecord, AttendanceStats

T = TypeVar("T")


CONVERSATION_SEPARATOR = ":"


def derive_conversation_id(owner_id: str, participant_id: str) -> str:
    """Deterministic conversation id for an (owner, participant) pair.

    The non-tutor party is the owner and the tutor is the participant,
    so ``derive_conversation_id(parent_id, tutor_id)`` is what both the
    parent and the tutor compute for their shared conversation.  Ids
    themselves contain ``_``, so the pair is joined with ``:`` and ids
    containing ``:`` are refused.
    """
    for name, value in (("owner_id", owner_id), ("participant_id", participant_id)):
        if CONVERSATION_SEPARATOR in value:
            raise ValidationFailed(f"Invalid id for a conversation: {value}", fields=[name])
    return f"conv_{owner_id}{CONVERSATION_SEPARATOR}{participant_id}"


# Foreign-key lookups

def bookings_for_parent(store: LocalStore, parent_id: str) -> List[Booking]:
    return store.bookings.filter(lambda booking: booking.parent_id == parent_id)


def bookings_for_tutor(store: LocalStore, tutor_id: str) -> List[Booking]:
    return store.bookings.filter(lambda booking: booking.tutor_id == tutor_id)


def availability_for_tutor(store: LocalStore, tutor_id: str) -> List[AvailabilitySlot]:
    return store.availability.filter(lambda slot: slot.tutor_id == tutor_id)


def payments_for_parent(store: LocalStore, parent_id: str) -> List[Payment]:
    return store.payments.filter(lambda payment: payment.parent_id == parent_id)


def messages_for_conversation(store: LocalStore, conversation_id: str) -> List[Message]:
    """Messages of one conversation, oldest first."""
    messages = store.messages.filter(lambda message: message.conversation_id == conversation_id)
    return sorted(messages, key=lambda message: message.created_at)


def messages_for_participant(store: LocalStore, user_id: str) -> List[Message]:
    return store.messages.filter(
        lambda message: user_id in (message.sender_id, message.recipient_id)
    )


def records_for_student(table, student_id: str, subject: Optional[str] = None) -> list:
    """Records of ``table`` that belong to a student, optionally for one subject."""
    return table.filter(
        lambda record: record.student_id == student_id and (not subject or record.subject == subject)
    )


def payments_with_bookings(store: LocalStore, payments: Sequence[Payment]) -> List[PaymentWithBooking]:
    """Attach the referenced booking to each payment (``None`` if deleted)."""
    bookings = {booking.id: booking for booking in store.bookings.list()}
    return [
        PaymentWithBooking(payment=payment, booking=bookings.get(payment.booking_id or ""))
        for payment in payments
    ]


# Aggregations

def unread_count(items: Iterable) -> int:
    """Number of items whose ``read_at`` is not set."""
    return sum(1 for item in items if not getattr(item, "read_at", None))


def sum_by_month(
    items: Iterable[T],
    date_of,
    amount_of,
) -> Dict[str, float]:
    """Sum ``amount_of(item)`` per ``YYYY-MM`` of ``date_of(item)``, newest month first."""
    totals: Dict[str, float] = {}
    for item in items:
        month = (date_of(item) or "")[:7]
        if not month:
            continue
        totals[month] = totals.get(month, 0) + amount_of(item)
    return dict(sorted(totals.items(), key=lambda pair: pair[0], reverse=True))


def monthly_totals(payments: Iterable[Payment]) -> Dict[str, float]:
    """Completed payment amounts per ``transaction_date`` month.

    Payments in any other status are ignored entirely.
    """
    completed = [payment for payment in payments if payment.status == "completed"]
    return sum_by_month(
        completed,
        date_of=lambda payment: payment.transaction_date,
        amount_of=lambda payment: payment.amount,
    )


def total_spent(payments: Iterable[Payment]) -> float:
    return sum(payment.amount for payment in payments if payment.status == "completed")


def monthly_summary(payments: Sequence[Payment]) -> MonthlyTotals:
    return MonthlyTotals(total=total_spent(payments), months=monthly_totals(payments))


def monthly_earnings(bookings: Iterable[Booking]) -> Dict[str, float]:
    """Totals of completed lessons per lesson month, newest first."""
    completed = [booking for booking in bookings if booking.status == "completed"]
    return sum_by_month(
        completed,
        date_of=lambda booking: booking.date,
        amount_of=lambda booking: booking.total,
    )


def booking_metrics(bookings: Sequence[Booking]) -> dict:
    """Revenue and booking counts for the admin reports.

    Revenue sums the totals of every booking that is not cancelled.
    ``by_month`` counts bookings per lesson month (newest first) and
    ``by_subject`` counts bookings per subject.
    """
    revenue = sum(booking.total for booking in bookings if booking.status != "cancelled")
    by_month = sum_by_month(
        bookings,
        date_of=lambda booking: booking.date,
        amount_of=lambda booking: 1,
    )
    by_subject: Dict[str, int] = {}
    for booking in bookings:
        by_subject[booking.subject] = by_subject.get(booking.subject, 0) + 1
    return {
        "revenue": revenue,
        "bookings": len(bookings),
        "by_month": {month: int(count) for month, count in by_month.items()},
        "by_subject": by_subject,
    }


def conversation_summaries(messages: Iterable[Message], viewer_id: str) -> List[ConversationSummary]:
    """One summary per other party the viewer has exchanged messages with.

    The summary carries the content and timestamp of the most recent
    message and the number of unread messages addressed to the viewer.
    Summaries are ordered by latest activity, most recent first.
    """
    summaries: Dict[str, ConversationSummary] = {}
    ordered = sorted(messages, key=lambda message: message.created_at)
    for message in ordered:
        if viewer_id not in (message.sender_id, message.recipient_id):
            continue
        other = message.recipient_id if message.sender_id == viewer_id else message.sender_id
        summary = summaries.get(other)
        if summary is None:
            summary = ConversationSummary(conversation_id=message.conversation_id, participant_id=other)
            summaries[other] = summary
        summary.conversation_id = message.conversation_id
        summary.last_message = message.content
        summary.last_message_at = message.created_at
        if message.recipient_id == viewer_id and not message.read_at:
            summary.unread_count += 1
    return sorted(
        summaries.values(),
        key=lambda summary: summary.last_message_at or "",
        reverse=True,
    )


# Ordering

def attendance_stats(records: Sequence[AttendanceRecord]) -> AttendanceStats:
    """Counts per attendance status and the share attended.

    ``percentage`` is rounded half up to a whole number.
    """
    total = len(records)
    counts = {"present": 0, "absent": 0, "excused": 0}
    for record in records:
        counts[record.status] += 1
    percentage = int(counts["present"] * 100 / total + 0.5) if total else 0
    return AttendanceStats(total=total, percentage=percentage, **counts)


def sort_bookings(bookings: Iterable[Booking]) -> List[Booking]:
    """Bookings by lesson date, latest first; equal dates keep their order."""
    return sorted(bookings, key=lambda booking: booking.date, reverse=True)


def newest_first(records: Iterable[T], attribute: str = "created_at") -> List[T]:
    return sorted(records, key=lambda record: getattr(record, attribute) or "", reverse=True)


def resolve(table, entity_id: Optional[str]):
    """Follow a reference; ``None`` when it is unset or dangling."""
    if not entity_id:
        return None
    return table.get_by_id(entity_id)
