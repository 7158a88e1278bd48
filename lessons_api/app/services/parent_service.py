"""
Parent-facing service.

Every operation is scoped to the parent the service was created for:
records belonging to another parent are treated as absent.  Referenced
tutor ids are accepted as given; the service does not check that the
tutor account exists.

Checkout records the payment and confirms the booking inside a single
unit of work, so either both writes land or neither does.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from ..core.config import settings
from ..core.errors import ValidationFailed, require_fields
from ..core.store import LocalStore, utcnow_iso
from ..schemas.account import Account
from ..schemas.announcement import ParentAnnouncement
from ..schemas.booking import Booking
from ..schemas.child import Child
from ..schemas.messaging import ConversationSummary, Message
from ..schemas.payment import CheckoutResult, MonthlyTotals, Payment
from . import messaging, queries


PROFILE_FIELDS = frozenset({"name", "child_name", "school_year", "phone", "password"})
CHILD_FIELDS = frozenset({"name", "age", "school_year", "subjects", "progress_notes"})
PARENT_AUDIENCES = frozenset({"all", "parents"})


def lesson_price(lesson_type: str, pupils_count: Optional[int] = None, rate_per_hour: Optional[float] = None) -> Dict[str, float]:
    """Rate, duration, group size and total for a lesson.

    One-to-one lessons always have a single pupil; group lessons are
    clamped to ``1..settings.max_group_pupils``.
    """
    if lesson_type == "group":
        pupils = max(1, min(int(pupils_count or 1), settings.max_group_pupils))
        default_rate = settings.group_rate
    else:
        pupils = 1
        default_rate = settings.one_to_one_rate
    rate = default_rate if rate_per_hour is None else rate_per_hour
    hours = settings.lesson_hours
    return {
        "rate_per_hour": rate,
        "hours": hours,
        "pupils_count": pupils,
        "total": rate * hours * pupils,
    }


class ParentService:
    """Operations available to one parent."""

    def __init__(self, store: LocalStore, parent_id: str) -> None:
        self.store = store
        self.parent_id = parent_id

    def _own(self, record):
        if record is None or record.parent_id != self.parent_id:
            return None
        return record

    # Profile

    def profile(self) -> Optional[Account]:
        return self.store.accounts.get_by_id(self.parent_id)

    def update_profile(self, data: Mapping[str, Any]) -> Optional[Account]:
        changes = {key: value for key, value in data.items() if key in PROFILE_FIELDS and value is not None}
        for name in ("name", "password"):
            if name in changes:
                require_fields(changes, name)
        return self.store.accounts.update(self.parent_id, changes)

    # Bookings

    def book_lesson(self, data: Mapping[str, Any]) -> Booking:
        """Create a pending booking with its price worked out."""
        logger = logging.getLogger(__name__)
        require_fields(data, "student_name", "subject", "lesson_type", "date", "slot")
        lesson_type = data["lesson_type"]
        if lesson_type not in ("one_to_one", "group"):
            raise ValidationFailed(f"Invalid lesson type: {lesson_type}", fields=["lesson_type"])

        fields = {
            "parent_id": self.parent_id,
            "student_name": data["student_name"],
            "subject": data["subject"],
            "lesson_type": lesson_type,
            "date": data["date"],
            "slot": data["slot"],
            "tutor_id": data.get("tutor_id") or None,
            "currency": settings.currency,
            "status": "pending",
        }
        fields.update(lesson_price(lesson_type, data.get("pupils_count"), data.get("rate_per_hour")))
        booking = self.store.bookings.create(fields)
        logger.info("Parent %s booked %s on %s", self.parent_id, booking.id, booking.date)
        return booking

    def list_bookings(self, status: Optional[str] = None) -> List[Booking]:
        bookings = queries.bookings_for_parent(self.store, self.parent_id)
        if status:
            bookings = [booking for booking in bookings if booking.status == status]
        return queries.sort_bookings(bookings)

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        return self._own(self.store.bookings.get_by_id(booking_id))

    def cancel_booking(self, booking_id: str) -> Optional[Booking]:
        if self.get_booking(booking_id) is None:
            return None
        return self.store.bookings.update(booking_id, {"status": "cancelled"})

    def reschedule_booking(self, booking_id: str, date: Optional[str], slot: Optional[str]) -> Optional[Booking]:
        require_fields({"date": date, "slot": slot}, "date", "slot")
        if self.get_booking(booking_id) is None:
            return None
        return self.store.bookings.update(booking_id, {"date": date, "slot": slot})

    def checkout(self, booking_id: str, payment_method: str = "card") -> Optional[CheckoutResult]:
        """Pay for a booking in full and confirm it.

        Only pending bookings can be paid; anything else raises
        ``ValidationFailed``.  Returns ``None`` if the booking does not
        exist or belongs to someone else.
        """
        logger = logging.getLogger(__name__)
        require_fields({"payment_method": payment_method}, "payment_method")
        booking = self.get_booking(booking_id)
        if booking is None:
            return None
        if booking.status != "pending":
            raise ValidationFailed(
                f"Booking {booking_id} is {booking.status} and cannot be paid", fields=["booking_id"]
            )

        with self.store.unit_of_work():
            payment = self.store.payments.create(
                {
                    "parent_id": self.parent_id,
                    "booking_id": booking.id,
                    "amount": booking.total,
                    "currency": booking.currency,
                    "payment_method": payment_method,
                    "status": "completed",
                    "transaction_date": utcnow_iso(),
                }
            )
            confirmed = self.store.bookings.update(booking.id, {"status": "confirmed"})
        logger.info("Booking %s paid with %s (%s)", booking.id, payment.id, payment.amount)
        return CheckoutResult(booking=confirmed, payment=payment)

    # Payments

    def list_payments(self) -> List[Payment]:
        return queries.payments_for_parent(self.store, self.parent_id)

    def total_spent(self) -> float:
        return queries.total_spent(self.list_payments())

    def monthly_spend(self) -> Dict[str, float]:
        return queries.monthly_totals(self.list_payments())

    def billing_summary(self) -> MonthlyTotals:
        return queries.monthly_summary(self.list_payments())

    # Messages

    def conversation_id_with(self, tutor_id: str) -> str:
        return queries.derive_conversation_id(self.parent_id, tutor_id)

    def send_message(self, tutor_id: str, content: Optional[str]) -> Message:
        require_fields({"tutor_id": tutor_id, "content": content}, "tutor_id", "content")
        with self.store.unit_of_work():
            conversation = messaging.get_or_create_conversation(
                self.store, tutor_id, self.parent_id, "parent"
            )
            return messaging.send_message(self.store, conversation, self.parent_id, "parent", content)

    def conversation_messages(self, tutor_id: str) -> List[Message]:
        return queries.messages_for_conversation(self.store, self.conversation_id_with(tutor_id))

    def conversations(self) -> List[ConversationSummary]:
        messages = queries.messages_for_participant(self.store, self.parent_id)
        return queries.conversation_summaries(messages, self.parent_id)

    def mark_message_read(self, message_id: str) -> Optional[Message]:
        message = self.store.messages.get_by_id(message_id)
        return messaging.mark_read(self.store.messages, message, reader_id=self.parent_id)

    def unread_message_count(self) -> int:
        return queries.unread_count(
            self.store.messages.filter(lambda message: message.recipient_id == self.parent_id)
        )

    # Announcements

    def sync_announcements(self) -> List[ParentAnnouncement]:
        """Copy newly visible global announcements into this parent's feed.

        Announcements addressed to ``all`` or ``parents`` get one copy
        each, keyed by ``source_id``.  Dismissed copies still count, so a
        dismissed announcement stays gone.  Returns the copies created.
        """
        logger = logging.getLogger(__name__)
        copied = {
            item.source_id
            for item in self.store.parent_announcements.filter(lambda item: item.parent_id == self.parent_id)
        }
        pending = [
            item
            for item in self.store.announcements.list()
            if item.audience in PARENT_AUDIENCES and item.id not in copied
        ]
        if not pending:
            return []

        authors = {account.id: account.name for account in self.store.accounts.list()}
        created = []
        with self.store.unit_of_work():
            for item in pending:
                if item.created_by in ("admin", "system"):
                    source = item.created_by
                    source_name = "Admin" if source == "admin" else "System"
                else:
                    source = "tutor"
                    source_name = authors.get(item.created_by) or "Tutor"
                created.append(
                    self.store.parent_announcements.create(
                        {
                            "parent_id": self.parent_id,
                            "title": item.title,
                            "content": item.content,
                            "source": source,
                            "source_id": item.id,
                            "source_name": source_name,
                        }
                    )
                )
        logger.info("Synced %s announcements for parent %s", len(created), self.parent_id)
        return created

    def list_announcements(self, source: Optional[str] = None) -> List[ParentAnnouncement]:
        items = self.store.parent_announcements.filter(
            lambda item: item.parent_id == self.parent_id and not item.dismissed_at
        )
        if source and source != "all":
            items = [item for item in items if item.source == source]
        return queries.newest_first(items)

    def _visible_announcement(self, announcement_id: str) -> Optional[ParentAnnouncement]:
        item = self._own(self.store.parent_announcements.get_by_id(announcement_id))
        if item is None or item.dismissed_at:
            return None
        return item

    def mark_announcement_read(self, announcement_id: str) -> Optional[ParentAnnouncement]:
        item = self._visible_announcement(announcement_id)
        return messaging.mark_read(self.store.parent_announcements, item)

    def delete_announcement(self, announcement_id: str) -> bool:
        """Dismiss an announcement copy from the parent's feed."""
        if self._visible_announcement(announcement_id) is None:
            return False
        self.store.parent_announcements.update(announcement_id, {"dismissed_at": utcnow_iso()})
        return True

    def unread_announcement_count(self) -> int:
        return queries.unread_count(self.list_announcements())

    # Children

    def add_child(self, data: Mapping[str, Any]) -> Child:
        require_fields(data, "name")
        fields = {key: value for key, value in data.items() if key in CHILD_FIELDS and value is not None}
        fields["parent_id"] = self.parent_id
        return self.store.children.create(fields)

    def list_children(self) -> List[Child]:
        return self.store.children.filter(lambda child: child.parent_id == self.parent_id)

    def update_child(self, child_id: str, data: Mapping[str, Any]) -> Optional[Child]:
        if self._own(self.store.children.get_by_id(child_id)) is None:
            return None
        changes = {key: value for key, value in data.items() if key in CHILD_FIELDS and value is not None}
        if "name" in changes:
            require_fields(changes, "name")
        return self.store.children.update(child_id, changes)

    def delete_child(self, child_id: str) -> bool:
        if self._own(self.store.children.get_by_id(child_id)) is None:
            return False
        return self.store.children.delete(child_id)
