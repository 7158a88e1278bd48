"""
Admin-facing service.

Admins see every record: all accounts, bookings, payments, tutor
earnings and the global announcements.  They are the only role that
can record payments by hand, change a payment's status, pay out tutor
earnings and delete bookings.
Payment amounts cannot be changed once recorded.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from ..core.errors import require_fields
from ..core.store import LocalStore, utcnow_iso
from ..schemas.account import Account
from ..schemas.announcement import Announcement
from ..schemas.booking import Booking
from ..schemas.payment import Payment, PaymentWithBooking
from ..schemas.tutoring import Earning
from . import queries
from .account_service import AccountService


ACCOUNT_FIELDS = frozenset({
    "name", "password", "verified", "active", "child_name", "school_year",
    "phone", "subjects", "rate", "commission", "status", "bio",
})
BOOKING_FIELDS = frozenset({
    "tutor_id", "subject", "date", "slot", "status", "meeting_link",
    "rate_per_hour", "total",
})
ANNOUNCEMENT_FIELDS = frozenset({"title", "content", "audience", "publish_date"})


def _pick(data: Mapping[str, Any], allowed: frozenset) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if key in allowed and value is not None}


class AdminService:
    """Operations available to administrators."""

    def __init__(self, store: LocalStore) -> None:
        self.store = store
        self.accounts = AccountService(store)

    # Accounts

    def list_accounts(self, role: Optional[str] = None) -> List[Account]:
        return self.accounts.list_accounts(role)

    def list_tutors(self) -> List[Account]:
        return self.accounts.list_accounts("tutor")

    def create_account(self, data: Mapping[str, Any]) -> Account:
        return self.accounts.register(data)

    def update_account(self, account_id: str, data: Mapping[str, Any]) -> Optional[Account]:
        """Apply admin edits to an account in a single write.

        Every field, including a new email, is validated before anything
        is saved.
        """
        changes = _pick(data, ACCOUNT_FIELDS)
        if "name" in changes:
            require_fields(changes, "name")
        if data.get("email") is not None:
            changes["email"] = self.accounts.check_email(account_id, data["email"])
        if self.store.accounts.get_by_id(account_id) is None:
            return None
        return self.store.accounts.update(account_id, changes)

    def toggle_active(self, account_id: str) -> Optional[Account]:
        account = self.store.accounts.get_by_id(account_id)
        if account is None:
            return None
        return self.store.accounts.update(account_id, {"active": not account.active})

    def delete_account(self, account_id: str) -> bool:
        # Bookings, payments and messages of the account are kept.
        return self.store.accounts.delete(account_id)

    # Bookings

    def list_bookings(self, status: Optional[str] = None) -> List[Booking]:
        bookings = self.store.bookings.list()
        if status:
            bookings = [booking for booking in bookings if booking.status == status]
        return queries.sort_bookings(bookings)

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        return self.store.bookings.get_by_id(booking_id)

    def update_booking(self, booking_id: str, data: Mapping[str, Any]) -> Optional[Booking]:
        return self.store.bookings.update(booking_id, _pick(data, BOOKING_FIELDS))

    def delete_booking(self, booking_id: str) -> bool:
        return self.store.bookings.delete(booking_id)

    # Payments

    def list_payments(self, status: Optional[str] = None) -> List[Payment]:
        payments = self.store.payments.list()
        if status:
            payments = [payment for payment in payments if payment.status == status]
        return payments

    def list_payments_with_bookings(self) -> List[PaymentWithBooking]:
        return queries.payments_with_bookings(self.store, self.store.payments.list())

    def record_payment(self, data: Mapping[str, Any]) -> Payment:
        """Record a payment by hand (cash, bank transfer, corrections)."""
        require_fields(data, "parent_id", "amount")
        fields = {key: value for key, value in data.items() if value is not None}
        fields.setdefault("transaction_date", utcnow_iso())
        fields.setdefault("status", "pending")
        return self.store.payments.create(fields)

    def update_payment_status(self, payment_id: str, status: str) -> Optional[Payment]:
        logger = logging.getLogger(__name__)
        require_fields({"status": status}, "status")
        payment = self.store.payments.update(payment_id, {"status": status})
        if payment is not None:
            logger.info("Payment %s marked %s", payment_id, status)
        return payment

    # Tutor earnings

    def list_earnings(self, status: Optional[str] = None) -> List[Earning]:
        earnings = self.store.earnings.list()
        if status:
            earnings = [earning for earning in earnings if earning.status == status]
        return queries.newest_first(earnings)

    def mark_earning_paid(self, earning_id: str) -> Optional[Earning]:
        """Mark a tutor earning as paid out.  Already-paid earnings are unchanged."""
        logger = logging.getLogger(__name__)
        earning = self.store.earnings.get_by_id(earning_id)
        if earning is None or earning.status == "paid":
            return earning
        paid = self.store.earnings.update(earning_id, {"status": "paid", "paid_at": utcnow_iso()})
        logger.info("Earning %s paid to tutor %s", earning_id, earning.tutor_id)
        return paid

    # Announcements

    def list_announcements(self, audience: Optional[str] = None) -> List[Announcement]:
        announcements = self.store.announcements.list()
        if audience:
            announcements = [item for item in announcements if item.audience == audience]
        return queries.newest_first(announcements)

    def create_announcement(self, data: Mapping[str, Any]) -> Announcement:
        require_fields(data, "title", "content")
        fields = _pick(data, ANNOUNCEMENT_FIELDS)
        fields.setdefault("audience", "all")
        fields.setdefault("publish_date", utcnow_iso())
        fields["created_by"] = "admin"
        return self.store.announcements.create(fields)

    def update_announcement(self, announcement_id: str, data: Mapping[str, Any]) -> Optional[Announcement]:
        changes = _pick(data, ANNOUNCEMENT_FIELDS)
        for name in ("title", "content"):
            if name in changes:
                require_fields(changes, name)
        return self.store.announcements.update(announcement_id, changes)

    def delete_announcement(self, announcement_id: str) -> bool:
        return self.store.announcements.delete(announcement_id)

    # Reports

    def metrics(self) -> Dict[str, Any]:
        """Headline numbers for the admin dashboard and reports."""
        accounts = self.store.accounts.list()
        payments = self.store.payments.list()
        report = queries.booking_metrics(self.store.bookings.list())
        roles: Dict[str, int] = {}
        for account in accounts:
            roles[account.role] = roles.get(account.role, 0) + 1
        report.update(
            accounts=roles,
            payments_total=queries.total_spent(payments),
            payments_by_month=queries.monthly_totals(payments),
        )
        return report
