"""Tests for the derived views in ``services.queries``."""

import pytest

from lessons_api.app.core.errors import ValidationFailed
from lessons_api.app.schemas.booking import Booking
from lessons_api.app.schemas.messaging import Message
from lessons_api.app.schemas.payment import Payment
from lessons_api.app.services import queries


def _payment(amount, date, status="completed", **extra):
    return Payment(
        id=f"pmt_{date}_{amount}",
        created_at=date,
        parent_id="par_1",
        amount=amount,
        transaction_date=date,
        status=status,
        **extra,
    )


def _booking(booking_id, date, status="pending", subject="Math", total=60):
    return Booking(
        id=booking_id,
        created_at="2024-01-01T00:00:00.000Z",
        parent_id="par_1",
        student_name="Tom",
        subject=subject,
        date=date,
        slot="16:00-18:00",
        total=total,
        status=status,
    )


def _message(message_id, sender, recipient, created_at, read_at=None, content="hi"):
    return Message(
        id=message_id,
        created_at=created_at,
        conversation_id=f"conv_{sender}_{recipient}",
        sender_id=sender,
        sender_role="parent",
        recipient_id=recipient,
        content=content,
        read_at=read_at,
    )


def test_monthly_totals_reference_example():
    payments = [
        _payment(10, "2024-01-05"),
        _payment(20, "2024-02-01"),
        _payment(5, "2024-02-09", status="pending"),
    ]
    totals = queries.monthly_totals(payments)
    assert totals == {"2024-01": 10, "2024-02": 20}
    assert list(totals) == ["2024-02", "2024-01"]


def test_monthly_totals_skips_months_with_no_completed_payment():
    assert queries.monthly_totals([_payment(5, "2024-03-01", status="failed")]) == {}


def test_monthly_summary_totals():
    summary = queries.monthly_summary([_payment(10, "2024-01-05"), _payment(7, "2024-01-06", status="failed")])
    assert summary.total == 10
    assert summary.months == {"2024-01": 10}


def test_conversation_id_is_deterministic():
    first = queries.derive_conversation_id("par_1", "tut_1")
    assert first == "conv_par_1:tut_1"
    assert queries.derive_conversation_id("par_1", "tut_1") == first
    assert queries.derive_conversation_id("par_2", "tut_1") != first


def test_conversation_id_keeps_pairs_apart():
    assert queries.derive_conversation_id("par_a_b", "c") != queries.derive_conversation_id("par_a", "b_c")
    with pytest.raises(ValidationFailed):
        queries.derive_conversation_id("par:1", "tut_1")


def test_unread_count():
    messages = [
        _message("m1", "tut_1", "par_1", "2024-01-01T10:00:00.000Z"),
        _message("m2", "tut_1", "par_1", "2024-01-01T11:00:00.000Z", read_at="2024-01-02"),
    ]
    assert queries.unread_count(messages) == 1
    assert queries.unread_count([]) == 0


def test_conversation_summaries():
    messages = [
        _message("m1", "par_1", "tut_1", "2024-01-01T10:00:00.000Z", content="Hello"),
        _message("m2", "tut_1", "par_1", "2024-01-01T11:00:00.000Z", content="Hi there"),
        _message("m3", "tut_1", "par_1", "2024-01-01T12:00:00.000Z", content="See you", read_at="x"),
        _message("m4", "tut_2", "par_1", "2024-01-02T09:00:00.000Z", content="Welcome"),
        _message("m5", "tut_2", "par_9", "2024-01-03T09:00:00.000Z", content="Not yours"),
    ]
    summaries = queries.conversation_summaries(messages, "par_1")

    assert [summary.participant_id for summary in summaries] == ["tut_2", "tut_1"]
    tut_1 = summaries[1]
    assert tut_1.last_message == "See you"
    assert tut_1.last_message_at == "2024-01-01T12:00:00.000Z"
    assert tut_1.unread_count == 1
    assert summaries[0].unread_count == 1


def test_sort_bookings_latest_date_first_and_stable():
    bookings = [
        _booking("bk_a", "2024-01-10"),
        _booking("bk_b", "2024-03-01"),
        _booking("bk_c", "2024-01-10"),
    ]
    assert [booking.id for booking in queries.sort_bookings(bookings)] == ["bk_b", "bk_a", "bk_c"]


def test_booking_metrics():
    bookings = [
        _booking("bk_a", "2024-01-10", subject="Math", total=60),
        _booking("bk_b", "2024-01-20", subject="Art", total=40, status="cancelled"),
        _booking("bk_c", "2024-02-01", subject="Math", total=120, status="completed"),
    ]
    report = queries.booking_metrics(bookings)
    assert report["revenue"] == 180
    assert report["bookings"] == 3
    assert report["by_month"] == {"2024-02": 1, "2024-01": 2}
    assert report["by_subject"] == {"Math": 2, "Art": 1}


def test_monthly_earnings_counts_completed_lessons():
    bookings = [
        _booking("bk_a", "2024-01-10", status="completed", total=60),
        _booking("bk_b", "2024-01-20", status="confirmed", total=60),
        _booking("bk_c", "2024-02-01", status="completed", total=40),
    ]
    assert queries.monthly_earnings(bookings) == {"2024-02": 40, "2024-01": 60}


def test_payments_with_bookings_tolerates_dangling_reference(store):
    booking = store.bookings.create(
        {"parent_id": "par_1", "student_name": "Tom", "subject": "Math", "date": "2024-01-10", "slot": "x"}
    )
    kept = store.payments.create(
        {"parent_id": "par_1", "booking_id": booking.id, "amount": 60, "transaction_date": "2024-01-10"}
    )
    dangling = store.payments.create(
        {"parent_id": "par_1", "booking_id": "bk_gone", "amount": 30, "transaction_date": "2024-01-11"}
    )
    joined = queries.payments_with_bookings(store, [kept, dangling])
    assert joined[0].booking == booking
    assert joined[1].booking is None
    assert queries.resolve(store.bookings, "bk_gone") is None
    assert queries.resolve(store.bookings, None) is None
