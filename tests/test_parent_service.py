"""Tests for ``ParentService``."""

import pytest

from lessons_api.app.core.errors import ValidationFailed
from lessons_api.app.services.admin_service import AdminService
from lessons_api.app.services.parent_service import ParentService, lesson_price
from lessons_api.app.services.tutor_service import TutorService


LESSON = {
    "student_name": "Tom",
    "subject": "Math",
    "lesson_type": "one_to_one",
    "date": "2024-09-01",
    "slot": "16:00-18:00",
}


@pytest.fixture
def service(store, parent):
    return ParentService(store, parent.id)


def test_lesson_price():
    assert lesson_price("one_to_one", pupils_count=4)["total"] == 60
    assert lesson_price("group", pupils_count=3)["total"] == 120
    assert lesson_price("group", pupils_count=12)["pupils_count"] == 5
    assert lesson_price("group", pupils_count=0)["pupils_count"] == 1


def test_book_lesson_derives_price(service, parent):
    booking = service.book_lesson(dict(LESSON, lesson_type="group", pupils_count=3))
    assert booking.parent_id == parent.id
    assert booking.status == "pending"
    assert booking.rate_per_hour == 20
    assert booking.hours == 2
    assert booking.total == 120
    assert booking.currency == "GBP"


def test_book_lesson_requires_fields(service, store):
    with pytest.raises(ValidationFailed) as excinfo:
        service.book_lesson({"student_name": "Tom", "subject": " "})
    assert set(excinfo.value.fields) == {"subject", "lesson_type", "date", "slot"}
    assert store.bookings.list() == []


def test_book_lesson_rejects_unknown_type(service):
    with pytest.raises(ValidationFailed):
        service.book_lesson(dict(LESSON, lesson_type="lecture"))


def test_bookings_of_other_parents_are_absent(store, service):
    other = ParentService(store, "par_other")
    booking = other.book_lesson(LESSON)
    assert service.get_booking(booking.id) is None
    assert service.cancel_booking(booking.id) is None
    assert service.list_bookings() == []


def test_list_bookings_sorted_and_filtered(service):
    early = service.book_lesson(dict(LESSON, date="2024-01-01"))
    late = service.book_lesson(dict(LESSON, date="2024-05-01"))
    service.cancel_booking(early.id)
    assert [booking.id for booking in service.list_bookings()] == [late.id, early.id]
    assert [booking.id for booking in service.list_bookings("cancelled")] == [early.id]


def test_reschedule_keeps_price(service):
    booking = service.book_lesson(LESSON)
    moved = service.reschedule_booking(booking.id, "2024-10-01", "10:00-12:00")
    assert (moved.date, moved.slot, moved.total) == ("2024-10-01", "10:00-12:00", booking.total)
    with pytest.raises(ValidationFailed):
        service.reschedule_booking(booking.id, "", "10:00-12:00")


def test_checkout_records_payment_and_confirms(store, service):
    booking = service.book_lesson(LESSON)
    result = service.checkout(booking.id, "apple_pay")

    assert result.booking.status == "confirmed"
    assert result.payment.amount == booking.total
    assert result.payment.status == "completed"
    assert result.payment.booking_id == booking.id
    assert store.bookings.get_by_id(booking.id).status == "confirmed"
    assert service.total_spent() == booking.total
    assert service.monthly_spend() == {result.payment.transaction_date[:7]: booking.total}


def test_checkout_is_all_or_nothing(store, service):
    booking = service.book_lesson(LESSON)
    with pytest.raises(ValueError):
        service.checkout(booking.id, "bitcoin")
    assert store.payments.list() == []
    assert store.bookings.get_by_id(booking.id).status == "pending"


def test_checkout_missing_or_cancelled(service):
    assert service.checkout("bk_missing") is None
    booking = service.book_lesson(LESSON)
    service.cancel_booking(booking.id)
    with pytest.raises(ValidationFailed):
        service.checkout(booking.id)


def test_checkout_only_pays_pending_bookings(store, service, tutor):
    booking = service.book_lesson(dict(LESSON, tutor_id=tutor.id))
    service.checkout(booking.id)
    with pytest.raises(ValidationFailed):
        service.checkout(booking.id)
    assert len(store.payments.list()) == 1

    TutorService(store, tutor.id).update_lesson(booking.id, {"status": "completed"})
    with pytest.raises(ValidationFailed):
        service.checkout(booking.id)
    assert len(store.payments.list()) == 1
    assert store.bookings.get_by_id(booking.id).status == "completed"


def test_messaging_with_tutor(store, service, parent, tutor):
    tutor_service = TutorService(store, tutor.id)
    sent = service.send_message(tutor.id, "Hello")
    assert sent.conversation_id == service.conversation_id_with(tutor.id)
    assert sent.recipient_id == tutor.id

    conversation = tutor_service.get_conversation(sent.conversation_id)
    assert conversation.last_message == "Hello"
    assert tutor_service.unread_message_count() == 1

    reply = tutor_service.send_message(sent.conversation_id, "Hi Jane")
    assert reply.recipient_id == parent.id
    assert [message.content for message in service.conversation_messages(tutor.id)] == ["Hello", "Hi Jane"]

    summaries = service.conversations()
    assert len(summaries) == 1
    assert summaries[0].participant_id == tutor.id
    assert summaries[0].unread_count == 1


def test_unread_count_falls_by_one_and_mark_read_is_idempotent(store, service, tutor):
    tutor_service = TutorService(store, tutor.id)
    conversation = tutor_service.start_conversation(service.parent_id)
    first = tutor_service.send_message(conversation.id, "One")
    tutor_service.send_message(conversation.id, "Two")
    assert service.unread_message_count() == 2

    read = service.mark_message_read(first.id)
    assert read.read_at
    assert service.unread_message_count() == 1

    again = service.mark_message_read(first.id)
    assert again.read_at == read.read_at
    assert service.unread_message_count() == 1


def test_only_recipient_marks_message_read(store, service, tutor):
    sent = service.send_message(tutor.id, "Hello")
    assert service.mark_message_read(sent.id) is None
    assert store.messages.get_by_id(sent.id).read_at is None


def test_send_message_requires_content(store, service, tutor):
    with pytest.raises(ValidationFailed):
        service.send_message(tutor.id, "  ")
    assert store.messages.list() == []
    assert store.conversations.list() == []


def test_sync_announcements(store, service, tutor):
    admin = AdminService(store)
    admin.create_announcement({"title": "Term dates", "content": "...", "audience": "parents"})
    admin.create_announcement({"title": "Tutors only", "content": "...", "audience": "tutors"})
    TutorService(store, tutor.id).create_announcement({"title": "New group", "content": "..."})

    created = service.sync_announcements()
    assert len(created) == 2
    assert service.sync_announcements() == []

    by_title = {item.title: item for item in service.list_announcements()}
    assert set(by_title) == {"Term dates", "New group"}
    assert by_title["Term dates"].source == "admin"
    assert by_title["Term dates"].source_name == "Admin"
    assert by_title["New group"].source == "tutor"
    assert by_title["New group"].source_name == "Tom Tutor"
    assert [item.title for item in service.list_announcements("tutor")] == ["New group"]

    assert service.unread_announcement_count() == 2
    service.mark_announcement_read(by_title["Term dates"].id)
    assert service.unread_announcement_count() == 1

    assert service.delete_announcement(by_title["New group"].id) is True
    assert service.delete_announcement(by_title["New group"].id) is False
    assert service.sync_announcements() == []
    assert [item.title for item in service.list_announcements()] == ["Term dates"]
    assert service.mark_announcement_read(by_title["New group"].id) is None
    assert len(store.parent_announcements.list()) == 2


def test_children(service):
    child = service.add_child({"name": "Tom", "age": 9, "subjects": ["Math"]})
    assert service.list_children() == [child]
    updated = service.update_child(child.id, {"school_year": "Year 5"})
    assert updated.school_year == "Year 5"
    assert updated.name == "Tom"
    with pytest.raises(ValidationFailed):
        service.add_child({"age": 4})
    assert service.delete_child(child.id) is True
    assert service.list_children() == []


def test_update_profile_whitelists_fields(service, parent):
    updated = service.update_profile({"name": "Jane P", "role": "admin", "child_name": "Tom"})
    assert updated.name == "Jane P"
    assert updated.role == "parent"
    assert updated.child_name == "Tom"
