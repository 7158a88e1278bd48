"""
Tutor-facing service.

Covers a tutor's weekly availability, conversations with parents and
students, the announcements they publish, and the lessons (bookings)
assigned to them.  Tutors may only change the status and meeting link
of their lessons; pricing is left to parents and admins.  Completing a
lesson records what the tutor earned from it, net of their commission.

Tutors also keep their own teaching materials, per-lesson notes and
payout preferences, and write the records their students see: lessons,
homework, shared materials, progress notes and attendance.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from ..core.errors import ValidationFailed, require_fields
from ..core.store import LocalStore, utcnow_iso
from ..schemas.account import Account
from ..schemas.announcement import Announcement
from ..schemas.availability import AvailabilitySlot
from ..schemas.booking import Booking
from ..schemas.messaging import Conversation, Message
from ..schemas.student import AttendanceRecord, Homework, ProgressEntry, StudentLesson, StudentMaterial
from ..schemas.tutoring import Earning, LessonMaterial, LessonNote, PayoutSetting
from . import messaging, queries


PROFILE_FIELDS = frozenset({"name", "subjects", "rate", "bio", "phone", "password"})
AVAILABILITY_FIELDS = frozenset({"day_of_week", "start_time", "end_time", "recurring", "blocked_dates"})
ANNOUNCEMENT_FIELDS = frozenset({"title", "content", "audience", "publish_date"})
LESSON_FIELDS = frozenset({"status", "meeting_link"})
LESSON_STATUSES = frozenset({"confirmed", "completed", "cancelled"})
MATERIAL_FIELDS = frozenset({"title", "description", "subject", "file_url", "file_type", "booking_id"})
NOTE_FIELDS = frozenset({"content", "topics_covered", "homework"})
PAYOUT_FIELDS = frozenset({"payout_schedule", "account_holder", "sort_code", "account_number"})
STUDENT_LESSON_FIELDS = frozenset({"subject", "lesson_type", "date", "slot", "duration", "meeting_link", "notes"})
STUDENT_LESSON_UPDATE_FIELDS = frozenset({"date", "slot", "duration", "meeting_link", "notes", "status"})
HOMEWORK_FIELDS = frozenset({"title", "description", "subject", "due_date", "instructions", "attachments"})
REVIEW_FIELDS = frozenset({"status", "tutor_feedback", "due_date"})
STUDENT_MATERIAL_FIELDS = frozenset({
    "name", "description", "file_url", "file_type", "category", "subject", "associated_lesson",
})
PROGRESS_FIELDS = frozenset({"subject", "lesson_date", "topics_covered", "notes", "feedback"})


def _pick(data: Mapping[str, Any], allowed: frozenset) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if key in allowed and value is not None}


class TutorService:
    """Operations available to one tutor."""

    def __init__(self, store: LocalStore, tutor_id: str) -> None:
        self.store = store
        self.tutor_id = tutor_id

    def _own(self, record):
        if record is None or record.tutor_id != self.tutor_id:
            return None
        return record

    # Profile

    def profile(self) -> Optional[Account]:
        return self.store.accounts.get_by_id(self.tutor_id)

    def update_profile(self, data: Mapping[str, Any]) -> Optional[Account]:
        changes = _pick(data, PROFILE_FIELDS)
        for name in ("name", "password"):
            if name in changes:
                require_fields(changes, name)
        return self.store.accounts.update(self.tutor_id, changes)

    # Availability

    def add_availability(self, data: Mapping[str, Any]) -> AvailabilitySlot:
        require_fields(data, "day_of_week", "start_time", "end_time")
        fields = _pick(data, AVAILABILITY_FIELDS)
        fields["tutor_id"] = self.tutor_id
        return self.store.availability.create(fields)

    def list_availability(self) -> List[AvailabilitySlot]:
        return queries.availability_for_tutor(self.store, self.tutor_id)

    def update_availability(self, slot_id: str, data: Mapping[str, Any]) -> Optional[AvailabilitySlot]:
        if self._own(self.store.availability.get_by_id(slot_id)) is None:
            return None
        changes = _pick(data, AVAILABILITY_FIELDS)
        for name in ("day_of_week", "start_time", "end_time"):
            if name in changes:
                require_fields(changes, name)
        return self.store.availability.update(slot_id, changes)

    def delete_availability(self, slot_id: str) -> bool:
        if self._own(self.store.availability.get_by_id(slot_id)) is None:
            return False
        return self.store.availability.delete(slot_id)

    # Conversations

    def start_conversation(self, participant_id: Optional[str], participant_role: str = "parent") -> Conversation:
        """Return the conversation with a parent or student, creating it if needed."""
        require_fields({"participant_id": participant_id}, "participant_id")
        if participant_role not in ("parent", "student"):
            raise ValidationFailed(f"Invalid participant role: {participant_role}", fields=["participant_role"])
        return messaging.get_or_create_conversation(
            self.store, self.tutor_id, participant_id, participant_role
        )

    def list_conversations(self) -> List[Conversation]:
        """The tutor's conversations, most recent activity first.

        ``unread_count`` is recomputed from the messages addressed to
        the tutor rather than taken from the stored record.
        """
        unread: Dict[str, int] = {}
        for message in self.store.messages.filter(lambda message: message.recipient_id == self.tutor_id):
            if not message.read_at:
                unread[message.conversation_id] = unread.get(message.conversation_id, 0) + 1
        conversations = [
            conversation.model_copy(update={"unread_count": unread.get(conversation.id, 0)})
            for conversation in self.store.conversations.filter(
                lambda conversation: conversation.tutor_id == self.tutor_id
            )
        ]
        return sorted(
            conversations,
            key=lambda conversation: conversation.last_message_at or conversation.created_at,
            reverse=True,
        )

    def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        return self._own(self.store.conversations.get_by_id(conversation_id))

    def conversation_messages(self, conversation_id: str) -> Optional[List[Message]]:
        if self.get_conversation(conversation_id) is None:
            return None
        return queries.messages_for_conversation(self.store, conversation_id)

    def send_message(self, conversation_id: str, content: Optional[str]) -> Optional[Message]:
        conversation = self.get_conversation(conversation_id)
        if conversation is None:
            return None
        return messaging.send_message(self.store, conversation, self.tutor_id, "tutor", content)

    def mark_message_read(self, message_id: str) -> Optional[Message]:
        message = self.store.messages.get_by_id(message_id)
        return messaging.mark_read(self.store.messages, message, reader_id=self.tutor_id)

    def unread_message_count(self) -> int:
        return queries.unread_count(
            self.store.messages.filter(lambda message: message.recipient_id == self.tutor_id)
        )

    # Announcements

    def create_announcement(self, data: Mapping[str, Any]) -> Announcement:
        require_fields(data, "title", "content")
        fields = _pick(data, ANNOUNCEMENT_FIELDS)
        fields.setdefault("audience", "all")
        fields.setdefault("publish_date", utcnow_iso())
        fields["created_by"] = self.tutor_id
        return self.store.announcements.create(fields)

    def list_announcements(self) -> List[Announcement]:
        return queries.newest_first(
            self.store.announcements.filter(lambda item: item.created_by == self.tutor_id)
        )

    def _own_announcement(self, announcement_id: str) -> Optional[Announcement]:
        item = self.store.announcements.get_by_id(announcement_id)
        if item is None or item.created_by != self.tutor_id:
            return None
        return item

    def update_announcement(self, announcement_id: str, data: Mapping[str, Any]) -> Optional[Announcement]:
        if self._own_announcement(announcement_id) is None:
            return None
        changes = _pick(data, ANNOUNCEMENT_FIELDS)
        for name in ("title", "content"):
            if name in changes:
                require_fields(changes, name)
        return self.store.announcements.update(announcement_id, changes)

    def delete_announcement(self, announcement_id: str) -> bool:
        if self._own_announcement(announcement_id) is None:
            return False
        return self.store.announcements.delete(announcement_id)

    # Lessons

    def list_lessons(self, status: Optional[str] = None) -> List[Booking]:
        lessons = queries.bookings_for_tutor(self.store, self.tutor_id)
        if status:
            lessons = [lesson for lesson in lessons if lesson.status == status]
        return queries.sort_bookings(lessons)

    def update_lesson(self, booking_id: str, data: Mapping[str, Any]) -> Optional[Booking]:
        """Change a lesson's status or meeting link.

        Moving a lesson to ``completed`` records one earning for it in
        the same unit of work.
        """
        logger = logging.getLogger(__name__)
        booking = self._own(self.store.bookings.get_by_id(booking_id))
        if booking is None:
            return None
        changes = _pick(data, LESSON_FIELDS)
        status = changes.get("status")
        if status is not None and status not in LESSON_STATUSES:
            raise ValidationFailed(f"Tutors cannot set status {status}", fields=["status"])
        with self.store.unit_of_work():
            updated = self.store.bookings.update(booking_id, changes)
            if status == "completed":
                self._record_earning(updated)
        logger.info("Tutor %s updated lesson %s", self.tutor_id, booking_id)
        return updated

    def monthly_earnings(self) -> Dict[str, float]:
        return queries.monthly_earnings(queries.bookings_for_tutor(self.store, self.tutor_id))

    # Earnings and payouts

    def _record_earning(self, booking: Booking) -> Optional[Earning]:
        if self.store.earnings.find(lambda earning: earning.booking_id == booking.id) is not None:
            return None
        profile = self.profile()
        commission = (profile.commission if profile else None) or 0
        return self.store.earnings.create(
            {
                "tutor_id": self.tutor_id,
                "booking_id": booking.id,
                "amount": booking.total,
                "commission": commission,
                "net_amount": round(booking.total * (1 - commission), 2),
                "currency": booking.currency,
            }
        )

    def list_earnings(self, status: Optional[str] = None) -> List[Earning]:
        earnings = self.store.earnings.filter(lambda earning: earning.tutor_id == self.tutor_id)
        if status:
            earnings = [earning for earning in earnings if earning.status == status]
        return queries.newest_first(earnings)

    def payout_settings(self) -> PayoutSetting:
        """The tutor's payout preferences, created with defaults on first use."""
        setting = self.store.payout_settings.find(lambda item: item.tutor_id == self.tutor_id)
        if setting is None:
            setting = self.store.payout_settings.create({"tutor_id": self.tutor_id, "updated_at": utcnow_iso()})
        return setting

    def update_payout_settings(self, data: Mapping[str, Any]) -> PayoutSetting:
        with self.store.unit_of_work():
            setting = self.payout_settings()
            changes = _pick(data, PAYOUT_FIELDS)
            changes["updated_at"] = utcnow_iso()
            return self.store.payout_settings.update(setting.id, changes)

    # Teaching materials

    def create_material(self, data: Mapping[str, Any]) -> LessonMaterial:
        require_fields(data, "title", "file_url")
        fields = _pick(data, MATERIAL_FIELDS)
        fields["tutor_id"] = self.tutor_id
        return self.store.lesson_materials.create(fields)

    def list_materials(self, subject: Optional[str] = None) -> List[LessonMaterial]:
        materials = self.store.lesson_materials.filter(lambda material: material.tutor_id == self.tutor_id)
        if subject:
            materials = [material for material in materials if material.subject == subject]
        return queries.newest_first(materials)

    def update_material(self, material_id: str, data: Mapping[str, Any]) -> Optional[LessonMaterial]:
        if self._own(self.store.lesson_materials.get_by_id(material_id)) is None:
            return None
        changes = _pick(data, MATERIAL_FIELDS)
        for name in ("title", "file_url"):
            if name in changes:
                require_fields(changes, name)
        return self.store.lesson_materials.update(material_id, changes)

    def delete_material(self, material_id: str) -> bool:
        if self._own(self.store.lesson_materials.get_by_id(material_id)) is None:
            return False
        return self.store.lesson_materials.delete(material_id)

    # Lesson notes

    def get_lesson_note(self, booking_id: str) -> Optional[LessonNote]:
        return self.store.lesson_notes.find(
            lambda note: note.booking_id == booking_id and note.tutor_id == self.tutor_id
        )

    def save_lesson_note(self, booking_id: str, data: Mapping[str, Any]) -> Optional[LessonNote]:
        """Create or replace the tutor's note for one of their lessons."""
        if self._own(self.store.bookings.get_by_id(booking_id)) is None:
            return None
        changes = _pick(data, NOTE_FIELDS)
        with self.store.unit_of_work():
            note = self.get_lesson_note(booking_id)
            if note is not None:
                return self.store.lesson_notes.update(note.id, changes)
            changes.update(tutor_id=self.tutor_id, booking_id=booking_id)
            return self.store.lesson_notes.create(changes)

    # Student records

    def _tutor_name(self) -> str:
        profile = self.profile()
        return profile.name if profile else ""

    def _for_student(self, student_id: Optional[str], fields: Dict[str, Any]) -> Dict[str, Any]:
        require_fields({"student_id": student_id}, "student_id")
        fields.update(student_id=student_id, tutor_id=self.tutor_id, tutor_name=self._tutor_name())
        return fields

    def schedule_student_lesson(self, student_id: str, data: Mapping[str, Any]) -> StudentLesson:
        require_fields(data, "subject", "date", "slot")
        fields = self._for_student(student_id, _pick(data, STUDENT_LESSON_FIELDS))
        return self.store.student_lessons.create(fields)

    def list_student_lessons(self, student_id: Optional[str] = None) -> List[StudentLesson]:
        lessons = self.store.student_lessons.filter(
            lambda lesson: lesson.tutor_id == self.tutor_id and (not student_id or lesson.student_id == student_id)
        )
        return queries.newest_first(lessons, "date")

    def update_student_lesson(self, lesson_id: str, data: Mapping[str, Any]) -> Optional[StudentLesson]:
        if self._own(self.store.student_lessons.get_by_id(lesson_id)) is None:
            return None
        changes = _pick(data, STUDENT_LESSON_UPDATE_FIELDS)
        for name in ("date", "slot"):
            if name in changes:
                require_fields(changes, name)
        return self.store.student_lessons.update(lesson_id, changes)

    def record_attendance(self, lesson_id: str, status: Optional[str]) -> Optional[AttendanceRecord]:
        """Record (or correct) whether the student attended a lesson.

        The attendance record and the lesson's ``attendance`` field are
        written together.
        """
        require_fields({"status": status}, "status")
        lesson = self._own(self.store.student_lessons.get_by_id(lesson_id))
        if lesson is None:
            return None
        with self.store.unit_of_work():
            record = self.store.attendance.find(lambda item: item.lesson_id == lesson_id)
            if record is None:
                record = self.store.attendance.create(
                    {
                        "student_id": lesson.student_id,
                        "lesson_id": lesson.id,
                        "tutor_id": self.tutor_id,
                        "tutor_name": lesson.tutor_name,
                        "lesson_date": lesson.date,
                        "subject": lesson.subject,
                        "status": status,
                    }
                )
            else:
                record = self.store.attendance.update(record.id, {"status": status})
            self.store.student_lessons.update(lesson_id, {"attendance": status})
        return record

    def assign_homework(self, student_id: str, data: Mapping[str, Any]) -> Homework:
        require_fields(data, "title", "subject", "due_date")
        fields = self._for_student(student_id, _pick(data, HOMEWORK_FIELDS))
        return self.store.homework.create(fields)

    def list_homework(self, student_id: Optional[str] = None) -> List[Homework]:
        items = self.store.homework.filter(
            lambda item: item.tutor_id == self.tutor_id and (not student_id or item.student_id == student_id)
        )
        return queries.newest_first(items, "due_date")

    def review_homework(self, homework_id: str, data: Mapping[str, Any]) -> Optional[Homework]:
        """Change a homework's status or due date, or leave feedback on it."""
        if self._own(self.store.homework.get_by_id(homework_id)) is None:
            return None
        changes = _pick(data, REVIEW_FIELDS)
        if "tutor_feedback" in changes:
            changes["tutor_feedback_date"] = utcnow_iso()
        return self.store.homework.update(homework_id, changes)

    def share_material(self, student_id: str, data: Mapping[str, Any]) -> StudentMaterial:
        require_fields(data, "name", "file_url", "subject")
        fields = self._for_student(student_id, _pick(data, STUDENT_MATERIAL_FIELDS))
        return self.store.student_materials.create(fields)

    def add_progress_entry(self, student_id: str, data: Mapping[str, Any]) -> ProgressEntry:
        require_fields(data, "subject", "lesson_date")
        fields = self._for_student(student_id, _pick(data, PROGRESS_FIELDS))
        return self.store.progress.create(fields)
