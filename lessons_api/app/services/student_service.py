"""
Student-facing service.

Students read what their tutors record for them (lessons, homework,
shared materials, progress notes and attendance) and message their
tutors.  Handing in homework and marking a material as downloaded are
the only writes a student makes to those records.  Records that belong
to another student are treated as absent.
"""

import logging
from typing import Any, List, Mapping, Optional

from ..core.errors import ValidationFailed, require_fields
from ..core.store import LocalStore, utcnow_iso
from ..schemas.account import Account
from ..schemas.messaging import Conversation, ConversationSummary, Message
from ..schemas.student import (
    AttendanceRecord,
    AttendanceStats,
    Homework,
    ProgressEntry,
    StudentLesson,
    StudentMaterial,
)
from . import messaging, queries


PROFILE_FIELDS = frozenset({"name", "school_year", "phone", "password"})
SUBMITTABLE_STATUSES = frozenset({"pending", "overdue", "submitted"})


class StudentService:
    """Operations available to one student."""

    def __init__(self, store: LocalStore, student_id: str) -> None:
        self.store = store
        self.student_id = student_id

    def _own(self, record):
        if record is None or record.student_id != self.student_id:
            return None
        return record

    # Profile

    def profile(self) -> Optional[Account]:
        return self.store.accounts.get_by_id(self.student_id)

    def update_profile(self, data: Mapping[str, Any]) -> Optional[Account]:
        changes = {key: value for key, value in data.items() if key in PROFILE_FIELDS and value is not None}
        for name in ("name", "password"):
            if name in changes:
                require_fields(changes, name)
        return self.store.accounts.update(self.student_id, changes)

    # Lessons

    def list_lessons(self, status: Optional[str] = None) -> List[StudentLesson]:
        lessons = queries.records_for_student(self.store.student_lessons, self.student_id)
        if status:
            lessons = [lesson for lesson in lessons if lesson.status == status]
        return queries.newest_first(lessons, "date")

    def get_lesson(self, lesson_id: str) -> Optional[StudentLesson]:
        return self._own(self.store.student_lessons.get_by_id(lesson_id))

    # Homework

    def list_homework(self, status: Optional[str] = None) -> List[Homework]:
        """Homework by due date, latest first."""
        items = queries.records_for_student(self.store.homework, self.student_id)
        if status:
            items = [item for item in items if item.status == status]
        return queries.newest_first(items, "due_date")

    def get_homework(self, homework_id: str) -> Optional[Homework]:
        return self._own(self.store.homework.get_by_id(homework_id))

    def submit_homework(self, homework_id: str, submission_url: Optional[str]) -> Optional[Homework]:
        """Hand in homework.  Completed homework cannot be handed in again."""
        logger = logging.getLogger(__name__)
        require_fields({"submission_url": submission_url}, "submission_url")
        homework = self.get_homework(homework_id)
        if homework is None:
            return None
        if homework.status not in SUBMITTABLE_STATUSES:
            raise ValidationFailed(f"Homework {homework_id} is already {homework.status}", fields=["status"])
        submitted = self.store.homework.update(
            homework_id,
            {"submission_url": submission_url, "submission_date": utcnow_iso(), "status": "submitted"},
        )
        logger.info("Student %s submitted homework %s", self.student_id, homework_id)
        return submitted

    # Materials

    def list_materials(self, subject: Optional[str] = None) -> List[StudentMaterial]:
        return queries.newest_first(
            queries.records_for_student(self.store.student_materials, self.student_id, subject)
        )

    def mark_material_downloaded(self, material_id: str) -> Optional[StudentMaterial]:
        material = self._own(self.store.student_materials.get_by_id(material_id))
        if material is None:
            return None
        return self.store.student_materials.update(material_id, {"downloaded_at": utcnow_iso()})

    # Progress and attendance

    def progress(self, subject: Optional[str] = None) -> List[ProgressEntry]:
        """Progress notes by lesson date, latest first."""
        return queries.newest_first(
            queries.records_for_student(self.store.progress, self.student_id, subject),
            "lesson_date",
        )

    def attendance(self) -> List[AttendanceRecord]:
        return queries.newest_first(
            queries.records_for_student(self.store.attendance, self.student_id),
            "lesson_date",
        )

    def attendance_stats(self) -> AttendanceStats:
        return queries.attendance_stats(self.attendance())

    # Messages

    def start_conversation(self, tutor_id: Optional[str]) -> Conversation:
        require_fields({"tutor_id": tutor_id}, "tutor_id")
        return messaging.get_or_create_conversation(self.store, tutor_id, self.student_id, "student")

    def send_message(self, tutor_id: str, content: Optional[str]) -> Message:
        require_fields({"tutor_id": tutor_id, "content": content}, "tutor_id", "content")
        with self.store.unit_of_work():
            conversation = self.start_conversation(tutor_id)
            return messaging.send_message(self.store, conversation, self.student_id, "student", content)

    def conversation_messages(self, tutor_id: str) -> List[Message]:
        conversation_id = queries.derive_conversation_id(self.student_id, tutor_id)
        return queries.messages_for_conversation(self.store, conversation_id)

    def conversations(self) -> List[ConversationSummary]:
        messages = queries.messages_for_participant(self.store, self.student_id)
        return queries.conversation_summaries(messages, self.student_id)

    def mark_message_read(self, message_id: str) -> Optional[Message]:
        message = self.store.messages.get_by_id(message_id)
        return messaging.mark_read(self.store.messages, message, reader_id=self.student_id)

    def unread_message_count(self) -> int:
        return queries.unread_count(
            self.store.messages.filter(lambda message: message.recipient_id == self.student_id)
        )
