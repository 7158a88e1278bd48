"""Tests for ``StudentService`` and the tutor operations that feed it."""

import pytest

from lessons_api.app.core.errors import ValidationFailed
from lessons_api.app.services.student_service import StudentService
from lessons_api.app.services.tutor_service import TutorService


@pytest.fixture
def service(store, student):
    return StudentService(store, student.id)


@pytest.fixture
def tutor_service(store, tutor):
    return TutorService(store, tutor.id)


def _lesson(tutor_service, student_id, date="2024-09-01", subject="Math"):
    return tutor_service.schedule_student_lesson(
        student_id, {"subject": subject, "date": date, "slot": "16:00-17:00"}
    )


def test_lessons_latest_first(service, tutor_service, student, tutor):
    early = _lesson(tutor_service, student.id, date="2024-01-05")
    late = _lesson(tutor_service, student.id, date="2024-03-05")
    _lesson(tutor_service, "stu_other")

    assert [lesson.id for lesson in service.list_lessons()] == [late.id, early.id]
    assert early.tutor_name == "Tom Tutor"
    assert early.status == "scheduled"
    assert service.get_lesson(early.id).tutor_id == tutor.id

    tutor_service.update_student_lesson(early.id, {"status": "completed"})
    assert [lesson.id for lesson in service.list_lessons("completed")] == [early.id]


def test_lessons_of_other_students_are_absent(store, service, tutor_service):
    lesson = _lesson(tutor_service, "stu_other")
    assert service.get_lesson(lesson.id) is None
    assert StudentService(store, "stu_other").get_lesson(lesson.id) == lesson


def test_schedule_lesson_requires_fields(store, tutor_service, student):
    with pytest.raises(ValidationFailed) as excinfo:
        tutor_service.schedule_student_lesson(student.id, {"subject": "Math"})
    assert excinfo.value.fields == ["date", "slot"]
    with pytest.raises(ValidationFailed):
        tutor_service.schedule_student_lesson("", {"subject": "Math", "date": "2024-01-01", "slot": "x"})
    assert store.student_lessons.list() == []


def test_homework_submit_and_review(service, tutor_service, student):
    homework = tutor_service.assign_homework(
        student.id, {"title": "Fractions", "subject": "Math", "due_date": "2024-09-08"}
    )
    assert homework.status == "pending"
    assert service.list_homework() == [homework]

    with pytest.raises(ValidationFailed):
        service.submit_homework(homework.id, " ")

    submitted = service.submit_homework(homework.id, "https://example.com/answers.pdf")
    assert submitted.status == "submitted"
    assert submitted.submission_date
    assert service.list_homework("submitted") == [submitted]

    reviewed = tutor_service.review_homework(homework.id, {"status": "completed", "tutor_feedback": "Well done"})
    assert reviewed.tutor_feedback == "Well done"
    assert reviewed.tutor_feedback_date
    assert service.get_homework(homework.id).status == "completed"

    with pytest.raises(ValidationFailed):
        service.submit_homework(homework.id, "https://example.com/again.pdf")


def test_homework_sorted_by_due_date(service, tutor_service, student):
    first = tutor_service.assign_homework(student.id, {"title": "A", "subject": "Math", "due_date": "2024-01-01"})
    second = tutor_service.assign_homework(student.id, {"title": "B", "subject": "Math", "due_date": "2024-02-01"})
    assert [item.id for item in service.list_homework()] == [second.id, first.id]


def test_homework_of_other_students_is_absent(store, service, tutor_service):
    homework = tutor_service.assign_homework("stu_other", {"title": "A", "subject": "Math", "due_date": "2024-01-01"})
    assert service.get_homework(homework.id) is None
    assert service.submit_homework(homework.id, "https://example.com/x") is None
    assert TutorService(store, "tut_other").review_homework(homework.id, {"status": "completed"}) is None


def test_materials_by_subject(service, tutor_service, student):
    math = tutor_service.share_material(
        student.id, {"name": "Times tables", "file_url": "https://example.com/t.pdf", "subject": "Math", "category": "pdf"}
    )
    tutor_service.share_material(
        student.id, {"name": "Poems", "file_url": "https://example.com/p.pdf", "subject": "English"}
    )
    assert len(service.list_materials()) == 2
    assert service.list_materials("Math") == [math]

    downloaded = service.mark_material_downloaded(math.id)
    assert downloaded.downloaded_at
    assert StudentService(service.store, "stu_other").mark_material_downloaded(math.id) is None


def test_progress_by_subject(service, tutor_service, student):
    older = tutor_service.add_progress_entry(
        student.id, {"subject": "Math", "lesson_date": "2024-01-10", "topics_covered": ["Fractions"]}
    )
    newer = tutor_service.add_progress_entry(student.id, {"subject": "Math", "lesson_date": "2024-02-10"})
    english = tutor_service.add_progress_entry(student.id, {"subject": "English", "lesson_date": "2024-03-10"})

    assert [entry.id for entry in service.progress()] == [english.id, newer.id, older.id]
    assert [entry.id for entry in service.progress("Math")] == [newer.id, older.id]
    assert older.topics_covered == ["Fractions"]


def test_attendance_and_stats(store, service, tutor_service, student):
    assert service.attendance_stats().model_dump() == {
        "total": 0, "present": 0, "absent": 0, "excused": 0, "percentage": 0,
    }
    lessons = [_lesson(tutor_service, student.id, date=f"2024-01-0{day}") for day in (1, 2, 3)]
    tutor_service.record_attendance(lessons[0].id, "present")
    tutor_service.record_attendance(lessons[1].id, "present")
    tutor_service.record_attendance(lessons[2].id, "absent")

    stats = service.attendance_stats()
    assert (stats.total, stats.present, stats.absent, stats.excused) == (3, 2, 1, 0)
    assert stats.percentage == 67
    assert [record.lesson_date for record in service.attendance()] == ["2024-01-03", "2024-01-02", "2024-01-01"]
    assert service.get_lesson(lessons[2].id).attendance == "absent"

    corrected = tutor_service.record_attendance(lessons[2].id, "excused")
    assert corrected.status == "excused"
    assert len(store.attendance.list()) == 3
    assert service.get_lesson(lessons[2].id).attendance == "excused"
    assert service.attendance_stats().excused == 1


def test_attendance_percentage_rounds_half_up(service, tutor_service, student):
    first = _lesson(tutor_service, student.id)
    second = _lesson(tutor_service, student.id)
    tutor_service.record_attendance(first.id, "present")
    tutor_service.record_attendance(second.id, "excused")
    assert service.attendance_stats().percentage == 50


def test_record_attendance_rejects_bad_input(store, tutor_service, student):
    lesson = _lesson(tutor_service, student.id)
    with pytest.raises(ValidationFailed):
        tutor_service.record_attendance(lesson.id, "")
    with pytest.raises(ValueError):
        tutor_service.record_attendance(lesson.id, "late")
    assert store.attendance.list() == []
    assert store.student_lessons.get_by_id(lesson.id).attendance is None
    assert TutorService(store, "tut_other").record_attendance(lesson.id, "present") is None


def test_messaging_with_tutor(store, service, tutor_service, student, tutor):
    conversation = service.start_conversation(tutor.id)
    assert conversation.participant_role == "student"
    assert conversation.parent_id is None
    assert service.start_conversation(tutor.id).id == conversation.id

    sent = service.send_message(tutor.id, "Can we go over question 3?")
    assert sent.sender_role == "student"
    assert sent.recipient_id == tutor.id
    assert tutor_service.list_conversations()[0].unread_count == 1

    reply = tutor_service.send_message(conversation.id, "Of course")
    assert reply.recipient_id == student.id
    assert [message.content for message in service.conversation_messages(tutor.id)] == [
        "Can we go over question 3?",
        "Of course",
    ]
    assert service.unread_message_count() == 1
    assert service.conversations()[0].participant_id == tutor.id

    service.mark_message_read(reply.id)
    assert service.unread_message_count() == 0
    assert len(store.conversations.list()) == 1


def test_update_profile(service, student):
    updated = service.update_profile({"school_year": "Year 9", "role": "admin"})
    assert updated.school_year == "Year 9"
    assert updated.role == "student"
    with pytest.raises(ValidationFailed):
        service.update_profile({"name": ""})
