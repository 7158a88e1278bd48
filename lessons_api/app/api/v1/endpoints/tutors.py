"""
Tutor endpoints for API v1.

Routes under ``/tutors/{tutor_id}`` for the tutor's profile, weekly
availability, conversations, announcements, assigned lessons and what
they earned from them, teaching materials and lesson notes, and the
lessons, homework, materials, progress and attendance of their students.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status

from lessons_api.app.api.deps import call, found, get_tutor_service
from lessons_api.app.schemas.account import AccountUpdate
from lessons_api.app.schemas.announcement import Announcement, AnnouncementCreate, AnnouncementUpdate
from lessons_api.app.schemas.availability import AvailabilityCreate, AvailabilitySlot, AvailabilityUpdate
from lessons_api.app.schemas.booking import Booking, BookingUpdate
from lessons_api.app.schemas.messaging import Conversation, ConversationCreate, Message, MessageCreate
from lessons_api.app.schemas.student import (
    AttendanceCreate,
    AttendanceRecord,
    Homework,
    HomeworkCreate,
    HomeworkReview,
    ProgressEntry,
    ProgressEntryCreate,
    StudentLesson,
    StudentLessonCreate,
    StudentLessonUpdate,
    StudentMaterial,
    StudentMaterialCreate,
)
from lessons_api.app.schemas.tutoring import (
    Earning,
    LessonMaterial,
    LessonMaterialCreate,
    LessonMaterialUpdate,
    LessonNote,
    LessonNoteWrite,
    PayoutSetting,
    PayoutSettingUpdate,
)
from lessons_api.app.services.tutor_service import TutorService


router = APIRouter()


@router.get("/{tutor_id}/profile", response_model=Dict[str, Any])
def get_profile(service: TutorService = Depends(get_tutor_service)) -> Dict[str, Any]:
    return found(service.profile(), "Tutor").public()


@router.patch("/{tutor_id}/profile", response_model=Dict[str, Any])
def update_profile(payload: AccountUpdate, service: TutorService = Depends(get_tutor_service)) -> Dict[str, Any]:
    account = call(service.update_profile, payload.model_dump(exclude_none=True))
    return found(account, "Tutor").public()


# Availability

@router.get("/{tutor_id}/availability", response_model=List[AvailabilitySlot])
def list_availability(service: TutorService = Depends(get_tutor_service)) -> List[AvailabilitySlot]:
    return service.list_availability()


@router.post("/{tutor_id}/availability", response_model=AvailabilitySlot, status_code=status.HTTP_201_CREATED)
def add_availability(payload: AvailabilityCreate, service: TutorService = Depends(get_tutor_service)) -> AvailabilitySlot:
    return call(service.add_availability, payload.model_dump(exclude_none=True))


@router.patch("/{tutor_id}/availability/{slot_id}", response_model=AvailabilitySlot)
def update_availability(
    slot_id: str,
    payload: AvailabilityUpdate,
    service: TutorService = Depends(get_tutor_service),
) -> AvailabilitySlot:
    slot = call(service.update_availability, slot_id, payload.model_dump(exclude_none=True))
    return found(slot, "Availability slot")


@router.delete("/{tutor_id}/availability/{slot_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_availability(slot_id: str, service: TutorService = Depends(get_tutor_service)) -> None:
    found(service.delete_availability(slot_id), "Availability slot")
    return None


# Conversations

@router.get("/{tutor_id}/conversations", response_model=List[Conversation])
def list_conversations(service: TutorService = Depends(get_tutor_service)) -> List[Conversation]:
    """Conversations with parents and students, most recent first."""
    return service.list_conversations()


@router.post("/{tutor_id}/conversations", response_model=Conversation)
def start_conversation(payload: ConversationCreate, service: TutorService = Depends(get_tutor_service)) -> Conversation:
    """Open a conversation, or return the existing one with that participant."""
    return call(service.start_conversation, payload.participant_id, payload.participant_role)


@router.get("/{tutor_id}/conversations/{conversation_id}/messages", response_model=List[Message])
def conversation_messages(conversation_id: str, service: TutorService = Depends(get_tutor_service)) -> List[Message]:
    return found(service.conversation_messages(conversation_id), "Conversation")


@router.post(
    "/{tutor_id}/conversations/{conversation_id}/messages",
    response_model=Message,
    status_code=status.HTTP_201_CREATED,
)
def send_message(
    conversation_id: str,
    payload: MessageCreate,
    service: TutorService = Depends(get_tutor_service),
) -> Message:
    return found(call(service.send_message, conversation_id, payload.content), "Conversation")


@router.get("/{tutor_id}/messages/unread", response_model=Dict[str, int])
def unread_messages(service: TutorService = Depends(get_tutor_service)) -> Dict[str, int]:
    return {"unread": service.unread_message_count()}


@router.post("/{tutor_id}/message-reads/{message_id}", response_model=Message)
def mark_message_read(message_id: str, service: TutorService = Depends(get_tutor_service)) -> Message:
    return found(service.mark_message_read(message_id), "Message")


# Announcements

@router.get("/{tutor_id}/announcements", response_model=List[Announcement])
def list_announcements(service: TutorService = Depends(get_tutor_service)) -> List[Announcement]:
    return service.list_announcements()


@router.post("/{tutor_id}/announcements", response_model=Announcement, status_code=status.HTTP_201_CREATED)
def create_announcement(payload: AnnouncementCreate, service: TutorService = Depends(get_tutor_service)) -> Announcement:
    return call(service.create_announcement, payload.model_dump(exclude_none=True))


@router.patch("/{tutor_id}/announcements/{announcement_id}", response_model=Announcement)
def update_announcement(
    announcement_id: str,
    payload: AnnouncementUpdate,
    service: TutorService = Depends(get_tutor_service),
) -> Announcement:
    announcement = call(service.update_announcement, announcement_id, payload.model_dump(exclude_none=True))
    return found(announcement, "Announcement")


@router.delete("/{tutor_id}/announcements/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_announcement(announcement_id: str, service: TutorService = Depends(get_tutor_service)) -> None:
    found(service.delete_announcement(announcement_id), "Announcement")
    return None


# Lessons

@router.get("/{tutor_id}/lessons", response_model=List[Booking])
def list_lessons(
    status_param: Optional[str] = Query(None, alias="status"),
    service: TutorService = Depends(get_tutor_service),
) -> List[Booking]:
    return service.list_lessons(status_param)


@router.patch("/{tutor_id}/lessons/{booking_id}", response_model=Booking)
def update_lesson(booking_id: str, payload: BookingUpdate, service: TutorService = Depends(get_tutor_service)) -> Booking:
    """Change a lesson's status or meeting link.  Other fields are ignored."""
    lesson = call(service.update_lesson, booking_id, payload.model_dump(exclude_none=True))
    return found(lesson, "Lesson")


@router.get("/{tutor_id}/earnings", response_model=Dict[str, float])
def monthly_earnings(service: TutorService = Depends(get_tutor_service)) -> Dict[str, float]:
    """Completed lesson totals per month, newest month first."""
    return service.monthly_earnings()


@router.get("/{tutor_id}/earnings/records", response_model=List[Earning])
def list_earnings(
    status_param: Optional[str] = Query(None, alias="status"),
    service: TutorService = Depends(get_tutor_service),
) -> List[Earning]:
    """One record per completed lesson, newest first."""
    return service.list_earnings(status_param)


@router.get("/{tutor_id}/payout-settings", response_model=PayoutSetting)
def get_payout_settings(service: TutorService = Depends(get_tutor_service)) -> PayoutSetting:
    return service.payout_settings()


@router.patch("/{tutor_id}/payout-settings", response_model=PayoutSetting)
def update_payout_settings(
    payload: PayoutSettingUpdate,
    service: TutorService = Depends(get_tutor_service),
) -> PayoutSetting:
    return call(service.update_payout_settings, payload.model_dump(exclude_none=True))


# Lesson notes

@router.get("/{tutor_id}/lessons/{booking_id}/notes", response_model=LessonNote)
def get_lesson_note(booking_id: str, service: TutorService = Depends(get_tutor_service)) -> LessonNote:
    return found(service.get_lesson_note(booking_id), "Lesson note")


@router.put("/{tutor_id}/lessons/{booking_id}/notes", response_model=LessonNote)
def save_lesson_note(
    booking_id: str,
    payload: LessonNoteWrite,
    service: TutorService = Depends(get_tutor_service),
) -> LessonNote:
    return found(call(service.save_lesson_note, booking_id, payload.model_dump(exclude_none=True)), "Lesson")


# Teaching materials

@router.get("/{tutor_id}/materials", response_model=List[LessonMaterial])
def list_materials(subject: Optional[str] = None, service: TutorService = Depends(get_tutor_service)) -> List[LessonMaterial]:
    return service.list_materials(subject)


@router.post("/{tutor_id}/materials", response_model=LessonMaterial, status_code=status.HTTP_201_CREATED)
def create_material(payload: LessonMaterialCreate, service: TutorService = Depends(get_tutor_service)) -> LessonMaterial:
    return call(service.create_material, payload.model_dump(exclude_none=True))


@router.patch("/{tutor_id}/materials/{material_id}", response_model=LessonMaterial)
def update_material(
    material_id: str,
    payload: LessonMaterialUpdate,
    service: TutorService = Depends(get_tutor_service),
) -> LessonMaterial:
    material = call(service.update_material, material_id, payload.model_dump(exclude_none=True))
    return found(material, "Material")


@router.delete("/{tutor_id}/materials/{material_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_material(material_id: str, service: TutorService = Depends(get_tutor_service)) -> None:
    found(service.delete_material(material_id), "Material")
    return None


# Student records

@router.get("/{tutor_id}/student-lessons", response_model=List[StudentLesson])
def list_student_lessons(
    student_id: Optional[str] = Query(None, alias="studentId"),
    service: TutorService = Depends(get_tutor_service),
) -> List[StudentLesson]:
    return service.list_student_lessons(student_id)


@router.post(
    "/{tutor_id}/students/{student_id}/lessons",
    response_model=StudentLesson,
    status_code=status.HTTP_201_CREATED,
)
def schedule_student_lesson(
    student_id: str,
    payload: StudentLessonCreate,
    service: TutorService = Depends(get_tutor_service),
) -> StudentLesson:
    return call(service.schedule_student_lesson, student_id, payload.model_dump(exclude_none=True))


@router.patch("/{tutor_id}/student-lessons/{lesson_id}", response_model=StudentLesson)
def update_student_lesson(
    lesson_id: str,
    payload: StudentLessonUpdate,
    service: TutorService = Depends(get_tutor_service),
) -> StudentLesson:
    lesson = call(service.update_student_lesson, lesson_id, payload.model_dump(exclude_none=True))
    return found(lesson, "Lesson")


@router.put("/{tutor_id}/student-lessons/{lesson_id}/attendance", response_model=AttendanceRecord)
def record_attendance(
    lesson_id: str,
    payload: AttendanceCreate,
    service: TutorService = Depends(get_tutor_service),
) -> AttendanceRecord:
    return found(call(service.record_attendance, lesson_id, payload.status), "Lesson")


@router.get("/{tutor_id}/homework", response_model=List[Homework])
def list_homework(
    student_id: Optional[str] = Query(None, alias="studentId"),
    service: TutorService = Depends(get_tutor_service),
) -> List[Homework]:
    return service.list_homework(student_id)


@router.post(
    "/{tutor_id}/students/{student_id}/homework",
    response_model=Homework,
    status_code=status.HTTP_201_CREATED,
)
def assign_homework(
    student_id: str,
    payload: HomeworkCreate,
    service: TutorService = Depends(get_tutor_service),
) -> Homework:
    return call(service.assign_homework, student_id, payload.model_dump(exclude_none=True))


@router.patch("/{tutor_id}/homework/{homework_id}", response_model=Homework)
def review_homework(
    homework_id: str,
    payload: HomeworkReview,
    service: TutorService = Depends(get_tutor_service),
) -> Homework:
    homework = call(service.review_homework, homework_id, payload.model_dump(exclude_none=True))
    return found(homework, "Homework")


@router.post(
    "/{tutor_id}/students/{student_id}/materials",
    response_model=StudentMaterial,
    status_code=status.HTTP_201_CREATED,
)
def share_material(
    student_id: str,
    payload: StudentMaterialCreate,
    service: TutorService = Depends(get_tutor_service),
) -> StudentMaterial:
    return call(service.share_material, student_id, payload.model_dump(exclude_none=True))


@router.post(
    "/{tutor_id}/students/{student_id}/progress",
    response_model=ProgressEntry,
    status_code=status.HTTP_201_CREATED,
)
def add_progress_entry(
    student_id: str,
    payload: ProgressEntryCreate,
    service: TutorService = Depends(get_tutor_service),
) -> ProgressEntry:
    return call(service.add_progress_entry, student_id, payload.model_dump(exclude_none=True))
