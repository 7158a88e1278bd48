"""
Student endpoints for API v1.

Routes under ``/students/{student_id}`` are scoped to that student:
their lessons, homework, shared materials, progress, attendance and
messages with tutors.  Records that belong to another student answer
404.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status

from lessons_api.app.api.deps import call, found, get_student_service
from lessons_api.app.schemas.account import AccountUpdate
from lessons_api.app.schemas.messaging import Conversation, ConversationSummary, Message, MessageCreate
from lessons_api.app.schemas.student import (
    AttendanceRecord,
    AttendanceStats,
    Homework,
    HomeworkSubmission,
    ProgressEntry,
    StudentLesson,
    StudentMaterial,
)
from lessons_api.app.services.student_service import StudentService


router = APIRouter()


@router.get("/{student_id}/profile", response_model=Dict[str, Any])
def get_profile(service: StudentService = Depends(get_student_service)) -> Dict[str, Any]:
    return found(service.profile(), "Student").public()


@router.patch("/{student_id}/profile", response_model=Dict[str, Any])
def update_profile(payload: AccountUpdate, service: StudentService = Depends(get_student_service)) -> Dict[str, Any]:
    account = call(service.update_profile, payload.model_dump(exclude_none=True))
    return found(account, "Student").public()


# Lessons

@router.get("/{student_id}/lessons", response_model=List[StudentLesson])
def list_lessons(
    status_param: Optional[str] = Query(None, alias="status"),
    service: StudentService = Depends(get_student_service),
) -> List[StudentLesson]:
    """The student's lessons, latest date first."""
    return service.list_lessons(status_param)


@router.get("/{student_id}/lessons/{lesson_id}", response_model=StudentLesson)
def get_lesson(lesson_id: str, service: StudentService = Depends(get_student_service)) -> StudentLesson:
    return found(service.get_lesson(lesson_id), "Lesson")


# Homework

@router.get("/{student_id}/homework", response_model=List[Homework])
def list_homework(
    status_param: Optional[str] = Query(None, alias="status"),
    service: StudentService = Depends(get_student_service),
) -> List[Homework]:
    return service.list_homework(status_param)


@router.get("/{student_id}/homework/{homework_id}", response_model=Homework)
def get_homework(homework_id: str, service: StudentService = Depends(get_student_service)) -> Homework:
    return found(service.get_homework(homework_id), "Homework")


@router.post("/{student_id}/homework/{homework_id}/submit", response_model=Homework)
def submit_homework(
    homework_id: str,
    payload: HomeworkSubmission,
    service: StudentService = Depends(get_student_service),
) -> Homework:
    return found(call(service.submit_homework, homework_id, payload.submission_url), "Homework")


# Materials

@router.get("/{student_id}/materials", response_model=List[StudentMaterial])
def list_materials(subject: Optional[str] = None, service: StudentService = Depends(get_student_service)) -> List[StudentMaterial]:
    return service.list_materials(subject)


@router.post("/{student_id}/materials/{material_id}/downloaded", response_model=StudentMaterial)
def mark_material_downloaded(material_id: str, service: StudentService = Depends(get_student_service)) -> StudentMaterial:
    return found(service.mark_material_downloaded(material_id), "Material")


# Progress and attendance

@router.get("/{student_id}/progress", response_model=List[ProgressEntry])
def progress(subject: Optional[str] = None, service: StudentService = Depends(get_student_service)) -> List[ProgressEntry]:
    return service.progress(subject)


@router.get("/{student_id}/attendance", response_model=List[AttendanceRecord])
def attendance(service: StudentService = Depends(get_student_service)) -> List[AttendanceRecord]:
    return service.attendance()


@router.get("/{student_id}/attendance/stats", response_model=AttendanceStats)
def attendance_stats(service: StudentService = Depends(get_student_service)) -> AttendanceStats:
    return service.attendance_stats()


# Messages

@router.get("/{student_id}/conversations", response_model=List[ConversationSummary])
def list_conversations(service: StudentService = Depends(get_student_service)) -> List[ConversationSummary]:
    return service.conversations()


@router.post("/{student_id}/conversations/{tutor_id}", response_model=Conversation)
def start_conversation(tutor_id: str, service: StudentService = Depends(get_student_service)) -> Conversation:
    """Open the conversation with a tutor, or return the existing one."""
    return call(service.start_conversation, tutor_id)


@router.get("/{student_id}/messages/unread", response_model=Dict[str, int])
def unread_messages(service: StudentService = Depends(get_student_service)) -> Dict[str, int]:
    return {"unread": service.unread_message_count()}


@router.get("/{student_id}/messages/{tutor_id}", response_model=List[Message])
def conversation_messages(tutor_id: str, service: StudentService = Depends(get_student_service)) -> List[Message]:
    return call(service.conversation_messages, tutor_id)


@router.post("/{student_id}/messages/{tutor_id}", response_model=Message, status_code=status.HTTP_201_CREATED)
def send_message(
    tutor_id: str,
    payload: MessageCreate,
    service: StudentService = Depends(get_student_service),
) -> Message:
    return call(service.send_message, tutor_id, payload.content)


@router.post("/{student_id}/message-reads/{message_id}", response_model=Message)
def mark_message_read(message_id: str, service: StudentService = Depends(get_student_service)) -> Message:
    return found(service.mark_message_read(message_id), "Message")
