"""
Pydantic models for the student area.

Students are accounts with the ``student`` role.  Their lessons,
homework, shared materials, progress notes and attendance are written
by tutors and read by the student; the only change a student makes is
handing in homework.
"""

from typing import ClassVar, FrozenSet, List, Literal, Optional

from pydantic import Field

from .booking import LessonType
from .entity import CamelModel, Entity


StudentLessonStatus = Literal["scheduled", "completed", "cancelled", "rescheduled"]
AttendanceStatus = Literal["present", "absent", "excused"]
HomeworkStatus = Literal["pending", "submitted", "completed", "overdue"]
MaterialCategory = Literal["worksheet", "video", "pdf", "presentation", "image", "document", "assignment"]


class StudentLesson(Entity):
    ID_PREFIX: ClassVar[str] = "less"

    student_id: str
    tutor_id: str
    tutor_name: str = ""
    subject: str
    lesson_type: LessonType = "one_to_one"
    date: str  # YYYY-MM-DD
    slot: str  # HH:MM-HH:MM
    duration: int = 60  # minutes
    meeting_link: Optional[str] = None
    notes: Optional[str] = None
    status: StudentLessonStatus = "scheduled"
    attendance: Optional[AttendanceStatus] = None


class StudentLessonCreate(CamelModel):
    subject: Optional[str] = Field(None, examples=["Math"])
    lesson_type: Optional[LessonType] = None
    date: Optional[str] = Field(None, examples=["2024-09-01"])
    slot: Optional[str] = Field(None, examples=["16:00-17:00"])
    duration: Optional[int] = Field(None, ge=1)
    meeting_link: Optional[str] = None
    notes: Optional[str] = None


class StudentLessonUpdate(CamelModel):
    date: Optional[str] = None
    slot: Optional[str] = None
    duration: Optional[int] = Field(None, ge=1)
    meeting_link: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[StudentLessonStatus] = None


class Homework(Entity):
    ID_PREFIX: ClassVar[str] = "hw"
    MUTABLE_FIELDS: ClassVar[Optional[FrozenSet[str]]] = frozenset({
        "title", "description", "due_date", "instructions", "attachments", "status",
        "submission_url", "submission_date", "tutor_feedback", "tutor_feedback_date",
    })

    student_id: str
    tutor_id: str
    tutor_name: str = ""
    title: str
    description: str = ""
    subject: str
    due_date: str
    instructions: Optional[str] = None
    attachments: List[str] = Field(default_factory=list)
    status: HomeworkStatus = "pending"
    submission_url: Optional[str] = None
    submission_date: Optional[str] = None
    tutor_feedback: Optional[str] = None
    tutor_feedback_date: Optional[str] = None


class HomeworkCreate(CamelModel):
    title: Optional[str] = Field(None, examples=["Fractions worksheet"])
    description: Optional[str] = None
    subject: Optional[str] = Field(None, examples=["Math"])
    due_date: Optional[str] = Field(None, examples=["2024-09-08"])
    instructions: Optional[str] = None
    attachments: Optional[List[str]] = None


class HomeworkSubmission(CamelModel):
    submission_url: Optional[str] = Field(None, examples=["https://example.com/answers.pdf"])


class HomeworkReview(CamelModel):
    """A tutor's verdict on handed-in homework."""

    status: Optional[HomeworkStatus] = None
    tutor_feedback: Optional[str] = None
    due_date: Optional[str] = None


class StudentMaterial(Entity):
    ID_PREFIX: ClassVar[str] = "smat"

    student_id: str
    tutor_id: str
    tutor_name: str = ""
    name: str
    description: Optional[str] = None
    file_url: str
    file_type: str = ""
    category: MaterialCategory = "document"
    subject: str
    associated_lesson: Optional[str] = None
    downloaded_at: Optional[str] = None


class StudentMaterialCreate(CamelModel):
    name: Optional[str] = Field(None, examples=["Times tables"])
    description: Optional[str] = None
    file_url: Optional[str] = None
    file_type: Optional[str] = Field(None, examples=["application/pdf"])
    category: Optional[MaterialCategory] = None
    subject: Optional[str] = None
    associated_lesson: Optional[str] = None


class ProgressEntry(Entity):
    ID_PREFIX: ClassVar[str] = "prog"

    student_id: str
    tutor_id: str
    tutor_name: str = ""
    subject: str
    lesson_date: str
    topics_covered: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    feedback: Optional[str] = None


class ProgressEntryCreate(CamelModel):
    subject: Optional[str] = None
    lesson_date: Optional[str] = Field(None, examples=["2024-09-01"])
    topics_covered: Optional[List[str]] = None
    notes: Optional[str] = None
    feedback: Optional[str] = None


class AttendanceRecord(Entity):
    ID_PREFIX: ClassVar[str] = "att"
    MUTABLE_FIELDS: ClassVar[Optional[FrozenSet[str]]] = frozenset({"status"})

    student_id: str
    lesson_id: str
    tutor_id: str
    tutor_name: str = ""
    lesson_date: str
    subject: str
    status: AttendanceStatus


class AttendanceCreate(CamelModel):
    status: Optional[AttendanceStatus] = Field(None, examples=["present"])


class AttendanceStats(CamelModel):
    total: int = 0
    present: int = 0
    absent: int = 0
    excused: int = 0
    # Whole-number share of lessons attended; 0 when there are none.
    percentage: int = 0
