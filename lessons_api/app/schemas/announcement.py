"""
Pydantic models for announcements.

``Announcement`` is the global record written by an admin or a tutor
and addressed to an audience.  ``ParentAnnouncement`` is the per-parent
copy synthesized from it; the copy tracks whether that parent has read
or dismissed it, and ``read_at`` and ``dismissed_at`` are the only
fields that change after creation.  A dismissed copy is kept so the
same announcement is not copied again.
"""

from typing import ClassVar, FrozenSet, Literal, Optional

from pydantic import Field

from .entity import CamelModel, Entity


Audience = Literal["all", "tutors", "students", "parents"]
AnnouncementSource = Literal["tutor", "admin", "system"]


class Announcement(Entity):
    ID_PREFIX: ClassVar[str] = "ann"

    title: str
    content: str
    audience: Audience = "all"
    created_by: str = "admin"
    publish_date: str


class ParentAnnouncement(Entity):
    ID_PREFIX: ClassVar[str] = "pann"
    MUTABLE_FIELDS: ClassVar[Optional[FrozenSet[str]]] = frozenset({"read_at", "dismissed_at"})

    parent_id: str
    title: str
    content: str
    source: AnnouncementSource = "system"
    source_id: str = ""
    source_name: str = ""
    read_at: Optional[str] = None
    dismissed_at: Optional[str] = None


class AnnouncementCreate(CamelModel):
    title: Optional[str] = Field(None, examples=["Half-term timetable"])
    content: Optional[str] = None
    audience: Optional[Audience] = None
    publish_date: Optional[str] = None


class AnnouncementUpdate(CamelModel):
    title: Optional[str] = None
    content: Optional[str] = None
    audience: Optional[Audience] = None
    publish_date: Optional[str] = None
