"""Pydantic models for the children a parent books lessons for."""

from typing import ClassVar, List, Optional

from pydantic import Field

from .entity import CamelModel, Entity


class Child(Entity):
    ID_PREFIX: ClassVar[str] = "child"

    parent_id: str
    name: str
    age: Optional[int] = None
    school_year: str = ""
    subjects: List[str] = Field(default_factory=list)
    progress_notes: Optional[str] = None


class ChildCreate(CamelModel):
    name: Optional[str] = Field(None, examples=["Tom"])
    age: Optional[int] = Field(None, ge=0)
    school_year: Optional[str] = Field(None, examples=["Year 6"])
    subjects: Optional[List[str]] = None
    progress_notes: Optional[str] = None


class ChildUpdate(ChildCreate):
    pass
