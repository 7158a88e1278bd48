"""
Entity store.

``LocalStore`` owns one ``Table`` per entity kind.  Each table is
persisted as a single value under ``"<namespace>.<table>"`` in a
storage medium from ``core.db``, and every operation is a complete
read-modify-write cycle against it: nothing is cached between calls,
so a write made through one caller is visible to every other caller on
its next read.

Tables are scanned linearly.

Writes to several tables are independent unless they are made inside
``LocalStore.unit_of_work()``, which stages them and commits them
together through ``storage.set_items``.
"""

import logging
import random
import string
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Dict, Generic, Iterator, List, Mapping, Optional, Type, TypeVar

from . import codec
from .config import settings
from .db import create_storage
from ..schemas.account import Account
from ..schemas.announcement import Announcement, ParentAnnouncement
from ..schemas.availability import AvailabilitySlot
from ..schemas.booking import Booking
from ..schemas.child import Child
from ..schemas.entity import Entity
from ..schemas.messaging import Conversation, Message
from ..schemas.payment import Payment
from ..schemas.student import AttendanceRecord, Homework, ProgressEntry, StudentLesson, StudentMaterial
from ..schemas.tutoring import Earning, LessonMaterial, LessonNote, PayoutSetting


E = TypeVar("E", bound=Entity)

_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def new_id(prefix: str) -> str:
    """Return ``<prefix>_<ms timestamp in base36>_<6 random base36 chars>``."""
    millis = int(time.time() * 1000)
    suffix = "".join(random.choices(_BASE36, k=6))
    return f"{prefix}_{_to_base36(millis)}_{suffix}"


def utcnow_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and ``Z``."""
    now = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return now.replace("+00:00", "Z")


class Table(Generic[E]):
    """CRUD over one persisted collection of ``model`` records."""

    def __init__(self, store: "LocalStore", name: str, model: Type[E]) -> None:
        self.store = store
        self.name = name
        self.model = model

    @property
    def key(self) -> str:
        return self.store.key_for(self.name)

    def list(self) -> List[E]:
        """All records in insertion order.  Each call returns fresh copies."""
        return self.store.load(self.key, self.model)

    def find(self, predicate: Callable[[E], bool]) -> Optional[E]:
        for record in self.list():
            if predicate(record):
                return record
        return None

    def filter(self, predicate: Callable[[E], bool]) -> List[E]:
        return [record for record in self.list() if predicate(record)]

    def get_by_id(self, entity_id: str) -> Optional[E]:
        return self.find(lambda record: record.id == entity_id)

    def create(self, partial: Optional[Mapping] = None, entity_id: Optional[str] = None) -> E:
        """Insert a new record built from ``partial``.

        The id is generated from the model's prefix unless
        ``entity_id`` is given.  Generated ``id`` and ``created_at``
        take precedence over values in ``partial``.  Raises
        ``ValueError`` if ``entity_id`` is already taken.
        """
        logger = logging.getLogger(__name__)
        records = self.list()
        if entity_id is not None and any(record.id == entity_id for record in records):
            raise ValueError(f"{self.name} record {entity_id} already exists")

        data = self.model.field_names(partial or {})
        data["id"] = entity_id or new_id(self.model.ID_PREFIX)
        data["created_at"] = utcnow_iso()
        entity = self.model.model_validate(data)

        records.append(entity)
        self.store.save(self.key, records)
        logger.info("Created %s record %s", self.name, entity.id)
        return entity

    def update(self, entity_id: str, partial: Mapping) -> Optional[E]:
        """Shallow-merge ``partial`` into the record with ``entity_id``.

        Fields absent from ``partial`` keep their values.  Unknown and
        immutable fields are ignored.  Returns ``None`` when no record
        has that id.
        """
        logger = logging.getLogger(__name__)
        records = self.list()
        for index, record in enumerate(records):
            if record.id == entity_id:
                break
        else:
            return None

        changes = {}
        for name, value in self.model.field_names(partial).items():
            if name not in self.model.model_fields:
                continue
            if not self.model.is_mutable(name):
                logger.warning("Ignoring change to read-only field %s.%s", self.name, name)
                continue
            changes[name] = value

        data = record.model_dump()
        data.update(changes)
        updated = self.model.model_validate(data)
        records[index] = updated
        self.store.save(self.key, records)
        logger.info("Updated %s record %s (%s)", self.name, entity_id, ", ".join(sorted(changes)) or "no changes")
        return updated

    def delete(self, entity_id: str) -> bool:
        """Remove the record; return whether one was removed."""
        logger = logging.getLogger(__name__)
        records = self.list()
        remaining = [record for record in records if record.id != entity_id]
        if len(remaining) == len(records):
            return False
        self.store.save(self.key, remaining)
        logger.info("Deleted %s record %s", self.name, entity_id)
        return True


class LocalStore:
    """All tables of the application over one storage medium.

    Construct one per application (or test) and pass it to the
    services that need it.
    """

    def __init__(self, storage, namespace: Optional[str] = None) -> None:
        self.storage = storage
        self.namespace = namespace or settings.storage_namespace
        self._staged: Optional[Dict[str, str]] = None

        self.accounts: Table[Account] = Table(self, "accounts", Account)
        self.bookings: Table[Booking] = Table(self, "bookings", Booking)
        self.payments: Table[Payment] = Table(self, "payments", Payment)
        self.availability: Table[AvailabilitySlot] = Table(self, "availability", AvailabilitySlot)
        self.conversations: Table[Conversation] = Table(self, "conversations", Conversation)
        self.messages: Table[Message] = Table(self, "messages", Message)
        self.announcements: Table[Announcement] = Table(self, "announcements", Announcement)
        self.parent_announcements: Table[ParentAnnouncement] = Table(
            self, "parent_announcements", ParentAnnouncement
        )
        self.children: Table[Child] = Table(self, "children", Child)

        self.lesson_materials: Table[LessonMaterial] = Table(self, "materials", LessonMaterial)
        self.lesson_notes: Table[LessonNote] = Table(self, "lesson_notes", LessonNote)
        self.earnings: Table[Earning] = Table(self, "earnings", Earning)
        self.payout_settings: Table[PayoutSetting] = Table(self, "payout_settings", PayoutSetting)

        self.student_lessons: Table[StudentLesson] = Table(self, "student_lessons", StudentLesson)
        self.homework: Table[Homework] = Table(self, "student_homework", Homework)
        self.student_materials: Table[StudentMaterial] = Table(self, "student_materials", StudentMaterial)
        self.progress: Table[ProgressEntry] = Table(self, "student_progress", ProgressEntry)
        self.attendance: Table[AttendanceRecord] = Table(self, "student_attendance", AttendanceRecord)

    @classmethod
    def from_settings(cls) -> "LocalStore":
        return cls(create_storage(), settings.storage_namespace)

    def key_for(self, table_name: str) -> str:
        return f"{self.namespace}.{table_name}"

    def load(self, key: str, model: Type[E]) -> List[E]:
        """Read and decode the table stored under ``key``.

        Never raises: storage read errors and malformed payloads both
        produce an empty list.
        """
        if self._staged is not None and key in self._staged:
            raw = self._staged[key]
        else:
            try:
                raw = self.storage.get_item(key)
            except Exception:
                logging.getLogger(__name__).exception("Failed to read %s; starting empty", key)
                return []
        return codec.decode(raw, model, key)

    def save(self, key: str, records: List[Entity]) -> None:
        """Overwrite the table stored under ``key`` with ``records``."""
        raw = codec.encode(records)
        if self._staged is not None:
            self._staged[key] = raw
        else:
            self.storage.set_item(key, raw)

    @contextmanager
    def unit_of_work(self) -> Iterator["LocalStore"]:
        """Stage every table write in the block and commit them together.

        Reads inside the block see staged values.  If the block raises,
        nothing is written.  Nested blocks join the outermost one.
        """
        if self._staged is not None:
            yield self
            return
        self._staged = {}
        try:
            yield self
            staged, self._staged = self._staged, None
            self.storage.set_items(staged)
            logging.getLogger(__name__).debug("Committed unit of work: %s", ", ".join(sorted(staged)))
        finally:
            self._staged = None
