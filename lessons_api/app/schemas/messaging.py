"""
Pydantic models for conversations and messages.

A conversation always pairs a tutor with one other participant (a
parent or a student).  Its id is derived from that pair rather than
generated, so both sides resolve the same conversation independently
(see ``services.queries.derive_conversation_id``).

Messages are immutable once sent, apart from ``read_at`` which is set
when the recipient reads them.
"""

from typing import ClassVar, FrozenSet, Literal, Optional

from pydantic import Field

from .entity import CamelModel, Entity


ParticipantRole = Literal["parent", "student"]
SenderRole = Literal["parent", "tutor", "student", "admin"]


class Conversation(Entity):
    ID_PREFIX: ClassVar[str] = "conv"

    tutor_id: str
    parent_id: Optional[str] = None
    participant_id: str
    participant_role: ParticipantRole = "parent"
    last_message: Optional[str] = None
    last_message_at: Optional[str] = None
    unread_count: int = 0


class Message(Entity):
    ID_PREFIX: ClassVar[str] = "msg"
    MUTABLE_FIELDS: ClassVar[Optional[FrozenSet[str]]] = frozenset({"read_at"})

    conversation_id: str
    sender_id: str
    sender_role: SenderRole
    recipient_id: str
    content: str
    read_at: Optional[str] = None


class MessageCreate(CamelModel):
    content: Optional[str] = Field(None, examples=["See you on Monday!"])


class ConversationCreate(CamelModel):
    participant_id: Optional[str] = None
    participant_role: ParticipantRole = "parent"


class ConversationSummary(CamelModel):
    """Latest activity with one other party, as seen by the viewer."""

    conversation_id: str
    participant_id: str
    last_message: Optional[str] = None
    last_message_at: Optional[str] = None
    unread_count: int = 0
