"""
Conversation and message operations shared by the parent and tutor
services.

A conversation pairs a tutor with one parent or student and is stored
under the id derived from that pair, so whichever side writes first
creates it and the other side finds it.  Sending a message inserts the
message and refreshes the conversation's last-message fields in one
unit of work.
"""

import logging
from typing import Optional

from ..core.errors import require_fields
from ..core.store import LocalStore, Table, utcnow_iso
from ..schemas.messaging import Conversation, Message
from .queries import derive_conversation_id


def get_or_create_conversation(
    store: LocalStore,
    tutor_id: str,
    participant_id: str,
    participant_role: str = "parent",
) -> Conversation:
    require_fields(
        {"tutor_id": tutor_id, "participant_id": participant_id},
        "tutor_id",
        "participant_id",
    )
    conversation_id = derive_conversation_id(participant_id, tutor_id)
    existing = store.conversations.get_by_id(conversation_id)
    if existing is not None:
        return existing
    fields = {
        "tutor_id": tutor_id,
        "participant_id": participant_id,
        "participant_role": participant_role,
        "parent_id": participant_id if participant_role == "parent" else None,
    }
    return store.conversations.create(fields, entity_id=conversation_id)


def send_message(
    store: LocalStore,
    conversation: Conversation,
    sender_id: str,
    sender_role: str,
    content: Optional[str],
) -> Message:
    """Append a message to ``conversation`` from one of its two parties."""
    logger = logging.getLogger(__name__)
    require_fields({"content": content}, "content")
    recipient_id = (
        conversation.participant_id if sender_id == conversation.tutor_id else conversation.tutor_id
    )
    with store.unit_of_work():
        message = store.messages.create(
            {
                "conversation_id": conversation.id,
                "sender_id": sender_id,
                "sender_role": sender_role,
                "recipient_id": recipient_id,
                "content": content,
            }
        )
        store.conversations.update(
            conversation.id,
            {"last_message": content, "last_message_at": message.created_at},
        )
    logger.info("Message %s sent in %s", message.id, conversation.id)
    return message


def mark_read(table: Table, record, reader_id: Optional[str] = None):
    """Stamp ``read_at`` on a message or announcement copy.

    Already-read records are returned unchanged without a write.  When
    ``reader_id`` is given, only the recipient may mark a message read;
    for anyone else the record is treated as absent.
    """
    if record is None:
        return None
    if reader_id is not None and getattr(record, "recipient_id", reader_id) != reader_id:
        return None
    if record.read_at:
        return record
    return table.update(record.id, {"read_at": utcnow_iso()})
