"""
Serialization codec for persisted tables.

A table is persisted as a JSON document::

    {"schemaVersion": 1, "records": [{...}, {...}]}

``decode`` never raises.  A missing value, invalid JSON, a document of
the wrong shape or an unknown schema version all decode to an empty
list, with a warning logged.  Records that fail model validation are
dropped one by one.  A bare JSON list (the layout used before the
version tag was introduced) is read as version 1.
"""

import json
import logging
from typing import Any, List, Optional, Sequence, Type, TypeVar

from pydantic import ValidationError

from ..schemas.entity import Entity


SCHEMA_VERSION = 1

E = TypeVar("E", bound=Entity)

logger = logging.getLogger(__name__)


def encode(records: Sequence[Entity]) -> str:
    """Serialize ``records`` into the versioned table document."""
    return json.dumps(
        {
            "schemaVersion": SCHEMA_VERSION,
            "records": [record.to_record() for record in records],
        },
        ensure_ascii=False,
    )


def _extract_records(document: Any, key: str) -> Optional[List[Any]]:
    if isinstance(document, list):
        return document
    if not isinstance(document, dict):
        logger.warning("Table %s is not a JSON object or list; ignoring it", key)
        return None
    version = document.get("schemaVersion")
    if version != SCHEMA_VERSION:
        logger.warning(
            "Table %s has unsupported schema version %r; ignoring it", key, version
        )
        return None
    records = document.get("records")
    if not isinstance(records, list):
        logger.warning("Table %s has no record list; ignoring it", key)
        return None
    return records


def decode(raw: Optional[str], model: Type[E], key: str = "") -> List[E]:
    """Parse a persisted table into ``model`` instances."""
    if raw is None or raw == "":
        return []
    try:
        document = json.loads(raw)
    except (TypeError, ValueError) as exc:
        logger.warning("Table %s is not valid JSON (%s); starting empty", key, exc)
        return []

    records = _extract_records(document, key)
    if records is None:
        return []

    entities: List[E] = []
    for position, record in enumerate(records):
        try:
            entities.append(model.model_validate(record))
        except ValidationError as exc:
            logger.warning(
                "Dropping invalid record #%s in table %s: %s",
                position,
                key,
                exc.errors(include_url=False),
            )
    return entities
