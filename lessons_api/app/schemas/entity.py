"""
Base model shared by every stored entity.

Attributes are snake_case in Python and camelCase (``parentId``,
``createdAt``) in the persisted and HTTP representations.  Either
spelling is accepted on input.
"""

from typing import Any, ClassVar, Dict, FrozenSet, Mapping, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Pydantic model that reads and writes camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Entity(CamelModel):
    """A record stored in one of the ``LocalStore`` tables.

    ``ID_PREFIX`` is prepended to generated ids.  ``IMMUTABLE_FIELDS``
    are never changed by ``Table.update``; when ``MUTABLE_FIELDS`` is
    set, only those fields may be changed at all.
    """

    ID_PREFIX: ClassVar[str] = "rec"
    IMMUTABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset({"id", "created_at"})
    MUTABLE_FIELDS: ClassVar[Optional[FrozenSet[str]]] = None

    id: str
    created_at: str

    @classmethod
    def field_names(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Return ``data`` with camelCase keys mapped to attribute names."""
        aliases = {
            field.alias: name
            for name, field in cls.model_fields.items()
            if field.alias and field.alias != name
        }
        return {aliases.get(key, key): value for key, value in data.items()}

    @classmethod
    def is_mutable(cls, name: str) -> bool:
        if name in cls.IMMUTABLE_FIELDS:
            return False
        return cls.MUTABLE_FIELDS is None or name in cls.MUTABLE_FIELDS

    def to_record(self) -> Dict[str, Any]:
        """JSON-ready dict in the persisted (camelCase) layout."""
        return self.model_dump(mode="json", by_alias=True)
