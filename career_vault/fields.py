"""Per-entity field maps.

Each persisted entity declares which of its columns hold personal data
and must be encrypted at rest. Columns not listed are passed through.
"""
from enum import Enum
from collections.abc import Iterator, Mapping


class FieldKind(str, Enum):
    ENCRYPTED = "encrypted"
    PASSTHROUGH = "passthrough"


class EntityFields:
    """Field map of one database table.

    Iterating an ``EntityFields`` yields its encrypted column names, so it
    can be handed to ``encrypt_fields``/``decrypt_fields`` directly.
    """

    def __init__(self, table: str, fields: Mapping[str, FieldKind]):
        self.table = table
        self._fields = dict(fields)

    def __repr__(self) -> str:
        return f'<EntityFields {self.table} encrypted={list(self.encrypted)}>'

    def __iter__(self) -> Iterator[str]:
        return iter(self.encrypted)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    @property
    def encrypted(self) -> tuple[str, ...]:
        return tuple(
            name for name, kind in self._fields.items()
            if kind is FieldKind.ENCRYPTED
        )

    def kind_of(self, name: str) -> FieldKind:
        """Return the kind of a column; unknown columns are passthrough."""
        return self._fields.get(name, FieldKind.PASSTHROUGH)


COVER_LETTER = EntityFields(
    "cover_letters",
    {
        "id": FieldKind.PASSTHROUGH,
        "user_id": FieldKind.PASSTHROUGH,
        "title": FieldKind.PASSTHROUGH,
        "content": FieldKind.ENCRYPTED,
        "company_name": FieldKind.ENCRYPTED,
        "job_position": FieldKind.ENCRYPTED,
        "job_description": FieldKind.ENCRYPTED,
        "resume_id": FieldKind.PASSTHROUGH,
        "status": FieldKind.PASSTHROUGH,
        "feedback": FieldKind.PASSTHROUGH,
        "ai_generated": FieldKind.PASSTHROUGH,
        "ai_provider": FieldKind.PASSTHROUGH,
        "created_at": FieldKind.PASSTHROUGH,
        "updated_at": FieldKind.PASSTHROUGH,
    },
)

RESUME = EntityFields(
    "resumes",
    {
        "id": FieldKind.PASSTHROUGH,
        "user_id": FieldKind.PASSTHROUGH,
        "title": FieldKind.PASSTHROUGH,
        "file_url": FieldKind.PASSTHROUGH,
        "content": FieldKind.PASSTHROUGH,
        "raw_text": FieldKind.ENCRYPTED,
        "analysis_result": FieldKind.PASSTHROUGH,
        "created_at": FieldKind.PASSTHROUGH,
        "updated_at": FieldKind.PASSTHROUGH,
    },
)

PROFILE = EntityFields(
    "users",
    {
        "id": FieldKind.PASSTHROUGH,
        "email": FieldKind.PASSTHROUGH,
        "name": FieldKind.PASSTHROUGH,
        "experience_level": FieldKind.PASSTHROUGH,
        "preferred_ai": FieldKind.PASSTHROUGH,
        "target_job": FieldKind.ENCRYPTED,
        "created_at": FieldKind.PASSTHROUGH,
        "updated_at": FieldKind.PASSTHROUGH,
    },
)

ENTITIES: dict[str, EntityFields] = {
    entity.table: entity for entity in (COVER_LETTER, RESUME, PROFILE)
}


def get_entity(name: str) -> EntityFields:
    """Look up an entity field map by table name.

    Raises:
        KeyError: If no entity is registered under that name.
    """
    try:
        return ENTITIES[name]
    except KeyError:
        raise KeyError(f"Unknown entity: {name}") from None
