from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..extensions import db


class TimestampMixin:
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())


def utcnow():
    return datetime.now(timezone.utc)


class RecordModel(BaseModel):
    """Base for the JSON records kept in the record store.

    Attributes are snake_case in Python; the persisted/served JSON uses the
    camelCase names (``fileName``, ``startIndex`` ...). Either form is accepted
    on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self):
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def resolve_field(cls, name):
        """Map a JSON (camelCase) or attribute name to the attribute name."""
        if name in cls.model_fields:
            return name
        for attr, info in cls.model_fields.items():
            if info.alias == name:
                return attr
        return None
