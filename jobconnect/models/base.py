from datetime import datetime, timezone
from typing import Annotated, Optional

from bson import ObjectId
from pydantic import AfterValidator, BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def new_id() -> str:
    return str(ObjectId())


def is_valid_id(value) -> bool:
    # ObjectId.is_valid also accepts any 12-byte string
    return isinstance(value, str) and len(value) == 24 and ObjectId.is_valid(value)


UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]


class Document(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)


class DomainModel(Document):
    """A stored record. ``id`` is the only identifier the domain layer sees."""

    id: str = Field(default_factory=new_id)
