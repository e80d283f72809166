from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from .base import DomainModel, UTCDateTime, utcnow


class Role(str, Enum):
    JOB_SEEKER = "job_seeker"
    RECRUITER = "recruiter"
    ADMIN = "admin"


class User(DomainModel):
    username: str
    email: EmailStr
    password_hash: str
    role: Role = Role.JOB_SEEKER
    # first_name, last_name, phone, location, skills, experience, resume ...
    profile: Dict[str, Any] = Field(default_factory=dict)
    is_active: bool = True
    created_at: UTCDateTime = Field(default_factory=utcnow)


class Actor(BaseModel):
    """The authenticated caller, as seen by the workflow."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    id: str
    role: Role

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(id=user.id, role=user.role)
