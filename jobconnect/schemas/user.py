from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from jobconnect.models.user import Role, User


# 1. For Registration (Input)
class UserCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(..., min_length=3, max_length=30)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Role = Role.JOB_SEEKER
    profile: Dict[str, Any] = Field(default_factory=dict)


# 2. For Login (Input)
class UserLogin(BaseModel):
    email: EmailStr
    password: str


# 3. For Responses (Output)
class UserResponse(BaseModel):
    id: str
    username: str
    email: EmailStr
    role: Role
    profile: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            role=user.role,
            profile=user.profile,
            created_at=user.created_at,
        )


class UserData(BaseModel):
    user: UserResponse


class AuthData(UserData):
    token: str
