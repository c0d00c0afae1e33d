from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class UserRole(str, Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    email: str  # lowercased, unique
    password: str  # bcrypt hash
    role: UserRole
    firstName: str = Field(..., max_length=50)
    lastName: str = Field(..., max_length=50)
    createdAt: datetime = Field(default_factory=_utcnow)
    updatedAt: datetime = Field(default_factory=_utcnow)
