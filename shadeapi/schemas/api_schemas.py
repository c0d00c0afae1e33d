from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional
from datetime import datetime

from shadeapi.models.database_models import UserRole

# Auth Schemas
class SignupRequest(BaseModel):
    # Built only after validate_signup_data accepted the raw body
    email: EmailStr
    password: str
    role: UserRole
    firstName: str = Field(..., max_length=50)
    lastName: str = Field(..., max_length=50)

class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None

class UserResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    email: EmailStr
    role: UserRole
    firstName: str
    lastName: str
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_document(cls, user: dict) -> "UserResponse":
        # password and other stored-only fields are dropped here
        return cls.model_validate({**user, "_id": str(user["_id"])})

class LoginResponse(BaseModel):
    user: UserResponse
    token: str
