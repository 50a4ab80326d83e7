# finance_api/schemas/user.py
import uuid
from datetime import datetime
from pydantic import EmailStr, Field, field_validator

from finance_api.schemas.base import APIModel

BCRYPT_MAX_BYTES = 72

class UserRegister(APIModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, value: str) -> str:
        # bcrypt only hashes the first 72 bytes
        if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
        return value

class UserLogin(APIModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()

# Public projection, never carries the password hash
class UserRead(APIModel):
    id: uuid.UUID
    name: str
    email: EmailStr
    created_at: datetime

class AuthResponse(APIModel):
    message: str
    user: UserRead
    token: str

class ProfileResponse(APIModel):
    user: UserRead

class MessageResponse(APIModel):
    message: str
