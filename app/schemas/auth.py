"""Authentication schemas"""

from pydantic import field_validator
from typing import Optional
from datetime import datetime
import re

from app.schemas.chat import CamelModel

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PASSWORD_MIN_LENGTH = 6


def _check_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Please provide a valid email address")
    return value


class RegisterRequest(CamelModel):
    """Registration request schema"""
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return _check_email(value)

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        if len(value) < PASSWORD_MIN_LENGTH:
            raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
        if not (re.search(r"[a-z]", value) and re.search(r"[A-Z]", value) and re.search(r"\d", value)):
            raise ValueError(
                "Password must contain at least one uppercase letter, one lowercase letter, and one number"
            )
        return value


class LoginRequest(CamelModel):
    """Login request schema"""
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return _check_email(value)

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        if not value:
            raise ValueError("Password is required")
        return value


class UserOut(CamelModel):
    """Public user schema"""
    id: str
    email: str
    created_at: datetime
    last_login: Optional[datetime] = None
    conversation_count: int = 0


class AuthResponse(CamelModel):
    """Register / login response schema"""
    message: str
    token: str
    user: UserOut


class VerifyResponse(CamelModel):
    valid: bool = True
    user: UserOut


class ProfileResponse(UserOut):
    """Profile with statistics"""
    total_messages: int = 0
