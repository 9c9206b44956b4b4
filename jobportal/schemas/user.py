"""User schemas"""

import re
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$")


class UserRole(str, Enum):
    """User role enumeration"""
    ADMIN = "admin"
    EMPLOYER = "employer"
    RECRUITER = "recruiter"
    JOB_SEEKER = "job_seeker"


def normalize_email(value: str) -> str:
    return (value or "").strip().lower()


def check_email(value: str) -> str:
    """Normalize and validate email format."""
    value = normalize_email(value)
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Invalid email address")
    return value


class UserResponse(BaseModel):
    """Public view of a user; the password hash never leaves the service."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    full_name: str
    role: str
    phone: Optional[str] = None
    company_name: Optional[str] = None
    is_active: bool
    is_verified: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProfileUpdate(BaseModel):
    """Self-service profile changes. Email and role are not editable here."""
    model_config = ConfigDict(extra="ignore")

    full_name: Optional[str] = Field(None, min_length=2, max_length=120)
    phone: Optional[str] = Field(None, max_length=32)
    company_name: Optional[str] = Field(None, max_length=120)


class UserStatusUpdate(BaseModel):
    """Admin toggle of a user's active flag"""
    is_active: bool


def public_user(user) -> dict:
    """JSON-ready public view of a user record."""
    return UserResponse.model_validate(user).model_dump(mode="json")
