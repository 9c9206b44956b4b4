"""Authentication request schemas"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jobportal.core.security import PasswordHasher
from jobportal.schemas.user import UserRole, check_email


def _strong_password(value: str) -> str:
    check = PasswordHasher.validate(value, require_special=True)
    if not check.valid:
        raise ValueError("; ".join(check.errors))
    return value


class RegisterRequest(BaseModel):
    """Registration payload"""
    email: str
    password: str
    full_name: str = Field(..., min_length=2, max_length=120)
    role: UserRole = UserRole.JOB_SEEKER
    phone: Optional[str] = Field(None, max_length=32)
    company_name: Optional[str] = Field(None, max_length=120)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return check_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _strong_password(v)

    @field_validator("full_name")
    @classmethod
    def strip_full_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Full name must be at least 2 characters")
        return v


class LoginRequest(BaseModel):
    """Login payload"""
    email: str
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return check_email(v)


class RefreshTokenRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str = Field(..., min_length=1, alias="refreshToken")


class LogoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str = Field(..., min_length=1, alias="refreshToken")


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    old_password: str = Field(..., min_length=1, alias="oldPassword")
    new_password: str = Field(..., alias="newPassword")

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return _strong_password(v)
