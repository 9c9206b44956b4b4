"""Pydantic schemas for API validation"""

from jobportal.schemas.user import UserRole, UserResponse, ProfileUpdate, UserStatusUpdate
from jobportal.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    RefreshTokenRequest,
    LogoutRequest,
    ChangePasswordRequest,
)
from jobportal.schemas.job import (
    JobStatus,
    JobType,
    ApplicationStatus,
    JobCreate,
    JobUpdate,
    ApplicationCreate,
    ApplicationStatusUpdate,
    JobResponse,
    ApplicationResponse,
)
from jobportal.schemas.response import APIResponse, HealthResponse

__all__ = [
    "UserRole", "UserResponse", "ProfileUpdate", "UserStatusUpdate",
    "RegisterRequest", "LoginRequest", "RefreshTokenRequest", "LogoutRequest", "ChangePasswordRequest",
    "JobStatus", "JobType", "ApplicationStatus", "JobCreate", "JobUpdate",
    "ApplicationCreate", "ApplicationStatusUpdate", "JobResponse", "ApplicationResponse",
    "APIResponse", "HealthResponse"
]
