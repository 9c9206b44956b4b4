"""Persistence contracts.

Services talk to persistence only through CredentialStore and JobBoardStore;
each backing store gets one adapter per contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class UserRecord:
    id: str
    email: str
    password_hash: str
    full_name: str
    role: str
    phone: Optional[str] = None
    company_name: Optional[str] = None
    is_active: bool = True
    is_verified: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class RefreshTokenRecord:
    id: int
    user_id: str
    token: str
    expires_at: datetime
    created_at: Optional[datetime] = None


class CredentialStore(ABC):
    """Persistence for principals and their outstanding refresh tokens."""

    # Users

    @abstractmethod
    def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        """Exact match on an already-normalized email."""

    @abstractmethod
    def find_user_by_id(self, user_id: str) -> Optional[UserRecord]: ...

    @abstractmethod
    def insert_user(
        self,
        *,
        email: str,
        password_hash: str,
        full_name: str,
        role: str,
        phone: Optional[str] = None,
        company_name: Optional[str] = None,
        is_active: bool = True,
        is_verified: bool = False,
    ) -> UserRecord:
        """Persist a new principal. Raises ConflictError on a duplicate email."""

    @abstractmethod
    def update_user(self, user_id: str, **fields: Any) -> Optional[UserRecord]:
        """Apply field updates; None when the user does not exist."""

    @abstractmethod
    def delete_user(self, user_id: str) -> bool:
        """Remove a principal together with its refresh tokens."""

    @abstractmethod
    def list_users(
        self,
        role: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> List[UserRecord]: ...

    # Refresh tokens

    @abstractmethod
    def insert_refresh_token(self, *, user_id: str, token: str, expires_at: datetime) -> RefreshTokenRecord: ...

    @abstractmethod
    def find_refresh_token(self, token: str, user_id: str) -> Optional[RefreshTokenRecord]: ...

    @abstractmethod
    def delete_refresh_token(self, token: str, user_id: str) -> bool:
        """Idempotent: False when nothing matched."""

    @abstractmethod
    def delete_refresh_token_by_id(self, record_id: int) -> bool: ...

    @abstractmethod
    def delete_refresh_tokens_for_user(self, user_id: str) -> int: ...


@dataclass
class PartyRecord:
    """Public summary of the user on either side of a job or application."""
    id: str
    full_name: str
    email: str
    phone: Optional[str] = None
    company_name: Optional[str] = None


@dataclass
class JobRecord:
    id: str
    title: str
    description: str
    job_type: str
    employer_id: str
    status: str
    requirements: List[str] = field(default_factory=list)
    location: Optional[str] = None
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    deadline: Optional[datetime] = None
    company_logo: Optional[str] = None
    views_count: int = 0
    applications_count: int = 0
    employer: Optional[PartyRecord] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class JobSummary:
    id: str
    title: str
    status: str
    location: Optional[str] = None
    company_name: Optional[str] = None


@dataclass
class ApplicationRecord:
    id: str
    job_id: str
    applicant_id: str
    status: str
    resume_url: Optional[str] = None
    cover_letter: Optional[str] = None
    job: Optional[JobSummary] = None
    applicant: Optional[PartyRecord] = None
    applied_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class JobBoardStore(ABC):
    """Persistence for job postings and the applications made to them."""

    # Jobs

    @abstractmethod
    def insert_job(self, *, employer_id: str, status: str, **fields: Any) -> JobRecord: ...

    @abstractmethod
    def find_job(self, job_id: str) -> Optional[JobRecord]: ...

    @abstractmethod
    def list_jobs(
        self,
        *,
        status: Optional[str] = None,
        employer_id: Optional[str] = None,
        job_type: Optional[str] = None,
        location: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[JobRecord]:
        """Newest first. location and search are case-insensitive substring matches."""

    @abstractmethod
    def update_job(self, job_id: str, **fields: Any) -> Optional[JobRecord]:
        """Apply field updates; None when the job does not exist."""

    @abstractmethod
    def increment_job_views(self, job_id: str) -> None: ...

    @abstractmethod
    def delete_job(self, job_id: str) -> bool:
        """Remove a job together with its applications."""

    # Applications

    @abstractmethod
    def insert_application(
        self,
        *,
        job_id: str,
        applicant_id: str,
        status: str,
        resume_url: Optional[str] = None,
        cover_letter: Optional[str] = None,
    ) -> ApplicationRecord:
        """Raises ConflictError when the applicant already applied to the job."""

    @abstractmethod
    def find_application(self, application_id: str) -> Optional[ApplicationRecord]: ...

    @abstractmethod
    def find_application_for(self, job_id: str, applicant_id: str) -> Optional[ApplicationRecord]: ...

    @abstractmethod
    def list_applications(
        self,
        *,
        job_id: Optional[str] = None,
        applicant_id: Optional[str] = None,
    ) -> List[ApplicationRecord]:
        """Most recently applied first."""

    @abstractmethod
    def update_application_status(self, application_id: str, status: str) -> Optional[ApplicationRecord]: ...

    @abstractmethod
    def delete_application(self, application_id: str) -> bool: ...

    # Reporting

    @abstractmethod
    def dashboard_counts(self) -> Dict[str, Dict[str, Any]]:
        """Totals of users by role, jobs by status and applications by status."""
