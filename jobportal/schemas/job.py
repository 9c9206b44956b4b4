"""Job and application schemas"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class JobStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    CLOSED = "closed"
    DRAFT = "draft"


class JobType(str, Enum):
    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"
    FREELANCE = "freelance"


class ApplicationStatus(str, Enum):
    APPLIED = "applied"
    REVIEWING = "reviewing"
    SHORTLISTED = "shortlisted"
    INTERVIEWED = "interviewed"
    OFFERED = "offered"
    HIRED = "hired"
    REJECTED = "rejected"


def _check_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value.startswith(("http://", "https://")):
        raise ValueError("Must be an http(s) URL")
    return value


def _check_salary_range(salary_min: Optional[int], salary_max: Optional[int]) -> None:
    if salary_min is not None and salary_max is not None and salary_min > salary_max:
        raise ValueError("salary_min must not exceed salary_max")


class JobCreate(BaseModel):
    """New job posting"""
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    requirements: List[str] = Field(default_factory=list)
    job_type: JobType
    location: Optional[str] = Field(None, max_length=120)
    salary_min: Optional[int] = Field(None, ge=0)
    salary_max: Optional[int] = Field(None, ge=0)
    deadline: Optional[datetime] = None
    company_logo: Optional[str] = Field(None, max_length=500)

    @field_validator("company_logo")
    @classmethod
    def validate_company_logo(cls, v: Optional[str]) -> Optional[str]:
        return _check_url(v)

    @model_validator(mode="after")
    def check_salary(self):
        _check_salary_range(self.salary_min, self.salary_max)
        return self


class JobUpdate(BaseModel):
    """Partial job update; at least one field must be given"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    requirements: Optional[List[str]] = None
    job_type: Optional[JobType] = None
    location: Optional[str] = Field(None, max_length=120)
    salary_min: Optional[int] = Field(None, ge=0)
    salary_max: Optional[int] = Field(None, ge=0)
    deadline: Optional[datetime] = None
    company_logo: Optional[str] = Field(None, max_length=500)
    status: Optional[JobStatus] = None

    @field_validator("company_logo")
    @classmethod
    def validate_company_logo(cls, v: Optional[str]) -> Optional[str]:
        return _check_url(v)

    @model_validator(mode="after")
    def check_fields(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        _check_salary_range(self.salary_min, self.salary_max)
        return self


class ApplicationCreate(BaseModel):
    resume_url: Optional[str] = Field(None, max_length=500)
    cover_letter: Optional[str] = Field(None, max_length=5000)

    @field_validator("resume_url")
    @classmethod
    def validate_resume_url(cls, v: Optional[str]) -> Optional[str]:
        return _check_url(v)


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus


class PartyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str
    email: str
    phone: Optional[str] = None
    company_name: Optional[str] = None


class JobResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    requirements: List[str] = []
    job_type: str
    location: Optional[str] = None
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    deadline: Optional[datetime] = None
    company_logo: Optional[str] = None
    employer_id: str
    employer: Optional[PartyResponse] = None
    status: str
    views_count: int = 0
    applications_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class JobSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    status: str
    location: Optional[str] = None
    company_name: Optional[str] = None


class ApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    job_id: str
    applicant_id: str
    status: str
    resume_url: Optional[str] = None
    cover_letter: Optional[str] = None
    job: Optional[JobSummaryResponse] = None
    applicant: Optional[PartyResponse] = None
    applied_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def public_job(job) -> dict:
    return JobResponse.model_validate(job).model_dump(mode="json")


def public_application(application) -> dict:
    return ApplicationResponse.model_validate(application).model_dump(mode="json")
