"""Job posting and application models"""

import uuid

from sqlalchemy import (
    Column, String, Text, Integer, DateTime, ForeignKey, Index, JSON, UniqueConstraint,
    func, select,
)
from sqlalchemy.orm import relationship, column_property

from jobportal.core.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Job(Base):
    """Job posted by an employer"""

    __tablename__ = "jobs"

    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    requirements = Column(JSON, nullable=False, default=list)
    job_type = Column(String(20), nullable=False)
    location = Column(String(120))
    salary_min = Column(Integer)
    salary_max = Column(Integer)
    deadline = Column(DateTime(timezone=True))
    company_logo = Column(String(500))
    employer_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), default="active", nullable=False)
    views_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    employer = relationship("User", back_populates="jobs")
    applications = relationship("Application", back_populates="job", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_jobs_status", "status"),
        Index("idx_jobs_employer", "employer_id"),
    )

    def __repr__(self):
        return f"<Job(id={self.id}, title='{self.title}', status='{self.status}')>"


class Application(Base):
    """A job seeker's application to a job"""

    __tablename__ = "applications"

    id = Column(String(36), primary_key=True, default=_new_id)
    job_id = Column(String(36), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)
    applicant_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), default="applied", nullable=False)
    resume_url = Column(String(500))
    cover_letter = Column(Text)
    applied_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    job = relationship("Job", back_populates="applications")
    applicant = relationship("User", back_populates="applications")

    __table_args__ = (
        UniqueConstraint("job_id", "applicant_id", name="uq_applications_job_applicant"),
        Index("idx_applications_applicant", "applicant_id"),
        Index("idx_applications_status", "status"),
    )

    def __repr__(self):
        return f"<Application(id={self.id}, job_id={self.job_id}, status='{self.status}')>"


# Derived from the applications table, not stored
Job.applications_count = column_property(
    select(func.count(Application.id))
    .where(Application.job_id == Job.id)
    .correlate_except(Application)
    .scalar_subquery()
)
