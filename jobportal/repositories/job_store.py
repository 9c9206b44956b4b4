"""SQLAlchemy-backed job board store."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from jobportal.core.exceptions import ConflictError
from jobportal.models.job import Application, Job
from jobportal.models.user import User
from jobportal.repositories.base import (
    ApplicationRecord,
    JobBoardStore,
    JobRecord,
    JobSummary,
    PartyRecord,
)
from jobportal.repositories.sqlalchemy_store import SessionStore

logger = logging.getLogger(__name__)

UPDATABLE_JOB_FIELDS = frozenset({
    "title", "description", "requirements", "job_type", "location",
    "salary_min", "salary_max", "deadline", "company_logo", "status",
})


def _to_party(user: Optional[User]) -> Optional[PartyRecord]:
    if user is None:
        return None
    return PartyRecord(
        id=user.id,
        full_name=user.full_name,
        email=user.email,
        phone=user.phone,
        company_name=user.company_name,
    )


def _to_job_record(job: Job) -> JobRecord:
    return JobRecord(
        id=job.id,
        title=job.title,
        description=job.description,
        job_type=job.job_type,
        employer_id=job.employer_id,
        status=job.status,
        requirements=list(job.requirements or []),
        location=job.location,
        salary_min=job.salary_min,
        salary_max=job.salary_max,
        deadline=job.deadline,
        company_logo=job.company_logo,
        views_count=job.views_count or 0,
        applications_count=job.applications_count or 0,
        employer=_to_party(job.employer),
        created_at=job.created_at,
        updated_at=job.updated_at,
    )


def _to_application_record(application: Application) -> ApplicationRecord:
    job = application.job
    summary = None
    if job is not None:
        summary = JobSummary(
            id=job.id,
            title=job.title,
            status=job.status,
            location=job.location,
            company_name=job.employer.company_name if job.employer else None,
        )
    return ApplicationRecord(
        id=application.id,
        job_id=application.job_id,
        applicant_id=application.applicant_id,
        status=application.status,
        resume_url=application.resume_url,
        cover_letter=application.cover_letter,
        job=summary,
        applicant=_to_party(application.applicant),
        applied_at=application.applied_at,
        updated_at=application.updated_at,
    )


class SQLAlchemyJobBoardStore(SessionStore, JobBoardStore):
    """JobBoardStore over the jobs and applications tables."""

    def _job_query(self):
        return self.db.query(Job).options(selectinload(Job.employer))

    def _application_query(self):
        return self.db.query(Application).options(
            selectinload(Application.job).selectinload(Job.employer),
            selectinload(Application.applicant),
        )

    # Jobs

    def insert_job(self, *, employer_id: str, status: str, **fields: Any) -> JobRecord:
        unknown = set(fields) - UPDATABLE_JOB_FIELDS
        if unknown:
            raise ValueError(f"Unknown job fields: {sorted(unknown)}")

        job = Job(employer_id=employer_id, status=status, views_count=0, **fields)
        with self._transaction() as db:
            db.add(job)
        self.db.refresh(job)
        return _to_job_record(job)

    def find_job(self, job_id: str) -> Optional[JobRecord]:
        job = self._job_query().filter(Job.id == job_id).first()
        return _to_job_record(job) if job else None

    def list_jobs(
        self,
        *,
        status: Optional[str] = None,
        employer_id: Optional[str] = None,
        job_type: Optional[str] = None,
        location: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[JobRecord]:
        query = self._job_query()
        if status:
            query = query.filter(Job.status == status)
        if employer_id:
            query = query.filter(Job.employer_id == employer_id)
        if job_type:
            query = query.filter(Job.job_type == job_type)
        if location:
            query = query.filter(Job.location.ilike(f"%{location}%"))
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Job.title.ilike(pattern), Job.description.ilike(pattern)))
        return [_to_job_record(job) for job in query.order_by(Job.created_at.desc()).all()]

    def update_job(self, job_id: str, **fields: Any) -> Optional[JobRecord]:
        unknown = set(fields) - UPDATABLE_JOB_FIELDS
        if unknown:
            raise ValueError(f"Fields not updatable: {sorted(unknown)}")

        job = self.db.get(Job, job_id)
        if not job:
            return None
        with self._transaction():
            for name, value in fields.items():
                setattr(job, name, value)
        self.db.refresh(job)
        return _to_job_record(job)

    def increment_job_views(self, job_id: str) -> None:
        with self._transaction() as db:
            db.query(Job).filter(Job.id == job_id).update(
                {Job.views_count: Job.views_count + 1}, synchronize_session=False
            )

    def delete_job(self, job_id: str) -> bool:
        job = self.db.get(Job, job_id)
        if not job:
            return False
        with self._transaction() as db:
            db.delete(job)
        return True

    # Applications

    def insert_application(
        self,
        *,
        job_id: str,
        applicant_id: str,
        status: str,
        resume_url: Optional[str] = None,
        cover_letter: Optional[str] = None,
    ) -> ApplicationRecord:
        application = Application(
            job_id=job_id,
            applicant_id=applicant_id,
            status=status,
            resume_url=resume_url,
            cover_letter=cover_letter,
        )
        try:
            with self._transaction() as db:
                db.add(application)
        except IntegrityError:
            logger.info("Duplicate application rejected by the database: job=%s applicant=%s", job_id, applicant_id)
            raise ConflictError("You have already applied for this job")
        return self.find_application(application.id)

    def find_application(self, application_id: str) -> Optional[ApplicationRecord]:
        application = self._application_query().filter(Application.id == application_id).first()
        return _to_application_record(application) if application else None

    def find_application_for(self, job_id: str, applicant_id: str) -> Optional[ApplicationRecord]:
        application = (
            self._application_query()
            .filter(Application.job_id == job_id, Application.applicant_id == applicant_id)
            .first()
        )
        return _to_application_record(application) if application else None

    def list_applications(
        self,
        *,
        job_id: Optional[str] = None,
        applicant_id: Optional[str] = None,
    ) -> List[ApplicationRecord]:
        query = self._application_query()
        if job_id:
            query = query.filter(Application.job_id == job_id)
        if applicant_id:
            query = query.filter(Application.applicant_id == applicant_id)
        rows = query.order_by(Application.applied_at.desc()).all()
        return [_to_application_record(application) for application in rows]

    def update_application_status(self, application_id: str, status: str) -> Optional[ApplicationRecord]:
        application = self.db.get(Application, application_id)
        if not application:
            return None
        with self._transaction():
            application.status = status
        return self.find_application(application_id)

    def delete_application(self, application_id: str) -> bool:
        application = self.db.get(Application, application_id)
        if not application:
            return False
        with self._transaction() as db:
            db.delete(application)
        return True

    # Reporting

    def _tally(self, column) -> Dict[str, int]:
        rows = self.db.query(column, func.count()).group_by(column).all()
        return {value: count for value, count in rows}

    def dashboard_counts(self) -> Dict[str, Dict[str, Any]]:
        by_role = self._tally(User.role)
        jobs_by_status = self._tally(Job.status)
        applications_by_status = self._tally(Application.status)
        return {
            "users": {"total": sum(by_role.values()), "byRole": by_role},
            "jobs": {"total": sum(jobs_by_status.values()), "byStatus": jobs_by_status},
            "applications": {
                "total": sum(applications_by_status.values()),
                "byStatus": applications_by_status,
            },
        }
