"""Application service - job seekers apply, employers and recruiters review"""

import logging
from typing import List, Optional

from jobportal.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from jobportal.repositories.base import ApplicationRecord, JobBoardStore
from jobportal.schemas.job import ApplicationStatus, JobStatus
from jobportal.schemas.user import UserRole

logger = logging.getLogger(__name__)

# Roles that see every job's applications, not just their own postings'
REVIEW_ALL_ROLES = frozenset({UserRole.ADMIN.value, UserRole.RECRUITER.value})


class ApplicationService:
    """Service for job applications"""

    def __init__(self, store: JobBoardStore):
        self.store = store

    def apply(
        self,
        job_id: str,
        applicant_id: str,
        resume_url: Optional[str] = None,
        cover_letter: Optional[str] = None,
    ) -> ApplicationRecord:
        """
        Apply for an active job

        Raises:
            NotFoundError: Unknown job
            ValidationError: Job is not accepting applications
            ConflictError: Already applied
        """
        job = self.store.find_job(job_id)
        if not job:
            raise NotFoundError("Job not found")

        if job.status != JobStatus.ACTIVE.value:
            raise ValidationError("This job is not accepting applications")

        # insert_application raises ConflictError itself when the unique constraint trips
        application = self.store.insert_application(
            job_id=job_id,
            applicant_id=applicant_id,
            status=ApplicationStatus.APPLIED.value,
            resume_url=resume_url,
            cover_letter=cover_letter,
        )
        logger.info(f"Application {application.id}: user {applicant_id} applied to job {job_id}")
        return application

    def my_applications(self, applicant_id: str) -> List[ApplicationRecord]:
        return self.store.list_applications(applicant_id=applicant_id)

    def all_applications(self) -> List[ApplicationRecord]:
        return self.store.list_applications()

    def _check_reviewer(self, job_id: str, user_id: str, role: str) -> None:
        if role in REVIEW_ALL_ROLES:
            return
        job = self.store.find_job(job_id)
        if not job or job.employer_id != user_id:
            raise ForbiddenError("You do not have permission to review these applications")

    def applications_for_job(self, job_id: str, user_id: str, role: str) -> List[ApplicationRecord]:
        if not self.store.find_job(job_id):
            raise NotFoundError("Job not found")
        self._check_reviewer(job_id, user_id, role)
        return self.store.list_applications(job_id=job_id)

    def update_status(
        self,
        application_id: str,
        status: ApplicationStatus,
        user_id: str,
        role: str,
    ) -> ApplicationRecord:
        application = self.store.find_application(application_id)
        if not application:
            raise NotFoundError("Application not found")

        self._check_reviewer(application.job_id, user_id, role)

        updated = self.store.update_application_status(application_id, ApplicationStatus(status).value)
        if not updated:
            raise NotFoundError("Application not found")
        logger.info(f"Application {application_id} set to {updated.status} by {user_id}")
        return updated

    def withdraw(self, application_id: str, applicant_id: str) -> None:
        """Delete an application; only the applicant may do so"""
        application = self.store.find_application(application_id)
        if not application:
            raise NotFoundError("Application not found")

        if application.applicant_id != applicant_id:
            raise ForbiddenError("Not authorized to delete this application")

        self.store.delete_application(application_id)
        logger.info(f"Application {application_id} withdrawn")
