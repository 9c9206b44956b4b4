"""Job service - postings by employers, public browsing and admin reporting"""

import logging
from typing import Any, Dict, List, Optional

from jobportal.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from jobportal.repositories.base import JobBoardStore, JobRecord
from jobportal.schemas.job import JobStatus
from jobportal.schemas.user import UserRole

logger = logging.getLogger(__name__)

# Columns that may not be cleared with an explicit null
REQUIRED_JOB_FIELDS = ("title", "description", "requirements", "job_type", "status")


def _plain(value: Any) -> Any:
    return value.value if hasattr(value, "value") else value


class JobService:
    """Service for job postings"""

    def __init__(self, store: JobBoardStore):
        self.store = store

    def create_job(self, employer_id: str, data: Dict[str, Any]) -> JobRecord:
        """New postings always start active, whatever the payload says."""
        fields = {key: _plain(value) for key, value in data.items() if key != "status"}
        job = self.store.insert_job(employer_id=employer_id, status=JobStatus.ACTIVE.value, **fields)
        logger.info(f"Job created: {job.id} by employer {employer_id}")
        return job

    def list_open_jobs(
        self,
        job_type: Optional[str] = None,
        location: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[JobRecord]:
        return self.store.list_jobs(
            status=JobStatus.ACTIVE.value,
            job_type=job_type,
            location=location,
            search=search,
        )

    def list_all_jobs(self) -> List[JobRecord]:
        return self.store.list_jobs()

    def list_employer_jobs(self, employer_id: str) -> List[JobRecord]:
        return self.store.list_jobs(employer_id=employer_id)

    def view_job(self, job_id: str) -> JobRecord:
        """Fetch a job for display and count the view"""
        job = self.store.find_job(job_id)
        if not job:
            raise NotFoundError("Job not found")

        self.store.increment_job_views(job_id)
        job.views_count += 1
        return job

    def _owned_job(self, job_id: str, user_id: str, role: str, action: str) -> JobRecord:
        job = self.store.find_job(job_id)
        if not job:
            raise NotFoundError("Job not found")
        if role != UserRole.ADMIN.value and job.employer_id != user_id:
            raise ForbiddenError(f"Not permitted to {action} this job")
        return job

    def update_job(self, job_id: str, user_id: str, role: str, updates: Dict[str, Any]) -> JobRecord:
        """
        Update a job; employers may only touch their own postings

        Raises:
            NotFoundError: Unknown job
            ForbiddenError: Job belongs to another employer
            ValidationError: Nothing left to update
        """
        self._owned_job(job_id, user_id, role, "update")

        changes = {
            key: _plain(value) for key, value in updates.items()
            if value is not None or key not in REQUIRED_JOB_FIELDS
        }
        if not changes:
            raise ValidationError("At least one field must be provided")

        job = self.store.update_job(job_id, **changes)
        if not job:
            raise NotFoundError("Job not found")
        logger.info(f"Job updated: {job_id} ({sorted(changes)})")
        return job

    def delete_job(self, job_id: str, user_id: str, role: str) -> None:
        self._owned_job(job_id, user_id, role, "delete")
        self.store.delete_job(job_id)
        logger.info(f"Job deleted: {job_id} by {user_id}")

    def dashboard(self) -> Dict[str, Dict[str, Any]]:
        return self.store.dashboard_counts()
