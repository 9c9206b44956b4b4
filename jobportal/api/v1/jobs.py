"""Job routes - public browsing, employer postings"""

from typing import Optional

from fastapi import APIRouter, Depends, status

from jobportal.api.deps import CurrentUser, authorize, get_current_user, get_job_service
from jobportal.schemas.job import JobCreate, JobType, JobUpdate, public_job
from jobportal.schemas.response import APIResponse
from jobportal.schemas.user import UserRole
from jobportal.services.job_service import JobService

router = APIRouter()

POSTERS = (UserRole.EMPLOYER, UserRole.ADMIN)


@router.get("", response_model=APIResponse, response_model_exclude_none=True)
def list_jobs(
    job_type: Optional[JobType] = None,
    location: Optional[str] = None,
    search: Optional[str] = None,
    jobs: JobService = Depends(get_job_service),
):
    """
    List active jobs, newest first
    """
    records = jobs.list_open_jobs(
        job_type=job_type.value if job_type else None,
        location=location,
        search=search,
    )
    return APIResponse(
        message="Jobs retrieved successfully",
        data={"jobs": [public_job(job) for job in records], "total": len(records)},
    )


@router.get(
    "/my/jobs",
    response_model=APIResponse,
    response_model_exclude_none=True,
    dependencies=authorize(*POSTERS),
)
def list_my_jobs(
    current_user: CurrentUser = Depends(get_current_user),
    jobs: JobService = Depends(get_job_service),
):
    """
    Jobs posted by the current employer, in any status
    """
    records = jobs.list_employer_jobs(current_user.id)
    return APIResponse(
        message="Jobs retrieved successfully",
        data={"jobs": [public_job(job) for job in records], "total": len(records)},
    )


@router.get("/{job_id}", response_model=APIResponse, response_model_exclude_none=True)
def get_job(job_id: str, jobs: JobService = Depends(get_job_service)):
    """
    Get a job by ID; each call counts as a view
    """
    return APIResponse(message="Job retrieved successfully", data={"job": public_job(jobs.view_job(job_id))})


@router.post(
    "",
    response_model=APIResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    dependencies=authorize(*POSTERS),
)
def create_job(
    body: JobCreate,
    current_user: CurrentUser = Depends(get_current_user),
    jobs: JobService = Depends(get_job_service),
):
    """
    Post a new job

    Args:
        body: Job details
        current_user: Posting employer
        jobs: Job service

    Returns:
        Created job
    """
    job = jobs.create_job(current_user.id, body.model_dump())
    return APIResponse(message="Job created successfully", data={"job": public_job(job)})


@router.put(
    "/{job_id}",
    response_model=APIResponse,
    response_model_exclude_none=True,
    dependencies=authorize(*POSTERS),
)
def update_job(
    job_id: str,
    body: JobUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    jobs: JobService = Depends(get_job_service),
):
    """
    Update a job (owner or admin)
    """
    job = jobs.update_job(job_id, current_user.id, current_user.role, body.model_dump(exclude_unset=True))
    return APIResponse(message="Job updated successfully", data={"job": public_job(job)})


@router.delete(
    "/{job_id}",
    response_model=APIResponse,
    response_model_exclude_none=True,
    dependencies=authorize(*POSTERS),
)
def delete_job(
    job_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    jobs: JobService = Depends(get_job_service),
):
    """
    Delete a job and its applications (owner or admin)
    """
    jobs.delete_job(job_id, current_user.id, current_user.role)
    return APIResponse(message="Job deleted successfully")
