"""Application routes"""

from fastapi import APIRouter, Depends, status

from jobportal.api.deps import CurrentUser, authorize, get_application_service, get_current_user
from jobportal.schemas.job import ApplicationCreate, ApplicationStatusUpdate, public_application
from jobportal.schemas.response import APIResponse
from jobportal.schemas.user import UserRole
from jobportal.services.application_service import ApplicationService

router = APIRouter()

REVIEWERS = (UserRole.EMPLOYER, UserRole.RECRUITER, UserRole.ADMIN)


@router.post(
    "/jobs/{job_id}/apply",
    response_model=APIResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    dependencies=authorize(UserRole.JOB_SEEKER),
)
def apply_for_job(
    job_id: str,
    body: ApplicationCreate,
    current_user: CurrentUser = Depends(get_current_user),
    applications: ApplicationService = Depends(get_application_service),
):
    """
    Apply for a job (job seekers only)
    """
    application = applications.apply(job_id, current_user.id, body.resume_url, body.cover_letter)
    return APIResponse(
        message="Application submitted successfully",
        data={"application": public_application(application)},
    )


@router.get(
    "/my",
    response_model=APIResponse,
    response_model_exclude_none=True,
    dependencies=authorize(UserRole.JOB_SEEKER),
)
def my_applications(
    current_user: CurrentUser = Depends(get_current_user),
    applications: ApplicationService = Depends(get_application_service),
):
    """
    Applications submitted by the current user
    """
    records = applications.my_applications(current_user.id)
    return APIResponse(
        message="Applications retrieved successfully",
        data={"applications": [public_application(a) for a in records], "total": len(records)},
    )


@router.get(
    "/jobs/{job_id}",
    response_model=APIResponse,
    response_model_exclude_none=True,
    dependencies=authorize(*REVIEWERS),
)
def applications_for_job(
    job_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    applications: ApplicationService = Depends(get_application_service),
):
    """
    Applications received by a job

    Employers only see their own postings; recruiters and admins see all.
    """
    records = applications.applications_for_job(job_id, current_user.id, current_user.role)
    return APIResponse(
        message="Applications retrieved successfully",
        data={"applications": [public_application(a) for a in records], "total": len(records)},
    )


@router.put(
    "/{application_id}/status",
    response_model=APIResponse,
    response_model_exclude_none=True,
    dependencies=authorize(*REVIEWERS),
)
def update_application_status(
    application_id: str,
    body: ApplicationStatusUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    applications: ApplicationService = Depends(get_application_service),
):
    """
    Move an application through review
    """
    application = applications.update_status(
        application_id, body.status, current_user.id, current_user.role
    )
    return APIResponse(
        message="Application status updated successfully",
        data={"application": public_application(application)},
    )


@router.delete(
    "/{application_id}",
    response_model=APIResponse,
    response_model_exclude_none=True,
    dependencies=authorize(UserRole.JOB_SEEKER),
)
def withdraw_application(
    application_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    applications: ApplicationService = Depends(get_application_service),
):
    """
    Withdraw one of the current user's applications
    """
    applications.withdraw(application_id, current_user.id)
    return APIResponse(message="Application deleted successfully")
