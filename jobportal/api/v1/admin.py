"""Admin routes - user oversight and platform overview"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from jobportal.api.deps import (
    CurrentUser,
    authorize,
    get_application_service,
    get_current_user,
    get_job_service,
    get_user_service,
)
from jobportal.schemas.job import public_application, public_job
from jobportal.schemas.response import APIResponse
from jobportal.schemas.user import UserRole, UserStatusUpdate, public_user
from jobportal.services.application_service import ApplicationService
from jobportal.services.job_service import JobService
from jobportal.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=authorize(UserRole.ADMIN))


@router.get("/users", response_model=APIResponse, response_model_exclude_none=True)
def list_users(
    role: Optional[UserRole] = None,
    is_active: Optional[bool] = None,
    users: UserService = Depends(get_user_service),
):
    """
    List users, optionally filtered by role and active flag (admin only)
    """
    records = users.list_users(role=role.value if role else None, is_active=is_active)
    return APIResponse(
        message="Users retrieved successfully",
        data={"users": [public_user(user) for user in records], "total": len(records)},
    )


@router.put("/users/{user_id}/status", response_model=APIResponse, response_model_exclude_none=True)
def update_user_status(
    user_id: str,
    body: UserStatusUpdate,
    users: UserService = Depends(get_user_service),
):
    """
    Activate or deactivate a user (admin only)
    """
    user = users.set_active(user_id, body.is_active)
    return APIResponse(message="User status updated successfully", data={"user": public_user(user)})


@router.delete("/users/{user_id}", response_model=APIResponse, response_model_exclude_none=True)
def delete_user(
    user_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """
    Delete a user (admin only)

    Args:
        user_id: User ID to delete
        current_user: Acting admin
        users: User service

    Returns:
        Success message
    """
    logger.info("Admin %s deleting user %s", current_user.id, user_id)
    users.delete_user(user_id)
    return APIResponse(message=f"User {user_id} deleted successfully")


@router.get("/dashboard", response_model=APIResponse, response_model_exclude_none=True)
def dashboard(jobs: JobService = Depends(get_job_service)):
    """
    Users by role, jobs by status and applications by status (admin only)
    """
    return APIResponse(message="Dashboard stats retrieved successfully", data=jobs.dashboard())


@router.get("/jobs", response_model=APIResponse, response_model_exclude_none=True)
def list_all_jobs(jobs: JobService = Depends(get_job_service)):
    """
    Every job in any status, with its employer (admin only)
    """
    records = jobs.list_all_jobs()
    return APIResponse(
        message="Jobs retrieved successfully",
        data={"jobs": [public_job(job) for job in records], "total": len(records)},
    )


@router.get("/applications", response_model=APIResponse, response_model_exclude_none=True)
def list_all_applications(applications: ApplicationService = Depends(get_application_service)):
    """
    Every application, with its job and applicant (admin only)
    """
    records = applications.all_applications()
    return APIResponse(
        message="Applications retrieved successfully",
        data={"applications": [public_application(a) for a in records], "total": len(records)},
    )
