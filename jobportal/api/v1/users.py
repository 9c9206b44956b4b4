"""User self-service routes"""

from fastapi import APIRouter, Depends

from jobportal.api.deps import CurrentUser, get_current_user, get_user_service
from jobportal.schemas.response import APIResponse
from jobportal.schemas.user import ProfileUpdate, public_user
from jobportal.services.user_service import UserService

router = APIRouter()


def profile_response(user_id: str, users: UserService) -> APIResponse:
    """Profile envelope shared by /users/profile and /auth/profile"""
    user = users.get_profile(user_id)
    return APIResponse(message="Profile retrieved successfully", data={"user": public_user(user)})


@router.get("/profile", response_model=APIResponse, response_model_exclude_none=True)
def get_my_profile(
    current_user: CurrentUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """
    Get current user profile
    """
    return profile_response(current_user.id, users)


@router.put("/profile", response_model=APIResponse, response_model_exclude_none=True)
def update_my_profile(
    body: ProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """
    Update current user profile

    Args:
        body: full_name, phone and/or company_name
        current_user: Current authenticated user
        users: User service

    Returns:
        Updated user
    """
    user = users.update_profile(current_user.id, body.model_dump(exclude_unset=True))
    return APIResponse(message="Profile updated successfully", data={"user": public_user(user)})


@router.delete("/account", response_model=APIResponse, response_model_exclude_none=True)
def delete_my_account(
    current_user: CurrentUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """
    Delete the current user's account
    """
    users.delete_account(current_user.id)
    return APIResponse(message="Account deleted successfully")
