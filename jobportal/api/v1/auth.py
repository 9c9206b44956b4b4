"""Authentication routes"""

from fastapi import APIRouter, Depends, status

from jobportal.api.deps import CurrentUser, get_auth_service, get_current_user, get_user_service
from jobportal.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    RefreshTokenRequest,
    LogoutRequest,
    ChangePasswordRequest,
)
from jobportal.api.v1.users import profile_response
from jobportal.schemas.response import APIResponse
from jobportal.schemas.user import public_user
from jobportal.services.auth_service import AuthService
from jobportal.services.user_service import UserService

router = APIRouter()


@router.post(
    "/register",
    response_model=APIResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def register(
    body: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
):
    """
    Register a new account and return its first token pair

    Args:
        body: Email, password, full name, role and optional contact fields
        auth: Auth service

    Returns:
        Created user and tokens
    """
    result = auth.register(
        email=body.email,
        password=body.password,
        full_name=body.full_name,
        role=body.role,
        phone=body.phone,
        company_name=body.company_name,
    )
    return APIResponse(
        message="User registered successfully",
        data={"user": public_user(result.user), "tokens": result.tokens.to_dict()},
    )


@router.post("/login", response_model=APIResponse, response_model_exclude_none=True)
def login(
    body: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
):
    """
    Login endpoint - authenticate user and return a new token pair
    """
    result = auth.login(body.email, body.password)
    return APIResponse(
        message="Login successful",
        data={"user": public_user(result.user), "tokens": result.tokens.to_dict()},
    )


@router.post("/refresh-token", response_model=APIResponse, response_model_exclude_none=True)
def refresh_token(
    body: RefreshTokenRequest,
    auth: AuthService = Depends(get_auth_service),
):
    """
    Exchange a refresh token for a new access token
    """
    access_token = auth.refresh_access_token(body.refresh_token)
    return APIResponse(
        message="Token refreshed successfully",
        data={"accessToken": access_token},
    )


@router.post("/logout", response_model=APIResponse, response_model_exclude_none=True)
def logout(
    body: LogoutRequest,
    current_user: CurrentUser = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Logout endpoint - revoke the given refresh token
    """
    auth.logout(current_user.id, body.refresh_token)
    return APIResponse(message="Logged out successfully")


@router.post("/change-password", response_model=APIResponse, response_model_exclude_none=True)
def change_password(
    body: ChangePasswordRequest,
    current_user: CurrentUser = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Change the current user's password

    Every refresh token of the user is revoked; the client has to log in again
    once its access token runs out.
    """
    revoked = auth.change_password(current_user.id, body.old_password, body.new_password)
    return APIResponse(
        message="Password changed successfully",
        data={"revokedSessions": revoked},
    )


@router.get("/profile", response_model=APIResponse, response_model_exclude_none=True)
def get_profile(
    current_user: CurrentUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """
    Get current user information
    """
    return profile_response(current_user.id, users)
