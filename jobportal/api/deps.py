"""API dependencies - authentication and authorization"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from jobportal.core.database import get_db
from jobportal.core.exceptions import ForbiddenError, UnauthorizedError
from jobportal.repositories.base import CredentialStore, JobBoardStore
from jobportal.repositories.job_store import SQLAlchemyJobBoardStore
from jobportal.repositories.sqlalchemy_store import SQLAlchemyCredentialStore
from jobportal.schemas.user import UserRole
from jobportal.services.application_service import ApplicationService
from jobportal.services.auth_service import AuthService
from jobportal.services.job_service import JobService
from jobportal.services.token_service import TokenService
from jobportal.services.user_service import UserService

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme; errors are raised below so they share the API envelope
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Minimal principal projection attached to the request."""
    id: str
    email: str
    role: str


def get_store(db: Session = Depends(get_db)) -> CredentialStore:
    return SQLAlchemyCredentialStore(db)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_auth_service(
    request: Request,
    store: CredentialStore = Depends(get_store),
) -> AuthService:
    settings = request.app.state.settings
    return AuthService(
        store,
        request.app.state.password_hasher,
        request.app.state.token_service,
        require_verified=settings.REQUIRE_VERIFIED_LOGIN,
    )


def get_user_service(store: CredentialStore = Depends(get_store)) -> UserService:
    return UserService(store)


def get_job_store(db: Session = Depends(get_db)) -> JobBoardStore:
    return SQLAlchemyJobBoardStore(db)


def get_job_service(store: JobBoardStore = Depends(get_job_store)) -> JobService:
    return JobService(store)


def get_application_service(store: JobBoardStore = Depends(get_job_store)) -> ApplicationService:
    return ApplicationService(store)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenService = Depends(get_token_service),
    store: CredentialStore = Depends(get_store),
) -> CurrentUser:
    """
    Authenticate the request from its bearer token

    The store is consulted on every request so a deactivated account loses
    access immediately, even with an unexpired access token.

    Raises:
        UnauthorizedError: Missing/invalid token, unknown or disabled user
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Authorization header missing or malformed")

    payload = tokens.verify_access(credentials.credentials)

    user = store.find_user_by_id(payload.user_id)
    if not user:
        logger.info("Access token refers to unknown user %s", payload.user_id)
        raise UnauthorizedError("User not found")

    if not user.is_active:
        raise UnauthorizedError("User account is disabled")

    principal = CurrentUser(id=user.id, email=user.email, role=user.role)
    request.state.user = principal
    return principal


class RoleGuard:
    """Allow the request only if the authenticated principal has one of the roles.

    Relies on get_current_user having run first for the same request.
    """

    def __init__(self, roles: Iterable[Union[UserRole, str]]):
        self.allowed = frozenset(
            (role.value if isinstance(role, UserRole) else str(role)).lower() for role in roles
        )
        if not self.allowed:
            raise ValueError("RoleGuard needs at least one role")

    def __call__(self, request: Request) -> CurrentUser:
        principal: Optional[CurrentUser] = getattr(request.state, "user", None)
        if principal is None:
            raise UnauthorizedError("Authentication required")

        if str(principal.role).lower() not in self.allowed:
            logger.info(
                "User %s with role %s denied on %s %s",
                principal.id, principal.role, request.method, request.url.path,
            )
            raise ForbiddenError("You do not have permission to perform this action")
        return principal


def require_roles(*roles: Union[UserRole, str]) -> RoleGuard:
    """
    Route-level role check

    Usage:
        @router.get("/...", dependencies=[Depends(get_current_user), Depends(require_roles(UserRole.ADMIN))])
    """
    return RoleGuard(roles)


def authorize(*roles: Union[UserRole, str]) -> List:
    """
    Authenticate, then check the role; for route or router ``dependencies=``

    Usage:
        @router.post("/", dependencies=authorize(UserRole.EMPLOYER, UserRole.ADMIN))
    """
    return [Depends(get_current_user), Depends(require_roles(*roles))]
