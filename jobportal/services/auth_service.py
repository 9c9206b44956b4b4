"""Auth service - registration, login, session refresh, logout and password change"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

from jobportal.core.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from jobportal.core.metrics import AUTH_EVENTS
from jobportal.core.security import PasswordHasher
from jobportal.repositories.base import CredentialStore, UserRecord
from jobportal.schemas.user import UserRole, normalize_email
from jobportal.services.token_service import TokenPair, TokenPayload, TokenService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
SELF_REGISTER_ROLES = frozenset(
    {UserRole.EMPLOYER.value, UserRole.RECRUITER.value, UserRole.JOB_SEEKER.value}
)


def _as_utc(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


def _tracked(event: str):
    """Count each call of an auth operation by outcome."""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                result = func(*args, **kwargs)
            except Exception:
                AUTH_EVENTS.labels(event, "failure").inc()
                raise
            AUTH_EVENTS.labels(event, "success").inc()
            return result
        return wrapper
    return decorator


@dataclass
class AuthResult:
    user: UserRecord
    tokens: TokenPair


class AuthService:
    """Orchestrates the credential lifecycle over a CredentialStore."""

    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        tokens: TokenService,
        *,
        require_verified: bool = False,
    ):
        self.store = store
        self.hasher = hasher
        self.tokens = tokens
        self.require_verified = require_verified

    @staticmethod
    def payload_for(user: UserRecord) -> TokenPayload:
        return TokenPayload(user_id=user.id, email=user.email, role=user.role)

    def _start_session(self, user: UserRecord) -> TokenPair:
        """Issue a token pair and persist its refresh half."""
        pair = self.tokens.issue_pair(self.payload_for(user))
        self.store.insert_refresh_token(
            user_id=user.id,
            token=pair.refresh_token,
            expires_at=self.tokens.expires_at(pair.refresh_token),
        )
        return pair

    @_tracked("register")
    def register(
        self,
        email: str,
        password: str,
        full_name: str,
        role: Union[UserRole, str, None] = UserRole.JOB_SEEKER,
        phone: Optional[str] = None,
        company_name: Optional[str] = None,
    ) -> AuthResult:
        """
        Create a principal and open its first session

        Raises:
            ValidationError: Missing fields or a role that cannot self-register
            ConflictError: Email already registered (any casing)
        """
        missing = [
            name for name, value in (("email", email), ("password", password), ("full_name", full_name))
            if not value or not str(value).strip()
        ]
        if missing:
            raise ValidationError(
                "email, password and full_name are required",
                details={"missing": missing},
            )

        role_value = role.value if isinstance(role, UserRole) else str(role or UserRole.JOB_SEEKER.value)
        role_value = role_value.strip().lower()
        if role_value not in SELF_REGISTER_ROLES:
            raise ValidationError(f"Role '{role_value}' cannot be used for registration")

        email = normalize_email(email)
        if self.store.find_user_by_email(email):
            raise ConflictError("User with this email already exists")

        # insert_user raises ConflictError itself when a concurrent insert wins the race
        user = self.store.insert_user(
            email=email,
            password_hash=self.hasher.hash(password),
            full_name=full_name.strip(),
            role=role_value,
            phone=phone,
            company_name=company_name,
            is_active=True,
            is_verified=False,
        )

        try:
            tokens = self._start_session(user)
        except Exception:
            logger.exception("Session setup failed for new user %s; removing the account", user.id)
            try:
                self.store.delete_user(user.id)
            except Exception:
                logger.exception("Could not remove user %s after failed registration", user.id)
            raise

        logger.info("Registered user %s (role: %s)", user.id, user.role)
        return AuthResult(user=user, tokens=tokens)

    @_tracked("login")
    def login(self, email: str, password: str) -> AuthResult:
        """
        Authenticate by email and password

        Unknown email and wrong password produce the same error.
        """
        email = normalize_email(email)
        user = self.store.find_user_by_email(email) if email else None

        if not user:
            self.hasher.burn(password)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not self.hasher.compare(password, user.password_hash):
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not user.is_active:
            raise UnauthorizedError("Account is deactivated")

        if self.require_verified and not user.is_verified:
            raise UnauthorizedError("Account is not verified")

        tokens = self._start_session(user)
        logger.info("User logged in: %s", user.id)
        return AuthResult(user=user, tokens=tokens)

    @_tracked("refresh")
    def refresh_access_token(self, refresh_token: str) -> str:
        """
        Exchange a stored, unexpired refresh token for a new access token

        The refresh token itself is not rotated.
        """
        payload = self.tokens.verify_refresh(refresh_token)

        record = self.store.find_refresh_token(refresh_token, payload.user_id)
        if not record:
            logger.info("Refresh token for user %s has no stored record", payload.user_id)
            raise UnauthorizedError("Invalid refresh token")

        if _as_utc(record.expires_at) <= datetime.now(timezone.utc):
            self.store.delete_refresh_token_by_id(record.id)
            logger.info("Removed expired refresh token record %s", record.id)
            raise UnauthorizedError("Refresh token expired")

        user = self.store.find_user_by_id(payload.user_id)
        if not user or not user.is_active:
            raise UnauthorizedError("User not found or inactive")

        return self.tokens.issue_access(self.payload_for(user))

    @_tracked("logout")
    def logout(self, user_id: str, refresh_token: str) -> bool:
        """Delete the matching refresh token. Absence is not an error."""
        removed = self.store.delete_refresh_token(refresh_token, user_id)
        logger.info("User %s logged out (refresh token removed: %s)", user_id, removed)
        return removed

    @_tracked("change_password")
    def change_password(self, user_id: str, old_password: str, new_password: str) -> int:
        """
        Replace the password hash and end every open session

        Returns:
            Number of refresh tokens revoked
        """
        user = self.store.find_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")

        if not self.hasher.compare(old_password, user.password_hash):
            raise UnauthorizedError("Current password is incorrect")

        self.store.update_user(user_id, password_hash=self.hasher.hash(new_password))
        revoked = self.store.delete_refresh_tokens_for_user(user_id)

        logger.info("Password changed for user %s; %d refresh token(s) revoked", user_id, revoked)
        return revoked
