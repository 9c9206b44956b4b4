"""User service - profile management and administrative user operations"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from jobportal.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from jobportal.core.security import PasswordHasher
from jobportal.repositories.base import CredentialStore, UserRecord
from jobportal.schemas.user import UserRole, normalize_email

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("full_name", "phone", "company_name")


class UserService:
    """Service for user management"""

    def __init__(self, store: CredentialStore):
        self.store = store

    def get_profile(self, user_id: str) -> UserRecord:
        user = self.store.find_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, user_id: str, updates: Dict[str, Any]) -> UserRecord:
        """
        Update the caller's own profile

        Only full_name, phone and company_name are accepted; anything else
        (email, role, flags) is silently dropped.
        """
        changes = {
            key: value for key, value in updates.items()
            if key in PROFILE_FIELDS and value is not None
        }
        if not changes:
            raise ValidationError(
                "No updatable fields provided",
                details={"allowed": list(PROFILE_FIELDS)},
            )

        user = self.store.update_user(user_id, **changes)
        if not user:
            raise NotFoundError("User not found")

        logger.info(f"Updated profile of user {user_id}: {sorted(changes)}")
        return user

    def delete_account(self, user_id: str) -> None:
        """Hard-delete the caller's account along with its refresh tokens"""
        if not self.store.delete_user(user_id):
            raise NotFoundError("User not found")
        logger.info(f"Deleted account: {user_id}")

    def list_users(self, role: Optional[str] = None, is_active: Optional[bool] = None) -> List[UserRecord]:
        return self.store.list_users(role=role, is_active=is_active)

    def set_active(self, user_id: str, is_active: bool) -> UserRecord:
        """Activate or deactivate a user (admin only)"""
        user = self.store.update_user(user_id, is_active=is_active)
        if not user:
            raise NotFoundError("User not found")

        logger.info(f"User {user_id} {'activated' if is_active else 'deactivated'}")
        return user

    def delete_user(self, user_id: str) -> None:
        """Delete a user (admin only). Administrators cannot be removed this way."""
        user = self.store.find_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")

        if user.role == UserRole.ADMIN.value:
            raise ForbiddenError("Cannot delete admin user")

        self.store.delete_user(user_id)
        logger.info(f"Deleted user: {user.email}")

    def ensure_admin(
        self,
        email: str,
        password: str,
        hasher: PasswordHasher,
        full_name: str = "Administrator",
    ) -> Tuple[UserRecord, bool]:
        """
        Create the bootstrap administrator if it does not exist yet

        Returns:
            (admin user, whether it was created now)
        """
        email = normalize_email(email)
        existing = self.store.find_user_by_email(email)
        if existing:
            return existing, False

        admin = self.store.insert_user(
            email=email,
            password_hash=hasher.hash(password),
            full_name=full_name,
            role=UserRole.ADMIN.value,
            is_active=True,
            is_verified=True,
        )
        return admin, True
