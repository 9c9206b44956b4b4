"""SQLAlchemy-backed credential store."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from jobportal.core.exceptions import ConflictError
from jobportal.models.security import RefreshToken
from jobportal.models.user import User
from jobportal.repositories.base import CredentialStore, RefreshTokenRecord, UserRecord

logger = logging.getLogger(__name__)

UPDATABLE_USER_FIELDS = frozenset(
    {"password_hash", "full_name", "role", "phone", "company_name", "is_active", "is_verified"}
)


def _to_user_record(user: User) -> UserRecord:
    return UserRecord(
        id=user.id,
        email=user.email,
        password_hash=user.password_hash,
        full_name=user.full_name,
        role=user.role,
        phone=user.phone,
        company_name=user.company_name,
        is_active=user.is_active,
        is_verified=user.is_verified,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def _to_token_record(token: RefreshToken) -> RefreshTokenRecord:
    return RefreshTokenRecord(
        id=token.id,
        user_id=token.user_id,
        token=token.token,
        expires_at=token.expires_at,
        created_at=token.created_at,
    )


class SessionStore:
    """Base for adapters over one Session. Each mutating call commits on its own."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        """Commit what the block did; on any database error roll back and re-raise.

        The session stays usable after a failure, so callers can still run
        cleanup writes on it.
        """
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise


class SQLAlchemyCredentialStore(SessionStore, CredentialStore):
    """CredentialStore over the users and refresh_tokens tables."""

    def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        user = self.db.query(User).filter(User.email == email).first()
        return _to_user_record(user) if user else None

    def find_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        user = self.db.get(User, user_id)
        return _to_user_record(user) if user else None

    def insert_user(
        self,
        *,
        email: str,
        password_hash: str,
        full_name: str,
        role: str,
        phone: Optional[str] = None,
        company_name: Optional[str] = None,
        is_active: bool = True,
        is_verified: bool = False,
    ) -> UserRecord:
        user = User(
            email=email,
            password_hash=password_hash,
            full_name=full_name,
            role=role,
            phone=phone,
            company_name=company_name,
            is_active=is_active,
            is_verified=is_verified,
        )
        try:
            with self._transaction() as db:
                db.add(user)
        except IntegrityError:
            logger.info("Duplicate email rejected by the database: %s", email)
            raise ConflictError("User with this email already exists")
        self.db.refresh(user)
        return _to_user_record(user)

    def update_user(self, user_id: str, **fields: Any) -> Optional[UserRecord]:
        unknown = set(fields) - UPDATABLE_USER_FIELDS
        if unknown:
            raise ValueError(f"Fields not updatable: {sorted(unknown)}")

        user = self.db.get(User, user_id)
        if not user:
            return None
        with self._transaction():
            for name, value in fields.items():
                setattr(user, name, value)
        self.db.refresh(user)
        return _to_user_record(user)

    def delete_user(self, user_id: str) -> bool:
        user = self.db.get(User, user_id)
        if not user:
            return False
        # ORM cascade removes refresh tokens, jobs and applications even where FK cascades are off (SQLite)
        with self._transaction() as db:
            db.delete(user)
        return True

    def list_users(
        self,
        role: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> List[UserRecord]:
        query = self.db.query(User)
        if role:
            query = query.filter(User.role == role)
        if is_active is not None:
            query = query.filter(User.is_active == is_active)
        return [_to_user_record(user) for user in query.order_by(User.created_at.desc()).all()]

    def insert_refresh_token(self, *, user_id: str, token: str, expires_at: datetime) -> RefreshTokenRecord:
        record = RefreshToken(user_id=user_id, token=token, expires_at=expires_at)
        with self._transaction() as db:
            db.add(record)
        self.db.refresh(record)
        return _to_token_record(record)

    def find_refresh_token(self, token: str, user_id: str) -> Optional[RefreshTokenRecord]:
        record = (
            self.db.query(RefreshToken)
            .filter(RefreshToken.token == token, RefreshToken.user_id == user_id)
            .first()
        )
        return _to_token_record(record) if record else None

    def delete_refresh_token(self, token: str, user_id: str) -> bool:
        with self._transaction() as db:
            count = (
                db.query(RefreshToken)
                .filter(RefreshToken.token == token, RefreshToken.user_id == user_id)
                .delete(synchronize_session=False)
            )
        return count > 0

    def delete_refresh_token_by_id(self, record_id: int) -> bool:
        with self._transaction() as db:
            count = (
                db.query(RefreshToken)
                .filter(RefreshToken.id == record_id)
                .delete(synchronize_session=False)
            )
        return count > 0

    def delete_refresh_tokens_for_user(self, user_id: str) -> int:
        with self._transaction() as db:
            count = (
                db.query(RefreshToken)
                .filter(RefreshToken.user_id == user_id)
                .delete(synchronize_session=False)
            )
        return count
