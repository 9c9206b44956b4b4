"""Access/refresh token issuance and verification."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict

from jose import ExpiredSignatureError, JWTError, jwt

from jobportal.config import Settings
from jobportal.core.exceptions import TokenFailure, UnauthorizedError
from jobportal.core.metrics import TOKEN_REJECTIONS

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "Invalid or expired token"


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class TokenPayload:
    """Claims needed to authorize a request without a store round-trip."""
    user_id: str
    email: str
    role: str

    def to_claims(self) -> Dict[str, Any]:
        return {"sub": self.user_id, "email": self.email, "role": self.role}


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str

    def to_dict(self) -> Dict[str, str]:
        return {"accessToken": self.access_token, "refreshToken": self.refresh_token}


class TokenService:
    """Sign and verify the two token classes, each with its own secret."""

    def __init__(
        self,
        *,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta,
        refresh_ttl: timedelta,
        algorithm: str = "HS256",
    ) -> None:
        if not access_secret or not refresh_secret:
            raise ValueError("Both access and refresh secrets are required")
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh secrets must differ")
        self._secrets = {TokenType.ACCESS: access_secret, TokenType.REFRESH: refresh_secret}
        self._ttls = {TokenType.ACCESS: access_ttl, TokenType.REFRESH: refresh_ttl}
        self.algorithm = algorithm

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            access_secret=settings.JWT_ACCESS_SECRET,
            refresh_secret=settings.JWT_REFRESH_SECRET,
            access_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
            algorithm=settings.JWT_ALGORITHM,
        )

    @property
    def access_ttl(self) -> timedelta:
        return self._ttls[TokenType.ACCESS]

    @property
    def refresh_ttl(self) -> timedelta:
        return self._ttls[TokenType.REFRESH]

    def _issue(self, payload: TokenPayload, token_type: TokenType) -> str:
        now = datetime.now(timezone.utc)
        claims = payload.to_claims()
        claims.update({
            "typ": token_type.value,
            "iat": now,
            "exp": now + self._ttls[token_type],
            "jti": secrets.token_urlsafe(16),
        })
        return jwt.encode(claims, self._secrets[token_type], algorithm=self.algorithm)

    def issue_access(self, payload: TokenPayload) -> str:
        return self._issue(payload, TokenType.ACCESS)

    def issue_refresh(self, payload: TokenPayload) -> str:
        return self._issue(payload, TokenType.REFRESH)

    def issue_pair(self, payload: TokenPayload) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access(payload),
            refresh_token=self.issue_refresh(payload),
        )

    def _reject(self, token_type: TokenType, reason: TokenFailure, detail: str) -> UnauthorizedError:
        logger.info("Rejected %s token: %s (%s)", token_type.value, reason.value, detail)
        TOKEN_REJECTIONS.labels(token_type.value, reason.value).inc()
        return UnauthorizedError(INVALID_TOKEN_MESSAGE, reason=reason)

    @staticmethod
    def _is_well_formed(token: str) -> bool:
        try:
            jwt.get_unverified_claims(token)
        except JWTError:
            return False
        return True

    def _verify(self, token: str, token_type: TokenType) -> TokenPayload:
        if not isinstance(token, str) or not token:
            raise self._reject(token_type, TokenFailure.MALFORMED, "empty token")

        try:
            claims = jwt.decode(token, self._secrets[token_type], algorithms=[self.algorithm])
        except ExpiredSignatureError as exc:
            raise self._reject(token_type, TokenFailure.EXPIRED, str(exc))
        except JWTError as exc:
            reason = TokenFailure.BAD_SIGNATURE if self._is_well_formed(token) else TokenFailure.MALFORMED
            raise self._reject(token_type, reason, str(exc))

        if claims.get("typ") != token_type.value:
            raise self._reject(token_type, TokenFailure.MALFORMED, f"typ={claims.get('typ')!r}")

        user_id = claims.get("sub")
        if not user_id or not claims.get("role"):
            raise self._reject(token_type, TokenFailure.MALFORMED, "missing claims")

        return TokenPayload(user_id=str(user_id), email=claims.get("email", ""), role=claims["role"])

    def verify_access(self, token: str) -> TokenPayload:
        return self._verify(token, TokenType.ACCESS)

    def verify_refresh(self, token: str) -> TokenPayload:
        return self._verify(token, TokenType.REFRESH)

    @staticmethod
    def expires_at(token: str) -> datetime:
        """Expiry instant embedded in a token this service issued."""
        exp = jwt.get_unverified_claims(token)["exp"]
        return datetime.fromtimestamp(exp, tz=timezone.utc)
