"""Security utilities - password hashing and password policy"""

import re
from dataclasses import dataclass, field
from typing import List, Optional

import bcrypt

from jobportal.core.exceptions import InvalidInputError

DEFAULT_ROUNDS = 10
MIN_PASSWORD_LENGTH = 8
# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72
SPECIAL_CHARACTERS = '!@#$%^&*(),.?":{}|<>'

_SPECIAL_RE = re.compile("[" + re.escape(SPECIAL_CHARACTERS) + "]")


@dataclass
class PasswordCheck:
    """Outcome of a password policy check"""
    valid: bool
    errors: List[str] = field(default_factory=list)


class PasswordHasher:
    """bcrypt hashing with a configurable work factor"""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        if rounds < 4 or rounds > 31:
            raise ValueError("bcrypt rounds must be between 4 and 31")
        self.rounds = rounds
        self._dummy_digest: Optional[str] = None

    def hash(self, plaintext: str) -> str:
        """
        Hash a password using bcrypt

        Args:
            plaintext: Plain text password

        Returns:
            str: Self-describing digest ($2b$<rounds>$<salt><hash>)

        Raises:
            InvalidInputError: If the password is empty or too long for bcrypt
        """
        if not isinstance(plaintext, str) or not plaintext:
            raise InvalidInputError("Password must be a non-empty string")

        encoded = plaintext.encode('utf-8')
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise InvalidInputError(f"Password must not exceed {MAX_PASSWORD_BYTES} bytes")

        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode('utf-8')

    def compare(self, plaintext: str, digest: str) -> bool:
        """
        Verify a password against its hash

        Never raises: malformed input simply does not match.
        """
        if not isinstance(plaintext, str) or not isinstance(digest, str):
            return False
        if not plaintext or not digest:
            return False
        try:
            return bcrypt.checkpw(plaintext.encode('utf-8'), digest.encode('utf-8'))
        except (ValueError, TypeError):
            return False

    def burn(self, plaintext: str) -> None:
        """Run one comparison against a throwaway digest.

        Used when there is no stored digest to check (unknown login email) so
        the request costs the same as a real verification.
        """
        if self._dummy_digest is None:
            self._dummy_digest = bcrypt.hashpw(
                b"jobportal-timing-equalizer", bcrypt.gensalt(rounds=self.rounds)
            ).decode('utf-8')
        self.compare(plaintext or " ", self._dummy_digest)

    @staticmethod
    def validate(plaintext: str, require_special: bool = False) -> PasswordCheck:
        """
        Check a password against the password policy.

        Args:
            plaintext: Candidate password
            require_special: Also demand one of SPECIAL_CHARACTERS

        Returns:
            PasswordCheck with every violated rule listed
        """
        errors: List[str] = []
        plaintext = plaintext or ""

        if len(plaintext) < MIN_PASSWORD_LENGTH:
            errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if len(plaintext.encode('utf-8')) > MAX_PASSWORD_BYTES:
            errors.append(f"Password must not exceed {MAX_PASSWORD_BYTES} bytes")
        if not re.search(r"[A-Z]", plaintext):
            errors.append("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", plaintext):
            errors.append("Password must contain at least one lowercase letter")
        if not re.search(r"[0-9]", plaintext):
            errors.append("Password must contain at least one number")
        if require_special and not _SPECIAL_RE.search(plaintext):
            errors.append("Password must contain at least one special character")

        return PasswordCheck(valid=not errors, errors=errors)
