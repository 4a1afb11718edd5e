# feature_board/services/user_store.py
"""
Account storage for sign-up and login.
"""

import base64
import hashlib
import logging
import re
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional

import bcrypt

from feature_board.config import constants
from feature_board.errors import ConflictError, UnauthorizedError, ValidationError
from feature_board.models.schemas import User

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
USERNAME_PATTERN = re.compile(
    rf"^[A-Za-z0-9_]{{{constants.USERNAME_MIN_LENGTH},{constants.USERNAME_MAX_LENGTH}}}$"
)


def _prepare_password(password: str) -> bytes:
    """Pre-hash with SHA-256 so passwords past bcrypt's 72-byte limit still count."""
    return base64.b64encode(hashlib.sha256(password.encode()).digest())


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_prepare_password(password), bcrypt.gensalt()).decode()


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(_prepare_password(password), password_hash.encode())


@dataclass
class _Account:
    user: User
    password_hash: str


class UserStore:
    """Thread-safe in-process user registry, one per service container."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_email: Dict[str, _Account] = {}

    def create_user(self, username: str, email: str, password: str) -> User:
        """
        Register a new account.

        Raises:
            ValidationError: missing or malformed fields
            ConflictError: email or username already taken
        """
        username = (username or "").strip()
        email = (email or "").strip().lower()
        password = password or ""

        if not username or not email or not password:
            raise ValidationError({}, constants.SIGNUP_FIELDS_REQUIRED)
        if not EMAIL_PATTERN.match(email):
            raise ValidationError({"email": constants.EMAIL_INVALID}, constants.EMAIL_INVALID)
        if not USERNAME_PATTERN.match(username):
            raise ValidationError({"username": constants.USERNAME_INVALID}, constants.USERNAME_INVALID)
        if len(password) < constants.PASSWORD_MIN_LENGTH:
            raise ValidationError({"password": constants.PASSWORD_TOO_SHORT}, constants.PASSWORD_TOO_SHORT)

        password_hash = hash_password(password)
        with self._lock:
            taken = email in self._by_email or any(
                a.user.username.lower() == username.lower() for a in self._by_email.values()
            )
            if taken:
                raise ConflictError(constants.USER_EXISTS)

            user = User(
                id=uuid.uuid4().hex,
                username=username,
                email=email,
                created_at=datetime.now(timezone.utc),
            )
            self._by_email[email] = _Account(user=user, password_hash=password_hash)

        logger.info(f"Created user {user.id} ({username})")
        return user

    def find_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            account = self._by_email.get((email or "").strip().lower())
        return account.user if account else None

    def authenticate(self, email: str, password: str) -> User:
        """Return the user for valid credentials, else raise UnauthorizedError."""
        if not email or not password:
            raise ValidationError({}, constants.CREDENTIALS_REQUIRED)

        with self._lock:
            account = self._by_email.get(email.strip().lower())
        if account is None or not verify_password(password, account.password_hash):
            logger.info("Failed login attempt")
            raise UnauthorizedError(constants.INVALID_CREDENTIALS)
        return account.user
