"""
User account registration and credential checks.

Passwords are stored as bcrypt hashes. Accounts are the only records this
backend writes to its database.
"""

import logging
from typing import Any, Dict, Optional

import bcrypt
from sqlalchemy.exc import IntegrityError

from config.settings import settings
from models.db import User

logger = logging.getLogger(__name__)


class AccountError(Exception):
    """Raised when an account cannot be created."""

    def __init__(self, reason: str, status_code: int = 400):
        self.reason = reason
        self.status_code = status_code
        super().__init__(reason)


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


class AuthService:
    """Create and authenticate users against the accounts database."""

    def __init__(self, session_factory):
        """
        Args:
            session_factory: SQLAlchemy ``sessionmaker`` bound to the accounts DB.
        """
        self.session_factory = session_factory

    def register(self, name: Optional[str], email: str, password: str) -> Dict[str, Any]:
        """
        Create a user.

        Raises:
            AccountError: Missing fields or the email is already registered.
        """
        if not email or not password:
            raise AccountError("Email and password are required")

        email = email.strip().lower()
        with self.session_factory() as session:
            if session.query(User).filter_by(email=email).first():
                raise AccountError("Email already exists")

            user = User(name=name, email=email, password_hash=hash_password(password))
            session.add(user)
            try:
                session.commit()
            except IntegrityError as exc:
                # Concurrent registration of the same email
                session.rollback()
                raise AccountError("Email already exists") from exc

            logger.info("User registered", extra={"user_id": user.id})
            return user.to_public_dict()

    def authenticate(self, email: Optional[str], password: Optional[str]) -> Optional[Dict[str, Any]]:
        """Return the public user record for valid credentials, else None."""
        if not email or not password:
            return None

        with self.session_factory() as session:
            user = session.query(User).filter_by(email=email.strip().lower()).first()
            if user is None or not user.password_hash:
                return None
            if not verify_password(password, user.password_hash):
                return None
            return user.to_public_dict()
