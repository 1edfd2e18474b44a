"""
Password hashing and login.

Stored users are checked first (by username or email). If none matches and
DEMO_LOGIN_ENABLED is set, the built-in demo accounts are tried; their
hashes are computed once per process so the plaintext demo passwords are
only ever compared through bcrypt.
"""
from sqlalchemy.orm import Session
from sqlalchemy import or_
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import Optional
import logging

import bcrypt

from stockledger.config import get_settings
from stockledger.models.user import User, UserRole
from stockledger.services.errors import AuthenticationError

logger = logging.getLogger(__name__)


DEMO_ACCOUNTS = (
    {
        "username": "admin",
        "email": "admin@inventory.com",
        "full_name": "System Administrator",
        "role": UserRole.ADMIN,
        "password": "admin123",
    },
    {
        "username": "user",
        "email": "user@inventory.com",
        "full_name": "Regular User",
        "role": UserRole.USER,
        "password": "user123",
    },
)


@dataclass
class DemoUser:
    username: str
    email: str
    full_name: str
    role: UserRole
    password_hash: str
    id: Optional[int] = None
    created_at: Optional[datetime] = None


def hash_password(password: str) -> str:
    """Hash a password for storing in the database."""
    rounds = get_settings().BCRYPT_ROUNDS
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return True if the plain password matches the hash."""
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed hash, or a password bcrypt refuses (over 72 bytes)
        return False


@lru_cache
def demo_users() -> dict:
    """Demo accounts keyed by username, with hashed passwords."""
    return {
        account["username"]: DemoUser(
            username=account["username"],
            email=account["email"],
            full_name=account["full_name"],
            role=account["role"],
            password_hash=hash_password(account["password"]),
        )
        for account in DEMO_ACCOUNTS
    }


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def authenticate(self, login: str, password: str):
        """
        Verify credentials.

        Args:
            login: Username or email
            password: Plain password

        Returns:
            Tuple of (user, is_demo)

        Raises:
            AuthenticationError: If no account matches the credentials
        """
        user = (
            self.db.query(User)
            .filter(or_(User.username == login, User.email == login))
            .filter(User.deleted_at.is_(None))
            .first()
        )
        if user is not None:
            if verify_password(password, user.password_hash):
                logger.info(f"Successful login for user: {user.username}")
                return user, False
            logger.info(f"Invalid password for user: {login}")
            raise AuthenticationError("Invalid credentials")

        if get_settings().DEMO_LOGIN_ENABLED:
            demo = demo_users().get(login)
            if demo is not None and verify_password(password, demo.password_hash):
                logger.info(f"Successful demo login for user: {login}")
                return demo, True

        logger.info(f"Invalid credentials for username: {login}")
        raise AuthenticationError("Invalid credentials")
