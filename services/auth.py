"""
Authentication helpers.

Auth is intentionally minimal: the user id lives in an httpOnly cookie,
passwords are bcrypt hashes. There are no session tokens or rotation.
"""

import logging
import re
import uuid
from typing import Optional

import bcrypt
from fastapi import Response

from config import config

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6


def hash_password(password: str) -> str:
    """Hash a plaintext password with bcrypt."""
    salt = bcrypt.gensalt(rounds=config.auth.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def check_password(password: str, password_hash: Optional[str]) -> bool:
    """Return True when the password matches the stored bcrypt hash."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError as e:
        logger.warning(f"Malformed password hash: {e}")
        return False


def validate_credentials(email: Optional[str], password: Optional[str]) -> Optional[str]:
    """
    Validate signup input.

    Returns:
        An error message, or None when the input is acceptable.
    """
    if not email or not password:
        return "Email and password are required"
    if not EMAIL_PATTERN.match(email):
        return "Invalid email format"
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    return None


def parse_user_id(raw: Optional[str]) -> Optional[uuid.UUID]:
    """Parse the cookie value into a UUID, ignoring garbage."""
    if not raw:
        return None
    try:
        return uuid.UUID(raw)
    except ValueError:
        return None


def set_auth_cookie(response: Response, user_id: uuid.UUID) -> None:
    response.set_cookie(
        key=config.auth.cookie_name,
        value=str(user_id),
        httponly=True,
        secure=config.server.is_production,
        samesite="lax",
        max_age=config.auth.cookie_max_age,
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(key=config.auth.cookie_name)
