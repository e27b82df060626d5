"""Security utilities for password hashing and session credentials."""

import base64
import hashlib
from datetime import timedelta

import bcrypt
import jwt
from jwt import exceptions as jwt_exceptions

from volunteer_portal.core.config import Settings, get_settings

_LIFETIME_UNITS = {
    "minutes": timedelta(minutes=1),
    "hours": timedelta(hours=1),
    "days": timedelta(days=1),
    "weeks": timedelta(weeks=1),
}


def _bcrypt_input(password: str) -> bytes:
    # bcrypt only reads 72 bytes; a base64 SHA-256 digest is 44 and has no NULs
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Hashed password string
    """
    password_bytes = _bcrypt_input(password)
    salt = bcrypt.gensalt(rounds=get_settings().bcrypt_rounds)
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Hashed password to verify against

    Returns:
        True if password matches, False otherwise
    """
    password_bytes = _bcrypt_input(plain_password)
    hashed_bytes = hashed_password.encode("utf-8")
    return bcrypt.checkpw(password_bytes, hashed_bytes)


def session_lifetime(settings: Settings) -> timedelta:
    """Configured lifetime of a session credential."""
    return settings.session_token_lifetime * _LIFETIME_UNITS[settings.session_token_lifetime_units]


def create_session_token(claims: dict, secret: str, algorithm: str = "HS256") -> str:
    """Sign a session credential.

    The caller supplies the expiry as the ``exp`` claim.

    Args:
        claims: Dictionary of claims to encode in the token
        secret: Signing secret
        algorithm: JWT signing algorithm

    Returns:
        Encoded JWT token string
    """
    return jwt.encode(claims.copy(), secret, algorithm=algorithm)


def decode_token(token: str, settings: Settings | None = None) -> dict | None:
    """Decode and validate a session credential.

    Args:
        token: JWT token string to decode
        settings: Settings holding the secret (defaults to the cached settings)

    Returns:
        Decoded token payload if valid, None otherwise
    """
    settings = settings or get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt_exceptions.PyJWTError:
        return None
