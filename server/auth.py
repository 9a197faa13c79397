"""Authentication and security utilities."""

import uuid
from typing import Optional

import bcrypt
from fastapi import Header, Request

from server.config import API_KEY_PREFIX
from server.exceptions import InvalidAPIKeyError


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        Bcrypt hash of the password
    """
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against a bcrypt hash.

    Args:
        password: Plain text password to verify
        password_hash: Bcrypt hash to verify against

    Returns:
        True if password matches hash, False otherwise
    """
    password_bytes = password.encode('utf-8')
    hash_bytes = password_hash.encode('utf-8')
    return bcrypt.checkpw(password_bytes, hash_bytes)


def generate_api_key() -> str:
    """
    Generate a new API Key with the configured prefix.

    Returns:
        API Key string in format: {prefix}{uuid4}
    """
    return f"{API_KEY_PREFIX}{uuid.uuid4()}"


def extract_api_key(authorization: Optional[str]) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise InvalidAPIKeyError("Missing or malformed Authorization header")
    api_key = authorization[len("Bearer "):].strip()
    if not api_key:
        raise InvalidAPIKeyError("Missing or malformed Authorization header")
    return api_key


async def get_current_user(request: Request, authorization: Optional[str] = Header(None)) -> str:
    """
    FastAPI dependency to validate API Key and extract user_id.

    The returned user_id is the request-scoped identity that routes pass
    explicitly into every service call.

    Args:
        request: Incoming request, tagged with the user_id for logging
        authorization: Authorization header value (format: "Bearer <api_key>")

    Returns:
        user_id of the authenticated user

    Raises:
        InvalidAPIKeyError: If API Key is invalid or missing
    """
    from server.services.auth_service import AuthService

    api_key = extract_api_key(authorization)
    user_id = AuthService().validate_api_key(api_key)
    if user_id is None:
        raise InvalidAPIKeyError("Invalid or revoked API key")

    request.state.user_id = user_id
    return user_id
