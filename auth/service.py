"""
Core authentication logic.

Credentials are checked against the admin users configured through
SEO_ADMIN_USERS. Stored passwords are either plain text or
`sha256:<hexdigest>` (see `utils.hash_password`).
"""

import secrets
from typing import Mapping

from fastapi import HTTPException, status

from .utils import HASH_PREFIX, hash_password


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Basic"},
    )


def authenticate_user(username: str, password: str, users: Mapping[str, str]) -> str:
    """
    Authenticate a user by validating their username and password.

    Args:
        username (str): The username provided by the client.
        password (str): The password provided by the client.
        users (Mapping[str, str]): Configured username -> stored password.

    Returns:
        str: The authenticated username.

    Raises:
        HTTPException: If authentication fails (401 Unauthorized).
    """
    stored_password = users.get(username)
    if stored_password is None:
        raise _unauthorized("Invalid credentials")

    candidate = hash_password(password) if stored_password.startswith(HASH_PREFIX) else password
    if secrets.compare_digest(stored_password.encode(), candidate.encode()):
        return username

    raise _unauthorized("Invalid credentials")
