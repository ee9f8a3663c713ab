"""
FastAPI dependency functions for authentication.

These can be used in routes with Depends() to protect endpoints.
"""

from fastapi import Depends, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from .service import authenticate_user

# HTTP Basic authentication scheme
security = HTTPBasic()


def get_current_user(request: Request, credentials: HTTPBasicCredentials = Depends(security)) -> str:
    """
    Dependency that retrieves and validates the current user.

    The user table comes from the settings captured by the app factory
    (`app.state.settings.ADMIN_USERS`).

    Returns:
        str: The authenticated username.
    """
    users = request.app.state.settings.ADMIN_USERS
    return authenticate_user(credentials.username, credentials.password, users)
