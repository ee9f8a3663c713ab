"""
Utility functions for the auth module.
"""

import hashlib

HASH_PREFIX = "sha256:"


def hash_password(password: str) -> str:
    """
    Return the `sha256:<hexdigest>` form accepted in SEO_ADMIN_USERS.

    Note:
        Keeps plain passwords out of the environment for small deployments.
        It is not a password-hashing scheme for user databases.
    """
    return HASH_PREFIX + hashlib.sha256(password.encode()).hexdigest()
