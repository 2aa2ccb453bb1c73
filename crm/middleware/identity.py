"""
Caller identity for FastAPI endpoints.

Sessions are handled upstream; the authenticated user's email reaches the API
in the ``x-user-email`` header.
- get_user_email: requires the header
- get_optional_user_email: returns None when absent
"""

import logging
from typing import Optional

from fastapi import Depends, Header

from crm.exceptions import AuthenticationError
from crm.schemas.common import EMAIL_PATTERN

logger = logging.getLogger(__name__)


async def get_optional_user_email(
    x_user_email: Optional[str] = Header(None, alias="x-user-email"),
) -> Optional[str]:
    if x_user_email is None:
        return None
    email = x_user_email.strip().lower()
    if not email:
        return None
    if not EMAIL_PATTERN.match(email):
        logger.warning("Rejected malformed x-user-email header")
        raise AuthenticationError("Invalid user email")
    return email


async def get_user_email(email: Optional[str] = Depends(get_optional_user_email)) -> str:
    """
    Usage:
        @router.get("/mine")
        async def mine(user_email: str = Depends(get_user_email)):
            ...

    Raises:
        AuthenticationError (401): header missing
    """
    if not email:
        raise AuthenticationError("User email is required")
    return email
