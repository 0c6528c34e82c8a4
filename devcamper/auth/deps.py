"""
DevCamper Backend — Auth Dependencies
=======================================

What:  `protect` resolves the caller from a bearer token (or the `token`
       cookie); `authorize(*roles)` additionally restricts the route to the
       given roles.
Who:   Mutating bootcamp routes.

    @router.post("", dependencies=...)
    async def create(user: User = Depends(authorize(PUBLISHER_ROLE, ADMIN_ROLE))): ...

Status codes:
    401  no token, bad token, or unknown subject
    403  authenticated, but the role is not in the allowed set
"""

import logging
import uuid
from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.auth.security import decode_token
from devcamper.database import get_db_session
from devcamper.exceptions import AuthenticationError, DatabaseError, ForbiddenError
from devcamper.models.user import User

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)


async def protect(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    token = creds.credentials if creds else request.cookies.get("token")
    if not token:
        raise AuthenticationError()

    claims = decode_token(token)
    try:
        user_id = uuid.UUID(str(claims.get("sub")))
    except ValueError:
        raise AuthenticationError(context={"reason": "subject"})

    try:
        user = await db.get(User, user_id)
    except SQLAlchemyError as e:
        logger.error("Database error loading user %s: %s", user_id, str(e))
        raise DatabaseError(context={"user_id": str(user_id)})
    if user is None:
        raise AuthenticationError(context={"reason": "unknown_user", "user_id": str(user_id)})
    return user


def authorize(*roles: str) -> Callable:
    """Dependency factory: `protect`, then require one of `roles`."""

    async def _dep(user: User = Depends(protect)) -> User:
        if user.role not in roles:
            raise ForbiddenError(
                message=f"User role {user.role} is not authorized to access this route",
                context={"user_id": str(user.id), "allowed": list(roles)},
            )
        return user

    return _dep
