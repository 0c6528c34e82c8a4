"""
DevCamper Backend — JWT Helpers
=================================

What:  Signs and verifies the HS256 access tokens carried by API clients.
How:   python-jose with the shared JWT_SECRET. The subject claim holds the
       user id.
Who:   auth.deps.protect() verifies; create_access_token() is used by the
       account tooling and the test suite.

An empty JWT_SECRET disables verification entirely: every token is
rejected rather than accepted against a blank key.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from devcamper.config import settings
from devcamper.exceptions import AuthenticationError


def create_access_token(user_id: Any, expires_minutes: Optional[int] = None) -> str:
    if not settings.jwt_secret:
        raise RuntimeError("JWT_SECRET is not set")
    minutes = expires_minutes if expires_minutes is not None else settings.jwt_expire_minutes
    to_encode = {
        "sub": str(user_id),
        "typ": "access",
        "exp": datetime.now(timezone.utc) + timedelta(minutes=minutes),
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Dict[str, Any]:
    """
    Verify signature and expiry and return the claims.

    Raises:
        AuthenticationError: secret unset, bad signature, expired, or wrong type
    """
    if not settings.jwt_secret:
        raise AuthenticationError(context={"reason": "jwt_secret_unset"})
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise AuthenticationError(context={"reason": type(e).__name__})

    token_type = claims.get("typ")
    if token_type and token_type != "access":
        raise AuthenticationError(context={"reason": "token_type"})
    return claims


__all__ = ["create_access_token", "decode_token"]
