"""
LibraryHub Backend — Session Token Helpers
============================================

What:  Signing and verifying the HS256 JWT carried in the `access_token`
       cookie, and the FastAPI dependency that turns the cookie into the
       caller's account number.
Who:   Per-user routes (`/api/home`, `/api/loans`) depend on
       get_current_account. Tests use create_access_token to build cookies.

Claims:
    sub        account number (the external identity)
    name       first name, for greeting without a lookup
    user_type  user type id
    exp        expiry (default 7 days)

Login/logout, which issue and clear the cookie, live outside this service.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Request
from jose import JWTError, jwt

from libraryhub.config import settings
from libraryhub.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


def create_access_token(
    account_number: str,
    first_name: Optional[str] = None,
    user_type: Optional[int] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=settings.access_token_expire_days)
    )
    claims: Dict[str, Any] = {"sub": account_number, "exp": expire}
    if first_name is not None:
        claims["name"] = first_name
    if user_type is not None:
        claims["user_type"] = user_type
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verifies signature and expiry and returns the claims.

    Raises:
        AuthenticationError: bad signature, expired, malformed, or no `sub`.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.info("Rejected session token: %s", str(e))
        raise AuthenticationError(message="could not authenticate")
    if not payload.get("sub"):
        raise AuthenticationError(message="could not authenticate")
    return payload


async def get_current_account(request: Request) -> str:
    """
    FastAPI dependency returning the account number of the session cookie.

    The cookie name comes from settings, so it is read from the request
    rather than declared as a Cookie() parameter.
    """
    token = request.cookies.get(settings.auth_cookie_name)
    if not token:
        raise AuthenticationError(message="access denied")
    return str(decode_access_token(token)["sub"])
