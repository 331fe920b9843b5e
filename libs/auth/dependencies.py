from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError

from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)

SESSION_COOKIE_NAME = "access_token"


def decode_token(token: str) -> AuthUser:
    """Decode a bearer token into an ``AuthUser``.

    Raises ``JWTError`` or ``ValidationError`` when the token is unusable.
    """
    settings = get_settings()
    payload = jwt.decode(
        token,
        settings.AUTH_JWT_SECRET,
        algorithms=[settings.AUTH_JWT_ALGORITHM],
        options={"verify_aud": False},
    )
    return AuthUser(**payload)


async def get_current_user(
    token: Annotated[HTTPAuthorizationCredentials, Depends(security)]
) -> AuthUser:
    """
    Validate the bearer JWT and return the authenticated user.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        return decode_token(token.credentials)
    except (JWTError, ValidationError):
        raise credentials_exception


async def get_optional_user(
    request: Request,
    token: Annotated[
        Optional[HTTPAuthorizationCredentials], Depends(optional_security)
    ],
) -> Optional[AuthUser]:
    """
    Resolve the caller from a bearer header or the session cookie.

    Returns None instead of failing so that page routes can redirect.
    """
    raw_token = token.credentials if token else request.cookies.get(SESSION_COOKIE_NAME)
    if not raw_token:
        return None
    try:
        return decode_token(raw_token)
    except (JWTError, ValidationError):
        logger.info("Ignoring invalid session token on %s", request.url.path)
        return None


async def require_admin(
    current_user: Annotated[AuthUser, Depends(get_current_user)]
) -> AuthUser:
    """
    Ensure the caller carries the 'admin' or 'service_role' role claim.
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user
