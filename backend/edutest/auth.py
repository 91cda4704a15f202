"""
Bearer-token seam.

Tokens are issued elsewhere; this module only verifies them and exposes
the caller's `user_id` and `role` to the routes.
"""

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from edutest.errors import AccessDeniedError
from edutest.logging_config import get_logger, log_with_context

security = HTTPBearer(auto_error=False)
logger = get_logger("auth")


class CurrentUser(BaseModel):
    """Authenticated caller extracted from a validated JWT."""
    user_id: int
    role: str


def verify_token(token: str, secret: str, algorithm: str) -> CurrentUser:
    """Decode an HMAC-signed JWT carrying `user_id` and `role` claims."""
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
        return CurrentUser(user_id=int(payload["user_id"]), role=str(payload["role"]))
    except (jwt.PyJWTError, KeyError, TypeError, ValueError) as e:
        log_with_context(logger, "WARNING", "Rejected bearer token",
                         extra_data={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized!",
        )


def get_current_user(request: Request,
                     creds: HTTPAuthorizationCredentials = Depends(security)) -> CurrentUser:
    """FastAPI dependency: the caller behind the Authorization header."""
    if not creds:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No token provided!",
        )
    settings = request.app.state.settings
    return verify_token(creds.credentials, settings.JWT_SECRET, settings.JWT_ALGORITHM)


def require_roles(*roles: str):
    """Dependency factory that only lets the given roles through."""
    def wrapper(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role",
            )
        return user

    return wrapper


def ensure_self_or_privileged(user: CurrentUser, user_id: int, privileged_roles) -> None:
    """Only the owner or an admin/teacher may look at a user's attempts."""
    if user.role not in privileged_roles and user.user_id != user_id:
        raise AccessDeniedError("You don't have access to these attempts")
