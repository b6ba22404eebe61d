"""FastAPI auth dependencies: get_current_user."""

import uuid

import sentry_sdk
import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from app.core.security import decode_access_token
from app.schemas.auth import CurrentUser

logger = structlog.get_logger()

bearer_scheme = HTTPBearer(auto_error=True)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> CurrentUser:
    """
    Verify the bearer token and return the authenticated identity.

    The `sub` claim carries the user's UUID. Every ESG record is owned by
    exactly this user; nothing downstream accepts a user id from the request body.
    """
    token = credentials.credentials
    try:
        payload = decode_access_token(token)
    except JWTError as e:
        logger.warning("jwt_verification_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    subject = payload.get("sub")
    if not subject:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing subject claim",
        )

    try:
        user_id = uuid.UUID(str(subject))
    except ValueError as e:
        logger.warning("jwt_subject_not_uuid", subject=str(subject))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token subject is not a valid user id",
        ) from e

    # PII-free: no email
    sentry_sdk.set_user({"id": str(user_id)})

    return CurrentUser(user_id=user_id, email=str(payload.get("email") or ""))
