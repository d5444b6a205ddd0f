import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from app.core.config import get_settings

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class CurrentUser:
    """Authenticated caller resolved from the bearer token"""
    id: Optional[str]
    email: str


def normalize_email(value: Optional[str]) -> str:
    """Lower-case and trim an email so it can be used as an owner key"""
    return (value or "").strip().lower()


def display_name(email: str) -> str:
    return email.split("@")[0]


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Mint a token signed with the identity provider secret"""
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    if settings.AUTH_JWT_AUDIENCE and "aud" not in to_encode:
        to_encode["aud"] = settings.AUTH_JWT_AUDIENCE
    return jwt.encode(to_encode, settings.AUTH_JWT_SECRET, algorithm=settings.AUTH_JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    settings = get_settings()
    options = {"verify_aud": bool(settings.AUTH_JWT_AUDIENCE)}
    return jwt.decode(
        token,
        settings.AUTH_JWT_SECRET,
        algorithms=[settings.AUTH_JWT_ALGORITHM],
        audience=settings.AUTH_JWT_AUDIENCE,
        options=options,
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    """Resolve the caller from `Authorization: Bearer <token>`"""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Unauthorized")

    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError as e:
        logger.warning(f"Rejected bearer token: {str(e)}")
        raise _unauthorized("Invalid token")

    email = normalize_email(payload.get("email"))
    if not email:
        raise _unauthorized("Invalid token")

    return CurrentUser(id=payload.get("sub"), email=email)
