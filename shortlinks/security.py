from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from .config import settings
from .errors import InvalidTokenError

bearer_scheme = HTTPBearer(auto_error=False)

ACCESS_PURPOSE = "access"
RESET_PURPOSE = "password_reset"


def create_token(claims: dict, expires_delta: timedelta) -> str:
    to_encode = claims.copy()
    now = datetime.now(timezone.utc)
    to_encode.update({"iat": now, "exp": now + expires_delta})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def create_access_token(account_id: int, email: str) -> str:
    return create_token(
        {"sub": str(account_id), "email": email, "purpose": ACCESS_PURPOSE},
        timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS),
    )


def create_reset_token(email: str) -> str:
    return create_token(
        {"email": email, "purpose": RESET_PURPOSE},
        timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES),
    )


def decode_token(token: str, purpose: str = ACCESS_PURPOSE) -> dict:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise InvalidTokenError()
    if payload.get("purpose") != purpose or not payload.get("email"):
        raise InvalidTokenError()
    if purpose == ACCESS_PURPOSE and not str(payload.get("sub", "")).isdigit():
        raise InvalidTokenError()
    return payload


def get_optional_owner_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[int]:
    # Missing or bad tokens make the caller anonymous rather than failing the request
    if credentials is None:
        return None
    try:
        return int(decode_token(credentials.credentials)["sub"])
    except InvalidTokenError:
        return None


def get_current_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> dict:
    if credentials is None:
        raise InvalidTokenError("Login required")
    return decode_token(credentials.credentials)
