"""
security.py — Bearer token utilities.

Accounts live with the external identity provider; this service only
validates the HS256 tokens it issues (python-jose) and reads the user id
from the `sub` claim. create_access_token() exists for local development
(scripts/issue_token.py) and tests.

Configuration is read from safetrails.core.config.settings.
"""

from datetime import datetime, timedelta, timezone
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from safetrails.core.config import settings


# ── JWT ───────────────────────────────────────────────────────────────────────

def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed JWT.

    Args:
        subject:       The user's string ID.
        expires_delta: Custom TTL; defaults to settings.jwt_expiry_hours.
    """
    delta = expires_delta or timedelta(hours=settings.jwt_expiry_hours)
    expire = datetime.now(tz=timezone.utc) + delta
    payload = {"sub": subject, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Optional[str]:
    """
    Decode and validate a JWT.

    Returns the *sub* claim (user ID) on success, or None if the token
    is missing, expired, or otherwise invalid.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
        return payload.get("sub")
    except JWTError:
        return None


# ── FastAPI dependencies ──────────────────────────────────────────────────────

# Reusable bearer extractor (does NOT auto-raise on missing token)
_bearer = HTTPBearer(auto_error=False)
CredDep = Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)]


def _optional_user_id(credentials: CredDep) -> Optional[str]:
    if not credentials:
        return None
    return decode_access_token(credentials.credentials)


def _required_user_id(credentials: CredDep) -> str:
    """Raises 401 if the token is missing or invalid."""
    user_id = decode_access_token(credentials.credentials) if credentials else None
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_id


OptionalUserId = Annotated[Optional[str], Depends(_optional_user_id)]
CurrentUserId = Annotated[str, Depends(_required_user_id)]
