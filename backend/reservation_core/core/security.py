"""
Identity boundary. Tokens are issued by the external identity provider;
this module only verifies them and extracts the claimant id.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from reservation_core.core.config import get_settings
from reservation_core.core.logging import bind_claimant

settings = get_settings()

bearer_scheme = HTTPBearer(auto_error=False)

ROLE_USER = "user"
ROLE_ADMIN = "admin"


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Mint a token the way the identity provider does. Used by tests and tooling."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode["exp"] = expire
    to_encode.setdefault("role", ROLE_USER)
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has no subject",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


async def get_token_payload(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> dict:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_token(credentials.credentials)
    bind_claimant(str(payload["sub"]))
    return payload


async def get_current_claimant_id(payload: dict = Depends(get_token_payload)) -> str:
    return str(payload["sub"])


async def require_admin(payload: dict = Depends(get_token_payload)) -> str:
    if payload.get("role") != ROLE_ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required")
    return str(payload["sub"])


def is_admin(payload: dict) -> bool:
    return payload.get("role") == ROLE_ADMIN
