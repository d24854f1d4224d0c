# app/dependencies.py

"""
Request dependencies.

Every route except the playground requires a Supabase bearer token; the
verified user id scopes job and match lookups.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.database import get_supabase_admin

security = HTTPBearer()


def _credentials_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> str:
    """Return the user id behind a bearer token (sync, runs in a threadpool)."""
    try:
        user_response = get_supabase_admin().auth.get_user(credentials.credentials)
    except Exception:
        raise _credentials_error()

    if user_response is None or user_response.user is None:
        raise _credentials_error()

    return user_response.user.id
