# backend/carservice/auth.py
"""
Caller identity.

Authentication happens in the gateway; it forwards the authenticated
user id in the X-User-Id header and the user's role in X-User-Role.
The backend trusts those headers and nothing else.
"""

from fastapi import Depends, Header, HTTPException, status


def get_current_user_id(x_user_id: int | None = Header(None, alias="X-User-Id")) -> int:
    if x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return x_user_id


def require_admin(
    user_id: int = Depends(get_current_user_id),
    x_user_role: str | None = Header(None, alias="X-User-Role"),
) -> int:
    """Guard for /admin routes; the gateway forwards the caller's role."""
    if x_user_role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user_id
