"""
Caller identity for user-scoped endpoints.
"""

from typing import Optional

from fastapi import Header, HTTPException


def get_current_user(x_user_id: Optional[str] = Header(None, alias="X-User-Id")) -> str:
    """FastAPI dependency returning the calling user's id."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id.strip()
