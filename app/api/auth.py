import secrets
from typing import Optional
from fastapi import Header, HTTPException
from app.config import config


def require_password(x_password: Optional[str] = Header(None)):
    """
    Simple shared-password gate. Disabled when AUTH_PASSWORD is not set.
    """
    expected = config.AUTH_PASSWORD
    if not expected:
        return
    if x_password is None or not secrets.compare_digest(x_password, expected):
        raise HTTPException(status_code=401, detail="Unauthorized")
