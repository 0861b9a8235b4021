import secrets
from typing import Optional

from fastapi import Header, HTTPException

from storefront.config import settings


def is_admin_token(token: Optional[str]) -> bool:
    expected = settings.ADMIN_TOKEN
    if not expected or not token:
        return False
    return secrets.compare_digest(token, expected)


def optional_admin(x_admin_token: Optional[str] = Header(None)) -> bool:
    return is_admin_token(x_admin_token)


def require_admin(x_admin_token: Optional[str] = Header(None)) -> bool:
    if not is_admin_token(x_admin_token):
        raise HTTPException(status_code=403, detail="Admin privileges required")
    return True
