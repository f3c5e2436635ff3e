"""
Admin authentication.

A single admin account comes from settings. Its token is an HMAC of the
admin email keyed with SECRET_KEY, so it survives restarts and needs no
session store.
"""
from __future__ import annotations
import hashlib
import hmac
import logging
from typing import Optional

from fastapi import Header, HTTPException

from database import Settings, settings

logger = logging.getLogger("uvicorn.error")


def default_credentials_in_use() -> list[str]:
    """Names of the admin secrets still set to their shipped defaults.

    With the default SECRET_KEY anyone can compute the admin token.
    """
    return [
        name for name in ("ADMIN_PASSWORD", "SECRET_KEY")
        if getattr(settings, name) == Settings.model_fields[name].default
    ]


def admin_token() -> str:
    return hmac.new(settings.SECRET_KEY.encode(), settings.ADMIN_EMAIL.lower().encode(), hashlib.sha256).hexdigest()


def login(email: str, password: str) -> str:
    if email.lower() == settings.ADMIN_EMAIL.lower() and hmac.compare_digest(password.encode(), settings.ADMIN_PASSWORD.encode()):
        return admin_token()
    logger.warning(f"Rejected admin login for {email}")
    raise HTTPException(status_code=401, detail="Invalid credentials")


def require_admin(authorization: Optional[str] = Header(None)) -> None:
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not hmac.compare_digest(token.strip().encode(), admin_token().encode()):
        raise HTTPException(status_code=401, detail="Unauthorized")
