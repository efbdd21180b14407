from __future__ import annotations

import secrets
from typing import Optional

from fastapi import Header, HTTPException
from loguru import logger

from src.config import get_settings


def verify_cron_secret(authorization: Optional[str] = Header(None)) -> None:
    """Require `Authorization: Bearer <CRON_SECRET>` when a secret is configured.

    An empty CRON_SECRET disables the check.
    """
    secret = get_settings().cron_secret
    if not secret:
        return

    expected = f"Bearer {secret}"
    if authorization is None or not secrets.compare_digest(authorization, expected):
        logger.warning("Rejected trigger request with missing or invalid secret")
        raise HTTPException(status_code=401, detail="Unauthorized")


def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """User id forwarded by the upstream auth layer."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id
