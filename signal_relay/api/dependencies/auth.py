"""Webhook secret checks shared by the alert and admin routes."""
import hmac
from typing import Optional

from fastapi import Header, HTTPException, Query

from signal_relay.config import settings


def secret_matches(provided: Optional[str]) -> bool:
    expected = settings.WEBHOOK_SECRET
    if not expected:
        return True
    if not provided:
        return False
    return hmac.compare_digest(str(provided).encode("utf-8"), expected.encode("utf-8"))


def require_webhook_secret(
    secret: Optional[str] = Query(None),
    x_webhook_secret: Optional[str] = Header(None),
):
    if not secret_matches(secret or x_webhook_secret):
        raise HTTPException(status_code=401, detail="Invalid webhook secret")
    return True

__all__ = ["secret_matches", "require_webhook_secret"]
