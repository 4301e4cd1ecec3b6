"""Alert intake: TradingView posts plain text or JSON here."""
import json
import logging
from typing import Any, Dict, Optional, Union
from urllib.parse import parse_qsl

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request

from signal_relay.api.dependencies.auth import secret_matches
from signal_relay.api.dependencies.services import get_relay_service

logger = logging.getLogger("webhook_api")

router = APIRouter(tags=["webhook"])


def decode_alert(body: bytes, content_type: str = "") -> Union[str, Dict[str, Any]]:
    """Turn a request body into alert text or a JSON/form mapping."""
    text = body.decode("utf-8", errors="replace").strip()
    if "application/x-www-form-urlencoded" in content_type:
        return dict(parse_qsl(text, keep_blank_values=True))
    if text.startswith("{"):
        try:
            payload = json.loads(text)
        except ValueError:
            return text
        if isinstance(payload, dict):
            return payload
    return text


async def receive_alert(
    request: Request,
    secret: Optional[str] = Query(None),
    x_webhook_secret: Optional[str] = Header(None),
    relay=Depends(get_relay_service),
):
    alert = decode_alert(await request.body(), request.headers.get("content-type", ""))
    body_secret = alert.get("secret") if isinstance(alert, dict) else None
    if not secret_matches(secret or x_webhook_secret or body_secret):
        logger.warning("Invalid webhook secret")
        raise HTTPException(status_code=401, detail="Invalid webhook secret")
    logger.info("Received webhook: %s", alert if isinstance(alert, str) else "<json>")
    events = await relay.accept_alert(alert)
    # The alerting service never retries, so receipt is acknowledged regardless of outcome
    return {"success": True, "events": len(events)}


router.add_api_route("/webhook", receive_alert, methods=["POST"])
router.add_api_route("/", receive_alert, methods=["POST"], name="receive_alert_root")

__all__ = ["router", "decode_alert"]
