import base64
import hashlib
import hmac
import json
import logging
import time
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx

from signal_relay.models.trade_models import ExchangeResult
from signal_relay.utils.orders_enum import Direction, ErrorKind, MarginMode

logger = logging.getLogger("bitget_rest")

SUCCESS_CODE = "00000"
PLACE_ORDER_PATH = "/api/v2/mix/order/place-order"
SET_LEVERAGE_PATH = "/api/v2/mix/account/set-leverage"


def sign_request(api_secret: str, timestamp: str, method: str, request_path: str, body: str = "") -> str:
    """Bitget signature: base64(HMAC-SHA256(secret, timestamp + METHOD + path + body))."""
    prehash = f"{timestamp}{method.upper()}{request_path}{body}"
    digest = hmac.new(api_secret.encode("utf-8"), prehash.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def format_size(size: float) -> str:
    """Plain decimal string for the order size field (no exponent, no float rounding)."""
    return format(Decimal(str(size)).normalize(), "f")


class BitgetRest:
    """USDT-M futures REST client covering the two calls the relay needs."""

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        api_pass: str,
        base_url: str = "https://api.bitget.com",
        margin_coin: str = "USDT",
        product_type: str = "USDT-FUTURES",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.api_secret = api_secret
        self.api_pass = api_pass
        self.margin_coin = margin_coin
        self.product_type = product_type
        self.client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
        if self.configured:
            logger.info("Bitget client initialized base_url=%s", base_url)
        else:
            logger.warning("Bitget credentials missing; orders will be rejected until configured")

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.api_secret and self.api_pass)

    def _headers(self, method: str, path: str, body: str) -> Dict[str, str]:
        timestamp = str(int(time.time() * 1000))
        return {
            "ACCESS-KEY": self.api_key,
            "ACCESS-SIGN": sign_request(self.api_secret, timestamp, method, path, body),
            "ACCESS-TIMESTAMP": timestamp,
            "ACCESS-PASSPHRASE": self.api_pass,
            "Content-Type": "application/json",
            "locale": "en-US",
        }

    async def _post(self, path: str, params: Dict[str, Any]) -> ExchangeResult:
        if not self.configured:
            return ExchangeResult.failed(ErrorKind.EXCHANGE_REJECTED, {"error": "credentials not configured"})
        body = json.dumps(params, separators=(",", ":"))
        try:
            response = await self.client.post(path, content=body, headers=self._headers("POST", path, body))
        except httpx.HTTPError as e:
            logger.error("Bitget request %s failed: %s", path, e)
            return ExchangeResult.failed(ErrorKind.EXCHANGE_UNAVAILABLE, {"error": str(e), "params": params})
        try:
            payload = response.json()
        except ValueError:
            payload = {"status_code": response.status_code, "text": response.text}
        code = payload.get("code") if isinstance(payload, dict) else None
        if code != SUCCESS_CODE:
            logger.error("Bitget rejected %s status=%s payload=%s", path, response.status_code, payload)
            kind = ErrorKind.EXCHANGE_UNAVAILABLE if response.status_code >= 500 else ErrorKind.EXCHANGE_REJECTED
            return ExchangeResult.failed(kind, payload)
        data = payload.get("data") or {}
        order_id = data.get("orderId") if isinstance(data, dict) else None
        return ExchangeResult(success=True, raw=payload, order_id=order_id)

    async def submit_order(self, ticker: str, side: Direction, size_usd: float, margin_mode: MarginMode) -> ExchangeResult:
        """Place a market order sized in USD (position size times leverage)."""
        params = {
            "symbol": ticker,
            "productType": self.product_type,
            "marginMode": MarginMode(margin_mode).exchange_value,
            "marginCoin": self.margin_coin,
            "size": format_size(size_usd),
            "side": Direction(side).value,
            "orderType": "market",
        }
        logger.info("Submitting order with params: %s", params)
        result = await self._post(PLACE_ORDER_PATH, params)
        logger.info("Order response success=%s order_id=%s", result.success, result.order_id)
        return result

    async def set_leverage(self, ticker: str, leverage: int, hold_side: Optional[str] = None) -> ExchangeResult:
        params = {
            "symbol": ticker,
            "productType": self.product_type,
            "marginCoin": self.margin_coin,
            "leverage": str(leverage),
        }
        if hold_side:
            params["holdSide"] = hold_side
        result = await self._post(SET_LEVERAGE_PATH, params)
        logger.info("Leverage set %s x%s success=%s", ticker, leverage, result.success)
        return result

    async def close(self):
        await self.client.aclose()


__all__ = ["BitgetRest", "sign_request", "format_size", "SUCCESS_CODE"]
