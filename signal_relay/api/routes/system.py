"""System & metadata routes (root, health, status, config, metrics)."""
from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from signal_relay.config import settings
from signal_relay.api.dependencies.services import ServiceRegistry, get_service_registry
from signal_relay.api.state.startup import get_startup_events
from signal_relay.utils.time_utils import utc_now_iso

router = APIRouter()

@router.get("/")
async def root(registry: ServiceRegistry = Depends(get_service_registry)):
    return {
        "name": "Signal Relay",
        "version": "1.0.0",
        "description": "TradingView alert to Bitget futures relay",
        "services": registry.names(),
        "exchange": {
            "name": "bitget",
            "configured": settings.bitget_configured,
        },
        "webhook_url": f"{settings.PUBLIC_URL.rstrip('/')}/webhook",
        "endpoints": {
            "webhook": "/webhook",
            "health": "/health",
            "status": "/status",
            "positions": "/positions",
            "events": "/events",
            "last_alert": "/alerts/last",
            "startup_events": "/startup/log",
            "metrics": "/metrics",
            "docs": "/docs",
        },
    }

@router.get("/health")
async def health():
    return {"status": "healthy", "timestamp": utc_now_iso()}

@router.get("/status")
async def status(registry: ServiceRegistry = Depends(get_service_registry)):
    return registry.all_status()

@router.get("/startup/log")
async def startup_log(limit: int = 100):
    return {"events": get_startup_events(limit)}

@router.get("/config")
async def get_config():
    return {
        "trading": settings.trading_config().to_dict(),
        "margin_coin": settings.MARGIN_COIN,
        "product_type": settings.PRODUCT_TYPE,
        "default_symbol": settings.DEFAULT_SYMBOL,
        "exchange_timeout_sec": settings.EXCHANGE_TIMEOUT_SEC,
        "lock_timeout_sec": settings.LOCK_TIMEOUT_SEC,
        "webhook_secret_required": bool(settings.WEBHOOK_SECRET),
        "app_port": settings.APP_PORT,
    }

@router.get("/metrics")
async def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

__all__ = ["router"]
