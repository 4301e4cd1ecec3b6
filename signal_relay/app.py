import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from signal_relay.config import settings
from signal_relay.api.router import api_router
from signal_relay.api.dependencies.services import service_registry
from signal_relay.api.state.startup import clear_startup_events, record_startup_event
from signal_relay.execution.position_engine import PositionEngine
from signal_relay.providers.bitget_rest import BitgetRest
from signal_relay.services.notifier import TradeNotifier
from signal_relay.services.relay_service import AlertRelayService
from signal_relay.utils.logging_config import configure_logging

logger = logging.getLogger("app")


def build_relay() -> AlertRelayService:
    """Wire exchange client, trade sink and position engine from settings."""
    notifier = TradeNotifier(
        webhook_url=settings.NOTIFIER_WEBHOOK,
        log_path=settings.TRADE_LOG_PATH or None,
        recent_limit=settings.RECENT_EVENTS_LIMIT,
    )
    exchange = BitgetRest(
        settings.BITGET_API_KEY,
        settings.BITGET_API_SECRET,
        settings.BITGET_API_PASS,
        base_url=settings.BITGET_BASE_URL,
        margin_coin=settings.MARGIN_COIN,
        product_type=settings.PRODUCT_TYPE,
        timeout=settings.EXCHANGE_TIMEOUT_SEC,
    )
    trading = settings.trading_config()
    engine = PositionEngine(
        exchange,
        notifier,
        trading,
        exchange_timeout=settings.EXCHANGE_TIMEOUT_SEC,
        lock_timeout=settings.LOCK_TIMEOUT_SEC,
    )
    relay = AlertRelayService(
        engine,
        quote_suffix=trading.quote_suffix,
        default_ticker=settings.DEFAULT_SYMBOL,
        closers=[exchange, notifier],
    )
    service_registry.register("relay", relay)
    service_registry.register("notifier", notifier)
    return relay


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager."""
    configure_logging(settings.LOG_LEVEL)
    logger.info("Starting Signal Relay...")
    clear_startup_events()
    relay = build_relay()
    if settings.bitget_configured:
        record_startup_event("exchange", "bitget_configured", base_url=settings.BITGET_BASE_URL)
    else:
        logger.warning("Waiting for API credentials (BITGET_API_KEY/SECRET/PASS)")
        record_startup_event("exchange_skip", "bitget_credentials_missing")
    await relay.start()
    record_startup_event("relay", "relay_started", trading=settings.trading_config().to_dict())
    logger.info("Trading config: %s", settings.trading_config().to_dict())
    logger.info("Webhook URL: %s/webhook", settings.PUBLIC_URL.rstrip("/"))

    yield

    logger.info("Shutting down relay...")
    try:
        await relay.stop()
    except Exception as e:  # pragma: no cover - defensive
        logger.error(f"Failed to stop relay: {e}")
    service_registry.unregister("relay")
    service_registry.unregister("notifier")


app = FastAPI(
    title="Signal Relay",
    description="TradingView alert to Bitget futures relay",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(api_router)
