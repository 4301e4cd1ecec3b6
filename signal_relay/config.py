from pydantic import Field
from pydantic_settings import BaseSettings

from signal_relay.models.trade_models import TradingConfig
from signal_relay.utils.orders_enum import MarginMode


class Settings(BaseSettings):
    # Application
    APP_PORT: int = Field(3000)
    PUBLIC_URL: str = Field("http://localhost:3000")
    LOG_LEVEL: str = Field("INFO")

    # Webhook secret appended to the alert URL (?secret=...) or sent as X-Webhook-Secret.
    # Empty disables the check.
    WEBHOOK_SECRET: str = Field("")

    # Bitget API Configuration
    BITGET_API_KEY: str = Field("")
    BITGET_API_SECRET: str = Field("")
    BITGET_API_PASS: str = Field("")
    BITGET_BASE_URL: str = Field("https://api.bitget.com")

    # Trading Configuration
    POSITION_SIZE_USD: float = Field(10.0)  # margin per position, USD
    LEVERAGE: int = Field(5)
    MARGIN_MODE: MarginMode = Field(MarginMode.ISOLATED)
    QUOTE_SUFFIX: str = Field("USDT")
    MARGIN_COIN: str = Field("USDT")
    PRODUCT_TYPE: str = Field("USDT-FUTURES")
    # Symbol used by structured alerts ({"signal": "ENTER-LONG"}) that carry no ticker
    DEFAULT_SYMBOL: str = Field("BTCUSDT")

    # Concurrency bounds
    EXCHANGE_TIMEOUT_SEC: float = Field(10.0)
    LOCK_TIMEOUT_SEC: float = Field(30.0)

    # Trade audit / notifications
    TRADE_LOG_PATH: str = Field("logs/trades.log")
    NOTIFIER_WEBHOOK: str = Field("")
    RECENT_EVENTS_LIMIT: int = Field(200)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore"
    }

    def trading_config(self) -> TradingConfig:
        return TradingConfig(
            position_size_usd=self.POSITION_SIZE_USD,
            leverage=self.LEVERAGE,
            margin_mode=MarginMode(self.MARGIN_MODE),
            quote_suffix=self.QUOTE_SUFFIX.upper(),
        )

    @property
    def bitget_configured(self) -> bool:
        return bool(self.BITGET_API_KEY and self.BITGET_API_SECRET and self.BITGET_API_PASS)

settings = Settings()
