#!/usr/bin/env python3
"""
Signal Relay - Main Entry Point
Web server receiving TradingView webhooks and relaying them to Bitget.
"""
import sys

import uvicorn

from signal_relay.app import app
from signal_relay.config import settings

if __name__ == "__main__":
    print("Starting Signal Relay...")
    print(f"Webhook URL: {settings.PUBLIC_URL.rstrip('/')}/webhook")
    print(f"API Docs: http://localhost:{settings.APP_PORT}/docs")
    print("Press Ctrl+C to stop.")
    try:
        uvicorn.run(
            app,
            host="0.0.0.0",
            port=settings.APP_PORT,
            reload=False
        )
    except Exception as e:
        print(f"Failed to start: {e}")
        sys.exit(1)
