"""Unified API router aggregator.

Adds all individual feature routers here to keep `app.py` clean.
"""
from fastapi import APIRouter

from signal_relay.api.routes.positions import router as positions_router
from signal_relay.api.routes.system import router as system_router
from signal_relay.api.routes.webhook import router as webhook_router

api_router = APIRouter()
api_router.include_router(system_router)
api_router.include_router(webhook_router)
api_router.include_router(positions_router)

__all__ = ["api_router"]
