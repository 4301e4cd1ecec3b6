"""Ledger inspection and manual position removal."""
from fastapi import APIRouter, Depends, HTTPException

from signal_relay.api.dependencies.auth import require_webhook_secret
from signal_relay.api.dependencies.services import get_relay_service, get_trade_notifier
from signal_relay.engine.signal_parser import normalize_ticker

router = APIRouter(tags=["positions"])

@router.get("/positions")
async def list_positions(relay=Depends(get_relay_service)):
    positions = relay.positions()
    return {"count": len(positions), "positions": positions}

@router.delete("/positions/{ticker}")
async def remove_position(ticker: str, relay=Depends(get_relay_service), _auth: bool = Depends(require_webhook_secret)):
    symbol = normalize_ticker(ticker, relay.quote_suffix)
    removed = await relay.engine.remove(symbol)
    if removed is None:
        raise HTTPException(status_code=404, detail=f"No active position for {symbol}")
    return {"status": "removed", "position": removed.to_dict()}

@router.get("/events")
async def recent_events(limit: int = 50, notifier=Depends(get_trade_notifier)):
    return {"events": notifier.recent(limit)}

@router.get("/alerts/last")
async def last_alert(relay=Depends(get_relay_service)):
    return relay.last_alert

__all__ = ["router"]
