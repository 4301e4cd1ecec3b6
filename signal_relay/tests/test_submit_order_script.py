import pytest

from signal_relay.config import settings
from signal_relay.scripts import submit_order


def test_parse_args_defaults():
    args = submit_order.parse_args(["--symbol", "BTC", "--side", "buy"])
    assert args.symbol == "BTC"
    assert args.size is None
    assert args.leverage is None
    assert args.margin_mode is None


def test_parse_args_rejects_unknown_side():
    with pytest.raises(SystemExit):
        submit_order.parse_args(["--symbol", "BTC", "--side", "long"])


@pytest.mark.asyncio
async def test_run_without_credentials_fails(monkeypatch):
    monkeypatch.setattr(settings, "BITGET_API_KEY", "")
    assert await submit_order.run("BTC", "buy") is False
    assert await submit_order.run("BTC", "sell", leverage=3) is False
