import importlib

CRITICAL_IMPORTS = [
    ("signal_relay.config", "settings"),
    ("signal_relay.engine.signal_parser", "parse"),
    ("signal_relay.execution.position_engine", "PositionEngine"),
    ("signal_relay.providers.bitget_rest", "BitgetRest"),
    ("signal_relay.services.notifier", "TradeNotifier"),
    ("signal_relay.services.relay_service", "AlertRelayService"),
    ("signal_relay.scripts.submit_order", "main"),
    ("signal_relay.app", "app"),
]

def test_critical_imports():
    missing = []
    for module_name, symbol in CRITICAL_IMPORTS:
        module = importlib.import_module(module_name)
        if not hasattr(module, symbol):
            missing.append(f"{module_name}:{symbol}")
    assert not missing, f"Missing symbols: {missing}"
