from prometheus_client import Counter, Histogram

alerts_counter = Counter("relay_alerts_total", "Total alerts received", ["outcome"])
orders_counter = Counter("relay_orders_total", "Total orders confirmed by the exchange", ["action"])
exchange_errors_counter = Counter("relay_exchange_errors_total", "Failed exchange calls", ["kind"])
order_latency = Histogram("relay_order_latency_seconds", "Exchange call latency seconds")
