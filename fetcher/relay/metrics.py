from prometheus_client import Counter

RELAY_REQUESTS = Counter(
    "fetcher_relay_requests_total",
    "Relay calls by outcome",
    ["outcome"],
)


def record_outcome(outcome: str) -> None:
    RELAY_REQUESTS.labels(outcome=outcome).inc()
