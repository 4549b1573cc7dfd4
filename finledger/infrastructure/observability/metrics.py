"""Prometheus metrics for ledger movements, investment progress and budget refreshes"""

from prometheus_client import Counter, Histogram

# Ledger metrics
ledger_entry_counter = Counter(
    "finledger_ledger_entries_total",
    "Ledger entries applied to or reversed from bank accounts",
    ["direction", "action"],  # in | out, applied | reversed
)

# Investment metrics
investment_payment_counter = Counter(
    "finledger_investment_payments_total",
    "Payments applied to or reverted from investment schemas",
    ["schema_type", "action"],  # dps | fdr | loan, applied | reverted
)

# Budget metrics
budget_recompute_counter = Counter(
    "finledger_budget_recomputes_total",
    "Budget spent_amount refreshes",
)

# Errors
domain_error_counter = Counter(
    "finledger_domain_errors_total",
    "Domain errors surfaced to callers",
    ["error"],  # validation_error | not_found | consistency_error
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_ledger_entry(direction: str, action: str) -> None:
    ledger_entry_counter.labels(direction=direction, action=action).inc()


def record_investment_payment(schema_type: str, action: str) -> None:
    investment_payment_counter.labels(schema_type=schema_type, action=action).inc()
