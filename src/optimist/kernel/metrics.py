"""
Prometheus metrics for optimist.

Counts transaction outcomes and the diagnostics the engine reports, and
tracks how much speculative history is being held.
"""

from prometheus_client import Counter, Gauge

# ============================================================================
# Transaction Lifecycle Metrics
# ============================================================================

transactions_total = Counter(
    "optimist_transactions_total",
    "Total number of optimistic transactions by outcome",
    ["outcome"],  # outcome: begun, committed, reverted
)

pending_history_size = Gauge(
    "optimist_pending_history_size",
    "Number of entries held in the speculative history after the last step",
)

# ============================================================================
# Diagnostic Metrics
# ============================================================================

resolution_not_found_total = Counter(
    "optimist_resolution_not_found_total",
    "Total number of commits/reverts that targeted an unknown transaction id",
    ["operation"],  # operation: commit, revert
)

history_ceiling_exceeded_total = Counter(
    "optimist_history_ceiling_exceeded_total",
    "Total number of appends that pushed history past max_history",
)
