from __future__ import annotations

from prometheus_client import Counter


RESPONSES_TOTAL = Counter(
    "dirserve_responses_total",
    "Responses written by the static handler grouped by status and kind",
    labelnames=("status", "kind"),
)
NOT_FOUND_TOTAL = Counter(
    "dirserve_not_found_total",
    "404 responses grouped by internal reason code",
    labelnames=("reason",),
)
INTERNAL_ERRORS_TOTAL = Counter(
    "dirserve_internal_errors_total",
    "Requests that failed with an unexpected exception",
)

__all__ = [
    "INTERNAL_ERRORS_TOTAL",
    "NOT_FOUND_TOTAL",
    "RESPONSES_TOTAL",
]
