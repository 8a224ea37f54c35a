# flowgate/model/node_types.py
"""Node-type tags and the substring heuristics used to classify them."""
from __future__ import annotations

from typing import Any, Iterable

HTTP_REQUEST = "n8n-nodes-base.httpRequest"
WAIT = "n8n-nodes-base.wait"
SET = "n8n-nodes-base.set"
SPLIT_IN_BATCHES = "n8n-nodes-base.splitInBatches"
START = "n8n-nodes-base.start"
WEBHOOK = "n8n-nodes-base.webhook"

# Entry points legitimately have no inbound edge (and often no outbound one).
ENTRY_POINT_TYPES = frozenset({
    START,
    WEBHOOK,
    "n8n-nodes-base.manualTrigger",
    "n8n-nodes-base.scheduleTrigger",
    "n8n-nodes-base.cron",
    "n8n-nodes-base.interval",
    "n8n-nodes-base.formTrigger",
    "n8n-nodes-base.errorTrigger",
    "n8n-nodes-base.executeWorkflowTrigger",
})

API_KEYS = ("http", "api", "database")           # error-handling coverage
RATE_LIMITED_KEYS = ("http", "api")              # rate limiting
DATA_SOURCE_KEYS = ("googlesheets", "database", "airtable")
BRANCHING_KEYS = ("if", "switch")
RATE_LIMIT_NAME_KEYS = ("rate", "throttle")
BATCH_NAME_KEYS = ("paginate", "batch")


def type_of(value: Any) -> str:
    """Node type as a string ("" when absent or not a string)."""
    return value if isinstance(value, str) else ""


def type_contains(node_type: str, keys: Iterable[str]) -> bool:
    """Case-insensitive substring test; "toolHttpRequest" matches "http"."""
    t = node_type.lower()
    return any(k in t for k in keys)


def is_entry_point(node_type: str) -> bool:
    return node_type in ENTRY_POINT_TYPES or node_type.lower().endswith("trigger")
