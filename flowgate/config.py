# flowgate/config.py
"""
Fixed thresholds of the rule catalog.

Several of the values (layout tolerance, duplication group size, the per-type
time costs) are heuristics rather than normative limits.

Node-type keys ("http", "api", "database", ...) are matched case-insensitively,
so provider-prefixed or camel-cased tags such as
`@n8n/n8n-nodes-langchain.toolHttpRequest` or `...SlackApi` count as HTTP/API
nodes too.
"""
from __future__ import annotations

from dataclasses import dataclass

CHECKER_NAMES = ("structural", "security", "quality", "performance")


@dataclass(frozen=True)
class Thresholds:
    # quality
    magic_number_digits: int = 4
    expression_min_length: int = 500
    expression_max_count: int = 5
    error_handling_ratio: float = 0.5
    layout_tolerance: float = 200.0
    duplication_group_size: int = 3

    # security
    env_advisory_node_count: int = 2

    # performance
    rate_limit_api_nodes: int = 5
    pagination_data_nodes: int = 2
    max_set_nodes: int = 5
    time_budget_sec: float = 30.0
    http_cost_sec: float = 2.0
    database_cost_sec: float = 1.0
    spreadsheet_cost_sec: float = 3.0
    default_wait_sec: float = 1.0
    default_cost_sec: float = 0.1


DEFAULT_THRESHOLDS = Thresholds()

CHECKER_TITLES = {
    "loader": "Document Loading",
    "structural": "JSON Structure Validation",
    "security": "Security Scan",
    "quality": "Code Quality Analysis",
    "performance": "Performance Analysis",
}
