# flowgate/performance/analyzer.py
"""
Performance heuristics plus informational metrics (complexity, estimated time).

Time costs are rough per-category guesses in seconds, not measurements.
"""
import math
from typing import Any, Dict, Iterator

from flowgate.config import Thresholds
from flowgate.graph.analyses import GraphAnalyses
from flowgate.graph.model import WorkflowGraph
from flowgate.model import node_types
from flowgate.model.diagnostic import Diagnostic, Kind, Severity
from flowgate.model.workflow import Node, WorkflowDocument


def _name_contains(node: Node, keys) -> bool:
    name = node.display_name.lower()
    return any(k in name for k in keys)


def _wait_seconds(node: Node, default: float) -> float:
    """Configured `amount` of a Wait node; missing, zero or non-numeric -> default."""
    params = node.parameters if isinstance(node.parameters, dict) else {}
    amount = params.get("amount")
    if isinstance(amount, bool) or not amount:
        return default
    if isinstance(amount, (int, float)):
        return float(amount)
    if isinstance(amount, str):
        try:
            return float(amount) or default
        except ValueError:
            return default
    return default


def node_cost(node: Node, limits: Thresholds) -> float:
    t = node.type.lower()
    if "http" in t:
        return limits.http_cost_sec
    if "database" in t:
        return limits.database_cost_sec
    if "googlesheets" in t:
        return limits.spreadsheet_cost_sec
    if node.type == node_types.WAIT:
        return _wait_seconds(node, limits.default_wait_sec)
    return limits.default_cost_sec


def estimate_execution_time(graph: WorkflowGraph, limits: Thresholds) -> float:
    return sum(node_cost(n, limits) for n in graph.nodes)


def complexity_score(n_nodes: int, n_edges: int) -> int:
    # round half up
    return int(math.floor((n_nodes * 1.5 + n_edges) / 2 + 0.5))


def performance_metrics(graph: WorkflowGraph, analyses: GraphAnalyses, limits: Thresholds) -> Dict[str, Any]:
    n_nodes = len(graph.nodes)
    n_edges = graph.edge_count()
    return {
        "nodes": n_nodes,
        "edges": n_edges,
        "complexity_score": complexity_score(n_nodes, n_edges),
        "estimated_time_sec": round(estimate_execution_time(graph, limits), 1),
        "reachable_nodes": len(analyses.reachable_ids),
    }


def check_has_nodes(document: WorkflowDocument, graph: WorkflowGraph,
                    analyses: GraphAnalyses, limits: Thresholds) -> Iterator[Diagnostic]:
    if not isinstance(document.raw.get("nodes"), list):
        yield Diagnostic(
            kind=Kind.NO_NODES,
            severity=Severity.CRITICAL,
            field="nodes",
            message="Cannot analyze performance without nodes",
        )


def check_sequential_requests(document: WorkflowDocument, graph: WorkflowGraph,
                              analyses: GraphAnalyses, limits: Thresholds) -> Iterator[Diagnostic]:
    """Consecutive HTTP Request nodes (document order) wired directly one after another."""
    http = [n for n in graph.nodes if n.type == node_types.HTTP_REQUEST]
    if len(http) < 2:
        return
    sequential = sum(
        1 for prev, cur in zip(http, http[1:])
        if analyses.is_adjacent(prev.id, cur.id)
    )
    if sequential > 0:
        yield Diagnostic(
            kind=Kind.PARALLEL_REQUESTS,
            severity=Severity.MEDIUM,
            message=f"Found {sequential} sequential HTTP requests - consider making independent requests parallel",
            hint="Use SplitInBatches node to process requests concurrently",
        )


def check_rate_limiting(document: WorkflowDocument, graph: WorkflowGraph,
                        analyses: GraphAnalyses, limits: Thresholds) -> Iterator[Diagnostic]:
    api = [n for n in graph.nodes if node_types.type_contains(n.type, node_types.RATE_LIMITED_KEYS)]
    if len(api) <= limits.rate_limit_api_nodes:
        return
    limited = any(
        n.type == node_types.WAIT or _name_contains(n, node_types.RATE_LIMIT_NAME_KEYS)
        for n in graph.nodes
    )
    if not limited:
        yield Diagnostic(
            kind=Kind.NO_RATE_LIMITING,
            severity=Severity.HIGH,
            message=f"{len(api)} API calls without rate limiting - add rate limiting to avoid API throttling",
            hint="Insert Wait nodes between API calls or use SplitInBatches with delay",
        )


def check_pagination(document: WorkflowDocument, graph: WorkflowGraph,
                     analyses: GraphAnalyses, limits: Thresholds) -> Iterator[Diagnostic]:
    data = [n for n in graph.nodes if node_types.type_contains(n.type, node_types.DATA_SOURCE_KEYS)]
    if len(data) <= limits.pagination_data_nodes:
        return
    paginated = any(
        n.type == node_types.SPLIT_IN_BATCHES or _name_contains(n, node_types.BATCH_NAME_KEYS)
        for n in graph.nodes
    )
    if not paginated:
        yield Diagnostic(
            kind=Kind.NO_PAGINATION,
            severity=Severity.MEDIUM,
            message=f"Large data operations without pagination ({len(data)} data nodes)",
            hint="Use SplitInBatches node to process data in chunks",
        )


def check_transformations(document: WorkflowDocument, graph: WorkflowGraph,
                          analyses: GraphAnalyses, limits: Thresholds) -> Iterator[Diagnostic]:
    n_set = sum(1 for n in graph.nodes if n.type == node_types.SET)
    if n_set > limits.max_set_nodes:
        yield Diagnostic(
            kind=Kind.MULTIPLE_TRANSFORMATIONS,
            severity=Severity.LOW,
            message=f"{n_set} Set nodes - data transformation could be more efficient",
            hint="Merge adjacent Set nodes when possible",
        )


def check_execution_time(document: WorkflowDocument, graph: WorkflowGraph,
                         analyses: GraphAnalyses, limits: Thresholds) -> Iterator[Diagnostic]:
    total = estimate_execution_time(graph, limits)
    if total > limits.time_budget_sec:
        yield Diagnostic(
            kind=Kind.SLOW_EXECUTION,
            severity=Severity.MEDIUM,
            message=f"Estimated execution time is {total:.1f}s",
            hint="Review if all operations are necessary or can be optimized",
        )


RULES = (
    check_has_nodes,
    check_sequential_requests,
    check_rate_limiting,
    check_pagination,
    check_transformations,
    check_execution_time,
)
