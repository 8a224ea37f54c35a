# flowgate/quality/checker.py
"""
Quality heuristics. These are style signals, not correctness checks: the
thresholds are coarse on purpose and most findings are LOW/MEDIUM.
"""
import re
from typing import Dict, Iterator, List

from flowgate.config import Thresholds
from flowgate.graph.analyses import GraphAnalyses
from flowgate.graph.model import WorkflowGraph, is_ref
from flowgate.model import node_types
from flowgate.model.diagnostic import Diagnostic, Kind, Severity
from flowgate.model.workflow import Node, WorkflowDocument

# Title Case ("Fetch users") or lower-initial ("fetchUsers")
_NAME_RE = re.compile(r"^(?:[A-Z][a-z]|[a-z])")
_EXPRESSION_RE = re.compile(r"=\{\{")


def check_has_nodes(document: WorkflowDocument, graph: WorkflowGraph,
                    analyses: GraphAnalyses, limits: Thresholds) -> Iterator[Diagnostic]:
    if not isinstance(document.raw.get("nodes"), list):
        yield Diagnostic(
            kind=Kind.NO_NODES,
            severity=Severity.CRITICAL,
            field="nodes",
            message="Workflow has no nodes",
        )


def check_naming(document: WorkflowDocument, graph: WorkflowGraph,
                 analyses: GraphAnalyses, limits: Thresholds) -> Iterator[Diagnostic]:
    names = [n.name for n in graph.nodes if isinstance(n.name, str)]
    if all(_NAME_RE.match(name) for name in names):
        return
    yield Diagnostic(
        kind=Kind.INCONSISTENT_NAMING,
        severity=Severity.LOW,
        message="Node naming is inconsistent (mix of Title Case and lowercase)",
        hint="Start every node name with a capital followed by lowercase, or with lowercase",
    )


def check_magic_numbers(document: WorkflowDocument, graph: WorkflowGraph,
                        analyses: GraphAnalyses, limits: Thresholds) -> Iterator[Diagnostic]:
    magic = re.compile(r":\s*\d{%d,}" % limits.magic_number_digits)
    for node in graph.nodes:
        if magic.search(node.params_text()):
            yield Diagnostic(
                kind=Kind.MAGIC_NUMBER,
                severity=Severity.LOW,
                node=node.label,
                field="parameters",
                message="Node has large numeric values - consider using variables",
                hint="Use {{$env.VARIABLE}} for configuration values",
            )


def check_expressions(document: WorkflowDocument, graph: WorkflowGraph,
                      analyses: GraphAnalyses, limits: Thresholds) -> Iterator[Diagnostic]:
    for node in graph.nodes:
        text = node.params_text()
        if "={{" not in text or len(text) <= limits.expression_min_length:
            continue
        count = len(_EXPRESSION_RE.findall(text))
        if count > limits.expression_max_count:
            yield Diagnostic(
                kind=Kind.COMPLEX_EXPRESSIONS,
                severity=Severity.MEDIUM,
                node=node.label,
                field="parameters",
                message=f"Node has {count} expressions - consider simplifying",
                hint="Break complex logic into multiple nodes",
            )


def check_error_handling(document: WorkflowDocument, graph: WorkflowGraph,
                         analyses: GraphAnalyses, limits: Thresholds) -> Iterator[Diagnostic]:
    covered = sum(1 for n in graph.nodes if n.has_error_handling)
    api = sum(1 for n in graph.nodes if node_types.type_contains(n.type, node_types.API_KEYS))
    if api > 0 and covered < api * limits.error_handling_ratio:
        yield Diagnostic(
            kind=Kind.INSUFFICIENT_ERROR_HANDLING,
            severity=Severity.MEDIUM,
            message=f"Only {covered}/{api} API nodes have error handling",
            hint="Add error handling to API/database nodes",
        )


def check_layout(document: WorkflowDocument, graph: WorkflowGraph,
                 analyses: GraphAnalyses, limits: Thresholds) -> Iterator[Diagnostic]:
    """Each node should sit right of, or below, its predecessor in document order."""
    tol = limits.layout_tolerance
    prev = None
    for node in graph.nodes:
        cur = node.xy()
        if cur is None:
            prev = None
            continue
        if prev is not None and cur[0] < prev[0] - tol and cur[1] < prev[1] - tol:
            yield Diagnostic(
                kind=Kind.DISORGANIZED_LAYOUT,
                severity=Severity.LOW,
                message="Node layout could be more organized",
                hint="Arrange nodes in clear left-to-right or top-to-bottom flow",
            )
            return
        prev = cur


def check_unused_nodes(document: WorkflowDocument, graph: WorkflowGraph,
                       analyses: GraphAnalyses, limits: Thresholds) -> Iterator[Diagnostic]:
    if not document.connections:
        return
    for node in graph.nodes:
        if node_types.is_entry_point(node.type):
            continue
        if is_ref(node.id) and node.id in analyses.connected_ids:
            continue
        yield Diagnostic(
            kind=Kind.UNUSED_NODE,
            severity=Severity.MEDIUM,
            node=node.label,
            message="Node is not connected to workflow - is this intentional?",
        )


def check_duplication(document: WorkflowDocument, graph: WorkflowGraph,
                      analyses: GraphAnalyses, limits: Thresholds) -> Iterator[Diagnostic]:
    groups: Dict[str, List[Node]] = {}
    for node in graph.nodes:
        if node.type:
            groups.setdefault(node.type, []).append(node)

    for ntype, members in groups.items():
        if len(members) <= limits.duplication_group_size:
            continue
        if node_types.type_contains(ntype, node_types.BRANCHING_KEYS):
            continue
        yield Diagnostic(
            kind=Kind.POSSIBLE_DUPLICATION,
            severity=Severity.LOW,
            message=f"Workflow has {len(members)} nodes of type {ntype}",
            hint="Consider consolidating similar operations",
        )


RULES = (
    check_has_nodes,
    check_naming,
    check_magic_numbers,
    check_expressions,
    check_error_handling,
    check_layout,
    check_unused_nodes,
    check_duplication,
)
