# flowgate/structural/checker.py
"""
Structural rules: required fields, node shape, duplicate ids and connection
references. A document that n8n cannot import is CRITICAL, a node it cannot
render is HIGH.
"""
from typing import Any, Dict, Iterator, List

from flowgate.config import Thresholds
from flowgate.graph.analyses import GraphAnalyses
from flowgate.graph.model import Edge, WorkflowGraph, is_ref
from flowgate.model.diagnostic import Diagnostic, Kind, Severity
from flowgate.model.workflow import WorkflowDocument
from .schema import (
    CONNECTIONS_VALIDATOR,
    POSITION_VALIDATOR,
    REQUIRED_NODE_FIELDS,
    REQUIRED_TOP_LEVEL_FIELDS,
)


def _is_missing(doc: Dict[str, Any], key: str) -> bool:
    """Absent, null or an empty scalar ("" / 0 / false) all count as missing."""
    if key not in doc:
        return True
    v = doc[key]
    return v is None or v is False or (isinstance(v, (str, int, float)) and not v)


def check_required_fields(document: WorkflowDocument, graph: WorkflowGraph,
                          analyses: GraphAnalyses, limits: Thresholds) -> Iterator[Diagnostic]:
    for f in REQUIRED_TOP_LEVEL_FIELDS:
        if _is_missing(document.raw, f):
            yield Diagnostic(
                kind=Kind.MISSING_FIELD,
                severity=Severity.CRITICAL,
                field=f,
                message=f"Missing required field: {f}",
            )


def check_nodes_type(document: WorkflowDocument, graph: WorkflowGraph,
                     analyses: GraphAnalyses, limits: Thresholds) -> Iterator[Diagnostic]:
    if _is_missing(document.raw, "nodes"):
        return
    if not isinstance(document.raw["nodes"], list):
        yield Diagnostic(
            kind=Kind.INVALID_TYPE,
            severity=Severity.CRITICAL,
            field="nodes",
            message="nodes must be an array",
        )


def check_node_fields(document: WorkflowDocument, graph: WorkflowGraph,
                      analyses: GraphAnalyses, limits: Thresholds) -> Iterator[Diagnostic]:
    entries = document.raw.get("nodes")
    if not isinstance(entries, list):
        return
    by_index = {n.index: n for n in document.nodes}

    for i, entry in enumerate(entries):
        node = by_index.get(i)
        if node is None:
            yield Diagnostic(
                kind=Kind.INVALID_TYPE,
                severity=Severity.HIGH,
                node=f"Node {i}",
                message=f"Node entry must be an object, got {type(entry).__name__}",
            )
            continue

        label = node.display_name or f"Node {i}"
        for f in REQUIRED_NODE_FIELDS:
            if f not in node.raw:
                yield Diagnostic(
                    kind=Kind.MISSING_NODE_FIELD,
                    severity=Severity.HIGH,
                    node=label,
                    field=f,
                    message=f"Node missing required field: {f}",
                )

        if node.position is not None and not POSITION_VALIDATOR.is_valid(node.position):
            yield Diagnostic(
                kind=Kind.INVALID_POSITION,
                severity=Severity.MEDIUM,
                node=label,
                field="position",
                message="Node position must be [x, y] array",
            )


def check_duplicate_ids(document: WorkflowDocument, graph: WorkflowGraph,
                        analyses: GraphAnalyses, limits: Thresholds) -> Iterator[Diagnostic]:
    duplicated = set(analyses.duplicate_ids)
    if not duplicated:
        return
    for node in graph.nodes:
        if is_ref(node.id) and node.id in duplicated:
            yield Diagnostic(
                kind=Kind.DUPLICATE_ID,
                severity=Severity.CRITICAL,
                node=node.label,
                field="id",
                message=f"Duplicate node ID: {node.id}",
            )


def check_connections(document: WorkflowDocument, graph: WorkflowGraph,
                      analyses: GraphAnalyses, limits: Thresholds) -> Iterator[Diagnostic]:
    if _is_missing(document.raw, "connections"):
        return
    conns = document.raw["connections"]
    if not isinstance(conns, dict):
        yield Diagnostic(
            kind=Kind.INVALID_TYPE,
            severity=Severity.CRITICAL,
            field="connections",
            message="connections must be an object",
        )
        return

    for err in CONNECTIONS_VALIDATOR.iter_errors(conns):
        where = "/".join(str(p) for p in err.absolute_path) or "<root>"
        yield Diagnostic(
            kind=Kind.INVALID_TYPE,
            severity=Severity.MEDIUM,
            field="connections",
            message=f"Malformed connections entry at {where}: {err.message}",
        )

    missing_targets: Dict[Any, List[Edge]] = {}
    for edge, end in analyses.dangling:
        if end == "target":
            missing_targets.setdefault(edge.source, []).append(edge)

    # every key is a source, whether or not it carries usable hops
    for source in conns:
        if source not in analyses.known_ids:
            yield Diagnostic(
                kind=Kind.INVALID_CONNECTION,
                severity=Severity.HIGH,
                field="source",
                node=str(source),
                message=f"Connection source node does not exist: {source}",
            )
        for edge in missing_targets.get(source, ()):
            yield Diagnostic(
                kind=Kind.INVALID_CONNECTION,
                severity=Severity.HIGH,
                field="target",
                node=str(edge.target),
                message=f"Connection target node does not exist: {edge.target}",
            )


RULES = (
    check_required_fields,
    check_nodes_type,
    check_node_fields,
    check_duplicate_ids,
    check_connections,
)
