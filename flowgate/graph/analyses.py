# flowgate/graph/analyses.py
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Mapping, Tuple

import networkx as nx

from flowgate.graph.model import Edge, WorkflowGraph, is_ref
from flowgate.model.node_types import is_entry_point


@dataclass(frozen=True)
class GraphAnalyses:
    """Derived views shared read-only by every rule of a run."""
    known_ids: FrozenSet[Any] = frozenset()
    duplicate_ids: Tuple[Any, ...] = ()
    dangling: Tuple[Tuple[Edge, str], ...] = ()
    connected_ids: FrozenSet[Any] = frozenset()
    adjacency: Mapping[Any, FrozenSet[Any]] = field(default_factory=lambda: MappingProxyType({}))
    entry_ids: Tuple[Any, ...] = ()
    reachable_ids: FrozenSet[Any] = frozenset()

    def is_adjacent(self, source: Any, target: Any) -> bool:
        if not (is_ref(source) and is_ref(target)):
            return False
        return target in self.adjacency.get(source, frozenset())


def find_duplicate_ids(graph: WorkflowGraph) -> Tuple[Any, ...]:
    """Ids carried by two or more nodes, in order of first appearance."""
    return tuple(nid for nid, nodes in graph.nodes_by_id.items() if len(nodes) > 1)


def find_dangling(graph: WorkflowGraph, known: FrozenSet[Any]) -> Tuple[Tuple[Edge, str], ...]:
    """
    Edge endpoints that name no node. Each edge contributes at most one
    "source" entry and one "target" entry.
    """
    out: List[Tuple[Edge, str]] = []
    for e in graph.edges():
        if e.source not in known:
            out.append((e, "source"))
        if e.target not in known:
            out.append((e, "target"))
    return tuple(out)


def find_connected_ids(graph: WorkflowGraph) -> FrozenSet[Any]:
    """Every id seen as an edge source or target. Same-id nodes are all connected."""
    ids = set()
    for e in graph.edges():
        ids.add(e.source)
        ids.add(e.target)
    return frozenset(ids)


def build_adjacency(G: nx.DiGraph) -> Dict[Any, FrozenSet[Any]]:
    """source id -> ids directly reachable through any port/branch."""
    return {n: frozenset(G.successors(n)) for n in G.nodes if G.out_degree(n) > 0}


def find_reachable_ids(G: nx.DiGraph, entry_ids: Tuple[Any, ...]) -> FrozenSet[Any]:
    reachable = set()
    for t in entry_ids:
        if t not in G:
            continue
        reachable.add(t)
        reachable |= nx.descendants(G, t)
    return frozenset(reachable)


def compute_analyses(graph: WorkflowGraph) -> GraphAnalyses:
    known = frozenset(graph.nodes_by_id)
    G = graph.to_digraph()
    entry_ids = tuple(
        nid for nid, nodes in graph.nodes_by_id.items()
        if any(is_entry_point(n.type) for n in nodes)
    )
    return GraphAnalyses(
        known_ids=known,
        duplicate_ids=find_duplicate_ids(graph),
        dangling=find_dangling(graph, known),
        connected_ids=find_connected_ids(graph),
        adjacency=MappingProxyType(build_adjacency(G)),
        entry_ids=entry_ids,
        reachable_ids=find_reachable_ids(G, entry_ids),
    )
