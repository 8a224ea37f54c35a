# flowgate/graph/model.py
from __future__ import annotations

from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Tuple

import networkx as nx

from flowgate.model.workflow import Node, WorkflowDocument


class Edge(NamedTuple):
    source: str
    port: str
    branch: int
    target: Any


def is_ref(value: Any) -> bool:
    """Ids usable as graph keys: strings and numbers."""
    return isinstance(value, (str, int, float))


class WorkflowGraph:
    """
    Read-only graph view of a workflow document.

    n8n connections look like:
      connections[<sourceId>]["main"] = [
         [ {"node": "B", "type": "main", "index": 0}, {"node": "C", ...} ],   # output 0 fans out to B and C
         [ {"node": "D", "type": "main", "index": 0} ]                         # output 1
      ]
    """

    def __init__(self, document: WorkflowDocument):
        self.document = document
        self.nodes: Tuple[Node, ...] = document.nodes
        self.nodes_by_id: Dict[Any, List[Node]] = {}
        for n in self.nodes:
            if is_ref(n.id):
                self.nodes_by_id.setdefault(n.id, []).append(n)

    def node(self, node_id: Any) -> Optional[Node]:
        """Node for an id; later nodes win when ids are duplicated."""
        found = self.nodes_by_id.get(node_id)
        return found[-1] if found else None

    def edges(self) -> Iterator[Edge]:
        """Walk connections in document order. Each call starts a fresh walk."""
        for src, outputs in self.document.connections.items():
            if not isinstance(outputs, dict):
                continue
            for port, branches in outputs.items():
                if not isinstance(branches, list):
                    continue
                for branch, targets in enumerate(branches):
                    # Rare shape: a single hop object instead of a list of hops
                    if isinstance(targets, dict):
                        targets = [targets]
                    if not isinstance(targets, list):
                        continue
                    for hop in targets:
                        if not isinstance(hop, dict):
                            continue
                        target = hop.get("node")
                        if target and is_ref(target):
                            yield Edge(src, port, branch, target)

    def edge_count(self) -> int:
        return sum(1 for _ in self.edges())

    def to_digraph(self) -> nx.DiGraph:
        """Directed graph over node ids; dangling endpoints become bare graph nodes."""
        G = nx.DiGraph()
        for nid in self.nodes_by_id:
            G.add_node(nid)
        for e in self.edges():
            G.add_edge(e.source, e.target)
        return G
