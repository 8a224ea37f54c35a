import json
from pathlib import Path

import pytest

from flowgate.engine import analyze
from flowgate.model.workflow import WorkflowDocument

BENCH_DIR = Path(__file__).resolve().parent.parent / "bench"

SET = "n8n-nodes-base.set"


@pytest.fixture
def make_node():
    """Factory for a complete node dict; keyword overrides replace or add fields."""
    def _make(node_id, name=None, type=SET, x=0, y=0, parameters=None, **extra):
        node = {
            "id": node_id,
            "name": name or f"Node {node_id}",
            "type": type,
            "typeVersion": 1,
            "position": [x, y],
            "parameters": parameters if parameters is not None else {},
        }
        node.update(extra)
        return node
    return _make


@pytest.fixture
def make_workflow():
    """Factory for a workflow dict; `links` is a list of (source_id, target_id)."""
    def _make(nodes, links=(), name="Test workflow"):
        connections = {}
        for src, dst in links:
            connections.setdefault(src, {"main": [[]]})["main"][0].append(
                {"node": dst, "type": "main", "index": 0}
            )
        return {"name": name, "nodes": nodes, "connections": connections}
    return _make


@pytest.fixture
def run():
    """Run checkers on a workflow dict and return the flat diagnostic list."""
    def _run(workflow, checkers=None, **kwargs):
        return analyze(WorkflowDocument.from_dict(workflow), checkers=checkers, **kwargs).all()
    return _run


@pytest.fixture
def clean_workflow():
    with (BENCH_DIR / "structural" / "S01_clean" / "workflow.json").open("r", encoding="utf-8") as f:
        return json.load(f)
