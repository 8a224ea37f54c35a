import pytest

from flowgate.engine import analyze
from flowgate.model.diagnostic import Kind, Severity
from flowgate.model.workflow import WorkflowDocument
from flowgate.performance.analyzer import complexity_score

HTTP = "n8n-nodes-base.httpRequest"
WAIT = "n8n-nodes-base.wait"
TRIGGER = "n8n-nodes-base.manualTrigger"


def _performance(workflow, **kwargs):
    return analyze(WorkflowDocument.from_dict(workflow), checkers=["performance"], **kwargs)


def _kinds(result):
    return [d.kind for d in result.all()]


def test_missing_nodes_is_critical():
    result = _performance({"name": "empty", "connections": {}})
    assert [(d.kind, d.severity) for d in result.all()] == [(Kind.NO_NODES, Severity.CRITICAL)]
    assert result.metrics["nodes"] == 0


def test_estimate_under_budget(make_node, make_workflow):
    nodes = [make_node("t", "Start", type=TRIGGER)]
    nodes += [make_node(f"h{i}", f"Call {i}", type=HTTP) for i in range(3)]
    nodes.append(make_node("w", "Pause", type=WAIT, parameters={"amount": 10}))
    result = _performance(make_workflow(nodes))
    assert result.metrics["estimated_time_sec"] == pytest.approx(16.1)
    assert Kind.SLOW_EXECUTION not in _kinds(result)


def test_estimate_over_budget_reported_once(make_node, make_workflow):
    nodes = [make_node(f"h{i}", f"Call {i}", type=HTTP) for i in range(5)]
    nodes.append(make_node("w", "Pause", type=WAIT, parameters={"amount": 25}))
    result = _performance(make_workflow(nodes))
    slow = [d for d in result.all() if d.kind == Kind.SLOW_EXECUTION]
    assert len(slow) == 1
    assert slow[0].message == "Estimated execution time is 35.0s"


@pytest.mark.parametrize("amount,expected", [
    (None, 1.0),
    (0, 1.0),
    ("5", 5.0),
    ("soon", 1.0),
    (True, 1.0),
    (2.5, 2.5),
])
def test_wait_amount_parsing(make_node, make_workflow, amount, expected):
    params = {} if amount is None else {"amount": amount}
    result = _performance(make_workflow([make_node("w", "Pause", type=WAIT, parameters=params)]))
    assert result.metrics["estimated_time_sec"] == pytest.approx(expected)


def test_sequential_requests_counted_on_direct_edges(make_node, make_workflow):
    nodes = [make_node(f"h{i}", f"Call {i}", type=HTTP) for i in range(3)]
    result = _performance(make_workflow(nodes, links=[("h0", "h1"), ("h1", "h2")]))
    (d,) = [d for d in result.all() if d.kind == Kind.PARALLEL_REQUESTS]
    assert d.message.startswith("Found 2 sequential HTTP requests")


def test_unconnected_requests_are_not_sequential(make_node, make_workflow):
    nodes = [make_node(f"h{i}", f"Call {i}", type=HTTP) for i in range(3)]
    result = _performance(make_workflow(nodes, links=[("h0", "h2")]))
    assert Kind.PARALLEL_REQUESTS not in _kinds(result)


def test_rate_limiting_satisfied_by_name(make_node, make_workflow):
    nodes = [make_node(f"h{i}", f"Call {i}", type=HTTP) for i in range(6)]
    assert Kind.NO_RATE_LIMITING in _kinds(_performance(make_workflow(nodes)))

    nodes[3]["name"] = "Throttle partner API"
    assert Kind.NO_RATE_LIMITING not in _kinds(_performance(make_workflow(nodes)))


def test_pagination(make_node, make_workflow):
    sheets = "n8n-nodes-base.googleSheets"
    nodes = [make_node(f"g{i}", f"Sheet {i}", type=sheets) for i in range(3)]
    (d,) = [d for d in _performance(make_workflow(nodes)).all() if d.kind == Kind.NO_PAGINATION]
    assert d.severity == Severity.MEDIUM

    nodes.append(make_node("b", "Loop", type="n8n-nodes-base.splitInBatches"))
    assert Kind.NO_PAGINATION not in _kinds(_performance(make_workflow(nodes)))


def test_many_set_nodes(make_node, make_workflow):
    nodes = [make_node(f"s{i}", f"Set {i}") for i in range(6)]
    (d,) = [d for d in _performance(make_workflow(nodes)).all() if d.kind == Kind.MULTIPLE_TRANSFORMATIONS]
    assert d.severity == Severity.LOW
    assert Kind.MULTIPLE_TRANSFORMATIONS not in _kinds(_performance(make_workflow(nodes[:5])))


@pytest.mark.parametrize("n_nodes,n_edges,expected", [
    (0, 0, 0),
    (3, 2, 3),
    (5, 4, 6),
    (10, 12, 14),
])
def test_complexity_score(n_nodes, n_edges, expected):
    assert complexity_score(n_nodes, n_edges) == expected


def test_metrics_payload(make_node, make_workflow):
    nodes = [make_node("t", "Start", type=TRIGGER), make_node("a", "A"), make_node("b", "B")]
    result = _performance(make_workflow(nodes, links=[("t", "a")]))
    assert result.metrics == {
        "nodes": 3,
        "edges": 1,
        "complexity_score": 3,
        "estimated_time_sec": 0.3,
        "reachable_nodes": 2,
    }
