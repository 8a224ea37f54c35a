import pytest

from flowgate.config import CHECKER_NAMES, Thresholds
from flowgate.engine import Checker, analyze, analyze_text, build_catalog, rule_name, run_rule
from flowgate.graph.analyses import compute_analyses
from flowgate.graph.model import WorkflowGraph
from flowgate.model.diagnostic import Diagnostic, Kind, Severity
from flowgate.model.workflow import WorkflowDocument


def _boom(document, graph, analyses):
    raise KeyError("nodes")


def _one_low(document, graph, analyses):
    yield Diagnostic(kind=Kind.MAGIC_NUMBER, severity=Severity.LOW, message="fine")


def test_failing_rule_becomes_single_analysis_error(clean_workflow):
    doc = WorkflowDocument.from_dict(clean_workflow)
    graph = WorkflowGraph(doc)
    analyses = compute_analyses(graph)

    out = Checker("custom", "Custom", (_boom, _one_low)).run(doc, graph, analyses)

    assert [d.kind for d in out] == [Kind.ANALYSIS_ERROR, Kind.MAGIC_NUMBER]
    assert out[0].severity == Severity.HIGH
    assert "_boom" in out[0].message and "KeyError" in out[0].message


def test_run_rule_passes_results_through(clean_workflow):
    doc = WorkflowDocument.from_dict(clean_workflow)
    graph = WorkflowGraph(doc)
    out = run_rule(_one_low, doc, graph, compute_analyses(graph))
    assert len(out) == 1 and out[0].message == "fine"


def test_catalog_order_and_bound_rule_names():
    catalog = build_catalog()
    assert tuple(catalog) == CHECKER_NAMES
    names = [rule_name(r) for r in catalog["structural"].rules]
    assert names == [
        "check_required_fields",
        "check_nodes_type",
        "check_node_fields",
        "check_duplicate_ids",
        "check_connections",
    ]


def test_results_follow_catalog_order_not_caller_order(clean_workflow):
    result = analyze(WorkflowDocument.from_dict(clean_workflow), checkers=["performance", "structural"])
    assert list(result.diagnostics) == ["structural", "performance"]
    assert result.metrics["nodes"] == 3


def test_metrics_only_with_performance(clean_workflow):
    result = analyze(WorkflowDocument.from_dict(clean_workflow), checkers=["structural"])
    assert result.metrics == {}


def test_analysis_is_repeatable(make_node, make_workflow):
    wf = make_workflow(
        [make_node("a", "lower start"), make_node("a", "Other"), make_node("b", type="n8n-nodes-base.httpRequest")],
        links=[("a", "ghost")],
    )
    doc = WorkflowDocument.from_dict(wf)
    first = analyze(doc)
    second = analyze(doc)
    assert first.diagnostics == second.diagnostics
    assert first.metrics == second.metrics


def test_unknown_checker_rejected(clean_workflow):
    with pytest.raises(ValueError):
        analyze(WorkflowDocument.from_dict(clean_workflow), checkers=["lint"])
    with pytest.raises(ValueError):
        analyze_text("{}", checkers=["lint"])


def test_thresholds_are_bound_into_rules(make_node, make_workflow):
    wf = make_workflow([make_node("a", type="n8n-nodes-base.wait", parameters={"amount": 20})])
    doc = WorkflowDocument.from_dict(wf)
    assert analyze(doc, checkers=["performance"]).count(Kind.SLOW_EXECUTION) == 0
    tight = Thresholds(time_budget_sec=10.0)
    assert analyze(doc, checkers=["performance"], thresholds=tight).count(Kind.SLOW_EXECUTION) == 1


def test_parse_error_is_fatal():
    result = analyze_text('{"name": "broken", "nodes": [')
    assert result.fatal
    assert list(result.diagnostics) == ["loader"]
    (d,) = result.all()
    assert d.kind == Kind.JSON_PARSE_ERROR
    assert d.severity == Severity.CRITICAL


@pytest.mark.parametrize("text", ["[]", '"workflow"', "42", "null"])
def test_non_object_root_is_fatal(text):
    result = analyze_text(text)
    assert result.fatal
    assert [d.kind for d in result.all()] == [Kind.INVALID_DOCUMENT]


def test_yaml_documents_load():
    text = "\n".join([
        "name: From yaml",
        "nodes:",
        "  - id: a",
        "    name: Start",
        "    type: n8n-nodes-base.manualTrigger",
        "    typeVersion: 1",
        "    position: [0, 0]",
        "    parameters: {}",
        "connections: {}",
    ])
    result = analyze_text(text, fmt="yaml", checkers=["structural"])
    assert not result.fatal
    assert result.all() == []


def test_severity_must_be_enum():
    with pytest.raises(TypeError):
        Diagnostic(kind=Kind.NO_NODES, severity=3, message="x")


@pytest.mark.parametrize("text,fmt", [
    ("[" * 200000 + "]" * 200000, "json"),
    ('{"a": ' * 200000 + "1" + "}" * 200000, "json"),
    ("[" * 50000 + "]" * 50000, "yaml"),
])
def test_deeply_nested_input_is_a_parse_error(text, fmt):
    result = analyze_text(text, fmt=fmt)
    assert result.fatal
    assert [(d.kind, d.severity) for d in result.all()] == [(Kind.JSON_PARSE_ERROR, Severity.CRITICAL)]
