from flowgate.engine import AnalysisResult
from flowgate.model.diagnostic import Diagnostic, Kind, Severity
from flowgate.report import (
    exit_code,
    render_console,
    render_markdown,
    severity_counts,
    sort_by_severity,
    to_payload,
)


def _d(kind, severity, message="msg", **kw):
    return Diagnostic(kind=kind, severity=severity, message=message, **kw)


def test_exit_code_ignores_performance():
    result = AnalysisResult(diagnostics={
        "quality": [_d(Kind.UNUSED_NODE, Severity.MEDIUM)],
        "performance": [_d(Kind.NO_RATE_LIMITING, Severity.HIGH)],
    })
    assert exit_code(result) == 0

    result.diagnostics["security"] = [_d(Kind.HARDCODED_SECRET, Severity.CRITICAL)]
    assert exit_code(result) == 1


def test_exit_code_for_loader_failure():
    result = AnalysisResult(diagnostics={"loader": [_d(Kind.JSON_PARSE_ERROR, Severity.CRITICAL)]}, fatal=True)
    assert exit_code(result) == 1


def test_sort_is_stable_most_severe_first():
    diags = [
        _d(Kind.MAGIC_NUMBER, Severity.LOW, "first low"),
        _d(Kind.DUPLICATE_ID, Severity.CRITICAL, "crit"),
        _d(Kind.MAGIC_NUMBER, Severity.LOW, "second low"),
        _d(Kind.INVALID_POSITION, Severity.MEDIUM, "medium"),
    ]
    assert [d.message for d in sort_by_severity(diags)] == ["crit", "medium", "first low", "second low"]


def test_severity_counts_cover_every_level():
    result = AnalysisResult(diagnostics={"quality": [_d(Kind.MAGIC_NUMBER, Severity.LOW)] * 2})
    assert severity_counts(result) == {"CRITICAL": 0, "HIGH": 0, "MEDIUM": 0, "LOW": 2}


def test_markdown_sections_and_metrics():
    result = AnalysisResult(
        diagnostics={
            "structural": [],
            "security": [_d(Kind.CREDENTIALS_IN_URL, Severity.CRITICAL, "creds", node="Call api", hint="use auth")],
        },
        metrics={"nodes": 2, "edges": 1, "complexity_score": 2, "estimated_time_sec": 2.1, "reachable_nodes": 2},
    )
    md = render_markdown(result, "wf.json")
    assert "## Workflow analysis: `wf.json`" in md
    assert "### JSON Structure Validation\n\nNo issues found" in md
    assert "- **CRITICAL** `CREDENTIALS_IN_URL`: creds" in md
    assert "  Node: Call api" in md
    assert "  Hint: use auth" in md
    assert "- Estimated Execution Time: 2.1 seconds" in md


def test_console_plain_and_colored():
    result = AnalysisResult(diagnostics={
        "structural": [],
        "quality": [_d(Kind.UNUSED_NODE, Severity.MEDIUM, "orphan")],
    })
    plain = render_console(result)
    assert "[ok] JSON Structure Validation: no issues" in plain
    assert "[1] Code Quality Analysis:" in plain
    assert "\033[" not in plain
    assert "\033[93m" in render_console(result, color=True)


def test_payload_shape():
    result = AnalysisResult(diagnostics={"quality": [_d(Kind.UNUSED_NODE, Severity.MEDIUM, "orphan", node="Z")]})
    payload = to_payload(result, "wf.json")
    assert payload["input"] == "wf.json"
    assert payload["exit_code"] == 0
    assert payload["counts"]["MEDIUM"] == 1
    assert payload["diagnostics"]["quality"] == [
        {"kind": "UNUSED_NODE", "severity": "MEDIUM", "message": "orphan", "node": "Z"},
    ]


def test_any_structural_finding_fails():
    result = AnalysisResult(diagnostics={
        "structural": [_d(Kind.INVALID_POSITION, Severity.MEDIUM)],
        "quality": [],
    })
    assert exit_code(result) == 1

    result.diagnostics["structural"] = []
    result.diagnostics["quality"] = [_d(Kind.UNUSED_NODE, Severity.MEDIUM)]
    assert exit_code(result) == 0
