# flowgate/report.py
"""Rendering of analysis results and exit-code selection."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from flowgate.config import CHECKER_TITLES
from flowgate.engine import AnalysisResult
from flowgate.model.diagnostic import Diagnostic, Severity

# Findings at or above this level fail the run (performance excluded)
FAILING_SEVERITY = Severity.HIGH
ADVISORY_CHECKERS = ("performance",)
# Any finding of these checkers fails the run, whatever its severity
STRICT_CHECKERS = ("structural",)

_ANSI = {
    Severity.CRITICAL: "\033[91m",   # red
    Severity.HIGH: "\033[91m",
    Severity.MEDIUM: "\033[93m",     # yellow
    Severity.LOW: "\033[96m",        # cyan
}
_RESET = "\033[0m"


def sort_by_severity(diagnostics: List[Diagnostic]) -> List[Diagnostic]:
    """Most severe first; equal severities keep their emission order."""
    return sorted(diagnostics, key=lambda d: -d.severity)


def severity_counts(result: AnalysisResult) -> Dict[str, int]:
    counts = {s.name: 0 for s in sorted(Severity, reverse=True)}
    for d in result.all():
        counts[d.severity.name] += 1
    return counts


def exit_code(result: AnalysisResult) -> int:
    for checker, diags in result.diagnostics.items():
        if checker in ADVISORY_CHECKERS:
            continue
        if checker in STRICT_CHECKERS and diags:
            return 1
        if any(d.severity >= FAILING_SEVERITY for d in diags):
            return 1
    return 0


def _detail_lines(d: Diagnostic) -> List[str]:
    lines = []
    if d.node:
        lines.append(f"  Node: {d.node}")
    if d.field:
        lines.append(f"  Field: {d.field}")
    if d.hint:
        lines.append(f"  Hint: {d.hint}")
    return lines


def render_markdown(result: AnalysisResult, source: Optional[str] = None) -> str:
    lines: List[str] = []
    if source:
        lines += [f"## Workflow analysis: `{source}`", ""]
    for checker, diags in result.diagnostics.items():
        lines += [f"### {CHECKER_TITLES.get(checker, checker)}", ""]
        if not diags:
            lines += ["No issues found", ""]
            continue
        lines += [f"Found {len(diags)} issue(s):", ""]
        for d in sort_by_severity(diags):
            lines.append(f"- **{d.severity.name}** `{d.kind.value}`: {d.message}")
            lines += _detail_lines(d)
        lines.append("")
    if result.metrics:
        lines += ["### Performance Metrics", ""]
        m = result.metrics
        lines += [
            f"- Nodes: {m['nodes']}",
            f"- Connections: {m['edges']}",
            f"- Complexity Score: {m['complexity_score']}/100",
            f"- Estimated Execution Time: {m['estimated_time_sec']:.1f} seconds",
            "",
        ]
    return "\n".join(lines)


def render_console(result: AnalysisResult, color: bool = False) -> str:
    def paint(sev: Severity, text: str) -> str:
        return f"{_ANSI[sev]}{text}{_RESET}" if color else text

    lines: List[str] = []
    for checker, diags in result.diagnostics.items():
        title = CHECKER_TITLES.get(checker, checker)
        if not diags:
            lines.append(f"[ok] {title}: no issues")
            continue
        lines.append(f"[{len(diags)}] {title}:")
        for d in sort_by_severity(diags):
            lines.append("  " + paint(d.severity, f"{d.severity.name:<8}") + f" {d.kind.value}: {d.message}")
            lines += ["  " + line for line in _detail_lines(d)]
    if result.metrics:
        m = result.metrics
        lines.append(
            f"Metrics: nodes={m['nodes']} connections={m['edges']} "
            f"complexity={m['complexity_score']}/100 estimated_time={m['estimated_time_sec']:.1f}s"
        )
    return "\n".join(lines)


def to_payload(result: AnalysisResult, source: Optional[str] = None) -> Dict[str, Any]:
    return {
        "input": source,
        "fatal": result.fatal,
        "exit_code": exit_code(result),
        "counts": severity_counts(result),
        "metrics": result.metrics,
        "diagnostics": {
            checker: [d.to_dict() for d in diags]
            for checker, diags in result.diagnostics.items()
        },
    }
