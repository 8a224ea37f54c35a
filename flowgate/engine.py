# flowgate/engine.py
"""
Rule engine: runs the rule catalog against one workflow document.

A rule is a pure function (document, graph, analyses) -> iterable of
Diagnostic. Rules never see each other's output; the engine only concatenates
their results in catalog order. Any exception escaping a rule is captured by
`run_rule` and reported as a single ANALYSIS_ERROR diagnostic.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from flowgate.config import CHECKER_NAMES, CHECKER_TITLES, DEFAULT_THRESHOLDS, Thresholds
from flowgate.graph.analyses import GraphAnalyses, compute_analyses
from flowgate.graph.model import WorkflowGraph
from flowgate.model.diagnostic import Diagnostic, Kind, Severity
from flowgate.model.workflow import WorkflowDocument, load_document
from flowgate.performance import analyzer as performance
from flowgate.quality import checker as quality
from flowgate.security import scanner as security
from flowgate.structural import checker as structural
from flowgate.utils.logger import get_logger

log = get_logger("engine")

Rule = Callable[[WorkflowDocument, WorkflowGraph, GraphAnalyses], Iterable[Diagnostic]]

LOADER = "loader"


def rule_name(rule: Rule) -> str:
    fn = rule.func if isinstance(rule, partial) else rule
    return getattr(fn, "__name__", repr(fn))


def run_rule(rule: Rule, document: WorkflowDocument, graph: WorkflowGraph,
             analyses: GraphAnalyses) -> List[Diagnostic]:
    """Run one rule; a failure becomes one ANALYSIS_ERROR diagnostic."""
    try:
        return list(rule(document, graph, analyses))
    except Exception as e:
        name = rule_name(rule)
        log.warning("rule %s failed: %s", name, e, exc_info=True)
        return [Diagnostic(
            kind=Kind.ANALYSIS_ERROR,
            severity=Severity.HIGH,
            message=f"Rule '{name}' failed: {type(e).__name__}: {e}",
        )]


@dataclass(frozen=True)
class Checker:
    name: str
    title: str
    rules: Tuple[Rule, ...]

    def run(self, document: WorkflowDocument, graph: WorkflowGraph,
            analyses: GraphAnalyses) -> List[Diagnostic]:
        out: List[Diagnostic] = []
        for rule in self.rules:
            out.extend(run_rule(rule, document, graph, analyses))
        log.debug("checker %s: %d diagnostics", self.name, len(out))
        return out


def build_catalog(thresholds: Thresholds = DEFAULT_THRESHOLDS) -> Dict[str, Checker]:
    """Ordered catalog; thresholds are bound into every rule here."""
    def bind(rules) -> Tuple[Rule, ...]:
        return tuple(partial(r, limits=thresholds) for r in rules)

    return {
        "structural": Checker("structural", CHECKER_TITLES["structural"], bind(structural.RULES)),
        "security": Checker("security", CHECKER_TITLES["security"], bind(security.RULES)),
        "quality": Checker("quality", CHECKER_TITLES["quality"], bind(quality.RULES)),
        "performance": Checker("performance", CHECKER_TITLES["performance"], bind(performance.RULES)),
    }


@dataclass
class AnalysisResult:
    """Per-checker diagnostics (catalog order) plus informational metrics."""
    diagnostics: Dict[str, List[Diagnostic]] = field(default_factory=dict)
    metrics: Dict[str, Any] = field(default_factory=dict)
    fatal: bool = False

    def all(self) -> List[Diagnostic]:
        return [d for ds in self.diagnostics.values() for d in ds]

    def count(self, kind: Kind) -> int:
        return sum(1 for d in self.all() if d.kind == kind)


def _select(checkers: Optional[Sequence[str]]) -> List[str]:
    if not checkers:
        return list(CHECKER_NAMES)
    unknown = [c for c in checkers if c not in CHECKER_NAMES]
    if unknown:
        raise ValueError(f"Unknown checker(s): {', '.join(unknown)}")
    # catalog order, not caller order
    return [c for c in CHECKER_NAMES if c in checkers]


def analyze(
    document: WorkflowDocument,
    checkers: Optional[Sequence[str]] = None,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> AnalysisResult:
    """Build graph + analyses once and run the selected checkers."""
    selected = _select(checkers)
    catalog = build_catalog(thresholds)

    try:
        graph = WorkflowGraph(document)
        analyses = compute_analyses(graph)
    except Exception as e:
        log.warning("graph analysis failed: %s", e, exc_info=True)
        return AnalysisResult(diagnostics={LOADER: [Diagnostic(
            kind=Kind.ANALYSIS_ERROR,
            severity=Severity.HIGH,
            message=f"Failed to build workflow graph: {type(e).__name__}: {e}",
        )]}, fatal=True)

    result = AnalysisResult()
    for name in selected:
        result.diagnostics[name] = catalog[name].run(document, graph, analyses)

    if "performance" in selected:
        try:
            result.metrics = performance.performance_metrics(graph, analyses, limits=thresholds)
        except Exception as e:
            log.warning("performance metrics failed: %s", e, exc_info=True)
        else:
            log.info(
                "nodes=%d edges=%d complexity=%d estimated_time=%.1fs",
                result.metrics["nodes"], result.metrics["edges"],
                result.metrics["complexity_score"], result.metrics["estimated_time_sec"],
            )
    return result


def analyze_text(
    text: str,
    fmt: str = "json",
    checkers: Optional[Sequence[str]] = None,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> AnalysisResult:
    """Document Loader + analyze. A fatal load diagnostic short-circuits the run."""
    _select(checkers)
    document, fatal = load_document(text, fmt)
    if document is None:
        return AnalysisResult(diagnostics={LOADER: fatal}, fatal=True)
    return analyze(document, checkers=checkers, thresholds=thresholds)
