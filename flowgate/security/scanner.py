# flowgate/security/scanner.py
from typing import Iterator

from flowgate.config import Thresholds
from flowgate.graph.analyses import GraphAnalyses
from flowgate.graph.model import WorkflowGraph
from flowgate.model import node_types
from flowgate.model.diagnostic import Diagnostic, Kind, Severity
from flowgate.model.workflow import WorkflowDocument
from .patterns import ENV_MARKER, SECRET_PATTERNS, URL_CREDENTIALS, is_deferred


def scan_secrets(document: WorkflowDocument, graph: WorkflowGraph,
                 analyses: GraphAnalyses, limits: Thresholds) -> Iterator[Diagnostic]:
    """One CRITICAL per literal secret-shaped match; expressions and $env refs are skipped."""
    text = document.text()
    for sp in SECRET_PATTERNS:
        for m in sp.pattern.finditer(text):
            if is_deferred(m.group(0)):
                continue
            yield Diagnostic(
                kind=Kind.HARDCODED_SECRET,
                severity=Severity.CRITICAL,
                message=f"Possible hardcoded {sp.name} detected",
                hint="Use {{$env.VARIABLE_NAME}} instead",
            )


def check_env_usage(document: WorkflowDocument, graph: WorkflowGraph,
                    analyses: GraphAnalyses, limits: Thresholds) -> Iterator[Diagnostic]:
    nodes = document.raw.get("nodes")
    if not isinstance(nodes, list) or len(nodes) <= limits.env_advisory_node_count:
        return
    if ENV_MARKER in document.text():
        return
    yield Diagnostic(
        kind=Kind.NO_ENV_VARS,
        severity=Severity.MEDIUM,
        message="Workflow does not use environment variables - consider using them for configuration",
        hint="Move environment-specific values to {{$env.VARIABLE_NAME}}",
    )


def check_url_credentials(document: WorkflowDocument, graph: WorkflowGraph,
                          analyses: GraphAnalyses, limits: Thresholds) -> Iterator[Diagnostic]:
    for node in graph.nodes:
        if node.type != node_types.HTTP_REQUEST:
            continue
        if URL_CREDENTIALS.search(node.params_text()):
            yield Diagnostic(
                kind=Kind.CREDENTIALS_IN_URL,
                severity=Severity.CRITICAL,
                node=node.label,
                field="parameters",
                message="HTTP URL contains embedded credentials - use authentication settings instead",
                hint="Configure credentials in the node's authentication settings",
            )


RULES = (
    scan_secrets,
    check_env_usage,
    check_url_credentials,
)
