# flowgate/model/workflow.py
"""
Workflow document model and loader.

A document is kept as parsed (``raw``) so rules can test field presence, and
exposes read-only typed views of its nodes. Nothing here raises for a document
with absent or malformed fields: absence is a finding for the rules to report.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from flowgate.model.diagnostic import Diagnostic, Kind, Severity
from flowgate.model.node_types import type_of
from flowgate.utils.io import parse_structured


def canonical_json(value: Any) -> str:
    """Stable compact serialization used by every text-scanning rule."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)


@dataclass(frozen=True)
class Node:
    index: int
    raw: Mapping[str, Any] = field(repr=False, compare=False)
    id: Any = None
    name: Any = None
    type: str = ""
    type_version: Any = None
    position: Any = None
    parameters: Any = None
    continue_on_fail: Optional[bool] = None
    on_error: Optional[str] = None

    @classmethod
    def from_dict(cls, index: int, data: Mapping[str, Any]) -> "Node":
        return cls(
            index=index,
            raw=data,
            id=data.get("id"),
            name=data.get("name"),
            type=type_of(data.get("type")),
            type_version=data.get("typeVersion"),
            position=data.get("position"),
            parameters=data.get("parameters"),
            continue_on_fail=data.get("continueOnFail"),
            on_error=data.get("onError"),
        )

    @property
    def label(self) -> str:
        if self.name not in (None, ""):
            return str(self.name)
        if self.id not in (None, ""):
            return str(self.id)
        return f"Node {self.index}"

    @property
    def display_name(self) -> str:
        return self.name if isinstance(self.name, str) else ""

    @property
    def has_error_handling(self) -> bool:
        return self.continue_on_fail is True or bool(self.on_error)

    def params_text(self) -> str:
        return canonical_json(self.parameters)

    def xy(self) -> Optional[Tuple[float, float]]:
        """Position as (x, y) when it is a numeric pair, else None."""
        pos = self.position
        if not isinstance(pos, list) or len(pos) != 2:
            return None
        if not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in pos):
            return None
        return float(pos[0]), float(pos[1])


@dataclass(frozen=True)
class WorkflowDocument:
    raw: Mapping[str, Any]
    nodes: Tuple[Node, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WorkflowDocument":
        entries = data.get("nodes")
        nodes: List[Node] = []
        if isinstance(entries, list):
            for i, entry in enumerate(entries):
                if isinstance(entry, dict):
                    nodes.append(Node.from_dict(i, entry))
        return cls(raw=data, nodes=tuple(nodes))

    @property
    def name(self) -> Any:
        return self.raw.get("name")

    @property
    def connections(self) -> Dict[str, Any]:
        conns = self.raw.get("connections")
        return conns if isinstance(conns, dict) else {}

    def text(self) -> str:
        return canonical_json(self.raw)


def load_document(text: str, fmt: str = "json") -> Tuple[Optional[WorkflowDocument], List[Diagnostic]]:
    """
    Parse raw text into a WorkflowDocument.

    Returns (document, []) on success, or (None, [fatal diagnostic]) when the
    text is not structured data or its root is not a mapping.
    """
    try:
        data = parse_structured(text, fmt)
    except (ValueError, RecursionError, yaml.YAMLError) as e:  # RecursionError: nesting past the parser stack
        return None, [Diagnostic(
            kind=Kind.JSON_PARSE_ERROR,
            severity=Severity.CRITICAL,
            message=f"Failed to parse {fmt.upper()}: {e}",
        )]

    if not isinstance(data, dict):
        return None, [Diagnostic(
            kind=Kind.INVALID_DOCUMENT,
            severity=Severity.CRITICAL,
            message=f"Workflow document must be an object, got {type(data).__name__}",
        )]

    return WorkflowDocument.from_dict(data), []
