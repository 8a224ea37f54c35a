# flowgate/model/diagnostic.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Dict, Optional


class Severity(IntEnum):
    """Totally ordered: CRITICAL > HIGH > MEDIUM > LOW."""
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4

    def __str__(self) -> str:
        return self.name


class Kind(str, Enum):
    # loader
    JSON_PARSE_ERROR = "JSON_PARSE_ERROR"
    INVALID_DOCUMENT = "INVALID_DOCUMENT"
    # structural
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_TYPE = "INVALID_TYPE"
    MISSING_NODE_FIELD = "MISSING_NODE_FIELD"
    INVALID_POSITION = "INVALID_POSITION"
    DUPLICATE_ID = "DUPLICATE_ID"
    INVALID_CONNECTION = "INVALID_CONNECTION"
    # security
    HARDCODED_SECRET = "HARDCODED_SECRET"
    NO_ENV_VARS = "NO_ENV_VARS"
    CREDENTIALS_IN_URL = "CREDENTIALS_IN_URL"
    # quality
    NO_NODES = "NO_NODES"
    INCONSISTENT_NAMING = "INCONSISTENT_NAMING"
    MAGIC_NUMBER = "MAGIC_NUMBER"
    COMPLEX_EXPRESSIONS = "COMPLEX_EXPRESSIONS"
    INSUFFICIENT_ERROR_HANDLING = "INSUFFICIENT_ERROR_HANDLING"
    DISORGANIZED_LAYOUT = "DISORGANIZED_LAYOUT"
    UNUSED_NODE = "UNUSED_NODE"
    POSSIBLE_DUPLICATION = "POSSIBLE_DUPLICATION"
    # performance
    PARALLEL_REQUESTS = "PARALLEL_REQUESTS"
    NO_RATE_LIMITING = "NO_RATE_LIMITING"
    NO_PAGINATION = "NO_PAGINATION"
    MULTIPLE_TRANSFORMATIONS = "MULTIPLE_TRANSFORMATIONS"
    SLOW_EXECUTION = "SLOW_EXECUTION"
    # engine
    ANALYSIS_ERROR = "ANALYSIS_ERROR"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Diagnostic:
    """
    A single finding. `node` is the node label (name, else id) when the finding
    is about one node; `field` names the offending document field.
    """
    kind: Kind
    severity: Severity
    message: str
    node: Optional[str] = None
    field: Optional[str] = None
    hint: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.severity, Severity):
            raise TypeError(f"severity must be a Severity, got {self.severity!r}")

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "kind": self.kind.value,
            "severity": self.severity.name,
            "message": self.message,
        }
        if self.node is not None:
            out["node"] = self.node
        if self.field is not None:
            out["field"] = self.field
        if self.hint is not None:
            out["hint"] = self.hint
        return out

    def __str__(self) -> str:
        where = f" [node={self.node}]" if self.node else ""
        return f"{self.severity.name} {self.kind.value}{where}: {self.message}"
