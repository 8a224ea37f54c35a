# utils/io.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

import yaml

# -------- Path helpers --------
PathLike = Union[str, Path]

YAML_SUFFIXES = (".yaml", ".yml")


def to_path(p: PathLike) -> Path:
    """Convert string-like to pathlib.Path."""
    return p if isinstance(p, Path) else Path(p)


def ensure_parent(path: PathLike) -> Path:
    """Ensure parent directory exists for a file path."""
    p = to_path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p


def detect_format(path: PathLike) -> str:
    """Return "yaml" for .yaml/.yml files, "json" for everything else."""
    return "yaml" if to_path(path).suffix.lower() in YAML_SUFFIXES else "json"


# -------- Text / JSON / YAML --------
def read_text(path: PathLike, encoding: str = "utf-8", errors: str = "strict") -> str:
    """Read a whole text file. errors="replace" turns undecodable bytes into U+FFFD."""
    with to_path(path).open("r", encoding=encoding, errors=errors) as f:
        return f.read()


def write_text(path: PathLike, text: str, encoding: str = "utf-8") -> Path:
    """Write text atomically (via temp file then replace)."""
    p = ensure_parent(path)
    tmp = p.with_suffix(p.suffix + ".tmp")
    tmp.write_text(text, encoding=encoding)
    tmp.replace(p)
    return p


def write_json(path: PathLike, data: Any, indent: int = 2) -> Path:
    """Write JSON atomically, pretty-formatted."""
    p = ensure_parent(path)
    tmp = p.with_suffix(p.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=indent)
    tmp.replace(p)
    return p


def parse_structured(text: str, fmt: str = "json") -> Any:
    """
    Parse raw document text.
      - fmt="json" -> json.loads (raises json.JSONDecodeError)
      - fmt="yaml" -> yaml.safe_load (raises yaml.YAMLError)
    """
    if fmt == "yaml":
        return yaml.safe_load(text)
    if fmt == "json":
        return json.loads(text)
    raise ValueError(f"Unsupported document format: {fmt}")
