#!/usr/bin/env python3
# flowgate/cli.py

import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer

from flowgate.config import CHECKER_NAMES
from flowgate.engine import analyze_text
from flowgate.report import (
    exit_code,
    render_console,
    render_markdown,
    severity_counts,
    to_payload,
)
from flowgate.utils.io import detect_format, read_text, write_json, write_text
from flowgate.utils.logger import init_logger

app = typer.Typer(help="flowgate - static checks for n8n workflow documents")

FORMATS = ("console", "markdown", "json")


def _setup_logging(verbose: bool, log_dir: Optional[Path]) -> None:
    if verbose or log_dir is not None:
        init_logger(level=logging.DEBUG if verbose else None, log_dir=log_dir)


def _validate_checkers(checkers: Optional[List[str]]) -> List[str]:
    checkers = [c.lower() for c in (checkers or [])]
    unknown = [c for c in checkers if c not in CHECKER_NAMES]
    if unknown:
        raise typer.BadParameter(
            f"Unknown checker(s): {', '.join(unknown)}. "
            f"Choose from: {', '.join(CHECKER_NAMES)}"
        )
    return checkers


@app.command()
def check(
    input: Path = typer.Option(..., "--input", "-i", exists=True, readable=True, dir_okay=False, help="Path to workflow JSON/YAML"),
    checker: Optional[List[str]] = typer.Option(None, "--checker", "-c", help="Checker to run (repeatable): structural | security | quality | performance. Default: all"),
    fmt: str = typer.Option("console", "--format", "-f", help="Output format: console | markdown | json"),
    report: Optional[Path] = typer.Option(None, "--report", help="Also write a JSON report to this path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine debug output to stderr"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", file_okay=False, help="Also write logs to <dir>/flowgate.log (rotating)"),
):
    """
    Analyze one workflow document and print its diagnostics.
    Exits 1 on any structural finding, or on a HIGH or CRITICAL finding from
    the loader, security or quality checkers.
    """
    _setup_logging(verbose, log_dir)
    checkers = _validate_checkers(checker)
    fmt = fmt.lower()
    if fmt not in FORMATS:
        raise typer.BadParameter(f"Invalid format '{fmt}'. Choose one of: {', '.join(FORMATS)}")

    result = analyze_text(read_text(input, errors="replace"), fmt=detect_format(input), checkers=checkers)

    if fmt == "json":
        typer.echo(json.dumps(to_payload(result, str(input)), ensure_ascii=False, indent=2))
    elif fmt == "markdown":
        typer.echo(render_markdown(result, str(input)))
    else:
        typer.echo(render_console(result, color=sys.stdout.isatty()))

    if report is not None:
        write_json(report, to_payload(result, str(input)))
        typer.echo(f"[ok] wrote report to {report}", err=True)

    raise typer.Exit(code=exit_code(result))


@app.command()
def batch(
    glob: str = typer.Option("workflows/**/*.json", "--glob", help="Glob for workflow files"),
    out: Path = typer.Option(Path("reports/summary.csv"), "--out", help="CSV path to write results"),
    checker: Optional[List[str]] = typer.Option(None, "--checker", "-c", help="Checker to run (repeatable). Default: all"),
    markdown_dir: Optional[Path] = typer.Option(None, "--markdown-dir", help="Also write one markdown report per workflow here"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine debug output to stderr"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", file_okay=False, help="Also write logs to <dir>/flowgate.log (rotating)"),
):
    """
    Analyze many workflows and export a CSV summary (one row per file).
    """
    import glob as _glob
    import pandas as pd

    _setup_logging(verbose, log_dir)
    checkers = _validate_checkers(checker)

    rows = []
    for fp_str in sorted(_glob.glob(glob, recursive=True)):
        fp = Path(fp_str)
        result = analyze_text(read_text(fp, errors="replace"), fmt=detect_format(fp), checkers=checkers)
        counts = severity_counts(result)
        rows.append({
            "file": str(fp),
            **counts,
            "total": sum(counts.values()),
            "fatal": result.fatal,
            "complexity": result.metrics.get("complexity_score"),
            "estimated_time_sec": result.metrics.get("estimated_time_sec"),
            "exit_code": exit_code(result),
        })
        if markdown_dir is not None:
            write_text(markdown_dir / f"{fp.parent.name}-{fp.stem}.md", render_markdown(result, str(fp)))

    if not rows:
        typer.echo(f"[skip] no files matched {glob}", err=True)
        raise typer.Exit(code=0)

    df = pd.DataFrame(rows)
    out.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(out, index=False)
    typer.echo(f"[ok] wrote {out} ({len(df)} workflows, {int((df['exit_code'] != 0).sum())} failing)")


if __name__ == "__main__":
    app()
