from __future__ import annotations
from pathlib import Path
from typing import Optional

from ..io import write_json
from ..logging import console, log
from ..schema import load_schema
from ..store import Loader
from .validators import ConsistencyValidator, ValidationReport

def run_validation(dataset: str, data_path: Path) -> ValidationReport:
    """Load a dataset file and run every consistency rule group over it.

    Raises DataFileNotFoundError / DataParseError when the file cannot be
    loaded; no partial findings are produced in that case.
    """
    schema = load_schema(dataset)
    store = Loader(schema).load(data_path)
    log().info(f"Validating {schema.title} data from {data_path}")
    return ConsistencyValidator(schema).validate_store(store)

def verify(dataset: str, data_path: Path, report_dir: Optional[Path] = None, verbose: bool = False) -> int:
    """Verify a dataset file and return 0 for success, 1 for failure"""
    report = run_validation(dataset, data_path)

    report_path = None
    if report_dir is not None:
        report_path = Path(report_dir) / f"verify_{report.dataset}.json"
        write_json(report_path, report.to_dict())

    print_report(report, verbose=verbose)
    if report_path is not None:
        console().print(f"  Report written to {report_path}", style="dim")
    return 0 if report.valid else 1

def print_report(report: ValidationReport, verbose: bool = False) -> None:
    out = console()
    if report.errors:
        out.print(f"❌ ERRORS ({len(report.errors)}):", style="red bold")
        for i, err in enumerate(report.errors, 1):
            out.print(f"  {i}. {err}", style="red", markup=False)
    if report.warnings:
        out.print(f"⚠️  WARNINGS ({len(report.warnings)}):", style="yellow")
        # Warnings can run into the hundreds on real data
        shown = report.warnings if verbose else report.warnings[:20]
        for i, warn in enumerate(shown, 1):
            out.print(f"  {i}. {warn}", style="yellow", markup=False)
        if len(shown) < len(report.warnings):
            out.print(f"  ... {len(report.warnings) - len(shown)} more (use --verbose)", style="yellow")

    for key, value in report.summary.items():
        out.print(f"  {key}: {value:,}")

    if report.valid:
        out.print(f"✓ Verify {report.dataset}: OK", style="green bold")
    else:
        out.print(f"✗ Verify {report.dataset}: {len(report.errors)} issue(s)", style="red bold")
