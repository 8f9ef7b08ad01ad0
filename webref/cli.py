#!/usr/bin/env python3
from __future__ import annotations
import argparse, sys, time
from pathlib import Path
from typing import Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .config import Settings
from .contracts.engine import verify
from .crossref import CrossReferenceComposer
from .io import read_text
from .logging import setup_logger
from .query import NotInitializedError, QueryFacade
from .schema import SchemaError, UnknownDatasetError, available_datasets, resolve_dataset
from .stages.runner import run as run_build
from .store import DataFileNotFoundError, DataParseError
from .syntax import check_css, check_javascript, check_selector

console = Console(soft_wrap=True)

FATAL = (DataFileNotFoundError, DataParseError, NotInitializedError, SchemaError, UnknownDatasetError)

def print_header(message: str):
    console.print(Text(f"🔄 {message}...", style="blue bold"))

def print_success(message: str, duration_ms: float = None):
    """Print a success message with optional timing"""
    if duration_ms is not None:
        text = Text(f"  ✓ {message} in {duration_ms:.0f}ms", style="green")
    else:
        text = Text(f"  ✓ {message}", style="green")
    console.print(text)

def print_error(message: str):
    console.print(Text(f"  ❌ {message}", style="red bold"))

def print_warning(message: str):
    console.print(Text(f"  ⚠️ {message}", style="yellow"))

def print_findings(title: str, result: Dict) -> None:
    status = "✓ VALID" if result["valid"] else "❌ INVALID"
    console.print(Text(f"{title}: {status}", style="green bold" if result["valid"] else "red bold"))
    for err in result["errors"]:
        print_error(err)
    for warn in result["warnings"]:
        print_warning(warn)

# ============================================================================
# Helpers
# ============================================================================

def _data_path(settings: Settings, dataset: str, override: Optional[str]) -> Path:
    return Path(override) if override else settings.data_file(dataset)

def _facade(settings: Settings, dataset: str, override: Optional[str] = None) -> QueryFacade:
    dataset = resolve_dataset(dataset)
    return QueryFacade.load(dataset, _data_path(settings, dataset, override))

def _optional_facade(settings: Settings, dataset: str, override: Optional[str]) -> Optional[QueryFacade]:
    """Facade for a dataset whose file may legitimately be absent."""
    path = _data_path(settings, dataset, override)
    if not path.exists():
        print_warning(f"{dataset} data not found at {path}; related checks skipped")
        return None
    return QueryFacade.load(dataset, path)

# ============================================================================
# Commands
# ============================================================================

def cmd_build(args, settings: Settings) -> int:
    dataset = resolve_dataset(args.dataset)
    out = Path(args.out) if args.out else settings.data_file(dataset)
    print_header(f"Building {dataset} data from {args.input}")
    start = time.time()
    rc = run_build(dataset, Path(args.input), out, verbose=args.verbose)
    if rc == 0:
        print_success("Build finished", (time.time() - start) * 1000)
    return rc

def cmd_validate(args, settings: Settings) -> int:
    rc = 0
    datasets: List[str] = available_datasets() if args.dataset == "all" else [resolve_dataset(args.dataset)]
    for dataset in datasets:
        print_header(f"Validating {dataset} data")
        path = _data_path(settings, dataset, args.data if len(datasets) == 1 else None)
        report_dir = None if args.no_report else Path(args.report_dir or settings.report_dir)
        rc = max(rc, verify(dataset, path, report_dir=report_dir, verbose=args.verbose))
    return rc

def cmd_exists(args, settings: Settings) -> int:
    facade = _facade(settings, args.dataset, args.data)
    if args.child:
        result = facade.exists_child(args.name, args.child)
        label = f"{args.name}.{args.child}"
    elif args.keyword:
        result = facade.exists_keyword(args.name)
        label = args.name
    else:
        result = facade.exists_entry(args.name)
        label = args.name

    if result.exists:
        extra = " (global)" if getattr(result, "is_global", False) else ""
        extra += " (static)" if getattr(result, "is_static", False) else ""
        print_success(f"{label} exists{extra}")
        return 0
    if getattr(result, "error", None):
        print_error(result.error)
    else:
        print_error(f"{label} not found")
    if result.suggestions:
        console.print(f"  Did you mean: {', '.join(result.suggestions)}?", style="yellow")
    return 1

def cmd_info(args, settings: Settings) -> int:
    facade = _facade(settings, args.dataset, args.data)
    info = facade.get_child_info(args.name, args.child) if args.child else facade.get_entry_info(args.name)
    if info is None:
        print_error(f"{args.name}{'.' + args.child if args.child else ''} not found")
        return 1
    if args.json:
        console.print_json(data=info)
        return 0

    console.print(Text(info.get("name", args.name), style="bold"))
    for key in ("description", "category", "subcategory", "syntax", "type", "entry"):
        if info.get(key):
            console.print(f"  {key}: {info[key]}", markup=False)
    for key in ("children", "static_children", "properties"):
        items = info.get(key) or []
        if items:
            console.print(f"  {key} ({len(items)}):", style="cyan")
            for item in items:
                console.print(f"    {item.get('name')}: {item.get('description') or 'No description'}", markup=False)
    return 0

def cmd_categories(args, settings: Settings) -> int:
    facade = _facade(settings, args.dataset, args.data)
    if args.category:
        for record in facade.entries_in_category(args.category):
            console.print(f"  {record.get('name')}", markup=False)
        return 0
    table = Table(title=f"{facade.schema.title} categories")
    for col in ("name", "entries", "keywords", "subcategories"):
        table.add_column(col)
    for cat in facade.list_categories():
        table.add_row(str(cat["name"]), str(cat["entry_count"]), str(cat["keyword_count"]),
                      str(cat["subcategory_count"]))
    console.print(table)
    return 0

def cmd_search(args, settings: Settings) -> int:
    if args.dataset == "all":
        composer = CrossReferenceComposer(**{
            name: _optional_facade(settings, name, None) for name in available_datasets()
        })
        results = composer.search_all(args.query)
        total = results.pop("total")
    else:
        dataset = resolve_dataset(args.dataset)
        results = {dataset: _facade(settings, dataset, args.data).search(args.query)}
        total = sum(len(v) for v in results[dataset].values())

    console.print(Text(f"🔍 Search results for \"{args.query}\"", style="bold"))
    for dataset, groups in results.items():
        for group, items in groups.items():
            for item in items:
                owner = f" ({item['entry']})" if item.get("entry") else ""
                console.print(f"  [{dataset}] {group[:-1] if group.endswith('s') else group}: "
                              f"{item['name']}{owner} - {item.get('description') or 'No description'}",
                              markup=False)
    console.print(f"📊 Total results: {total}")
    return 0

def cmd_stats(args, settings: Settings) -> int:
    facade = _facade(settings, args.dataset, args.data)
    table = Table(title=f"{facade.schema.title} statistics")
    table.add_column("field")
    table.add_column("stored")
    table.add_column("live")
    counts = facade.count_summary()
    stats = facade.get_statistics()
    for fld, counter in facade.schema.totals:
        table.add_row(fld, str(stats.get(fld, "-")), str(counts[counter]))
    console.print(table)
    for key in ("version", "lastUpdated"):
        if key in stats:
            console.print(f"  {key}: {stats[key]}")
    return 0

def cmd_syntax(args, settings: Settings) -> int:
    text = sys.stdin.read() if args.file == "-" else read_text(Path(args.file))
    if args.language == "css":
        css = _optional_facade(settings, "css", args.data)
        result = check_css(text, css)
    else:
        result = check_javascript(text)
    print_findings(f"{args.language.upper()} syntax", result)
    if result.get("used_features"):
        console.print(f"  Features: {', '.join(result['used_features'])}", style="dim")
    return 0 if result["valid"] else 1

def cmd_relations(args, settings: Settings) -> int:
    facade = _facade(settings, "html", args.data)
    if not facade.exists_entry(args.element).exists:
        print_error(f"Element '{args.element}' not found")
        return 1
    parents = facade.possible_parents(args.element)
    children = facade.possible_children(args.element)
    console.print(Text(args.element, style="bold"))
    console.print(f"  parents ({len(parents)}): {', '.join(parents) or 'none'}", markup=False)
    console.print(f"  children ({len(children)}): {', '.join(children) or 'none'}", markup=False)
    return 0

def cmd_support(args, settings: Settings) -> int:
    facade = _facade(settings, "html", args.data)
    support = facade.get_browser_support(args.element, args.browser)
    if support is None:
        print_error(f"No browser support data for {args.element}{' in ' + args.browser if args.browser else ''}")
        return 1
    if isinstance(support, dict):
        for browser, state in support.items():
            console.print(f"  {browser}: {state}", markup=False)
    else:
        console.print(f"  {args.browser.lower()}: {support}", markup=False)
    return 0

def cmd_selector(args, settings: Settings) -> int:
    rc = 0
    for selector in args.selectors:
        result = check_selector(selector)
        if result["valid"]:
            print_success(f"{result['selector']}: {result['type']}")
            continue
        rc = 1
        print_error(f"Unknown selector: {result['selector']}")
        console.print(f"  Try: {', '.join(result['suggestions'])}", style="yellow", markup=False)
    return rc

def cmd_check_document(args, settings: Settings) -> int:
    composer = CrossReferenceComposer(
        html=_optional_facade(settings, "html", args.html_data),
        javascript=_optional_facade(settings, "javascript", args.js_data),
        css=_optional_facade(settings, "css", args.css_data),
    )
    results = composer.check_document(read_text(Path(args.file)))
    titles = {"html": "🌐 HTML", "javascript": "⚡ JavaScript", "css": "🎨 CSS", "cross": "🔗 Cross-references"}
    for area, result in results.items():
        print_findings(titles[area], result)
    return 0 if all(r["valid"] for r in results.values()) else 1

# ============================================================================
# Entry point
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--verbose", action="store_true")

    ap = argparse.ArgumentParser(prog="webref", description="Web reference dataset builder, validator and lookup")
    sub = ap.add_subparsers(dest="cmd", required=True)

    b = sub.add_parser("build", parents=[common], help="Generate a dataset JSON file from its source")
    b.add_argument("dataset")
    b.add_argument("input", help="Tree text (javascript, html) or csstree JSON (css)")
    b.add_argument("--out", help="Output path (default: data root)")

    v = sub.add_parser("validate", parents=[common], help="Run the consistency checks over a dataset file")
    v.add_argument("dataset", help="Dataset name or 'all'")
    v.add_argument("--data", help="Dataset file (default: data root)")
    v.add_argument("--report-dir", help="Where verify_<dataset>.json goes")
    v.add_argument("--no-report", action="store_true", help="Do not write a report file")

    e = sub.add_parser("exists", parents=[common], help="Check whether a name exists")
    e.add_argument("dataset")
    e.add_argument("name")
    e.add_argument("child", nargs="?")
    e.add_argument("--keyword", action="store_true", help="Look the name up among keywords/functions")
    e.add_argument("--data")

    i = sub.add_parser("info", parents=[common], help="Show an entry or child record")
    i.add_argument("dataset")
    i.add_argument("name")
    i.add_argument("child", nargs="?")
    i.add_argument("--json", action="store_true")
    i.add_argument("--data")

    c = sub.add_parser("categories", parents=[common], help="List categories, or entries of one category")
    c.add_argument("dataset")
    c.add_argument("category", nargs="?")
    c.add_argument("--data")

    s = sub.add_parser("search", parents=[common], help="Substring search over names and descriptions")
    s.add_argument("dataset", help="Dataset name or 'all'")
    s.add_argument("query")
    s.add_argument("--data")

    st = sub.add_parser("stats", parents=[common], help="Stored metadata totals next to live counts")
    st.add_argument("dataset")
    st.add_argument("--data")

    sx = sub.add_parser("syntax", parents=[common], help="Sketch-check a JavaScript or CSS file")
    sx.add_argument("language", choices=["js", "css"])
    sx.add_argument("file", help="Source file, or - for stdin")
    sx.add_argument("--data", help="CSS dataset file for unknown-property warnings")

    r = sub.add_parser("relations", parents=[common], help="Elements an HTML element may sit in or contain")
    r.add_argument("element")
    r.add_argument("--data", help="HTML dataset file")

    bs = sub.add_parser("support", parents=[common], help="Browser support recorded for an HTML element")
    bs.add_argument("element")
    bs.add_argument("browser", nargs="?")
    bs.add_argument("--data", help="HTML dataset file")

    se = sub.add_parser("selector", parents=[common], help="Classify CSS selectors")
    se.add_argument("selectors", nargs="+")

    d = sub.add_parser("check-document", parents=[common], help="Check an HTML page against all datasets")
    d.add_argument("file")
    d.add_argument("--html-data")
    d.add_argument("--js-data")
    d.add_argument("--css-data")

    return ap

COMMANDS = {
    "build": cmd_build,
    "validate": cmd_validate,
    "exists": cmd_exists,
    "info": cmd_info,
    "categories": cmd_categories,
    "search": cmd_search,
    "stats": cmd_stats,
    "syntax": cmd_syntax,
    "relations": cmd_relations,
    "support": cmd_support,
    "selector": cmd_selector,
    "check-document": cmd_check_document,
}

def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)
    setup_logger(verbose=args.verbose)
    settings = Settings.from_env()

    try:
        rc = COMMANDS[args.cmd](args, settings)
    except FATAL as e:
        # KeyError wraps its message in quotes
        print_error(e.args[0] if isinstance(e, KeyError) and e.args else str(e))
        sys.exit(1)
    except FileNotFoundError as e:
        print_error(f"File not found: {e.filename}")
        sys.exit(1)
    sys.exit(rc)

if __name__ == "__main__":
    main()
