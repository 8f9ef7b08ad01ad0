from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from rich.console import Console

from ..io import ensure_dir, read_json, read_text, write_json
from ..schema import resolve_dataset
from ..store import DataFileNotFoundError, DataParseError
from . import css_tree, html_tree, javascript_tree

console = Console(soft_wrap=True)

Converter = Callable[[Path], Dict[str, Any]]


def _convert_css(path: Path) -> Dict[str, Any]:
    try:
        raw = read_json(path)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DataParseError(f"{path}: invalid csstree JSON: {e}") from e
    if not isinstance(raw, dict):
        raise DataParseError(f"{path}: expected a JSON object")
    return css_tree.convert(raw)


# dataset -> (converter, summarizer, summary file prefix)
STAGES: Dict[str, Tuple[Converter, Callable[[Dict[str, Any]], Dict[str, Any]], str]] = {
    "javascript": (lambda p: javascript_tree.parse_text(read_text(p)), javascript_tree.summarize, "js"),
    "html": (lambda p: html_tree.parse_text(read_text(p)), html_tree.summarize, "html"),
    "css": (_convert_css, css_tree.summarize, "css"),
}


def summary_path_for(dataset: str, out_path: Path) -> Path:
    return out_path.parent / f"{STAGES[dataset][2]}-summary.json"


def build(dataset: str, in_path: Path, out_path: Path,
          summary_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Parse a source file and write the dataset document plus its summary

    Args:
        dataset: Dataset name or alias
        in_path: Tree text (javascript, html) or csstree JSON (css)
        out_path: Where the dataset JSON goes
        summary_path: Where the summary JSON goes (default: next to out_path)

    Returns:
        The generated document
    """
    dataset = resolve_dataset(dataset)
    in_path = Path(in_path)
    if not in_path.exists():
        raise DataFileNotFoundError(f"Input file not found: {in_path}")

    convert, summarize, _ = STAGES[dataset]
    doc = convert(in_path)

    out_path = Path(out_path)
    ensure_dir(out_path.parent)
    write_json(out_path, doc)
    write_json(summary_path or summary_path_for(dataset, out_path), summarize(doc))
    return doc


def run(dataset: str, in_path: Path, out_path: Path, verbose: bool = False) -> int:
    doc = build(dataset, in_path, out_path)
    if verbose:
        metadata = doc.get("metadata", {})
        for key, value in metadata.items():
            if key.startswith("total"):
                console.print(f"  {key[5:]}: {value:,}", style="dim")
    console.print(f"  ✓ Built {resolve_dataset(dataset)} -> {out_path}", style="green")
    return 0
