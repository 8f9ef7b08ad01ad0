from __future__ import annotations
import json
from pathlib import Path
from typing import Any

def ensure_dir(path: Path) -> None:
    """Ensure directory exists, creating parents if needed."""
    path.mkdir(parents=True, exist_ok=True)

def read_json(p: Path) -> Any:
    """Read JSON file."""
    return json.loads(Path(p).read_text(encoding="utf-8"))

def write_json(p: Path, obj: Any) -> None:
    """Write object to JSON file."""
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(obj, ensure_ascii=False, indent=2), encoding="utf-8")

def read_text(p: Path) -> str:
    """Read a UTF-8 source file."""
    return Path(p).read_text(encoding="utf-8")
