from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_DATA_DIR = "data"
DEFAULT_REPORT_DIR = "report"

# Default generated file per dataset, relative to the data root
DATA_FILES = {
    "javascript": "js-language.json",
    "html": "html-elements.json",
    "css": "css-language.json",
}

def find_project_root(start: Optional[Path] = None) -> Path:
    """Find project root by walking up directory tree looking for pyproject.toml."""
    if start is None:
        start = Path.cwd()

    cur = start.resolve()
    while True:
        if (cur / "pyproject.toml").exists():
            return cur
        if cur.parent == cur:
            return start  # fallback: no marker found
        cur = cur.parent

def load_env(project_root: Optional[Path] = None) -> None:
    """Load environment variables from .env file if it exists."""
    if project_root is None:
        project_root = find_project_root()

    dotenv_path = project_root / ".env"
    # Load only if the file exists; do not override existing env vars
    if dotenv_path.exists():
        load_dotenv(dotenv_path, override=False)

def resolve_path(path: str, project_root: Optional[Path] = None) -> Path:
    """Resolve a path relative to project root."""
    if Path(path).is_absolute():
        return Path(path)
    if project_root is None:
        project_root = find_project_root()
    return (project_root / path).resolve()

@dataclass
class Settings:
    data_root: Path
    report_dir: Path

    @staticmethod
    def from_env() -> "Settings":
        load_env()
        root = find_project_root()
        data_root = resolve_path(os.environ.get("WEBREF_DATA_ROOT", DEFAULT_DATA_DIR), root)
        report_env = os.environ.get("WEBREF_REPORT_DIR")
        report_dir = resolve_path(report_env, root) if report_env else data_root / DEFAULT_REPORT_DIR
        return Settings(data_root=data_root, report_dir=report_dir)

    def data_file(self, dataset: str) -> Path:
        """Default location of the generated JSON for a dataset."""
        return self.data_root / DATA_FILES[dataset]

