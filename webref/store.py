"""
Document store for one generated dataset file.

Loading is two-phase: a Loader reads and parses the JSON file, and returns a
read-only Store holding the document plus its lookup indices. Indices are
rebuilt on every load.
"""

from __future__ import annotations
import json
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from .io import read_json
from .logging import log
from .schema import DatasetSchema


class DataFileNotFoundError(FileNotFoundError):
    """The generated dataset file does not exist."""


class DataParseError(ValueError):
    """The dataset file exists but is not a JSON object."""


def as_map(value: Any) -> Dict[str, Any]:
    """Treat anything that is not a mapping as empty."""
    return value if isinstance(value, dict) else {}


def count_collections(schema: DatasetSchema, document: Mapping[str, Any]) -> Dict[str, int]:
    """Live counts of every collection a metadata total can be checked against."""
    entries = as_map(document.get(schema.sections.entries))
    keywords = as_map(document.get(schema.sections.keywords)) if schema.sections.keywords else {}

    children = 0
    properties = 0
    for record in entries.values():
        record = as_map(record)
        for field in schema.child_maps():
            children += len(as_map(record.get(field)))
        if schema.entry.properties:
            properties += len(as_map(record.get(schema.entry.properties)))

    keyword_children = 0
    if schema.keyword:
        for record in keywords.values():
            keyword_children += len(as_map(as_map(record).get(schema.keyword.children)))

    return {
        "categories": len(as_map(document.get(schema.sections.categories))),
        "entries": len(entries),
        "keywords": len(keywords),
        "children": children,
        "properties": properties,
        "keyword_children": keyword_children,
    }


def _index(schema: DatasetSchema, section: Any) -> Dict[str, Dict[str, Any]]:
    """Normalized name -> record; the first key wins when two normalize alike."""
    out: Dict[str, Dict[str, Any]] = {}
    for name, record in as_map(section).items():
        if not isinstance(record, dict):
            continue
        key = schema.normalize(name)
        if key in out:
            log().warning(f"{schema.name}: '{name}' collides with an earlier entry named '{key}'; keeping the first")
            continue
        out[key] = record
    return out


@dataclass(frozen=True)
class Store:
    schema: DatasetSchema
    document: Mapping[str, Any]
    entries: Mapping[str, Dict[str, Any]]
    keywords: Mapping[str, Dict[str, Any]]
    source: Optional[Path] = None

    @staticmethod
    def from_document(schema: DatasetSchema, document: Dict[str, Any],
                      source: Optional[Path] = None) -> "Store":
        entries = _index(schema, document.get(schema.sections.entries))
        keywords: Dict[str, Dict[str, Any]] = {}
        if schema.sections.keywords:
            keywords = _index(schema, document.get(schema.sections.keywords))
        return Store(
            schema=schema,
            document=MappingProxyType(document),
            entries=MappingProxyType(entries),
            keywords=MappingProxyType(keywords),
            source=source,
        )

    @property
    def categories(self) -> Dict[str, Any]:
        return as_map(self.document.get(self.schema.sections.categories))

    @property
    def metadata(self) -> Dict[str, Any]:
        return as_map(self.document.get(self.schema.sections.metadata))

    def entry(self, name: str) -> Optional[Dict[str, Any]]:
        return self.entries.get(self.schema.normalize(name))

    def keyword(self, name: str) -> Optional[Dict[str, Any]]:
        return self.keywords.get(self.schema.normalize(name))

    def children_of(self, record: Mapping[str, Any]) -> Dict[str, Tuple[Dict[str, Any], bool]]:
        """Index of an entry's children: normalized name -> (child, is_static)."""
        out: Dict[str, Tuple[Dict[str, Any], bool]] = {}
        static_field = self.schema.entry.static_children
        for field in self.schema.child_maps():
            for name, child in as_map(record.get(field)).items():
                key = self.schema.normalize(name)
                if key not in out and isinstance(child, dict):
                    out[key] = (child, field == static_field)
        return out

    def counts(self) -> Dict[str, int]:
        return count_collections(self.schema, self.document)


class Loader:
    """Reads a dataset JSON file into a Store."""

    def __init__(self, schema: DatasetSchema):
        self.schema = schema

    def load(self, path: Path) -> Store:
        path = Path(path)
        if not path.exists():
            raise DataFileNotFoundError(
                f"{self.schema.title} data not found: {path}. Run 'webref build {self.schema.name}' first."
            )
        try:
            document = read_json(path)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DataParseError(f"{path}: invalid JSON: {e}") from e
        if not isinstance(document, dict):
            raise DataParseError(f"{path}: expected a JSON object, got {type(document).__name__}")

        store = Store.from_document(self.schema, document, source=path)
        log().debug(f"Loaded {self.schema.name} data from {path} ({len(store.entries)} entries)")
        return store
