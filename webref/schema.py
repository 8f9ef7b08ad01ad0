# -*- coding: utf-8 -*-
"""
Dataset schema descriptions.

Each dataset (javascript, html, css) is described by a YAML file under
webref/schemas/. The description names the document sections, the fields of
entries/children/keywords, the naming conventions, the metadata totals and the
suggestion settings. One validator and one query facade read these values
instead of carrying a copy per language.
"""

from __future__ import annotations
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from jsonschema import Draft202012Validator

from .suggest import METRICS, SuggestConfig

SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"

ALIASES = {
    "js": "javascript",
    "ecmascript": "javascript",
    "htm": "html",
}

# Counters a metadata total may be reconciled against
COUNTERS = ("categories", "entries", "keywords", "children", "properties", "keyword_children")

_NAMING = {
    "type": "object",
    "required": ["pattern", "message"],
    "additionalProperties": False,
    "properties": {
        "pattern": {"type": "string"},
        "exceptions": {"type": "array", "items": {"type": "string"}},
        "message": {"type": "string"},
    },
}

_FIELDS = {"type": "array", "items": {"type": "string"}}

_SUGGEST = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "metric": {"type": "string", "enum": list(METRICS)},
        "threshold": {"type": "number", "minimum": 0, "maximum": 1},
        "max_distance": {"type": "integer", "minimum": 0},
        "limit": {"type": "integer", "minimum": 1},
    },
}

_DATASET_SCHEMA: Dict[str, Any] = {
    "title": "Dataset schema description",
    "type": "object",
    "required": ["name", "sections", "entry", "category", "metadata", "suggest"],
    "additionalProperties": False,
    "properties": {
        "name": {"type": "string", "pattern": "^[a-z]+$"},
        "title": {"type": "string"},
        "case_sensitive": {"type": "boolean"},
        "sections": {
            "type": "object",
            "required": ["categories", "entries", "metadata"],
            "additionalProperties": False,
            "properties": {
                "categories": {"type": "string"},
                "entries": {"type": "string"},
                "keywords": {"type": "string"},
                "metadata": {"type": "string"},
            },
        },
        "labels": {"type": "object", "additionalProperties": {"type": "string"}},
        "entry": {
            "type": "object",
            "required": ["required", "children"],
            "additionalProperties": False,
            "properties": {
                "required": _FIELDS,
                "children": {"type": "string"},
                "static_children": {"type": "string"},
                "properties": {"type": "string"},
                "static_flag": {"type": "string"},
                "min_description": {"type": "integer", "minimum": 0},
                "naming": _NAMING,
            },
        },
        "child": {
            "type": "object",
            "additionalProperties": False,
            "properties": {"required": _FIELDS},
        },
        "keyword": {
            "type": "object",
            "required": ["required", "children"],
            "additionalProperties": False,
            "properties": {
                "required": _FIELDS,
                "children": {"type": "string"},
                "min_description": {"type": "integer", "minimum": 0},
                "naming": _NAMING,
            },
        },
        "keyword_child": {
            "type": "object",
            "additionalProperties": False,
            "properties": {"required": _FIELDS},
        },
        "category": {
            "type": "object",
            "required": ["required", "subcategories", "entries"],
            "additionalProperties": False,
            "properties": {
                "required": _FIELDS,
                "subcategories": {"type": "string"},
                "entries": {"type": "string"},
                "keywords": {"type": "string"},
            },
        },
        "metadata": {
            "type": "object",
            "required": ["totals"],
            "additionalProperties": False,
            "properties": {
                "required": _FIELDS,
                "totals": {
                    "type": "object",
                    "minProperties": 1,
                    "additionalProperties": {"type": "string", "enum": list(COUNTERS)},
                },
            },
        },
        "suggest": {
            "type": "object",
            "required": ["entry", "child"],
            "additionalProperties": False,
            "properties": {"entry": _SUGGEST, "child": _SUGGEST, "keyword": _SUGGEST},
        },
        "global_children": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "names": {"type": "array", "items": {"type": "string"}},
                "prefixes": {"type": "array", "items": {"type": "string"}},
            },
        },
    },
}

_VALIDATOR = Draft202012Validator(_DATASET_SCHEMA)


class SchemaError(ValueError):
    """A dataset schema file does not describe a usable dataset."""


class UnknownDatasetError(KeyError):
    """No schema file is registered under the requested dataset name."""


@dataclass(frozen=True)
class NamingRule:
    pattern: str
    message: str
    exceptions: Tuple[str, ...] = ()

    def accepts(self, name: str) -> bool:
        return name in self.exceptions or re.search(self.pattern, name) is not None


@dataclass(frozen=True)
class Sections:
    categories: str
    entries: str
    metadata: str
    keywords: Optional[str] = None

    def declared(self) -> List[str]:
        names = [self.categories, self.entries, self.keywords, self.metadata]
        return [n for n in names if n]


@dataclass(frozen=True)
class EntryRules:
    required: Tuple[str, ...]
    children: str
    static_children: Optional[str] = None
    properties: Optional[str] = None
    static_flag: Optional[str] = None
    min_description: int = 10
    naming: Optional[NamingRule] = None


@dataclass(frozen=True)
class KeywordRules:
    required: Tuple[str, ...]
    children: str
    min_description: int = 10
    naming: Optional[NamingRule] = None


@dataclass(frozen=True)
class CategoryRules:
    required: Tuple[str, ...]
    subcategories: str
    entries: str
    keywords: Optional[str] = None


@dataclass(frozen=True)
class DatasetSchema:
    name: str
    title: str
    case_sensitive: bool
    sections: Sections
    entry: EntryRules
    category: CategoryRules
    metadata_required: Tuple[str, ...]
    totals: Tuple[Tuple[str, str], ...]
    suggest_entry: SuggestConfig
    suggest_child: SuggestConfig
    child_required: Tuple[str, ...] = ("name", "description")
    keyword: Optional[KeywordRules] = None
    keyword_child_required: Tuple[str, ...] = ("name",)
    suggest_keyword: Optional[SuggestConfig] = None
    labels: Dict[str, str] = field(default_factory=dict)
    global_child_names: Tuple[str, ...] = ()
    global_child_prefixes: Tuple[str, ...] = ()

    def normalize(self, name: str) -> str:
        """Index key for a name (HTML tag names are case-insensitive)."""
        return name if self.case_sensitive else name.lower()

    def label(self, key: str) -> str:
        return self.labels.get(key, key)

    def is_global_child(self, name: str) -> bool:
        name = self.normalize(name)
        return name in self.global_child_names or any(name.startswith(p) for p in self.global_child_prefixes)

    def child_maps(self) -> List[str]:
        """Field names of the maps holding an entry's methods/attributes."""
        return [f for f in (self.entry.children, self.entry.static_children) if f]


def _naming(raw: Optional[Dict[str, Any]]) -> Optional[NamingRule]:
    if not raw:
        return None
    return NamingRule(pattern=raw["pattern"], message=raw["message"],
                      exceptions=tuple(raw.get("exceptions", [])))


def build_schema(raw: Dict[str, Any]) -> DatasetSchema:
    """Validate a raw schema mapping and turn it into a DatasetSchema."""
    errors = sorted(_VALIDATOR.iter_errors(raw), key=lambda e: list(e.path))
    if errors:
        details = "; ".join(f"{'/'.join(map(str, e.path)) or '<root>'}: {e.message}" for e in errors)
        raise SchemaError(f"invalid dataset schema: {details}")

    sections = raw["sections"]
    entry = raw["entry"]
    keyword = raw.get("keyword")
    category = raw["category"]
    suggest = raw["suggest"]
    globals_ = raw.get("global_children", {})

    if keyword and not sections.get("keywords"):
        raise SchemaError("keyword rules given but no keywords section declared")

    return DatasetSchema(
        name=raw["name"],
        title=raw.get("title", raw["name"]),
        case_sensitive=raw.get("case_sensitive", True),
        sections=Sections(
            categories=sections["categories"],
            entries=sections["entries"],
            metadata=sections["metadata"],
            keywords=sections.get("keywords"),
        ),
        entry=EntryRules(
            required=tuple(entry["required"]),
            children=entry["children"],
            static_children=entry.get("static_children"),
            properties=entry.get("properties"),
            static_flag=entry.get("static_flag"),
            min_description=entry.get("min_description", 10),
            naming=_naming(entry.get("naming")),
        ),
        category=CategoryRules(
            required=tuple(category["required"]),
            subcategories=category["subcategories"],
            entries=category["entries"],
            keywords=category.get("keywords"),
        ),
        metadata_required=tuple(raw["metadata"].get("required", [])),
        totals=tuple(raw["metadata"]["totals"].items()),
        suggest_entry=SuggestConfig.from_dict(suggest["entry"]),
        suggest_child=SuggestConfig.from_dict(suggest["child"]),
        child_required=tuple(raw.get("child", {}).get("required", ["name", "description"])),
        keyword=KeywordRules(
            required=tuple(keyword["required"]),
            children=keyword["children"],
            min_description=keyword.get("min_description", 10),
            naming=_naming(keyword.get("naming")),
        ) if keyword else None,
        keyword_child_required=tuple(raw.get("keyword_child", {}).get("required", ["name"])),
        suggest_keyword=SuggestConfig.from_dict(suggest["keyword"]) if "keyword" in suggest else None,
        labels=dict(raw.get("labels", {})),
        global_child_names=tuple(globals_.get("names", [])),
        global_child_prefixes=tuple(globals_.get("prefixes", [])),
    )


def available_datasets() -> List[str]:
    return sorted(p.stem for p in SCHEMA_DIR.glob("*.yml"))


def resolve_dataset(name: str) -> str:
    key = ALIASES.get(name.lower(), name.lower())
    if key not in available_datasets():
        raise UnknownDatasetError(f"unknown dataset '{name}' (known: {', '.join(available_datasets())})")
    return key


def load_schema(name: str) -> DatasetSchema:
    """Load the schema description registered for a dataset name or alias."""
    key = resolve_dataset(name)
    path = SCHEMA_DIR / f"{key}.yml"
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise SchemaError(f"{path}: expected a mapping at top level")
    return build_schema(raw)
