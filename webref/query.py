#!/usr/bin/env python3
"""
Query facade over a loaded dataset.

Lookups, info, category listing, search and statistics for one dataset.
The facade wraps a Store; every operation raises NotInitializedError when no
store is attached, so callers can tell "not loaded" apart from "not found".
"""

from __future__ import annotations
import copy
import re
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from .schema import DatasetSchema, load_schema
from .store import Loader, Store, as_map
from .suggest import suggest


class NotInitializedError(RuntimeError):
    """A query was made before any dataset was loaded."""


@dataclass
class EntryLookup:
    """Result of an entry or keyword existence check"""
    exists: bool
    name: str
    record: Optional[Dict[str, Any]] = None
    suggestions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ChildLookup:
    """Result of a child (method/attribute/value) existence check"""
    exists: bool
    entry: str
    name: str
    parent_found: bool = True
    record: Optional[Dict[str, Any]] = None
    is_static: Optional[bool] = None
    is_global: bool = False
    suggestions: List[str] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class QueryFacade:
    """Read-only queries against one dataset store"""

    def __init__(self, store: Optional[Store] = None):
        self.store = store

    @classmethod
    def load(cls, dataset: str, path: Path) -> "QueryFacade":
        """
        Build a facade from a dataset name and its generated JSON file

        Args:
            dataset: Dataset name or alias (javascript/js, html, css)
            path: Path to the generated JSON document

        Returns:
            QueryFacade holding the loaded store
        """
        return cls(Loader(load_schema(dataset)).load(path))

    @property
    def loaded(self) -> bool:
        return self.store is not None

    @property
    def schema(self) -> DatasetSchema:
        return self._require().schema

    def _require(self) -> Store:
        if self.store is None:
            raise NotInitializedError("No dataset loaded. Load a dataset before querying it.")
        return self.store

    # ------------------------------------------------------------------
    # Existence checks
    # ------------------------------------------------------------------

    def exists_entry(self, name: str) -> EntryLookup:
        store = self._require()
        record = store.entry(name)
        if record is not None:
            return EntryLookup(exists=True, name=name, record=copy.deepcopy(record))
        return EntryLookup(
            exists=False,
            name=name,
            suggestions=suggest(name, store.entries.keys(), store.schema.suggest_entry),
        )

    def exists_keyword(self, name: str) -> EntryLookup:
        store = self._require()
        if not store.schema.sections.keywords:
            return EntryLookup(exists=False, name=name)
        record = store.keyword(name)
        if record is not None:
            return EntryLookup(exists=True, name=name, record=copy.deepcopy(record))
        config = store.schema.suggest_keyword or store.schema.suggest_entry
        return EntryLookup(exists=False, name=name, suggestions=suggest(name, store.keywords.keys(), config))

    def exists_child(self, entry_name: str, child_name: str) -> ChildLookup:
        store = self._require()
        schema = store.schema
        record = store.entry(entry_name)
        if record is None:
            return ChildLookup(
                exists=False,
                entry=entry_name,
                name=child_name,
                parent_found=False,
                suggestions=suggest(entry_name, store.entries.keys(), schema.suggest_entry),
                error=f"{schema.label('entry')} '{entry_name}' not found",
            )

        children = store.children_of(record)
        is_global = schema.is_global_child(child_name)
        hit = children.get(schema.normalize(child_name))
        if hit is not None:
            child, is_static = hit
            return ChildLookup(exists=True, entry=entry_name, name=child_name,
                               record=copy.deepcopy(child), is_static=is_static, is_global=is_global)
        if is_global:
            return ChildLookup(exists=True, entry=entry_name, name=child_name, is_static=False, is_global=True)
        return ChildLookup(
            exists=False,
            entry=entry_name,
            name=child_name,
            suggestions=suggest(child_name, children.keys(), schema.suggest_child),
        )

    # ------------------------------------------------------------------
    # Info
    # ------------------------------------------------------------------

    def get_entry_info(self, name: str) -> Optional[Dict[str, Any]]:
        store = self._require()
        schema = store.schema
        record = store.entry(name)
        if record is None:
            return None

        collections = [schema.entry.children, schema.entry.static_children, schema.entry.properties]
        info = {k: copy.deepcopy(v) for k, v in record.items() if k not in collections}
        info.setdefault("name", name)

        children = as_map(record.get(schema.entry.children))
        static_children = as_map(record.get(schema.entry.static_children)) if schema.entry.static_children else {}
        properties = as_map(record.get(schema.entry.properties)) if schema.entry.properties else {}
        info.update({
            "child_count": len(children),
            "static_child_count": len(static_children),
            "property_count": len(properties),
            "children": copy.deepcopy(list(children.values())),
            "static_children": copy.deepcopy(list(static_children.values())),
            "properties": copy.deepcopy(list(properties.values())),
        })
        return info

    def get_child_info(self, entry_name: str, child_name: str) -> Optional[Dict[str, Any]]:
        store = self._require()
        record = store.entry(entry_name)
        if record is None:
            return None
        hit = store.children_of(record).get(store.schema.normalize(child_name))
        if hit is None:
            return None
        child, is_static = hit
        info = copy.deepcopy(child)
        info.setdefault("name", child_name)
        info["entry"] = record.get("name", entry_name)
        info["is_static"] = is_static
        info.setdefault("type", None)
        return info

    # ------------------------------------------------------------------
    # Listing / search / stats
    # ------------------------------------------------------------------

    def list_categories(self) -> List[Dict[str, Any]]:
        store = self._require()
        rules = store.schema.category
        out: List[Dict[str, Any]] = []
        for key, category in store.categories.items():
            category = as_map(category)
            subcategories = as_map(category.get(rules.subcategories))
            out.append({
                "name": category.get("name", key),
                "entry_count": len(as_map(category.get(rules.entries))),
                "keyword_count": len(as_map(category.get(rules.keywords))) if rules.keywords else 0,
                "subcategory_count": len(subcategories),
                "subcategories": list(subcategories.keys()),
            })
        return out

    def entries_in_category(self, category: str) -> List[Dict[str, Any]]:
        store = self._require()
        return [copy.deepcopy(r) for r in store.entries.values() if r.get("category") == category]

    def possible_parents(self, name: str) -> List[str]:
        """Entries whose content model admits `name` (HTML only)"""
        store = self._require()
        child_key = store.schema.normalize(name)
        child = store.entry(name)
        return [
            record.get("name", key)
            for key, record in store.entries.items()
            if _can_contain(record.get("contentModel"), child_key, child)
        ]

    def possible_children(self, name: str) -> List[str]:
        store = self._require()
        record = store.entry(name)
        if record is None:
            return []
        model = record.get("contentModel")
        return [
            child.get("name", key)
            for key, child in store.entries.items()
            if _can_contain(model, key, child)
        ]

    def get_browser_support(self, name: str, browser: Optional[str] = None) -> Any:
        """
        Browser support recorded for an entry

        Returns:
            The browser -> state map, the state for one browser, or None when
            the entry or its support data is missing
        """
        record = self._require().entry(name)
        support = record.get("browserSupport") if record else None
        if not isinstance(support, dict) or not support:
            return None
        if browser:
            return support.get(browser.lower())
        return dict(support)

    def search(self, query: str) -> Dict[str, List[Dict[str, Any]]]:
        """Case-insensitive substring search over names and descriptions"""
        store = self._require()
        schema = store.schema
        term = query.lower()
        results: Dict[str, List[Dict[str, Any]]] = {
            "entries": [],
            "children": [],
            "keywords": [],
            "properties": [],
        }

        for key, record in store.entries.items():
            entry_name = record.get("name", key)
            if _matches(term, record):
                results["entries"].append({
                    "name": entry_name,
                    "description": record.get("description"),
                    "category": record.get("category"),
                })
            for child, is_static in store.children_of(record).values():
                if _matches(term, child):
                    results["children"].append({
                        "name": child.get("name"),
                        "description": child.get("description"),
                        "entry": entry_name,
                        "is_static": is_static,
                    })
            if schema.entry.properties:
                for prop in as_map(record.get(schema.entry.properties)).values():
                    if isinstance(prop, dict) and _matches(term, prop):
                        results["properties"].append({
                            "name": prop.get("name"),
                            "description": prop.get("description"),
                            "entry": entry_name,
                        })

        for key, record in store.keywords.items():
            if _matches(term, record):
                results["keywords"].append({
                    "name": record.get("name", key),
                    "description": record.get("description"),
                    "category": record.get("category"),
                })

        return results

    def get_statistics(self) -> Dict[str, Any]:
        return copy.deepcopy(dict(self._require().metadata))

    def count_summary(self) -> Dict[str, int]:
        """Live collection counts (not the stored metadata)"""
        return self._require().counts()


_FLOW_ELEMENTS = frozenset([
    "div", "p", "span", "a", "img", "ul", "ol", "li", "h1", "h2", "h3", "h4", "h5", "h6",
])
_PHRASING_ELEMENTS = frozenset(["span", "a", "img", "strong", "em", "code", "b", "i", "u"])
_MODEL_WORD = re.compile(r"[a-z][a-z0-9-]*")


def _content_kinds(name: str, record: Optional[Dict[str, Any]]) -> Set[str]:
    category = str((record or {}).get("category") or "").lower()
    kinds = set()
    if name in _PHRASING_ELEMENTS or "phrasing" in category:
        # phrasing content is also flow content
        kinds.update(("phrasing", "flow"))
    if name in _FLOW_ELEMENTS or "flow" in category:
        kinds.add("flow")
    return kinds


def _can_contain(model: Any, child_name: str, child: Optional[Dict[str, Any]]) -> bool:
    """Rough content-model match: 'any', a content kind, or the child named outright."""
    if not isinstance(model, str) or not model:
        return False
    words = set(_MODEL_WORD.findall(model.lower()))
    if "any" in words:
        return True
    if words & _content_kinds(child_name, child):
        return True
    return child_name in words


def _matches(term: str, record: Dict[str, Any]) -> bool:
    for key in ("name", "description"):
        value = record.get(key)
        if isinstance(value, str) and term in value.lower():
            return True
    return False
