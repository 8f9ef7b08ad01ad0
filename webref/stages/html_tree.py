"""
HTML element tree -> html-elements.json

    ## Document metadata
    ### <meta>
    Metadata that cannot be expressed with other elements
    - charset - Character encoding declaration
    - name (required) - Metadata name
    Content model: Nothing
    Browser support: All modern browsers
    Accessibility: No implicit role

Every element gets the global attributes it does not declare itself.
"""

from __future__ import annotations
import re
from typing import Any, Dict, List, Optional

from ..schema import load_schema
from .common import DATA_VERSION, reconcile_totals, utc_now

_ELEMENT = re.compile(r"^###\s*<([^>]+)>")
_FLAGS = ("required", "deprecated", "experimental")

GLOBAL_ATTRIBUTES: List[Dict[str, Any]] = [
    {"name": "id", "description": "Unique identifier for the element", "type": "id"},
    {"name": "class", "description": "Space-separated list of CSS classes", "type": "class-list"},
    {"name": "style", "description": "Inline CSS styles", "type": "string"},
    {"name": "title", "description": "Advisory information about the element", "type": "string"},
    {"name": "lang", "description": "Language of the element content", "type": "string"},
    {"name": "dir", "description": "Text direction (ltr, rtl, auto)", "type": "string"},
    {"name": "hidden", "description": "Indicates element is not relevant", "type": "boolean"},
    {"name": "tabindex", "description": "Indicates if element can be focused", "type": "number"},
]

_BROWSERS = ("chrome", "firefox", "safari", "edge")


def infer_attribute_type(name: str, description: str) -> str:
    desc = description.lower()
    if "id" in name or name == "for":
        return "id"
    if "class" in name:
        return "class-list"
    if any(k in name for k in ("src", "href", "action")):
        return "url"
    if any(k in name for k in ("width", "height", "size")):
        return "number"
    if any(k in name for k in ("disabled", "checked", "required")):
        return "boolean"
    for kind in ("url", "number", "boolean"):
        if kind in desc:
            return kind
    return "string"


def parse_attribute(text: str) -> Dict[str, Any]:
    """`src (required) - URL of the image` -> attribute record"""
    head, _, description = text.partition(" - ")
    flags = {flag: f"({flag})" in head for flag in _FLAGS}
    name = head
    for flag in _FLAGS:
        name = name.replace(f"({flag})", "")
    name = name.strip()
    description = description.strip()
    return {
        "name": name,
        "description": description,
        **flags,
        "type": infer_attribute_type(name, description),
    }


def parse_browser_support(text: str) -> Dict[str, str]:
    text = text.lower()
    state = "supported" if ("all modern browsers" in text or "widely supported" in text) else "unknown"
    return {browser: state for browser in _BROWSERS}


class HTMLTreeParser:
    def __init__(self):
        self.doc: Dict[str, Any] = {
            "categories": {},
            "elements": {},
            "metadata": {
                "version": DATA_VERSION,
                "lastUpdated": utc_now(),
                "description": "HTML elements and their attributes",
            },
        }
        self._category: Optional[str] = None
        self._element: Optional[Dict[str, Any]] = None
        self._in_description = False
        self._buffer: List[str] = []

    def parse(self, text: str) -> Dict[str, Any]:
        for raw in text.splitlines():
            self._line(raw.strip())
        self._finish_element()
        return reconcile_totals(load_schema("html"), self.doc)

    def _line(self, line: str) -> None:
        if not line:
            self._end_description()
            return

        if line.startswith("###"):
            self._finish_element()
            m = _ELEMENT.match(line)
            if m:
                self._start_element(m.group(1).strip())
            return
        if line.startswith("##"):
            self._finish_element()
            self._category = line[2:].strip()
            self._ensure_category(self._category)
            return
        if line.startswith("#"):
            return

        el = self._element
        if el is None:
            return

        if line.startswith("- "):
            self._end_description()
            body = line[2:]
            lowered = body.lower()
            if "none specific" in lowered or "no specific" in lowered:
                return
            attr = parse_attribute(body)
            if attr["name"]:
                el["attributes"].setdefault(attr["name"], attr)
            return

        if line.startswith("Content model:"):
            self._end_description()
            el["contentModel"] = line[len("Content model:"):].strip()
        elif line.startswith("Browser support:"):
            self._end_description()
            el["browserSupport"] = parse_browser_support(line[len("Browser support:"):])
        elif line.startswith("Accessibility:"):
            self._end_description()
            el["accessibility"] = {"role": "unknown", "description": line[len("Accessibility:"):].strip()}
        elif "(deprecated)" in line or "(obsolete)" in line:
            el["deprecated"] = True
        elif "(experimental)" in line:
            el["experimental"] = True
        elif self._in_description:
            self._buffer.append(line)

    def _ensure_category(self, name: str) -> Dict[str, Any]:
        return self.doc["categories"].setdefault(name, {"name": name, "subcategories": {}, "elements": {}})

    def _start_element(self, name: str) -> None:
        self._element = {
            "name": name,
            "category": self._category or "Unknown",
            "description": "",
            "attributes": {},
            "contentModel": "",
            "accessibility": {},
            "browserSupport": {},
            "examples": [],
            "deprecated": False,
            "experimental": False,
        }
        self._in_description = True
        self._buffer = []

    def _end_description(self) -> None:
        if self._in_description and self._element is not None and self._buffer:
            self._element["description"] = " ".join(self._buffer).strip()
            self._in_description = False
            self._buffer = []

    def _finish_element(self) -> None:
        self._end_description()
        el = self._element
        if el is None:
            return
        for attr in GLOBAL_ATTRIBUTES:
            if attr["name"] not in el["attributes"]:
                el["attributes"][attr["name"]] = {**attr, "required": False, "global": True}
        self.doc["elements"][el["name"]] = el
        self._ensure_category(el["category"])["elements"][el["name"]] = {"name": el["name"]}
        self._element = None


def summarize(doc: Dict[str, Any]) -> Dict[str, Any]:
    category_counts: Dict[str, int] = {}
    deprecated: List[str] = []
    experimental: List[str] = []
    for el in doc["elements"].values():
        category_counts[el["category"]] = category_counts.get(el["category"], 0) + 1
        if el.get("deprecated"):
            deprecated.append(el["name"])
        if el.get("experimental"):
            experimental.append(el["name"])
    return {
        "totalElements": len(doc["elements"]),
        "categoryCounts": category_counts,
        "deprecatedCount": len(deprecated),
        "experimentalCount": len(experimental),
        "deprecatedElements": deprecated,
        "experimentalElements": experimental,
    }


def parse_text(text: str) -> Dict[str, Any]:
    return HTMLTreeParser().parse(text)
