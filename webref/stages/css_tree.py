"""
csstree dump -> css-language.json

Input is the JSON produced by csstree's lexer data export:

    {"csstree": {"version": "2.3.1",
                 "default": {"properties": {"<name>": "<syntax>", ...},
                             "types": {"<name>": "<syntax>", ...}}}}

Properties are categorised by name; their keyword values are read from the
bare identifiers of the syntax. Types whose name contains "(" are functions,
with parameters taken from the parenthesised part of the syntax.
"""

from __future__ import annotations
import re
from typing import Any, Dict, List

from ..schema import load_schema
from .common import reconcile_totals, top_by, utc_now

_TYPE_REF = re.compile(r"<[^>]*>")
_KEYWORD = re.compile(r"(?<![\w-])[a-z][a-z0-9-]*(?![\w(-])")
_PARAMS = re.compile(r"\(([^)]+)\)")

_VENDORS = [
    ("-webkit-", "webkit-vendor"),
    ("-moz-", "mozilla-vendor"),
    ("-ms-", "microsoft-vendor"),
    ("-o-", "opera-vendor"),
]

_PROPERTY_GROUPS = [
    (("display", "position", "float", "clear"), "layout"),
    (("margin", "padding", "border", "width", "height"), "box-model"),
    (("font", "text", "line", "letter"), "typography"),
    (("color", "background", "opacity"), "visual"),
    (("flex", "grid", "align", "justify"), "layout-advanced"),
    (("animation", "transition", "transform"), "animation"),
]

_TYPE_GROUPS = [
    (("color",), "color-values"),
    (("length", "percentage"), "length-values"),
    (("time", "frequency"), "time-frequency"),
    (("angle",), "angle-values"),
    (("gradient",), "gradients"),
    (("image",), "images"),
]


def categorize_property(name: str) -> str:
    if name.startswith("--"):
        return "custom-properties"
    for prefix, category in _VENDORS:
        if name.startswith(prefix):
            return category
    for needles, category in _PROPERTY_GROUPS:
        if any(n in name for n in needles):
            return category
    return "miscellaneous"


def categorize_function(name: str) -> str:
    for needles, category in _TYPE_GROUPS:
        if any(n in name for n in needles):
            return category
    return "functions"


def keyword_values(syntax: str) -> List[str]:
    """Bare keywords of a value syntax, in order of first appearance."""
    out: List[str] = []
    for kw in _KEYWORD.findall(_TYPE_REF.sub(" ", syntax)):
        if kw not in out:
            out.append(kw)
    return out


def function_parameters(syntax: str) -> List[str]:
    m = _PARAMS.search(syntax)
    if not m:
        return []
    out: List[str] = []
    for param in (p.strip() for p in m.group(1).split(",")):
        if param and param not in out:
            out.append(param)
    return out


def _category(doc: Dict[str, Any], name: str) -> Dict[str, Any]:
    return doc["categories"].setdefault(
        name, {"name": name, "subcategories": {}, "properties": {}, "functions": {}}
    )


def convert(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Turn a csstree dump into the dataset document."""
    tree = raw.get("csstree") or {}
    lexer = tree.get("default") or {}
    doc: Dict[str, Any] = {
        "categories": {},
        "properties": {},
        "functions": {},
        "metadata": {
            "version": str(tree.get("version", "unknown")),
            "lastUpdated": utc_now(),
            "source": "csstree",
        },
    }

    for name, syntax in (lexer.get("properties") or {}).items():
        syntax = str(syntax)
        category = categorize_property(name)
        doc["properties"][name] = {
            "name": name,
            "description": f"CSS property {name}",
            "syntax": syntax,
            "category": category,
            "isVendorPrefix": name.startswith("-") and not name.startswith("--"),
            "isCustomProperty": name.startswith("--"),
            "values": {
                kw: {"name": kw, "description": f"Keyword value of {name}"}
                for kw in keyword_values(syntax)
            },
        }
        _category(doc, category)["properties"][name] = {"name": name}

    for name, syntax in (lexer.get("types") or {}).items():
        if "(" not in name:
            continue
        syntax = str(syntax)
        category = categorize_function(name)
        doc["functions"][name] = {
            "name": name,
            "description": f"CSS function {name}",
            "syntax": syntax,
            "category": category,
            "parameters": {p: {"name": p} for p in function_parameters(syntax)},
        }
        _category(doc, category)["functions"][name] = {"name": name}

    return reconcile_totals(load_schema("css"), doc)


def summarize(doc: Dict[str, Any]) -> Dict[str, Any]:
    meta = doc["metadata"]
    return {
        "categories": {name: {"properties": len(c["properties"]), "functions": len(c["functions"])}
                       for name, c in doc["categories"].items()},
        "properties": meta["totalProperties"],
        "functions": meta["totalFunctions"],
        "values": meta["totalValues"],
        "topProperties": [
            {"name": p["name"], "valueCount": len(p["values"])}
            for p in top_by(doc["properties"], lambda p: len(p["values"]))
        ],
        "generatedAt": meta["lastUpdated"],
    }
