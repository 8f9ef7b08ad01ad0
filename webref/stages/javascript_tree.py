"""
JavaScript language tree -> js-language.json

Input is an indented outline:

    ## Category
    ### Subcategory
    #### <Array>
    Description text, possibly over several lines
    Properties:
    - length - Number of elements
    Methods:
    - map - Creates a new array (instance method)
    - isArray - Tests for an array (static method)

Names starting with an uppercase letter are built-in objects, anything else
(and the single-letter `e`) is a keyword whose `- name - desc` items become
attributes.
"""

from __future__ import annotations
import re
from typing import Any, Dict, Optional

from ..schema import load_schema
from .common import DATA_VERSION, reconcile_totals, top_by, utc_now

_HEADER = re.compile(r"^#### <(.+)>$")
_ITEM = re.compile(r"^- (.+?) - (.+)$")
_STATIC_MARK = "(static method)"


def _is_object_name(name: str) -> bool:
    return name[0] == name[0].upper() and name != "e"


class JavaScriptTreeParser:
    def __init__(self):
        self.doc: Dict[str, Any] = {
            "categories": {},
            "objects": {},
            "keywords": {},
            "metadata": {"version": DATA_VERSION, "lastUpdated": utc_now()},
        }
        self._category: Optional[str] = None
        self._subcategory: Optional[str] = None
        self._object: Optional[str] = None
        self._keyword: Optional[str] = None
        self._section: Optional[str] = None   # "properties" | "methods"

    def parse(self, text: str) -> Dict[str, Any]:
        for raw in text.splitlines():
            line = raw.strip()
            if not line or line.startswith("//"):
                continue
            self._line(line)
        return reconcile_totals(load_schema("javascript"), self.doc)

    def _line(self, line: str) -> None:
        if line.startswith("#### "):
            m = _HEADER.match(line)
            if m:
                self._start_member(m.group(1).strip())
            return
        if line.startswith("### "):
            self._subcategory = line[4:].strip()
            if self._category:
                self.doc["categories"][self._category]["subcategories"][self._subcategory] = {
                    "name": self._subcategory, "objects": {}, "keywords": {},
                }
            self._object = self._keyword = self._section = None
            return
        if line.startswith("## "):
            self._category = line[3:].strip()
            self.doc["categories"][self._category] = {
                "name": self._category, "subcategories": {}, "objects": {}, "keywords": {},
            }
            self._subcategory = self._object = self._keyword = self._section = None
            return

        if line == "Properties:":
            self._section = "properties"
            return
        if line == "Methods:":
            self._section = "methods"
            return

        target = self._target()
        if target is None:
            return

        if not line.startswith("- "):
            # description continues until a section or item starts
            if self._section is None:
                target["description"] = f"{target['description']} {line}".strip()
            return

        m = _ITEM.match(line)
        if m:
            self._item(m.group(1).strip(), m.group(2).strip())
        elif self._keyword:
            name = line[2:].strip()
            target["attributes"][name] = {"name": name, "description": "", "type": "attribute"}

    def _target(self) -> Optional[Dict[str, Any]]:
        if self._object:
            return self.doc["objects"][self._object]
        if self._keyword:
            return self.doc["keywords"][self._keyword]
        return None

    def _start_member(self, name: str) -> None:
        self._section = None
        if _is_object_name(name):
            self._object, self._keyword = name, None
            self.doc["objects"][name] = {
                "name": name,
                "category": self._category,
                "subcategory": self._subcategory,
                "description": "",
                "properties": {},
                "methods": {},
                "staticMethods": {},
                "examples": [],
            }
            group = "objects"
        else:
            self._keyword, self._object = name, None
            self.doc["keywords"][name] = {
                "name": name,
                "category": self._category,
                "subcategory": self._subcategory,
                "description": "",
                "attributes": {},
                "examples": [],
            }
            group = "keywords"

        if self._category:
            category = self.doc["categories"][self._category]
            category[group][name] = {"name": name}
            if self._subcategory:
                category["subcategories"][self._subcategory][group][name] = {"name": name}

    def _item(self, name: str, description: str) -> None:
        if self._keyword:
            self.doc["keywords"][self._keyword]["attributes"][name] = {
                "name": name, "description": description, "type": "attribute",
            }
            return

        obj = self.doc["objects"][self._object]
        if self._section == "properties":
            obj["properties"][name] = {"name": name, "description": description, "type": "property"}
        elif self._section == "methods":
            is_static = _STATIC_MARK in description
            description = description.replace(f" {_STATIC_MARK}", "").replace(_STATIC_MARK, "").strip()
            bucket = "staticMethods" if is_static else "methods"
            obj[bucket][name] = {
                "name": name,
                "description": description,
                "type": "static method" if is_static else "method",
                "static": is_static,
            }


def summarize(doc: Dict[str, Any]) -> Dict[str, Any]:
    def method_count(o):
        return len(o["methods"]) + len(o["staticMethods"])

    return {
        "metadata": doc["metadata"],
        "categories": {
            c["name"]: {
                "name": c["name"],
                "objectCount": len(c["objects"]),
                "keywordCount": len(c["keywords"]),
                "subcategoryCount": len(c["subcategories"]),
            }
            for c in doc["categories"].values()
        },
        "topObjects": [
            {"name": o["name"], "methodCount": method_count(o), "propertyCount": len(o["properties"])}
            for o in top_by(doc["objects"], method_count)
        ],
        "topKeywords": [
            {"name": k["name"], "attributeCount": len(k["attributes"])}
            for k in top_by(doc["keywords"], lambda k: len(k["attributes"]))
        ],
    }


def parse_text(text: str) -> Dict[str, Any]:
    return JavaScriptTreeParser().parse(text)
