"""
Cross-reference checks for a complete HTML document.

An HTML page is scanned with regular expressions (no DOM is built) for its
elements, ids, classes, scripts, style blocks, DOM API calls and id
selectors. Each part is then checked against whichever dataset facades the
composer holds:

  html        element names and attribute names
  javascript  bracket sketch-check of every script and event handler
  css         <style> blocks and style="" attributes
  cross       DOM objects/members against the JavaScript data, id selectors
              against the ids present in the markup
"""

from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .query import QueryFacade
from .syntax import check_css, check_javascript

_SCRIPT_BLOCK = re.compile(r"<script\b[^>]*>(.*?)</script\s*>", re.IGNORECASE | re.DOTALL)
_STYLE_BLOCK = re.compile(r"<style\b[^>]*>(.*?)</style\s*>", re.IGNORECASE | re.DOTALL)
_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
_TAG = re.compile(r"<([A-Za-z][A-Za-z0-9-]*)([^>]*)>")
_ATTR = re.compile(r"""([A-Za-z_:@][\w:.@-]*)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+)))?""")
_DOM_CALL = re.compile(r"\b(document|window|element)\.([A-Za-z_$][\w$]*)")
_ID_SELECTOR = re.compile(
    r"""(?:getElementById\s*\(\s*["']([^"']+)["']\s*\)"""
    r"""|querySelector(?:All)?\s*\(\s*["']#([A-Za-z_][\w-]*)["']\s*\))"""
)

_DOM_OBJECTS = {"document": "Document", "window": "Window", "element": "Element"}


@dataclass
class Element:
    tag: str
    attributes: Dict[str, str]
    position: int


@dataclass
class Script:
    content: str
    kind: str          # "script-tag" | "event-handler"
    position: int


@dataclass
class DomCall:
    object: str
    member: str
    position: int


@dataclass
class References:
    tags: List[Element] = field(default_factory=list)
    ids: List[str] = field(default_factory=list)
    classes: List[str] = field(default_factory=list)
    scripts: List[Script] = field(default_factory=list)
    styles: List[str] = field(default_factory=list)
    dom_calls: List[DomCall] = field(default_factory=list)
    id_selectors: List[str] = field(default_factory=list)


def _blank(match: re.Match) -> str:
    """Replace a block body with spaces so positions stay valid."""
    whole = match.group(0)
    body = match.group(1)
    start = match.start(1) - match.start(0)
    return whole[:start] + " " * len(body) + whole[start + len(body):]


def _attributes(text: str) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for m in _ATTR.finditer(text):
        value = next((g for g in m.groups()[1:] if g is not None), "")
        out.setdefault(m.group(1).lower(), value)
    return out


def extract_references(html: str) -> References:
    """Collect everything a document refers to, in document order."""
    refs = References()

    for m in _SCRIPT_BLOCK.finditer(html):
        content = m.group(1).strip()
        if content:
            refs.scripts.append(Script(content=content, kind="script-tag", position=m.start()))
    refs.styles = [m.group(1) for m in _STYLE_BLOCK.finditer(html) if m.group(1).strip()]

    markup = _COMMENT.sub(lambda m: " " * len(m.group(0)), html)
    markup = _SCRIPT_BLOCK.sub(_blank, markup)
    markup = _STYLE_BLOCK.sub(_blank, markup)

    for m in _TAG.finditer(markup):
        attrs = _attributes(m.group(2))
        refs.tags.append(Element(tag=m.group(1).lower(), attributes=attrs, position=m.start()))
        if attrs.get("id"):
            refs.ids.append(attrs["id"])
        for cls in attrs.get("class", "").split():
            if cls not in refs.classes:
                refs.classes.append(cls)
        for name, value in attrs.items():
            if name.startswith("on") and value.strip():
                refs.scripts.append(Script(content=value, kind="event-handler", position=m.start()))

    for script in refs.scripts:
        for m in _DOM_CALL.finditer(script.content):
            refs.dom_calls.append(DomCall(object=_DOM_OBJECTS[m.group(1)], member=m.group(2),
                                          position=script.position))
        for m in _ID_SELECTOR.finditer(script.content):
            refs.id_selectors.append(m.group(1) or m.group(2))

    return refs


@dataclass
class AreaResult:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "errors": list(self.errors), "warnings": list(self.warnings)}


class CrossReferenceComposer:
    """Checks a document against the HTML, JavaScript and CSS datasets together."""

    def __init__(self, html: Optional[QueryFacade] = None,
                 javascript: Optional[QueryFacade] = None,
                 css: Optional[QueryFacade] = None):
        self.facades: Dict[str, Optional[QueryFacade]] = {
            "html": html,
            "javascript": javascript,
            "css": css,
        }

    def _loaded(self, name: str) -> Optional[QueryFacade]:
        facade = self.facades.get(name)
        return facade if facade is not None and facade.loaded else None

    def check_document(self, content: str) -> Dict[str, Dict[str, Any]]:
        refs = extract_references(content)
        results = {area: AreaResult() for area in ("html", "javascript", "css", "cross")}

        self._check_html(refs, results["html"])
        self._check_scripts(refs, results["javascript"])
        self._check_styles(refs, results["css"])
        self._check_cross(refs, results["cross"])

        return {area: r.to_dict() for area, r in results.items()}

    def _check_html(self, refs: References, out: AreaResult) -> None:
        html = self._loaded("html")
        if html is None:
            out.warnings.append("HTML data not loaded; element checks skipped")
            return
        for el in refs.tags:
            if not html.exists_entry(el.tag).exists:
                out.errors.append(f"Invalid HTML element: {el.tag}")
                continue
            for attr in el.attributes:
                # inline event handlers are checked as scripts
                if attr.startswith("on"):
                    continue
                if not html.exists_child(el.tag, attr).exists:
                    out.warnings.append(f'Invalid attribute "{attr}" for element "{el.tag}"')

    def _check_scripts(self, refs: References, out: AreaResult) -> None:
        for script in refs.scripts:
            result = check_javascript(script.content)
            for err in result["errors"]:
                out.errors.append(f"JavaScript syntax error in {script.kind} at {script.position}: {err}")

    def _check_styles(self, refs: References, out: AreaResult) -> None:
        css = self._loaded("css")
        sheets = list(refs.styles)
        for el in refs.tags:
            if el.attributes.get("style", "").strip():
                sheets.append(f"{el.tag} {{ {el.attributes['style']} }}")
        for sheet in sheets:
            result = check_css(sheet, css)
            out.errors.extend(result["errors"])
            out.warnings.extend(result["warnings"])

    def _check_cross(self, refs: References, out: AreaResult) -> None:
        js = self._loaded("javascript")
        if js is not None:
            seen = set()
            for call in refs.dom_calls:
                key = (call.object, call.member)
                if key in seen:
                    continue
                seen.add(key)
                if not js.exists_entry(call.object).exists:
                    out.warnings.append(f"Unknown DOM object: {call.object}")
                elif not self._knows_member(js, call.object, call.member):
                    out.warnings.append(f"Unknown DOM member: {call.object}.{call.member}")

        ids = set(refs.ids)
        for selector in refs.id_selectors:
            if selector not in ids:
                out.warnings.append(f"JavaScript selector references non-existent ID: {selector}")

        counted: Dict[str, int] = {}
        for id_ in refs.ids:
            counted[id_] = counted.get(id_, 0) + 1
        for id_, n in counted.items():
            if n > 1:
                out.warnings.append(f"Duplicate id in document: {id_} ({n} times)")

    @staticmethod
    def _knows_member(js: QueryFacade, obj: str, member: str) -> bool:
        if js.exists_child(obj, member).exists:
            return True
        info = js.get_entry_info(obj) or {}
        return any(p.get("name") == member for p in info.get("properties", []))

    def unified_stats(self) -> Dict[str, Dict[str, Any]]:
        stats: Dict[str, Dict[str, Any]] = {}
        total_entries = 0
        total_children = 0
        for name in self.facades:
            facade = self._loaded(name)
            if facade is None:
                stats[name] = {}
                continue
            counts = facade.count_summary()
            stats[name] = {"counts": counts, "metadata": facade.get_statistics()}
            total_entries += counts["entries"]
            total_children += counts["children"]
        stats["combined"] = {"total_entries": total_entries, "total_children": total_children}
        return stats

    def search_all(self, query: str) -> Dict[str, Any]:
        results: Dict[str, Any] = {}
        total = 0
        for name in self.facades:
            facade = self._loaded(name)
            if facade is None:
                continue
            found = facade.search(query)
            results[name] = found
            total += sum(len(v) for v in found.values())
        results["total"] = total
        return results
