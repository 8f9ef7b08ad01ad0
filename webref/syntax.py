"""
Syntax sketch-checks for JavaScript and CSS source text.

These are not parsers. JavaScript gets feature detection by regex plus
bracket balancing. CSS gets rule splitting by brace depth, selector
classification and a colon check per declaration. When a CSS dataset is
loaded, unknown properties also draw warnings.
"""

from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .query import QueryFacade

_JS_FEATURES: List[Tuple[str, re.Pattern]] = [
    ("variable declaration", re.compile(r"(?:^|\s)(const|let|var)\s+[A-Za-z_$][A-Za-z0-9_$]*")),
    ("function declaration", re.compile(r"(?:^|\s)(function)\s+[A-Za-z_$][A-Za-z0-9_$]*")),
    ("class declaration", re.compile(r"(?:^|\s)(class)\s+[A-Za-z_$][A-Za-z0-9_$]*")),
    ("control structure", re.compile(r"(?:^|\s)(if|for|while|switch|try|catch|finally)\s*\(")),
    ("module syntax", re.compile(r"(?:^|\s)(import|export)\s")),
    ("async/await", re.compile(r"(?:^|\s)(async|await)\s")),
]

_BRACKETS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = set(_BRACKETS.values())

_CSS_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)

# At-rules whose block holds nested rules rather than declarations
_NESTING_AT_RULES = ("@media", "@supports", "@layer", "@container", "@document")


def check_javascript(code: str) -> Dict[str, Any]:
    """
    Sketch-check a JavaScript snippet

    Args:
        code: JavaScript source text

    Returns:
        Dict with valid, errors, warnings and used_features
    """
    errors: List[str] = []
    used = [feature for feature, pattern in _JS_FEATURES if pattern.search(code)]

    stack: List[str] = []
    for i, ch in enumerate(code):
        if ch in _BRACKETS:
            stack.append(_BRACKETS[ch])
        elif ch in _CLOSERS:
            if not stack or stack.pop() != ch:
                errors.append(f"Mismatched bracket at position {i}")
    if stack:
        errors.append(f"Unclosed brackets: {', '.join(stack)}")

    return {
        "valid": not errors,
        "errors": errors,
        "warnings": [],
        "used_features": used,
    }


# ============================================================================
# CSS
# ============================================================================

@dataclass
class CssRule:
    selector: str
    position: int
    declarations: List[Tuple[str, str]] = field(default_factory=list)
    malformed: List[str] = field(default_factory=list)


def _split_blocks(text: str, offset: int = 0) -> Tuple[List[Tuple[str, str, int]], List[str]]:
    """Split text into (selector, body, position) blocks by brace depth."""
    blocks: List[Tuple[str, str, int]] = []
    errors: List[str] = []
    depth = 0
    start = 0
    selector = ""
    body_start = 0

    for i, ch in enumerate(text):
        if ch == "{":
            if depth == 0:
                selector = text[start:i].strip()
                body_start = i + 1
            depth += 1
        elif ch == "}":
            if depth == 0:
                errors.append(f"Unexpected '}}' at position {offset + i}")
                start = i + 1
                continue
            depth -= 1
            if depth == 0:
                blocks.append((selector, text[body_start:i], offset + body_start - 1))
                start = i + 1

    if depth > 0:
        errors.append(f"Unclosed rule block: {selector or '<empty selector>'}")
    elif text[start:].strip():
        errors.append(f"Trailing text outside any rule: {text[start:].strip()[:40]}")
    return blocks, errors


def _parse_rules(text: str, offset: int = 0) -> Tuple[List[CssRule], List[str]]:
    rules: List[CssRule] = []
    blocks, errors = _split_blocks(text, offset)
    for selector, body, position in blocks:
        if selector.lower().startswith(_NESTING_AT_RULES):
            nested, nested_errors = _parse_rules(body, position + 1)
            rules.extend(nested)
            errors.extend(nested_errors)
            continue

        rule = CssRule(selector=selector, position=position)
        for decl in body.split(";"):
            decl = decl.strip()
            if not decl:
                continue
            if ":" not in decl:
                rule.malformed.append(decl)
                continue
            prop, value = decl.split(":", 1)
            rule.declarations.append((prop.strip(), value.strip()))
        rules.append(rule)
    return rules, errors


_SELECTOR_TOKEN = re.compile(r"""
    (?P<space>\s+)
  | (?P<combinator>[>+~])
  | (?P<universal>\*)
  | (?P<element>[a-zA-Z][a-zA-Z0-9-]*)
  | (?P<class>\.[a-zA-Z_-][\w-]*)
  | (?P<id>\#[a-zA-Z_-][\w-]*)
  | (?P<pseudo_element>::[a-zA-Z-]+(?:\([^)]*\))?)
  | (?P<pseudo_class>:[a-zA-Z-]+(?:\([^)]*\))?)
  | (?P<attribute>\[[^\]]+\])
""", re.VERBOSE)

_COMBINATORS = {" ": "descendant", ">": "child", "+": "adjacent-sibling", "~": "general-sibling"}

COMMON_SELECTORS = [".class", "#id", "element", ":hover", ":focus", "::before", "::after"]


def check_selector(selector: str) -> Dict[str, Any]:
    """
    Classify a single (comma-free) CSS selector

    Simple selectors report their own type (element, class, id, universal,
    pseudo-class, pseudo-element, attribute). Several simple selectors glued
    together are "compound"; anything joined by a combinator reports the first
    combinator (descendant, child, adjacent-sibling, general-sibling).

    Returns:
        Dict with valid, selector, type, combinators and suggestions
    """
    text = selector.strip()
    result: Dict[str, Any] = {
        "valid": False,
        "selector": text,
        "type": None,
        "combinators": [],
        "suggestions": [],
    }

    compounds: List[List[str]] = [[]]
    pending: Optional[str] = None
    pos = 0
    while pos < len(text):
        m = _SELECTOR_TOKEN.match(text, pos)
        if m is None:
            break
        pos = m.end()
        kind = m.lastgroup
        if kind == "space":
            pending = pending or " "
        elif kind == "combinator":
            if pending not in (None, " ") or not compounds[-1]:
                break
            pending = m.group()
        else:
            if pending is not None:
                if not compounds[-1]:
                    break
                result["combinators"].append(_COMBINATORS[pending])
                compounds.append([])
                pending = None
            compounds[-1].append(kind.replace("_", "-"))
    else:
        if text and compounds[-1] and pending in (None, " "):
            result["valid"] = True

    if not result["valid"]:
        result["combinators"] = []
        result["suggestions"] = [s for s in COMMON_SELECTORS if s != text][:3]
    elif result["combinators"]:
        result["type"] = result["combinators"][0]
    elif len(compounds[0]) == 1:
        result["type"] = compounds[0][0]
    else:
        result["type"] = "compound"
    return result


def _split_selector_list(selector: str) -> List[str]:
    """Split on top-level commas; commas inside :is(...) and friends stay."""
    parts: List[str] = []
    depth = 0
    start = 0
    for i, ch in enumerate(selector):
        if ch in "([":
            depth += 1
        elif ch in ")]" and depth:
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append(selector[start:i].strip())
            start = i + 1
    parts.append(selector[start:].strip())
    return parts


def extract_css_rules(text: str) -> List[CssRule]:
    """Rules of a stylesheet; rules nested in @media and friends are flattened."""
    rules, _ = _parse_rules(_CSS_COMMENT.sub(lambda m: " " * len(m.group(0)), text))
    return rules


def check_css(text: str, css: Optional[QueryFacade] = None) -> Dict[str, Any]:
    """
    Sketch-check a stylesheet

    Args:
        text: CSS source text
        css: Facade over the CSS dataset; when given, unknown properties warn

    Returns:
        Dict with valid, errors, warnings, rule_count and properties_used
    """
    cleaned = _CSS_COMMENT.sub(lambda m: " " * len(m.group(0)), text)
    rules, errors = _parse_rules(cleaned)
    warnings: List[str] = []
    used: List[str] = []

    for rule in rules:
        if not rule.selector:
            errors.append(f"Rule at position {rule.position} has no selector")
        for decl in rule.malformed:
            errors.append(f"Declaration missing ':' in {rule.selector or '<empty selector>'}: {decl}")
        for prop, _value in rule.declarations:
            if prop not in used:
                used.append(prop)
        if rule.selector and not rule.selector.startswith("@"):
            for part in _split_selector_list(rule.selector):
                if not check_selector(part)["valid"]:
                    warnings.append(f"Unknown selector: {part}")

    if css is not None and css.loaded:
        for prop in used:
            # custom properties are never in the dataset
            if prop.startswith("--"):
                continue
            lookup = css.exists_entry(prop)
            if not lookup.exists:
                hint = f" (did you mean: {', '.join(lookup.suggestions)}?)" if lookup.suggestions else ""
                warnings.append(f"Unknown CSS property: {prop}{hint}")

    return {
        "valid": not errors,
        "errors": errors,
        "warnings": warnings,
        "rule_count": len(rules),
        "properties_used": used,
    }
