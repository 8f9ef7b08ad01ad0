"""Pytest configuration and fixtures for webref tests"""
import copy
import json
from pathlib import Path

import pytest

from webref.query import QueryFacade
from webref.schema import load_schema
from webref.store import Store

JS_DOC = {
    "categories": {
        "Indexed collections": {
            "name": "Indexed collections",
            "subcategories": {"Arrays": {"name": "Arrays", "objects": {"Array": {"name": "Array"}}, "keywords": {}}},
            "objects": {"Array": {"name": "Array"}},
            "keywords": {},
        },
        "Numbers and dates": {
            "name": "Numbers and dates",
            "subcategories": {},
            "objects": {"Math": {"name": "Math"}},
            "keywords": {},
        },
        "Web APIs": {
            "name": "Web APIs",
            "subcategories": {},
            "objects": {"Document": {"name": "Document"}},
            "keywords": {},
        },
        "Declarations": {
            "name": "Declarations",
            "subcategories": {},
            "objects": {},
            "keywords": {"const": {"name": "const"}},
        },
    },
    "objects": {
        "Array": {
            "name": "Array",
            "category": "Indexed collections",
            "subcategory": "Arrays",
            "description": "Ordered list-like collection of values",
            "properties": {
                "length": {"name": "length", "description": "Number of elements", "type": "property"},
            },
            "methods": {
                "map": {"name": "map", "description": "Creates a new array with the results of a callback",
                        "type": "method", "static": False},
                "flatMap": {"name": "flatMap", "description": "Maps each element then flattens one level",
                            "type": "method", "static": False},
                "filter": {"name": "filter", "description": "Keeps the elements that pass a test",
                           "type": "method", "static": False},
            },
            "staticMethods": {
                "isArray": {"name": "isArray", "description": "Tests whether a value is an Array",
                            "type": "static method", "static": True},
            },
        },
        "Math": {
            "name": "Math",
            "category": "Numbers and dates",
            "subcategory": None,
            "description": "Mathematical constants and functions",
            "properties": {"PI": {"name": "PI", "description": "Ratio of a circle's circumference to diameter",
                                  "type": "property"}},
            "methods": {},
            "staticMethods": {
                "max": {"name": "max", "description": "Largest of the given numbers",
                        "type": "static method", "static": True},
                "floor": {"name": "floor", "description": "Rounds down to an integer",
                          "type": "static method", "static": True},
            },
        },
        "Document": {
            "name": "Document",
            "category": "Web APIs",
            "subcategory": None,
            "description": "A web page loaded in the browser",
            "properties": {"title": {"name": "title", "description": "Title of the document",
                                     "type": "property"}},
            "methods": {
                "getElementById": {"name": "getElementById", "description": "Element with the given id",
                                   "type": "method", "static": False},
                "querySelector": {"name": "querySelector", "description": "First element matching a selector",
                                  "type": "method", "static": False},
            },
            "staticMethods": {},
        },
    },
    "keywords": {
        "const": {
            "name": "const",
            "category": "Declarations",
            "subcategory": None,
            "description": "Declares a block-scoped constant",
            "attributes": {"readonly": {"name": "readonly", "description": "Cannot be reassigned",
                                        "type": "attribute"}},
        },
    },
    "metadata": {
        "version": "1.0.0",
        "lastUpdated": "2024-01-01T00:00:00.000Z",
        "totalCategories": 4,
        "totalObjects": 3,
        "totalKeywords": 1,
        "totalMethods": 8,
    },
}

HTML_DOC = {
    "categories": {
        "Flow content": {"name": "Flow content", "subcategories": {}, "elements": {"div": {"name": "div"}}},
        "Embedded content": {"name": "Embedded content", "subcategories": {}, "elements": {"img": {"name": "img"}}},
    },
    "elements": {
        "div": {
            "name": "div",
            "category": "Flow content",
            "description": "Generic container for flow content",
            "contentModel": "Flow content",
            "browserSupport": {"chrome": "supported", "firefox": "supported", "safari": "supported", "edge": "supported"},
            "attributes": {
                "id": {"name": "id", "description": "Unique identifier", "type": "id", "global": True},
                "class": {"name": "class", "description": "CSS classes", "type": "class-list", "global": True},
            },
        },
        "img": {
            "name": "img",
            "category": "Embedded content",
            "description": "Embeds an image into the document",
            "contentModel": "Nothing",
            "browserSupport": {"chrome": "supported", "firefox": "supported", "safari": "supported", "edge": "unknown"},
            "attributes": {
                "src": {"name": "src", "description": "URL of the image", "type": "url", "required": True},
                "alt": {"name": "alt", "description": "Alternative text", "type": "string", "required": False},
            },
        },
    },
    "metadata": {
        "version": "1.0.0",
        "lastUpdated": "2024-01-01T00:00:00Z",
        "totalCategories": 2,
        "totalElements": 2,
        "totalAttributes": 4,
    },
}

CSS_DOC = {
    "categories": {
        "visual": {"name": "visual", "subcategories": {}, "properties": {"color": {"name": "color"}}, "functions": {}},
        "layout": {"name": "layout", "subcategories": {}, "properties": {"display": {"name": "display"}},
                   "functions": {}},
        "color-values": {"name": "color-values", "subcategories": {}, "properties": {},
                         "functions": {"rgb()": {"name": "rgb()"}}},
    },
    "properties": {
        "color": {
            "name": "color",
            "description": "Sets the foreground colour of text",
            "syntax": "<color> | currentcolor",
            "category": "visual",
            "values": {"currentcolor": {"name": "currentcolor", "description": "The current color value"}},
        },
        "display": {
            "name": "display",
            "description": "Sets the display type of an element",
            "syntax": "block | inline | none",
            "category": "layout",
            "values": {
                "block": {"name": "block", "description": "Block-level box"},
                "inline": {"name": "inline", "description": "Inline-level box"},
                "none": {"name": "none", "description": "Removes the element from rendering"},
            },
        },
    },
    "functions": {
        "rgb()": {
            "name": "rgb()",
            "description": "Red green blue colour function",
            "syntax": "rgb( <number> , <number> , <number> )",
            "category": "color-values",
            "parameters": {"<number>": {"name": "<number>"}},
        },
    },
    "metadata": {
        "version": "2.3.1",
        "lastUpdated": "2024-01-01T00:00:00Z",
        "totalCategories": 3,
        "totalProperties": 2,
        "totalFunctions": 1,
        "totalValues": 4,
    },
}

DOCS = {"javascript": JS_DOC, "html": HTML_DOC, "css": CSS_DOC}


def write_doc(p: Path, obj) -> Path:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(obj, ensure_ascii=False, indent=2), encoding="utf-8")
    return p


@pytest.fixture
def js_doc():
    return copy.deepcopy(JS_DOC)


@pytest.fixture
def html_doc():
    return copy.deepcopy(HTML_DOC)


@pytest.fixture
def css_doc():
    return copy.deepcopy(CSS_DOC)


@pytest.fixture
def data_dir(tmp_path):
    """Data root holding all three consistent dataset files"""
    root = tmp_path / "data"
    write_doc(root / "js-language.json", JS_DOC)
    write_doc(root / "html-elements.json", HTML_DOC)
    write_doc(root / "css-language.json", CSS_DOC)
    return root


def _facade(name):
    return QueryFacade(Store.from_document(load_schema(name), copy.deepcopy(DOCS[name])))


@pytest.fixture
def js():
    return _facade("javascript")


@pytest.fixture
def html():
    return _facade("html")


@pytest.fixture
def css():
    return _facade("css")
