import json

import pytest

from webref.contracts import ConsistencyValidator
from webref.schema import load_schema
from webref.stages import build
from webref.stages.css_tree import categorize_property, convert, function_parameters, keyword_values
from webref.stages.html_tree import infer_attribute_type, parse_attribute, parse_text as parse_html
from webref.stages.javascript_tree import parse_text as parse_js
from webref.store import DataFileNotFoundError, DataParseError

JS_TREE = """\
// JavaScript reference outline
## Indexed collections
### Arrays
#### <Array>
Ordered list-like collection
of values
Properties:
- length - Number of elements
Methods:
- map - Creates a new array
- isArray - Tests for an array (static method)

## Declarations
#### <const>
Declares a block-scoped constant
- readonly - Cannot be reassigned
- hoisted
"""

HTML_TREE = """\
# HTML elements
## Embedded content
### <img>
Embeds an image
into the document
- src (required) - URL of the image
- alt - Alternative text
Content model: Nothing
Browser support: All modern browsers
Accessibility: Needs alt text

### <center>
Centers its content horizontally
(obsolete)
- None specific to this element
"""

CSSTREE = {
    "csstree": {
        "version": "2.3.1",
        "default": {
            "properties": {
                "display": "[ block | inline | none ] || <display-inside>",
                "color": "<color>",
                "-webkit-box-flex": "<number>",
            },
            "types": {
                "rgb()": "rgb( <percentage>{3} , <alpha-value>? )",
                "length": "<dimension>",
            },
        },
    },
}


def _errors(name, doc):
    return ConsistencyValidator(load_schema(name)).validate(doc).errors


def test_javascript_tree():
    doc = parse_js(JS_TREE)
    array = doc["objects"]["Array"]
    assert array["description"] == "Ordered list-like collection of values"
    assert array["subcategory"] == "Arrays"
    assert set(array["methods"]) == {"map"}
    assert array["staticMethods"]["isArray"] == {
        "name": "isArray", "description": "Tests for an array", "type": "static method", "static": True,
    }
    assert array["properties"]["length"]["type"] == "property"

    const = doc["keywords"]["const"]
    assert const["category"] == "Declarations"
    assert set(const["attributes"]) == {"readonly", "hoisted"}

    assert doc["categories"]["Indexed collections"]["subcategories"]["Arrays"]["objects"] == {"Array": {"name": "Array"}}
    meta = doc["metadata"]
    assert (meta["totalCategories"], meta["totalObjects"], meta["totalKeywords"], meta["totalMethods"]) == (2, 1, 1, 2)
    assert _errors("javascript", doc) == []


def test_lowercase_e_is_a_keyword():
    doc = parse_js("## Misc\n#### <e>\nEuler's number shorthand\n")
    assert "e" in doc["keywords"]


def test_html_tree():
    doc = parse_html(HTML_TREE)
    img = doc["elements"]["img"]
    assert img["description"] == "Embeds an image into the document"
    assert img["attributes"]["src"]["required"] is True
    assert img["attributes"]["src"]["type"] == "url"
    assert img["attributes"]["id"]["global"] is True
    assert img["contentModel"] == "Nothing"
    assert img["browserSupport"]["firefox"] == "supported"
    assert img["accessibility"]["description"] == "Needs alt text"

    center = doc["elements"]["center"]
    assert center["deprecated"] is True
    assert "None specific to this element" not in center["attributes"]
    assert len(center["attributes"]) == 8

    assert doc["metadata"]["totalAttributes"] == 10 + 8
    assert _errors("html", doc) == []


def test_attribute_parsing():
    attr = parse_attribute("height (deprecated) - Height in pixels")
    assert attr["name"] == "height"
    assert attr["deprecated"] is True
    assert attr["type"] == "number"
    assert infer_attribute_type("for", "") == "id"
    assert infer_attribute_type("label", "A boolean flag") == "boolean"
    assert infer_attribute_type("label", "Free text") == "string"


def test_css_conversion():
    doc = convert(CSSTREE)
    display = doc["properties"]["display"]
    assert display["category"] == "layout"
    assert list(display["values"]) == ["block", "inline", "none"]
    assert doc["properties"]["-webkit-box-flex"]["category"] == "webkit-vendor"
    assert doc["properties"]["-webkit-box-flex"]["isVendorPrefix"] is True

    rgb = doc["functions"]["rgb()"]
    assert list(rgb["parameters"]) == ["<percentage>{3}", "<alpha-value>?"]
    assert "length" not in doc["functions"]

    assert doc["metadata"]["version"] == "2.3.1"
    assert doc["metadata"]["totalProperties"] == 3
    assert doc["metadata"]["totalValues"] == 3
    assert _errors("css", doc) == []


def test_css_helpers():
    assert categorize_property("--brand") == "custom-properties"
    assert categorize_property("grid-template") == "layout-advanced"
    assert categorize_property("z-index") == "miscellaneous"
    assert keyword_values("auto | <length> | rgb( <number> )") == ["auto"]
    assert function_parameters("no parens") == []


def test_build_writes_document_and_summary(tmp_path):
    src = tmp_path / "js-language-tree.txt"
    src.write_text(JS_TREE, encoding="utf-8")
    out = tmp_path / "data" / "js-language.json"

    build("js", src, out)

    doc = json.loads(out.read_text(encoding="utf-8"))
    assert "Array" in doc["objects"]
    summary = json.loads((out.parent / "js-summary.json").read_text(encoding="utf-8"))
    assert summary["topObjects"][0] == {"name": "Array", "methodCount": 2, "propertyCount": 1}
    assert summary["categories"]["Declarations"]["keywordCount"] == 1


def test_build_css_from_json(tmp_path):
    src = tmp_path / "ALL_data.txt"
    src.write_text(json.dumps(CSSTREE), encoding="utf-8")
    out = tmp_path / "css-language.json"
    build("css", src, out)
    summary = json.loads((tmp_path / "css-summary.json").read_text(encoding="utf-8"))
    assert summary["properties"] == 3
    assert summary["functions"] == 1


def test_build_errors(tmp_path):
    with pytest.raises(DataFileNotFoundError):
        build("html", tmp_path / "missing.txt", tmp_path / "out.json")
    bad = tmp_path / "bad.json"
    bad.write_text("not json", encoding="utf-8")
    with pytest.raises(DataParseError):
        build("css", bad, tmp_path / "out.json")
