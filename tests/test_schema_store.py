import json

import pytest

from webref.schema import (
    SchemaError, UnknownDatasetError, available_datasets, build_schema, load_schema, resolve_dataset,
)
from webref.store import DataFileNotFoundError, DataParseError, Loader, Store
from webref.suggest import SuggestConfig, levenshtein, positional_ratio, suggest


# ---------------------------------------------------------------------------
# suggestions
# ---------------------------------------------------------------------------

def test_positional_ratio():
    assert positional_ratio("flatmix", "flatmap") == pytest.approx(5 / 7)
    assert positional_ratio("", "") == 1.0
    assert positional_ratio("abc", "") == 0.0


def test_levenshtein():
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("", "abc") == 3
    assert levenshtein("same", "same") == 0


def test_suggest_orders_best_first_then_by_name():
    config = SuggestConfig(metric="levenshtein", max_distance=2, limit=5)
    assert suggest("colr", ["color", "colors", "cols", "display"], config) == ["color", "cols", "colors"]


def test_suggest_limit_and_threshold():
    config = SuggestConfig(metric="ratio", threshold=0.5, limit=2)
    names = ["mapA", "mapB", "mapC", "zzzz"]
    assert suggest("mapX", names, config) == ["mapA", "mapB"]
    assert suggest("qqqq", names, config) == []


# ---------------------------------------------------------------------------
# schemas
# ---------------------------------------------------------------------------

def test_available_and_aliases():
    assert available_datasets() == ["css", "html", "javascript"]
    assert resolve_dataset("JS") == "javascript"
    assert resolve_dataset("htm") == "html"
    with pytest.raises(UnknownDatasetError):
        resolve_dataset("cobol")


def test_loaded_schemas():
    js = load_schema("javascript")
    assert js.case_sensitive
    assert js.child_maps() == ["methods", "staticMethods"]
    assert dict(js.totals)["totalMethods"] == "children"

    html = load_schema("html")
    assert not html.case_sensitive
    assert html.sections.keywords is None
    assert html.is_global_child("DATA-foo")
    assert html.suggest_child.threshold == 0.6

    css = load_schema("css")
    assert css.suggest_entry.metric == "levenshtein"
    assert css.label("keyword") == "Function"


def test_bad_schema_rejected():
    raw = {
        "name": "broken",
        "sections": {"categories": "c", "entries": "e", "metadata": "m"},
        "entry": {"required": ["name"], "children": "kids"},
        "category": {"required": [], "subcategories": "s", "entries": "e"},
        "metadata": {"totals": {"total": "children"}},
        "suggest": {"entry": {"metric": "soundex"}, "child": {}},
    }
    with pytest.raises(SchemaError, match="soundex"):
        build_schema(raw)


def test_keyword_rules_need_section():
    raw = {
        "name": "broken",
        "sections": {"categories": "c", "entries": "e", "metadata": "m"},
        "entry": {"required": ["name"], "children": "kids"},
        "keyword": {"required": ["name"], "children": "args"},
        "category": {"required": [], "subcategories": "s", "entries": "e"},
        "metadata": {"totals": {"total": "children"}},
        "suggest": {"entry": {}, "child": {}},
    }
    with pytest.raises(SchemaError):
        build_schema(raw)


# ---------------------------------------------------------------------------
# loader / store
# ---------------------------------------------------------------------------

def test_missing_file(tmp_path):
    with pytest.raises(DataFileNotFoundError, match="webref build javascript"):
        Loader(load_schema("js")).load(tmp_path / "nope.json")


def test_invalid_json(tmp_path):
    p = tmp_path / "bad.json"
    p.write_text("{not json", encoding="utf-8")
    with pytest.raises(DataParseError):
        Loader(load_schema("css")).load(p)


def test_top_level_must_be_object(tmp_path):
    p = tmp_path / "list.json"
    p.write_text(json.dumps([1, 2]), encoding="utf-8")
    with pytest.raises(DataParseError, match="expected a JSON object"):
        Loader(load_schema("html")).load(p)


def test_store_is_read_only(html_doc):
    store = Store.from_document(load_schema("html"), html_doc)
    with pytest.raises(TypeError):
        store.entries["p"] = {}
    assert store.entry("IMG")["name"] == "img"


def test_loader_indexes_file(data_dir):
    store = Loader(load_schema("javascript")).load(data_dir / "js-language.json")
    assert store.source == data_dir / "js-language.json"
    assert set(store.entries) == {"Array", "Math", "Document"}
    assert set(store.keywords) == {"const"}
    children = store.children_of(store.entry("Array"))
    assert children["isArray"][1] is True
    assert children["map"][1] is False


def test_store_index_keeps_first_of_colliding_names(html_doc):
    html_doc["elements"]["DIV"] = dict(html_doc["elements"]["div"], name="DIV", description="Shouted container")
    store = Store.from_document(load_schema("html"), html_doc)
    assert len(store.entries) == 2
    assert store.entry("DIV")["name"] == "div"
