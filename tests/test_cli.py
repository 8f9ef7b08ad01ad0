import json, subprocess, sys
from pathlib import Path

import pytest

from webref.config import Settings
from webref.contracts import run_validation, verify
from webref.store import DataFileNotFoundError

from conftest import JS_DOC, write_doc


def _run(*args, cwd=None, env=None):
    res = subprocess.run([sys.executable, "-m", "webref", *args], capture_output=True, text=True,
                         cwd=cwd, env=env)
    return res.returncode, res.stdout, res.stderr


# ---------------------------------------------------------------------------
# verification engine
# ---------------------------------------------------------------------------

def test_verify_writes_report(data_dir, tmp_path):
    report_dir = tmp_path / "report"
    rc = verify("javascript", data_dir / "js-language.json", report_dir=report_dir)
    assert rc == 0
    report = json.loads((report_dir / "verify_javascript.json").read_text(encoding="utf-8"))
    assert report["ok"] is True
    assert report["error_count"] == 0
    assert report["summary"]["entries"] == 3


def test_verify_fails_on_inconsistent_data(tmp_path, js_doc):
    js_doc["metadata"]["totalMethods"] = 1
    path = write_doc(tmp_path / "js.json", js_doc)
    assert verify("js", path) == 1


def test_run_validation_missing_file(tmp_path):
    with pytest.raises(DataFileNotFoundError):
        run_validation("html", tmp_path / "html-elements.json")


# ---------------------------------------------------------------------------
# configuration
# ---------------------------------------------------------------------------

def test_settings_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("WEBREF_DATA_ROOT", str(tmp_path))
    monkeypatch.delenv("WEBREF_REPORT_DIR", raising=False)
    settings = Settings.from_env()
    assert settings.data_file("html") == tmp_path / "html-elements.json"
    assert settings.report_dir == tmp_path / "report"

    monkeypatch.setenv("WEBREF_REPORT_DIR", str(tmp_path / "out"))
    assert Settings.from_env().report_dir == tmp_path / "out"


# ---------------------------------------------------------------------------
# command line
# ---------------------------------------------------------------------------

def test_cli_validate(data_dir, tmp_path):
    rc, out, err = _run("validate", "javascript", "--data", str(data_dir / "js-language.json"),
                        "--report-dir", str(tmp_path / "rep"))
    assert rc == 0, err
    assert "OK" in out
    assert (tmp_path / "rep" / "verify_javascript.json").exists()


def test_cli_validate_all_from_env(data_dir, tmp_path):
    import os
    env = dict(os.environ, WEBREF_DATA_ROOT=str(data_dir))
    rc, out, err = _run("validate", "all", "--no-report", env=env, cwd=tmp_path)
    assert rc == 0, err


def test_cli_validate_inconsistent(tmp_path):
    doc = json.loads(json.dumps(JS_DOC))
    doc["categories"]["Declarations"]["name"] = "Decls"
    path = write_doc(tmp_path / "js.json", doc)
    rc, out, _ = _run("validate", "js", "--data", str(path), "--no-report")
    assert rc == 1
    assert "Category name mismatch: Declarations vs Decls" in out


def test_cli_exists_suggests(data_dir):
    rc, out, _ = _run("exists", "javascript", "array", "--data", str(data_dir / "js-language.json"))
    assert rc == 1
    assert "Did you mean: Array?" in out

    rc, out, _ = _run("exists", "javascript", "Array", "isArray", "--data", str(data_dir / "js-language.json"))
    assert rc == 0
    assert "static" in out


def test_cli_missing_data_file(tmp_path):
    rc, out, _ = _run("stats", "css", "--data", str(tmp_path / "nope.json"))
    assert rc == 1
    assert "webref build css" in out


def test_cli_unknown_dataset(data_dir):
    rc, out, _ = _run("exists", "cobol", "x", "--data", str(data_dir / "js-language.json"))
    assert rc == 1
    assert "unknown dataset" in out


def test_cli_usage_error():
    rc, _, _ = _run("frobnicate")
    assert rc == 2


def test_cli_build_then_info(tmp_path):
    src = tmp_path / "tree.txt"
    src.write_text("## Indexed collections\n#### <Array>\nOrdered list of values\nMethods:\n- map - Maps values\n",
                   encoding="utf-8")
    out_path = tmp_path / "data" / "js-language.json"
    rc, _, err = _run("build", "javascript", str(src), "--out", str(out_path))
    assert rc == 0, err
    assert out_path.exists()

    rc, out, err = _run("info", "js", "Array", "--json", "--data", str(out_path))
    assert rc == 0, err
    assert json.loads(out)["child_count"] == 1


def test_cli_syntax(tmp_path):
    script = tmp_path / "a.js"
    script.write_text("function f() { return [1, 2; }", encoding="utf-8")
    rc, out, _ = _run("syntax", "js", str(script))
    assert rc == 1
    assert "Mismatched bracket" in out


def test_cli_check_document(data_dir, tmp_path):
    page = tmp_path / "index.html"
    page.write_text('<div id="app"><img src="a.png" alt=""></div>', encoding="utf-8")
    rc, out, err = _run("check-document", str(page),
                        "--html-data", str(data_dir / "html-elements.json"),
                        "--js-data", str(data_dir / "js-language.json"),
                        "--css-data", str(data_dir / "css-language.json"))
    assert rc == 0, err
    assert "Cross-references" in out


def test_cli_relations_and_support(data_dir):
    html_data = str(data_dir / "html-elements.json")
    rc, out, err = _run("relations", "img", "--data", html_data)
    assert rc == 0, err
    assert "parents (1): div" in out
    assert "children (0): none" in out

    rc, out, _ = _run("support", "img", "edge", "--data", html_data)
    assert rc == 0
    assert "edge: unknown" in out

    rc, out, _ = _run("support", "blink", "--data", html_data)
    assert rc == 1
    assert "No browser support data for blink" in out


def test_cli_selector():
    rc, out, _ = _run("selector", "ul > li", ".card")
    assert rc == 0
    assert "ul > li: child" in out
    assert ".card: class" in out

    rc, out, _ = _run("selector", "div..main")
    assert rc == 1
    assert "Unknown selector: div..main" in out
    assert "Try: .class, #id, element" in out
