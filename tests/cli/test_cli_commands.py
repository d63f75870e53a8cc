"""Tests for the CLI commands."""

import json
import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]

FIELDS = [
    {"id": "field_1", "type": "text", "key": "name", "label": "Name", "required": True,
     "schema": {"type": "string"}},
    {"id": "field_2", "type": "checkbox", "key": "agree", "label": "Agree",
     "schema": {"type": "boolean"}},
]


def _run(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, ".", *args],
        capture_output=True,
        text=True,
        cwd=ROOT,
        timeout=60,
    )


@pytest.fixture
def fields_file(tmp_path):
    path = tmp_path / "fields.json"
    path.write_text(json.dumps(FIELDS), encoding="utf-8")
    return path


@pytest.mark.integration
def test_help_lists_commands():
    """Help output names every command."""
    result = _run("--help")
    assert result.returncode == 0
    for command in ("build", "import", "validate", "rule", "env"):
        assert command in result.stdout


@pytest.mark.integration
def test_build_schema(fields_file):
    """build -f schema prints the JSON Schema."""
    result = _run("build", str(fields_file), "-f", "schema")
    assert result.returncode == 0
    schema = json.loads(result.stdout)
    assert schema["required"] == ["name"]


@pytest.mark.integration
def test_build_document_to_file(fields_file, tmp_path):
    """build writes a reloadable form document."""
    output = tmp_path / "form.json"
    result = _run("build", str(fields_file), "-o", str(output))
    assert result.returncode == 0
    document = json.loads(output.read_text(encoding="utf-8"))
    assert set(document) == {"schema", "uischema", "fields"}


@pytest.mark.integration
def test_import_schema(tmp_path):
    """import turns a JSON Schema into fields."""
    path = tmp_path / "schema.json"
    path.write_text(json.dumps({"properties": {"age": {"type": "integer"}}}), encoding="utf-8")
    result = _run("import", str(path))
    assert result.returncode == 0
    assert json.loads(result.stdout)[0]["type"] == "integer"


@pytest.mark.integration
def test_import_failure(tmp_path):
    """A schema without properties fails cleanly."""
    path = tmp_path / "schema.json"
    path.write_text("{}", encoding="utf-8")
    assert _run("import", str(path)).returncode == 1


@pytest.mark.integration
def test_import_numeric_title(tmp_path):
    """Non-string titles import without a traceback."""
    path = tmp_path / "schema.json"
    path.write_text(
        json.dumps({"properties": {"a": {"type": "string", "title": 5}}}), encoding="utf-8"
    )
    result = _run("import", str(path))
    assert result.returncode == 0
    assert "Traceback" not in result.stderr
    assert json.loads(result.stdout)[0]["label"] == "5"


@pytest.mark.integration
def test_validate(fields_file, tmp_path):
    """validate exits non-zero on structural issues."""
    assert _run("validate", str(fields_file)).returncode == 0
    broken = tmp_path / "broken.json"
    broken.write_text(json.dumps(FIELDS + [dict(FIELDS[0], id="field_3")]), encoding="utf-8")
    assert _run("validate", str(broken)).returncode == 1


@pytest.mark.integration
def test_rule(tmp_path):
    """rule prints the compiled rule."""
    path = tmp_path / "rows.json"
    path.write_text(json.dumps([{"dependsOn": "agree", "operator": "equals", "value": "true"}]))
    result = _run("rule", str(path), "-e", "HIDE")
    assert result.returncode == 0
    assert json.loads(result.stdout)["effect"] == "HIDE"


@pytest.mark.integration
def test_env():
    """env lists the configured variables."""
    result = _run("env")
    assert result.returncode == 0
    assert "FORMTREE_RADIO_MAX_OPTIONS" in result.stdout
