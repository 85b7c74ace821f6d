import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from lsp_contract.cli.__main__ import main
from lsp_contract.cli.console import console

HOVER_PARAMS = {
    "textDocument": {"uri": "file:///a.txt"},
    "position": {"line": 3, "character": 7},
}


@pytest.fixture
def run(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(console, "width", 200)
    config_path = tmp_path / "lsp-contract.toml"

    def _run(*args: str):
        return CliRunner().invoke(main, ["--config", str(config_path), *args])

    return _run


def _write_json(path: Path, value) -> str:
    path.write_text(json.dumps(value))
    return str(path)


def test_methods(run):
    result = run("methods", "--catalog", "legacy", "--direction", "notification")
    assert result.exit_code == 0, result.output
    assert "legacy 2.1" in result.output
    assert "textDocument/didOpen" in result.output
    assert "textDocument/hover" not in result.output

    result = run("methods")
    assert result.exit_code == 0, result.output
    assert "standard 3.17" in result.output
    assert "textDocument/rangeFormatting" in result.output


def test_catalog_from_config(run, tmp_path: Path):
    (tmp_path / "lsp-contract.toml").write_text('catalog = "legacy"\n')
    result = run("methods")
    assert result.exit_code == 0, result.output
    assert "legacy 2.1" in result.output

    result = run("config")
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["catalog"] == "legacy"


def test_validate(run, tmp_path: Path):
    params = _write_json(tmp_path / "params.json", HOVER_PARAMS)
    result = run("validate", "textDocument/hover", params)
    assert result.exit_code == 0, result.output
    assert "Valid textDocument/hover params" in result.output

    invalid = _write_json(tmp_path / "invalid.json", {"textDocument": {"uri": "file:///a.txt"}})
    result = run("validate", "textDocument/hover", invalid)
    assert result.exit_code == 1
    assert "position" in result.output


def test_validate_reply(run, tmp_path: Path):
    error = _write_json(tmp_path / "error.json", {"code": -32601, "message": "no"})
    result = run("validate", "--result", "textDocument/hover", error)
    assert result.exit_code == 0, result.output
    assert "Valid textDocument/hover error" in result.output

    markup = _write_json(
        tmp_path / "markup.json", {"contents": {"kind": "markdown", "value": "x"}}
    )
    result = run("validate", "--result", "textDocument/hover", markup)
    assert result.exit_code == 0, result.output
    assert "Valid textDocument/hover result" in result.output

    result = run("validate", "-c", "legacy", "--result", "textDocument/hover", markup)
    assert result.exit_code == 1


def test_validate_usage_errors(run, tmp_path: Path):
    params = _write_json(tmp_path / "params.json", HOVER_PARAMS)
    assert run("validate", "textDocument/rename", params).exit_code == 2
    assert run("validate", "--result", "exit", params).exit_code == 2

    broken = tmp_path / "broken.json"
    broken.write_text("{")
    assert run("validate", "textDocument/hover", str(broken)).exit_code == 2


def test_check(run):
    result = run("check")
    assert result.exit_code == 0, result.output
    assert "No ambiguities found in standard catalog (20 methods)" in result.output

    result = run("check", "--catalog", "legacy")
    assert result.exit_code == 0, result.output
    assert "legacy catalog" in result.output
