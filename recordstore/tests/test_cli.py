"""
Tests for the recordstore CLI.
"""

import json
import os
import tempfile

import pytest
from typer.testing import CliRunner

import cli.main
from cli.main import app
from recordstore.sealing import SealingKey

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Keep the CLI from replacing the root handlers during tests."""
    monkeypatch.setattr(cli.main, "setup_logging", lambda **kwargs: None)
    monkeypatch.delenv("RECORDSTORE_EXTENSION", raising=False)


def _write(path: str, data: bytes) -> None:
    with open(path, "wb") as f:
        f.write(data)


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "0.1.0" in result.stdout


def test_normalize_json_output():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "doc.json")
        _write(path, b'{"outer": {"inner": 5}, "flag": true, "names": ["a"]}')

        result = runner.invoke(app, ["record", "normalize", path, "--json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"flag": True, "names": ["a"], "outer": {"inner": 5}}


def test_normalize_table_reports_fallbacks():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "doc.json")
        _write(path, b'{"mixed": [1, "a"], "n": 1}')

        result = runner.invoke(app, ["record", "normalize", path])

    assert result.exit_code == 0
    assert "Fallback" in result.stdout
    assert "mixed" in result.stdout


def test_normalize_invalid_json():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "doc.json")
        _write(path, b"{broken")

        result = runner.invoke(app, ["record", "normalize", path, "--json"])

    assert result.exit_code == 2
    assert "error" in json.loads(result.stdout)


def test_normalize_missing_file():
    result = runner.invoke(app, ["record", "normalize", "/nonexistent/doc.json"])

    assert result.exit_code == 2


def test_inspect_record():
    with tempfile.TemporaryDirectory() as tmpdir:
        _write(os.path.join(tmpdir, "Settings.json"), b'{"name":"main","volume":3}')

        result = runner.invoke(app, ["record", "inspect", "Settings", "--dir", tmpdir, "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["record"] == {"name": "main", "volume": 3}
    assert payload["path"].endswith("Settings.json")


def test_inspect_missing_record():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = runner.invoke(app, ["record", "inspect", "Missing", "--dir", tmpdir])

    assert result.exit_code == 2


def test_key_generate_and_show():
    with tempfile.TemporaryDirectory() as tmpdir:
        key_path = os.path.join(tmpdir, "record.key")

        result = runner.invoke(app, ["key", "generate", "--path", key_path, "--json"])
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["key_id"] == SealingKey.load_from_file(key_path).key_id()

        again = runner.invoke(app, ["key", "generate", "--path", key_path])
        assert again.exit_code == 1

        shown = runner.invoke(app, ["key", "show", "--path", key_path])
        assert shown.exit_code == 0
        assert payload["key_id"] in shown.stdout


def test_seal_unseal_and_inspect():
    with tempfile.TemporaryDirectory() as tmpdir:
        key_path = os.path.join(tmpdir, "record.key")
        SealingKey.generate().save_to_file(key_path)
        record_path = os.path.join(tmpdir, "Settings.json")
        _write(record_path, b'{"name":"main"}')

        sealed = runner.invoke(app, ["seal", record_path, "--key", key_path])
        assert sealed.exit_code == 0
        with open(record_path, "rb") as f:
            assert f.read() != b'{"name":"main"}'

        inspected = runner.invoke(
            app, ["record", "inspect", "Settings", "--dir", tmpdir, "--key", key_path, "--json"]
        )
        assert inspected.exit_code == 0
        assert json.loads(inspected.stdout)["record"] == {"name": "main"}

        opened = runner.invoke(app, ["unseal", record_path, "--key", key_path])
        assert opened.exit_code == 0
        with open(record_path, "rb") as f:
            assert f.read() == b'{"name":"main"}'


def test_unseal_with_wrong_key():
    with tempfile.TemporaryDirectory() as tmpdir:
        key_path = os.path.join(tmpdir, "record.key")
        SealingKey.generate().save_to_file(key_path)
        record_path = os.path.join(tmpdir, "Settings.json")
        _write(record_path, SealingKey.generate().seal(b"{}"))

        result = runner.invoke(app, ["unseal", record_path, "--key", key_path])

    assert result.exit_code == 2
