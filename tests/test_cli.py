from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from conflux.cli import app

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.delenv("CONFLUX_ENV", raising=False)
    (tmp_path / "base.json").write_text(json.dumps({"database": {"host": "db", "port": 5432}}))
    path = tmp_path / "conflux.yaml"
    path.write_text(
        yaml.dump(
            {
                "environment": "local",
                "environments": {
                    "local": {
                        "sources": [{"name": "base", "type": "file", "path": "base.json"}],
                        "defaults": {"debug": True},
                        "required": ["database.host"],
                    },
                    "incomplete": {
                        "sources": [{"name": "base", "type": "file", "path": "base.json"}],
                        "required": ["api.base_url"],
                    },
                    "strict": {
                        "sources": [
                            {"name": "base", "type": "file", "path": "base.json"},
                            {
                                "name": "remote",
                                "type": "remote",
                                "url": "https://config.invalid/app",
                                "headers": {"Authorization": "Bearer secret"},
                            },
                        ],
                        "required": ["api.base_url"],
                    },
                },
            }
        )
    )
    return path


def test_show(config_file: Path):
    result = runner.invoke(app, ["show", "--config", str(config_file)])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {"database": {"host": "db", "port": 5432}, "debug": True}


def test_show_flat(config_file: Path):
    result = runner.invoke(app, ["show", "--config", str(config_file), "--flat"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {
        "database.host": "db",
        "database.port": 5432,
        "debug": True,
    }


def test_get(config_file: Path):
    result = runner.invoke(app, ["get", "database.port", "--config", str(config_file)])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == 5432

    result = runner.invoke(app, ["get", "database.user", "--config", str(config_file)])
    assert result.exit_code == 1


def test_validate(config_file: Path):
    result = runner.invoke(app, ["validate", "--config", str(config_file)])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["valid"] is True


def test_validate_failure_exits_with_1(config_file: Path):
    result = runner.invoke(
        app, ["validate", "--config", str(config_file), "--env", "incomplete"]
    )
    assert result.exit_code == 1
    assert "Required configuration key missing: api.base_url" in result.output


def test_sources_redacts_headers(config_file: Path):
    result = runner.invoke(app, ["sources", "--config", str(config_file), "--env", "strict"])
    assert result.exit_code == 0, result.output
    rows = json.loads(result.stdout)
    assert [r["name"] for r in rows] == ["base", "remote"]
    assert rows[1]["type"] == "remote"
    assert rows[1]["options"]["headers"] == {"Authorization": "***"}
    assert "secret" not in result.stdout


def test_status(config_file: Path):
    result = runner.invoke(app, ["status", "--config", str(config_file)])
    assert result.exit_code == 0, result.output
    status = json.loads(result.stdout)
    assert status["loaded"] is True
    assert status["sources"] == ["base"]
    assert status["error_count"] == 0


def test_unknown_environment_exits_with_2(config_file: Path):
    result = runner.invoke(app, ["show", "--config", str(config_file), "--env", "nowhere"])
    assert result.exit_code == 2
    result = runner.invoke(app, ["sources", "--config", str(config_file), "--env", "nowhere"])
    assert result.exit_code == 2


def test_malformed_key_is_not_found(config_file: Path):
    for key in ("a..b", "database.", ".database"):
        result = runner.invoke(app, ["get", key, "--config", str(config_file)])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Key not found" in result.output


@pytest.mark.parametrize(
    "content",
    [
        "cache: true\n",
        "cache:\n  ttl: abc\n",
        "environment: local\nenvironments:\n  local:\n    sources:\n      - name: base\n",
    ],
)
def test_malformed_config_file_exits_with_1(tmp_path: Path, monkeypatch, content: str):
    monkeypatch.delenv("CONFLUX_ENV", raising=False)
    path = tmp_path / "conflux.yaml"
    path.write_text(content)

    for command in ("show", "sources"):
        result = runner.invoke(app, [command, "--config", str(path)])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Error:" in result.output
