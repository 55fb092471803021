"""Tests for configuration loading and the CLI."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from main import cli
from physio.config import DEFAULT_CONFIG, load_config


class TestLoadConfig:
    def test_missing_file_returns_defaults(self, tmp_path) -> None:
        assert load_config(tmp_path / "absent.yaml") == DEFAULT_CONFIG

    def test_partial_file_is_merged_over_defaults(self, tmp_path) -> None:
        path = tmp_path / "app.yaml"
        path.write_text("consult:\n  default_severity: severe\nllm:\n  timeout_seconds: 5\n")
        cfg = load_config(path)
        assert cfg["consult"] == {"default_severity": "severe", "default_age": 30}
        assert cfg["llm"]["timeout_seconds"] == 5
        assert cfg["llm"]["chat_format"] == DEFAULT_CONFIG["llm"]["chat_format"]

    def test_defaults_are_not_mutated(self, tmp_path) -> None:
        cfg = load_config(tmp_path / "absent.yaml")
        cfg["consult"]["default_age"] = 99
        assert DEFAULT_CONFIG["consult"]["default_age"] == 30

    def test_non_mapping_file_rejected(self, tmp_path) -> None:
        path = tmp_path / "app.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError):
            load_config(path)

    def test_repository_config_loads(self) -> None:
        cfg = load_config()
        assert set(cfg) >= {"llm", "consult", "api", "logging"}


@pytest.fixture
def quiet_config(tmp_path) -> str:
    path = tmp_path / "quiet.yaml"
    path.write_text("logging:\n  level: ERROR\n")
    return str(path)


class TestCli:
    def test_check_kb(self, quiet_config: str) -> None:
        result = CliRunner().invoke(cli, ["--config", quiet_config, "check-kb"])
        assert result.exit_code == 0
        assert "pathology signatures" in result.output

    def test_consult(self, tmp_path, quiet_config: str, sciatica_intake: dict) -> None:
        path = tmp_path / "intake.json"
        path.write_text(json.dumps(sciatica_intake))
        result = CliRunner().invoke(cli, ["--config", quiet_config, "consult", "--intake", str(path)])
        assert result.exit_code == 0
        assert json.loads(result.output)["diagnosis"]["primary"] == "lumbar_disc_herniation"

    def test_consult_malformed_intake(self, tmp_path, quiet_config: str) -> None:
        path = tmp_path / "intake.json"
        path.write_text(json.dumps(["not", "a", "record"]))
        result = CliRunner().invoke(cli, ["--config", quiet_config, "consult", "--intake", str(path)])
        assert result.exit_code != 0
        assert "Intake must be a mapping" in result.output

    def test_summarize_sim(self, tmp_path, quiet_config: str, sciatica_history: list) -> None:
        path = tmp_path / "history.json"
        path.write_text(json.dumps(sciatica_history))
        result = CliRunner().invoke(
            cli, ["--config", quiet_config, "summarize", "--history", str(path)]
        )
        assert result.exit_code == 0
        assert json.loads(result.output)["is_ai"] is False
