"""Smoke tests for the click command tree."""

import tomllib

from click.testing import CliRunner

from agentmonitor.cli import cli
from agentmonitor.config import AppConfig, init_config


class TestCli:
    def test_groups_registered(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        for name in ("server", "config", "chat", "status"):
            assert name in result.output

    def test_chat_canonical(self, monkeypatch):
        monkeypatch.setattr("agentmonitor.commands.chat_cmd.load_config", AppConfig)
        result = CliRunner().invoke(cli, ["chat", "canonical", "alice__product-owner"])
        assert result.exit_code == 0
        assert result.output.strip() == "product-owner__alice"

    def test_config_set_requires_file(self, monkeypatch, tmp_path):
        monkeypatch.setattr("agentmonitor.commands.config_cmd.DEFAULT_CONFIG_PATH", tmp_path / "none.toml")
        result = CliRunner().invoke(cli, ["config", "set", "server.port", "5000"])
        assert "config init" in result.output

    def test_config_set_writes(self, monkeypatch, tmp_path):
        path = init_config(tmp_path / "config.toml")
        monkeypatch.setattr("agentmonitor.commands.config_cmd.DEFAULT_CONFIG_PATH", path)
        result = CliRunner().invoke(cli, ["config", "set", "server.port", "5000"])
        assert result.exit_code == 0
        with open(path, "rb") as f:
            assert tomllib.load(f)["server"]["port"] == 5000

    def test_config_set_coerces_and_validates(self, monkeypatch, tmp_path):
        path = init_config(tmp_path / "config.toml")
        monkeypatch.setattr("agentmonitor.commands.config_cmd.DEFAULT_CONFIG_PATH", path)
        runner = CliRunner()
        assert runner.invoke(cli, ["config", "set", "dispatch.timeout", "2.5"]).exit_code == 0
        assert runner.invoke(cli, ["config", "set", "chat.sla_window", "soon"]).exit_code != 0
        assert runner.invoke(cli, ["config", "set", "general.nope", "x"]).exit_code != 0
        with open(path, "rb") as f:
            data = tomllib.load(f)
        assert data["dispatch"]["timeout"] == 2.5
        assert data["chat"]["sla_window"] == 120
