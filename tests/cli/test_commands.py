"""Tests for the kvstorage CLI."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner
from fastapi import FastAPI
from tarantool.error import NetworkError

from fakes import FakeTarantoolSession

from kvstorage.cli.main import cli

CONNECTION_PATH = "kvstorage.storage.connection.tarantool.Connection"


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ["CONFIG_PATH", "KV_BACKEND", "TT_URI", "HTTP_HOST", "HTTP_PORT"]:
        monkeypatch.delenv(name, raising=False)


class TestCheck:
    """Tests for `kvstorage check`."""

    def test_reachable_engine(self, cli_runner: CliRunner) -> None:
        session = FakeTarantoolSession()
        with patch(CONNECTION_PATH, return_value=session):
            result = cli_runner.invoke(cli, ["check"])

        assert result.exit_code == 0
        assert "Storage at localhost:3301 is reachable" in result.output
        assert ("ping", ()) in session.calls
        assert session.closed

    def test_unreachable_engine(self, cli_runner: CliRunner) -> None:
        with patch(CONNECTION_PATH, side_effect=OSError("connection refused")):
            result = cli_runner.invoke(cli, ["check"])

        assert result.exit_code == 1
        assert "Storage check failed" in result.output

    def test_ping_failure(self, cli_runner: CliRunner) -> None:
        session = FakeTarantoolSession()
        session.ping = MagicMock(side_effect=NetworkError(Exception("connection lost")))
        with patch(CONNECTION_PATH, return_value=session):
            result = cli_runner.invoke(cli, ["check"])

        assert result.exit_code == 1
        assert "Storage check failed" in result.output
        assert session.closed

    def test_memory_backend(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["check"], env={"KV_BACKEND": "memory"})

        assert result.exit_code == 0
        assert "nothing to check" in result.output

    def test_bad_config_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        result = cli_runner.invoke(cli, ["check", "--config", str(tmp_path / "absent.yaml")])

        assert result.exit_code == 1
        assert "Could not read config" in result.output


class TestServe:
    """Tests for `kvstorage serve`."""

    def test_serve_uses_config(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("http_server:\n  port: 9000\nstorage:\n  backend: memory\n")

        with patch("uvicorn.run") as run:
            result = cli_runner.invoke(cli, ["serve", "--config", str(path)])

        assert result.exit_code == 0
        app = run.call_args.args[0]
        assert isinstance(app, FastAPI)
        assert run.call_args.kwargs["host"] == "0.0.0.0"
        assert run.call_args.kwargs["port"] == 9000

    def test_serve_flags_override_config(self, cli_runner: CliRunner) -> None:
        with patch("uvicorn.run") as run:
            result = cli_runner.invoke(cli, ["serve", "--host", "127.0.0.1", "--port", "8081"])

        assert result.exit_code == 0
        assert run.call_args.kwargs["host"] == "127.0.0.1"
        assert run.call_args.kwargs["port"] == 8081

    def test_version(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--version"])

        assert "0.1.0" in result.output
