import os
import tempfile
from types import SimpleNamespace

import pytest

typer = pytest.importorskip("typer")
from typer.testing import CliRunner
from rollingindex import cli
from rollingindex import config
from rollingindex.opensearch.client import ConnectionFailedError


def _cfg(**overrides):
    values = dict(
        opensearch_host="localhost",
        opensearch_port=9200,
        index_name="msg",
        template_name="msg-template",
        index_pattern="msg-*",
        template_api="legacy",
        granularity="minute-of-day",
        search_limit=100,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.fixture
def wired(monkeypatch, fake_client):
    monkeypatch.setattr(cli, "load_config", lambda: _cfg())
    monkeypatch.setattr(cli, "get_opensearch_client", lambda cfg: fake_client)
    monkeypatch.setattr(cli, "check_connection", lambda client, cfg: None)
    return fake_client


def test_cli_help():
    runner = CliRunner()
    result = runner.invoke(cli.app, ["--help"])
    assert result.exit_code == 0
    assert "Usage" in result.output or "usage" in result.output
    assert "--env" in result.output


def test_cli_target(monkeypatch):
    monkeypatch.setattr(cli, "load_config", lambda: _cfg())
    runner = CliRunner()
    result = runner.invoke(cli.app, ["target", "--at", "2020-05-07T22:10:58"])
    assert result.exit_code == 0
    assert "write: msg-22-10" in result.output
    assert "read:  msg" in result.output


def test_cli_target_rejects_bad_timestamp(monkeypatch):
    monkeypatch.setattr(cli, "load_config", lambda: _cfg())
    runner = CliRunner()
    result = runner.invoke(cli.app, ["target", "--at", "yesterday"])
    assert result.exit_code != 0


def test_cli_init_idempotent(wired):
    runner = CliRunner()
    result1 = runner.invoke(cli.app, ["init"])
    assert result1.exit_code == 0
    assert "initialized" in result1.output

    result2 = runner.invoke(cli.app, ["init"])
    assert result2.exit_code == 0
    assert wired.indices.put_calls == 1


def test_cli_write_then_search(wired):
    runner = CliRunner()
    result = runner.invoke(cli.app, ["write", "first message", "--at", "2020-05-07T22:10:58Z"])
    assert result.exit_code == 0
    assert result.output.startswith("msg-22-10 ")

    result = runner.invoke(cli.app, ["write", "second message", "--at", "2020-05-07T22:13:52Z"])
    assert result.exit_code == 0

    result = runner.invoke(cli.app, ["search"])
    assert result.exit_code == 0
    lines = [line for line in result.output.splitlines() if line.startswith("msg-")]
    assert len(lines) == 2

    result = runner.invoke(cli.app, ["search", "--q", "second"])
    assert result.exit_code == 0
    lines = [line for line in result.output.splitlines() if line.startswith("msg-")]
    assert len(lines) == 1
    assert lines[0].startswith("msg-22-13 ")
    assert lines[0].endswith("second message")


def test_cli_write_reports_written_bucket(wired):
    runner = CliRunner()
    result = runner.invoke(cli.app, ["write", "hello", "--at", "2020-05-07T22:10:58+02:00"])
    assert result.exit_code == 0
    index_name, doc_id = result.output.split()
    assert index_name == wired.index_calls[-1]["index"] == "msg-20-10"
    assert doc_id in wired.docs[index_name]


def test_cli_init_fails_when_unreachable(monkeypatch):
    def _refuse(client, cfg):
        raise ConnectionFailedError("Cannot connect to OpenSearch at localhost:9200")

    monkeypatch.setattr(cli, "load_config", lambda: _cfg())
    monkeypatch.setattr(cli, "get_opensearch_client", lambda cfg: object())
    monkeypatch.setattr(cli, "check_connection", _refuse)
    runner = CliRunner()
    result = runner.invoke(cli.app, ["init"])
    assert result.exit_code == 1
    assert "Cannot connect" in result.output


def test_cli_env_flag_sets_dotenv_path(monkeypatch):
    monkeypatch.setattr(cli, "load_config", lambda: _cfg())
    with tempfile.NamedTemporaryFile(mode='w', suffix='.env', delete=False) as f:
        f.write("ROLLINGINDEX_INDEX_NAME=custom\n")
        temp_env_path = f.name

    try:
        runner = CliRunner()
        result = runner.invoke(cli.app, ["--env", temp_env_path, "target"])
        assert result.exit_code == 0
        assert config._custom_dotenv_path == temp_env_path
        assert config._dotenv_loaded == False
    finally:
        os.unlink(temp_env_path)
        config._dotenv_loaded = False
        config._custom_dotenv_path = None
