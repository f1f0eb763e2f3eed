"""Tests for the command-line report generator."""

from pathlib import Path

import pytest

from src.stage2_narrator import ReportError
from src.stage2_narrator import __main__ as cli

from conftest import MockLLMClient, write_report_project


@pytest.fixture
def fake_llm(monkeypatch):
    created = {}

    def factory(**kwargs):
        created.update(kwargs)
        return MockLLMClient("Revenue was steady.")

    monkeypatch.setattr(cli, "LLMClient", factory)
    return created


@pytest.mark.integration
def test_generates_configured_outputs(tmp_path, monkeypatch, fake_llm, capsys):
    monkeypatch.chdir(tmp_path)
    config_path = write_report_project(tmp_path / "project")

    result = cli.main(str(config_path), api_key="key")

    report = Path(result["outputs"]["md"])
    assert report == tmp_path / "project" / "output" / "report.md"
    assert report.read_text() == "# Quarterly Sales\n\nRevenue was steady.\n"
    assert fake_llm["api_key"] == "key"
    assert fake_llm["provider"] == "openrouter"
    assert "Report generated: Quarterly Sales" in capsys.readouterr().out


def test_requires_a_dataset(tmp_path, fake_llm):
    config_path = tmp_path / "report-pipeline.config.json"
    config_path.write_text('{"reportName": "Empty", "specFile": "spec.yml"}')

    with pytest.raises(ReportError, match="No dataset"):
        cli.main(str(config_path), api_key="key")


def test_api_key_from_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("OTHER=1\nLLM_API_KEY=from-file\n")

    assert cli._api_key_from_env_file(env_file) == "from-file"
    assert cli._api_key_from_env_file(tmp_path / "missing.env") is None
