"""Unit tests for the CLI entrypoint."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import Mock

import pytest

import marketing_workflow.main as cli
from marketing_workflow.llm.provider import LLMProvider
from marketing_workflow.workflow.step_log import StepLog


@pytest.fixture
def cli_env(monkeypatch, tmp_path: Path) -> Path:
    state = tmp_path / ".state"
    monkeypatch.setenv("MARKETING_STATE_PATH", str(state))
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    monkeypatch.chdir(tmp_path)
    return state


@pytest.fixture
def patched_llm(monkeypatch, mock_llm: Mock) -> Mock:
    monkeypatch.setattr(
        "marketing_workflow.service.LLMFactory.create", lambda _config: mock_llm
    )
    return mock_llm


def test_send_prints_result(cli_env: Path, patched_llm: Mock, capsys) -> None:
    code = cli.main(["send", "--input", "Dark mode toggle in settings", "--id", "evt-1"])

    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert out["featureBranding"]["result"]["feature_name"] == "NightShift"
    assert out["blogPost"]["result"] == "Full blog text..."
    assert (cli_env / "runs" / "create-marketing-plan-evt-1.json").exists()


def test_show_and_list(cli_env: Path, patched_llm: Mock, capsys) -> None:
    assert cli.main(["send", "--input", "Dark mode", "--id", "evt-2"]) == 0
    capsys.readouterr()

    assert cli.main(["show", "--run-id", "create-marketing-plan-evt-2"]) == 0
    shown = json.loads(capsys.readouterr().out)
    assert shown["state"] == "complete"

    assert cli.main(["list"]) == 0
    assert "create-marketing-plan-evt-2\tcomplete" in capsys.readouterr().out


def test_show_unknown_run(cli_env: Path) -> None:
    assert cli.main(["show", "--run-id", "nope"]) == 3


def test_failed_send_exits_nonzero(cli_env: Path, monkeypatch) -> None:
    llm = Mock(spec=LLMProvider)
    llm.complete.side_effect = RuntimeError("auth failed")
    monkeypatch.setattr("marketing_workflow.service.LLMFactory.create", lambda _config: llm)

    assert cli.main(["send", "--input", "Dark mode"]) == 1


def test_missing_api_key_is_configuration_error(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("MARKETING_LLM_OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("MARKETING_STATE_PATH", str(tmp_path / ".state"))
    monkeypatch.chdir(tmp_path)

    assert cli.main(["send", "--input", "Dark mode"]) == 2


def test_resume_of_executing_run_exits_3(cli_env: Path, patched_llm: Mock, capsys) -> None:
    StepLog(cli_env / "runs").create(
        run_id="create-marketing-plan-evt-3",
        function_id="create-marketing-plan",
        event={"name": "feature.created", "data": {"input": "Dark mode"}, "id": "evt-3"},
        owner="other-host:1:abc",
    )

    assert cli.main(["resume", "--run-id", "create-marketing-plan-evt-3"]) == 3
    assert "already executing" in capsys.readouterr().err
    assert patched_llm.complete.call_count == 0
