"""Unit tests for the CLI entrypoint."""

from __future__ import annotations

import json

import pytest

from ticketflow.orchestrator.main import main


def test_samples_lists_seeded_tickets(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["samples"]) == 0

    out = capsys.readouterr().out
    assert "TICKET-001\tCannot reset password" in out


def test_process_prints_outcome(capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["process", "--ticket-id", "T-2", "--text", "feature request: dark mode"])

    assert code == 0
    outcome = json.loads(capsys.readouterr().out)
    assert outcome["ticket_id"] == "T-2"
    assert outcome["final_status"] == "resolved"


def test_resolve_unknown_ticket_fails(capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["resolve", "--ticket-id", "TICKET-404"])

    assert code == 1
    err = capsys.readouterr().err.strip().splitlines()[-1]
    assert json.loads(err)["error"]["kind"] == "NotFound"


def test_openai_without_key_is_configuration_error(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("TICKETFLOW_PROVIDER_KIND", "openai")

    assert main(["process", "--ticket-id", "T-1", "--text", "hello"]) == 2
    assert "Configuration error" in capsys.readouterr().err


def test_json_store_persists_between_runs(
    monkeypatch: pytest.MonkeyPatch, tmp_path, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("TICKETFLOW_STORE_BACKEND", "json")
    monkeypatch.setenv("TICKETFLOW_STORE_PATH", str(tmp_path / "keys.json"))

    assert main(["process", "--ticket-id", "T-1", "--text", "urgent: cannot reset password"]) == 0
    assert main(["process", "--ticket-id", "T-1", "--text", "something else entirely"]) == 1

    err = capsys.readouterr().err.strip().splitlines()[-1]
    assert json.loads(err)["error"]["kind"] == "IdempotencyMismatch"
    assert (tmp_path / "keys.json").exists()
