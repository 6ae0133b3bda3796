"""Unit tests for configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from ticketflow.core.config import ProviderConfig, StoreConfig, WorkflowSettings


def test_provider_config_defaults() -> None:
    config = ProviderConfig()

    assert config.kind == "heuristic"
    assert config.openai_api_key is None
    assert config.openai_temperature == 0.0


def test_store_config_defaults() -> None:
    config = StoreConfig()

    assert config.backend == "memory"
    assert config.path == Path(".state/idempotency.json")


def test_settings_composition() -> None:
    settings = WorkflowSettings(log_level="DEBUG")

    assert settings.log_level == "DEBUG"
    assert isinstance(settings.provider, ProviderConfig)
    assert isinstance(settings.store, StoreConfig)


def test_settings_load_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TICKETFLOW_STORE_BACKEND", "json")
    monkeypatch.setenv("TICKETFLOW_STORE_PATH", "/var/lib/ticketflow/keys.json")
    monkeypatch.setenv("TICKETFLOW_LOG_LEVEL", "WARNING")

    settings = WorkflowSettings()

    assert settings.store.backend == "json"
    assert settings.store.path == Path("/var/lib/ticketflow/keys.json")
    assert settings.log_level == "WARNING"


def test_settings_load_from_dotenv(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text(
        "\n".join(
            [
                "TICKETFLOW_PROVIDER_KIND=openai",
                "TICKETFLOW_PROVIDER_OPENAI_API_KEY=test-key",
                "",
            ]
        ),
        encoding="utf-8",
    )

    settings = WorkflowSettings()

    assert settings.provider.kind == "openai"
    assert settings.provider.openai_api_key == "test-key"


def test_invalid_backend_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TICKETFLOW_STORE_BACKEND", "redis")

    with pytest.raises(ValueError):
        StoreConfig()


@pytest.mark.parametrize(
    "log_level,debug,expected",
    [("info", False, "INFO"), ("warning", True, "DEBUG"), ("chatty", False, "INFO")],
)
def test_effective_log_level(log_level: str, debug: bool, expected: str) -> None:
    settings = WorkflowSettings(log_level=log_level, debug=debug)

    assert settings.effective_log_level == expected
