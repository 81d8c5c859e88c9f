from __future__ import annotations

import logging
from pathlib import Path

import pytest

from grant_core.exceptions import ValidationError
from grant_infra import version as version_mod
from grant_infra.config import load_settings
from grant_infra.logging_config import setup_logging
from grant_infra.operational_support import OperationalSupport, bind_trace_id


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_load_settings_reads_environment(tmp_path):
    settings = load_settings(
        {
            "GRANTS_DATABASE_URL": "sqlite:///:memory:",
            "GRANTS_LOG_LEVEL": " debug ",
            "GRANTS_LOG_DIR": str(tmp_path / "logs"),
            "GRANTS_APP_VERSION": "2.0.0",
        }
    )

    assert settings.database_url == "sqlite:///:memory:"
    assert settings.log_level == "DEBUG"
    assert settings.log_level_value == logging.DEBUG
    assert settings.log_dir == tmp_path / "logs"
    assert settings.support_events_path == tmp_path / "logs" / "support-events.jsonl"
    assert settings.app_version == "2.0.0"


def test_load_settings_defaults_level_and_version(tmp_path, monkeypatch):
    monkeypatch.delenv("GRANTS_APP_VERSION", raising=False)
    settings = load_settings({"GRANTS_DATABASE_URL": "sqlite:///x.db", "GRANTS_LOG_DIR": str(tmp_path)})

    assert settings.log_level == "INFO"
    assert settings.app_version == version_mod._DEFAULT_APP_VERSION


def test_unknown_log_level_is_rejected():
    with pytest.raises(ValidationError) as exc:
        load_settings({"GRANTS_LOG_LEVEL": "chatty"})
    assert exc.value.code == "CONFIG_LOG_LEVEL"


def test_get_app_version_prefers_env_override(monkeypatch):
    monkeypatch.setenv("GRANTS_APP_VERSION", "9.9.9")
    assert version_mod.get_app_version() == "9.9.9"


def test_setup_logging_writes_trace_stamped_file(tmp_path, restore_root_logger):
    settings = load_settings(
        {
            "GRANTS_DATABASE_URL": "sqlite:///:memory:",
            "GRANTS_LOG_LEVEL": "INFO",
            "GRANTS_LOG_DIR": str(tmp_path / "logs"),
        }
    )

    support = setup_logging(settings)
    with bind_trace_id("inc-file"):
        logging.getLogger("grant_core.test").info("evaluated grant g-1")
    for handler in restore_root_logger.handlers:
        handler.flush()

    assert isinstance(support, OperationalSupport)
    assert len(restore_root_logger.handlers) == 2
    log_text = Path(tmp_path / "logs" / "grants.log").read_text(encoding="utf-8")
    assert "trace=inc-file grant_core.test - evaluated grant g-1" in log_text
    events = support.read_events()
    assert [e["event_type"] for e in events] == ["app.logging.initialized"]
