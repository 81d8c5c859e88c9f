# grant_infra/logging_config.py
from __future__ import annotations
import logging
from logging.handlers import RotatingFileHandler

from grant_infra.config import Settings
from grant_infra.operational_support import OperationalSupport, TraceIdLogFilter

LOG_FORMAT = "%(asctime)s [%(levelname)s] trace=%(trace_id)s %(name)s - %(message)s"
CONSOLE_FORMAT = "%(levelname)s [trace=%(trace_id)s]: %(message)s"


def setup_logging(settings: Settings) -> OperationalSupport:
    """
    Configure root logging for the grants backend.

    Writes a rotating ``grants.log`` under ``settings.log_dir`` and mirrors to
    the console. Returns the support-event recorder bound to the same folder.
    """
    settings.log_dir.mkdir(parents=True, exist_ok=True)
    log_file = settings.log_dir / "grants.log"

    root = logging.getLogger()
    root.setLevel(settings.log_level_value)

    # Re-running setup must not stack handlers
    root.handlers.clear()

    trace_filter = TraceIdLogFilter()

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=1_000_000,  # 1 MB per file
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.addFilter(trace_filter)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(file_handler)

    console = logging.StreamHandler()
    console.addFilter(trace_filter)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root.addHandler(console)

    root.info("Logging initialized. Log file at %s", log_file)
    support = OperationalSupport(settings.support_events_path, app_version=settings.app_version)
    support.emit_event(
        event_type="app.logging.initialized",
        message=f"Logging initialized at {log_file}",
        data={"log_file": str(log_file), "log_level": settings.log_level},
    )
    return support


__all__ = ["setup_logging", "LOG_FORMAT"]
