from __future__ import annotations

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config

from grant_infra.operational_support import redact_text

logger = logging.getLogger(__name__)


def migration_dir() -> Path:
    # grant_infra/migrate.py -> project root
    return Path(__file__).resolve().parents[1] / "migration"


def run_migrations(db_url: str, *, script_location: Path | None = None) -> None:
    """Bring the schema at ``db_url`` up to the latest Alembic revision."""
    location = script_location or migration_dir()
    alembic_ini = location / "alembic.ini"
    if not location.exists():
        raise RuntimeError(f"Alembic script_location missing: {location}")
    if not alembic_ini.exists():
        raise RuntimeError(f"Alembic config missing: {alembic_ini}")

    cfg = Config(str(alembic_ini))
    cfg.set_main_option("script_location", str(location))
    cfg.set_main_option("sqlalchemy.url", db_url)
    cfg.attributes["configure_logger"] = False

    logger.info("Upgrading schema at %s", redact_text(db_url))
    command.upgrade(cfg, "head")


__all__ = ["run_migrations", "migration_dir"]
