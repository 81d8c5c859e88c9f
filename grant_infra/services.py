from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from grant_core.services.grant import GrantService
from grant_core.services.reporting import ReportingService
from grant_infra.config import Settings, load_settings
from grant_infra.db.base import build_engine, build_session_factory
from grant_infra.db.compliance.repository import SqlAlchemyRequirementRepository
from grant_infra.db.grant.repository import SqlAlchemyGrantRepository
from grant_infra.logging_config import setup_logging
from grant_infra.migrate import run_migrations

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceGraph:
    session: Session
    grant_service: GrantService
    reporting_service: ReportingService

    def as_dict(self) -> dict[str, Any]:
        return {
            "session": self.session,
            "grant_service": self.grant_service,
            "reporting_service": self.reporting_service,
        }


def build_service_graph(session: Session) -> ServiceGraph:
    grant_repo = SqlAlchemyGrantRepository(session)
    requirement_repo = SqlAlchemyRequirementRepository(session)

    grant_service = GrantService(session, grant_repo, requirement_repo)
    reporting_service = ReportingService(grant_service)

    return ServiceGraph(
        session=session,
        grant_service=grant_service,
        reporting_service=reporting_service,
    )


def bootstrap(settings: Settings | None = None) -> ServiceGraph:
    """Configure logging, migrate the schema and open a session-backed graph."""
    settings = settings or load_settings()
    support = setup_logging(settings)
    support.track_domain_events()

    run_migrations(settings.database_url)
    session = build_session_factory(build_engine(settings.database_url))()
    logger.info("Grant services ready (version %s)", settings.app_version)
    return build_service_graph(session)


__all__ = ["ServiceGraph", "build_service_graph", "bootstrap"]
