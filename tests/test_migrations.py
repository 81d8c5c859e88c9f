from __future__ import annotations

from datetime import date

from sqlalchemy import inspect

from grant_infra.db.base import build_engine, build_session_factory
from grant_infra.migrate import run_migrations
from grant_infra.services import build_service_graph


def test_migrations_create_schema_usable_by_services(tmp_path):
    db_url = f"sqlite:///{(tmp_path / 'grants.db').as_posix()}"

    run_migrations(db_url)
    run_migrations(db_url)

    engine = build_engine(db_url)
    try:
        tables = set(inspect(engine).get_table_names())
        assert {
            "grants",
            "milestones",
            "expenditures",
            "kpis",
            "grant_documents",
            "report_submissions",
            "compliance_requirements",
            "grant_history",
            "alembic_version",
        } <= tables

        session = build_session_factory(engine)()
        try:
            gs = build_service_graph(session).grant_service
            grant = gs.create_grant("Migrated grant", date(2024, 1, 1), date(2024, 12, 31), total_funding=1_000.0)
            gs.add_milestone(grant.id, "Kickoff", date(2024, 1, 31))
            assert gs.get_grant(grant.id).milestones[0].name == "Kickoff"
        finally:
            session.close()
    finally:
        engine.dispose()
