# tests/conftest.py
from datetime import date

import pytest

from grant_core.domain import Grant
from grant_infra.db.base import Base, build_engine, build_session_factory
from grant_infra.services import build_service_graph


@pytest.fixture
def session():
    # separate in-memory DB for tests
    engine = build_engine("sqlite:///:memory:")
    TestingSessionLocal = build_session_factory(engine)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def services(session):
    return build_service_graph(session).as_dict()


@pytest.fixture
def calendar_year_grant():
    """Unsaved 2023 grant with 100k funding, built straight from the domain."""
    return Grant.create(
        "Community Health Outreach",
        date(2023, 1, 1),
        date(2023, 12, 31),
        total_funding=100_000.0,
        grant_manager="Dana Ortiz",
    )
