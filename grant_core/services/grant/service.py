from __future__ import annotations

from sqlalchemy.orm import Session

from grant_core.interfaces import GrantRepository, RequirementRepository
from grant_core.services.grant.activity import GrantActivityMixin
from grant_core.services.grant.lifecycle import GrantLifecycleMixin
from grant_core.services.grant.query import GrantQueryMixin


class GrantService(GrantLifecycleMixin, GrantActivityMixin, GrantQueryMixin):
    """Grant service orchestrator: wiring repositories + composing mixins."""

    def __init__(
        self,
        session: Session,
        grant_repo: GrantRepository,
        requirement_repo: RequirementRepository,
    ):
        self._session: Session = session
        self._grant_repo: GrantRepository = grant_repo
        self._requirement_repo: RequirementRepository = requirement_repo


__all__ = ["GrantService"]
