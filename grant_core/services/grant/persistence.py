from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from grant_core.domain import Grant
from grant_core.events.signal import Signal
from grant_core.interfaces import GrantRepository

logger = logging.getLogger(__name__)


class GrantPersistenceMixin:
    _session: Session
    _grant_repo: GrantRepository

    def _save_grant(self, grant: Grant, previous_version: int, *signals: Signal[str]) -> Grant:
        try:
            self._grant_repo.update(grant, expected_version=previous_version)
            self._session.commit()
        except Exception as e:
            self._session.rollback()
            logger.error("Error saving grant %s: %s", grant.id, e)
            raise

        last = grant.history[-1] if grant.history else None
        logger.info(
            "Grant %s -> v%s (%s)",
            grant.id,
            grant.version,
            last.action if last else "update",
        )
        for signal in signals:
            signal.emit(grant.id)
        return grant


__all__ = ["GrantPersistenceMixin"]
