from __future__ import annotations

import logging
from datetime import date
from typing import Any

from sqlalchemy.orm import Session

from grant_core.domain import (
    ComplianceRequirement,
    Grant,
    GrantStatus,
    GrantType,
    ReportingFrequency,
    RequirementType,
    Severity,
)
from grant_core.events.domain_events import domain_events
from grant_core.exceptions import NotFoundError, ValidationError
from grant_core.interfaces import GrantRepository, RequirementRepository
from grant_core.services.grant.persistence import GrantPersistenceMixin
from grant_core.services.grant.validation import GrantValidationMixin

logger = logging.getLogger(__name__)


class GrantLifecycleMixin(GrantValidationMixin, GrantPersistenceMixin):
    _session: Session
    _grant_repo: GrantRepository
    _requirement_repo: RequirementRepository

    def create_grant(
        self,
        title: str,
        start_date: date,
        end_date: date,
        total_funding: float = 0.0,
        *,
        grant_number: str = "",
        description: str = "",
        grant_type: GrantType = GrantType.FEDERAL,
        awarded_amount: float | None = None,
        funding_source: str = "",
        grant_manager: str = "",
        reporting_frequency: ReportingFrequency = ReportingFrequency.QUARTERLY,
        created_by: str = "",
        **extra: Any,
    ) -> Grant:
        self._validate_title(title)
        self._validate_window(start_date, end_date)
        self._validate_grant_number(grant_number)

        grant = Grant.create(
            title=title.strip(),
            start_date=start_date,
            end_date=end_date,
            total_funding=float(total_funding or 0.0),
            awarded_amount=float(total_funding if awarded_amount is None else awarded_amount),
            grant_number=grant_number.strip(),
            description=description.strip(),
            grant_type=grant_type,
            funding_source=funding_source.strip(),
            grant_manager=grant_manager.strip(),
            reporting_frequency=reporting_frequency,
            created_by=created_by,
            updated_by=created_by,
            **extra,
        )

        try:
            self._grant_repo.add(grant)
            self._session.commit()
        except Exception as e:
            self._session.rollback()
            logger.error("Error creating grant: %s", e)
            raise

        logger.info("Created grant %s - %s", grant.id, grant.title)
        domain_events.grant_changed.emit(grant.id)
        return grant

    def update_status(
        self,
        grant_id: str,
        status: GrantStatus,
        *,
        actor: str | None = None,
        expected_version: int | None = None,
    ) -> Grant:
        grant = self._require_grant(grant_id)
        self._check_version(grant, expected_version)
        previous = grant.version
        grant.update_status(status, actor)
        return self._save_grant(grant, previous, domain_events.grant_changed)

    def update_funding(
        self,
        grant_id: str,
        total_funding: float,
        *,
        actor: str | None = None,
        expected_version: int | None = None,
    ) -> Grant:
        if total_funding is None or total_funding < 0:
            raise ValidationError("Grant total funding cannot be negative.", code="GRANT_NEGATIVE_FUNDING")
        grant = self._require_grant(grant_id)
        self._check_version(grant, expected_version)
        previous = grant.version
        grant.update_funding(float(total_funding), actor)
        return self._save_grant(grant, previous, domain_events.grant_changed, domain_events.expenditures_changed)

    def delete_grant(self, grant_id: str) -> None:
        grant = self._require_grant(grant_id)
        try:
            self._grant_repo.delete(grant.id)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info("Deleted grant %s - %s", grant.id, grant.title)
        domain_events.grant_changed.emit(grant_id)

    def add_requirement(
        self,
        name: str,
        requirement_type: RequirementType | str,
        *,
        grant_id: str | None = None,
        severity: Severity | str = Severity.MEDIUM,
        description: str = "",
        applicable_from: date | None = None,
        due_date: date | None = None,
        parameters: dict[str, Any] | None = None,
        actor: str | None = None,
    ) -> ComplianceRequirement:
        """Attach a requirement to one grant, or to every grant when ``grant_id`` is None."""
        if not name or not name.strip():
            raise ValidationError("Requirement name cannot be empty.", code="REQUIREMENT_NAME_EMPTY")
        requirement = ComplianceRequirement.create(
            name=name.strip(),
            requirement_type=requirement_type,
            severity=severity,
            description=description.strip(),
            applicable_from=applicable_from,
            due_date=due_date,
            parameters=dict(parameters or {}),
        )

        if grant_id is None:
            try:
                self._requirement_repo.add(requirement)
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise
            logger.info("Added program-wide requirement %s - %s", requirement.id, requirement.name)
            return requirement

        grant = self._require_grant(grant_id)
        previous = grant.version
        grant.add_compliance_requirement(requirement, actor)
        self._save_grant(grant, previous, domain_events.compliance_changed)
        return requirement

    def remove_shared_requirement(self, requirement_id: str) -> None:
        requirement = self._requirement_repo.get(requirement_id)
        if requirement is None or requirement.grant_id is not None:
            raise NotFoundError("Program-wide requirement not found.", code="REQUIREMENT_NOT_FOUND")
        try:
            self._requirement_repo.delete(requirement_id)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise


__all__ = ["GrantLifecycleMixin"]
