from __future__ import annotations

from typing import List

from grant_core.domain import ComplianceRequirement, Grant, GrantStatus
from grant_core.interfaces import GrantRepository, RequirementRepository
from grant_core.services.grant.validation import GrantValidationMixin


class GrantQueryMixin(GrantValidationMixin):
    _grant_repo: GrantRepository
    _requirement_repo: RequirementRepository

    def get_grant(self, grant_id: str) -> Grant:
        return self._require_grant(grant_id)

    def list_grants(self, status: GrantStatus | None = None) -> List[Grant]:
        grants = self._grant_repo.list_all()
        if status is not None:
            grants = [g for g in grants if g.status == status]
        grants.sort(key=lambda g: (g.start_date, g.title.lower()))
        return grants

    def list_requirements(self, grant_id: str) -> List[ComplianceRequirement]:
        """Grant-specific requirements followed by program-wide ones."""
        grant = self._require_grant(grant_id)
        return list(grant.compliance_requirements) + self._requirement_repo.list_shared()

    def list_shared_requirements(self) -> List[ComplianceRequirement]:
        return self._requirement_repo.list_shared()


__all__ = ["GrantQueryMixin"]
