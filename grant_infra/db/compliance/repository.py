from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from grant_core.domain import ComplianceRequirement
from grant_core.interfaces import RequirementRepository
from grant_infra.db.compliance.mapper import requirement_from_orm, requirement_to_orm
from grant_infra.db.models import ComplianceRequirementORM


class SqlAlchemyRequirementRepository(RequirementRepository):
    """Program-wide requirements; grant-scoped rows are owned by the grant repository."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, requirement: ComplianceRequirement) -> None:
        self.session.add(requirement_to_orm(requirement))

    def get(self, requirement_id: str) -> Optional[ComplianceRequirement]:
        obj = self.session.get(ComplianceRequirementORM, requirement_id)
        return requirement_from_orm(obj) if obj else None

    def list_shared(self) -> List[ComplianceRequirement]:
        stmt = (
            select(ComplianceRequirementORM)
            .where(ComplianceRequirementORM.grant_id.is_(None))
            .order_by(ComplianceRequirementORM.name, ComplianceRequirementORM.id)
        )
        rows = self.session.execute(stmt).scalars().all()
        return [requirement_from_orm(row) for row in rows]

    def delete(self, requirement_id: str) -> None:
        obj = self.session.get(ComplianceRequirementORM, requirement_id)
        if obj:
            self.session.delete(obj)


__all__ = ["SqlAlchemyRequirementRepository"]
