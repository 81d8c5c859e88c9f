from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from grant_core.domain import Grant
from grant_core.interfaces import GrantRepository
from grant_infra.db.compliance.mapper import requirement_from_orm, requirement_to_orm
from grant_infra.db.grant.mapper import (
    document_to_orm,
    expenditure_to_orm,
    grant_from_orm,
    grant_row_values,
    grant_to_orm,
    history_to_orm,
    kpi_to_orm,
    milestone_to_orm,
    report_to_orm,
)
from grant_infra.db.models import (
    CHILD_TABLES,
    ComplianceRequirementORM,
    ExpenditureORM,
    GrantDocumentORM,
    GrantHistoryORM,
    GrantORM,
    KPIORM,
    MilestoneORM,
    ReportSubmissionORM,
)
from grant_infra.db.optimistic import update_with_version_check

# child tables ordered by insertion position
_POSITIONED = (
    MilestoneORM,
    ExpenditureORM,
    KPIORM,
    GrantDocumentORM,
    ReportSubmissionORM,
    ComplianceRequirementORM,
)


class SqlAlchemyGrantRepository(GrantRepository):
    """
    Stores the Grant aggregate across the grant table and its child tables.

    History rows are append-only: ``update`` inserts entries it has not seen
    and never rewrites or removes existing ones.
    """

    def __init__(self, session: Session):
        self.session = session

    def add(self, grant: Grant) -> None:
        self.session.add(grant_to_orm(grant))
        for row in self._child_rows(grant):
            self.session.add(row)
        for sequence, entry in enumerate(grant.history):
            self.session.add(history_to_orm(grant.id, entry, sequence))

    def update(self, grant: Grant, expected_version: int) -> None:
        update_with_version_check(
            self.session,
            GrantORM,
            grant.id,
            expected_version,
            grant_row_values(grant),
            new_version=grant.version,
            not_found_message="Grant not found.",
            not_found_code="GRANT_NOT_FOUND",
            stale_message="Grant was updated by another user.",
        )
        self._sync_children(grant)
        self._append_history(grant)

    def delete(self, grant_id: str) -> None:
        for orm_type in CHILD_TABLES:
            self.session.execute(delete(orm_type).where(orm_type.grant_id == grant_id))
        self.session.query(GrantORM).filter_by(id=grant_id).delete()

    def get(self, grant_id: str) -> Optional[Grant]:
        obj = self.session.get(GrantORM, grant_id, populate_existing=True)
        if obj is None:
            return None
        return self._assemble([obj])[0]

    def list_all(self) -> List[Grant]:
        stmt = select(GrantORM).execution_options(populate_existing=True)
        rows = self.session.execute(stmt).scalars().all()
        return self._assemble(rows)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _child_rows(self, grant: Grant) -> List[Any]:
        rows: List[Any] = []
        rows += [milestone_to_orm(m, i) for i, m in enumerate(grant.milestones)]
        rows += [expenditure_to_orm(e, i) for i, e in enumerate(grant.expenditures)]
        rows += [kpi_to_orm(k, i) for i, k in enumerate(grant.kpis)]
        rows += [document_to_orm(d, i) for i, d in enumerate(grant.documents)]
        rows += [report_to_orm(r, i) for i, r in enumerate(grant.reports)]
        rows += [requirement_to_orm(r, i) for i, r in enumerate(grant.compliance_requirements)]
        return rows

    def _sync_children(self, grant: Grant) -> None:
        current: Dict[type, set[str]] = defaultdict(set)
        for row in self._child_rows(grant):
            self.session.merge(row)
            current[type(row)].add(row.id)

        for orm_type in _POSITIONED:
            stored = self.session.execute(
                select(orm_type.id).where(orm_type.grant_id == grant.id)
            ).scalars().all()
            removed = [row_id for row_id in stored if row_id not in current[orm_type]]
            if removed:
                self.session.execute(delete(orm_type).where(orm_type.id.in_(removed)))

    def _append_history(self, grant: Grant) -> None:
        known = set(
            self.session.execute(
                select(GrantHistoryORM.id).where(GrantHistoryORM.grant_id == grant.id)
            ).scalars().all()
        )
        for sequence, entry in enumerate(grant.history):
            if entry.id not in known:
                self.session.add(history_to_orm(grant.id, entry, sequence))

    def _children_by_grant(self, orm_type: Any, grant_ids: Sequence[str], order: Iterable[Any]) -> Dict[str, list]:
        grouped: Dict[str, list] = defaultdict(list)
        if not grant_ids:
            return grouped
        stmt = (
            select(orm_type)
            .where(orm_type.grant_id.in_(grant_ids))
            .order_by(*order)
            .execution_options(populate_existing=True)
        )
        for row in self.session.execute(stmt).scalars().all():
            grouped[row.grant_id].append(row)
        return grouped

    def _assemble(self, rows: Sequence[GrantORM]) -> List[Grant]:
        ids = [row.id for row in rows]
        milestones = self._children_by_grant(MilestoneORM, ids, (MilestoneORM.position,))
        expenditures = self._children_by_grant(ExpenditureORM, ids, (ExpenditureORM.position,))
        kpis = self._children_by_grant(KPIORM, ids, (KPIORM.position,))
        documents = self._children_by_grant(GrantDocumentORM, ids, (GrantDocumentORM.position,))
        reports = self._children_by_grant(ReportSubmissionORM, ids, (ReportSubmissionORM.position,))
        requirements = self._children_by_grant(
            ComplianceRequirementORM, ids, (ComplianceRequirementORM.position,)
        )
        history = self._children_by_grant(GrantHistoryORM, ids, (GrantHistoryORM.sequence,))

        return [
            grant_from_orm(
                row,
                milestones=milestones[row.id],
                expenditures=expenditures[row.id],
                kpis=kpis[row.id],
                documents=documents[row.id],
                reports=reports[row.id],
                requirements=[requirement_from_orm(r) for r in requirements[row.id]],
                history=history[row.id],
            )
            for row in rows
        ]


__all__ = ["SqlAlchemyGrantRepository"]
