from __future__ import annotations

from datetime import date

from grant_core.domain import ReportingPeriod
from grant_core.services.grant.service import GrantService
from grant_core.services.metrics import FinancialMetrics, calculate_financial_metrics


class ReportingFinancialMixin:
    _grants: GrantService

    def get_financial(
        self,
        grant_id: str,
        *,
        period: ReportingPeriod | str | None = ReportingPeriod.QUARTERLY,
        as_of: date | None = None,
    ) -> FinancialMetrics:
        grant = self._grants.get_grant(grant_id)
        return calculate_financial_metrics(grant, period=period, as_of=as_of)


__all__ = ["ReportingFinancialMixin"]
