from __future__ import annotations

from grant_core.services.grant.service import GrantService

from .compliance import ReportingComplianceMixin
from .financial import ReportingFinancialMixin
from .portfolio import ReportingPortfolioMixin
from .progress import ReportingProgressMixin


class ReportingService(
    ReportingProgressMixin,
    ReportingComplianceMixin,
    ReportingFinancialMixin,
    ReportingPortfolioMixin,
):
    """Read-only facade over the calculators; never mutates a grant."""

    def __init__(self, grant_service: GrantService):
        self._grants: GrantService = grant_service


__all__ = ["ReportingService"]
