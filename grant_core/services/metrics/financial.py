from __future__ import annotations

from calendar import monthrange
from datetime import date, timedelta
from typing import Dict, Optional

from grant_core.domain import ExpenditureStatus, Grant, ReportingPeriod
from grant_core.exceptions import ValidationError
from grant_core.services.metrics.models import FinancialMetrics, PeriodSpend

AVG_DAYS_PER_MONTH = 30.4375


def normalize_period(value: ReportingPeriod | str | None) -> ReportingPeriod:
    if isinstance(value, ReportingPeriod):
        return value
    token = (value or "").strip().upper()
    if not token:
        return ReportingPeriod.QUARTERLY
    try:
        return ReportingPeriod(token)
    except ValueError:
        raise ValidationError(
            f"Unsupported reporting period: {value!r}",
            code="FINANCE_PERIOD_INVALID",
        ) from None


def period_bounds(anchor: date, period: ReportingPeriod) -> tuple[str, date, date]:
    if period == ReportingPeriod.ANNUAL:
        return f"{anchor.year}", date(anchor.year, 1, 1), date(anchor.year, 12, 31)

    if period == ReportingPeriod.QUARTERLY:
        quarter = (anchor.month - 1) // 3 + 1
        first_month = 3 * (quarter - 1) + 1
        last_month = first_month + 2
        start = date(anchor.year, first_month, 1)
        end = date(anchor.year, last_month, monthrange(anchor.year, last_month)[1])
        return f"{anchor.year}-Q{quarter}", start, end

    last_day = monthrange(anchor.year, anchor.month)[1]
    start = date(anchor.year, anchor.month, 1)
    end = date(anchor.year, anchor.month, last_day)
    return f"{anchor.year}-{anchor.month:02d}", start, end


def build_period_spend(grant: Grant, period: ReportingPeriod) -> list[PeriodSpend]:
    buckets: dict[str, dict[str, object]] = {}
    for expenditure in grant.expenditures:
        if expenditure.status == ExpenditureStatus.REJECTED:
            continue
        key, start, end = period_bounds(expenditure.incurred_on, period)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = {"period_start": start, "period_end": end, "recognized": 0.0, "approved": 0.0}
            buckets[key] = bucket
        amount = float(expenditure.amount or 0.0)
        bucket["recognized"] = float(bucket["recognized"]) + amount
        if expenditure.is_approved:
            bucket["approved"] = float(bucket["approved"]) + amount

    rows = [
        PeriodSpend(
            period_key=key,
            period_start=bucket["period_start"],  # type: ignore[arg-type]
            period_end=bucket["period_end"],  # type: ignore[arg-type]
            recognized=float(bucket["recognized"]),
            approved=float(bucket["approved"]),
        )
        for key, bucket in buckets.items()
    ]
    rows.sort(key=lambda row: row.period_start)
    return rows


def _spend_by_status(grant: Grant) -> Dict[ExpenditureStatus, float]:
    totals = {status: 0.0 for status in ExpenditureStatus}
    for expenditure in grant.expenditures:
        totals[expenditure.status] += float(expenditure.amount or 0.0)
    return totals


def calculate_financial_metrics(
    grant: Grant,
    *,
    period: ReportingPeriod | str | None = ReportingPeriod.QUARTERLY,
    as_of: Optional[date] = None,
) -> FinancialMetrics:
    """
    Spend, burn rate and exhaustion forecast for one grant.

    Burn rate and remaining funds use approved spend only. The period and
    category breakdowns cover recognized spend (approved plus pending), so
    they sum to ``recognized_spend``, which is ``gross_spend`` minus
    ``rejected_spend``.
    """
    as_of = as_of or date.today()
    resolved_period = normalize_period(period)
    grant.validate()

    by_status = _spend_by_status(grant)
    approved = by_status[ExpenditureStatus.APPROVED]
    total_funding = float(grant.total_funding or 0.0)
    remaining = total_funding - approved

    window_days = (grant.end_date - grant.start_date).days + 1
    elapsed = min(max(grant.days_elapsed(as_of), 0), window_days)
    months_elapsed = max(1.0, elapsed / AVG_DAYS_PER_MONTH)
    burn_rate = approved / months_elapsed

    forecast: Optional[date] = None
    if remaining <= 0 and approved > 0:
        forecast = as_of
    elif burn_rate > 0:
        forecast = as_of + timedelta(days=round(remaining / burn_rate * AVG_DAYS_PER_MONTH))

    by_category: Dict[str, float] = {}
    for expenditure in grant.expenditures:
        if expenditure.status == ExpenditureStatus.REJECTED:
            continue
        key = (expenditure.category or "OTHER").strip().upper() or "OTHER"
        by_category[key] = by_category.get(key, 0.0) + float(expenditure.amount or 0.0)

    return FinancialMetrics(
        grant_id=grant.id,
        period=resolved_period,
        as_of=as_of,
        total_funding=total_funding,
        gross_spend=grant.gross_spend(),
        approved_spend=approved,
        pending_spend=by_status[ExpenditureStatus.PENDING],
        rejected_spend=by_status[ExpenditureStatus.REJECTED],
        recognized_spend=approved + by_status[ExpenditureStatus.PENDING],
        remaining_funds=remaining,
        gross_utilization=grant.gross_utilization(),
        approved_utilization=grant.approved_utilization(),
        monthly_burn_rate=burn_rate,
        forecast_exhaustion=forecast,
        spend_by_category=dict(sorted(by_category.items(), key=lambda item: (-item[1], item[0]))),
        spend_by_period=build_period_spend(grant, resolved_period),
    )


__all__ = [
    "calculate_financial_metrics",
    "normalize_period",
    "period_bounds",
    "build_period_spend",
]
