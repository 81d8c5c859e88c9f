from __future__ import annotations

import math
from datetime import date

import pytest

from grant_core.domain import (
    KPI,
    Expenditure,
    Grant,
    Milestone,
    RiskLevel,
    UtilizationBasis,
)
from grant_core.exceptions import InvalidGrantError
from grant_core.services.metrics import calculate_progress, classify_risk, risk_score

AS_OF = date(2023, 6, 30)


def _with_milestones(grant: Grant, total: int, completed: int) -> None:
    for index in range(total):
        milestone = Milestone.create(grant.id, f"M{index + 1}", date(2023, 1 + index, 15))
        grant.add_milestone(milestone)
        if index < completed:
            grant.complete_milestone(milestone.id, date(2023, 1 + index, 10))


def test_mid_year_grant_on_track_is_low_risk(calendar_year_grant):
    grant = calendar_year_grant
    _with_milestones(grant, total=6, completed=3)
    grant.add_expenditure(Expenditure.create(grant.id, 49_000.0, date(2023, 5, 1)))

    metrics = calculate_progress(grant, as_of=AS_OF)

    assert metrics.total_days == 365
    assert metrics.days_elapsed == 180
    assert metrics.days_remaining == 184
    assert metrics.timeline_progress == pytest.approx(180 / 365)
    assert metrics.milestones_completed == 3
    assert metrics.total_milestones == 6
    assert metrics.milestone_completion_rate == pytest.approx(0.5)
    assert metrics.utilization_rate == pytest.approx(0.49)
    assert metrics.risk_level == RiskLevel.LOW
    assert metrics.last_updated == AS_OF


def test_zero_funding_yields_zero_utilization_without_nan():
    grant = Grant.create("Volunteer drive", date(2023, 1, 1), date(2023, 12, 31), total_funding=0.0)
    grant.add_expenditure(Expenditure.create(grant.id, 250.0, date(2023, 2, 1)))

    metrics = calculate_progress(grant, as_of=AS_OF)

    assert metrics.gross_utilization == 0.0
    assert metrics.approved_utilization == 0.0
    assert metrics.utilization_rate == 0.0
    assert math.isfinite(metrics.risk_score)


def test_no_milestones_counts_as_zero_completion(calendar_year_grant):
    metrics = calculate_progress(calendar_year_grant, as_of=AS_OF)

    assert metrics.total_milestones == 0
    assert metrics.milestone_completion_rate == 0.0


def test_timeline_progress_is_clamped_outside_the_window(calendar_year_grant):
    before = calculate_progress(calendar_year_grant, as_of=date(2022, 12, 1))
    after = calculate_progress(calendar_year_grant, as_of=date(2024, 3, 1))

    assert before.timeline_progress == 0.0
    assert before.days_elapsed < 0
    assert after.timeline_progress == 1.0
    assert after.days_remaining < 0


def test_utilization_basis_switches_between_gross_and_approved(calendar_year_grant):
    grant = calendar_year_grant
    approved = Expenditure.create(grant.id, 30_000.0, date(2023, 3, 1))
    grant.add_expenditure(approved)
    grant.add_expenditure(Expenditure.create(grant.id, 10_000.0, date(2023, 4, 1)))
    grant.approve_expenditure(approved.id)

    gross = calculate_progress(grant, as_of=AS_OF)
    strict = calculate_progress(grant, as_of=AS_OF, utilization_basis=UtilizationBasis.APPROVED)

    assert gross.utilization_rate == pytest.approx(0.40)
    assert strict.utilization_rate == pytest.approx(0.30)
    assert gross.gross_utilization == strict.gross_utilization
    assert gross.approved_utilization == strict.approved_utilization


def test_zero_length_window_is_an_invalid_grant():
    grant = Grant.create("Pop-up clinic", date(2023, 5, 1), date(2023, 5, 1), total_funding=1_000.0)
    with pytest.raises(InvalidGrantError):
        calculate_progress(grant, as_of=AS_OF)


def test_late_grant_with_little_delivery_is_high_risk(calendar_year_grant):
    grant = calendar_year_grant
    _with_milestones(grant, total=5, completed=1)

    metrics = calculate_progress(grant, as_of=date(2023, 12, 1))

    assert metrics.risk_level == RiskLevel.HIGH


def test_risk_thresholds():
    assert classify_risk(0.5, 0.5, 0.5) == RiskLevel.LOW
    assert risk_score(0.5, 0.2, 0.2) == pytest.approx(0.3)
    assert classify_risk(0.5, 0.2, 0.2) == RiskLevel.MEDIUM
    assert classify_risk(0.9, 0.4, 0.4) == RiskLevel.HIGH


def test_kpi_achievement_is_reported_by_name(calendar_year_grant):
    grant = calendar_year_grant
    grant.add_kpi(KPI.create(grant.id, "Clinics opened", 4.0, current_value=3.0))
    grant.add_kpi(KPI.create(grant.id, "Pilot sites", 0.0, current_value=2.0))

    metrics = calculate_progress(grant, as_of=AS_OF)

    assert metrics.kpi_achievement == {"Clinics opened": pytest.approx(0.75), "Pilot sites": 2.0}
