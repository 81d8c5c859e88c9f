from __future__ import annotations

import logging
from datetime import date

import pytest

from grant_core.domain import (
    GrantStatus,
    OverallCompliance,
    ReportingFrequency,
    RequirementType,
    RiskLevel,
    Severity,
)
from grant_core.exceptions import InvalidGrantError, NotFoundError
from grant_core.services.metrics import GrantProgressMetrics
from grant_core.services.reporting import ComplianceReport, ProgressReport
from grant_core.services.reporting.progress import next_report_due

AS_OF = date(2023, 6, 30)


def _on_track_grant(gs, title="Youth Coding Clubs"):
    grant = gs.create_grant(
        title,
        date(2023, 1, 1),
        date(2023, 12, 31),
        total_funding=100_000.0,
        grant_manager="Sam Lee",
    )
    gs.update_status(grant.id, GrantStatus.ACTIVE)
    for month in range(1, 7):
        milestone = gs.add_milestone(grant.id, f"Cohort {month}", date(2023, month * 2 - 1, 28))
        if month <= 3:
            gs.complete_milestone(grant.id, milestone.id, date(2023, month * 2 - 1, 20))
    spend = gs.record_expenditure(grant.id, 49_000.0, date(2023, 5, 1), category="PERSONNEL")
    gs.approve_expenditure(grant.id, spend.id, approved_on=date(2023, 5, 3))
    return grant


def test_get_progress_returns_metrics_or_full_report(services):
    gs = services["grant_service"]
    rs = services["reporting_service"]
    grant = _on_track_grant(gs)

    metrics = rs.get_progress(grant.id, as_of=AS_OF)
    report = rs.get_progress(grant.id, as_of=AS_OF, include_details=True)

    assert isinstance(metrics, GrantProgressMetrics)
    assert metrics.risk_level == RiskLevel.LOW
    assert isinstance(report, ProgressReport)
    assert report.metrics == metrics
    assert report.recommendations == ["Progress is aligned with the timeline; keep the current plan."]
    assert "Submit quarterly progress report by 2023-06-30." in report.next_steps
    assert report.alerts == []


def test_progress_report_flags_lagging_delivery(services):
    gs = services["grant_service"]
    rs = services["reporting_service"]
    grant = gs.create_grant("Stalled", date(2023, 1, 1), date(2023, 12, 31), total_funding=10_000.0)
    gs.add_milestone(grant.id, "Overdue deliverable", date(2023, 3, 1))
    gs.add_milestone(grant.id, "Next deliverable", date(2023, 7, 15))
    gs.record_expenditure(grant.id, 500.0, date(2023, 2, 1))

    report = rs.generate_progress_report(grant.id, as_of=AS_OF)

    assert any(r.startswith("Accelerate milestone completion") for r in report.recommendations)
    assert any(r.startswith("Spending trails the timeline") for r in report.recommendations)
    assert "Review 500.00 of expenditures not yet approved." in report.recommendations
    assert 'Recover overdue milestone "Overdue deliverable" (due 2023-03-01).' in report.next_steps
    assert 'Complete milestone "Next deliverable" by 2023-07-15.' in report.next_steps
    assert any(alert.startswith("Risk level is") for alert in report.alerts)


def test_compliance_report_builds_corrective_actions(services):
    gs = services["grant_service"]
    rs = services["reporting_service"]
    grant = _on_track_grant(gs)
    gs.add_requirement(
        "Spend cap",
        RequirementType.FINANCIAL,
        grant_id=grant.id,
        severity=Severity.HIGH,
        parameters={"maxUtilizationRate": 0.4},
    )
    gs.add_requirement("Board minutes", RequirementType.DOCUMENTATION, parameters={"requiredDocuments": ["MINUTES"]})
    gs.add_requirement("Site visit", "site_visit", grant_id=grant.id, severity=Severity.LOW)

    summary = rs.get_compliance(grant.id, as_of=AS_OF)
    report = rs.get_compliance(grant.id, as_of=AS_OF, include_report=True)

    assert summary.status == OverallCompliance.NON_COMPLIANT
    assert isinstance(report, ComplianceReport)
    by_party = {action.responsible_party: action for action in report.corrective_actions}
    assert set(by_party) == {"Finance Officer", "Sam Lee", "Compliance Officer"}
    assert by_party["Finance Officer"].deadline == date(2023, 7, 14)
    assert by_party["Finance Officer"].action == "Resolve Spend cap: Utilization rate (0.49) exceeds maximum (0.4)"
    assert by_party["Sam Lee"].action == "Resolve Board minutes: Missing or unapproved document: MINUTES"
    assert by_party["Compliance Officer"].action == "Review Site visit manually"
    assert [a.deadline for a in report.corrective_actions] == sorted(a.deadline for a in report.corrective_actions)


def test_get_financial_uses_requested_period(services):
    gs = services["grant_service"]
    rs = services["reporting_service"]
    grant = _on_track_grant(gs)

    metrics = rs.get_financial(grant.id, period="annual", as_of=AS_OF)

    assert metrics.approved_spend == 49_000.0
    assert [row.period_key for row in metrics.spend_by_period] == ["2023"]


def test_reporting_on_missing_grant_raises_not_found(services):
    rs = services["reporting_service"]
    with pytest.raises(NotFoundError):
        rs.get_progress("does-not-exist", as_of=AS_OF)


def test_portfolio_isolates_invalid_grant(services, caplog):
    gs = services["grant_service"]
    rs = services["reporting_service"]
    healthy = _on_track_grant(gs, title="Healthy grant")
    broken = gs.create_grant("One-day event", date(2023, 5, 1), date(2023, 5, 1), total_funding=5_000.0)

    with caplog.at_level(logging.WARNING):
        portfolio = rs.get_portfolio(as_of=AS_OF)

    assert portfolio.total_grants == 2
    assert portfolio.evaluated_grants == 1
    assert [f.grant_id for f in portfolio.failures] == [broken.id]
    assert portfolio.failures[0].code == "GRANT_TIMELINE_INVERTED"
    assert broken.id in caplog.text
    assert portfolio.total_funding == 100_000.0
    assert portfolio.top_performers == [healthy.id]
    assert portfolio.need_attention == []
    assert portfolio.compliance_rate == 1.0
    scorecard = next(s for s in portfolio.scorecards if s.grant_id == broken.id)
    assert scorecard.progress is None and scorecard.compliance is None

    with pytest.raises(InvalidGrantError):
        rs.get_progress(broken.id, as_of=AS_OF)


def test_portfolio_aggregates_and_collects_deadlines(services):
    gs = services["grant_service"]
    rs = services["reporting_service"]
    good = _on_track_grant(gs, title="Good")
    lagging = gs.create_grant("Lagging", date(2023, 1, 1), date(2023, 7, 20), total_funding=20_000.0)
    gs.update_status(lagging.id, GrantStatus.ACTIVE)
    gs.add_milestone(lagging.id, "Final workshop", date(2023, 7, 10))
    gs.add_requirement(
        "Interim report",
        RequirementType.REPORTING,
        grant_id=lagging.id,
        due_date=date(2023, 7, 15),
        parameters={"reportType": "INTERIM"},
    )

    portfolio = rs.get_portfolio([good.id, lagging.id, "ghost"], as_of=AS_OF)

    assert portfolio.total_grants == 3
    assert portfolio.active_grants == 2
    assert portfolio.evaluated_grants == 2
    assert [f.code for f in portfolio.failures] == ["GRANT_NOT_FOUND"]
    assert portfolio.at_risk_grants == 1
    assert portfolio.high_risk_grants == 1
    assert portfolio.need_attention == [lagging.id]
    assert portfolio.top_performers == [good.id]
    assert portfolio.utilized_funding == 49_000.0
    assert [(d.kind, d.deadline) for d in portfolio.upcoming_deadlines] == [
        ("MILESTONE", date(2023, 7, 10)),
        ("REQUIREMENT", date(2023, 7, 15)),
        ("GRANT_END", date(2023, 7, 20)),
        ("MILESTONE", date(2023, 7, 28)),
    ]
    assert portfolio.upcoming_deadlines[-1].grant_id == good.id


def test_empty_portfolio_has_neutral_aggregates(services):
    portfolio = services["reporting_service"].get_portfolio(as_of=AS_OF)

    assert portfolio.total_grants == 0
    assert portfolio.average_progress == 0.0
    assert portfolio.compliance_rate == 1.0
    assert portfolio.failures == []


def test_next_report_due_follows_reporting_frequency(services):
    gs = services["grant_service"]
    grant = gs.create_grant(
        "Monthly reporter",
        date(2023, 1, 15),
        date(2023, 12, 31),
        reporting_frequency=ReportingFrequency.MONTHLY,
    )
    loaded = gs.get_grant(grant.id)

    assert next_report_due(loaded, date(2023, 3, 1)) == date(2023, 3, 14)
    assert next_report_due(loaded, date(2023, 12, 20)) == date(2023, 12, 31)
    assert next_report_due(loaded, date(2024, 1, 5)) is None
