from __future__ import annotations

import logging
from datetime import date

import pytest

from grant_core.domain import (
    KPI,
    ComplianceRequirement,
    ComplianceState,
    DocumentStatus,
    Expenditure,
    Grant,
    GrantDocument,
    OverallCompliance,
    ReportSubmission,
    RequirementType,
    Severity,
)
from grant_core.exceptions import ValidationError
from grant_core.services.compliance import assess_compliance, evaluate_requirement

AS_OF = date(2023, 6, 30)


def _requirement(kind, *, severity=Severity.MEDIUM, **extra):
    return ComplianceRequirement.create(f"{kind} check", kind, severity=severity, **extra)


def _approved_document(grant: Grant, doc_type: str) -> None:
    doc = GrantDocument.create(grant.id, doc_type, f"{doc_type} file", date(2023, 1, 10))
    grant.add_document(doc)
    grant.review_document(doc.id, DocumentStatus.APPROVED)


def test_financial_requirement_flags_overspend_with_evidence(calendar_year_grant):
    grant = calendar_year_grant
    grant.add_expenditure(Expenditure.create(grant.id, 95_000.0, date(2023, 5, 1)))
    requirement = _requirement(RequirementType.FINANCIAL, parameters={"maxUtilizationRate": 0.9})

    status = evaluate_requirement(requirement, grant, as_of=AS_OF)

    assert status.status == ComplianceState.NON_COMPLIANT
    assert status.evidence == ("Utilization rate (0.95) exceeds maximum (0.9)",)


def test_financial_requirement_defaults_to_full_utilization(calendar_year_grant):
    grant = calendar_year_grant
    grant.add_expenditure(Expenditure.create(grant.id, 95_000.0, date(2023, 5, 1)))

    status = evaluate_requirement(_requirement(RequirementType.FINANCIAL), grant, as_of=AS_OF)

    assert status.status == ComplianceState.COMPLIANT
    assert status.evidence == ("Utilization rate (0.95) within acceptable range",)


def test_explicit_zero_threshold_is_honoured(calendar_year_grant):
    grant = calendar_year_grant
    grant.add_expenditure(Expenditure.create(grant.id, 1.0, date(2023, 5, 1)))
    requirement = _requirement(RequirementType.FINANCIAL, parameters={"maxUtilizationRate": 0})

    assert evaluate_requirement(requirement, grant, as_of=AS_OF).status == ComplianceState.NON_COMPLIANT


def test_malformed_threshold_falls_back_to_default_with_warning(calendar_year_grant, caplog):
    requirement = _requirement(RequirementType.FINANCIAL, parameters={"maxUtilizationRate": "lots"})

    with caplog.at_level(logging.WARNING):
        status = evaluate_requirement(requirement, calendar_year_grant, as_of=AS_OF)

    assert status.status == ComplianceState.COMPLIANT
    assert "maxUtilizationRate" in caplog.text


def test_performance_requirement_stops_at_first_failing_kpi(calendar_year_grant):
    grant = calendar_year_grant
    grant.add_kpi(KPI.create(grant.id, "Beneficiaries", 200.0, current_value=150.0))
    grant.add_kpi(KPI.create(grant.id, "Trainings", 10.0, current_value=1.0))
    requirement = _requirement(RequirementType.PERFORMANCE, parameters={"minAchievementRate": 0.8})

    status = evaluate_requirement(requirement, grant, as_of=AS_OF)

    assert status.status == ComplianceState.NON_COMPLIANT
    assert status.evidence == ('KPI "Beneficiaries" achievement (0.75) below minimum (0.8)',)


def test_performance_requirement_skips_zero_targets(calendar_year_grant):
    grant = calendar_year_grant
    grant.add_kpi(KPI.create(grant.id, "Exploratory", 0.0, current_value=0.0))

    status = evaluate_requirement(_requirement(RequirementType.PERFORMANCE), grant, as_of=AS_OF)

    assert status.status == ComplianceState.COMPLIANT
    assert status.evidence == ()


def test_requirement_not_yet_applicable(calendar_year_grant):
    requirement = _requirement(RequirementType.FINANCIAL, applicable_from=date(2023, 9, 1))

    status = evaluate_requirement(requirement, calendar_year_grant, as_of=AS_OF)

    assert status.status == ComplianceState.NOT_APPLICABLE
    assert status.evidence == ()


def test_documentation_requirement_needs_every_document_approved(calendar_year_grant):
    grant = calendar_year_grant
    requirement = _requirement(
        RequirementType.DOCUMENTATION,
        parameters={"requiredDocuments": ["BUDGET", "WORKPLAN"]},
    )
    _approved_document(grant, "BUDGET")

    before = evaluate_requirement(requirement, grant, as_of=AS_OF)
    assert before.status == ComplianceState.NON_COMPLIANT
    assert before.evidence[-1] == "Missing or unapproved document: WORKPLAN"

    _approved_document(grant, "WORKPLAN")
    after = evaluate_requirement(requirement, grant, as_of=AS_OF)
    assert after.status == ComplianceState.COMPLIANT
    assert after.evidence == (
        'Document "BUDGET" submitted and approved',
        'Document "WORKPLAN" submitted and approved',
    )


def test_pending_document_does_not_satisfy_requirement(calendar_year_grant):
    grant = calendar_year_grant
    grant.add_document(GrantDocument.create(grant.id, "AUDIT", "Audit", date(2023, 2, 1)))
    requirement = _requirement(RequirementType.DOCUMENTATION, parameters={"requiredDocuments": "AUDIT"})

    assert evaluate_requirement(requirement, grant, as_of=AS_OF).status == ComplianceState.NON_COMPLIANT


def test_reporting_requirement_checks_submission_by_due_date(calendar_year_grant):
    grant = calendar_year_grant
    requirement = _requirement(
        RequirementType.REPORTING,
        due_date=date(2023, 4, 30),
        parameters={"reportType": "Q1_PROGRESS"},
    )

    missing = evaluate_requirement(requirement, grant, as_of=AS_OF)
    assert missing.status == ComplianceState.NON_COMPLIANT
    assert missing.evidence == ("Missing required report: Q1_PROGRESS",)

    grant.submit_report(ReportSubmission.create(grant.id, "Q1_PROGRESS", "2023-Q1", date(2023, 4, 28)))
    assert evaluate_requirement(requirement, grant, as_of=AS_OF).status == ComplianceState.COMPLIANT


def test_reporting_requirement_not_yet_due_is_compliant(calendar_year_grant):
    requirement = _requirement(
        RequirementType.REPORTING,
        due_date=date(2023, 7, 31),
        parameters={"reportType": "Q2_PROGRESS"},
    )

    status = evaluate_requirement(requirement, calendar_year_grant, as_of=AS_OF)

    assert status.status == ComplianceState.COMPLIANT
    assert status.evidence == ("Report not yet due (due 2023-07-31)",)


def test_unknown_requirement_type_is_pending_with_evidence(calendar_year_grant):
    requirement = _requirement("environmental")

    status = evaluate_requirement(requirement, calendar_year_grant, as_of=AS_OF)

    assert status.status == ComplianceState.PENDING
    assert status.evidence == ("No evaluator available for requirement type 'environmental'",)


def test_empty_requirement_list_is_vacuously_compliant(calendar_year_grant):
    summary = assess_compliance(calendar_year_grant, [], as_of=AS_OF)

    assert summary.total_requirements == 0
    assert summary.compliance_rate == 1.0
    assert summary.status == OverallCompliance.COMPLIANT


def test_summary_counts_and_overall_status(calendar_year_grant):
    grant = calendar_year_grant
    grant.add_expenditure(Expenditure.create(grant.id, 95_000.0, date(2023, 5, 1)))
    requirements = [
        _requirement(RequirementType.FINANCIAL, severity=Severity.LOW, parameters={"maxUtilizationRate": 0.9}),
        _requirement(RequirementType.PERFORMANCE),
        _requirement(RequirementType.REPORTING),
        _requirement(RequirementType.FINANCIAL, applicable_from=date(2024, 1, 1)),
    ]

    summary = assess_compliance(grant, requirements, as_of=AS_OF)

    assert summary.total_requirements == 4
    assert summary.compliant_requirements == 2
    assert summary.non_compliant_requirements == 1
    assert summary.not_applicable_requirements == 1
    assert summary.low_priority_issues == 1
    assert summary.high_priority_issues == 0
    assert summary.compliance_rate == 0.5
    # a non-compliant item without high severity only puts the grant at risk
    assert summary.status == OverallCompliance.AT_RISK

    high = _requirement(RequirementType.FINANCIAL, severity=Severity.HIGH, parameters={"maxUtilizationRate": 0.5})
    escalated = assess_compliance(grant, requirements + [high], as_of=AS_OF)
    assert escalated.status == OverallCompliance.NON_COMPLIANT
    assert escalated.high_priority_issues == 1


def test_mostly_pending_requirements_put_grant_at_risk(calendar_year_grant):
    requirements = [_requirement("site_visit"), _requirement(RequirementType.PERFORMANCE)]

    summary = assess_compliance(calendar_year_grant, requirements, as_of=AS_OF)

    assert summary.pending_requirements == 1
    assert summary.status == OverallCompliance.AT_RISK


def test_zero_funding_with_spend_is_non_compliant():
    grant = Grant.create("Unfunded", date(2023, 1, 1), date(2023, 12, 31))
    grant.add_expenditure(Expenditure.create(grant.id, 10.0, date(2023, 2, 1)))

    status = evaluate_requirement(_requirement(RequirementType.FINANCIAL), grant, as_of=AS_OF)

    assert status.status == ComplianceState.NON_COMPLIANT


def test_lowercase_severity_is_coerced_and_counted(calendar_year_grant):
    requirement = ComplianceRequirement.create(
        "Audit pack",
        "documentation",
        severity="high",
        parameters={"requiredDocuments": ["AUDIT"]},
    )

    summary = assess_compliance(calendar_year_grant, [requirement], as_of=AS_OF)

    assert requirement.severity == Severity.HIGH
    assert summary.high_priority_issues == 1
    assert summary.status == OverallCompliance.NON_COMPLIANT


def test_unknown_severity_is_rejected():
    with pytest.raises(ValidationError) as exc:
        ComplianceRequirement.create("Audit pack", "documentation", severity="urgent")
    assert exc.value.code == "REQUIREMENT_SEVERITY_INVALID"


def test_reporting_requirement_without_due_date_is_compliant(calendar_year_grant):
    requirement = _requirement(RequirementType.REPORTING, parameters={"reportType": "ANNUAL"})

    status = evaluate_requirement(requirement, calendar_year_grant, as_of=AS_OF)

    assert status.status == ComplianceState.COMPLIANT
    assert status.evidence == ("No due date set; reporting requirement treated as compliant",)


def test_report_submitted_after_due_date_is_non_compliant(calendar_year_grant):
    grant = calendar_year_grant
    grant.submit_report(ReportSubmission.create(grant.id, "Q1_PROGRESS", "2023-Q1", date(2023, 5, 2)))
    requirement = _requirement(
        RequirementType.REPORTING,
        due_date=date(2023, 4, 30),
        parameters={"reportType": "Q1_PROGRESS"},
    )

    status = evaluate_requirement(requirement, grant, as_of=AS_OF)

    assert status.status == ComplianceState.NON_COMPLIANT
    assert status.evidence == ("Missing required report: Q1_PROGRESS",)


def test_report_due_on_evaluation_day_is_already_owed(calendar_year_grant):
    requirement = _requirement(
        RequirementType.REPORTING,
        due_date=AS_OF,
        parameters={"reportType": "Q2_PROGRESS"},
    )

    missing = evaluate_requirement(requirement, calendar_year_grant, as_of=AS_OF)
    assert missing.status == ComplianceState.NON_COMPLIANT

    grant = calendar_year_grant
    grant.submit_report(ReportSubmission.create(grant.id, "Q2_PROGRESS", "2023-Q2", AS_OF))
    assert evaluate_requirement(requirement, grant, as_of=AS_OF).status == ComplianceState.COMPLIANT


@pytest.mark.parametrize("parameters", [{}, {"requiredDocuments": []}])
def test_documentation_requirement_without_documents_is_vacuously_compliant(calendar_year_grant, parameters):
    requirement = _requirement(RequirementType.DOCUMENTATION, parameters=parameters)

    status = evaluate_requirement(requirement, calendar_year_grant, as_of=AS_OF)

    assert status.status == ComplianceState.COMPLIANT
    assert status.evidence == ()


@pytest.mark.parametrize("threshold", ["nan", float("nan"), float("inf"), True])
def test_non_finite_or_boolean_threshold_falls_back_to_default(calendar_year_grant, caplog, threshold):
    grant = calendar_year_grant
    grant.add_expenditure(Expenditure.create(grant.id, 95_000.0, date(2023, 5, 1)))
    requirement = _requirement(RequirementType.PERFORMANCE, parameters={"minAchievementRate": threshold})
    grant.add_kpi(KPI.create(grant.id, "Beneficiaries", 200.0, current_value=150.0))
    financial = _requirement(RequirementType.FINANCIAL, parameters={"maxUtilizationRate": threshold})

    with caplog.at_level(logging.WARNING):
        performance_status = evaluate_requirement(requirement, grant, as_of=AS_OF)
        financial_status = evaluate_requirement(financial, grant, as_of=AS_OF)

    assert performance_status.status == ComplianceState.NON_COMPLIANT
    assert performance_status.evidence == ('KPI "Beneficiaries" achievement (0.75) below minimum (0.8)',)
    assert financial_status.evidence == ("Utilization rate (0.95) within acceptable range",)
    assert "minAchievementRate" in caplog.text
    assert "maxUtilizationRate" in caplog.text
