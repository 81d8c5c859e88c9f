"""create grant, child and compliance tables

Revision ID: 3a91c0d4b7e2
Revises:
Create Date: 2026-10-12
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3a91c0d4b7e2"
down_revision = None
branch_labels = None
depends_on = None


GRANT_STATUS = ("DRAFT", "SUBMITTED", "UNDER_REVIEW", "APPROVED", "ACTIVE", "SUSPENDED", "COMPLETED", "TERMINATED", "CLOSED")
GRANT_TYPE = ("FEDERAL", "STATE", "LOCAL", "FOUNDATION", "CORPORATE", "INTERNATIONAL")
REPORTING_FREQUENCY = ("MONTHLY", "QUARTERLY", "SEMI_ANNUAL", "ANNUAL")
MILESTONE_STATUS = ("PENDING", "IN_PROGRESS", "COMPLETED", "DELAYED")
EXPENDITURE_STATUS = ("PENDING", "APPROVED", "REJECTED")
DOCUMENT_STATUS = ("PENDING", "REVIEWED", "APPROVED", "REJECTED")
REPORT_STATUS = ("DRAFT", "SUBMITTED", "REVIEWED")
SEVERITY = ("HIGH", "MEDIUM", "LOW")


def _grant_fk(nullable: bool = False) -> sa.Column:
    return sa.Column(
        "grant_id",
        sa.String(),
        sa.ForeignKey("grants.id", ondelete="CASCADE"),
        nullable=nullable,
    )


def _position() -> sa.Column:
    return sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0"))


def upgrade() -> None:
    op.create_table(
        "grants",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("grant_number", sa.String(), nullable=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("grant_type", sa.Enum(*GRANT_TYPE, name="granttype"), nullable=False),
        sa.Column("status", sa.Enum(*GRANT_STATUS, name="grantstatus"), nullable=False),
        sa.Column("total_funding", sa.Float(), nullable=False),
        sa.Column("awarded_amount", sa.Float(), nullable=False),
        sa.Column("matching_requirement", sa.Float(), nullable=True),
        sa.Column("funding_source", sa.String(), nullable=True),
        sa.Column("grant_manager", sa.String(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("application_date", sa.Date(), nullable=True),
        sa.Column("award_date", sa.Date(), nullable=True),
        sa.Column(
            "reporting_frequency",
            sa.Enum(*REPORTING_FREQUENCY, name="reportingfrequency"),
            nullable=False,
        ),
        sa.Column("recipient_json", sa.Text(), nullable=True),
        sa.Column("grantor_json", sa.Text(), nullable=True),
        sa.Column("objectives_json", sa.Text(), nullable=True),
        sa.Column("target_beneficiaries", sa.String(), nullable=True),
        sa.Column("geographic_scope", sa.String(), nullable=True),
        sa.Column("tags_json", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_by", sa.String(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
    )
    op.create_index("idx_grants_status", "grants", ["status"])
    op.create_index("idx_grants_grant_number", "grants", ["grant_number"])

    op.create_table(
        "milestones",
        sa.Column("id", sa.String(), primary_key=True),
        _grant_fk(),
        _position(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("completion_date", sa.Date(), nullable=True),
        sa.Column("status", sa.Enum(*MILESTONE_STATUS, name="milestonestatus"), nullable=False),
        sa.Column("deliverables_json", sa.Text(), nullable=True),
        sa.Column("dependencies_json", sa.Text(), nullable=True),
    )
    op.create_index("idx_milestones_grant", "milestones", ["grant_id"])

    op.create_table(
        "expenditures",
        sa.Column("id", sa.String(), primary_key=True),
        _grant_fk(),
        _position(),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("incurred_on", sa.Date(), nullable=False),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("receipt_url", sa.String(), nullable=True),
        sa.Column("status", sa.Enum(*EXPENDITURE_STATUS, name="expenditurestatus"), nullable=False),
        sa.Column("approved_by", sa.String(), nullable=True),
        sa.Column("approved_on", sa.Date(), nullable=True),
    )
    op.create_index("idx_expenditures_grant", "expenditures", ["grant_id"])
    op.create_index("idx_expenditures_status", "expenditures", ["status"])

    op.create_table(
        "kpis",
        sa.Column("id", sa.String(), primary_key=True),
        _grant_fk(),
        _position(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("target_value", sa.Float(), nullable=False),
        sa.Column("current_value", sa.Float(), nullable=False),
        sa.Column("unit", sa.String(), nullable=True),
    )
    op.create_index("idx_kpis_grant", "kpis", ["grant_id"])

    op.create_table(
        "grant_documents",
        sa.Column("id", sa.String(), primary_key=True),
        _grant_fk(),
        _position(),
        sa.Column("document_type", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("uploaded_on", sa.Date(), nullable=False),
        sa.Column("url", sa.String(), nullable=True),
        sa.Column("uploaded_by", sa.String(), nullable=True),
        sa.Column("status", sa.Enum(*DOCUMENT_STATUS, name="documentstatus"), nullable=False),
        sa.Column("review_notes", sa.Text(), nullable=True),
    )
    op.create_index("idx_grant_documents_grant", "grant_documents", ["grant_id"])
    op.create_index("idx_grant_documents_type", "grant_documents", ["document_type"])

    op.create_table(
        "report_submissions",
        sa.Column("id", sa.String(), primary_key=True),
        _grant_fk(),
        _position(),
        sa.Column("report_type", sa.String(), nullable=False),
        sa.Column("period", sa.String(), nullable=True),
        sa.Column("submission_date", sa.Date(), nullable=False),
        sa.Column("submitted_by", sa.String(), nullable=True),
        sa.Column("status", sa.Enum(*REPORT_STATUS, name="reportstatus"), nullable=False),
        sa.Column("url", sa.String(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index("idx_report_submissions_grant", "report_submissions", ["grant_id"])

    op.create_table(
        "compliance_requirements",
        sa.Column("id", sa.String(), primary_key=True),
        _grant_fk(nullable=True),
        _position(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("requirement_type", sa.String(), nullable=False),
        sa.Column("severity", sa.Enum(*SEVERITY, name="severity"), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("applicable_from", sa.Date(), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("parameters_json", sa.Text(), nullable=True),
    )
    op.create_index("idx_compliance_requirements_grant", "compliance_requirements", ["grant_id"])

    op.create_table(
        "grant_history",
        sa.Column("id", sa.String(), primary_key=True),
        _grant_fk(),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("actor", sa.String(), nullable=True),
        sa.Column("changes_json", sa.Text(), nullable=True),
    )
    op.create_index(
        "idx_grant_history_grant_sequence",
        "grant_history",
        ["grant_id", "sequence"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_table("grant_history")
    op.drop_table("compliance_requirements")
    op.drop_table("report_submissions")
    op.drop_table("grant_documents")
    op.drop_table("kpis")
    op.drop_table("expenditures")
    op.drop_table("milestones")
    op.drop_table("grants")
