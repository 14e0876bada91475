"""Users, agencies, clinical sites and placement tables.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def _capacity_columns() -> list[sa.Column]:
    return [
        sa.Column("max_students_per_day", sa.Integer()),
        sa.Column("max_students_per_rotation", sa.Integer()),
        sa.Column("capacity_notes", sa.Text()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(120), nullable=False),
        sa.Column("last_name", sa.String(120), nullable=False),
        sa.Column(
            "role",
            sa.Enum(
                "SUPERADMIN",
                "ADMIN",
                "LEAD_INSTRUCTOR",
                "INSTRUCTOR",
                "GUEST",
                name="userrole",
            ),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum("INVITED", "ACTIVE", "SUSPENDED", name="userstatus"),
            nullable=False,
        ),
        *_timestamps(),
    )
    op.create_table(
        "agencies",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("abbreviation", sa.String(32)),
        sa.Column("type", sa.Enum("EMS", "HOSPITAL", name="agencytype"), nullable=False),
        *_capacity_columns(),
        *_timestamps(),
    )
    op.create_table(
        "clinical_sites",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("abbreviation", sa.String(32), nullable=False),
        sa.Column("system", sa.String(255)),
        *_capacity_columns(),
        *_timestamps(),
    )
    op.create_table(
        "student_internships",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "agency_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("agencies.id", ondelete="SET NULL"),
        ),
        sa.Column("student_name", sa.String(255), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "NOT_STARTED",
                "IN_PROGRESS",
                "ON_TRACK",
                "AT_RISK",
                "EXTENDED",
                "COMPLETED",
                "WITHDRAWN",
                name="internshipstatus",
            ),
            nullable=False,
        ),
        sa.Column("placement_date", sa.Date()),
        *_timestamps(),
    )
    op.create_index(
        "ix_student_internships_agency_id", "student_internships", ["agency_id"]
    )
    op.create_table(
        "clinical_site_visits",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "site_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("clinical_sites.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("visitor_name", sa.String(255), nullable=False),
        sa.Column("visit_date", sa.Date(), nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "ix_clinical_site_visits_site_id", "clinical_site_visits", ["site_id"]
    )
    op.create_index(
        "ix_clinical_site_visits_visit_date", "clinical_site_visits", ["visit_date"]
    )


def downgrade() -> None:
    op.drop_index("ix_clinical_site_visits_visit_date", table_name="clinical_site_visits")
    op.drop_index("ix_clinical_site_visits_site_id", table_name="clinical_site_visits")
    op.drop_table("clinical_site_visits")
    op.drop_index("ix_student_internships_agency_id", table_name="student_internships")
    op.drop_table("student_internships")
    op.drop_table("clinical_sites")
    op.drop_table("agencies")
    op.drop_table("users")
