"""Initial portal schema: role catalog, role assignments, shop sessions.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "001_initial"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "company_contact_role",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_company_contact_role"),
    )
    op.create_index("ix_company_contact_role_name", "company_contact_role", ["name"], unique=True)

    op.create_table(
        "company_role_assignment",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("company_contact_id", sa.String(length=100), nullable=False),
        sa.Column("company_id", sa.String(length=100), nullable=False),
        sa.Column("store_name", sa.String(length=255), nullable=False),
        sa.Column("company_location_id", sa.String(length=100), nullable=True),
        sa.Column("role_id", sa.String(length=50), nullable=False),
        sa.Column("external_assignment_id", sa.String(length=100), nullable=True),
        sa.Column("created_by", sa.String(length=100), nullable=True),
        sa.Column("updated_by", sa.String(length=100), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["role_id"],
            ["company_contact_role.id"],
            name="fk_company_role_assignment_role_id_company_contact_role",
            ondelete="RESTRICT",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_company_role_assignment"),
    )
    for column in ("company_contact_id", "company_id", "store_name", "external_assignment_id"):
        op.create_index(
            f"ix_company_role_assignment_{column}", "company_role_assignment", [column], unique=False
        )
    op.create_index(
        "uq_role_assignment_scope",
        "company_role_assignment",
        ["company_id", "store_name", sa.text("coalesce(company_location_id, '')"), "company_contact_id"],
        unique=True,
    )

    op.create_table(
        "shop_session",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("shop", sa.String(length=255), nullable=False),
        sa.Column("access_token", sa.String(length=255), nullable=False),
        sa.Column("is_online", sa.Boolean(), nullable=False),
        sa.Column("scope", sa.Text(), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_shop_session"),
    )
    op.create_index("ix_shop_session_shop", "shop_session", ["shop"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_shop_session_shop", table_name="shop_session")
    op.drop_table("shop_session")
    op.drop_index("uq_role_assignment_scope", table_name="company_role_assignment")
    for column in ("external_assignment_id", "store_name", "company_id", "company_contact_id"):
        op.drop_index(f"ix_company_role_assignment_{column}", table_name="company_role_assignment")
    op.drop_table("company_role_assignment")
    op.drop_index("ix_company_contact_role_name", table_name="company_contact_role")
    op.drop_table("company_contact_role")
