"""Initial schema for the factures dashboard.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None

USER_PK = "user.id"


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )

    op.create_table(
        "authsession",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("token_digest", sa.String(length=64), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.ForeignKeyConstraint(["user_id"], [USER_PK], ondelete="CASCADE"),
    )

    op.create_table(
        "facture_btp",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("nfacture", sa.String(length=64), nullable=False),
        sa.Column("date_facture", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("quantite", sa.Numeric(12, 3), nullable=False, server_default="0"),
        sa.Column("montant_total", sa.Numeric(18, 2), nullable=False, server_default="0"),
        sa.Column("importe", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("url_facture", sa.String(length=1024), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.ForeignKeyConstraint(["user_id"], [USER_PK], ondelete="CASCADE"),
    )

    op.create_index("ix_authsession_user_id", "authsession", ["user_id"])
    op.create_index("ix_facture_btp_user_id", "facture_btp", ["user_id"])
    op.create_index("ix_facture_importe", "facture_btp", ["user_id", "importe"])
    op.create_index("ix_facture_date", "facture_btp", ["user_id", "date_facture"])


def downgrade() -> None:
    op.drop_index("ix_facture_date", table_name="facture_btp")
    op.drop_index("ix_facture_importe", table_name="facture_btp")
    op.drop_index("ix_facture_btp_user_id", table_name="facture_btp")
    op.drop_index("ix_authsession_user_id", table_name="authsession")

    op.drop_table("facture_btp")
    op.drop_table("authsession")
    op.drop_table("user")
