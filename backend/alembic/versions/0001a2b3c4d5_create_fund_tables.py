"""create_fund_tables

Revision ID: 0001a2b3c4d5
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001a2b3c4d5"
down_revision = None
branch_labels = None
depends_on = None


def _audit_columns() -> list:
    return [
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    # Assets
    op.create_table(
        "assets",
        *_audit_columns(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("type", sa.String(length=30), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("current_value", sa.Numeric(precision=20, scale=6), nullable=False),
        sa.Column("status", sa.String(length=10), nullable=False),
        sa.Column("acquired_price", sa.Numeric(precision=20, scale=6), nullable=True),
        sa.Column("acquired_date", sa.Date(), nullable=True),
        sa.Column("sale_price", sa.Numeric(precision=20, scale=6), nullable=True),
        sa.Column("sale_date", sa.Date(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("status IN ('ACTIVE', 'SOLD')", name="ck_assets_status"),
        sa.CheckConstraint(
            "status <> 'SOLD' OR (sale_price IS NOT NULL AND sale_date IS NOT NULL)",
            name="ck_assets_sold_has_sale",
        ),
    )
    op.create_index("ix_assets_status", "assets", ["status"])

    op.create_table(
        "asset_events",
        *_audit_columns(),
        sa.Column("asset_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=30), nullable=False),
        sa.Column("amount", sa.Numeric(precision=20, scale=6), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["asset_id"], ["assets.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_asset_events_asset_date", "asset_events", ["asset_id", "date"])

    # Liabilities
    op.create_table(
        "liabilities",
        *_audit_columns(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("current_balance", sa.Numeric(precision=20, scale=6), nullable=False),
        sa.Column("interest_rate", sa.Numeric(precision=10, scale=6), nullable=True),
        sa.Column("maturity_date", sa.Date(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    # Bank balances
    op.create_table(
        "bank_balances",
        *_audit_columns(),
        sa.Column("account_name", sa.String(length=200), nullable=False),
        sa.Column("bank_name", sa.String(length=200), nullable=True),
        sa.Column("amount", sa.Numeric(precision=20, scale=6), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_bank_balances_account_date",
        "bank_balances",
        ["account_name", "bank_name", "date"],
    )

    # Investors
    op.create_table(
        "investors",
        *_audit_columns(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=200), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_investors_email"),
    )

    op.create_table(
        "investor_cashflows",
        *_audit_columns(),
        sa.Column("investor_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("amount", sa.Numeric(precision=20, scale=6), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["investor_id"], ["investors.id"]),
        sa.CheckConstraint("type IN ('DEPOSIT', 'WITHDRAWAL')", name="ck_investor_cashflows_type"),
        sa.CheckConstraint("amount > 0", name="ck_investor_cashflows_amount_positive"),
    )
    op.create_index(
        "ix_investor_cashflows_investor_date",
        "investor_cashflows",
        ["investor_id", "date"],
    )

    # Period snapshots
    op.create_table(
        "period_snapshots",
        *_audit_columns(),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("total_asset_value", sa.Numeric(precision=20, scale=6), nullable=False),
        sa.Column("total_bank_balance", sa.Numeric(precision=20, scale=6), nullable=False),
        sa.Column("total_liabilities", sa.Numeric(precision=20, scale=6), nullable=False),
        sa.Column("nav", sa.Numeric(precision=20, scale=6), nullable=False),
        sa.Column("performance_fee_rate", sa.Numeric(precision=10, scale=6), nullable=True),
        sa.Column("total_performance_fee", sa.Numeric(precision=20, scale=6), nullable=True),
        sa.Column("profit_base", sa.String(length=20), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_period_snapshots_date", "period_snapshots", ["date"])

    op.create_table(
        "investor_snapshots",
        *_audit_columns(),
        sa.Column("snapshot_id", sa.Integer(), nullable=False),
        sa.Column("investor_id", sa.Integer(), nullable=False),
        sa.Column("capital_amount", sa.Numeric(precision=20, scale=6), nullable=False),
        sa.Column("ownership_percent", sa.Numeric(precision=10, scale=6), nullable=False),
        sa.Column("performance_fee", sa.Numeric(precision=20, scale=6), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["snapshot_id"], ["period_snapshots.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["investor_id"], ["investors.id"]),
    )
    op.create_index("ix_investor_snapshots_snapshot_id", "investor_snapshots", ["snapshot_id"])
    op.create_index("ix_investor_snapshots_investor", "investor_snapshots", ["investor_id"])


def downgrade() -> None:
    op.drop_index("ix_investor_snapshots_investor", table_name="investor_snapshots")
    op.drop_index("ix_investor_snapshots_snapshot_id", table_name="investor_snapshots")
    op.drop_table("investor_snapshots")
    op.drop_index("ix_period_snapshots_date", table_name="period_snapshots")
    op.drop_table("period_snapshots")
    op.drop_index("ix_investor_cashflows_investor_date", table_name="investor_cashflows")
    op.drop_table("investor_cashflows")
    op.drop_table("investors")
    op.drop_index("ix_bank_balances_account_date", table_name="bank_balances")
    op.drop_table("bank_balances")
    op.drop_table("liabilities")
    op.drop_index("ix_asset_events_asset_date", table_name="asset_events")
    op.drop_table("asset_events")
    op.drop_index("ix_assets_status", table_name="assets")
    op.drop_table("assets")
