"""create vendor plan, subscription and lead quota tables

Revision ID: 3f7a2c1d9b40
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3f7a2c1d9b40"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "vendors",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_name", sa.String(length=150), nullable=False),
        sa.Column("email", sa.String(length=150), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_vendors_id"), "vendors", ["id"], unique=False)

    op.create_table(
        "vendor_plans",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("duration_days", sa.Integer(), nullable=False, server_default="365"),
        sa.Column("daily_limit", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("weekly_limit", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("yearly_limit", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()"), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index(op.f("ix_vendor_plans_id"), "vendor_plans", ["id"], unique=False)
    op.create_index("ix_vendor_plans_is_active", "vendor_plans", ["is_active"], unique=False)

    op.create_table(
        "vendor_plan_subscriptions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("vendor_id", sa.Integer(), nullable=False),
        sa.Column("plan_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="ACTIVE"),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=False),
        sa.Column("plan_duration_days", sa.Integer(), nullable=True),
        sa.Column("auto_renewal_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("renewal_notification_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("renewal_notification_sent_at", sa.DateTime(), nullable=True),
        sa.Column("renewal_claimed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()"), nullable=True),
        sa.CheckConstraint("end_date > start_date", name="ck_vendor_plan_subscriptions_period"),
        sa.ForeignKeyConstraint(["vendor_id"], ["vendors.id"]),
        sa.ForeignKeyConstraint(["plan_id"], ["vendor_plans.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_vendor_plan_subscriptions_id"), "vendor_plan_subscriptions", ["id"], unique=False)
    op.create_index(
        "ix_vendor_plan_subscriptions_status_end", "vendor_plan_subscriptions", ["status", "end_date"], unique=False
    )
    op.create_index(
        "ix_vendor_plan_subscriptions_vendor_status", "vendor_plan_subscriptions", ["vendor_id", "status"], unique=False
    )

    op.create_table(
        "vendor_lead_quota",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("vendor_id", sa.Integer(), nullable=False),
        sa.Column("plan_id", sa.Integer(), nullable=True),
        sa.Column("daily_used", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("daily_limit", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("weekly_used", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("weekly_limit", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("yearly_used", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("yearly_limit", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_reset_date", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()"), nullable=True),
        sa.ForeignKeyConstraint(["vendor_id"], ["vendors.id"]),
        sa.ForeignKeyConstraint(["plan_id"], ["vendor_plans.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_vendor_lead_quota_id"), "vendor_lead_quota", ["id"], unique=False)
    op.create_index(op.f("ix_vendor_lead_quota_vendor_id"), "vendor_lead_quota", ["vendor_id"], unique=True)


def downgrade() -> None:
    op.drop_index(op.f("ix_vendor_lead_quota_vendor_id"), table_name="vendor_lead_quota")
    op.drop_index(op.f("ix_vendor_lead_quota_id"), table_name="vendor_lead_quota")
    op.drop_table("vendor_lead_quota")
    op.drop_index("ix_vendor_plan_subscriptions_vendor_status", table_name="vendor_plan_subscriptions")
    op.drop_index("ix_vendor_plan_subscriptions_status_end", table_name="vendor_plan_subscriptions")
    op.drop_index(op.f("ix_vendor_plan_subscriptions_id"), table_name="vendor_plan_subscriptions")
    op.drop_table("vendor_plan_subscriptions")
    op.drop_index("ix_vendor_plans_is_active", table_name="vendor_plans")
    op.drop_index(op.f("ix_vendor_plans_id"), table_name="vendor_plans")
    op.drop_table("vendor_plans")
    op.drop_index(op.f("ix_vendors_id"), table_name="vendors")
    op.drop_table("vendors")
