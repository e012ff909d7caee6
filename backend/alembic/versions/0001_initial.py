"""users, bills, categories, notifications

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

bill_status = sa.Enum("pending", "paid", name="billstatus")
channel = sa.Enum("email", "sms", "push", name="notificationchannel")


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("notification_email", sa.String(255), nullable=True),
        sa.Column("notification_days_before", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "bills",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("category", sa.String(120), nullable=True),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("status", bill_status, nullable=False),
        sa.Column("paid_at", sa.DateTime(), nullable=True),
        sa.Column("invoice_file", sa.String(255), nullable=True),
        sa.Column("invoice_filename", sa.String(255), nullable=True),
        sa.Column("proof_file", sa.String(255), nullable=True),
        sa.Column("proof_filename", sa.String(255), nullable=True),
        sa.Column("payment_instructions", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_bills_id", "bills", ["id"])
    op.create_index("ix_bills_user_due_date", "bills", ["user_id", "due_date"])
    op.create_index("ix_bills_user_status", "bills", ["user_id", "status"])

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("color", sa.String(7), nullable=False),
        sa.Column("icon", sa.String(16), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_categories_id", "categories", ["id"])
    op.create_index("ix_categories_user_id", "categories", ["user_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("bill_id", sa.Integer(), sa.ForeignKey("bills.id", ondelete="SET NULL"), nullable=True),
        sa.Column("channel", channel, nullable=False),
        sa.Column("message", sa.String(500), nullable=False),
        sa.Column("sent_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_notifications_id", "notifications", ["id"])
    op.create_index("ix_notifications_bill_id", "notifications", ["bill_id"])
    op.create_index("ix_notifications_user_sent_at", "notifications", ["user_id", "sent_at"])


def downgrade():
    op.drop_table("notifications")
    op.drop_table("categories")
    op.drop_table("bills")
    op.drop_table("users")
    bill_status.drop(op.get_bind(), checkfirst=True)
    channel.drop(op.get_bind(), checkfirst=True)
