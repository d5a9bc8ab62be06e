"""init medfinder schema

Revision ID: 20261019_init
Revises:
Create Date: 2026-10-19

Catalog (medicines, pharmacies, inventory), chat log, search history,
anonymous weekly chat usage and mirrored account profiles.
"""
from alembic import op
import sqlalchemy as sa


revision = "20261019_init"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("email", sa.String(), nullable=True, unique=True),
        sa.Column("first_name", sa.String(), nullable=True),
        sa.Column("last_name", sa.String(), nullable=True),
        sa.Column("profile_image_url", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "medicines",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("generic_name", sa.String(), nullable=True),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("dosage", sa.String(), nullable=True),
        sa.Column("manufacturer", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "pharmacies",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("rating", sa.Float(), nullable=True),
        sa.Column("review_count", sa.Integer(), server_default="0"),
        sa.Column("is_open", sa.Boolean(), server_default=sa.true()),
        sa.Column("open_time", sa.String(), nullable=True),
        sa.Column("close_time", sa.String(), nullable=True),
        sa.Column("delivery_available", sa.Boolean(), server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "medicine_inventory",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("medicine_id", sa.String(length=36), sa.ForeignKey("medicines.id"), nullable=False),
        sa.Column("pharmacy_id", sa.String(length=36), sa.ForeignKey("pharmacies.id"), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("stock", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_updated", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("medicine_id", "pharmacy_id", name="uq_inventory_medicine_pharmacy"),
    )
    op.create_index(
        "ix_medicine_inventory_medicine_id", "medicine_inventory", ["medicine_id"], unique=False
    )

    op.create_table(
        "chat_messages",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("session_id", sa.String(), nullable=True),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_from_bot", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_chat_messages_user_created", "chat_messages", ["user_id", "created_at"], unique=False
    )
    op.create_index(
        "ix_chat_messages_session_created", "chat_messages", ["session_id", "created_at"], unique=False
    )

    op.create_table(
        "user_searches",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("session_id", sa.String(), nullable=True),
        sa.Column("query", sa.String(), nullable=False),
        sa.Column("results", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_user_searches_user_created", "user_searches", ["user_id", "created_at"], unique=False
    )
    op.create_index(
        "ix_user_searches_session_created", "user_searches", ["session_id", "created_at"], unique=False
    )

    # One row per anonymous session; week_start is the UTC instant of the current quota week.
    op.create_table(
        "anonymous_chat_usage",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("session_id", sa.String(), nullable=False, unique=True),
        sa.Column("ip_address", sa.String(), nullable=True),
        sa.Column("chat_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("week_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("last_used_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("anonymous_chat_usage")
    op.drop_index("ix_user_searches_session_created", table_name="user_searches")
    op.drop_index("ix_user_searches_user_created", table_name="user_searches")
    op.drop_table("user_searches")
    op.drop_index("ix_chat_messages_session_created", table_name="chat_messages")
    op.drop_index("ix_chat_messages_user_created", table_name="chat_messages")
    op.drop_table("chat_messages")
    op.drop_index("ix_medicine_inventory_medicine_id", table_name="medicine_inventory")
    op.drop_table("medicine_inventory")
    op.drop_table("pharmacies")
    op.drop_table("medicines")
    op.drop_table("users")
