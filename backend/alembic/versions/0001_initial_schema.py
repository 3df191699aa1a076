"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates all tables for the Rent Stays booking service:
properties, bookings, booking_status_changes, activities.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVE_STATUS_PREDICATE = sa.text(
    "status IN ('under_review', 'approved', 'request_additional_details')"
)


def upgrade() -> None:
    # --- properties ---
    op.create_table(
        "properties",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("owner_id", sa.String(36), nullable=False, index=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("address", sa.String(500), nullable=False),
        sa.Column("city", sa.String(120), nullable=True),
        sa.Column("monthly_price", sa.Float, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="available"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    # --- bookings ---
    op.create_table(
        "bookings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("property_id", sa.String(36), sa.ForeignKey("properties.id"), nullable=False, index=True),
        sa.Column("applicant_id", sa.String(36), nullable=False, index=True),
        sa.Column("status", sa.String(30), nullable=False, server_default="under_review"),
        sa.Column("duration_description", sa.String(255), nullable=False),
        sa.Column("reason_of_stay", sa.Text, nullable=False),
        sa.Column("university_name", sa.String(255), nullable=False),
        sa.Column("current_address", sa.String(500), nullable=False),
        sa.Column("admin_notes", sa.Text, nullable=True),
        sa.Column("contract_url", sa.String(2048), nullable=True),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    # one active request per (applicant, property)
    op.create_index(
        "uq_bookings_active_applicant_property",
        "bookings",
        ["applicant_id", "property_id"],
        unique=True,
        sqlite_where=ACTIVE_STATUS_PREDICATE,
        postgresql_where=ACTIVE_STATUS_PREDICATE,
    )

    # --- booking_status_changes ---
    op.create_table(
        "booking_status_changes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("booking_id", sa.String(36), sa.ForeignKey("bookings.id"), nullable=False, index=True),
        sa.Column("from_status", sa.String(30), nullable=False),
        sa.Column("to_status", sa.String(30), nullable=False),
        sa.Column("actor_id", sa.String(36), nullable=False),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    # --- activities ---
    op.create_table(
        "activities",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("booking_id", sa.String(36), nullable=True, index=True),
        sa.Column("property_id", sa.String(36), nullable=True, index=True),
        sa.Column("actor_id", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("activities")
    op.drop_table("booking_status_changes")
    op.drop_index("uq_bookings_active_applicant_property", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("properties")
