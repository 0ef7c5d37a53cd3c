"""init event link health tables

Revision ID: 0001_init
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Events table
    op.create_table(
        "events",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("organizer", sa.String(), nullable=True),
        sa.Column("candidate_url", sa.Text(), nullable=True),
        sa.Column("canonical_url", sa.Text(), nullable=True),
        sa.Column("url_status", sa.Integer(), nullable=True),
        sa.Column("redirect_chain", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("link_health_score", sa.Integer(), nullable=True),
        sa.Column("last_checked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("publishable", sa.Boolean(), nullable=False, server_default=sa.text("false")),
    )
    op.create_index("ix_events_link_health_score", "events", ["link_health_score"])
    op.create_index("ix_events_last_checked_at", "events", ["last_checked_at"])
    op.create_index("ix_events_publishable", "events", ["publishable"])
    op.create_index("ix_events_created_at", "events", ["created_at"])

    # URL tombstones table
    op.create_table(
        "event_url_tombstones",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("domain", sa.String(), nullable=False),
        sa.Column("path", sa.Text(), nullable=False),
        sa.Column("reason", sa.String(), nullable=False),
    )
    op.create_index(
        "ix_event_url_tombstones_domain_path",
        "event_url_tombstones",
        ["domain", "path"],
    )


def downgrade() -> None:
    op.drop_index("ix_event_url_tombstones_domain_path", table_name="event_url_tombstones")
    op.drop_table("event_url_tombstones")

    op.drop_index("ix_events_created_at", table_name="events")
    op.drop_index("ix_events_publishable", table_name="events")
    op.drop_index("ix_events_last_checked_at", table_name="events")
    op.drop_index("ix_events_link_health_score", table_name="events")
    op.drop_table("events")
