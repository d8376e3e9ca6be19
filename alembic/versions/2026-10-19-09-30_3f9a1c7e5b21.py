"""Initial ListSeerr schema

Revision ID: 3f9a1c7e5b21
Revises:
Create Date: 2026-10-19 09:30:12.418230

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "3f9a1c7e5b21"
down_revision = None
branch_labels = None
depends_on = None

PROVIDERS = ("MDBLIST", "TRAKT", "TRAKT_CHART", "STEVENLU")
EXECUTION_STATUSES = ("RUNNING", "SUCCESS", "ERROR")
TRIGGER_TYPES = ("MANUAL", "SCHEDULED")
MEDIA_TYPES = ("MOVIE", "SHOW")


def upgrade() -> None:
    op.create_table(
        "media_list",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("owner_id", sa.String, nullable=False),
        sa.Column("name", sa.String, nullable=False),
        sa.Column("url", sa.String, nullable=False),
        sa.Column("provider", sa.Enum(*PROVIDERS, name="provider"), nullable=False),
        sa.Column("enabled", sa.Boolean, nullable=False),
        sa.Column("max_items", sa.Integer, nullable=False),
        sa.Column("schedule", sa.String, nullable=True),
        sa.Column("archived", sa.Boolean, nullable=False),
        sa.Column("updated_at", sa.DateTime, nullable=False),
        sa.UniqueConstraint("owner_id", "name", name="uq_media_list_name"),
    )
    op.create_index("ix_media_list_owner_id", "media_list", ["owner_id"])
    op.create_index("ix_media_list_provider", "media_list", ["provider"])
    op.create_index("ix_media_list_archived", "media_list", ["archived"])

    op.create_table(
        "execution_history",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column(
            "list_id",
            sa.Integer,
            sa.ForeignKey("media_list.id", onupdate="CASCADE"),
            nullable=False,
        ),
        sa.Column("batch_id", sa.String, nullable=False),
        sa.Column(
            "status",
            sa.Enum(*EXECUTION_STATUSES, name="executionstatus"),
            nullable=False,
        ),
        sa.Column(
            "trigger_type", sa.Enum(*TRIGGER_TYPES, name="triggertype"), nullable=False
        ),
        sa.Column("started_at", sa.DateTime, nullable=False),
        sa.Column("completed_at", sa.DateTime, nullable=True),
        sa.Column("items_found", sa.Integer, nullable=False),
        sa.Column("items_requested", sa.Integer, nullable=False),
        sa.Column("items_failed", sa.Integer, nullable=False),
        sa.Column("items_skipped_available", sa.Integer, nullable=False),
        sa.Column("items_skipped_previously_requested", sa.Integer, nullable=False),
        sa.Column("error_message", sa.String, nullable=True),
    )
    op.create_index("ix_execution_history_list_id", "execution_history", ["list_id"])
    op.create_index(
        "ix_execution_history_batch_id", "execution_history", ["batch_id"]
    )
    op.create_index("ix_execution_history_status", "execution_history", ["status"])
    op.create_index(
        "ix_execution_history_started_at", "execution_history", ["started_at"]
    )
    op.create_index(
        "ix_execution_history_list_started",
        "execution_history",
        ["list_id", "started_at"],
    )

    op.create_table(
        "request_cache",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("external_id", sa.Integer, nullable=False),
        sa.Column(
            "first_list_id",
            sa.Integer,
            sa.ForeignKey("media_list.id", onupdate="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String, nullable=False),
        sa.Column("year", sa.Integer, nullable=True),
        sa.Column(
            "media_type", sa.Enum(*MEDIA_TYPES, name="mediatype"), nullable=False
        ),
        sa.Column("cached_at", sa.DateTime, nullable=False),
    )
    op.create_index(
        "ix_request_cache_external_id", "request_cache", ["external_id"], unique=True
    )
    op.create_index(
        "ix_request_cache_first_list_id", "request_cache", ["first_list_id"]
    )


def downgrade() -> None:
    op.drop_table("request_cache")
    op.drop_table("execution_history")
    op.drop_table("media_list")
