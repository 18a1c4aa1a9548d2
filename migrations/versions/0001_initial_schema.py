"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # experiments
    op.create_table(
        "experiments",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("title", sa.String(), nullable=True),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("languages", sa.JSON(), nullable=True),
        sa.Column("design", sa.JSON(), nullable=True),
        sa.Column("hint_rules", sa.JSON(), nullable=True),
        sa.Column("delayed_window_hours", sa.JSON(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="draft"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_experiments_created_at", "experiments", ["created_at"])

    # participants
    op.create_table(
        "participants",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("participant_code", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False, server_default="student"),
        sa.Column("locale", sa.String(), nullable=False, server_default="en"),
        sa.Column("timezone", sa.String(), nullable=True),
        sa.Column("consent", sa.JSON(), nullable=True),
        sa.Column("demographics", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_participants_participant_code", "participants", ["participant_code"], unique=True)

    # events (telemetry)
    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("participant_id", sa.String(), nullable=True),
        sa.Column("experiment_id", sa.String(), nullable=True),
        sa.Column("session_id", sa.String(), nullable=True),
        sa.Column("event_type", sa.String(), nullable=False),
        sa.Column("locale", sa.String(), nullable=True),
        sa.Column("payload", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_events_participant_id", "events", ["participant_id"])
    op.create_index("ix_events_experiment_id", "events", ["experiment_id"])
    op.create_index("ix_events_event_type", "events", ["event_type"])
    op.create_index("ix_events_created_at", "events", ["created_at"])

    # task_results (scored responses)
    op.create_table(
        "task_results",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("participant_id", sa.String(), nullable=True),
        sa.Column("experiment_id", sa.String(), nullable=True),
        sa.Column("item_id", sa.String(), nullable=True),
        sa.Column("phase", sa.String(), nullable=False, server_default="immediate"),
        sa.Column("locale", sa.String(), nullable=False, server_default="en"),
        sa.Column("response_raw", sa.Text(), nullable=True),
        sa.Column("correct_raw", sa.Text(), nullable=True),
        sa.Column("response_normalized", sa.Text(), nullable=False, server_default=""),
        sa.Column("correct_normalized", sa.Text(), nullable=False, server_default=""),
        sa.Column("edit_distance", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("similarity", sa.Float(), nullable=False, server_default="0"),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("time_on_item_seconds", sa.Float(), nullable=False, server_default="0"),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_task_results_participant_id", "task_results", ["participant_id"])
    op.create_index("ix_task_results_experiment_id", "task_results", ["experiment_id"])
    op.create_index("ix_task_results_created_at", "task_results", ["created_at"])

    # recall_sessions (delayed recall links)
    op.create_table(
        "recall_sessions",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("participant_id", sa.String(), nullable=False),
        sa.Column("experiment_id", sa.String(), nullable=False),
        sa.Column("token", sa.String(), nullable=False),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("delay_hours", sa.Float(), nullable=False, server_default="48"),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("bulk_generated", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("accessed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completion_data", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("status IN ('pending','started','completed')", name="ck_recall_sessions_status"),
    )
    op.create_index("ix_recall_sessions_participant_id", "recall_sessions", ["participant_id"])
    op.create_index("ix_recall_sessions_experiment_id", "recall_sessions", ["experiment_id"])
    op.create_index("ix_recall_sessions_token", "recall_sessions", ["token"], unique=True)


def downgrade() -> None:
    op.drop_table("recall_sessions")
    op.drop_table("task_results")
    op.drop_table("events")
    op.drop_table("participants")
    op.drop_table("experiments")
