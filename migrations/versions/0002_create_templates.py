"""create templates and template tasks"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0002_create_templates"
down_revision = "0001_create_events_people"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "templates",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
    )
    op.create_table(
        "template_tasks",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "template_id",
            sa.Uuid(),
            sa.ForeignKey("templates.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("category", sa.String(length=50), nullable=False, server_default="general"),
        sa.Column("relative_due_days", sa.Integer(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_template_tasks_template_id", "template_tasks", ["template_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_template_tasks_template_id", table_name="template_tasks")
    op.drop_table("template_tasks")
    op.drop_table("templates")
