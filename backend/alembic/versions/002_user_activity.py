"""User activity: visit log table and visit counters on users.

Revision ID: 002_user_activity
Revises: 001_initial
Create Date: 2026-10-20

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "002_user_activity"
down_revision: Union[str, None] = "001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column("users", sa.Column("last_visit", sa.DateTime(timezone=True), nullable=True))
    op.add_column(
        "users",
        sa.Column("visit_count", sa.Integer, nullable=False, server_default="0"),
    )

    op.create_table(
        "user_activity",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id", UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("activity_time", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_user_activity_user_id_activity_time",
        "user_activity", ["user_id", "activity_time"],
    )


def downgrade() -> None:
    op.drop_table("user_activity")
    op.drop_column("users", "visit_count")
    op.drop_column("users", "last_visit")
