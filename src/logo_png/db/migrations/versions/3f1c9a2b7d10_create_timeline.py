"""create timeline table

Learn: Same schema init_db() creates at startup; managed deployments run
`alembic upgrade head` instead and keep create_all as a no-op.

Revision ID: 3f1c9a2b7d10
Revises:
Create Date: 2026-10-18 12:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a2b7d10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "timeline",
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("clock_timestamp()"),
            nullable=False,
        ),
        sa.Column("image_png", sa.LargeBinary(), nullable=False),
        sa.PrimaryKeyConstraint("created_at"),
    )


def downgrade() -> None:
    op.drop_table("timeline")
