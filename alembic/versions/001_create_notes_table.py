"""Create notes table

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Creates the `notes` table: integer id, title, content, timestamps.
Rollback: downgrade() drops the table (destructive, all notes lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the notes table and the recency index. See jotter/models/note.py."""
    op.create_table(
        "notes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "title",
            sa.String(255),
            nullable=False,
            comment="Note title, required",
        ),
        sa.Column(
            "content",
            sa.Text(),
            nullable=False,
            comment="Note body, required",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this note was created (UTC)",
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this note was last changed (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )

    # List view orders by most recently updated first
    op.create_index(
        "idx_notes_updated_at",
        "notes",
        [sa.text("updated_at DESC")],
    )


def downgrade() -> None:
    op.drop_index("idx_notes_updated_at", table_name="notes")
    op.drop_table("notes")
