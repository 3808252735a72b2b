"""Create bible_books, vocab_sets and study_sessions tables

Revision ID: 001
Revises: None
Create Date: 2025-01-10 00:00:00.000000+00:00

What:  Initial schema for the reference data, vocabulary sets and study sessions.
How:   PostgreSQL-specific server defaults (gen_random_uuid, TIMESTAMPTZ);
       the ORM models carry Python-side defaults for the same columns.

Seed data for bible_books and vocab_sets is loaded separately.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "bible_books",
        sa.Column("id", sa.Text(), nullable=False, comment="Slug, e.g. 'genesis'"),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("hebrew_name", sa.Text(), nullable=False),
        sa.Column("abbreviation", sa.Text(), nullable=False),
        sa.Column("chapter_count", sa.Integer(), nullable=False),
        sa.Column(
            "testament",
            sa.String(8),
            nullable=False,
            server_default=sa.text("'OT'"),
        ),
        sa.Column(
            "order_index",
            sa.Integer(),
            nullable=False,
            comment="Canonical position; the list endpoint sorts by it",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=True,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_bible_books_order_index", "bible_books", ["order_index"])

    op.create_table(
        "vocab_sets",
        sa.Column("id", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("total_words", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "is_active",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
            comment="Sets studied by the flashcard view",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_vocab_sets_is_active", "vocab_sets", ["is_active"])

    op.create_table(
        "study_sessions",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column(
            "user_id",
            sa.String(64),
            nullable=False,
            comment="Identity provider user id of the owner",
        ),
        sa.Column(
            "set_id",
            sa.Text(),
            nullable=True,
            comment="Vocab set studied; not a foreign key",
        ),
        sa.Column("mode", sa.String(32), nullable=False, server_default=sa.text("'study'")),
        sa.Column("start_time", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("last_activity", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("end_time", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("duration_seconds", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("cards_studied", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_study_sessions_user_id", "study_sessions", ["user_id"])
    op.create_index("idx_study_sessions_start_time", "study_sessions", ["start_time"])


def downgrade() -> None:
    """Drops all three tables. Destructive: session history is lost."""
    op.drop_index("idx_study_sessions_start_time", table_name="study_sessions")
    op.drop_index("idx_study_sessions_user_id", table_name="study_sessions")
    op.drop_table("study_sessions")
    op.drop_index("idx_vocab_sets_is_active", table_name="vocab_sets")
    op.drop_table("vocab_sets")
    op.drop_index("idx_bible_books_order_index", table_name="bible_books")
    op.drop_table("bible_books")
