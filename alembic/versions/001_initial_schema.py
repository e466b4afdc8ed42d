"""Initial schema: words, attached records, sentences and links.

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # ── 1. Words ──────────────────────────────────────────────────
    op.create_table(
        "word",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("word", sa.String(255), nullable=False),
        sa.Column("language_code", sa.String(10), nullable=False),
        sa.Column("translations_reduced_at", sa.DateTime, nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("word", "language_code", name="word_word_language_code_key"),
    )

    # ── 2. Translations ───────────────────────────────────────────
    op.create_table(
        "word_translation",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("word_id", sa.Integer, sa.ForeignKey("word.id"), nullable=False),
        sa.Column("language_code", sa.String(10), nullable=False),
        sa.Column("translation", sa.String(191), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(
            "word_id",
            "language_code",
            "translation",
            name="word_translation_word_id_language_code_translation_key",
        ),
    )

    # ── 3. Pronunciations ─────────────────────────────────────────
    op.create_table(
        "word_pronunciation",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("word_id", sa.Integer, sa.ForeignKey("word.id"), nullable=False),
        sa.Column("pronunciation", sa.String(255), nullable=False),
        sa.Column("pronunciation_type", sa.String(20), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(
            "word_id",
            "pronunciation",
            "pronunciation_type",
            name="word_pronunciation_word_id_pronunciation_pronunciation_type_key",
        ),
    )

    # ── 4. Stems ──────────────────────────────────────────────────
    op.create_table(
        "word_stem",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("word_id", sa.Integer, sa.ForeignKey("word.id"), nullable=False),
        sa.Column("stem", sa.String(255), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("word_id", "stem", name="word_stem_word_id_stem_key"),
    )

    # ── 5. User marks ─────────────────────────────────────────────
    op.create_table(
        "word_user_mark",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, nullable=False),
        sa.Column("word_id", sa.Integer, sa.ForeignKey("word.id"), nullable=False),
        sa.Column("mark", sa.Integer, nullable=False),
        sa.Column("note", sa.Text, nullable=False, server_default=""),
        sa.Column("source", sa.String(20), nullable=False, server_default="manual"),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "word_id", name="word_user_mark_user_id_word_id_key"),
        sa.CheckConstraint("mark >= 0 AND mark <= 5", name="word_user_mark_mark_range"),
    )
    op.create_index("idx_word_user_mark_user_updated", "word_user_mark", ["user_id", "updated_at"])

    # ── 6. Sentences ──────────────────────────────────────────────
    op.create_table(
        "sentence",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("lesson_id", sa.Integer, nullable=False),
        sa.Column("original_text", sa.Text, nullable=False),
        sa.Column("split_text", sa.JSON, nullable=True),
        sa.Column("start_time_ms", sa.Integer, nullable=True),
        sa.Column("end_time_ms", sa.Integer, nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_sentence_lesson", "sentence", ["lesson_id", "id"])

    # ── 7. Sentence ↔ word links ──────────────────────────────────
    op.create_table(
        "sentence_word",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("word_id", sa.Integer, sa.ForeignKey("word.id"), nullable=False),
        sa.Column("sentence_id", sa.Integer, sa.ForeignKey("sentence.id"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("word_id", "sentence_id", name="sentence_word_word_id_sentence_id_key"),
    )


def downgrade() -> None:
    op.drop_table("sentence_word")
    op.drop_table("sentence")
    op.drop_index("idx_word_user_mark_user_updated", table_name="word_user_mark")
    op.drop_table("word_user_mark")
    op.drop_table("word_stem")
    op.drop_table("word_pronunciation")
    op.drop_table("word_translation")
    op.drop_table("word")
