"""create newsletter curation tables

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "newsletter_sources",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("email_address", sa.String(length=320), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("last_ingested_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("total_ingested", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email_address"),
    )
    op.create_index("ix_newsletter_sources_is_active", "newsletter_sources", ["is_active"], unique=False)

    op.create_table(
        "articles",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(length=512), nullable=False),
        sa.Column("url", sa.String(length=2048), nullable=True),
        sa.Column("source", sa.String(length=256), nullable=True),
        sa.Column("author", sa.String(length=256), nullable=True),
        sa.Column("full_text", sa.Text(), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column(
            "key_insights",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=True,
            comment="List of short takeaway strings",
        ),
        sa.Column("publication_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("imported_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("is_favourite", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("word_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_articles_imported_at", "articles", ["imported_at"], unique=False)
    op.create_index("ix_articles_source", "articles", ["source"], unique=False)

    op.create_table(
        "raw_emails",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("subject", sa.Text(), nullable=True),
        sa.Column("from_address", sa.String(length=320), nullable=True),
        sa.Column("from_name", sa.String(length=256), nullable=True),
        sa.Column("raw_text", sa.Text(), nullable=True),
        sa.Column("raw_html", sa.Text(), nullable=True),
        sa.Column("gmail_message_id", sa.String(length=128), nullable=True),
        sa.Column("gmail_thread_id", sa.String(length=128), nullable=True),
        sa.Column(
            "status",
            sa.String(length=16),
            nullable=False,
            server_default=sa.text("'pending'"),
            comment="pending, approved, discarded, error",
        ),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("article_id", sa.Integer(), nullable=True),
        sa.Column("received_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["article_id"], ["articles.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_raw_emails_status_received_at", "raw_emails", ["status", "received_at"], unique=False)
    op.create_index("ix_raw_emails_article_id", "raw_emails", ["article_id"], unique=False)
    op.create_index(
        "uq_raw_emails_gmail_message_id",
        "raw_emails",
        ["gmail_message_id"],
        unique=True,
        postgresql_where=sa.text("gmail_message_id IS NOT NULL"),
    )

    op.create_table(
        "ingest_log",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("run_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("emails_found", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("emails_new", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("emails_skipped", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("duration_ms", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_ingest_log_run_at", "ingest_log", ["run_at"], unique=False)

    op.create_table(
        "generated_drafts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("article_id", sa.Integer(), nullable=False),
        sa.Column("format", sa.String(length=32), nullable=False),
        sa.Column("title", sa.String(length=512), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("angle", sa.String(length=512), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["article_id"], ["articles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_generated_drafts_article_created_at",
        "generated_drafts",
        ["article_id", "created_at"],
        unique=False,
    )
    op.create_index(
        "ix_generated_drafts_article_format",
        "generated_drafts",
        ["article_id", "format"],
        unique=False,
    )

    op.create_table(
        "content_repurposing",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("article_id", sa.Integer(), nullable=False),
        sa.Column("format", sa.String(length=32), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default=sa.text("'untouched'")),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("draft_id", sa.Integer(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["article_id"], ["articles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["draft_id"], ["generated_drafts.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("article_id", "format", name="uq_content_repurposing_article_format"),
    )
    op.create_index(
        "ix_content_repurposing_article_status",
        "content_repurposing",
        ["article_id", "status"],
        unique=False,
    )
    op.create_index(
        "ix_content_repurposing_article_updated_at",
        "content_repurposing",
        ["article_id", "updated_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_content_repurposing_article_updated_at", table_name="content_repurposing")
    op.drop_index("ix_content_repurposing_article_status", table_name="content_repurposing")
    op.drop_table("content_repurposing")
    op.drop_index("ix_generated_drafts_article_format", table_name="generated_drafts")
    op.drop_index("ix_generated_drafts_article_created_at", table_name="generated_drafts")
    op.drop_table("generated_drafts")
    op.drop_index("ix_ingest_log_run_at", table_name="ingest_log")
    op.drop_table("ingest_log")
    op.drop_index("uq_raw_emails_gmail_message_id", table_name="raw_emails")
    op.drop_index("ix_raw_emails_article_id", table_name="raw_emails")
    op.drop_index("ix_raw_emails_status_received_at", table_name="raw_emails")
    op.drop_table("raw_emails")
    op.drop_index("ix_articles_source", table_name="articles")
    op.drop_index("ix_articles_imported_at", table_name="articles")
    op.drop_table("articles")
    op.drop_index("ix_newsletter_sources_is_active", table_name="newsletter_sources")
    op.drop_table("newsletter_sources")
