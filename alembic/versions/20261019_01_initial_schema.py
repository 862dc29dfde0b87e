"""Initial ledger, job and artifact schema."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20261019_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "account",
        sa.Column("account_id", sa.String(length=128), primary_key=True),
        sa.Column("balance", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("trial_expires_at", sa.DateTime()),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.CheckConstraint("balance >= 0", name="ck_account_balance_non_negative"),
    )

    op.create_table(
        "generation_job",
        sa.Column("job_id", sa.String(length=64), primary_key=True),
        sa.Column(
            "account_id",
            sa.String(length=128),
            sa.ForeignKey("account.account_id"),
            nullable=False,
        ),
        sa.Column("kind", sa.String(length=16), nullable=False),
        sa.Column("script_text", sa.Text()),
        sa.Column("title", sa.String(length=255)),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="pending"),
        sa.Column("error_message", sa.Text()),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )
    op.create_index("ix_generation_job_account_id", "generation_job", ["account_id"])
    op.create_index(
        "ix_generation_job_account_created", "generation_job", ["account_id", "created_at"]
    )

    op.create_table(
        "artifact",
        sa.Column("artifact_id", sa.String(length=64), primary_key=True),
        sa.Column(
            "job_id",
            sa.String(length=64),
            sa.ForeignKey("generation_job.job_id"),
            nullable=False,
            unique=True,
        ),
        sa.Column("account_id", sa.String(length=128), nullable=False),
        sa.Column("content_kind", sa.String(length=16), nullable=False),
        sa.Column("format", sa.String(length=16), nullable=False),
        sa.Column("content_type", sa.String(length=64), nullable=False),
        sa.Column("size_bytes", sa.Integer(), nullable=False),
        sa.Column("duration_sec", sa.Float()),
        sa.Column("path", sa.String(length=512), nullable=False),
        sa.Column("checksum", sa.String(length=64)),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )
    op.create_index("ix_artifact_account_id", "artifact", ["account_id"])


def downgrade() -> None:
    op.drop_index("ix_artifact_account_id", table_name="artifact")
    op.drop_table("artifact")
    op.drop_index("ix_generation_job_account_created", table_name="generation_job")
    op.drop_index("ix_generation_job_account_id", table_name="generation_job")
    op.drop_table("generation_job")
    op.drop_table("account")
