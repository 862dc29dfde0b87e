"""SQLAlchemy ORM models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from ..utils.clock import utcnow

ACCOUNT_ID_MAX_LENGTH = 128
TITLE_MAX_LENGTH = 255


class Base(DeclarativeBase):
    """Base declarative class."""


class AccountModel(Base):
    __tablename__ = "account"

    account_id: Mapped[str] = mapped_column(String(ACCOUNT_ID_MAX_LENGTH), primary_key=True)
    balance: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    trial_expires_at: Mapped[datetime | None] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    jobs: Mapped[list["GenerationJobModel"]] = relationship(back_populates="account")

    __table_args__ = (CheckConstraint("balance >= 0", name="ck_account_balance_non_negative"),)


class GenerationJobModel(Base):
    __tablename__ = "generation_job"

    job_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    account_id: Mapped[str] = mapped_column(
        String(ACCOUNT_ID_MAX_LENGTH),
        ForeignKey("account.account_id"),
        nullable=False,
        index=True,
    )
    kind: Mapped[str] = mapped_column(String(16), nullable=False)
    script_text: Mapped[str | None] = mapped_column(Text)
    title: Mapped[str | None] = mapped_column(String(TITLE_MAX_LENGTH))
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="pending")
    error_message: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    account: Mapped[AccountModel] = relationship(back_populates="jobs")
    artifact: Mapped["ArtifactModel | None"] = relationship(back_populates="job", uselist=False)

    __table_args__ = (Index("ix_generation_job_account_created", "account_id", "created_at"),)


class ArtifactModel(Base):
    __tablename__ = "artifact"

    artifact_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    job_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("generation_job.job_id"), nullable=False, unique=True
    )
    account_id: Mapped[str] = mapped_column(
        String(ACCOUNT_ID_MAX_LENGTH), nullable=False, index=True
    )
    content_kind: Mapped[str] = mapped_column(String(16), nullable=False)  # video|audio
    format: Mapped[str] = mapped_column(String(16), nullable=False)
    content_type: Mapped[str] = mapped_column(String(64), nullable=False)
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False)
    duration_sec: Mapped[float | None] = mapped_column(Float)
    path: Mapped[str] = mapped_column(String(512), nullable=False)
    checksum: Mapped[str | None] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    job: Mapped[GenerationJobModel] = relationship(back_populates="artifact")
