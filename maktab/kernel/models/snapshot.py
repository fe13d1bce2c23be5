"""
Monthly progress snapshots - a copy of every curriculum field per student per month.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from maktab.kernel.models.base import Base, generate_uuid


class StudentProgressSnapshot(Base):
    """Progress state captured when a month's progress is recorded."""

    __tablename__ = "student_progress_snapshots"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    student_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    snapshot_month: Mapped[str] = mapped_column(String(7), nullable=False)
    gender: Mapped[str] = mapped_column(String(10), nullable=False)
    student_group: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)

    qaidah_level: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    duas_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    quran_juz: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    quran_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    tajweed_level: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    tajweed_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    hifz_sabak: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    hifz_s_para: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    hifz_daur: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    hifz_graduated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    juz_amma_surah: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    juz_amma_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("student_id", "snapshot_month", name="uq_progress_snapshot_student_month"),
    )
