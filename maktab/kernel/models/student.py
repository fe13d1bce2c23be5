"""
Student model - the persisted record the curriculum engine reads and updates.

Only one stage's fields are active at a time (chosen by student_group);
fields of other stages may hold stale values from before a graduation.
"""

import uuid
from datetime import date
from typing import Optional

from sqlalchemy import Boolean, Date, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from maktab.kernel.models.base import Base, TimestampMixin, generate_uuid


class Student(Base, TimestampMixin):
    """Student row with curriculum progress fields."""

    __tablename__ = "students"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    gender: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    student_group: Mapped[Optional[str]] = mapped_column(String(5), nullable=True, index=True)
    assigned_teacher: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Group A
    qaidah_level: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    duas_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Group B
    quran_juz: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    quran_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    tajweed_level: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    tajweed_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Group C
    hifz_sabak: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    hifz_s_para: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    hifz_daur: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    hifz_graduated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    juz_amma_surah: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    juz_amma_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Monthly due-date bookkeeping ("YYYY-MM")
    last_progress_month: Mapped[Optional[str]] = mapped_column(String(7), nullable=True)
    progress_due_month: Mapped[Optional[str]] = mapped_column(String(7), nullable=True)
    progress_due_since_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    def __repr__(self) -> str:
        return f"<Student {self.name} group={self.student_group}>"
