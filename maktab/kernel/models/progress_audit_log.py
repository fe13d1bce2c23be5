"""
Immutable progress audit log.

One row per changed field per accepted operation. Append-only: rows are
never updated or deleted by the engine.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from maktab.kernel.models.base import Base, generate_uuid


class ProgressAuditLog(Base):
    """Before/after record of a single curriculum field change."""

    __tablename__ = "progress_audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )

    # Student reference
    student_id: Mapped[uuid.UUID] = mapped_column(Uuid(), nullable=False, index=True)
    student_name: Mapped[str] = mapped_column(String(255), nullable=False)
    student_group: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)

    # Change (values pre-rendered for display)
    field_changed: Mapped[str] = mapped_column(String(50), nullable=False)
    old_value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    new_value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Actor
    performed_by: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    performed_by_name: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        Index("ix_progress_audit_logs_student_time", "student_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<ProgressAuditLog {self.field_changed} {self.old_value!r}->{self.new_value!r}>"
