"""
Kernel Data Models

SQLAlchemy models for the students table, the progress audit log and
monthly progress snapshots.
"""

from maktab.kernel.models.base import Base, TimestampMixin, generate_uuid
from maktab.kernel.models.student import Student
from maktab.kernel.models.progress_audit_log import ProgressAuditLog
from maktab.kernel.models.snapshot import StudentProgressSnapshot

__all__ = [
    "Base",
    "TimestampMixin",
    "generate_uuid",
    "Student",
    "ProgressAuditLog",
    "StudentProgressSnapshot",
]
