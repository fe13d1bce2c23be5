"""
Kernel Layer

- Student records (the curriculum engine only proposes partial updates)
- Immutable progress audit log (one row per changed field)
- Monthly progress snapshots
"""

from maktab.kernel.models import (
    Base,
    Student,
    ProgressAuditLog,
    StudentProgressSnapshot,
)
from maktab.kernel.stores import (
    StudentDirectory,
    StudentNotFoundError,
    ProgressAuditStore,
    SnapshotStore,
)

__all__ = [
    "Base",
    "Student",
    "ProgressAuditLog",
    "StudentProgressSnapshot",
    "StudentDirectory",
    "StudentNotFoundError",
    "ProgressAuditStore",
    "SnapshotStore",
]
