"""
Persistence collaborators used by the progress service.
"""

from maktab.kernel.stores.student_directory import StudentDirectory, StudentNotFoundError
from maktab.kernel.stores.audit_store import ProgressAuditStore
from maktab.kernel.stores.snapshot_store import SnapshotStore

__all__ = [
    "StudentDirectory",
    "StudentNotFoundError",
    "ProgressAuditStore",
    "SnapshotStore",
]
