"""
Progress audit store - append-only persistence for audit entries.
"""

import uuid
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from maktab.kernel.models.progress_audit_log import ProgressAuditLog
from maktab.schemas.progress import ProgressAuditEntry


def _row_to_entry(row: ProgressAuditLog) -> ProgressAuditEntry:
    return ProgressAuditEntry(
        student_id=row.student_id,
        student_name=row.student_name,
        field_changed=row.field_changed,
        old_value=row.old_value if row.old_value is not None else "None",
        new_value=row.new_value if row.new_value is not None else "None",
        student_group=row.student_group,
        performed_by=row.performed_by,
        performed_by_name=row.performed_by_name,
        timestamp=row.created_at,
    )


class ProgressAuditStore:
    """
    Service for the immutable progress audit log.

    Usage:
        store = ProgressAuditStore(session)
        await store.append(entries)
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(self, entries: Iterable[ProgressAuditEntry]) -> List[ProgressAuditLog]:
        """Add entries to the session. Caller should flush/commit."""
        rows = [
            ProgressAuditLog(
                student_id=entry.student_id,
                student_name=entry.student_name,
                student_group=entry.student_group,
                field_changed=entry.field_changed,
                old_value=entry.old_value,
                new_value=entry.new_value,
                performed_by=entry.performed_by,
                performed_by_name=entry.performed_by_name,
                created_at=entry.timestamp,
            )
            for entry in entries
        ]
        self.session.add_all(rows)
        return rows

    async def get_student_history(
        self,
        student_id: uuid.UUID,
        limit: int = 100,
        offset: int = 0,
    ) -> List[ProgressAuditEntry]:
        """
        Audit history for one student.

        Returns:
            Entries newest first
        """
        q = (
            select(ProgressAuditLog)
            .where(ProgressAuditLog.student_id == student_id)
            .order_by(desc(ProgressAuditLog.created_at), ProgressAuditLog.field_changed)
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(q)
        return [_row_to_entry(r) for r in result.scalars().all()]

    async def get_activity(
        self,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        performed_by: Optional[str] = None,
        limit: int = 100,
    ) -> List[ProgressAuditEntry]:
        """
        Audit entries across students in a time window.

        Args:
            since: Start datetime filter
            until: End datetime filter
            performed_by: Only entries by this actor
            limit: Maximum number of entries

        Returns:
            Entries newest first
        """
        q = select(ProgressAuditLog)
        if since:
            q = q.where(ProgressAuditLog.created_at >= since)
        if until:
            q = q.where(ProgressAuditLog.created_at <= until)
        if performed_by:
            q = q.where(ProgressAuditLog.performed_by == performed_by)

        q = q.order_by(desc(ProgressAuditLog.created_at)).limit(limit)
        result = await self.session.execute(q)
        return [_row_to_entry(r) for r in result.scalars().all()]
