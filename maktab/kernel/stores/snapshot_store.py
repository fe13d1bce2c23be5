"""
Snapshot store - one progress snapshot per student per month.
"""

import uuid
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from maktab.kernel.models.snapshot import StudentProgressSnapshot
from maktab.schemas.progress import StudentCurriculumRecord

SNAPSHOT_FIELDS = (
    "gender",
    "student_group",
    "qaidah_level",
    "duas_status",
    "quran_juz",
    "quran_completed",
    "tajweed_level",
    "tajweed_completed",
    "hifz_sabak",
    "hifz_s_para",
    "hifz_daur",
    "hifz_graduated",
    "juz_amma_surah",
    "juz_amma_completed",
)


class SnapshotStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def upsert(self, record: StudentCurriculumRecord, month: str) -> StudentProgressSnapshot:
        """Insert the month's snapshot, or overwrite it if one exists."""
        values = {name: getattr(record, name) for name in SNAPSHOT_FIELDS}
        q = select(StudentProgressSnapshot).where(
            StudentProgressSnapshot.student_id == record.id,
            StudentProgressSnapshot.snapshot_month == month,
        )
        result = await self.session.execute(q)
        row = result.scalar_one_or_none()
        if row is None:
            row = StudentProgressSnapshot(student_id=record.id, snapshot_month=month, **values)
            self.session.add(row)
        else:
            for name, value in values.items():
                setattr(row, name, value)
        await self.session.flush()
        return row

    async def get_for_student(self, student_id: uuid.UUID) -> List[StudentProgressSnapshot]:
        """Snapshots oldest month first."""
        q = (
            select(StudentProgressSnapshot)
            .where(StudentProgressSnapshot.student_id == student_id)
            .order_by(StudentProgressSnapshot.snapshot_month)
        )
        result = await self.session.execute(q)
        return list(result.scalars().all())
