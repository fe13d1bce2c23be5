"""
Student Directory - reads curriculum records and applies partial updates.
"""

import uuid
from typing import Any, List, Mapping, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from maktab.kernel.models.student import Student
from maktab.schemas.progress import StudentCurriculumRecord


class StudentNotFoundError(LookupError):
    """No student with the given id."""


class StudentDirectory:
    """
    SQLAlchemy-backed student lookup and mutation.

    Usage:
        directory = StudentDirectory(session)
        record = await directory.get_record(student_id)
        record = await directory.apply_update(student_id, {"student_group": "B"})
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_record(self, student_id: uuid.UUID) -> StudentCurriculumRecord:
        row = await self._get_row(student_id)
        return StudentCurriculumRecord.model_validate(row)

    async def apply_update(
        self,
        student_id: uuid.UUID,
        fields: Mapping[str, Any],
    ) -> StudentCurriculumRecord:
        """
        Write a partial field update; never overwrites the whole record.

        Caller should commit after audit entries are appended.
        """
        if fields:
            await self.session.execute(
                update(Student)
                .where(Student.id == student_id)
                .values(**dict(fields))
                .execution_options(synchronize_session="fetch")
            )
            await self.session.flush()

        row = await self._get_row(student_id)
        await self.session.refresh(row)
        return StudentCurriculumRecord.model_validate(row)

    async def create_student(
        self,
        name: str,
        gender: str,
        student_group: Optional[str] = None,
        **fields: Any,
    ) -> StudentCurriculumRecord:
        """Admit a student. Used by callers outside the engine and by tests."""
        row = Student(name=name, gender=gender, student_group=student_group, **fields)
        self.session.add(row)
        await self.session.flush()
        await self.session.refresh(row)
        return StudentCurriculumRecord.model_validate(row)

    async def list_group(self, gender: str, student_group: str) -> List[StudentCurriculumRecord]:
        """Students of one maktab group, by name."""
        q = (
            select(Student)
            .where(Student.gender == gender, Student.student_group == student_group)
            .order_by(Student.name)
        )
        result = await self.session.execute(q)
        return [StudentCurriculumRecord.model_validate(r) for r in result.scalars().all()]

    async def _get_row(self, student_id: uuid.UUID) -> Student:
        result = await self.session.execute(select(Student).where(Student.id == student_id))
        row = result.scalar_one_or_none()
        if row is None:
            raise StudentNotFoundError(f"Student {student_id} not found")
        return row
