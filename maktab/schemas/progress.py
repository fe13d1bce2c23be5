"""
Pydantic schemas for the curriculum progress engine boundary.

StudentCurriculumRecord is the engine's read view of a student; the
*Submission models are what a teacher form hands in.
"""

import uuid
from datetime import date, datetime
from typing import Optional, Union

from pydantic import BaseModel, Field

from maktab.curriculum.duas import DuasStatus, decode_duas_status
from maktab.curriculum.reference import JUZ_AMMA_FIRST_SURAH, QAIDAH_COMPLETED_LEVEL


class StudentCurriculumRecord(BaseModel):
    """Curriculum view over a persisted student."""

    id: uuid.UUID
    name: str
    gender: str
    student_group: Optional[str] = None
    assigned_teacher: Optional[str] = None

    qaidah_level: Optional[int] = None
    duas_status: Optional[str] = None

    quran_juz: Optional[int] = None
    quran_completed: bool = False
    tajweed_level: Optional[int] = None
    tajweed_completed: bool = False

    hifz_sabak: Optional[int] = None
    hifz_s_para: Optional[int] = None
    hifz_daur: Optional[int] = None
    hifz_graduated: bool = False
    juz_amma_surah: Optional[int] = None
    juz_amma_completed: bool = False

    last_progress_month: Optional[str] = None
    progress_due_month: Optional[str] = None
    progress_due_since_date: Optional[date] = None

    class Config:
        from_attributes = True

    @property
    def duas(self) -> DuasStatus:
        return decode_duas_status(self.duas_status)

    @property
    def qaidah_completed(self) -> bool:
        return self.qaidah_level == QAIDAH_COMPLETED_LEVEL

    def with_fields(self, fields: dict) -> "StudentCurriculumRecord":
        """Record as it would read after a partial update."""
        return self.model_copy(update=fields)


class ActorIdentity(BaseModel):
    """Who performs a mutating operation. Resolved by the caller."""

    performed_by: str
    performed_by_name: str


class StageASubmission(BaseModel):
    """Group A form: Qaidah + Duas."""

    qaidah_level: Optional[int] = None
    qaidah_completed: bool = False
    duas: DuasStatus = Field(default_factory=DuasStatus)


class StageBSubmission(BaseModel):
    """Group B form: Duas + Quran + Tajweed."""

    duas: DuasStatus = Field(default_factory=DuasStatus)
    quran_juz: Optional[int] = None
    quran_completed: bool = False
    tajweed_level: Optional[int] = None
    tajweed_completed: bool = False


class JuzAmmaSubmission(BaseModel):
    """Group C form while on the Juz' Amma sub-track. The surah is always explicit."""

    juz_amma_surah: int
    completed: bool = False

    @classmethod
    def from_record(
        cls,
        record: StudentCurriculumRecord,
        completed: bool = False,
    ) -> "JuzAmmaSubmission":
        """Form prefilled with the student's current surah (78 when none yet)."""
        return cls(
            juz_amma_surah=record.juz_amma_surah or JUZ_AMMA_FIRST_SURAH,
            completed=completed,
        )


class HifzSubmission(BaseModel):
    """Group C form on the full Hifz sub-track."""

    hifz_sabak: Optional[int] = None
    hifz_s_para: Optional[int] = None
    hifz_daur: Optional[int] = None
    hifz_graduated: bool = False


ProgressSubmission = Union[StageASubmission, StageBSubmission, JuzAmmaSubmission, HifzSubmission]


class ProgressAuditEntry(BaseModel):
    """One changed field, rendered for display."""

    student_id: uuid.UUID
    student_name: str
    field_changed: str
    old_value: str
    new_value: str
    student_group: Optional[str] = None
    performed_by: str
    performed_by_name: str
    timestamp: datetime
