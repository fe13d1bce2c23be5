"""
Progress state derivation - which stage and sub-track applies to a student.

The Juz' Amma / Hifz split inside Group C is never stored. It is derived
from juz_amma_completed and hifz_sabak on every read; the track-switch
transitions pin it by setting those fields.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from maktab.curriculum.groups import Stage, stage_for_group
from maktab.schemas.progress import StudentCurriculumRecord


class Subtrack(str, Enum):
    """Sub-track inside Group C."""
    JUZ_AMMA = "juz_amma"
    HIFZ = "hifz"


class FormKind(str, Enum):
    """Which data-entry form applies."""
    STAGE_A = "stage_a"
    STAGE_B = "stage_b"
    JUZ_AMMA = "juz_amma"
    HIFZ = "hifz"


class TrackResolution(BaseModel):
    """Result of resolve_track()."""

    stage: Stage
    subtrack: Optional[Subtrack] = None

    @property
    def form(self) -> Optional[FormKind]:
        """Form for this track; None for unassigned students (skip path)."""
        if self.stage == Stage.A:
            return FormKind.STAGE_A
        if self.stage == Stage.B:
            return FormKind.STAGE_B
        if self.stage == Stage.C:
            return FormKind.JUZ_AMMA if self.subtrack == Subtrack.JUZ_AMMA else FormKind.HIFZ
        return None


def is_on_juz_amma_track(juz_amma_completed: Optional[bool], hifz_sabak: Optional[int]) -> bool:
    return not juz_amma_completed and not hifz_sabak


def resolve_track(record: StudentCurriculumRecord) -> TrackResolution:
    """Derive stage and (for Group C) sub-track. Pure and total."""
    stage = stage_for_group(record.student_group)
    if stage != Stage.C:
        return TrackResolution(stage=stage)

    if is_on_juz_amma_track(record.juz_amma_completed, record.hifz_sabak):
        return TrackResolution(stage=stage, subtrack=Subtrack.JUZ_AMMA)
    return TrackResolution(stage=stage, subtrack=Subtrack.HIFZ)
