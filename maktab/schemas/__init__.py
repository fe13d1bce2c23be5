"""
Pydantic schemas crossing the engine boundary.
"""

from maktab.schemas.progress import (
    StudentCurriculumRecord,
    ActorIdentity,
    StageASubmission,
    StageBSubmission,
    JuzAmmaSubmission,
    HifzSubmission,
    ProgressSubmission,
    ProgressAuditEntry,
)

__all__ = [
    "StudentCurriculumRecord",
    "ActorIdentity",
    "StageASubmission",
    "StageBSubmission",
    "JuzAmmaSubmission",
    "HifzSubmission",
    "ProgressSubmission",
    "ProgressAuditEntry",
]
