"""
Progress update validator - per-form rules for what a submission must contain.

A measurement is present when it has a concrete level/juz or its completed
flag is set. Missing measurements reject the submission locally; rejection
is a normal, frequent outcome and is returned, never raised.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel

from maktab.curriculum.duas import DuasStatus, encode_duas_status
from maktab.curriculum.reference import (
    HIFZ_JUZ,
    JUZ_AMMA_LAST_SURAH,
    QAIDAH_COMPLETED_LEVEL,
    QAIDAH_LEVELS,
    QURAN_JUZ,
    TAJWEED_LEVELS,
    is_juz_amma_surah,
)
from maktab.engines.progress.state import FormKind, TrackResolution
from maktab.engines.progress.transitions import juz_amma_completion_fields
from maktab.schemas.progress import (
    HifzSubmission,
    JuzAmmaSubmission,
    ProgressSubmission,
    StageASubmission,
    StageBSubmission,
)


class RejectionReason(str, Enum):
    INCOMPLETE = "incomplete"
    OUT_OF_RANGE = "out_of_range"
    WRONG_FORM = "wrong_form"
    UNASSIGNED = "unassigned"
    CONFIRMATION_REQUIRED = "confirmation_required"


class Rejected(BaseModel):
    """Submission not accepted. The record is untouched."""

    reason: RejectionReason
    fields: List[str] = []
    message: str

    @property
    def accepted(self) -> bool:
        return False


class UpdateFields(BaseModel):
    """Accepted submission, normalized into a partial field update."""

    form: FormKind
    fields: Dict[str, Any]
    completes_juz_amma: bool = False

    @property
    def accepted(self) -> bool:
        return True


ValidationOutcome = Union[UpdateFields, Rejected]

_FORM_FOR_SUBMISSION = {
    StageASubmission: FormKind.STAGE_A,
    StageBSubmission: FormKind.STAGE_B,
    JuzAmmaSubmission: FormKind.JUZ_AMMA,
    HifzSubmission: FormKind.HIFZ,
}


def _measure(
    name: str,
    value: Optional[int],
    completed: bool,
    allowed: List[int],
    missing: List[str],
    invalid: List[str],
) -> None:
    if completed:
        return
    if value is None:
        missing.append(name)
    elif value not in allowed:
        invalid.append(name)


def _measure_duas(duas: DuasStatus, missing: List[str], invalid: List[str]) -> None:
    if duas.completed:
        return
    if not duas.is_present:
        missing.append("duas")
    elif not duas.is_valid_level:
        invalid.append("duas")


def _outcome(form: FormKind, missing: List[str], invalid: List[str], fields: Dict[str, Any]) -> ValidationOutcome:
    if missing:
        return Rejected(
            reason=RejectionReason.INCOMPLETE,
            fields=missing,
            message="Missing: " + ", ".join(missing),
        )
    if invalid:
        return Rejected(
            reason=RejectionReason.OUT_OF_RANGE,
            fields=invalid,
            message="Out of range: " + ", ".join(invalid),
        )
    return UpdateFields(form=form, fields=fields)


class ProgressValidator:
    """
    Validates a form submission against the student's resolved track.

    Group A: qaidah AND duas
    Group B: duas AND quran AND tajweed
    Group C (Juz' Amma): a surah of the sequence; completing needs surah 114
    Group C (Hifz): sabak AND s_para AND (daur OR graduated)
    """

    @classmethod
    def validate_and_build(
        cls,
        track: TrackResolution,
        submission: ProgressSubmission,
    ) -> ValidationOutcome:
        expected = track.form
        if expected is None:
            return Rejected(
                reason=RejectionReason.UNASSIGNED,
                message="Student has no group; no progress form applies",
            )

        submitted = _FORM_FOR_SUBMISSION.get(type(submission))
        if submitted != expected:
            return Rejected(
                reason=RejectionReason.WRONG_FORM,
                message=f"Expected {expected.value} form, got {submitted.value if submitted else 'unknown'}",
            )

        if expected == FormKind.STAGE_A:
            return cls.validate_stage_a(submission)
        if expected == FormKind.STAGE_B:
            return cls.validate_stage_b(submission)
        if expected == FormKind.JUZ_AMMA:
            return cls.validate_juz_amma(submission)
        return cls.validate_hifz(submission)

    @classmethod
    def validate_stage_a(cls, submission: StageASubmission) -> ValidationOutcome:
        missing: List[str] = []
        invalid: List[str] = []
        _measure(
            "qaidah", submission.qaidah_level, submission.qaidah_completed,
            QAIDAH_LEVELS, missing, invalid,
        )
        _measure_duas(submission.duas, missing, invalid)

        fields = {
            "qaidah_level": (
                QAIDAH_COMPLETED_LEVEL if submission.qaidah_completed else submission.qaidah_level
            ),
            "duas_status": encode_duas_status(submission.duas),
        }
        return _outcome(FormKind.STAGE_A, missing, invalid, fields)

    @classmethod
    def validate_stage_b(cls, submission: StageBSubmission) -> ValidationOutcome:
        missing: List[str] = []
        invalid: List[str] = []
        _measure_duas(submission.duas, missing, invalid)
        _measure(
            "quran", submission.quran_juz, submission.quran_completed,
            QURAN_JUZ, missing, invalid,
        )
        _measure(
            "tajweed", submission.tajweed_level, submission.tajweed_completed,
            TAJWEED_LEVELS, missing, invalid,
        )

        # completed Quran / Tajweed store no current juz / level
        fields = {
            "quran_juz": None if submission.quran_completed else submission.quran_juz,
            "quran_completed": submission.quran_completed,
            "tajweed_level": None if submission.tajweed_completed else submission.tajweed_level,
            "tajweed_completed": submission.tajweed_completed,
            "duas_status": encode_duas_status(submission.duas),
        }
        return _outcome(FormKind.STAGE_B, missing, invalid, fields)

    @classmethod
    def validate_juz_amma(cls, submission: JuzAmmaSubmission) -> ValidationOutcome:
        surah = submission.juz_amma_surah
        if not is_juz_amma_surah(surah):
            return Rejected(
                reason=RejectionReason.OUT_OF_RANGE,
                fields=["juz_amma_surah"],
                message=f"Surah {surah} is not part of Juz' Amma",
            )

        if submission.completed:
            if surah != JUZ_AMMA_LAST_SURAH:
                return Rejected(
                    reason=RejectionReason.INCOMPLETE,
                    fields=["juz_amma_surah"],
                    message=f"Juz' Amma can only be completed at surah {JUZ_AMMA_LAST_SURAH}",
                )
            return UpdateFields(
                form=FormKind.JUZ_AMMA,
                fields=juz_amma_completion_fields(),
                completes_juz_amma=True,
            )

        return UpdateFields(
            form=FormKind.JUZ_AMMA,
            fields={"juz_amma_surah": surah, "juz_amma_completed": False},
        )

    @classmethod
    def validate_hifz(cls, submission: HifzSubmission) -> ValidationOutcome:
        missing: List[str] = []
        invalid: List[str] = []
        _measure("sabak", submission.hifz_sabak, False, HIFZ_JUZ, missing, invalid)
        _measure("s_para", submission.hifz_s_para, False, HIFZ_JUZ, missing, invalid)
        _measure("daur", submission.hifz_daur, submission.hifz_graduated, HIFZ_JUZ, missing, invalid)

        fields = {
            "hifz_sabak": submission.hifz_sabak,
            "hifz_s_para": submission.hifz_s_para,
            "hifz_daur": None if submission.hifz_graduated else submission.hifz_daur,
            "hifz_graduated": submission.hifz_graduated,
        }
        return _outcome(FormKind.HIFZ, missing, invalid, fields)


def validate_and_build(track: TrackResolution, submission: ProgressSubmission) -> ValidationOutcome:
    """Module-level shortcut for ProgressValidator.validate_and_build."""
    return ProgressValidator.validate_and_build(track, submission)
