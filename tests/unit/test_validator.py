"""Unit tests for ProgressValidator per-form rules."""

import pytest
from pydantic import ValidationError

from maktab.curriculum.duas import DuasStatus
from maktab.engines.progress.state import FormKind, resolve_track
from maktab.engines.progress.transitions import (
    TransitionKind,
    available_transitions,
    is_eligible_for_graduation,
)
from maktab.engines.progress.validator import (
    ProgressValidator,
    Rejected,
    RejectionReason,
    UpdateFields,
    validate_and_build,
)
from maktab.schemas.progress import (
    HifzSubmission,
    JuzAmmaSubmission,
    StageASubmission,
    StageBSubmission,
)


class TestStageA:
    """Group A: qaidah AND duas."""

    def test_first_submission_accepted(self, make_record):
        """Stage A, no qaidah yet: level 7 with Book 1 level 3 is accepted, no graduation."""
        record = make_record(qaidah_level=None)
        submission = StageASubmission(qaidah_level=7, duas=DuasStatus(book="Book 1", level=3))
        outcome = validate_and_build(resolve_track(record), submission)

        assert isinstance(outcome, UpdateFields)
        assert outcome.form == FormKind.STAGE_A
        assert outcome.fields == {"qaidah_level": 7, "duas_status": "Book 1 - Level 3"}

        updated = record.with_fields(outcome.fields)
        assert not is_eligible_for_graduation(updated)
        assert available_transitions(updated) == []

    def test_completed_resubmission_offers_graduation(self, make_record):
        """Qaidah 13 + Duas completed: no-op resubmission accepted and graduation offered."""
        record = make_record(qaidah_level=13, duas_status="Completed")
        submission = StageASubmission(qaidah_completed=True, duas=DuasStatus(completed=True))
        outcome = validate_and_build(resolve_track(record), submission)

        assert outcome.accepted
        assert outcome.fields == {"qaidah_level": 13, "duas_status": "Completed"}
        assert record.with_fields(outcome.fields) == record
        assert is_eligible_for_graduation(record)
        assert available_transitions(record) == [TransitionKind.GRADUATE_A_TO_B]

    def test_missing_qaidah_and_duas(self):
        """Both Stage A fields are reported when absent."""
        outcome = ProgressValidator.validate_stage_a(StageASubmission())
        assert isinstance(outcome, Rejected)
        assert outcome.reason == RejectionReason.INCOMPLETE
        assert outcome.fields == ["qaidah", "duas"]

    def test_duas_book_without_level_is_incomplete(self):
        """A Duas book needs a level."""
        submission = StageASubmission(qaidah_level=2, duas=DuasStatus(book="Book 1"))
        outcome = ProgressValidator.validate_stage_a(submission)
        assert outcome.reason == RejectionReason.INCOMPLETE
        assert outcome.fields == ["duas"]

    def test_duas_level_beyond_book(self):
        """Level 6 does not exist in Book 1."""
        submission = StageASubmission(qaidah_level=2, duas=DuasStatus(book="Book 1", level=7))
        outcome = ProgressValidator.validate_stage_a(submission)
        assert outcome.reason == RejectionReason.OUT_OF_RANGE
        assert outcome.fields == ["duas"]

    def test_qaidah_completed_stores_level_13(self):
        """Ticking Qaidah completed stores level 13."""
        submission = StageASubmission(qaidah_completed=True, duas=DuasStatus(book="Book 2", level=1))
        outcome = ProgressValidator.validate_stage_a(submission)
        assert outcome.fields["qaidah_level"] == 13


class TestStageB:
    """Group B: duas AND quran AND tajweed."""

    def test_missing_quran_and_tajweed(self):
        """Both Stage B fields are reported when absent."""
        submission = StageBSubmission(duas=DuasStatus(completed=True))
        outcome = ProgressValidator.validate_stage_b(submission)
        assert outcome.reason == RejectionReason.INCOMPLETE
        assert outcome.fields == ["quran", "tajweed"]

    def test_completed_quran_stores_no_juz(self):
        """Completed Quran and Tajweed store null juz and level."""
        submission = StageBSubmission(
            duas=DuasStatus(book="Book 2", level=6),
            quran_juz=30,
            quran_completed=True,
            tajweed_level=4,
        )
        outcome = ProgressValidator.validate_stage_b(submission)
        assert outcome.accepted
        assert outcome.fields == {
            "quran_juz": None,
            "quran_completed": True,
            "tajweed_level": 4,
            "tajweed_completed": False,
            "duas_status": "Book 2 - Level 6",
        }

    def test_tajweed_level_out_of_range(self):
        """Tajweed level must be within its range."""
        submission = StageBSubmission(
            duas=DuasStatus(completed=True), quran_juz=3, tajweed_level=12,
        )
        outcome = ProgressValidator.validate_stage_b(submission)
        assert outcome.reason == RejectionReason.OUT_OF_RANGE
        assert outcome.fields == ["tajweed"]


class TestJuzAmma:
    """Group C on the Juz' Amma sub-track."""

    def test_surah_is_required(self):
        """A Juz' Amma form without a surah does not validate."""
        with pytest.raises(ValidationError):
            JuzAmmaSubmission(completed=False)

    def test_form_prefilled_from_record(self, make_record):
        """The form starts at the student's surah, or An-Naba when none is recorded."""
        record = make_record(student_group="C", juz_amma_surah=100)
        assert JuzAmmaSubmission.from_record(record).juz_amma_surah == 100
        fresh = JuzAmmaSubmission.from_record(make_record(student_group="C"), completed=True)
        assert fresh.juz_amma_surah == 78
        assert fresh.completed is True

    def test_current_surah(self):
        """A surah inside the sequence is recorded as-is."""
        outcome = ProgressValidator.validate_juz_amma(JuzAmmaSubmission(juz_amma_surah=90))
        assert outcome.fields == {"juz_amma_surah": 90, "juz_amma_completed": False}
        assert outcome.completes_juz_amma is False

    def test_surah_outside_sequence(self):
        """Surahs before 78 are rejected."""
        outcome = ProgressValidator.validate_juz_amma(JuzAmmaSubmission(juz_amma_surah=50))
        assert outcome.reason == RejectionReason.OUT_OF_RANGE

    def test_completion_before_114_rejected(self):
        """Juz' Amma can only be completed at surah 114."""
        outcome = ProgressValidator.validate_juz_amma(
            JuzAmmaSubmission(juz_amma_surah=113, completed=True)
        )
        assert outcome.reason == RejectionReason.INCOMPLETE
        assert outcome.fields == ["juz_amma_surah"]

    def test_completion_at_114_enters_hifz(self):
        """Completing at 114 starts Hifz at sabak 1."""
        outcome = ProgressValidator.validate_juz_amma(
            JuzAmmaSubmission(juz_amma_surah=114, completed=True)
        )
        assert outcome.completes_juz_amma is True
        assert outcome.fields == {
            "juz_amma_surah": 114,
            "juz_amma_completed": True,
            "hifz_sabak": 1,
            "hifz_s_para": 1,
        }


class TestHifz:
    """Group C full Hifz: sabak AND s_para AND (daur OR graduated)."""

    def test_missing_daur(self):
        """Daur is required unless graduated."""
        outcome = ProgressValidator.validate_hifz(HifzSubmission(hifz_sabak=4, hifz_s_para=3))
        assert outcome.reason == RejectionReason.INCOMPLETE
        assert outcome.fields == ["daur"]

    def test_graduated_clears_daur(self):
        """A graduated Hafiz stores no daur."""
        submission = HifzSubmission(hifz_sabak=30, hifz_s_para=29, hifz_daur=12, hifz_graduated=True)
        outcome = ProgressValidator.validate_hifz(submission)
        assert outcome.accepted
        assert outcome.fields["hifz_daur"] is None
        assert outcome.fields["hifz_graduated"] is True

    def test_sabak_out_of_range(self):
        """Sabak must be within 1-30."""
        submission = HifzSubmission(hifz_sabak=31, hifz_s_para=3, hifz_daur=1)
        outcome = ProgressValidator.validate_hifz(submission)
        assert outcome.reason == RejectionReason.OUT_OF_RANGE
        assert outcome.fields == ["sabak"]


class TestFormSelection:
    def test_wrong_form_for_track(self, make_record):
        """A form for another track is refused."""
        record = make_record(student_group="C", hifz_sabak=3, juz_amma_completed=True)
        outcome = validate_and_build(resolve_track(record), StageASubmission(qaidah_level=1))
        assert outcome.reason == RejectionReason.WRONG_FORM

    def test_unassigned_student_rejected(self, make_record):
        """Students without a group cannot submit progress."""
        record = make_record(student_group=None)
        outcome = validate_and_build(resolve_track(record), StageASubmission(qaidah_level=1))
        assert outcome.reason == RejectionReason.UNASSIGNED
        assert outcome.accepted is False
