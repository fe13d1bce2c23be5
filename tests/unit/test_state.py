"""Unit tests for stage and sub-track derivation."""

import pytest

from maktab.curriculum.groups import GROUPS, Stage
from maktab.engines.progress.state import FormKind, Subtrack, resolve_track


class TestResolveTrack:
    def test_stage_a_sub_group(self, make_record):
        """A sub-group resolves to stage A and the Qaidah form."""
        track = resolve_track(make_record(student_group="A2"))
        assert track.stage == Stage.A
        assert track.subtrack is None
        assert track.form == FormKind.STAGE_A

    def test_stage_b(self, make_record):
        """Group B uses the Quran/Tajweed form."""
        track = resolve_track(make_record(student_group="B"))
        assert track.stage == Stage.B
        assert track.form == FormKind.STAGE_B

    def test_new_stage_c_student_is_on_juz_amma(self, make_record):
        """A fresh Group C student starts on Juz' Amma."""
        track = resolve_track(make_record(student_group="C"))
        assert track.stage == Stage.C
        assert track.subtrack == Subtrack.JUZ_AMMA
        assert track.form == FormKind.JUZ_AMMA

    @pytest.mark.parametrize(
        "completed,sabak",
        [(True, None), (True, 1), (False, 3)],
    )
    def test_stage_c_hifz_when_completed_or_sabak_set(self, make_record, completed, sabak):
        """Completed Juz' Amma or any sabak means full Hifz."""
        record = make_record(student_group="C", juz_amma_completed=completed, hifz_sabak=sabak)
        track = resolve_track(record)
        assert track.subtrack == Subtrack.HIFZ
        assert track.form == FormKind.HIFZ

    def test_unassigned_has_no_form(self, make_record):
        """No group, no form."""
        track = resolve_track(make_record(student_group=None))
        assert track.stage == Stage.UNASSIGNED
        assert track.subtrack is None
        assert track.form is None

    @pytest.mark.parametrize("code", sorted(GROUPS))
    def test_every_group_code_resolves_and_is_stable(self, make_record, code):
        """Derivation is total and repeatable for every code."""
        record = make_record(student_group=code, hifz_sabak=2)
        first = resolve_track(record)
        assert first.stage != Stage.UNASSIGNED
        assert resolve_track(record) == first
        # sub-track only exists inside Group C
        assert (first.subtrack is not None) == (first.stage == Stage.C)
