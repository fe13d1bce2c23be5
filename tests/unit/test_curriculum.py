"""Unit tests for curriculum reference data: groups, Juz' Amma and the Duas codec."""

import pytest

from maktab.curriculum.duas import DuasStatus, decode_duas_status, encode_duas_status
from maktab.curriculum.groups import (
    Stage,
    group_label,
    group_short_label,
    is_valid_group_for,
    parent_group,
    stage_for_group,
    sub_groups,
)
from maktab.curriculum.reference import (
    DUAS_BOOKS,
    JUZ_AMMA_FIRST_SURAH,
    JUZ_AMMA_LAST_SURAH,
    TOTAL_JUZ_AMMA_SURAHS,
    juz_amma_progress,
    juz_amma_progress_percent,
    levels_for_book,
    max_level,
    surah_label,
)


class TestGroups:
    """Group codes, parent normalization and labels."""

    def test_sub_groups_normalize_to_parent(self):
        """A1/A2 map to parent A; parent codes map to themselves."""
        assert parent_group("A1") == "A"
        assert parent_group("A2") == "A"
        assert parent_group("C") == "C"
        assert parent_group(None) is None

    def test_unknown_code_passes_through(self):
        """Unknown codes are kept as-is and resolve to unassigned."""
        assert parent_group("Z") == "Z"
        assert stage_for_group("Z") == Stage.UNASSIGNED

    @pytest.mark.parametrize(
        "code,stage",
        [("A", Stage.A), ("A1", Stage.A), ("A2", Stage.A), ("B", Stage.B), ("C", Stage.C), ("", Stage.UNASSIGNED)],
    )
    def test_stage_for_group(self, code, stage):
        """Every group code maps to its curriculum stage."""
        assert stage_for_group(code) == stage

    def test_sub_groups_of_a(self):
        """Only Group A has sub-groups."""
        assert sub_groups("A") == ["A1", "A2"]
        assert sub_groups("B") == []

    def test_valid_codes_per_maktab(self):
        """Boys use A1/A2, girls use a single A."""
        assert is_valid_group_for("boys", "A1")
        assert not is_valid_group_for("boys", "A")
        assert is_valid_group_for("girls", "A")
        assert not is_valid_group_for("girls", "A2")
        assert not is_valid_group_for("girls", None)

    def test_labels(self):
        """Full and short labels, with Unassigned/Unknown fallbacks."""
        assert group_label("A1") == "Group A1 (Qaidah)"
        assert group_label("C") == "Group C (Hifz)"
        assert group_label(None) == "Unassigned"
        assert group_label("X") == "Unknown"
        assert group_short_label("B") == "Quran"
        assert group_short_label("") == "Unassigned"


class TestJuzAmma:
    """Surah sequence 78-114."""

    def test_sequence_bounds(self):
        """Juz' Amma runs 78-114, 37 surahs."""
        assert TOTAL_JUZ_AMMA_SURAHS == 37
        assert JUZ_AMMA_FIRST_SURAH == 78
        assert JUZ_AMMA_LAST_SURAH == 114

    def test_surah_label(self):
        """Known surahs show number and name; others fall back to 'Surah n'."""
        assert surah_label(114) == "114. An-Nās"
        assert surah_label(78) == "78. Al-Nabaʾ"
        assert surah_label(5) == "Surah 5"

    def test_progress_index(self):
        """Index counts surahs finished before the current one."""
        assert juz_amma_progress(78) == 0
        assert juz_amma_progress(96) == 18
        assert juz_amma_progress(None) == 0

    def test_progress_percent(self):
        """Percent is rounded half-up, 100 once completed."""
        assert juz_amma_progress_percent(None, False) == 0
        assert juz_amma_progress_percent(78, False) == 0
        # 18/37 surahs done -> 48.6% -> 49
        assert juz_amma_progress_percent(96, False) == 49
        assert juz_amma_progress_percent(114, True) == 100


class TestDuas:
    """Duas books and the duas_status encoding."""

    def test_book_levels(self):
        """Book 1 has 5 levels, Book 2 has 10."""
        assert levels_for_book("Book 1") == [1, 2, 3, 4, 5]
        assert max_level("Book 2") == 10
        assert levels_for_book("Book 3") == []
        assert levels_for_book(None) == []

    def test_decode_book_and_level(self):
        """'Book 1 - Level 3' decodes to book and level."""
        assert decode_duas_status("Book 1 - Level 3") == DuasStatus(book="Book 1", level=3)

    def test_decode_completed(self):
        """'Completed' decodes to the completed flag only."""
        status = decode_duas_status("Completed")
        assert status.completed is True
        assert status.book is None and status.level is None

    def test_decode_legacy_book_only(self):
        """Legacy rows with only a book decode with no level."""
        assert decode_duas_status("Book 2") == DuasStatus(book="Book 2")

    @pytest.mark.parametrize("raw", [None, "", "garbage", "Book 9 - Level 1"])
    def test_decode_unrecognized_is_empty(self, raw):
        """Empty or unknown text decodes to an empty status."""
        status = decode_duas_status(raw)
        assert status == DuasStatus()
        assert not status.is_present

    def test_encode(self):
        """Each status shape encodes to its stored string."""
        assert encode_duas_status(DuasStatus(book="Book 2", level=10)) == "Book 2 - Level 10"
        assert encode_duas_status(DuasStatus(book="Book 1")) == "Book 1"
        assert encode_duas_status(DuasStatus(completed=True)) == "Completed"
        assert encode_duas_status(DuasStatus()) == ""

    def test_round_trip_every_book_and_level(self):
        """Encoding then decoding returns the original status."""
        statuses = [DuasStatus(completed=True)] + [
            DuasStatus(book=book, level=level)
            for book in DUAS_BOOKS
            for level in levels_for_book(book)
        ]
        for status in statuses:
            assert decode_duas_status(encode_duas_status(status)) == status

    def test_changing_book_resets_level(self):
        """Switching book clears the level; same book keeps it."""
        status = DuasStatus(book="Book 1", level=4)
        assert status.with_book("Book 2") == DuasStatus(book="Book 2")
        assert status.with_book("Book 1") == status

    def test_level_validity(self):
        """Level must exist in the chosen book."""
        assert DuasStatus(book="Book 2", level=8).is_valid_level
        assert not DuasStatus(book="Book 1", level=8).is_valid_level
