"""
Curriculum reference data - stages, groups, tables and the Duas codec.

Stages:
- A: Qaidah (levels 1-13) + Duas
- B: Quran (juz 1-30) + Tajweed (levels 1-7) + Duas
- C: Juz' Amma (surahs 78-114), then full Hifz (sabak / s-para / daur)
"""

from maktab.curriculum.groups import (
    Gender,
    Stage,
    GROUPS,
    parent_group,
    stage_for_group,
    is_valid_group_for,
    group_label,
    group_short_label,
)
from maktab.curriculum.duas import DuasStatus, decode_duas_status, encode_duas_status
from maktab.curriculum.reference import (
    JUZ_AMMA_SURAHS,
    Surah,
    juz_amma_progress_percent,
    levels_for_book,
    surah_label,
)

__all__ = [
    "Gender",
    "Stage",
    "GROUPS",
    "parent_group",
    "stage_for_group",
    "is_valid_group_for",
    "group_label",
    "group_short_label",
    "DuasStatus",
    "decode_duas_status",
    "encode_duas_status",
    "JUZ_AMMA_SURAHS",
    "Surah",
    "juz_amma_progress_percent",
    "levels_for_book",
    "surah_label",
]
