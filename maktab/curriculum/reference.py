"""
Curriculum reference data.

Static, read-only tables describing each stage's measurable unit:

- Qaidah levels 1-13 (13 means completed)
- Duas books and their level counts
- Quran juz 1-30, Tajweed levels 1-7 (12 is only a display ceiling)
- Hifz juz 1-30
- The 37 surahs of Juz' Amma, numbered 78-114 in Quranic order
"""

from typing import Dict, List, Optional

from pydantic import BaseModel


QAIDAH_LEVELS: List[int] = list(range(1, 14))
QAIDAH_COMPLETED_LEVEL = 13

DUAS_BOOK_LEVEL_COUNTS: Dict[str, int] = {
    "Book 1": 5,
    "Book 2": 10,
}
DUAS_BOOKS: List[str] = list(DUAS_BOOK_LEVEL_COUNTS)

QURAN_JUZ: List[int] = list(range(1, 31))
TAJWEED_LEVELS: List[int] = list(range(1, 8))
TAJWEED_DISPLAY_CEILING = 12
HIFZ_JUZ: List[int] = list(range(1, 31))


class Surah(BaseModel):
    """One entry of the Juz' Amma sequence."""

    number: int
    name: str

    @property
    def label(self) -> str:
        return f"{self.number}. {self.name}"


JUZ_AMMA_SURAHS: List[Surah] = [
    Surah(number=78, name="Al-Nabaʾ"),
    Surah(number=79, name="Al-Nāziʿāt"),
    Surah(number=80, name="ʿAbasa"),
    Surah(number=81, name="At-Takwīr"),
    Surah(number=82, name="Al-Infiṭār"),
    Surah(number=83, name="Al-Muṭaffifīn"),
    Surah(number=84, name="Al-Inshiqāq"),
    Surah(number=85, name="Al-Burūj"),
    Surah(number=86, name="Aṭ-Ṭāriq"),
    Surah(number=87, name="Al-Aʿlā"),
    Surah(number=88, name="Al-Ghāshiyah"),
    Surah(number=89, name="Al-Fajr"),
    Surah(number=90, name="Al-Balad"),
    Surah(number=91, name="Ash-Shams"),
    Surah(number=92, name="Al-Layl"),
    Surah(number=93, name="Aḍ-Ḍuḥā"),
    Surah(number=94, name="Ash-Sharḥ"),
    Surah(number=95, name="At-Tīn"),
    Surah(number=96, name="Al-ʿAlaq"),
    Surah(number=97, name="Al-Qadr"),
    Surah(number=98, name="Al-Bayyinah"),
    Surah(number=99, name="Az-Zalzalah"),
    Surah(number=100, name="Al-ʿĀdiyāt"),
    Surah(number=101, name="Al-Qāriʿah"),
    Surah(number=102, name="At-Takāthur"),
    Surah(number=103, name="Al-ʿAṣr"),
    Surah(number=104, name="Al-Humazah"),
    Surah(number=105, name="Al-Fīl"),
    Surah(number=106, name="Quraysh"),
    Surah(number=107, name="Al-Māʿūn"),
    Surah(number=108, name="Al-Kawthar"),
    Surah(number=109, name="Al-Kāfirūn"),
    Surah(number=110, name="An-Naṣr"),
    Surah(number=111, name="Al-Masad"),
    Surah(number=112, name="Al-Ikhlāṣ"),
    Surah(number=113, name="Al-Falaq"),
    Surah(number=114, name="An-Nās"),
]

TOTAL_JUZ_AMMA_SURAHS = len(JUZ_AMMA_SURAHS)
JUZ_AMMA_FIRST_SURAH = JUZ_AMMA_SURAHS[0].number
JUZ_AMMA_LAST_SURAH = JUZ_AMMA_SURAHS[-1].number

_SURAH_INDEX: Dict[int, int] = {s.number: i for i, s in enumerate(JUZ_AMMA_SURAHS)}


def levels_for_book(book: Optional[str]) -> List[int]:
    """Valid Duas levels for a book; empty for an unknown book."""
    return list(range(1, max_level(book) + 1))


def max_level(book: Optional[str]) -> int:
    return DUAS_BOOK_LEVEL_COUNTS.get(book or "", 0)


def is_juz_amma_surah(number: Optional[int]) -> bool:
    return number in _SURAH_INDEX


def surah_by_number(number: int) -> Optional[Surah]:
    index = _SURAH_INDEX.get(number)
    return JUZ_AMMA_SURAHS[index] if index is not None else None


def surah_label(number: int) -> str:
    surah = surah_by_number(number)
    return surah.label if surah else f"Surah {number}"


def juz_amma_progress(current_surah: Optional[int]) -> int:
    """Number of surahs completed before the current one."""
    if not current_surah:
        return 0
    return _SURAH_INDEX.get(current_surah, 0)


def juz_amma_progress_percent(current_surah: Optional[int], completed: bool) -> int:
    """Progress through Juz' Amma as a rounded percentage."""
    if completed:
        return 100
    if not current_surah:
        return 0
    # round-half-up to match the display
    return int(juz_amma_progress(current_surah) / TOTAL_JUZ_AMMA_SURAHS * 100 + 0.5)
