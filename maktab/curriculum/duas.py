"""
Duas progress record and its stored string encoding.

The students table keeps Duas progress in one text column:

    "Completed"          -> completed
    "Book 1 - Level 3"   -> book + level
    "Book 2"             -> book only (legacy rows)
    "" / NULL            -> nothing recorded

Call sites work with DuasStatus and never parse the string themselves.
"""

import re
from typing import Optional

from pydantic import BaseModel

from maktab.curriculum.reference import DUAS_BOOKS, levels_for_book

COMPLETED_TOKEN = "Completed"

_STATUS_RE = re.compile(r"^(Book [12])(?:\s*-\s*Level\s*(\d+))?$")


class DuasStatus(BaseModel):
    """Decoded Duas progress."""

    book: Optional[str] = None
    level: Optional[int] = None
    completed: bool = False

    def with_book(self, book: Optional[str]) -> "DuasStatus":
        """Select a book; the level resets whenever the book changes."""
        if book == self.book:
            return self
        return DuasStatus(book=book, level=None, completed=self.completed)

    @property
    def is_present(self) -> bool:
        """A Duas measurement counts when completed or book+level are set."""
        return self.completed or (self.book is not None and self.level is not None)

    @property
    def is_valid_level(self) -> bool:
        return self.book in DUAS_BOOKS and self.level in levels_for_book(self.book)


def decode_duas_status(status: Optional[str]) -> DuasStatus:
    """Decode the stored string; unrecognized text decodes to an empty status."""
    if not status or status == COMPLETED_TOKEN:
        return DuasStatus(completed=status == COMPLETED_TOKEN)

    match = _STATUS_RE.match(status.strip())
    if match:
        return DuasStatus(
            book=match.group(1),
            level=int(match.group(2)) if match.group(2) else None,
        )
    return DuasStatus()


def encode_duas_status(duas: DuasStatus) -> str:
    if duas.completed:
        return COMPLETED_TOKEN
    if not duas.book:
        return ""
    if not duas.level:
        return duas.book
    return f"{duas.book} - Level {duas.level}"
