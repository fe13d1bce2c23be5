"""
Monthly due-date lifecycle.

Each student is expected to have progress recorded once per calendar month.
last_progress_month marks the last recorded month; progress_due_month and
progress_due_since_date mark an outstanding month. Skipping a prompt changes
nothing, so skipped students stay due.
"""

from datetime import date
from typing import Any, Dict, Iterable, Optional, Sequence

from maktab.config import Settings, get_settings
from maktab.curriculum.groups import Gender
from maktab.logging_config import get_logger
from maktab.schemas.progress import StudentCurriculumRecord

logger = get_logger(__name__)

DUE_DATE_FIELDS = ("last_progress_month", "progress_due_month", "progress_due_since_date")


def month_key(day: date) -> str:
    """Calendar month as stored, e.g. '2026-10'."""
    return day.strftime("%Y-%m")


class DueDateLifecycle:
    """Decides when a student is due and builds the bookkeeping fields."""

    def __init__(
        self,
        boys_weekdays: Sequence[int] = (0, 1, 2, 3),
        girls_weekdays: Sequence[int] = (1, 2),
    ):
        self.prompt_weekdays = {
            Gender.BOYS.value: frozenset(boys_weekdays),
            Gender.GIRLS.value: frozenset(girls_weekdays),
        }

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "DueDateLifecycle":
        settings = settings or get_settings()
        return cls(settings.boys_prompt_weekdays, settings.girls_prompt_weekdays)

    def recorded_fields(self, today: date) -> Dict[str, Any]:
        """Fields written alongside every accepted progress update."""
        return {
            "last_progress_month": month_key(today),
            "progress_due_month": None,
            "progress_due_since_date": None,
        }

    def is_due(self, record: StudentCurriculumRecord, today: date) -> bool:
        """Assigned to a group and nothing recorded yet this month."""
        if not record.student_group:
            return False
        return record.last_progress_month != month_key(today)

    def is_newly_overdue(self, record: StudentCurriculumRecord, today: date) -> bool:
        """Due, and not yet marked due for this month."""
        return self.is_due(record, today) and record.progress_due_month != month_key(today)

    def refresh_due(self, record: StudentCurriculumRecord, today: date) -> Dict[str, Any]:
        """Due markers to write for a newly overdue student, else nothing."""
        if not self.is_newly_overdue(record, today):
            return {}
        return {
            "progress_due_month": month_key(today),
            "progress_due_since_date": today,
        }

    def should_prompt(self, record: StudentCurriculumRecord, today: date) -> bool:
        """Whether to show the progress prompt when the student is marked present."""
        if not self.is_due(record, today):
            return False
        weekdays = self.prompt_weekdays.get(record.gender, frozenset())
        return today.weekday() in weekdays

    def skip(self, record: StudentCurriculumRecord) -> None:
        """'Skip for now' - closes the prompt, records nothing."""
        logger.info("Progress prompt skipped", extra={"student_id": str(record.id)})

    def skip_class_today(self, records: Iterable[StudentCurriculumRecord]) -> None:
        """'Skip progress for entire class today' - records nothing for anyone."""
        skipped = [str(r.id) for r in records]
        logger.info("Progress prompts skipped for class", extra={"student_count": len(skipped)})
