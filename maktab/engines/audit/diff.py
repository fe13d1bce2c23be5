"""
Audit diff emitter - one before/after entry per changed curriculum field.

Values are rendered to strings because audit consumers display them as-is:
True -> "Yes", False -> "No", None -> "None".
"""

from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel

from maktab.schemas.progress import ActorIdentity, ProgressAuditEntry, StudentCurriculumRecord

# Fields the engine may change and the audit log tracks. Due-date
# bookkeeping is not audited.
AUDITED_FIELDS = (
    "student_group",
    "assigned_teacher",
    "qaidah_level",
    "duas_status",
    "quran_juz",
    "quran_completed",
    "tajweed_level",
    "tajweed_completed",
    "hifz_sabak",
    "hifz_s_para",
    "hifz_daur",
    "hifz_graduated",
    "juz_amma_surah",
    "juz_amma_completed",
)


class FieldChange(BaseModel):
    """Raw before/after values of one field."""

    field: str
    old: Any = None
    new: Any = None


def render_value(value: Any) -> str:
    if value is None:
        return "None"
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return str(value)


class AuditDiffEmitter:
    """
    Compares a record with a proposed partial update.

    Usage:
        entries = AuditDiffEmitter.build_entries(record, fields, actor)
        await audit_store.append(entries)
    """

    @staticmethod
    def diff(record: StudentCurriculumRecord, fields: Mapping[str, Any]) -> List[FieldChange]:
        changes = []
        for name in AUDITED_FIELDS:
            if name not in fields:
                continue
            old = getattr(record, name)
            new = fields[name]
            if old != new:
                changes.append(FieldChange(field=name, old=old, new=new))
        return changes

    @classmethod
    def build_entries(
        cls,
        record: StudentCurriculumRecord,
        fields: Mapping[str, Any],
        actor: ActorIdentity,
        timestamp: Optional[datetime] = None,
    ) -> List[ProgressAuditEntry]:
        """Audit entries for every changed field, stamped with the record's group before the change."""
        timestamp = timestamp or datetime.now(timezone.utc)
        return [
            ProgressAuditEntry(
                student_id=record.id,
                student_name=record.name,
                field_changed=change.field,
                old_value=render_value(change.old),
                new_value=render_value(change.new),
                student_group=record.student_group,
                performed_by=actor.performed_by,
                performed_by_name=actor.performed_by_name,
                timestamp=timestamp,
            )
            for change in cls.diff(record, fields)
        ]
