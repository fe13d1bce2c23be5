"""
Audit Engine - field-level before/after entries for curriculum changes.
"""

from maktab.engines.audit.diff import (
    AUDITED_FIELDS,
    AuditDiffEmitter,
    FieldChange,
    render_value,
)

__all__ = [
    "AUDITED_FIELDS",
    "AuditDiffEmitter",
    "FieldChange",
    "render_value",
]
