"""
Group catalogue - group codes, parent-group normalization and labels.

Boys maktab splits Qaidah into sub-groups A1/A2; girls maktab uses A/B/C.
Sub-groups only route forms and display; curriculum logic always works on
the parent group.
"""

from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel


class Gender(str, Enum):
    """Which maktab a student belongs to."""
    BOYS = "boys"
    GIRLS = "girls"


class Stage(str, Enum):
    """Curriculum stage, derived from the parent group."""
    A = "A"  # Qaidah
    B = "B"  # Quran
    C = "C"  # Hifz
    UNASSIGNED = "unassigned"


class GroupDefinition(BaseModel):
    """A group code as shown to teachers."""

    code: str
    name: str
    label: str
    parent_group: Optional[str] = None


GROUPS: Dict[str, GroupDefinition] = {
    "A": GroupDefinition(code="A", name="Group A", label="Qaidah"),
    "B": GroupDefinition(code="B", name="Group B", label="Quran"),
    "C": GroupDefinition(code="C", name="Group C", label="Hifz"),
    "A1": GroupDefinition(code="A1", name="Group A1", label="Qaidah", parent_group="A"),
    "A2": GroupDefinition(code="A2", name="Group A2", label="Qaidah", parent_group="A"),
}

GIRLS_GROUP_CODES: Tuple[str, ...] = ("A", "B", "C")
BOYS_GROUP_CODES: Tuple[str, ...] = ("A1", "A2", "B", "C")

_STAGE_BY_PARENT: Dict[str, Stage] = {
    "A": Stage.A,
    "B": Stage.B,
    "C": Stage.C,
}


def parent_group(code: Optional[str]) -> Optional[str]:
    """Parent group code for a sub-group (A1 -> A); unknown codes pass through."""
    if not code:
        return None
    group = GROUPS.get(code)
    if group is None:
        return code
    return group.parent_group or group.code


def stage_for_group(code: Optional[str]) -> Stage:
    """Map any group code to its curriculum stage."""
    return _STAGE_BY_PARENT.get(parent_group(code) or "", Stage.UNASSIGNED)


def sub_groups(parent_code: str) -> list[str]:
    """All sub-group codes under a parent group."""
    return [g.code for g in GROUPS.values() if g.parent_group == parent_code]


def group_codes_for(gender: Optional[str]) -> Tuple[str, ...]:
    if gender == Gender.BOYS.value:
        return BOYS_GROUP_CODES
    return GIRLS_GROUP_CODES


def is_valid_group_for(gender: Optional[str], code: Optional[str]) -> bool:
    """Check if a group code is offered in the given maktab."""
    if not code:
        return False
    return code in group_codes_for(gender)


def group_label(code: Optional[str]) -> str:
    """Full label, e.g. 'Group A1 (Qaidah)'."""
    if not code:
        return "Unassigned"
    group = GROUPS.get(code)
    return f"{group.name} ({group.label})" if group else "Unknown"


def group_short_label(code: Optional[str]) -> str:
    if not code:
        return "Unassigned"
    group = GROUPS.get(code)
    return group.label if group else "Unknown"
