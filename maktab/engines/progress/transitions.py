"""
Transition engine - graduations and Group C track switches.

Every transition is a pure function from a student record to a proposed
partial field set. Nothing is proposed unless the precondition holds and the
resulting record derives to the expected state. Valid transitions and their
source/target states are defined here.
"""

from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel

from maktab.curriculum.groups import Gender, Stage
from maktab.curriculum.reference import JUZ_AMMA_FIRST_SURAH, JUZ_AMMA_LAST_SURAH
from maktab.engines.progress.state import Subtrack, resolve_track
from maktab.schemas.progress import StudentCurriculumRecord


class CurriculumState(str, Enum):
    """Flattened state used by the transition table."""
    A = "A"
    B = "B"
    C_JUZ_AMMA = "C_juz_amma"
    C_HIFZ = "C_hifz"
    UNASSIGNED = "unassigned"


class TransitionKind(str, Enum):
    GRADUATE_A_TO_B = "graduate_a_to_b"
    GRADUATE_B_TO_C = "graduate_b_to_c"
    SKIP_JUZ_AMMA = "skip_juz_amma"
    COMPLETE_JUZ_AMMA = "complete_juz_amma"
    MOVE_BACK_TO_JUZ_AMMA = "move_back_to_juz_amma"
    MARK_HAFIZ = "mark_hafiz"
    UNMARK_HAFIZ = "unmark_hafiz"


class TransitionError(ValueError):
    """Transition invoked while its precondition does not hold."""


class ProposedChange(BaseModel):
    """Field set proposed to the Student Directory for one transition."""

    kind: TransitionKind
    fields: Dict[str, Any]


# Entering full Hifz, whether by skipping or finishing Juz' Amma
HIFZ_ENTRY_FIELDS: Dict[str, Any] = {
    "juz_amma_completed": True,
    "hifz_sabak": 1,
    "hifz_s_para": 1,
}


def juz_amma_completion_fields() -> Dict[str, Any]:
    """Fields written when a student finishes surah 114."""
    return {"juz_amma_surah": JUZ_AMMA_LAST_SURAH, **HIFZ_ENTRY_FIELDS}


# kind -> (from_state, to_state)
_TRANSITIONS: Dict[TransitionKind, Tuple[CurriculumState, CurriculumState]] = {
    TransitionKind.GRADUATE_A_TO_B: (CurriculumState.A, CurriculumState.B),
    TransitionKind.GRADUATE_B_TO_C: (CurriculumState.B, CurriculumState.C_JUZ_AMMA),
    TransitionKind.SKIP_JUZ_AMMA: (CurriculumState.C_JUZ_AMMA, CurriculumState.C_HIFZ),
    TransitionKind.COMPLETE_JUZ_AMMA: (CurriculumState.C_JUZ_AMMA, CurriculumState.C_HIFZ),
    TransitionKind.MOVE_BACK_TO_JUZ_AMMA: (CurriculumState.C_HIFZ, CurriculumState.C_JUZ_AMMA),
    TransitionKind.MARK_HAFIZ: (CurriculumState.C_HIFZ, CurriculumState.C_HIFZ),
    TransitionKind.UNMARK_HAFIZ: (CurriculumState.C_HIFZ, CurriculumState.C_HIFZ),
}

# Track switches must land exactly on the target sub-track
_TRACK_SWITCHES = {
    TransitionKind.SKIP_JUZ_AMMA,
    TransitionKind.COMPLETE_JUZ_AMMA,
    TransitionKind.MOVE_BACK_TO_JUZ_AMMA,
}

_STAGE_OF_STATE: Dict[CurriculumState, Stage] = {
    CurriculumState.A: Stage.A,
    CurriculumState.B: Stage.B,
    CurriculumState.C_JUZ_AMMA: Stage.C,
    CurriculumState.C_HIFZ: Stage.C,
    CurriculumState.UNASSIGNED: Stage.UNASSIGNED,
}

# Offered to the teacher UI; natural completion happens through the form
_USER_TRANSITIONS = [
    TransitionKind.GRADUATE_A_TO_B,
    TransitionKind.GRADUATE_B_TO_C,
    TransitionKind.SKIP_JUZ_AMMA,
    TransitionKind.MOVE_BACK_TO_JUZ_AMMA,
    TransitionKind.MARK_HAFIZ,
    TransitionKind.UNMARK_HAFIZ,
]


def curriculum_state(record: StudentCurriculumRecord) -> CurriculumState:
    track = resolve_track(record)
    if track.stage == Stage.C:
        if track.subtrack == Subtrack.JUZ_AMMA:
            return CurriculumState.C_JUZ_AMMA
        return CurriculumState.C_HIFZ
    if track.stage == Stage.UNASSIGNED:
        return CurriculumState.UNASSIGNED
    return CurriculumState(track.stage.value)


def valid_transitions(from_state: CurriculumState) -> List[TransitionKind]:
    """Transitions whose source state matches, ignoring preconditions."""
    return [kind for kind, (f, _) in _TRANSITIONS.items() if f == from_state]


def can_graduate_a_to_b(record: StudentCurriculumRecord) -> bool:
    """Qaidah and Duas both completed."""
    return (
        curriculum_state(record) == CurriculumState.A
        and record.qaidah_completed
        and record.duas.completed
    )


def can_graduate_b_to_c(record: StudentCurriculumRecord) -> bool:
    """Boys only, with Quran and Tajweed both completed."""
    return (
        curriculum_state(record) == CurriculumState.B
        and record.gender == Gender.BOYS.value
        and record.quran_completed
        and record.tajweed_completed
    )


def is_eligible_for_graduation(record: StudentCurriculumRecord) -> bool:
    """Whether the graduation option should be offered at all."""
    return can_graduate_a_to_b(record) or can_graduate_b_to_c(record)


def _on_state(state: CurriculumState) -> Callable[[StudentCurriculumRecord], bool]:
    return lambda record: curriculum_state(record) == state


_PRECONDITIONS: Dict[TransitionKind, Callable[[StudentCurriculumRecord], bool]] = {
    TransitionKind.GRADUATE_A_TO_B: can_graduate_a_to_b,
    TransitionKind.GRADUATE_B_TO_C: can_graduate_b_to_c,
    TransitionKind.SKIP_JUZ_AMMA: _on_state(CurriculumState.C_JUZ_AMMA),
    TransitionKind.COMPLETE_JUZ_AMMA: _on_state(CurriculumState.C_JUZ_AMMA),
    TransitionKind.MOVE_BACK_TO_JUZ_AMMA: _on_state(CurriculumState.C_HIFZ),
    TransitionKind.MARK_HAFIZ: lambda r: (
        curriculum_state(r) == CurriculumState.C_HIFZ and not r.hifz_graduated
    ),
    TransitionKind.UNMARK_HAFIZ: lambda r: (
        curriculum_state(r) == CurriculumState.C_HIFZ and r.hifz_graduated
    ),
}


def is_eligible(kind: TransitionKind, record: StudentCurriculumRecord) -> bool:
    return _PRECONDITIONS[kind](record)


def available_transitions(record: StudentCurriculumRecord) -> List[TransitionKind]:
    """User-facing transitions currently offered for a student."""
    return [kind for kind in _USER_TRANSITIONS if is_eligible(kind, record)]


class TransitionEngine:
    """
    Builds the field set for each transition.

    Usage:
        engine = TransitionEngine(hifz_teacher="Ml Aazib")
        if is_eligible_for_graduation(record):
            change = engine.graduate(record)
    """

    def __init__(self, hifz_teacher: Optional[str] = None):
        self.hifz_teacher = hifz_teacher or None

    def propose(self, kind: TransitionKind, record: StudentCurriculumRecord) -> ProposedChange:
        """Build the field set for any transition kind."""
        builders = {
            TransitionKind.GRADUATE_A_TO_B: self.graduate_a_to_b,
            TransitionKind.GRADUATE_B_TO_C: self.graduate_b_to_c,
            TransitionKind.SKIP_JUZ_AMMA: self.skip_juz_amma,
            TransitionKind.COMPLETE_JUZ_AMMA: self.complete_juz_amma,
            TransitionKind.MOVE_BACK_TO_JUZ_AMMA: self.move_back_to_juz_amma,
            TransitionKind.MARK_HAFIZ: self.mark_hafiz,
            TransitionKind.UNMARK_HAFIZ: self.unmark_hafiz,
        }
        return builders[kind](record)

    def graduate(self, record: StudentCurriculumRecord) -> ProposedChange:
        """Graduate to the next stage (A -> B or B -> C)."""
        if can_graduate_a_to_b(record):
            return self.graduate_a_to_b(record)
        if can_graduate_b_to_c(record):
            return self.graduate_b_to_c(record)
        raise TransitionError(
            f"Student {record.id} is not eligible for graduation from group {record.student_group}"
        )

    def graduate_a_to_b(self, record: StudentCurriculumRecord) -> ProposedChange:
        # Group B fields are left for the next progress submission
        return self._checked(TransitionKind.GRADUATE_A_TO_B, record, {"student_group": "B"})

    def graduate_b_to_c(self, record: StudentCurriculumRecord) -> ProposedChange:
        fields: Dict[str, Any] = {"student_group": "C"}
        if self.hifz_teacher:
            fields["assigned_teacher"] = self.hifz_teacher
        return self._checked(TransitionKind.GRADUATE_B_TO_C, record, fields)

    def skip_juz_amma(self, record: StudentCurriculumRecord) -> ProposedChange:
        return self._checked(TransitionKind.SKIP_JUZ_AMMA, record, dict(HIFZ_ENTRY_FIELDS))

    def complete_juz_amma(self, record: StudentCurriculumRecord) -> ProposedChange:
        return self._checked(
            TransitionKind.COMPLETE_JUZ_AMMA, record, juz_amma_completion_fields()
        )

    def move_back_to_juz_amma(self, record: StudentCurriculumRecord) -> ProposedChange:
        """Return to Juz' Amma. Discards Hifz progress; nothing is archived."""
        fields = {
            "juz_amma_surah": record.juz_amma_surah or JUZ_AMMA_FIRST_SURAH,
            "juz_amma_completed": False,
            "hifz_sabak": None,
            "hifz_s_para": None,
            "hifz_daur": None,
        }
        return self._checked(TransitionKind.MOVE_BACK_TO_JUZ_AMMA, record, fields)

    def mark_hafiz(self, record: StudentCurriculumRecord) -> ProposedChange:
        return self._checked(
            TransitionKind.MARK_HAFIZ, record, {"hifz_graduated": True, "hifz_daur": None}
        )

    def unmark_hafiz(self, record: StudentCurriculumRecord) -> ProposedChange:
        return self._checked(TransitionKind.UNMARK_HAFIZ, record, {"hifz_graduated": False})

    def _checked(
        self,
        kind: TransitionKind,
        record: StudentCurriculumRecord,
        fields: Dict[str, Any],
    ) -> ProposedChange:
        to_state = _TRANSITIONS[kind][1]
        if not is_eligible(kind, record):
            raise TransitionError(
                f"Invalid transition {kind.value} for student {record.id} "
                f"in state {curriculum_state(record).value}"
            )

        after = curriculum_state(record.with_fields(fields))
        if kind in _TRACK_SWITCHES:
            landed = after == to_state
        else:
            # graduations only fix the stage; the sub-track is derived
            landed = _STAGE_OF_STATE[after] == _STAGE_OF_STATE[to_state]
        if not landed:
            raise TransitionError(f"Transition {kind.value} would land in {after.value}")

        return ProposedChange(kind=kind, fields=fields)
