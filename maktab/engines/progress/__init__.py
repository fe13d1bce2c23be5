"""
Progress Engine - curriculum stage tracking for Qaidah -> Quran -> Hifz.

Pieces:
- state: resolve_track() derives stage and Group C sub-track
- validator: per-form submission rules
- transitions: graduations and Juz' Amma / Hifz track switches
- confirmation: two-step gate for milestone flags
- due_dates: monthly progress bookkeeping
"""

from maktab.engines.progress.state import (
    FormKind,
    Subtrack,
    TrackResolution,
    resolve_track,
)
from maktab.engines.progress.validator import (
    ProgressValidator,
    Rejected,
    RejectionReason,
    UpdateFields,
    validate_and_build,
)
from maktab.engines.progress.transitions import (
    CurriculumState,
    ProposedChange,
    TransitionEngine,
    TransitionError,
    TransitionKind,
    available_transitions,
    can_graduate_a_to_b,
    can_graduate_b_to_c,
    is_eligible,
    is_eligible_for_graduation,
)
from maktab.engines.progress.confirmation import (
    CompletionGate,
    Confirmation,
    ConfirmationError,
    GatedAction,
    PendingConfirmation,
    rising_milestones,
)
from maktab.engines.progress.due_dates import DueDateLifecycle, month_key

__all__ = [
    "FormKind",
    "Subtrack",
    "TrackResolution",
    "resolve_track",
    "ProgressValidator",
    "Rejected",
    "RejectionReason",
    "UpdateFields",
    "validate_and_build",
    "CurriculumState",
    "ProposedChange",
    "TransitionEngine",
    "TransitionError",
    "TransitionKind",
    "available_transitions",
    "can_graduate_a_to_b",
    "can_graduate_b_to_c",
    "is_eligible",
    "is_eligible_for_graduation",
    "CompletionGate",
    "Confirmation",
    "ConfirmationError",
    "GatedAction",
    "PendingConfirmation",
    "rising_milestones",
    "DueDateLifecycle",
    "month_key",
]
