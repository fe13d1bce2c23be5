"""
Completion confirmation gate - two-step protocol for milestone flags.

Setting a milestone (false -> true) needs a confirmed token:

    pending = gate.propose_completion(student_id, GatedAction.HAFIZ)
    confirmation = gate.confirm(pending.token)     # teacher clicked "Yes"
    await service.mark_hafiz(student_id, confirmation, actor)

Clearing a milestone (true -> false) needs nothing. The same gate covers the
two Group C track switches, which also ask the teacher before acting.
"""

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel

from maktab.curriculum.duas import decode_duas_status
from maktab.curriculum.reference import QAIDAH_COMPLETED_LEVEL
from maktab.logging_config import get_logger
from maktab.schemas.progress import StudentCurriculumRecord

logger = get_logger(__name__)


class GatedAction(str, Enum):
    """Actions that require an explicit confirmation."""

    # Milestones
    QAIDAH = "qaidah"
    DUAS = "duas"
    QURAN = "quran"
    TAJWEED = "tajweed"
    HAFIZ = "hafiz"

    # Group C track switches
    SKIP_JUZ_AMMA = "skip_juz_amma"
    MOVE_BACK_TO_JUZ_AMMA = "move_back_to_juz_amma"


class ConfirmationError(ValueError):
    """Unknown, expired, mismatched or already redeemed confirmation."""


class PendingConfirmation(BaseModel):
    """Issued by propose_completion(); waits for the teacher's answer."""

    token: str
    student_id: uuid.UUID
    action: GatedAction
    proposed_at: datetime
    expires_at: datetime


class Confirmation(BaseModel):
    """A confirmed token, redeemable once for the same student and action."""

    token: str
    student_id: uuid.UUID
    action: GatedAction
    confirmed_at: datetime
    expires_at: datetime


def requires_confirmation(previous: Optional[bool], new: Optional[bool]) -> bool:
    """Only a false -> true change of a flag is gated."""
    return bool(new) and not previous


def _qaidah_done(values: Mapping[str, Any]) -> bool:
    return values.get("qaidah_level") == QAIDAH_COMPLETED_LEVEL


def _duas_done(values: Mapping[str, Any]) -> bool:
    return decode_duas_status(values.get("duas_status")).completed


_MILESTONE_FLAGS: Dict[GatedAction, Callable[[Mapping[str, Any]], bool]] = {
    GatedAction.QAIDAH: _qaidah_done,
    GatedAction.DUAS: _duas_done,
    GatedAction.QURAN: lambda v: bool(v.get("quran_completed")),
    GatedAction.TAJWEED: lambda v: bool(v.get("tajweed_completed")),
    GatedAction.HAFIZ: lambda v: bool(v.get("hifz_graduated")),
}

_MILESTONE_SOURCE_FIELDS: Dict[GatedAction, str] = {
    GatedAction.QAIDAH: "qaidah_level",
    GatedAction.DUAS: "duas_status",
    GatedAction.QURAN: "quran_completed",
    GatedAction.TAJWEED: "tajweed_completed",
    GatedAction.HAFIZ: "hifz_graduated",
}


def rising_milestones(
    record: StudentCurriculumRecord,
    fields: Mapping[str, Any],
) -> List[GatedAction]:
    """Milestones that a partial update would switch from not-done to done."""
    before = record.model_dump()
    rising = []
    for action, is_done in _MILESTONE_FLAGS.items():
        if _MILESTONE_SOURCE_FIELDS[action] not in fields:
            continue
        if requires_confirmation(is_done(before), is_done(fields)):
            rising.append(action)
    return rising


class CompletionGate:
    """
    In-memory store of pending and confirmed tokens.

    A pending token lives for ttl_seconds from proposal, a confirmed one for
    ttl_seconds from confirmation. A confirmed token is consumed by redeem();
    cancel() drops either. Expired tokens are purged on every proposal and
    confirmation.
    """

    def __init__(
        self,
        ttl_seconds: int = 600,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._pending: Dict[str, PendingConfirmation] = {}
        self._confirmed: Dict[str, Confirmation] = {}

    def propose_completion(self, student_id: uuid.UUID, action: GatedAction) -> PendingConfirmation:
        """Start the two-step protocol. Nothing is mutated."""
        now = self._clock()
        self._purge_expired(now)
        pending = PendingConfirmation(
            token=secrets.token_urlsafe(16),
            student_id=student_id,
            action=action,
            proposed_at=now,
            expires_at=now + self.ttl,
        )
        self._pending[pending.token] = pending
        logger.debug(
            "Confirmation proposed",
            extra={"student_id": str(student_id), "action": action.value},
        )
        return pending

    def confirm(self, token: str) -> Confirmation:
        """Teacher confirmed; the returned Confirmation authorizes one mutation."""
        pending = self._pending.pop(token, None)
        if pending is None:
            raise ConfirmationError("Unknown or already used confirmation token")
        now = self._clock()
        if now > pending.expires_at:
            raise ConfirmationError(f"Confirmation for {pending.action.value} has expired")
        self._purge_expired(now)

        confirmation = Confirmation(
            token=token,
            student_id=pending.student_id,
            action=pending.action,
            confirmed_at=now,
            expires_at=now + self.ttl,
        )
        self._confirmed[token] = confirmation
        return confirmation

    @property
    def outstanding(self) -> int:
        """Pending plus confirmed tokens still held."""
        return len(self._pending) + len(self._confirmed)

    def cancel(self, token: str) -> None:
        """Teacher dismissed the dialog."""
        self._pending.pop(token, None)
        self._confirmed.pop(token, None)

    def is_confirmed(
        self,
        confirmation: Confirmation,
        student_id: uuid.UUID,
        action: GatedAction,
    ) -> bool:
        stored = self._confirmed.get(confirmation.token)
        return (
            stored is not None
            and self._clock() <= stored.expires_at
            and stored.student_id == student_id
            and stored.action == action
        )

    def _purge_expired(self, now: datetime) -> None:
        for store in (self._pending, self._confirmed):
            for token in [t for t, entry in store.items() if now > entry.expires_at]:
                del store[token]

    def missing(
        self,
        confirmations: Iterable[Confirmation],
        student_id: uuid.UUID,
        required: Iterable[GatedAction],
    ) -> List[GatedAction]:
        """Required actions not covered by a valid confirmation."""
        confirmations = list(confirmations)
        return [
            action for action in required
            if not any(self.is_confirmed(c, student_id, action) for c in confirmations)
        ]

    def redeem(
        self,
        confirmation: Optional[Confirmation],
        student_id: uuid.UUID,
        action: GatedAction,
    ) -> Confirmation:
        """Consume a confirmation for one mutation."""
        if confirmation is None or not self.is_confirmed(confirmation, student_id, action):
            raise ConfirmationError(
                f"{action.value} for student {student_id} has not been confirmed"
            )
        return self._confirmed.pop(confirmation.token)

    def redeem_all(
        self,
        confirmations: Iterable[Confirmation],
        student_id: uuid.UUID,
        required: Iterable[GatedAction],
    ) -> List[Confirmation]:
        confirmations = list(confirmations)
        redeemed = []
        for action in required:
            match = next(
                (c for c in confirmations if self.is_confirmed(c, student_id, action)), None
            )
            redeemed.append(self.redeem(match, student_id, action))
        return redeemed
