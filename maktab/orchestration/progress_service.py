"""
Progress service - the validate -> transition -> audit -> persist pipeline.

Every mutating operation reads a fresh record, builds a partial field set,
emits one audit entry per changed field and hands both to the stores in the
caller's session. Rejections are returned; nothing is written for them.
The caller owns the transaction (see maktab.database.session_scope).
"""

import uuid
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from maktab.config import Settings, get_settings
from maktab.engines.audit.diff import AuditDiffEmitter
from maktab.engines.progress.confirmation import (
    CompletionGate,
    Confirmation,
    ConfirmationError,
    GatedAction,
    rising_milestones,
)
from maktab.engines.progress.due_dates import DueDateLifecycle, month_key
from maktab.engines.progress.state import TrackResolution, resolve_track
from maktab.engines.progress.transitions import (
    TransitionEngine,
    TransitionKind,
    available_transitions,
    is_eligible_for_graduation,
)
from maktab.engines.progress.validator import Rejected, RejectionReason, validate_and_build
from maktab.kernel.stores import ProgressAuditStore, SnapshotStore, StudentDirectory
from maktab.logging_config import get_logger, operation_scope
from maktab.schemas.progress import (
    ActorIdentity,
    ProgressAuditEntry,
    ProgressSubmission,
    StudentCurriculumRecord,
)

logger = get_logger(__name__)


class AppliedUpdate(BaseModel):
    """Result of an accepted operation."""

    record: StudentCurriculumRecord
    audit_entries: List[ProgressAuditEntry] = []
    transition: Optional[TransitionKind] = None

    @property
    def accepted(self) -> bool:
        return True


OperationResult = Union[AppliedUpdate, Rejected]

# Track switches and Hafiz ask the teacher before acting
_GATED_TRANSITIONS: Dict[TransitionKind, GatedAction] = {
    TransitionKind.SKIP_JUZ_AMMA: GatedAction.SKIP_JUZ_AMMA,
    TransitionKind.MOVE_BACK_TO_JUZ_AMMA: GatedAction.MOVE_BACK_TO_JUZ_AMMA,
    TransitionKind.MARK_HAFIZ: GatedAction.HAFIZ,
}


def _confirmation_required(actions: Iterable[GatedAction]) -> Rejected:
    names = [a.value for a in actions]
    return Rejected(
        reason=RejectionReason.CONFIRMATION_REQUIRED,
        fields=names,
        message="Confirmation required: " + ", ".join(names),
    )


class ProgressService:
    """
    Curriculum progress operations for one unit of work.

    Usage:
        async with session_scope() as session:
            service = ProgressService(session, gate)
            result = await service.submit_progress(student_id, submission, actor)
            if not result.accepted:
                ...  # re-prompt with result.fields
    """

    def __init__(
        self,
        session: AsyncSession,
        gate: CompletionGate,
        settings: Optional[Settings] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self.session = session
        self.gate = gate
        self.settings = settings or get_settings()
        self.directory = StudentDirectory(session)
        self.audit_store = ProgressAuditStore(session)
        self.snapshot_store = SnapshotStore(session)
        self.transitions = TransitionEngine(hifz_teacher=self.settings.hifz_teacher)
        self.due_dates = DueDateLifecycle.from_settings(self.settings)
        self._today = today or date.today

    # Reads

    async def get_record(self, student_id: uuid.UUID) -> StudentCurriculumRecord:
        return await self.directory.get_record(student_id)

    async def get_track(self, student_id: uuid.UUID) -> TrackResolution:
        return resolve_track(await self.directory.get_record(student_id))

    async def available_transitions(self, student_id: uuid.UUID) -> List[TransitionKind]:
        return available_transitions(await self.directory.get_record(student_id))

    async def is_eligible_for_graduation(self, student_id: uuid.UUID) -> bool:
        return is_eligible_for_graduation(await self.directory.get_record(student_id))

    async def get_history(self, student_id: uuid.UUID, limit: int = 100) -> List[ProgressAuditEntry]:
        return await self.audit_store.get_student_history(student_id, limit=limit)

    async def should_prompt(self, student_id: uuid.UUID, today: Optional[date] = None) -> bool:
        record = await self.directory.get_record(student_id)
        return self.due_dates.should_prompt(record, today or self._today())

    # Progress form

    async def submit_progress(
        self,
        student_id: uuid.UUID,
        submission: ProgressSubmission,
        actor: ActorIdentity,
        confirmations: Iterable[Confirmation] = (),
        today: Optional[date] = None,
    ) -> OperationResult:
        """
        Validate a form submission and apply it.

        Milestones switching on (Qaidah, Duas, Quran, Tajweed, Hafiz) need a
        confirmed token each in confirmations. Tokens are consumed only once
        the write has been flushed; a failed write leaves them redeemable.
        Completing Juz' Amma at surah 114 moves the student onto the Hifz
        sub-track.
        """
        confirmations = list(confirmations)
        with operation_scope():
            record = await self.directory.get_record(student_id)
            track = resolve_track(record)
            outcome = validate_and_build(track, submission)
            if not outcome.accepted:
                logger.info(
                    "Progress rejected",
                    extra={
                        "student_id": str(student_id),
                        "reason": outcome.reason.value,
                        "missing_fields": outcome.fields,
                    },
                )
                return outcome

            fields: Dict[str, Any] = dict(outcome.fields)
            transition = None
            if outcome.completes_juz_amma:
                change = self.transitions.complete_juz_amma(record)
                fields.update(change.fields)
                transition = change.kind

            required = rising_milestones(record, fields)
            missing = self.gate.missing(confirmations, student_id, required)
            if missing:
                rejected = _confirmation_required(missing)
                logger.info(
                    "Progress awaiting confirmation",
                    extra={"student_id": str(student_id), "missing_fields": rejected.fields},
                )
                return rejected

            today = today or self._today()
            fields.update(self.due_dates.recorded_fields(today))
            updated, entries = await self._persist(record, fields, actor)

            if self.settings.snapshot_on_progress:
                await self.snapshot_store.upsert(updated, month_key(today))
            self.gate.redeem_all(confirmations, student_id, required)

            logger.info(
                "Progress accepted",
                extra={
                    "student_id": str(student_id),
                    "form": outcome.form.value,
                    "changed_fields": [e.field_changed for e in entries],
                },
            )
            return AppliedUpdate(record=updated, audit_entries=entries, transition=transition)

    # Transitions

    async def graduate(self, student_id: uuid.UUID, actor: ActorIdentity) -> AppliedUpdate:
        """A -> B or B -> C. Raises TransitionError when not eligible."""
        with operation_scope():
            record = await self.directory.get_record(student_id)
            change = self.transitions.graduate(record)
            return await self._apply_change(record, change.kind, change.fields, actor)

    async def skip_juz_amma(
        self,
        student_id: uuid.UUID,
        confirmation: Optional[Confirmation],
        actor: ActorIdentity,
    ) -> OperationResult:
        """Skip straight to full Hifz at sabak 1, s_para 1."""
        return await self._gated_transition(
            TransitionKind.SKIP_JUZ_AMMA, student_id, confirmation, actor
        )

    async def move_back_to_juz_amma(
        self,
        student_id: uuid.UUID,
        confirmation: Optional[Confirmation],
        actor: ActorIdentity,
    ) -> OperationResult:
        """Return to Juz' Amma. Hifz sabak, s_para and daur are cleared."""
        return await self._gated_transition(
            TransitionKind.MOVE_BACK_TO_JUZ_AMMA, student_id, confirmation, actor
        )

    async def mark_hafiz(
        self,
        student_id: uuid.UUID,
        confirmation: Optional[Confirmation],
        actor: ActorIdentity,
    ) -> OperationResult:
        return await self._gated_transition(
            TransitionKind.MARK_HAFIZ, student_id, confirmation, actor
        )

    async def unmark_hafiz(self, student_id: uuid.UUID, actor: ActorIdentity) -> AppliedUpdate:
        """Clearing the Hafiz flag needs no confirmation."""
        with operation_scope():
            record = await self.directory.get_record(student_id)
            change = self.transitions.unmark_hafiz(record)
            return await self._apply_change(record, change.kind, change.fields, actor)

    # Monthly due dates

    async def refresh_due(
        self,
        student_id: uuid.UUID,
        today: Optional[date] = None,
    ) -> StudentCurriculumRecord:
        """Mark the student due for this month if not already marked."""
        with operation_scope():
            record = await self.directory.get_record(student_id)
            fields = self.due_dates.refresh_due(record, today or self._today())
            if not fields:
                return record
            logger.info(
                "Progress marked due",
                extra={"student_id": str(student_id), "due_month": fields["progress_due_month"]},
            )
            return await self.directory.apply_update(student_id, fields)

    async def skip_for_now(self, student_id: uuid.UUID) -> StudentCurriculumRecord:
        """Close the prompt without recording anything; the student stays due."""
        with operation_scope():
            record = await self.directory.get_record(student_id)
            self.due_dates.skip(record)
            return record

    async def skip_class_today(self, student_ids: Iterable[uuid.UUID]) -> List[StudentCurriculumRecord]:
        """Close the prompt for a whole class; nothing is recorded for anyone."""
        with operation_scope():
            records = [await self.directory.get_record(sid) for sid in student_ids]
            self.due_dates.skip_class_today(records)
            return records

    # Internals

    async def _gated_transition(
        self,
        kind: TransitionKind,
        student_id: uuid.UUID,
        confirmation: Optional[Confirmation],
        actor: ActorIdentity,
    ) -> OperationResult:
        action = _GATED_TRANSITIONS[kind]
        with operation_scope():
            record = await self.directory.get_record(student_id)
            change = self.transitions.propose(kind, record)
            if confirmation is None:
                logger.info(
                    "Transition awaiting confirmation",
                    extra={"student_id": str(student_id), "transition": kind.value},
                )
                return _confirmation_required([action])
            if not self.gate.is_confirmed(confirmation, student_id, action):
                raise ConfirmationError(
                    f"{action.value} for student {student_id} has not been confirmed"
                )
            applied = await self._apply_change(record, change.kind, change.fields, actor)
            self.gate.redeem(confirmation, student_id, action)
            return applied

    async def _apply_change(
        self,
        record: StudentCurriculumRecord,
        kind: TransitionKind,
        fields: Dict[str, Any],
        actor: ActorIdentity,
    ) -> AppliedUpdate:
        updated, entries = await self._persist(record, fields, actor)
        logger.info(
            "Transition applied",
            extra={
                "student_id": str(record.id),
                "transition": kind.value,
                "from_group": record.student_group,
                "to_group": updated.student_group,
            },
        )
        return AppliedUpdate(record=updated, audit_entries=entries, transition=kind)

    async def _persist(
        self,
        record: StudentCurriculumRecord,
        fields: Dict[str, Any],
        actor: ActorIdentity,
    ):
        entries = AuditDiffEmitter.build_entries(record, fields, actor)
        try:
            updated = await self.directory.apply_update(record.id, fields)
            await self.audit_store.append(entries)
            await self.session.flush()
        except SQLAlchemyError:
            logger.error(
                "Persisting progress failed",
                exc_info=True,
                extra={"student_id": str(record.id)},
            )
            raise
        return updated, entries
