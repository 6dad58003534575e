"""
Assessment lifecycle manager.

Owns every state change of an assessment instance after creation:

    PENDING --send--> SENT --open--> STARTED --submit--> COMPLETED
    (any non-terminal) --time--> EXPIRED
    (any non-terminal) --cancel--> CANCELLED

Expiry is re-derived from ``expires_at`` on every read and transition, so a
link is never served as live just because the sweep has not run yet. When a
path discovers a dead link it records EXPIRED before rejecting the request.

Each transition is a conditional update on the expected prior status. Two
concurrent callers cannot both win; the loser reloads the instance and
reports the specific reason it lost.

Audit events are written after the unit of work has committed, so a failed
audit write can never roll back the transition it describes.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from mbc_tracker.core.constants.audit import AuditEventType, AuditResourceType
from mbc_tracker.core.interfaces.services.audit_logger_interface import IAuditLogger
from mbc_tracker.core.interfaces.services.scorer_interface import IScorer
from mbc_tracker.core.interfaces.unit_of_work import IUnitOfWork, UnitOfWorkFactory
from mbc_tracker.core.utils.date_utils import Clock, format_date_iso, utcnow
from mbc_tracker.domain.entities.assessment_instance import (
    NON_TERMINAL_STATUSES,
    SENDABLE_STATUSES,
    STARTABLE_STATUSES,
    AssessmentInstance,
    InstanceStatus,
)
from mbc_tracker.domain.entities.assessment_response import Answer, AssessmentResponse
from mbc_tracker.domain.entities.measure import Measure
from mbc_tracker.domain.exceptions import (
    EntityNotFoundError,
    InstanceExpiredError,
    InvalidInstanceStateError,
    ValidationFailedError,
)
from mbc_tracker.domain.services.scoring import ScoreResult

logger = logging.getLogger(__name__)


@dataclass
class QuestionnaireView:
    """What a patient sees after opening a live link."""

    instance: AssessmentInstance
    measure: Measure
    patient_first_name: str


@dataclass
class SubmissionResult:
    instance: AssessmentInstance
    response: AssessmentResponse
    score: ScoreResult


class LifecycleManager:
    """Drives assessment instances through their state machine."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        scorer: IScorer,
        audit_logger: IAuditLogger,
        clock: Clock = utcnow,
    ):
        self._uow_factory = uow_factory
        self._scorer = scorer
        self._audit = audit_logger
        self._clock = clock

    # ------------------------------------------------------------------
    # Patient-facing transitions
    # ------------------------------------------------------------------

    async def open_link(
        self,
        token: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> QuestionnaireView:
        """
        Open an access link, moving PENDING/SENT instances to STARTED.

        Re-opening a STARTED instance serves the questionnaire again without
        a new transition.

        Raises:
            EntityNotFoundError: Unknown token
            InstanceAlreadyCompletedError: Already completed
            InstanceCancelledError: Cancelled
            InstanceExpiredError: Past ``expires_at``
        """
        now = self._clock()
        started = False
        view: QuestionnaireView | None = None

        async with self._uow_factory() as uow:
            instance = await self._get_by_token(uow, token)
            error, expired_now = await self._check_actionable(uow, instance, now, "start")

            if error is None and instance.status in STARTABLE_STATUSES:
                started = await uow.instances.transition(
                    instance.id, STARTABLE_STATUSES, InstanceStatus.STARTED, now, started_at=now
                )
                if started:
                    instance.status = InstanceStatus.STARTED
                    instance.started_at = now
                else:
                    instance = await self._reload(uow, instance.id)
                    error, expired_now = await self._check_actionable(uow, instance, now, "start")

            if error is None:
                measure = await uow.measures.get_by_id(instance.measure_id)
                patient = await uow.patients.get_by_id(instance.patient_id)
                if measure is None:
                    raise EntityNotFoundError("Measure", str(instance.measure_id))
                view = QuestionnaireView(
                    instance=instance,
                    measure=measure,
                    patient_first_name=patient.first_name if patient else "",
                )

        if expired_now:
            await self._audit_expired(instance, source="open_link")
        if error is not None:
            raise error

        if started:
            logger.info(f"Instance {instance.id} status=STARTED")
            await self._audit.log_event(
                AuditEventType.QUESTIONNAIRE_STARTED,
                patient_id=str(instance.patient_id),
                resource_type=AuditResourceType.ASSESSMENT_INSTANCE,
                resource_id=str(instance.id),
                metadata={"measure_name": instance.measure_name},
                ip_address=ip_address,
                user_agent=user_agent,
            )
        return view

    async def submit(
        self,
        token: str,
        answers: Sequence[Answer],
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> SubmissionResult:
        """
        Score answers and complete the instance.

        The status update and the response insert share one transaction.

        Raises:
            EntityNotFoundError: Unknown token
            ValidationFailedError: Answers rejected by the scorer, or the
                scorer failed
            InvalidInstanceStateError: Completed, cancelled or expired; the
                loser of a concurrent submission gets the same errors
        """
        now = self._clock()
        result: SubmissionResult | None = None

        async with self._uow_factory() as uow:
            instance = await self._get_by_token(uow, token)
            error, expired_now = await self._check_actionable(uow, instance, now, "submit")

            if error is None:
                score = self._score(instance.measure_name or "", answers)
                completed = await uow.instances.transition(
                    instance.id,
                    NON_TERMINAL_STATUSES,
                    InstanceStatus.COMPLETED,
                    now,
                    completed_at=now,
                )
                if completed:
                    response = AssessmentResponse(
                        instance_id=instance.id,
                        answers=tuple(answers),
                        total_score=score.total_score,
                        severity_label=score.severity_label,
                        completed_at=now,
                    )
                    await uow.responses.add(response)
                    instance.status = InstanceStatus.COMPLETED
                    instance.completed_at = now
                    result = SubmissionResult(instance=instance, response=response, score=score)
                else:
                    instance = await self._reload(uow, instance.id)
                    error, expired_now = await self._check_actionable(uow, instance, now, "submit")
                    if error is None:
                        error = InvalidInstanceStateError(
                            current_state=instance.status.value,
                            attempted="submit",
                            instance_id=str(instance.id),
                        )

        if expired_now:
            await self._audit_expired(instance, source="submit")
        if error is not None:
            raise error

        logger.info(f"Instance {instance.id} status=COMPLETED")
        await self._audit.log_event(
            AuditEventType.QUESTIONNAIRE_SUBMITTED,
            patient_id=str(instance.patient_id),
            resource_type=AuditResourceType.ASSESSMENT_INSTANCE,
            resource_id=str(instance.id),
            metadata={
                "measure_name": instance.measure_name,
                "answered_questions": result.score.answered_questions,
            },
            ip_address=ip_address,
            user_agent=user_agent,
        )
        await self._audit.log_event(
            AuditEventType.SCORE_COMPUTED,
            patient_id=str(instance.patient_id),
            resource_type=AuditResourceType.ASSESSMENT_RESPONSE,
            resource_id=str(result.response.id),
            metadata={
                "instance_id": str(instance.id),
                "measure_name": instance.measure_name,
                "total_score": result.score.total_score,
                "severity_label": result.score.severity_label,
                "max_possible_score": result.score.max_possible_score,
            },
        )
        return result

    # ------------------------------------------------------------------
    # Operational transitions
    # ------------------------------------------------------------------

    async def get_sendable(self, instance_id: UUID) -> AssessmentInstance:
        """
        Load an instance that a link may be sent for.

        A dead link found here is recorded as EXPIRED before rejecting.

        Raises:
            EntityNotFoundError: Unknown instance
            InvalidInstanceStateError: Terminal or expired
        """
        now = self._clock()
        async with self._uow_factory() as uow:
            instance = await self._get_by_id(uow, instance_id)
            error, expired_now = await self._check_actionable(uow, instance, now, "send")

        if expired_now:
            await self._audit_expired(instance, source="send")
        if error is not None:
            raise error
        return instance

    async def mark_sent(
        self,
        instance_id: UUID,
        message_id: str | None = None,
        channel: str = "email",
        source: str = "manual",
    ) -> bool:
        """
        Record a successful link delivery.

        Only a PENDING instance moves to SENT; a re-send of a SENT or
        STARTED instance keeps its state but is still audited.

        Returns:
            bool: Whether the instance moved to SENT
        """
        now = self._clock()
        sent = False

        async with self._uow_factory() as uow:
            instance = await self._get_by_id(uow, instance_id)
            error, expired_now = await self._check_actionable(uow, instance, now, "send")
            if error is None and instance.status in SENDABLE_STATUSES:
                sent = await uow.instances.transition(
                    instance.id, SENDABLE_STATUSES, InstanceStatus.SENT, now, sent_at=now
                )

        if expired_now:
            await self._audit_expired(instance, source="send")
        if error is not None:
            raise error

        if sent:
            logger.info(f"Instance {instance.id} status=SENT")
        await self._audit.log_event(
            AuditEventType.LINK_SENT,
            actor_id="system" if source != "manual" else None,
            patient_id=str(instance.patient_id),
            resource_type=AuditResourceType.ASSESSMENT_INSTANCE,
            resource_id=str(instance.id),
            metadata={
                "channel": channel,
                "message_id": message_id,
                "source": source,
                "status_changed": sent,
            },
        )
        return sent

    async def cancel(
        self,
        instance_id: UUID,
        actor_id: str | None = None,
        reason: str | None = None,
    ) -> AssessmentInstance:
        """
        Cancel a non-terminal instance.

        Raises:
            EntityNotFoundError: Unknown instance
            InvalidInstanceStateError: Already terminal, or expired
        """
        now = self._clock()

        async with self._uow_factory() as uow:
            instance = await self._get_by_id(uow, instance_id)
            previous_status = instance.status
            error, expired_now = await self._check_actionable(uow, instance, now, "cancel")
            if error is None:
                cancelled = await uow.instances.transition(
                    instance.id, NON_TERMINAL_STATUSES, InstanceStatus.CANCELLED, now
                )
                if cancelled:
                    instance.status = InstanceStatus.CANCELLED
                else:
                    instance = await self._reload(uow, instance.id)
                    error, expired_now = await self._check_actionable(uow, instance, now, "cancel")

        if expired_now:
            await self._audit_expired(instance, source="cancel")
        if error is not None:
            raise error

        logger.info(f"Instance {instance.id} status=CANCELLED")
        await self._audit.log_event(
            AuditEventType.INSTANCE_CANCELLED,
            actor_id=actor_id,
            patient_id=str(instance.patient_id),
            resource_type=AuditResourceType.ASSESSMENT_INSTANCE,
            resource_id=str(instance.id),
            metadata={"previous_status": previous_status.value, "reason": reason},
        )
        return instance

    async def mark_expired_instances(self) -> int:
        """
        Sweep every non-terminal instance past ``expires_at`` to EXPIRED.

        Safe to run repeatedly and concurrently; each instance is expired
        (and audited) by exactly one sweep.

        Returns:
            int: Number of instances expired by this run
        """
        now = self._clock()
        async with self._uow_factory() as uow:
            expired_ids = await uow.instances.expire_overdue(now)

        for instance_id in expired_ids:
            await self._audit.log_event(
                AuditEventType.INSTANCE_EXPIRED,
                actor_id="system",
                resource_type=AuditResourceType.ASSESSMENT_INSTANCE,
                resource_id=str(instance_id),
                metadata={"source": "sweep", "expired_at": format_date_iso(now)},
            )

        logger.info(f"Expiration sweep: {len(expired_ids)} instances expired")
        return len(expired_ids)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _check_actionable(
        self,
        uow: IUnitOfWork,
        instance: AssessmentInstance,
        now: datetime,
        attempted: str,
    ) -> tuple[InvalidInstanceStateError | None, bool]:
        """
        Return the state error for acting on ``instance`` (or None) and
        whether this call is the one that recorded its expiry.
        """
        try:
            instance.ensure_actionable(now, attempted)
        except InstanceExpiredError as e:
            expired_now = False
            if instance.status is not InstanceStatus.EXPIRED:
                expired_now = await uow.instances.transition(
                    instance.id,
                    NON_TERMINAL_STATUSES,
                    InstanceStatus.EXPIRED,
                    now,
                    require_unexpired=False,
                )
                instance.status = InstanceStatus.EXPIRED
                if expired_now:
                    logger.info(f"Instance {instance.id} status=EXPIRED")
            return e, expired_now
        except InvalidInstanceStateError as e:
            return e, False
        return None, False

    def _score(self, measure_name: str, answers: Sequence[Answer]) -> ScoreResult:
        try:
            return self._scorer.score(measure_name, answers)
        except ValidationFailedError:
            raise
        except Exception as e:
            # Any scorer fault is a rejected submission, not a server error
            raise ValidationFailedError(f"Unable to score answers: {e!s}", field="answers") from e

    async def _get_by_token(self, uow: IUnitOfWork, token: str) -> AssessmentInstance:
        instance = await uow.instances.get_by_token(token)
        if instance is None:
            raise EntityNotFoundError("Assessment", message="Assessment link not found")
        return instance

    async def _get_by_id(self, uow: IUnitOfWork, instance_id: UUID) -> AssessmentInstance:
        instance = await uow.instances.get_by_id(instance_id)
        if instance is None:
            raise EntityNotFoundError("Assessment", str(instance_id))
        return instance

    async def _reload(self, uow: IUnitOfWork, instance_id: UUID) -> AssessmentInstance:
        return await self._get_by_id(uow, instance_id)

    async def _audit_expired(self, instance: AssessmentInstance, source: str) -> None:
        await self._audit.log_event(
            AuditEventType.INSTANCE_EXPIRED,
            actor_id="system",
            patient_id=str(instance.patient_id),
            resource_type=AuditResourceType.ASSESSMENT_INSTANCE,
            resource_id=str(instance.id),
            metadata={"source": source, "expires_at": format_date_iso(instance.expires_at)},
        )
