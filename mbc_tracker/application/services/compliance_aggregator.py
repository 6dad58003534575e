"""
Compliance aggregator.

Point-in-time views of assessment compliance through the policy's grace
window lens. Nothing here mutates state.
"""

import logging
from datetime import timedelta
from typing import Any

from mbc_tracker.core.interfaces.unit_of_work import UnitOfWorkFactory
from mbc_tracker.core.utils.date_utils import Clock, days_between, format_date_iso, utcnow
from mbc_tracker.domain.entities.assessment_instance import AssessmentInstance
from mbc_tracker.domain.entities.policy import Policy

logger = logging.getLogger(__name__)


def compute_compliance_rate(completed: int, due: int) -> float:
    """
    Percentage of due assessments that were completed.

    A window with nothing due is vacuously fully compliant.
    """
    if due == 0:
        return 100.0
    return round(100 * completed / due, 1)


class ComplianceAggregator:
    def __init__(self, uow_factory: UnitOfWorkFactory, policy: Policy, clock: Clock = utcnow):
        self._uow_factory = uow_factory
        self.policy = policy
        self._clock = clock

    async def due_assessments(self) -> list[AssessmentInstance]:
        """Non-terminal instances that are due and still inside the grace window."""
        async with self._uow_factory() as uow:
            return await uow.instances.list_due(self._clock(), self.policy.grace_window_days)

    async def overdue_assessments(self) -> list[AssessmentInstance]:
        """Non-terminal instances past the grace window whose link is still valid."""
        async with self._uow_factory() as uow:
            return await uow.instances.list_overdue(self._clock(), self.policy.grace_window_days)

    async def compliance_rate(self, window_days: int) -> float:
        now = self._clock()
        start = now - timedelta(days=window_days)
        async with self._uow_factory() as uow:
            due = await uow.instances.count_due_between(start, now)
            completed = await uow.instances.count_completed_between(start, now)
        return compute_compliance_rate(completed, due)

    async def compliance_summary(self, window_days: int) -> dict[str, Any]:
        """
        Compliance report for the trailing ``window_days``.

        Returns:
            dict: ``period``, ``metrics`` (total_due, total_completed,
            total_overdue, compliance_rate), ``due_count``, ``overdue_count``
            and ``overdue_list`` sorted by due date
        """
        now = self._clock()
        start = now - timedelta(days=window_days)
        grace = self.policy.grace_window_days

        async with self._uow_factory() as uow:
            due = await uow.instances.list_due(now, grace)
            overdue = await uow.instances.list_overdue(now, grace)
            total_due = await uow.instances.count_due_between(start, now)
            total_completed = await uow.instances.count_completed_between(start, now)
            patients = await uow.patients.get_many(list({i.patient_id for i in overdue}))

        overdue_list = []
        for instance in overdue:
            patient = patients.get(instance.patient_id)
            overdue_list.append(
                {
                    "instance_id": str(instance.id),
                    "patient_id": str(instance.patient_id),
                    "patient_name": patient.full_name if patient else None,
                    "measure_name": instance.measure_name,
                    "status": instance.status.value,
                    "due_date": format_date_iso(instance.due_date),
                    "expires_at": format_date_iso(instance.expires_at),
                    "days_past_due": days_between(instance.due_date, now),
                }
            )

        rate = compute_compliance_rate(total_completed, total_due)
        logger.info(
            f"Compliance summary ({window_days}d): {total_completed}/{total_due} = {rate}%, "
            f"{len(overdue)} overdue"
        )
        return {
            "period": {
                "start": format_date_iso(start),
                "end": format_date_iso(now),
                "days": window_days,
            },
            "metrics": {
                "total_due": total_due,
                "total_completed": total_completed,
                "total_overdue": len(overdue),
                "compliance_rate": rate,
            },
            "due_count": len(due),
            "overdue_count": len(overdue),
            "overdue_list": overdue_list,
        }
