"""
Compliance reporting and audit export endpoints.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Response

from mbc_tracker.application.services import ComplianceAggregator
from mbc_tracker.application.services.audit_log_service import events_to_csv
from mbc_tracker.core.constants.audit import AuditEventType
from mbc_tracker.core.utils.date_utils import format_date_iso
from mbc_tracker.presentation.api.dependencies import (
    AuditDep,
    ClockDep,
    SettingsDep,
    get_compliance_aggregator,
)

router = APIRouter()


class ExportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"


@router.get("", summary="Compliance summary for the trailing window")
async def get_compliance(
    aggregator: Annotated[ComplianceAggregator, Depends(get_compliance_aggregator)],
    settings: SettingsDep,
    window_days: Annotated[int | None, Query(ge=1, le=365)] = None,
) -> dict[str, Any]:
    return await aggregator.compliance_summary(window_days or settings.COMPLIANCE_WINDOW_DAYS)


@router.get("/audit", summary="Search or export the audit trail")
async def export_audit_log(
    audit: AuditDep,
    clock: ClockDep,
    patient_id: str | None = None,
    event_type: AuditEventType | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    limit: Annotated[int, Query(ge=1, le=10000)] = 1000,
    format: ExportFormat = ExportFormat.JSON,
) -> Any:
    events = await audit.search(
        patient_id=patient_id,
        event_type=event_type,
        start_time=start_date,
        end_time=end_date,
        limit=limit,
    )

    if format is ExportFormat.CSV:
        filename = f"audit-log-{clock().date().isoformat()}.csv"
        return Response(
            content=events_to_csv(events),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    return {
        "count": len(events),
        "exported_at": format_date_iso(clock()),
        "events": [event.to_log_dict() for event in events],
    }
