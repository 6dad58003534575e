#!/usr/bin/env python3
"""
Run one scheduled job against the configured database.

Intended for cron:

    */15 * * * *  python scripts/run_scheduled_jobs.py expire
    0 * * * *     python scripts/run_scheduled_jobs.py generate --days-ahead 7
    0 8 * * *     python scripts/run_scheduled_jobs.py notify

Each job is idempotent, so overlapping runs are harmless. A JSON summary is
printed to stdout.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from a checkout without installing the package
PROJECT_ROOT = Path(__file__).parent.parent.absolute()
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from mbc_tracker.application.services import (  # noqa: E402
    AuditLogService,
    InstanceGenerator,
    LifecycleManager,
    NotificationDispatcher,
    PolicyStore,
    seed_measures,
)
from mbc_tracker.core.config.settings import get_settings  # noqa: E402
from mbc_tracker.core.logging_config import setup_logging  # noqa: E402
from mbc_tracker.domain.services.scoring import MeasureScorer  # noqa: E402
from mbc_tracker.infrastructure.notifications import LoggingNotificationSender  # noqa: E402
from mbc_tracker.infrastructure.persistence.sqlalchemy.session import (  # noqa: E402
    create_all_tables,
    create_engine_from_settings,
    create_session_factory,
)
from mbc_tracker.infrastructure.persistence.sqlalchemy.unit_of_work import (  # noqa: E402
    UnitOfWorkFactory,
)

logger = logging.getLogger("mbc_tracker.scripts.run_scheduled_jobs")

JOBS = ("generate", "expire", "notify", "seed")


async def run_job(job: str, days_ahead: int | None = None) -> dict[str, Any]:
    settings = get_settings()
    engine = create_engine_from_settings(settings)
    try:
        await create_all_tables(engine)
        uow_factory = UnitOfWorkFactory(create_session_factory(engine))
        scorer = MeasureScorer()
        audit = AuditLogService(uow_factory)
        lifecycle = LifecycleManager(uow_factory, scorer, audit)

        if job == "seed":
            measures = await seed_measures(uow_factory, scorer)
            return {"job": job, "measures": [m.name for m in measures]}

        if job == "expire":
            return {"job": job, "expired": await lifecycle.mark_expired_instances()}

        if job == "notify":
            dispatcher = NotificationDispatcher(
                uow_factory,
                lifecycle,
                LoggingNotificationSender(),
                base_url=settings.PUBLIC_APP_URL,
                lookahead_hours=settings.NOTIFICATION_LOOKAHEAD_HOURS,
            )
            return {"job": job, **await dispatcher.send_pending_notifications()}

        policy = await PolicyStore(uow_factory, settings).get_active_policy()
        generator = InstanceGenerator(uow_factory, policy, scorer, audit)
        days = days_ahead if days_ahead is not None else settings.UPCOMING_DAYS_AHEAD
        result = await generator.generate_upcoming(days)
        return {
            "job": job,
            "days_ahead": days,
            **result.to_dict(),
            "expired": await lifecycle.mark_expired_instances(),
            "audit_write_failures": audit.failed_writes,
        }
    finally:
        await engine.dispose()


def main() -> int:
    parser = argparse.ArgumentParser(description="Run an MBC Tracker scheduled job")
    parser.add_argument("job", choices=JOBS, help="Job to run")
    parser.add_argument(
        "--days-ahead",
        type=int,
        default=None,
        help="Encounter window for 'generate' (defaults to UPCOMING_DAYS_AHEAD)",
    )
    args = parser.parse_args()

    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.AUDIT_LOG_FILE)

    try:
        summary = asyncio.run(run_job(args.job, args.days_ahead))
    except Exception as e:
        logger.error(f"Job '{args.job}' failed: {type(e).__name__}: {e}")
        print(json.dumps({"job": args.job, "success": False, "error": str(e)}))
        return 1

    print(json.dumps({"success": True, **summary}, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
