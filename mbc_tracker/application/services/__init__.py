from mbc_tracker.application.services.audit_log_service import AuditLogService
from mbc_tracker.application.services.compliance_aggregator import (
    ComplianceAggregator,
    compute_compliance_rate,
)
from mbc_tracker.application.services.enrollment_service import EnrollmentService
from mbc_tracker.application.services.instance_generator import (
    InstanceGenerator,
    generate_access_token,
    seed_measures,
)
from mbc_tracker.application.services.lifecycle_manager import LifecycleManager
from mbc_tracker.application.services.notification_dispatcher import NotificationDispatcher
from mbc_tracker.application.services.policy_store import PolicyStore
from mbc_tracker.application.services.progress_service import ProgressService

__all__ = [
    "AuditLogService",
    "ComplianceAggregator",
    "EnrollmentService",
    "InstanceGenerator",
    "LifecycleManager",
    "NotificationDispatcher",
    "PolicyStore",
    "ProgressService",
    "compute_compliance_rate",
    "generate_access_token",
    "seed_measures",
]
