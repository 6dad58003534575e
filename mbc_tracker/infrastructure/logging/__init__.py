from mbc_tracker.infrastructure.logging.audit_logger import AUDIT_LOGGER_NAME, AuditLogger

__all__ = ["AUDIT_LOGGER_NAME", "AuditLogger"]
