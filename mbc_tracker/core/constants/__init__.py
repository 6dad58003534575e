from mbc_tracker.core.constants.audit import AuditEventType, AuditResourceType

__all__ = ["AuditEventType", "AuditResourceType"]
