"""
Call/response audit log.

Records every attempt (before and after its network call) and every
outcome in a size-capped text file. Diagnostic side channel only.
"""

from inventory_client.audit.audit_log import AuditLog
from inventory_client.audit.sanitize import to_loggable

__all__ = ["AuditLog", "to_loggable"]
