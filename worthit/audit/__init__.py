"""Audit logging package."""

from worthit.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
