"""Audit logging package."""

from finovate.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
