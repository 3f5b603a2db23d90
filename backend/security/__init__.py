"""Audit logging for Dice Casino."""
from .audit import AuditEventType, AuditSeverity, AuditLogger

__all__ = ["AuditEventType", "AuditSeverity", "AuditLogger"]
