"""Audit event sinks for compliance pipeline events."""
from __future__ import annotations

from aumos_compliance.audit.logger import AuditLogger
from aumos_compliance.audit.sink import AuditSink, LoggingAuditSink

__all__ = [
    "AuditLogger",
    "AuditSink",
    "LoggingAuditSink",
]
