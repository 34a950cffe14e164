"""Audit event emission.

The pipeline reports what it did as structured events; persisting them is
the job of whatever :class:`AuditSink` the caller plugs in.  Two sinks
ship with the package:

- :class:`LoggingAuditSink` writes each event to the
  ``aumos_compliance.audit`` logger, one line per event.
- :class:`~aumos_compliance.audit.logger.AuditLogger` appends JSONL records
  to a file.
"""
from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

RULES_LOADED = "rules_loaded"
RULES_IMPORTED = "rules_imported"
RULE_SAVED = "rule_saved"
RULE_TOGGLED = "rule_toggled"
RULE_DELETED = "rule_deleted"
COMPLIANCE_CHECK_COMPLETED = "compliance_check_completed"
SENSITIVE_SCAN_COMPLETED = "sensitive_scan_completed"
AI_ANALYSIS_COMPLETED = "ai_analysis_completed"
AI_ANALYSIS_DEGRADED = "ai_analysis_degraded"
COMPLIANCE_VALIDATED = "compliance_validated"

_audit_logger = logging.getLogger("aumos_compliance.audit")


@runtime_checkable
class AuditSink(Protocol):
    """Anything that accepts structured audit events."""

    def emit(self, event: str, **fields: object) -> None:
        ...


class LoggingAuditSink:
    """Writes audit events to the ``aumos_compliance.audit`` logger.

    Parameters
    ----------
    level:
        Logging level used for every event (default: ``INFO``).
    """

    def __init__(self, level: int = logging.INFO) -> None:
        self._level = level

    def emit(self, event: str, **fields: object) -> None:
        details = ", ".join(f"{name}={value}" for name, value in sorted(fields.items()))
        _audit_logger.log(self._level, "%s: %s", event.upper(), details)
