"""Verdict composition."""
from __future__ import annotations

from aumos_compliance.verdict.composer import (
    AI_UNAVAILABLE_SUMMARY,
    RULE_RECOMMENDATION,
    ComplianceVerdict,
    ResultComposer,
)

__all__ = [
    "AI_UNAVAILABLE_SUMMARY",
    "RULE_RECOMMENDATION",
    "ComplianceVerdict",
    "ResultComposer",
]
