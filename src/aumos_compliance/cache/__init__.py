"""Compliance cache package.

Single-flight memoisation of rule lists, check results, and AI review
results, invalidated synchronously whenever rules change.
"""
from __future__ import annotations

from aumos_compliance.cache.compliance_cache import (
    CHECK_NAMESPACE,
    RULES_NAMESPACE,
    CacheKey,
    CacheStats,
    ComplianceCache,
)
from aumos_compliance.cache.fingerprint import fingerprint

__all__ = [
    "CHECK_NAMESPACE",
    "RULES_NAMESPACE",
    "CacheKey",
    "CacheStats",
    "ComplianceCache",
    "fingerprint",
]
