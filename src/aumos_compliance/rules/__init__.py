"""Compliance rules: records, the in-memory store, loading, and administration."""
from __future__ import annotations

from aumos_compliance.rules.admin import RuleAdministration
from aumos_compliance.rules.loader import LoadReport, RuleLoader, bundled_rules_text
from aumos_compliance.rules.models import Rule, RuleStatistics, Severity, Violation
from aumos_compliance.rules.store import RuleStore

__all__ = [
    "LoadReport",
    "Rule",
    "RuleAdministration",
    "RuleLoader",
    "RuleStatistics",
    "RuleStore",
    "Severity",
    "Violation",
    "bundled_rules_text",
]
