"""In-memory compliance rule store.

RuleStore holds the current rule set keyed by ``(jurisdiction, name)``.
Every mutation happens under a single lock and touches exactly one
record (``replace_all`` swaps the whole mapping in one step), so a reader
never observes a half-written rule.

Readers receive copies.  The store is the only place rule state lives;
callers that need cache invalidation after a write go through
:class:`~aumos_compliance.rules.admin.RuleAdministration` or the loader.

Example
-------
>>> store = RuleStore()
>>> store.upsert(Rule(jurisdiction="EU", name="GDPR_EMAIL", pattern="@"))
Rule(...)
>>> [r.name for r in store.get("EU")]
['GDPR_EMAIL']
"""
from __future__ import annotations

import copy
import threading
from collections.abc import Iterable
from datetime import datetime, timezone

from aumos_compliance.errors import ValidationError
from aumos_compliance.rules.models import Rule, RuleStatistics


class RuleStore:
    """Thread-safe in-memory rule table."""

    def __init__(self, rules: Iterable[Rule] | None = None) -> None:
        self._rules: dict[tuple[str, str], Rule] = {}
        self._lock = threading.Lock()
        for rule in rules or []:
            self.upsert(rule)

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    def get(self, jurisdiction: str) -> list[Rule]:
        """Return the active rules of ``jurisdiction`` in insertion order."""
        with self._lock:
            return [
                copy.copy(rule)
                for rule in self._rules.values()
                if rule.jurisdiction == jurisdiction and rule.active
            ]

    def all(self) -> list[Rule]:
        """Return every rule regardless of its active flag."""
        with self._lock:
            return [copy.copy(rule) for rule in self._rules.values()]

    def find(self, jurisdiction: str, name: str) -> Rule | None:
        """Return the rule stored under the key, or ``None``."""
        with self._lock:
            rule = self._rules.get((jurisdiction, name))
            return copy.copy(rule) if rule is not None else None

    def jurisdictions(self) -> list[str]:
        """Return the distinct jurisdictions present, sorted."""
        with self._lock:
            return sorted({rule.jurisdiction for rule in self._rules.values()})

    def statistics(self) -> RuleStatistics:
        """Count rules by activity, jurisdiction, and severity."""
        stats = RuleStatistics()
        for rule in self.all():
            stats.total += 1
            if rule.active:
                stats.active += 1
            else:
                stats.inactive += 1
            stats.by_jurisdiction[rule.jurisdiction] = stats.by_jurisdiction.get(rule.jurisdiction, 0) + 1
            severity = rule.severity.value
            stats.by_severity[severity] = stats.by_severity.get(severity, 0) + 1
        return stats

    def __len__(self) -> int:
        with self._lock:
            return len(self._rules)

    # ------------------------------------------------------------------
    # Write API
    # ------------------------------------------------------------------

    def upsert(self, rule: Rule) -> Rule:
        """Insert ``rule`` or overwrite the rule stored under its key.

        An existing entry keeps its identity and ``created_at``; its
        description, pattern, severity, and active flag are replaced.

        Returns
        -------
        Rule
            A copy of the stored rule.

        Raises
        ------
        ValidationError
            If the jurisdiction or name is empty.
        """
        if not rule.jurisdiction or not rule.jurisdiction.strip():
            raise ValidationError("Rule jurisdiction must not be empty.", field="jurisdiction")
        if not rule.name or not rule.name.strip():
            raise ValidationError("Rule name must not be empty.", field="name")

        now = datetime.now(tz=timezone.utc)
        with self._lock:
            existing = self._rules.get(rule.key)
            if existing is not None:
                existing.description = rule.description
                existing.pattern = rule.pattern
                existing.severity = rule.severity
                existing.active = rule.active
                existing.updated_at = now
                return copy.copy(existing)

            stored = copy.copy(rule)
            stored.created_at = now
            stored.updated_at = now
            self._rules[stored.key] = stored
            return copy.copy(stored)

    def set_active(self, jurisdiction: str, name: str, active: bool) -> Rule:
        """Toggle the active flag of one rule.

        Raises
        ------
        KeyError
            If no rule is stored under ``(jurisdiction, name)``.
        """
        with self._lock:
            rule = self._rules.get((jurisdiction, name))
            if rule is None:
                raise KeyError(f"No rule {name!r} in jurisdiction {jurisdiction!r}.")
            rule.active = active
            rule.updated_at = datetime.now(tz=timezone.utc)
            return copy.copy(rule)

    def delete(self, jurisdiction: str, name: str) -> Rule:
        """Remove one rule and return it.

        Raises
        ------
        KeyError
            If no rule is stored under ``(jurisdiction, name)``.
        """
        with self._lock:
            try:
                removed = self._rules.pop((jurisdiction, name))
            except KeyError:
                raise KeyError(f"No rule {name!r} in jurisdiction {jurisdiction!r}.") from None
            return copy.copy(removed)

    def replace_all(self, rules: Iterable[Rule]) -> int:
        """Replace the whole rule set.  Later duplicates of a key win.

        Returns
        -------
        int
            Number of rules stored after the replacement.

        Raises
        ------
        ValidationError
            If any rule has an empty jurisdiction or name.  The store is
            left untouched in that case.
        """
        now = datetime.now(tz=timezone.utc)
        replacement: dict[tuple[str, str], Rule] = {}
        for rule in rules:
            if not rule.jurisdiction or not rule.name:
                raise ValidationError("Rule jurisdiction and name must not be empty.")
            stored = copy.copy(rule)
            previous = replacement.get(stored.key)
            stored.created_at = previous.created_at if previous is not None else now
            stored.updated_at = now
            replacement[stored.key] = stored

        with self._lock:
            for key, stored in replacement.items():
                existing = self._rules.get(key)
                if existing is not None:
                    stored.created_at = existing.created_at
            self._rules = replacement
            return len(self._rules)
