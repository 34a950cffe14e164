"""Administrative control surface for the rule set.

Every mutation goes through the store and then invalidates the cache for
the affected jurisdiction before returning, so a check issued after the
call sees the new rule state.
"""
from __future__ import annotations

import logging

from aumos_compliance.audit.sink import (
    RULE_DELETED,
    RULE_SAVED,
    RULE_TOGGLED,
    AuditSink,
    LoggingAuditSink,
)
from aumos_compliance.cache.compliance_cache import ComplianceCache
from aumos_compliance.rules.loader import LoadReport, RuleLoader
from aumos_compliance.rules.models import Rule, RuleStatistics
from aumos_compliance.rules.store import RuleStore

logger = logging.getLogger(__name__)


class RuleAdministration:
    """Reload, import, toggle, save, and delete rules.

    Parameters
    ----------
    store:
        The rule store being administered.
    loader:
        Loader used for reloads and string imports.
    cache:
        Cache invalidated after each mutation.
    audit:
        Sink receiving ``rule_saved`` / ``rule_toggled`` / ``rule_deleted``.

    Example
    -------
    >>> admin = RuleAdministration(store, loader, cache)
    >>> admin.toggle("EU", "GDPR_EMAIL", active=False).active
    False
    """

    def __init__(
        self,
        store: RuleStore,
        loader: RuleLoader,
        cache: ComplianceCache,
        audit: AuditSink | None = None,
    ) -> None:
        self._store = store
        self._loader = loader
        self._cache = cache
        self._audit = audit or LoggingAuditSink()

    def reload(self) -> LoadReport:
        """Re-read the configured rule file; the whole cache is invalidated."""
        return self._loader.reload()

    def import_rules(self, content: str) -> LoadReport:
        """Import rules from a YAML/JSON string.

        Raises
        ------
        ValidationError
            If the content is empty or is not a rule document.
        """
        return self._loader.load_string(content)

    def toggle(self, jurisdiction: str, name: str, active: bool) -> Rule:
        """Activate or deactivate one rule.

        Raises
        ------
        KeyError
            If the rule does not exist.
        """
        rule = self._store.set_active(jurisdiction, name, active)
        self._cache.invalidate(jurisdiction)
        logger.info("Rule %s (%s) is now %s", name, jurisdiction, "active" if active else "inactive")
        self._audit.emit(RULE_TOGGLED, jurisdiction=jurisdiction, rule_name=name, active=active)
        return rule

    def save(self, rule: Rule) -> Rule:
        """Create a rule or update the one stored under its key.

        Raises
        ------
        ValidationError
            If the key fields are empty or the pattern does not compile.
        """
        rule.validate()
        stored = self._store.upsert(rule)
        self._cache.invalidate(stored.jurisdiction)
        logger.info("Saved rule %s (%s)", stored.name, stored.jurisdiction)
        self._audit.emit(
            RULE_SAVED,
            jurisdiction=stored.jurisdiction,
            rule_name=stored.name,
            severity=stored.severity.value,
            active=stored.active,
        )
        return stored

    def delete(self, jurisdiction: str, name: str) -> Rule:
        """Remove one rule.

        Raises
        ------
        KeyError
            If the rule does not exist.
        """
        removed = self._store.delete(jurisdiction, name)
        self._cache.invalidate(jurisdiction)
        logger.info("Deleted rule %s (%s)", name, jurisdiction)
        self._audit.emit(RULE_DELETED, jurisdiction=jurisdiction, rule_name=name)
        return removed

    def statistics(self) -> RuleStatistics:
        return self._store.statistics()

    def list_rules(self, jurisdiction: str | None = None) -> list[Rule]:
        """Return every rule, active or not, sorted by jurisdiction then name."""
        rules = self._store.all()
        if jurisdiction is not None:
            rules = [rule for rule in rules if rule.jurisdiction == jurisdiction]
        return sorted(rules, key=lambda rule: rule.key)
