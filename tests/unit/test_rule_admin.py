"""Unit tests for rules/admin.py — RuleAdministration."""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from aumos_compliance.audit.sink import RULE_DELETED, RULE_SAVED, RULE_TOGGLED
from aumos_compliance.cache.compliance_cache import CHECK_NAMESPACE, CacheKey, ComplianceCache
from aumos_compliance.errors import ValidationError
from aumos_compliance.rules.admin import RuleAdministration
from aumos_compliance.rules.loader import RuleLoader
from aumos_compliance.rules.models import Rule, Severity
from aumos_compliance.rules.store import RuleStore


@pytest.fixture()
def store() -> RuleStore:
    return RuleStore(
        [
            Rule(jurisdiction="EU", name="GDPR_EMAIL", pattern="@", severity=Severity.HIGH),
            Rule(jurisdiction="US", name="SSN", pattern=r"\d{3}-\d{2}-\d{4}"),
        ]
    )


@pytest.fixture()
def cache() -> ComplianceCache:
    return ComplianceCache()


@pytest.fixture()
def audit() -> MagicMock:
    return MagicMock()


@pytest.fixture()
def admin(store: RuleStore, cache: ComplianceCache, audit: MagicMock) -> RuleAdministration:
    loader = RuleLoader(store, cache=cache, audit=audit)
    return RuleAdministration(store, loader, cache, audit=audit)


def _prime(cache: ComplianceCache, jurisdiction: str) -> CacheKey:
    key = CacheKey(CHECK_NAMESPACE, jurisdiction, "fp")
    cache.get_or_compute(key, lambda: ["cached"])
    return key


class TestToggle:
    def test_toggle_deactivates_and_invalidates(
        self, admin: RuleAdministration, store: RuleStore, cache: ComplianceCache
    ) -> None:
        key = _prime(cache, "EU")
        rule = admin.toggle("EU", "GDPR_EMAIL", active=False)
        assert rule.active is False
        assert store.get("EU") == []
        assert cache.peek(key) is None

    def test_toggle_leaves_other_jurisdictions_cached(
        self, admin: RuleAdministration, cache: ComplianceCache
    ) -> None:
        key = _prime(cache, "US")
        admin.toggle("EU", "GDPR_EMAIL", active=False)
        assert cache.peek(key) == ["cached"]

    def test_toggle_emits_audit_event(self, admin: RuleAdministration, audit: MagicMock) -> None:
        admin.toggle("EU", "GDPR_EMAIL", active=False)
        audit.emit.assert_called_once_with(
            RULE_TOGGLED, jurisdiction="EU", rule_name="GDPR_EMAIL", active=False
        )

    def test_toggle_unknown_rule_raises(self, admin: RuleAdministration) -> None:
        with pytest.raises(KeyError):
            admin.toggle("EU", "NOPE", active=True)


class TestSave:
    def test_save_creates_rule(self, admin: RuleAdministration, store: RuleStore) -> None:
        admin.save(Rule(jurisdiction="UK", name="NI", pattern="[A-Z]{2}"))
        assert store.find("UK", "NI") is not None

    def test_save_updates_existing(self, admin: RuleAdministration, store: RuleStore) -> None:
        admin.save(Rule(jurisdiction="EU", name="GDPR_EMAIL", pattern="mail", severity=Severity.LOW))
        assert len(store) == 2
        assert store.find("EU", "GDPR_EMAIL").severity is Severity.LOW

    def test_save_invalidates_jurisdiction(self, admin: RuleAdministration, cache: ComplianceCache) -> None:
        key = _prime(cache, "EU")
        admin.save(Rule(jurisdiction="EU", name="NEW", pattern="x"))
        assert cache.peek(key) is None

    def test_save_rejects_invalid_pattern(self, admin: RuleAdministration, store: RuleStore) -> None:
        with pytest.raises(ValidationError):
            admin.save(Rule(jurisdiction="EU", name="BAD", pattern="(unclosed"))
        assert store.find("EU", "BAD") is None

    def test_save_emits_audit_event(self, admin: RuleAdministration, audit: MagicMock) -> None:
        admin.save(Rule(jurisdiction="UK", name="NI", pattern="x"))
        assert audit.emit.call_args.args[0] == RULE_SAVED


class TestDelete:
    def test_delete_removes_and_invalidates(
        self, admin: RuleAdministration, store: RuleStore, cache: ComplianceCache, audit: MagicMock
    ) -> None:
        key = _prime(cache, "US")
        admin.delete("US", "SSN")
        assert store.find("US", "SSN") is None
        assert cache.peek(key) is None
        assert audit.emit.call_args.args[0] == RULE_DELETED

    def test_delete_unknown_rule_raises(self, admin: RuleAdministration) -> None:
        with pytest.raises(KeyError):
            admin.delete("US", "NOPE")


class TestImportAndReload:
    def test_import_rules(self, admin: RuleAdministration, store: RuleStore) -> None:
        report = admin.import_rules(
            '{"rules": [{"jurisdiction": "UK", "ruleName": "NI", "regexPattern": "x"}]}'
        )
        assert report.applied == 1
        assert store.find("UK", "NI") is not None

    def test_import_empty_content_raises(self, admin: RuleAdministration) -> None:
        with pytest.raises(ValidationError):
            admin.import_rules("")

    def test_reload_invalidates_everything(self, admin: RuleAdministration, cache: ComplianceCache) -> None:
        eu_key = _prime(cache, "EU")
        us_key = _prime(cache, "US")
        admin.reload()
        assert cache.peek(eu_key) is None
        assert cache.peek(us_key) is None


class TestViews:
    def test_statistics(self, admin: RuleAdministration) -> None:
        stats = admin.statistics()
        assert stats.total == 2
        assert stats.by_severity == {"HIGH": 1, "MEDIUM": 1}

    def test_list_rules_includes_inactive_sorted(self, admin: RuleAdministration) -> None:
        admin.toggle("EU", "GDPR_EMAIL", active=False)
        assert [r.key for r in admin.list_rules()] == [("EU", "GDPR_EMAIL"), ("US", "SSN")]

    def test_list_rules_for_jurisdiction(self, admin: RuleAdministration) -> None:
        assert [r.name for r in admin.list_rules("US")] == ["SSN"]
