"""Unit tests for rules/store.py and rules/models.py."""
from __future__ import annotations

import threading

import pytest

from aumos_compliance.errors import ValidationError
from aumos_compliance.rules.models import Rule, Severity, Violation
from aumos_compliance.rules.store import RuleStore


@pytest.fixture()
def store() -> RuleStore:
    return RuleStore(
        [
            Rule(jurisdiction="EU", name="GDPR_EMAIL", pattern=r"\S+@\S+", severity=Severity.HIGH),
            Rule(jurisdiction="EU", name="GDPR_IBAN", pattern=r"\bDE\d{20}\b"),
            Rule(jurisdiction="US-CA", name="CCPA_SALE", pattern="sell", active=False),
        ]
    )


# ---------------------------------------------------------------------------
# Severity
# ---------------------------------------------------------------------------


class TestSeverity:
    def test_missing_severity_defaults_to_medium(self) -> None:
        assert Severity.parse(None) is Severity.MEDIUM
        assert Severity.parse("") is Severity.MEDIUM

    def test_parse_is_case_insensitive(self) -> None:
        assert Severity.parse("high") is Severity.HIGH
        assert Severity.parse(" Low ") is Severity.LOW

    def test_unknown_severity_raises(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            Severity.parse("CRITICAL")
        assert exc_info.value.field == "severity"


# ---------------------------------------------------------------------------
# Rule / Violation models
# ---------------------------------------------------------------------------


class TestRuleModel:
    def test_key_is_jurisdiction_and_name(self) -> None:
        assert Rule(jurisdiction="EU", name="X").key == ("EU", "X")

    def test_validate_rejects_bad_pattern(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            Rule(jurisdiction="EU", name="X", pattern="(unclosed").validate()
        assert exc_info.value.field == "pattern"

    def test_validate_rejects_blank_name(self) -> None:
        with pytest.raises(ValidationError):
            Rule(jurisdiction="EU", name="  ", pattern="x").validate()

    def test_to_dict_serialises_severity_value(self) -> None:
        data = Rule(jurisdiction="EU", name="X", severity=Severity.LOW).to_dict()
        assert data["severity"] == "LOW"
        assert data["active"] is True

    def test_violation_equality_ignores_detection_time(self) -> None:
        first = Violation("R", "EU", "desc", Severity.HIGH, "a@b.com", 9)
        second = Violation("R", "EU", "desc", Severity.HIGH, "a@b.com", 9)
        assert first == second


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


class TestReads:
    def test_get_returns_active_rules_in_insertion_order(self, store: RuleStore) -> None:
        assert [r.name for r in store.get("EU")] == ["GDPR_EMAIL", "GDPR_IBAN"]

    def test_get_excludes_inactive_rules(self, store: RuleStore) -> None:
        assert store.get("US-CA") == []

    def test_get_unknown_jurisdiction_is_empty(self, store: RuleStore) -> None:
        assert store.get("UK") == []

    def test_all_includes_inactive(self, store: RuleStore) -> None:
        assert len(store.all()) == 3

    def test_returned_rules_are_copies(self, store: RuleStore) -> None:
        rule = store.get("EU")[0]
        rule.active = False
        assert store.find("EU", "GDPR_EMAIL").active is True

    def test_find_missing_returns_none(self, store: RuleStore) -> None:
        assert store.find("EU", "NOPE") is None

    def test_jurisdictions_sorted(self, store: RuleStore) -> None:
        assert store.jurisdictions() == ["EU", "US-CA"]

    def test_statistics(self, store: RuleStore) -> None:
        stats = store.statistics()
        assert stats.total == 3
        assert stats.active == 2
        assert stats.inactive == 1
        assert stats.by_jurisdiction == {"EU": 2, "US-CA": 1}
        assert stats.by_severity == {"HIGH": 1, "MEDIUM": 2}


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


class TestUpsert:
    def test_second_upsert_overwrites_without_duplicating(self, store: RuleStore) -> None:
        store.upsert(Rule(jurisdiction="EU", name="GDPR_EMAIL", pattern="new", severity=Severity.LOW))
        matching = [r for r in store.all() if r.key == ("EU", "GDPR_EMAIL")]
        assert len(matching) == 1
        assert matching[0].pattern == "new"
        assert matching[0].severity is Severity.LOW

    def test_upsert_preserves_created_at(self, store: RuleStore) -> None:
        created = store.find("EU", "GDPR_EMAIL").created_at
        updated = store.upsert(Rule(jurisdiction="EU", name="GDPR_EMAIL", pattern="new"))
        assert updated.created_at == created
        assert updated.updated_at >= created

    def test_upsert_keeps_position(self, store: RuleStore) -> None:
        store.upsert(Rule(jurisdiction="EU", name="GDPR_EMAIL", pattern="new"))
        assert [r.name for r in store.get("EU")] == ["GDPR_EMAIL", "GDPR_IBAN"]

    def test_upsert_empty_jurisdiction_raises(self, store: RuleStore) -> None:
        with pytest.raises(ValidationError):
            store.upsert(Rule(jurisdiction="", name="X"))

    def test_upsert_empty_name_raises(self, store: RuleStore) -> None:
        with pytest.raises(ValidationError):
            store.upsert(Rule(jurisdiction="EU", name=""))

    def test_concurrent_upserts_of_one_key_leave_one_entry(self) -> None:
        store = RuleStore()
        threads = [
            threading.Thread(
                target=store.upsert,
                args=(Rule(jurisdiction="EU", name="SAME", pattern=str(i)),),
            )
            for i in range(20)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(store) == 1


class TestSetActiveAndDelete:
    def test_set_active_toggles(self, store: RuleStore) -> None:
        store.set_active("EU", "GDPR_EMAIL", False)
        assert [r.name for r in store.get("EU")] == ["GDPR_IBAN"]

    def test_set_active_unknown_rule_raises(self, store: RuleStore) -> None:
        with pytest.raises(KeyError):
            store.set_active("EU", "NOPE", True)

    def test_delete_removes_rule(self, store: RuleStore) -> None:
        removed = store.delete("EU", "GDPR_IBAN")
        assert removed.name == "GDPR_IBAN"
        assert store.find("EU", "GDPR_IBAN") is None

    def test_delete_returns_a_copy(self, store: RuleStore) -> None:
        stored = store._rules[("EU", "GDPR_IBAN")]
        removed = store.delete("EU", "GDPR_IBAN")
        assert removed is not stored
        assert removed.pattern == stored.pattern
        assert removed.created_at == stored.created_at

    def test_delete_unknown_rule_raises(self, store: RuleStore) -> None:
        with pytest.raises(KeyError):
            store.delete("EU", "NOPE")


class TestReplaceAll:
    def test_replace_all_swaps_rule_set(self, store: RuleStore) -> None:
        count = store.replace_all([Rule(jurisdiction="UK", name="NI", pattern="x")])
        assert count == 1
        assert store.jurisdictions() == ["UK"]

    def test_replace_all_later_duplicate_wins(self, store: RuleStore) -> None:
        store.replace_all(
            [
                Rule(jurisdiction="UK", name="NI", pattern="first"),
                Rule(jurisdiction="UK", name="NI", pattern="second"),
            ]
        )
        assert store.find("UK", "NI").pattern == "second"
        assert len(store) == 1

    def test_replace_all_invalid_leaves_store_untouched(self, store: RuleStore) -> None:
        with pytest.raises(ValidationError):
            store.replace_all([Rule(jurisdiction="", name="X")])
        assert len(store) == 3
