"""Unit tests for detection/matcher.py — PatternMatcher."""
from __future__ import annotations

import itertools

import pytest

from aumos_compliance.detection.matcher import PatternMatcher, compile_rule_pattern
from aumos_compliance.rules.models import Rule, Severity


@pytest.fixture()
def matcher() -> PatternMatcher:
    return PatternMatcher()


@pytest.fixture()
def email_rule() -> Rule:
    return Rule(
        jurisdiction="EU",
        name="GDPR_EMAIL",
        description="Email address",
        pattern=r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}",
        severity=Severity.HIGH,
    )


class TestMatch:
    def test_single_violation(self, matcher: PatternMatcher, email_rule: Rule) -> None:
        violations = matcher.match("Contact: a@b.com", [email_rule])
        assert len(violations) == 1
        assert violations[0].rule_name == "GDPR_EMAIL"
        assert violations[0].matched_text == "a@b.com"
        assert violations[0].offset == 9
        assert violations[0].severity is Severity.HIGH
        assert violations[0].jurisdiction == "EU"

    def test_every_match_is_recorded(self, matcher: PatternMatcher, email_rule: Rule) -> None:
        violations = matcher.match("x@y.org and z@w.net", [email_rule])
        assert [v.matched_text for v in violations] == ["x@y.org", "z@w.net"]

    def test_case_insensitive(self, matcher: PatternMatcher) -> None:
        rule = Rule(jurisdiction="US-CA", name="NC", pattern="non-compete")
        assert len(matcher.match("This NON-COMPETE clause", [rule])) == 1

    def test_order_is_rule_then_offset(self, matcher: PatternMatcher) -> None:
        first = Rule(jurisdiction="EU", name="B_RULE", pattern="b")
        second = Rule(jurisdiction="EU", name="A_RULE", pattern="a")
        violations = matcher.match("a b a b", [first, second])
        assert [(v.rule_name, v.offset) for v in violations] == [
            ("B_RULE", 2),
            ("B_RULE", 6),
            ("A_RULE", 0),
            ("A_RULE", 4),
        ]

    def test_idempotent(self, matcher: PatternMatcher, email_rule: Rule) -> None:
        text = "a@b.com, c@d.com"
        assert matcher.match(text, [email_rule]) == matcher.match(text, [email_rule])

    def test_inactive_rules_ignored(self, matcher: PatternMatcher, email_rule: Rule) -> None:
        email_rule.active = False
        assert matcher.match("a@b.com", [email_rule]) == []

    def test_empty_pattern_ignored(self, matcher: PatternMatcher) -> None:
        assert matcher.match("anything", [Rule(jurisdiction="EU", name="E", pattern="")]) == []

    def test_zero_length_matches_skipped(self, matcher: PatternMatcher) -> None:
        assert matcher.match("abc", [Rule(jurisdiction="EU", name="Z", pattern="x*")]) == []

    @pytest.mark.parametrize("text", ["", None])
    def test_empty_text(self, matcher: PatternMatcher, email_rule: Rule, text: str | None) -> None:
        assert matcher.match(text, [email_rule]) == []

    def test_bad_pattern_skipped_others_run(
        self, matcher: PatternMatcher, email_rule: Rule, caplog: pytest.LogCaptureFixture
    ) -> None:
        broken = Rule(jurisdiction="EU", name="BROKEN", pattern="(unclosed")
        with caplog.at_level("ERROR", logger="aumos_compliance.detection.matcher"):
            violations = matcher.match("a@b.com", [broken, email_rule])
        assert [v.rule_name for v in violations] == ["GDPR_EMAIL"]
        assert any("BROKEN" in r.getMessage() for r in caplog.records)


class TestSlowRuleWarning:
    def test_slow_rule_logged(self, email_rule: Rule, caplog: pytest.LogCaptureFixture) -> None:
        ticks = itertools.count(step=2.0)
        matcher = PatternMatcher(slow_rule_threshold_seconds=1.0, clock=lambda: float(next(ticks)))
        with caplog.at_level("WARNING", logger="aumos_compliance.detection.matcher"):
            matcher.match("a@b.com", [email_rule])
        assert any("GDPR_EMAIL" in r.getMessage() for r in caplog.records)

    def test_fast_rule_not_logged(self, email_rule: Rule, caplog: pytest.LogCaptureFixture) -> None:
        matcher = PatternMatcher(slow_rule_threshold_seconds=1.0, clock=lambda: 0.0)
        with caplog.at_level("WARNING", logger="aumos_compliance.detection.matcher"):
            matcher.match("a@b.com", [email_rule])
        assert caplog.records == []


class TestCompileRulePattern:
    def test_compiled_pattern_is_memoised(self) -> None:
        assert compile_rule_pattern("abc") is compile_rule_pattern("abc")

    def test_compiled_case_insensitively(self) -> None:
        assert compile_rule_pattern("abc").search("ABC")
