"""Unit tests for verdict/composer.py — ResultComposer."""
from __future__ import annotations

import pytest

from aumos_compliance.ai.results import (
    ComplianceFail,
    ComplianceOpinion,
    CompliancePass,
    ParseStatus,
    RiskAssessmentResult,
    RiskCategory,
)
from aumos_compliance.detection.patterns import SensitiveCategory
from aumos_compliance.detection.scanner import ScanReport, SensitiveMatch
from aumos_compliance.rules.models import Severity, Violation
from aumos_compliance.verdict.composer import (
    AI_UNAVAILABLE_SUMMARY,
    DATA_PROTECTION_CATEGORY,
    RULE_RECOMMENDATION,
    ResultComposer,
)


@pytest.fixture()
def composer() -> ResultComposer:
    return ResultComposer()


@pytest.fixture()
def violation() -> Violation:
    return Violation(
        rule_name="GDPR_EMAIL",
        jurisdiction="EU",
        description="Email address in document",
        severity=Severity.HIGH,
        matched_text="a@b.com",
        offset=9,
    )


@pytest.fixture()
def ai_fail() -> ComplianceFail:
    return ComplianceFail(requirement="Retention", severity="LOW", details="No limit")


class TestCompose:
    def test_rule_violation_overrides_compliant_ai(self, composer: ResultComposer, violation: Violation) -> None:
        opinion = ComplianceOpinion(jurisdiction="EU", overall_compliant=True)
        verdict = composer.compose(opinion, [violation])
        assert verdict.overall_compliant is False
        assert len(verdict.failing_checks) == 1
        fail = verdict.failing_checks[0]
        assert fail.requirement == "GDPR_EMAIL"
        assert fail.severity == "HIGH"
        assert fail.details == "Email address in document - Matched: a@b.com"
        assert fail.recommendation == RULE_RECOMMENDATION
        assert fail.source == "rule"

    def test_ai_fails_come_before_rule_fails(
        self, composer: ResultComposer, violation: Violation, ai_fail: ComplianceFail
    ) -> None:
        opinion = ComplianceOpinion(jurisdiction="EU", overall_compliant=False, fails=[ai_fail])
        verdict = composer.compose(opinion, [violation])
        assert [f.source for f in verdict.failing_checks] == ["ai", "rule"]

    def test_compliant_without_any_fails(self, composer: ResultComposer) -> None:
        opinion = ComplianceOpinion(
            jurisdiction="UK",
            overall_compliant=True,
            passes=[CompliancePass(requirement="Consent")],
            summary="All good.",
        )
        verdict = composer.compose(opinion, [])
        assert verdict.overall_compliant is True
        assert verdict.ai_review_completed is True
        assert verdict.ai_parse_status is ParseStatus.PARSED
        assert verdict.summary == "All good."
        assert verdict.jurisdiction == "UK"

    def test_ai_saying_non_compliant_is_respected(self, composer: ResultComposer) -> None:
        verdict = composer.compose(ComplianceOpinion(overall_compliant=False), [])
        assert verdict.overall_compliant is False

    def test_ai_input_not_mutated(
        self, composer: ResultComposer, violation: Violation, ai_fail: ComplianceFail
    ) -> None:
        opinion = ComplianceOpinion(overall_compliant=True, fails=[ai_fail])
        verdict = composer.compose(opinion, [violation])
        verdict.failing_checks[0].details = "edited"
        assert len(opinion.fails) == 1
        assert opinion.fails[0].details == "No limit"

    def test_missing_ai_uses_rule_findings(self, composer: ResultComposer, violation: Violation) -> None:
        verdict = composer.compose(None, [violation], ai_error="timed out", jurisdiction="EU")
        assert verdict.overall_compliant is False
        assert verdict.ai_review_completed is False
        assert verdict.ai_error == "timed out"
        assert verdict.summary == AI_UNAVAILABLE_SUMMARY
        assert verdict.jurisdiction == "EU"
        assert len(verdict.failing_checks) == 1

    def test_missing_ai_without_violations_is_compliant(self, composer: ResultComposer) -> None:
        assert composer.compose(None, []).overall_compliant is True

    def test_fallback_opinion_is_flagged(self, composer: ResultComposer) -> None:
        opinion = ComplianceOpinion(summary="raw", parse_status=ParseStatus.FALLBACK)
        verdict = composer.compose(opinion, [])
        assert verdict.ai_parse_status is ParseStatus.FALLBACK
        assert verdict.overall_compliant is False

    def test_to_dict(self, composer: ResultComposer, violation: Violation) -> None:
        match = SensitiveMatch(SensitiveCategory.EMAIL, "a@b.com", 9)
        data = composer.compose(None, [violation], [match], jurisdiction="EU").to_dict()
        assert data["failing_checks"][0]["source"] == "rule"
        assert data["rule_violations"][0]["rule_name"] == "GDPR_EMAIL"
        assert data["sensitive_matches"][0]["category"] == "EMAIL"
        assert data["ai_parse_status"] is None


class TestMergeDataProtection:
    def _report(self, *categories: SensitiveCategory) -> ScanReport:
        matches = [SensitiveMatch(c, "x", i * 10) for i, c in enumerate(categories)]
        return ScanReport(matches=matches, masked_text="masked")

    def test_adds_category_and_raises_overall(self, composer: ResultComposer) -> None:
        risk = RiskAssessmentResult(
            overall_risk_score=2,
            risk_categories=[RiskCategory(category="Liability", score=2)],
        )
        merged = composer.merge_data_protection(
            risk,
            self._report(SensitiveCategory.EMAIL, SensitiveCategory.EMAIL, SensitiveCategory.PHONE),
        )
        data = merged.risk_categories[-1]
        assert data.category == DATA_PROTECTION_CATEGORY
        assert data.score == 3
        assert data.details == "Detected 3 sensitive data items: EMAIL, PHONE"
        assert merged.overall_risk_score == 3
        assert len(risk.risk_categories) == 1

    def test_score_capped_at_ten(self, composer: ResultComposer) -> None:
        merged = composer.merge_data_protection(
            RiskAssessmentResult(overall_risk_score=1),
            self._report(*[SensitiveCategory.NATIONAL_ID] * 14),
        )
        assert merged.risk_categories[-1].score == 10
        assert merged.overall_risk_score == 10

    def test_higher_overall_score_kept(self, composer: ResultComposer) -> None:
        merged = composer.merge_data_protection(
            RiskAssessmentResult(overall_risk_score=9),
            self._report(SensitiveCategory.EMAIL),
        )
        assert merged.overall_risk_score == 9

    def test_no_matches_returns_copy(self, composer: ResultComposer) -> None:
        risk = RiskAssessmentResult(overall_risk_score=4)
        merged = composer.merge_data_protection(risk, self._report())
        assert merged == risk
        assert merged is not risk
