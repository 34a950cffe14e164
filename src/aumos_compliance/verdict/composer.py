"""Result composer: merges AI findings with deterministic rule findings.

Rule violations always surface as failing checks, after any failures the
model reported.  A verdict with at least one failing check is never
compliant, whatever the model said.

Example
-------
>>> composer = ResultComposer()
>>> verdict = composer.compose(ComplianceOpinion(overall_compliant=True), [violation])
>>> verdict.overall_compliant, len(verdict.failing_checks)
(False, 1)
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone

from aumos_compliance.ai.results import (
    ComplianceFail,
    ComplianceOpinion,
    CompliancePass,
    ParseStatus,
    RiskAssessmentResult,
    RiskCategory,
)
from aumos_compliance.detection.scanner import ScanReport, SensitiveMatch
from aumos_compliance.rules.models import Violation

logger = logging.getLogger(__name__)

RULE_RECOMMENDATION = "Review and remediate this rule violation"
AI_UNAVAILABLE_SUMMARY = "AI review did not complete; verdict is based on rule checks only."
DATA_PROTECTION_CATEGORY = "Data Protection"


@dataclass
class ComplianceVerdict:
    """Combined compliance verdict for one document.

    Attributes
    ----------
    jurisdiction:
        Jurisdiction the document was validated under.
    overall_compliant:
        ``False`` whenever :attr:`failing_checks` is non-empty.
    passing_checks / failing_checks:
        Requirements that passed or failed.  Failing checks list model
        findings first, then rule violations (``source == "rule"``).
    concern_areas / recommendations / summary:
        Copied from the model's opinion.
    rule_violations:
        The raw rule violations the rule-based path produced.
    sensitive_matches:
        Sensitive-data spans found, reported for context.
    ai_review_completed:
        ``False`` when the AI opinion was unavailable.
    ai_parse_status:
        ``PARSED`` or ``FALLBACK`` when the opinion completed.
    ai_error:
        Why the AI opinion was unavailable, when known.
    """

    jurisdiction: str
    overall_compliant: bool
    passing_checks: list[CompliancePass] = field(default_factory=list)
    failing_checks: list[ComplianceFail] = field(default_factory=list)
    concern_areas: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    summary: str = ""
    rule_violations: list[Violation] = field(default_factory=list)
    sensitive_matches: list[SensitiveMatch] = field(default_factory=list)
    ai_review_completed: bool = False
    ai_parse_status: ParseStatus | None = None
    ai_error: str | None = None
    validated_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    def to_dict(self) -> dict[str, object]:
        return {
            "jurisdiction": self.jurisdiction,
            "overall_compliant": self.overall_compliant,
            "passing_checks": [check.model_dump() for check in self.passing_checks],
            "failing_checks": [check.model_dump() for check in self.failing_checks],
            "concern_areas": list(self.concern_areas),
            "recommendations": list(self.recommendations),
            "summary": self.summary,
            "rule_violations": [violation.to_dict() for violation in self.rule_violations],
            "sensitive_matches": [match.to_dict() for match in self.sensitive_matches],
            "ai_review_completed": self.ai_review_completed,
            "ai_parse_status": self.ai_parse_status.value if self.ai_parse_status else None,
            "ai_error": self.ai_error,
            "validated_at": self.validated_at.isoformat(),
        }


class ResultComposer:
    """Builds :class:`ComplianceVerdict` objects.  Stateless."""

    def compose(
        self,
        ai_verdict: ComplianceOpinion | None,
        rule_violations: Sequence[Violation],
        sensitive_matches: Iterable[SensitiveMatch] = (),
        ai_error: str | None = None,
        jurisdiction: str | None = None,
    ) -> ComplianceVerdict:
        """Merge an AI opinion with rule violations.

        Parameters
        ----------
        ai_verdict:
            The model's opinion, or ``None`` when the AI review failed or
            is not configured.  Never mutated.
        rule_violations:
            Violations from the rule-based path.
        sensitive_matches:
            Sensitive-data spans, carried into the verdict for reporting.
        ai_error:
            Reason the AI review is missing, when ``ai_verdict`` is ``None``.
        jurisdiction:
            Jurisdiction label; defaults to the opinion's.

        Returns
        -------
        ComplianceVerdict
        """
        rule_fails = [self._violation_to_fail(violation) for violation in rule_violations]

        if ai_verdict is None:
            return ComplianceVerdict(
                jurisdiction=jurisdiction or "",
                overall_compliant=not rule_fails,
                failing_checks=rule_fails,
                summary=AI_UNAVAILABLE_SUMMARY,
                rule_violations=list(rule_violations),
                sensitive_matches=list(sensitive_matches),
                ai_review_completed=False,
                ai_error=ai_error,
            )

        failing = [fail.model_copy() for fail in ai_verdict.fails] + rule_fails
        verdict = ComplianceVerdict(
            jurisdiction=jurisdiction or ai_verdict.jurisdiction,
            overall_compliant=ai_verdict.overall_compliant and not failing,
            passing_checks=[check.model_copy() for check in ai_verdict.passes],
            failing_checks=failing,
            concern_areas=list(ai_verdict.concern_areas),
            recommendations=list(ai_verdict.recommendations),
            summary=ai_verdict.summary,
            rule_violations=list(rule_violations),
            sensitive_matches=list(sensitive_matches),
            ai_review_completed=True,
            ai_parse_status=ai_verdict.parse_status,
        )
        if ai_verdict.overall_compliant and rule_fails:
            logger.info(
                "AI opinion marked compliant but %d rule violations fail the document",
                len(rule_fails),
            )
        return verdict

    def merge_data_protection(
        self,
        risk: RiskAssessmentResult,
        scan_report: ScanReport,
    ) -> RiskAssessmentResult:
        """Add a data-protection risk category for detected sensitive data.

        The category scores ``min(10, count)`` and the overall score is
        raised to at least that value.  Returns a new result.
        """
        count = len(scan_report.matches)
        if count == 0:
            return risk.model_copy(deep=True)

        categories: list[str] = []
        for match in scan_report.matches:
            if match.category.value not in categories:
                categories.append(match.category.value)
        score = min(10, count)
        data_risk = RiskCategory(
            category=DATA_PROTECTION_CATEGORY,
            score=score,
            details=f"Detected {count} sensitive data items: {', '.join(categories)}",
        )
        return risk.model_copy(
            update={
                "risk_categories": [c.model_copy() for c in risk.risk_categories] + [data_risk],
                "overall_risk_score": max(risk.overall_risk_score, score),
            },
        )

    @staticmethod
    def _violation_to_fail(violation: Violation) -> ComplianceFail:
        return ComplianceFail(
            requirement=violation.rule_name,
            severity=violation.severity.value,
            details=f"{violation.description} - Matched: {violation.matched_text}",
            recommendation=RULE_RECOMMENDATION,
            source="rule",
        )
