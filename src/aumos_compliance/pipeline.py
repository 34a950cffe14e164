"""Compliance pipeline: wires the rule store, cache, matcher, scanner,
AI reviewer, and composer together.

:meth:`CompliancePipeline.validate` is the fan-out/fan-in point.  The AI
opinion is started as a task first, then the deterministic rule check and
sensitive-data scan run on the calling thread while the request is in
flight, and the two branches are joined in the composer.  An AI failure
never suppresses rule findings.

Example
-------
>>> pipeline = CompliancePipeline.from_config()
>>> [v.rule_name for v in pipeline.check("Contact: a@b.com", "EU")]
['GDPR_EMAIL']
>>> verdict = pipeline.validate_sync("Contact: a@b.com", "EU")
>>> verdict.overall_compliant
False
"""
from __future__ import annotations

import asyncio
import logging

from aumos_compliance.ai.client import ChatBackend, ChatClient
from aumos_compliance.ai.results import RiskAssessmentResult
from aumos_compliance.ai.reviewer import RISK_ASSESSMENT, AiReviewAdapter
from aumos_compliance.audit.logger import AuditLogger
from aumos_compliance.audit.sink import (
    COMPLIANCE_CHECK_COMPLETED,
    COMPLIANCE_VALIDATED,
    SENSITIVE_SCAN_COMPLETED,
    AuditSink,
    LoggingAuditSink,
)
from aumos_compliance.cache.compliance_cache import (
    CHECK_NAMESPACE,
    RULES_NAMESPACE,
    CacheKey,
    ComplianceCache,
)
from aumos_compliance.cache.fingerprint import fingerprint
from aumos_compliance.config import ComplianceConfig
from aumos_compliance.detection.matcher import PatternMatcher
from aumos_compliance.detection.scanner import ScanReport, SensitiveDataScanner
from aumos_compliance.errors import AnalysisError, AnalysisFailure
from aumos_compliance.rules.admin import RuleAdministration
from aumos_compliance.rules.loader import RuleLoader
from aumos_compliance.rules.models import Rule, Violation
from aumos_compliance.rules.store import RuleStore
from aumos_compliance.verdict.composer import ComplianceVerdict, ResultComposer

logger = logging.getLogger(__name__)

AI_NOT_CONFIGURED = "AI review is not configured"


class CompliancePipeline:
    """End-to-end compliance validation.

    Parameters
    ----------
    store:
        Rule store shared with the loader and administration surface.
    cache:
        Compliance cache for rule lists, check results, and AI results.
    matcher:
        Rule pattern matcher.  A default one is created when omitted.
    scanner:
        Sensitive-data scanner.  A default one is created when omitted.
    reviewer:
        AI review adapter, or ``None`` to run rule checks only.
    composer:
        Result composer.  A default one is created when omitted.
    audit:
        Audit sink shared by every component.
    loader:
        Rule loader.  One bound to ``store`` and ``cache`` is created when
        omitted.
    """

    def __init__(
        self,
        store: RuleStore,
        cache: ComplianceCache,
        matcher: PatternMatcher | None = None,
        scanner: SensitiveDataScanner | None = None,
        reviewer: AiReviewAdapter | None = None,
        composer: ResultComposer | None = None,
        audit: AuditSink | None = None,
        loader: RuleLoader | None = None,
    ) -> None:
        self._store = store
        self._cache = cache
        self._matcher = matcher or PatternMatcher()
        self._scanner = scanner or SensitiveDataScanner()
        self._reviewer = reviewer
        self._composer = composer or ResultComposer()
        self._audit = audit or LoggingAuditSink()
        self._loader = loader or RuleLoader(store, cache=cache, audit=self._audit)
        self._admin = RuleAdministration(store, self._loader, cache, audit=self._audit)

    @classmethod
    def from_config(
        cls,
        config: ComplianceConfig | None = None,
        backend: ChatBackend | None = None,
    ) -> "CompliancePipeline":
        """Build a pipeline from configuration.

        Parameters
        ----------
        config:
            Validated configuration.  Defaults apply when omitted.
        backend:
            Chat backend for AI review.  When omitted and ``ai.enabled`` is
            set, a :class:`~aumos_compliance.ai.client.ChatClient` is built
            from the ``ai`` section.

        Returns
        -------
        CompliancePipeline
            With rules loaded when ``rules.autoload`` is set.
        """
        config = config or ComplianceConfig()
        audit: AuditSink = (
            AuditLogger(config.audit.log_path) if config.audit.log_path else LoggingAuditSink()
        )
        store = RuleStore()
        cache = ComplianceCache(
            expire_after_write_seconds=config.cache.expire_after_write_seconds,
            expire_after_access_seconds=config.cache.expire_after_access_seconds,
        )
        loader = RuleLoader(store, cache=cache, rules_path=config.rules.path, audit=audit)

        if backend is None and config.ai.enabled:
            backend = ChatClient(
                endpoint=config.ai.endpoint,
                api_key=config.ai.api_key,
                model=config.ai.model,
                temperature=config.ai.temperature,
                timeout_seconds=config.ai.timeout_seconds,
            )
        reviewer = None
        if backend is not None:
            reviewer = AiReviewAdapter(
                backend,
                cache=cache,
                store=store,
                audit=audit,
                timeout_seconds=config.ai.timeout_seconds,
                strict_parsing=config.ai.strict_parsing,
            )

        pipeline = cls(
            store,
            cache,
            matcher=PatternMatcher(config.matcher.slow_rule_threshold_seconds),
            scanner=SensitiveDataScanner(placeholder_template=config.scanner.placeholder_template),
            reviewer=reviewer,
            audit=audit,
            loader=loader,
        )
        if config.rules.autoload:
            loader.reload()
        return pipeline

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    @property
    def store(self) -> RuleStore:
        return self._store

    @property
    def cache(self) -> ComplianceCache:
        return self._cache

    @property
    def loader(self) -> RuleLoader:
        return self._loader

    @property
    def admin(self) -> RuleAdministration:
        return self._admin

    @property
    def reviewer(self) -> AiReviewAdapter | None:
        return self._reviewer

    # ------------------------------------------------------------------
    # Rule-based path
    # ------------------------------------------------------------------

    def active_rules(self, jurisdiction: str) -> list[Rule]:
        """Return the active rules of ``jurisdiction`` through the cache."""
        key = CacheKey(RULES_NAMESPACE, jurisdiction)
        return list(self._cache.get_or_compute(key, lambda: self._store.get(jurisdiction)))

    def check(self, text: str | None, jurisdiction: str) -> list[Violation]:
        """Return the rule violations of ``text`` under ``jurisdiction``.

        Results are cached per jurisdiction and document fingerprint and
        dropped whenever that jurisdiction's rules change.  Every call
        emits ``compliance_check_completed``; ``cached`` tells whether the
        result was served from the cache.
        """
        if not text:
            return []

        computed = False

        def compute() -> list[Violation]:
            nonlocal computed
            rules = self.active_rules(jurisdiction)
            violations = self._matcher.match(text, rules)
            computed = True
            logger.info(
                "Compliance check for %s: %d rules, %d violations",
                jurisdiction,
                len(rules),
                len(violations),
            )
            return violations

        key = CacheKey(CHECK_NAMESPACE, jurisdiction, fingerprint(text))
        violations = list(self._cache.get_or_compute(key, compute))
        self._audit.emit(
            COMPLIANCE_CHECK_COMPLETED,
            jurisdiction=jurisdiction,
            violations=len(violations),
            cached=not computed,
        )
        return violations

    def scan(self, text: str | None) -> ScanReport:
        """Detect and mask sensitive data in ``text``."""
        report = self._scanner.scan(text)
        self._audit.emit(
            SENSITIVE_SCAN_COMPLETED,
            items=report.count,
            categories=",".join(sorted(c.value for c in report.categories)),
        )
        return report

    # ------------------------------------------------------------------
    # Combined path
    # ------------------------------------------------------------------

    async def validate(self, text: str | None, jurisdiction: str) -> ComplianceVerdict:
        """Validate ``text`` with the AI opinion and the rule path in parallel.

        Returns
        -------
        ComplianceVerdict
            ``ai_review_completed`` is ``False`` when the reviewer is
            missing or failed; rule findings are always included.
        """
        ai_task: asyncio.Task | None = None
        if self._reviewer is not None and text:
            ai_task = asyncio.create_task(self._reviewer.compliance_opinion(text, jurisdiction))
            # Let the AI request get underway before the rule path runs.
            await asyncio.sleep(0)

        try:
            violations = self.check(text, jurisdiction)
            scan_report = self.scan(text)
        except BaseException:
            if ai_task is not None:
                ai_task.cancel()
            raise

        opinion = None
        ai_error: str | None = None
        if ai_task is not None:
            try:
                opinion = await ai_task
            except AnalysisError as exc:
                ai_error = str(exc)
                logger.warning("AI compliance opinion unavailable for %s: %s", jurisdiction, exc)
            except Exception as exc:
                ai_error = f"{type(exc).__name__}: {exc}"
                logger.exception("AI compliance opinion failed unexpectedly for %s", jurisdiction)
        elif self._reviewer is None:
            ai_error = AI_NOT_CONFIGURED
        else:
            ai_error = "No document text to review"

        verdict = self._composer.compose(
            opinion,
            violations,
            scan_report.matches,
            ai_error=ai_error,
            jurisdiction=jurisdiction,
        )
        self._audit.emit(
            COMPLIANCE_VALIDATED,
            jurisdiction=jurisdiction,
            overall_compliant=verdict.overall_compliant,
            failing_checks=len(verdict.failing_checks),
            ai_review_completed=verdict.ai_review_completed,
        )
        return verdict

    def validate_sync(self, text: str | None, jurisdiction: str) -> ComplianceVerdict:
        """Run :meth:`validate` from synchronous code."""
        return asyncio.run(self.validate(text, jurisdiction))

    async def assess_risk(self, text: str) -> RiskAssessmentResult:
        """AI risk assessment merged with the sensitive-data scan.

        Raises
        ------
        AnalysisError
            If no reviewer is configured or the AI call fails.
        """
        if self._reviewer is None:
            raise AnalysisError(RISK_ASSESSMENT, AI_NOT_CONFIGURED, AnalysisFailure.UPSTREAM)
        risk = await self._reviewer.assess_risk(text)
        return self._composer.merge_data_protection(risk, self.scan(text))
