"""AI review adapter.

Four coroutines wrap the chat backend: contract analysis, topic research,
risk assessment, and a compliance opinion.  Each one

1. builds a jurisdiction-specific system prompt and a JSON-schema user prompt,
2. awaits the backend under ``asyncio.wait_for``,
3. parses the response into its result model, degrading to a ``FALLBACK``
   result (or raising, with ``strict_parsing``) when the JSON is unusable.

Results are memoised in the compliance cache keyed by operation,
jurisdiction, and document fingerprint, so rule changes for a jurisdiction
also drop its cached opinions.  Fallback results are never kept.

Example
-------
>>> reviewer = AiReviewAdapter(ChatClient(), cache=ComplianceCache())
>>> opinion = await reviewer.compliance_opinion(text, "EU")
>>> opinion.overall_compliant
False
"""
from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import TypeVar

from aumos_compliance.ai import prompts
from aumos_compliance.ai.client import ChatBackend
from aumos_compliance.ai.parsing import fallback_result, parse_response
from aumos_compliance.ai.results import (
    AnalysisResult,
    ComplianceOpinion,
    ContractAnalysisResult,
    LegalResearchResult,
    RiskAssessmentResult,
)
from aumos_compliance.audit.sink import (
    AI_ANALYSIS_COMPLETED,
    AI_ANALYSIS_DEGRADED,
    AuditSink,
    LoggingAuditSink,
)
from aumos_compliance.cache.compliance_cache import CacheKey, ComplianceCache
from aumos_compliance.cache.fingerprint import fingerprint
from aumos_compliance.errors import AnalysisError, AnalysisFailure, CacheComputeError
from aumos_compliance.rules.store import RuleStore

logger = logging.getLogger(__name__)

CONTRACT_ANALYSIS = "contract_analysis"
TOPIC_RESEARCH = "topic_research"
RISK_ASSESSMENT = "risk_assessment"
COMPLIANCE_OPINION = "compliance_opinion"

ResultT = TypeVar("ResultT", bound=AnalysisResult)


class AiReviewAdapter:
    """Runs AI review operations against a :class:`ChatBackend`.

    Parameters
    ----------
    backend:
        The chat backend, usually a :class:`~aumos_compliance.ai.client.ChatClient`.
    cache:
        Optional compliance cache for memoising results.
    store:
        Optional rule store; its active rules are added to the
        compliance-opinion prompt.
    audit:
        Sink for ``ai_analysis_completed`` / ``ai_analysis_degraded``.
    timeout_seconds:
        Upper bound on each backend call.
    strict_parsing:
        Raise :class:`AnalysisError` (``MALFORMED``) instead of returning a
        fallback result when a response cannot be parsed.
    """

    def __init__(
        self,
        backend: ChatBackend,
        cache: ComplianceCache | None = None,
        store: RuleStore | None = None,
        audit: AuditSink | None = None,
        timeout_seconds: float = 60.0,
        strict_parsing: bool = False,
    ) -> None:
        self._backend = backend
        self._cache = cache
        self._store = store
        self._audit = audit or LoggingAuditSink()
        self._timeout = timeout_seconds
        self._strict = strict_parsing

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def analyze_contract(self, text: str, jurisdiction: str) -> ContractAnalysisResult:
        """Identify ambiguities, risks, and recommended edits in a contract."""
        logger.info("Starting contract analysis for jurisdiction: %s", jurisdiction)
        result = await self._run(
            CONTRACT_ANALYSIS,
            jurisdiction,
            text,
            prompts.system_prompt_for(jurisdiction),
            lambda: prompts.contract_analysis_prompt(text, jurisdiction),
            ContractAnalysisResult,
            {"jurisdiction": jurisdiction},
        )
        self._audit.emit(
            AI_ANALYSIS_COMPLETED,
            operation=CONTRACT_ANALYSIS,
            jurisdiction=jurisdiction,
            parse_status=result.parse_status.value,
            risks=len(result.risks),
            ambiguities=len(result.ambiguities),
            suggestions=len(result.suggestions),
        )
        return result

    async def research_topic(self, query: str, jurisdiction: str) -> LegalResearchResult:
        """Research a legal question within a jurisdiction."""
        logger.info("Starting legal research in jurisdiction: %s", jurisdiction)
        result = await self._run(
            TOPIC_RESEARCH,
            jurisdiction,
            query,
            prompts.system_prompt_for(jurisdiction),
            lambda: prompts.research_prompt(query, jurisdiction),
            LegalResearchResult,
            {"jurisdiction": jurisdiction, "query": query},
        )
        self._audit.emit(
            AI_ANALYSIS_COMPLETED,
            operation=TOPIC_RESEARCH,
            jurisdiction=jurisdiction,
            parse_status=result.parse_status.value,
            sources=len(result.sources),
        )
        return result

    async def assess_risk(self, text: str) -> RiskAssessmentResult:
        """Score the legal risks of a document from 0 to 10."""
        logger.info("Starting risk assessment")
        result = await self._run(
            RISK_ASSESSMENT,
            None,
            text,
            prompts.RISK_SYSTEM_PROMPT,
            lambda: prompts.risk_assessment_prompt(text),
            RiskAssessmentResult,
            {},
        )
        self._audit.emit(
            AI_ANALYSIS_COMPLETED,
            operation=RISK_ASSESSMENT,
            parse_status=result.parse_status.value,
            overall_score=result.overall_risk_score,
            critical_issues=len(result.critical_issues),
        )
        return result

    async def compliance_opinion(self, text: str, jurisdiction: str) -> ComplianceOpinion:
        """Ask the model which compliance requirements the document passes or fails."""
        logger.info("Starting AI compliance validation for jurisdiction: %s", jurisdiction)

        def build_prompt() -> str:
            rules = self._store.get(jurisdiction) if self._store is not None else []
            context = prompts.rules_context(jurisdiction, rules)
            return prompts.compliance_opinion_prompt(text, jurisdiction, context)

        result = await self._run(
            COMPLIANCE_OPINION,
            jurisdiction,
            text,
            prompts.system_prompt_for(jurisdiction),
            build_prompt,
            ComplianceOpinion,
            {"jurisdiction": jurisdiction},
        )
        self._audit.emit(
            AI_ANALYSIS_COMPLETED,
            operation=COMPLIANCE_OPINION,
            jurisdiction=jurisdiction,
            parse_status=result.parse_status.value,
            passes=len(result.passes),
            fails=len(result.fails),
        )
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _run(
        self,
        operation: str,
        jurisdiction: str | None,
        text: str,
        system_prompt: str,
        user_prompt: Callable[[], str],
        model: type[ResultT],
        context: dict[str, object],
    ) -> ResultT:
        async def compute() -> ResultT:
            return await self._invoke(operation, system_prompt, user_prompt(), model, context)

        if self._cache is None:
            return await compute()

        key = CacheKey(operation, jurisdiction, fingerprint(text or "", operation))
        try:
            result = await self._cache.aget_or_compute(key, compute)
        except CacheComputeError as exc:
            if isinstance(exc.cause, AnalysisError):
                raise exc.cause
            raise AnalysisError(operation, str(exc.cause), AnalysisFailure.UPSTREAM) from exc.cause

        if result.is_fallback:
            self._cache.discard(key)
        return result

    async def _invoke(
        self,
        operation: str,
        system_prompt: str,
        user_prompt: str,
        model: type[ResultT],
        context: dict[str, object],
    ) -> ResultT:
        started = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                self._backend.complete(system_prompt, user_prompt),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.error("%s timed out after %.1fs", operation, self._timeout)
            raise AnalysisError(
                operation, f"no response within {self._timeout}s", AnalysisFailure.TIMEOUT
            ) from exc
        except AnalysisError as exc:
            logger.error("%s failed: %s", operation, exc)
            raise AnalysisError(operation, str(exc), exc.kind) from exc
        except Exception as exc:
            logger.exception("%s failed in the chat backend", operation)
            raise AnalysisError(operation, str(exc), AnalysisFailure.UPSTREAM) from exc

        try:
            result = parse_response(response, model, **context)
        except ValueError as exc:
            if self._strict:
                raise AnalysisError(
                    operation, f"unparseable response: {exc}", AnalysisFailure.MALFORMED
                ) from exc
            logger.warning("Failed to parse %s response, using fallback: %s", operation, exc)
            self._audit.emit(AI_ANALYSIS_DEGRADED, operation=operation, reason=type(exc).__name__)
            return fallback_result(response, model, **context)

        logger.info("%s completed in %.2fs", operation, time.perf_counter() - started)
        return result
