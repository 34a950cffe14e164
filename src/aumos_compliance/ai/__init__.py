"""AI review layer: chat transport, prompts, response parsing, and result models."""
from __future__ import annotations

from aumos_compliance.ai.client import ChatBackend, ChatClient
from aumos_compliance.ai.parsing import extract_json, fallback_result, parse_response
from aumos_compliance.ai.results import (
    AnalysisResult,
    ComplianceFail,
    ComplianceOpinion,
    CompliancePass,
    ContractAnalysisResult,
    LegalCase,
    LegalResearchResult,
    ParseStatus,
    RiskAssessmentResult,
    RiskCategory,
    RiskItem,
)
from aumos_compliance.ai.reviewer import (
    COMPLIANCE_OPINION,
    CONTRACT_ANALYSIS,
    RISK_ASSESSMENT,
    TOPIC_RESEARCH,
    AiReviewAdapter,
)

__all__ = [
    "COMPLIANCE_OPINION",
    "CONTRACT_ANALYSIS",
    "RISK_ASSESSMENT",
    "TOPIC_RESEARCH",
    "AiReviewAdapter",
    "AnalysisResult",
    "ChatBackend",
    "ChatClient",
    "ComplianceFail",
    "ComplianceOpinion",
    "CompliancePass",
    "ContractAnalysisResult",
    "LegalCase",
    "LegalResearchResult",
    "ParseStatus",
    "RiskAssessmentResult",
    "RiskCategory",
    "RiskItem",
    "extract_json",
    "fallback_result",
    "parse_response",
]
