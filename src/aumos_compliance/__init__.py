"""aumos-compliance: rule-based and AI-assisted compliance validation for documents.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import aumos_compliance as comp
>>> comp.__version__
'0.1.0'
>>> guard = comp.ComplianceGuard()
>>> [v.rule_name for v in guard.check("Contact: a@b.com", "EU")]
['GDPR_EMAIL']
"""
from __future__ import annotations

__version__: str = "0.1.0"

from aumos_compliance.convenience import ComplianceGuard
from aumos_compliance.pipeline import CompliancePipeline
from aumos_compliance.config import ComplianceConfig, ConfigLoader

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
from aumos_compliance.errors import (
    AnalysisError,
    AnalysisFailure,
    CacheComputeError,
    ComplianceError,
    ValidationError,
)

# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------
from aumos_compliance.rules.admin import RuleAdministration
from aumos_compliance.rules.loader import LoadReport, RuleLoader
from aumos_compliance.rules.models import Rule, RuleStatistics, Severity, Violation
from aumos_compliance.rules.store import RuleStore

# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------
from aumos_compliance.detection.matcher import PatternMatcher
from aumos_compliance.detection.patterns import SensitiveCategory
from aumos_compliance.detection.scanner import ScanReport, SensitiveDataScanner, SensitiveMatch

# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------
from aumos_compliance.cache.compliance_cache import CacheKey, CacheStats, ComplianceCache
from aumos_compliance.cache.fingerprint import fingerprint

# ---------------------------------------------------------------------------
# AI review
# ---------------------------------------------------------------------------
from aumos_compliance.ai.client import ChatBackend, ChatClient
from aumos_compliance.ai.results import (
    ComplianceOpinion,
    ContractAnalysisResult,
    LegalResearchResult,
    ParseStatus,
    RiskAssessmentResult,
)
from aumos_compliance.ai.reviewer import AiReviewAdapter

# ---------------------------------------------------------------------------
# Verdicts and audit
# ---------------------------------------------------------------------------
from aumos_compliance.verdict.composer import ComplianceVerdict, ResultComposer
from aumos_compliance.audit.logger import AuditLogger
from aumos_compliance.audit.sink import AuditSink, LoggingAuditSink

__all__ = [
    "__version__",
    "ComplianceGuard",
    "CompliancePipeline",
    "ComplianceConfig",
    "ConfigLoader",
    # Errors
    "AnalysisError",
    "AnalysisFailure",
    "CacheComputeError",
    "ComplianceError",
    "ValidationError",
    # Rules
    "LoadReport",
    "Rule",
    "RuleAdministration",
    "RuleLoader",
    "RuleStatistics",
    "RuleStore",
    "Severity",
    "Violation",
    # Detection
    "PatternMatcher",
    "ScanReport",
    "SensitiveCategory",
    "SensitiveDataScanner",
    "SensitiveMatch",
    # Cache
    "CacheKey",
    "CacheStats",
    "ComplianceCache",
    "fingerprint",
    # AI review
    "AiReviewAdapter",
    "ChatBackend",
    "ChatClient",
    "ComplianceOpinion",
    "ContractAnalysisResult",
    "LegalResearchResult",
    "ParseStatus",
    "RiskAssessmentResult",
    # Verdicts and audit
    "AuditLogger",
    "AuditSink",
    "ComplianceVerdict",
    "LoggingAuditSink",
    "ResultComposer",
]
