"""Result models for the AI review operations.

The models validate the JSON the chat model returns.  Field aliases follow
the camelCase keys requested in the prompts (``overallRiskLevel``,
``concernAreas``, ...); snake_case names are accepted too.  Missing fields
take the defaults below, so a partial answer still parses.

Every result carries a :class:`ParseStatus`.  ``FALLBACK`` marks a result
built from an unparseable response: its ``summary`` holds the raw text and
every structured field is empty.  Callers must not read a fallback's empty
lists as "no findings".
"""
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

_MODEL_CONFIG = {"alias_generator": to_camel, "populate_by_name": True, "extra": "ignore"}


class ParseStatus(str, Enum):
    """Whether an AI result was parsed or synthesised from raw text."""

    PARSED = "PARSED"
    FALLBACK = "FALLBACK"


def _normalise_severity(value: object) -> object:
    if value is None or (isinstance(value, str) and not value.strip()):
        return "MEDIUM"
    if isinstance(value, str):
        return value.strip().upper()
    return value


def _clamp_score(value: object) -> object:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return max(0, min(10, int(value)))
    return value


class AnalysisResult(BaseModel):
    """Fields shared by every AI result."""

    model_config = _MODEL_CONFIG

    parse_status: ParseStatus = Field(default=ParseStatus.PARSED)
    raw_response: str | None = Field(default=None)

    @property
    def is_fallback(self) -> bool:
        return self.parse_status is ParseStatus.FALLBACK


# ---------------------------------------------------------------------------
# Contract analysis
# ---------------------------------------------------------------------------


class RiskItem(BaseModel):
    model_config = _MODEL_CONFIG

    description: str = Field(default="")
    severity: str = Field(default="MEDIUM")

    @field_validator("severity", mode="before")
    @classmethod
    def normalise_severity(cls, value: object) -> object:
        return _normalise_severity(value)


class ContractAnalysisResult(AnalysisResult):
    """Ambiguities, risks, and suggested edits for one contract."""

    jurisdiction: str = Field(default="")
    summary: str = Field(default="")
    ambiguities: list[str] = Field(default_factory=list)
    risks: list[RiskItem] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    overall_risk_level: str = Field(default="MEDIUM")

    @field_validator("overall_risk_level", mode="before")
    @classmethod
    def normalise_risk_level(cls, value: object) -> object:
        return _normalise_severity(value)


# ---------------------------------------------------------------------------
# Legal research
# ---------------------------------------------------------------------------


class LegalCase(BaseModel):
    model_config = _MODEL_CONFIG

    name: str = Field(default="")
    citation: str = Field(default="")
    relevance: str = Field(default="")


class LegalResearchResult(AnalysisResult):
    """Statutes, cases, and principles relevant to a research query."""

    query: str = Field(default="")
    jurisdiction: str = Field(default="")
    summary: str = Field(default="")
    statutes: list[str] = Field(default_factory=list)
    cases: list[LegalCase] = Field(default_factory=list)
    principles: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Risk assessment
# ---------------------------------------------------------------------------


class RiskCategory(BaseModel):
    model_config = _MODEL_CONFIG

    category: str = Field(default="")
    score: int = Field(default=0, ge=0, le=10)
    details: str = Field(default="")

    @field_validator("score", mode="before")
    @classmethod
    def clamp_score(cls, value: object) -> object:
        return _clamp_score(value)


class RiskAssessmentResult(AnalysisResult):
    """Scored legal risk categories (0-10, 10 highest) for one document."""

    overall_risk_score: int = Field(default=5, ge=0, le=10)
    risk_categories: list[RiskCategory] = Field(default_factory=list)
    critical_issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    summary: str = Field(default="")

    @field_validator("overall_risk_score", mode="before")
    @classmethod
    def clamp_overall_score(cls, value: object) -> object:
        return _clamp_score(value)


# ---------------------------------------------------------------------------
# Compliance opinion
# ---------------------------------------------------------------------------


class CompliancePass(BaseModel):
    model_config = _MODEL_CONFIG

    requirement: str = Field(default="")
    details: str = Field(default="")


class ComplianceFail(BaseModel):
    """One failed requirement.

    ``source`` is ``"ai"`` for failures reported by the model and
    ``"rule"`` for failures derived from rule violations.
    """

    model_config = _MODEL_CONFIG

    requirement: str = Field(default="")
    severity: str = Field(default="MEDIUM")
    details: str = Field(default="")
    recommendation: str = Field(default="")
    source: str = Field(default="ai")

    @field_validator("severity", mode="before")
    @classmethod
    def normalise_severity(cls, value: object) -> object:
        return _normalise_severity(value)


class ComplianceOpinion(AnalysisResult):
    """The model's pass/fail opinion of a document under one jurisdiction."""

    jurisdiction: str = Field(default="")
    overall_compliant: bool = Field(default=False)
    passes: list[CompliancePass] = Field(default_factory=list)
    fails: list[ComplianceFail] = Field(default_factory=list)
    concern_areas: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    summary: str = Field(default="")
