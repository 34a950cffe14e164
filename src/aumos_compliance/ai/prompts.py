"""Prompt templates for the AI review operations.

System prompts are chosen per jurisdiction; unknown jurisdictions use the
``DEFAULT`` prompt.  User prompts spell out the JSON structure the result
models in :mod:`aumos_compliance.ai.results` expect.
"""
from __future__ import annotations

from collections.abc import Iterable

from aumos_compliance.rules.models import Rule

DEFAULT_JURISDICTION = "DEFAULT"

JURISDICTION_PROMPTS: dict[str, str] = {
    "US": (
        "You are a legal expert specializing in United States law. "
        "Provide analysis based on federal and state laws, citing relevant "
        "statutes and case law where applicable."
    ),
    "US-CA": (
        "You are a legal expert specializing in California state law. "
        "Analyze contracts under California Civil Code and relevant case precedents."
    ),
    "US-NY": (
        "You are a legal expert specializing in New York state law. "
        "Apply New York contract law and UCC provisions."
    ),
    "EU": (
        "You are a legal expert specializing in European Union law. "
        "Analyze compliance with EU directives and regulations, especially GDPR."
    ),
    "UK": (
        "You are a legal expert specializing in United Kingdom law. "
        "Analyze under UK common law and statutory provisions."
    ),
    DEFAULT_JURISDICTION: (
        "You are a legal expert providing general legal analysis. "
        "Identify potential issues and provide recommendations based on "
        "common legal principles."
    ),
}

RISK_SYSTEM_PROMPT = (
    "You are a legal risk assessment expert. "
    "Analyze documents for potential legal risks and provide quantitative scores."
)

_REGULATIONS: dict[str, list[str]] = {
    "EU": [
        "GDPR: Data protection and privacy",
        "Consumer Rights Directive",
        "ePrivacy Directive",
    ],
    "US-CA": [
        "CCPA: California Consumer Privacy Act",
        "California Civil Code requirements",
        "Labor Code provisions",
    ],
    "US": [
        "Federal contract law",
        "UCC (Uniform Commercial Code)",
        "Consumer protection laws",
    ],
}

_DEFAULT_REGULATIONS = [
    "General contract law principles",
    "Consumer protection requirements",
    "Data protection standards",
]


def system_prompt_for(jurisdiction: str | None) -> str:
    """Return the system prompt for ``jurisdiction`` or the default one."""
    return JURISDICTION_PROMPTS.get(jurisdiction or "", JURISDICTION_PROMPTS[DEFAULT_JURISDICTION])


def rules_context(jurisdiction: str, rules: Iterable[Rule] = ()) -> str:
    """List the regulations and active rules that apply to ``jurisdiction``."""
    lines = [f"- {item}" for item in _REGULATIONS.get(jurisdiction, _DEFAULT_REGULATIONS)]
    for rule in rules:
        detail = f": {rule.description}" if rule.description else ""
        lines.append(f"- Rule {rule.name} ({rule.severity.value}){detail}")
    return "\n".join(lines)


def contract_analysis_prompt(text: str, jurisdiction: str) -> str:
    return (
        f"Analyze the following contract under {jurisdiction} law. "
        "Please provide a structured analysis with:\n"
        "1. Key ambiguities that need clarification\n"
        "2. Legal risks and potential liabilities\n"
        "3. Specific edits or additions recommended\n"
        "4. Overall risk summary\n\n"
        "Format your response as JSON with the following structure:\n"
        "{\n"
        '  "summary": "Brief overall assessment",\n'
        '  "ambiguities": ["list of ambiguous clauses"],\n'
        '  "risks": [{"description": "risk description", "severity": "HIGH|MEDIUM|LOW"}],\n'
        '  "suggestions": ["list of recommended edits"],\n'
        '  "overallRiskLevel": "HIGH|MEDIUM|LOW"\n'
        "}\n\n"
        f"Contract text:\n{text}"
    )


def research_prompt(query: str, jurisdiction: str) -> str:
    return (
        f"Conduct comprehensive legal research on the following topic in {jurisdiction}:\n\n"
        f"Research Query: {query}\n\n"
        "Please provide:\n"
        "1. Summary of relevant legal principles\n"
        "2. Key statutes and regulations\n"
        "3. Notable case law and precedents\n"
        "4. Practical implications and recommendations\n"
        "5. Citations and sources\n\n"
        "Format your response as JSON:\n"
        "{\n"
        '  "summary": "Overview of research findings",\n'
        '  "statutes": ["list of relevant statutes"],\n'
        '  "cases": [{"name": "case name", "citation": "citation", "relevance": "why relevant"}],\n'
        '  "principles": ["list of legal principles"],\n'
        '  "recommendations": ["practical recommendations"],\n'
        '  "sources": ["list of additional sources"]\n'
        "}"
    )


def risk_assessment_prompt(text: str) -> str:
    return (
        "Assess the legal risks in the following document. "
        "Provide risk scores (0-10, where 10 is highest risk) for:\n"
        "1. Liability exposure\n"
        "2. Non-compete clause enforceability concerns\n"
        "3. Intellectual property risks\n"
        "4. Confidentiality and data protection risks\n"
        "5. Termination and dispute resolution risks\n"
        "6. Regulatory compliance risks\n"
        "7. Financial liability risks\n"
        "8. Indemnification risks\n\n"
        "Format response as JSON:\n"
        "{\n"
        '  "overallRiskScore": 0-10,\n'
        '  "riskCategories": [\n'
        '    {"category": "category name", "score": 0-10, "details": "explanation"}\n'
        "  ],\n"
        '  "criticalIssues": ["list of critical issues"],\n'
        '  "recommendations": ["list of recommendations"],\n'
        '  "summary": "overall risk assessment summary"\n'
        "}\n\n"
        f"Document:\n{text}"
    )


def compliance_opinion_prompt(text: str, jurisdiction: str, context: str) -> str:
    return (
        f"Validate the following document for compliance with {jurisdiction} regulations.\n\n"
        f"Relevant Rules and Regulations:\n{context}\n\n"
        "Analyze the document and provide:\n"
        "1. List of compliance requirements that PASS\n"
        "2. List of compliance requirements that FAIL\n"
        "3. Areas of concern requiring review\n"
        "4. Recommendations for achieving compliance\n\n"
        "Format response as JSON:\n"
        "{\n"
        '  "overallCompliant": true/false,\n'
        '  "passes": [{"requirement": "requirement name", "details": "why it passes"}],\n'
        '  "fails": [{"requirement": "requirement name", "severity": "HIGH|MEDIUM|LOW", '
        '"details": "why it fails", "recommendation": "how to fix"}],\n'
        '  "concernAreas": ["list of areas needing review"],\n'
        '  "recommendations": ["general recommendations"],\n'
        '  "summary": "overall compliance summary"\n'
        "}\n\n"
        f"Document:\n{text}"
    )
