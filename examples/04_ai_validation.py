#!/usr/bin/env python3
"""Example: AI-assisted validation

Runs the full pipeline with a chat backend.  A canned backend is used
unless OPENAI_API_KEY is set, in which case requests go to the
OpenAI-compatible endpoint configured by OPENAI_ENDPOINT.

Usage:
    python examples/04_ai_validation.py

Requirements:
    pip install aumos-compliance
"""
from __future__ import annotations

import asyncio
import json
import os

from aumos_compliance import ChatClient, CompliancePipeline, ComplianceConfig


class CannedBackend:
    """Answers every prompt with a fixed compliance opinion."""

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        await asyncio.sleep(0.05)
        return "```json\n" + json.dumps(
            {
                "overallCompliant": True,
                "passes": [{"requirement": "Lawful basis", "details": "Consent is recorded"}],
                "fails": [],
                "concernAreas": ["Retention period"],
                "recommendations": ["State how long contact data is kept"],
                "summary": "No material issues found.",
            }
        ) + "\n```"


async def main() -> None:
    backend = ChatClient() if os.getenv("OPENAI_API_KEY") else CannedBackend()
    pipeline = CompliancePipeline.from_config(ComplianceConfig(), backend=backend)

    document = (
        "The customer consents to processing of their data. "
        "Questions may be sent to privacy@example.eu."
    )
    verdict = await pipeline.validate(document, "EU")

    print(f"Compliant: {verdict.overall_compliant}")
    print(f"AI review completed: {verdict.ai_review_completed} ({verdict.ai_parse_status})")
    print(f"Summary: {verdict.summary}")
    for check in verdict.failing_checks:
        print(f"  FAIL [{check.source}] {check.requirement} ({check.severity}): {check.details}")
    for area in verdict.concern_areas:
        print(f"  Concern: {area}")

    risk = await pipeline.assess_risk(document)
    print(f"\nRisk score: {risk.overall_risk_score}")
    for category in risk.risk_categories:
        print(f"  {category.category}: {category.score} {category.details}")


if __name__ == "__main__":
    asyncio.run(main())
