#!/usr/bin/env python3
"""Example: Rule administration

Demonstrates loading rules from a mapping, toggling and saving rules at
runtime, and seeing every change reflected in the next check.

Usage:
    python examples/02_rule_administration.py

Requirements:
    pip install aumos-compliance
"""
from __future__ import annotations

from aumos_compliance import ComplianceCache, CompliancePipeline, Rule, RuleStore, Severity


def main() -> None:
    store = RuleStore()
    pipeline = CompliancePipeline(store, ComplianceCache())

    # Step 1: Load rules from an in-memory document
    report = pipeline.loader.load_from(
        {
            "metadata": {"version": "2026.10"},
            "rules": [
                {
                    "jurisdiction": "EU",
                    "ruleName": "GDPR_EMAIL",
                    "description": "Email address",
                    "regexPattern": r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}",
                    "severity": "HIGH",
                },
                {"jurisdiction": "EU", "ruleName": "BROKEN", "regexPattern": "(unclosed"},
            ],
        }
    )
    print(f"Loaded {report.applied} rules, skipped {report.skipped}")
    for warning in report.warnings:
        print(f"  warning: {warning}")

    text = "Contact: a@b.com, phone 415-555-0100"
    print(f"\nCheck 1: {[v.rule_name for v in pipeline.check(text, 'EU')]}")

    # Step 2: Deactivate a rule; the cached result for EU is dropped
    pipeline.admin.toggle("EU", "GDPR_EMAIL", active=False)
    print(f"Check 2 (GDPR_EMAIL off): {[v.rule_name for v in pipeline.check(text, 'EU')]}")

    # Step 3: Save a new rule
    pipeline.admin.save(
        Rule(
            jurisdiction="EU",
            name="PHONE_NUMBER",
            description="Phone numbers are personal data",
            pattern=r"\b\d{3}-\d{3}-\d{4}\b",
            severity=Severity.MEDIUM,
        )
    )
    print(f"Check 3 (PHONE_NUMBER added): {[v.rule_name for v in pipeline.check(text, 'EU')]}")

    # Step 4: Statistics
    stats = pipeline.admin.statistics()
    print(f"\nRules: total={stats.total} active={stats.active} inactive={stats.inactive}")
    print(f"Cache: {pipeline.cache.stats()}")


if __name__ == "__main__":
    main()
