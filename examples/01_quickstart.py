#!/usr/bin/env python3
"""Example: Quickstart — aumos-compliance

Minimal working example: check documents against the bundled rules,
mask sensitive data, and compose a verdict.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install aumos-compliance
"""
from __future__ import annotations

import aumos_compliance as comp


def main() -> None:
    print(f"aumos-compliance version: {comp.__version__}")

    # Step 1: Load the bundled rules
    guard = comp.ComplianceGuard()
    print(f"Rule store ready: {len(guard.pipeline.store)} rules loaded")

    # Step 2: Rule checks per jurisdiction
    documents = [
        ("EU", "Contact the data controller at dpo@example.eu."),
        ("US", "Employee SSN: 123-45-6789."),
        ("US-CA", "The employee agrees to a non-compete period of two years."),
        ("UK", "Nothing sensitive in this paragraph."),
    ]

    print("\nRule checks:")
    for jurisdiction, text in documents:
        violations = guard.check(text, jurisdiction)
        status = "FAIL" if violations else "PASS"
        print(f"  [{status}] {jurisdiction}: {text}")
        for violation in violations:
            print(f"    {violation.rule_name} ({violation.severity.value}) matched '{violation.matched_text}'")

    # Step 3: Mask sensitive data
    report = guard.scan("Mail jane@example.com, card 4111 1111 1111 1111.")
    print(f"\nMasked: {report.masked_text}")

    # Step 4: Verdict (rule checks only, no AI backend configured)
    verdict = guard.validate("Contact: a@b.com", "EU")
    print(f"\nVerdict: compliant={verdict.overall_compliant}, failing={len(verdict.failing_checks)}")
    print(f"  {verdict.summary}")


if __name__ == "__main__":
    main()
