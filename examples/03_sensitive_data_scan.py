#!/usr/bin/env python3
"""Example: Sensitive-data scanning and masking

Demonstrates the built-in detectors, overlap resolution, and a custom
placeholder template.

Usage:
    python examples/03_sensitive_data_scan.py

Requirements:
    pip install aumos-compliance
"""
from __future__ import annotations

from aumos_compliance import SensitiveDataScanner


def main() -> None:
    scanner = SensitiveDataScanner()
    texts = [
        "Please contact John Smith at john.smith@example.com for details.",
        "The patient's SSN is 123-45-6789, MRN: 00123456.",
        "Revenue increased by 18% in Q3 with no personal data involved.",
        "Card number 4111-1111-1111-1111 was declined at checkout.",
    ]

    print("Sensitive-data scan:")
    for text in texts:
        matches, masked = scanner.scan(text)
        if matches:
            categories = [m.category.value for m in matches]
            print(f"  FOUND {categories}")
            print(f"    {masked}")
        else:
            print(f"  CLEAN: '{text[:55]}'")

    # Masking is terminal: scanning masked text finds nothing more
    masked = scanner.mask(texts[1])
    print(f"\nRe-scan of masked text finds {scanner.scan(masked).count} items")

    # Custom placeholders
    custom = SensitiveDataScanner(placeholder_template="<{category}>")
    print(f"Custom placeholder: {custom.mask('Call 415-555-0100 today')}")


if __name__ == "__main__":
    main()
