"""Detection: rule pattern matching and sensitive-data scanning."""
from __future__ import annotations

from aumos_compliance.detection.matcher import PatternMatcher, compile_rule_pattern
from aumos_compliance.detection.patterns import DEFAULT_DETECTORS, SensitiveCategory
from aumos_compliance.detection.scanner import (
    DEFAULT_PLACEHOLDER_TEMPLATE,
    ScanReport,
    SensitiveDataScanner,
    SensitiveMatch,
)

__all__ = [
    "DEFAULT_DETECTORS",
    "DEFAULT_PLACEHOLDER_TEMPLATE",
    "PatternMatcher",
    "ScanReport",
    "SensitiveCategory",
    "SensitiveDataScanner",
    "SensitiveMatch",
    "compile_rule_pattern",
]
