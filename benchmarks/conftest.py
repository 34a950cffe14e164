"""Shared bootstrap for aumos-compliance benchmarks."""
from __future__ import annotations

import sys
from pathlib import Path

_REPO_ROOT = Path(__file__).parent.parent
_SRC = _REPO_ROOT / "src"
_BENCHMARKS = _REPO_ROOT / "benchmarks"

for _path in [str(_SRC), str(_BENCHMARKS)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

from aumos_compliance.cache.compliance_cache import ComplianceCache
from aumos_compliance.detection.matcher import PatternMatcher
from aumos_compliance.detection.scanner import SensitiveDataScanner
from aumos_compliance.pipeline import CompliancePipeline
from aumos_compliance.rules.loader import RuleLoader
from aumos_compliance.rules.store import RuleStore

__all__ = [
    "ComplianceCache",
    "CompliancePipeline",
    "PatternMatcher",
    "RuleLoader",
    "RuleStore",
    "SensitiveDataScanner",
]
