"""Convenience API for aumos-compliance: 3-line quickstart.

Example
-------
::

    from aumos_compliance import ComplianceGuard
    guard = ComplianceGuard()
    violations = guard.check("Contact: a@b.com", "EU")
    print(violations[0].rule_name)

"""
from __future__ import annotations

from pathlib import Path

from aumos_compliance.ai.client import ChatBackend
from aumos_compliance.config import ComplianceConfig
from aumos_compliance.detection.scanner import ScanReport
from aumos_compliance.pipeline import CompliancePipeline
from aumos_compliance.rules.models import Violation
from aumos_compliance.verdict.composer import ComplianceVerdict


class ComplianceGuard:
    """Zero-config compliance checks for the common case.

    Wraps :class:`CompliancePipeline` with the bundled default rules.  AI
    review is off unless a backend is supplied.

    Parameters
    ----------
    rules_path:
        Optional rule file to load instead of the bundled rules.
    backend:
        Optional chat backend enabling AI review in :meth:`validate`.

    Example
    -------
    ::

        guard = ComplianceGuard()
        masked = guard.scan("Card 4111 1111 1111 1111").masked_text
        print(masked)  # Card [PAYMENT_CARD_REDACTED]
    """

    def __init__(
        self,
        rules_path: str | Path | None = None,
        backend: ChatBackend | None = None,
    ) -> None:
        config = ComplianceConfig()
        if rules_path is not None:
            config.rules.path = Path(rules_path)
        self._pipeline = CompliancePipeline.from_config(config, backend=backend)

    def check(self, text: str, jurisdiction: str) -> list[Violation]:
        """Return the rule violations of ``text`` under ``jurisdiction``."""
        return self._pipeline.check(text, jurisdiction)

    def scan(self, text: str) -> ScanReport:
        """Detect and mask sensitive data."""
        return self._pipeline.scan(text)

    def validate(self, text: str, jurisdiction: str) -> ComplianceVerdict:
        """Compose a full verdict; blocks until the AI review, if any, finishes."""
        return self._pipeline.validate_sync(text, jurisdiction)

    @property
    def pipeline(self) -> CompliancePipeline:
        """The underlying CompliancePipeline instance."""
        return self._pipeline

    def __repr__(self) -> str:
        return f"ComplianceGuard(rules={len(self._pipeline.store)})"
