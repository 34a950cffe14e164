"""Sensitive-data scanner.

Runs every built-in detector against the original text, resolves
overlapping hits, and masks the surviving spans with placeholder tokens
of the form ``[<CATEGORY>_REDACTED]``.  The reported matches are exactly
the spans that were masked.

Example
-------
>>> scanner = SensitiveDataScanner()
>>> matches, masked = scanner.scan("Mail alice@example.com today")
>>> masked
'Mail [EMAIL_REDACTED] today'
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterator

from aumos_compliance.detection.patterns import DEFAULT_DETECTORS, SensitiveCategory
from aumos_compliance.errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_PLACEHOLDER_TEMPLATE = "[{category}_REDACTED]"


def check_placeholder_template(template: str) -> str:
    """Return ``template`` if it formats with ``category`` as its only field.

    Raises
    ------
    ValidationError
        If the template has no ``{category}`` field, references any other
        field, or is not a valid format string.
    """
    try:
        first = template.format(category="A")
        second = template.format(category="B")
    except (KeyError, IndexError, ValueError, AttributeError) as exc:
        raise ValidationError(
            f"placeholder_template {template!r} is not a valid format string: {exc!r}",
            field="placeholder_template",
        ) from exc
    if first == second:
        raise ValidationError(
            "placeholder_template must contain '{category}'.",
            field="placeholder_template",
        )
    return template


@dataclass(frozen=True)
class SensitiveMatch:
    """One detected span of sensitive data.

    Attributes
    ----------
    category:
        The :class:`SensitiveCategory` detected.
    matched_text:
        The exact substring matched in the original text.
    offset:
        Start index within the original text.
    """

    category: SensitiveCategory
    matched_text: str
    offset: int

    @property
    def end(self) -> int:
        return self.offset + len(self.matched_text)

    def to_dict(self) -> dict[str, object]:
        return {
            "category": self.category.value,
            "matched_text": self.matched_text,
            "offset": self.offset,
        }


@dataclass
class ScanReport:
    """Result of one scan.

    Iterating a report yields ``(matches, masked_text)`` so it can be
    unpacked like a pair.
    """

    matches: list[SensitiveMatch]
    masked_text: str
    original_length: int = 0
    scanned_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    @property
    def count(self) -> int:
        return len(self.matches)

    @property
    def categories(self) -> set[SensitiveCategory]:
        return {match.category for match in self.matches}

    @property
    def masked_length(self) -> int:
        return len(self.masked_text)

    def __iter__(self) -> Iterator[object]:
        yield self.matches
        yield self.masked_text

    def to_dict(self) -> dict[str, object]:
        return {
            "matches": [match.to_dict() for match in self.matches],
            "masked_text": self.masked_text,
            "original_length": self.original_length,
            "masked_length": self.masked_length,
            "categories": sorted(category.value for category in self.categories),
            "scanned_at": self.scanned_at.isoformat(),
        }


class SensitiveDataScanner:
    """Detects and masks sensitive data.

    Parameters
    ----------
    detectors:
        ``(category, compiled_pattern)`` pairs in priority order.  The
        built-in detectors are used when omitted.
    placeholder_template:
        Format string for the replacement token; ``{category}`` is
        replaced by the category name.

    Raises
    ------
    ValidationError
        If ``placeholder_template`` is not a format string whose only
        field is ``{category}``.
    """

    def __init__(
        self,
        detectors: list[tuple[SensitiveCategory, re.Pattern[str]]] | None = None,
        placeholder_template: str = DEFAULT_PLACEHOLDER_TEMPLATE,
    ) -> None:
        self._detectors = list(detectors) if detectors is not None else list(DEFAULT_DETECTORS)
        self._template = check_placeholder_template(placeholder_template)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def scan(self, text: str | None) -> ScanReport:
        """Detect sensitive data in ``text`` and return matches plus masked text.

        ``None`` and the empty string yield no matches and an empty masked
        text.
        """
        if not text:
            return ScanReport(matches=[], masked_text="", original_length=0)

        resolved = self._resolve_overlaps(self._find_all(text))

        parts: list[str] = []
        cursor = 0
        for match in resolved:
            if match.offset > cursor:
                parts.append(text[cursor : match.offset])
            parts.append(self.placeholder_for(match.category))
            cursor = match.end
        if cursor < len(text):
            parts.append(text[cursor:])

        report = ScanReport(
            matches=resolved,
            masked_text="".join(parts),
            original_length=len(text),
        )
        if resolved:
            logger.debug(
                "Masked %d sensitive items (%s)",
                report.count,
                ", ".join(sorted(c.value for c in report.categories)),
            )
        return report

    def mask(self, text: str | None) -> str:
        """Return only the masked text."""
        return self.scan(text).masked_text

    def contains_sensitive_data(self, text: str | None) -> bool:
        """Return ``True`` as soon as any detector matches."""
        if not text:
            return False
        return any(pattern.search(text) for _, pattern in self._detectors)

    def placeholder_for(self, category: SensitiveCategory) -> str:
        return self._template.format(category=category.value)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _find_all(self, text: str) -> list[tuple[int, SensitiveMatch]]:
        found: list[tuple[int, SensitiveMatch]] = []
        for priority, (category, pattern) in enumerate(self._detectors):
            for m in pattern.finditer(text):
                if m.start() == m.end():
                    continue
                found.append(
                    (priority, SensitiveMatch(category=category, matched_text=m.group(), offset=m.start()))
                )
        return found

    @staticmethod
    def _resolve_overlaps(found: list[tuple[int, SensitiveMatch]]) -> list[SensitiveMatch]:
        """Keep the earlier match, then the longer, then the higher-priority detector."""
        ordered = sorted(
            found,
            key=lambda item: (item[1].offset, -len(item[1].matched_text), item[0]),
        )
        resolved: list[SensitiveMatch] = []
        last_end = -1
        for _, match in ordered:
            if match.offset >= last_end:
                resolved.append(match)
                last_end = match.end
        return resolved
