"""Rule and violation records.

A :class:`Rule` is one jurisdiction-scoped regulatory check expressed as a
regular expression.  A :class:`Violation` is one firing of a rule against
one document.

Example
-------
>>> rule = Rule(jurisdiction="EU", name="GDPR_EMAIL", pattern=r"\\S+@\\S+")
>>> rule.key
('EU', 'GDPR_EMAIL')
>>> rule.severity
<Severity.MEDIUM: 'MEDIUM'>
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from aumos_compliance.errors import ValidationError


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class Severity(str, Enum):
    """How serious a rule violation is."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @classmethod
    def parse(cls, value: object) -> "Severity":
        """Coerce a raw value into a :class:`Severity`.

        ``None`` and the empty string map to ``MEDIUM``.  Matching is
        case-insensitive.

        Raises
        ------
        ValidationError
            If the value names no known severity.
        """
        if isinstance(value, Severity):
            return value
        if value is None or str(value).strip() == "":
            return cls.MEDIUM
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValidationError(
                f"Unknown severity {value!r}; expected one of "
                f"{[s.value for s in cls]}.",
                field="severity",
            ) from None


@dataclass
class Rule:
    """A named, jurisdiction-scoped pattern check.

    Attributes
    ----------
    jurisdiction:
        Regulatory regime code, e.g. ``"US-CA"`` or ``"EU"``.
    name:
        Rule name, unique within its jurisdiction.
    description:
        Human-readable explanation of what the rule detects.
    pattern:
        Regular expression source.  Compiled case-insensitively.
    severity:
        :class:`Severity` of a violation of this rule.
    active:
        Inactive rules are kept in the store but never matched.
    created_at / updated_at:
        UTC timestamps maintained by the rule store.
    """

    jurisdiction: str
    name: str
    pattern: str = ""
    description: str = ""
    severity: Severity = Severity.MEDIUM
    active: bool = True
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def key(self) -> tuple[str, str]:
        """The ``(jurisdiction, name)`` identity of this rule."""
        return (self.jurisdiction, self.name)

    def validate(self) -> None:
        """Check the key fields and that :attr:`pattern` compiles.

        Raises
        ------
        ValidationError
            On an empty jurisdiction or name, or an invalid pattern.
        """
        if not self.jurisdiction or not self.jurisdiction.strip():
            raise ValidationError("Rule jurisdiction must not be empty.", field="jurisdiction")
        if not self.name or not self.name.strip():
            raise ValidationError("Rule name must not be empty.", field="name")
        try:
            re.compile(self.pattern, re.IGNORECASE)
        except re.error as exc:
            raise ValidationError(
                f"Rule {self.name!r} ({self.jurisdiction}) has an invalid pattern: {exc}",
                field="pattern",
            ) from exc

    def to_dict(self) -> dict[str, object]:
        return {
            "jurisdiction": self.jurisdiction,
            "name": self.name,
            "description": self.description,
            "pattern": self.pattern,
            "severity": self.severity.value,
            "active": self.active,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class Violation:
    """One instance of a rule firing against one document.

    ``detected_at`` does not take part in equality, so two matcher runs
    over the same text and rule snapshot compare equal.
    """

    rule_name: str
    jurisdiction: str
    description: str
    severity: Severity
    matched_text: str
    offset: int
    detected_at: datetime = field(default_factory=_utcnow, compare=False)

    def to_dict(self) -> dict[str, object]:
        return {
            "rule_name": self.rule_name,
            "jurisdiction": self.jurisdiction,
            "description": self.description,
            "severity": self.severity.value,
            "matched_text": self.matched_text,
            "offset": self.offset,
            "detected_at": self.detected_at.isoformat(),
        }


@dataclass
class RuleStatistics:
    """Rule counts for the administrative statistics view."""

    total: int = 0
    active: int = 0
    inactive: int = 0
    by_jurisdiction: dict[str, int] = field(default_factory=dict)
    by_severity: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {
            "total": self.total,
            "active": self.active,
            "inactive": self.inactive,
            "by_jurisdiction": dict(self.by_jurisdiction),
            "by_severity": dict(self.by_severity),
        }
