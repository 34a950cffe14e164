"""Rule pattern matcher.

Applies each active rule's regular expression to a document and reports
every non-empty, non-overlapping match as a :class:`Violation`.  Rules are
independent: a pattern that fails to compile is logged and skipped, and
the remaining rules still run.

Output order is rule order, then match offset, so two runs over the same
text and rule snapshot produce equal lists.

Example
-------
>>> matcher = PatternMatcher()
>>> rule = Rule(jurisdiction="EU", name="GDPR_EMAIL", pattern=r"\\S+@\\S+\\.com")
>>> [v.matched_text for v in matcher.match("Contact: a@b.com", [rule])]
['a@b.com']
"""
from __future__ import annotations

import functools
import logging
import re
import time
from collections.abc import Callable, Iterable

from aumos_compliance.rules.models import Rule, Violation

logger = logging.getLogger(__name__)


@functools.lru_cache(maxsize=1024)
def compile_rule_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a rule pattern case-insensitively, memoised per pattern string.

    Raises
    ------
    re.error
        If the pattern is not a valid regular expression.
    """
    return re.compile(pattern, re.IGNORECASE)


class PatternMatcher:
    """Matches documents against compliance rules.

    Parameters
    ----------
    slow_rule_threshold_seconds:
        A rule whose scan of one document takes longer than this is
        logged at WARNING.  ``re`` cannot be interrupted, so this is the
        only guard against pathological patterns.
    clock:
        Timer used to measure per-rule scan time.
    """

    def __init__(
        self,
        slow_rule_threshold_seconds: float = 0.5,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._slow_threshold = slow_rule_threshold_seconds
        self._clock = clock

    def match(self, text: str | None, rules: Iterable[Rule]) -> list[Violation]:
        """Return every violation of ``rules`` found in ``text``.

        Parameters
        ----------
        text:
            Document text.  ``None`` or empty yields no violations.
        rules:
            Rules to apply.  Inactive rules and rules with an empty
            pattern are ignored.

        Returns
        -------
        list[Violation]
            Violations ordered by rule, then by offset.
        """
        if not text:
            return []

        violations: list[Violation] = []
        for rule in rules:
            if not rule.active or not rule.pattern:
                continue
            try:
                compiled = compile_rule_pattern(rule.pattern)
            except re.error as exc:
                logger.error(
                    "Skipping rule %s (%s): invalid pattern %r: %s",
                    rule.name,
                    rule.jurisdiction,
                    rule.pattern,
                    exc,
                )
                continue

            started = self._clock()
            for found in compiled.finditer(text):
                if found.start() == found.end():
                    continue
                violations.append(
                    Violation(
                        rule_name=rule.name,
                        jurisdiction=rule.jurisdiction,
                        description=rule.description,
                        severity=rule.severity,
                        matched_text=found.group(),
                        offset=found.start(),
                    )
                )
            elapsed = self._clock() - started
            if elapsed > self._slow_threshold:
                logger.warning(
                    "Rule %s (%s) took %.3fs to scan %d characters",
                    rule.name,
                    rule.jurisdiction,
                    elapsed,
                    len(text),
                )

        logger.debug("Matched %d violations in %d characters", len(violations), len(text))
        return violations
