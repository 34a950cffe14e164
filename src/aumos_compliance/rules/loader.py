"""Rule loader: parses rule definitions into the rule store.

A rule definition is a YAML (or JSON, which YAML accepts) document of the
form::

    metadata:
      version: "2.1"
      lastUpdated: "2024-05-01"
    reset: false
    rules:
      - jurisdiction: EU
        ruleName: GDPR_EMAIL
        description: Email addresses are personal data under GDPR.
        regexPattern: "[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\\\\.[a-zA-Z]{2,}"
        severity: HIGH
        active: true

Records may use ``ruleName``/``regexPattern`` or ``name``/``pattern``.
Each record is parsed on its own; a malformed one is skipped with a
warning and never aborts the rest of the batch.

After a batch the cache is invalidated for every jurisdiction the batch
touched.  ``reset: true`` replaces the whole store with the batch and
invalidates the cache globally; :meth:`RuleLoader.reload` also
invalidates globally.

Example
-------
>>> store = RuleStore()
>>> loader = RuleLoader(store, cache=ComplianceCache())
>>> report = loader.load_string('{"rules": [{"jurisdiction": "EU", "name": "X", "pattern": "x"}]}')
>>> report.applied
1
"""
from __future__ import annotations

import importlib.resources
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from aumos_compliance.audit.sink import RULES_IMPORTED, RULES_LOADED, AuditSink, LoggingAuditSink
from aumos_compliance.cache.compliance_cache import ComplianceCache
from aumos_compliance.errors import ValidationError
from aumos_compliance.rules.models import Rule, Severity
from aumos_compliance.rules.store import RuleStore

logger = logging.getLogger(__name__)

_NAME_KEYS: tuple[str, ...] = ("name", "ruleName", "rule_name")
_PATTERN_KEYS: tuple[str, ...] = ("pattern", "regexPattern", "regex_pattern")
_TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})
_FALSE_STRINGS = frozenset({"false", "no", "off", "0"})

BUNDLED_RULES_SOURCE = "<bundled default rules>"


def bundled_rules_text() -> str:
    """Return the text of the rule file shipped with the package."""
    ref = importlib.resources.files("aumos_compliance.rules").joinpath("data/default_rules.yaml")
    return ref.read_text(encoding="utf-8")


@dataclass
class LoadReport:
    """Outcome of one load or import.

    Attributes
    ----------
    source:
        Label of what was loaded (file path, ``"<string>"``, ...).
    applied:
        Number of rule records written to the store.
    skipped:
        Number of records rejected as malformed.
    warnings:
        One message per rejected record or unusable document.
    jurisdictions:
        Jurisdictions touched by the applied records.
    replaced:
        ``True`` when the batch replaced the whole store (``reset: true``).
    full_reset:
        ``True`` when the cache was invalidated globally.
    version:
        ``metadata.version`` of the document, when present.
    """

    source: str
    applied: int = 0
    skipped: int = 0
    warnings: list[str] = field(default_factory=list)
    jurisdictions: set[str] = field(default_factory=set)
    replaced: bool = False
    full_reset: bool = False
    version: str | None = None


class RuleLoader:
    """Parses rule documents and applies them to a :class:`RuleStore`.

    Parameters
    ----------
    store:
        The rule store to write to.
    cache:
        Optional compliance cache to invalidate after each batch.
    rules_path:
        Rule file used by :meth:`reload`.  The bundled default rule file
        is used when omitted.
    audit:
        Audit sink for ``rules_loaded`` / ``rules_imported`` events.
    """

    def __init__(
        self,
        store: RuleStore,
        cache: ComplianceCache | None = None,
        rules_path: str | Path | None = None,
        audit: AuditSink | None = None,
    ) -> None:
        self._store = store
        self._cache = cache
        self._rules_path = Path(rules_path) if rules_path is not None else None
        self._audit = audit or LoggingAuditSink()

    @property
    def rules_path(self) -> Path | None:
        """The rule file :meth:`reload` reads, or ``None`` for the bundled file."""
        return self._rules_path

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_from(
        self,
        source: str | Path | Mapping[str, object] | Iterable[Mapping[str, object]],
        invalidate_all: bool = False,
    ) -> LoadReport:
        """Load rules from a file path, a parsed document, or raw records.

        Parameters
        ----------
        source:
            Path to a YAML/JSON rule file, an already-parsed document
            mapping, or an iterable of rule records.
        invalidate_all:
            Invalidate the whole cache instead of only the touched
            jurisdictions.

        Returns
        -------
        LoadReport
            ``applied`` is the count of rules successfully written.
        """
        if isinstance(source, (str, Path)):
            return self._load_file(Path(source), invalidate_all)
        if isinstance(source, Mapping):
            return self._apply(source, "<mapping>", invalidate_all, RULES_LOADED)
        return self._apply({"rules": list(source)}, "<records>", invalidate_all, RULES_LOADED)

    def load_string(self, content: str) -> LoadReport:
        """Import rules from a YAML/JSON string.

        Raises
        ------
        ValidationError
            If the content is empty, unparseable, or has no ``rules`` list.
            Individual bad records are skipped, not raised.
        """
        if not content or not content.strip():
            raise ValidationError("Rule import content must not be empty.")
        logger.info("Loading compliance rules from string")
        try:
            document = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            raise ValidationError(f"Rule import is not valid YAML or JSON: {exc}") from exc
        if not isinstance(document, Mapping) or not isinstance(document.get("rules"), list):
            raise ValidationError("Rule import must contain a top-level 'rules' list.")
        return self._apply(document, "<string>", False, RULES_IMPORTED)

    def reload(self) -> LoadReport:
        """Re-read the configured rule file and invalidate the whole cache."""
        if self._rules_path is None:
            logger.info("Reloading bundled compliance rules")
            document = yaml.safe_load(bundled_rules_text()) or {}
            return self._apply(document, BUNDLED_RULES_SOURCE, True, RULES_LOADED)
        logger.info("Reloading compliance rules from %s", self._rules_path)
        return self._load_file(self._rules_path, True)

    # ------------------------------------------------------------------
    # Record parsing
    # ------------------------------------------------------------------

    @staticmethod
    def parse_record(raw: object) -> Rule:
        """Convert one raw record into a validated :class:`Rule`.

        Raises
        ------
        ValidationError
            On a missing required field, unknown severity, non-boolean
            ``active`` flag, or a pattern that does not compile.
        """
        if not isinstance(raw, Mapping):
            raise ValidationError(f"Rule record must be a mapping, got {type(raw).__name__}.")

        jurisdiction = _required(raw, ("jurisdiction",), "jurisdiction")
        name = _required(raw, _NAME_KEYS, "name")
        pattern = _required(raw, _PATTERN_KEYS, "pattern")

        rule = Rule(
            jurisdiction=jurisdiction,
            name=name,
            pattern=pattern,
            description=str(raw.get("description") or ""),
            severity=Severity.parse(raw.get("severity")),
            active=_coerce_bool(raw.get("active", True)),
        )
        rule.validate()
        return rule

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _load_file(self, path: Path, invalidate_all: bool) -> LoadReport:
        logger.info("Loading compliance rules from %s", path)
        if not path.exists():
            logger.warning("Compliance rules file not found: %s", path)
            return LoadReport(source=str(path), warnings=[f"Rules file not found: {path}"])

        try:
            with path.open("r", encoding="utf-8") as fh:
                document = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            logger.error("Compliance rules file %s is not valid YAML or JSON: %s", path, exc)
            return LoadReport(source=str(path), warnings=[f"Unparseable rules file: {exc}"])

        if not isinstance(document, Mapping):
            logger.warning("Compliance rules file %s does not contain a mapping", path)
            return LoadReport(source=str(path), warnings=["Rules file must contain a mapping."])
        return self._apply(document, str(path), invalidate_all, RULES_LOADED)

    def _apply(
        self,
        document: Mapping[str, object],
        source: str,
        invalidate_all: bool,
        event: str,
    ) -> LoadReport:
        report = LoadReport(source=source)

        metadata = document.get("metadata")
        if isinstance(metadata, Mapping):
            report.version = str(metadata.get("version")) if metadata.get("version") is not None else None
            logger.info(
                "Loading rules version: %s, last updated: %s",
                report.version,
                metadata.get("lastUpdated", metadata.get("last_updated")),
            )

        raw_records = document.get("rules")
        if not isinstance(raw_records, list):
            logger.warning("No rules list found in %s", source)
            report.warnings.append("No rules list found.")
            return report

        parsed: list[Rule] = []
        for index, raw in enumerate(raw_records):
            try:
                parsed.append(self.parse_record(raw))
            except ValidationError as exc:
                report.skipped += 1
                message = f"Rule #{index} in {source} skipped: {exc}"
                report.warnings.append(message)
                logger.warning(message)

        report.replaced = bool(document.get("reset", False))
        if report.replaced:
            self._store.replace_all(parsed)
        else:
            for rule in parsed:
                self._store.upsert(rule)
                logger.debug("Applied rule %s for jurisdiction %s", rule.name, rule.jurisdiction)

        report.applied = len(parsed)
        report.jurisdictions = {rule.jurisdiction for rule in parsed}
        report.full_reset = report.replaced or invalidate_all

        for jurisdiction in sorted(report.jurisdictions):
            count = sum(1 for rule in parsed if rule.jurisdiction == jurisdiction)
            logger.info("  - %s: %d rules", jurisdiction, count)

        if self._cache is not None:
            if report.full_reset:
                self._cache.invalidate_all()
            else:
                for jurisdiction in sorted(report.jurisdictions):
                    self._cache.invalidate(jurisdiction)

        logger.info(
            "Loaded %d compliance rules from %s (%d skipped)",
            report.applied,
            source,
            report.skipped,
        )
        self._audit.emit(
            event,
            count=report.applied,
            skipped=report.skipped,
            source=source,
            full_reset=report.full_reset,
        )
        return report


def _required(raw: Mapping[str, object], keys: tuple[str, ...], field_name: str) -> str:
    for key in keys:
        value = raw.get(key)
        if value is not None and str(value).strip():
            return str(value)
    raise ValidationError(f"Missing required field {field_name!r}.", field=field_name)


def _coerce_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ValidationError(f"Field 'active' must be a boolean, got {value!r}.", field="active")
