"""Append-only JSONL audit sink.

Every emitted event becomes one newline-delimited JSON record carrying a
UTC ISO-8601 timestamp, the session identifier, the event name, and the
event fields.  Writes and reads share a threading.Lock so one logger can
be used from many threads.

Example
-------
>>> from pathlib import Path
>>> audit = AuditLogger(Path("/tmp/compliance_audit.jsonl"))
>>> audit.emit("compliance_check_completed", jurisdiction="EU", violations=1)
>>> audit.query({"event": "compliance_check_completed"})[0]["violations"]
1
"""
from __future__ import annotations

import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)


class AuditLogger:
    """JSONL-backed :class:`~aumos_compliance.audit.sink.AuditSink`.

    Parameters
    ----------
    log_path:
        Path to the ``.jsonl`` file.  Parent directories are created on
        first write.
    session_id:
        Identifier stamped on every record.  A random UUID by default.
    """

    def __init__(self, log_path: Path, session_id: str | None = None) -> None:
        self._log_path = Path(log_path)
        self._session_id: str = session_id or str(uuid.uuid4())
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Write API
    # ------------------------------------------------------------------

    def emit(self, event: str, **fields: object) -> None:
        """Append one audit event.

        ``timestamp``, ``session_id``, and ``event`` are set by the logger
        and take precedence over caller-supplied fields of the same name.
        """
        record: dict[str, object] = {
            **fields,
            "timestamp": datetime.now(tz=timezone.utc).isoformat(),
            "session_id": self._session_id,
            "event": event,
        }
        self._write(record)

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    def read_all(self) -> list[dict[str, object]]:
        """Return every record in file order; empty when the file is missing."""
        return list(self._iter_records())

    def query(self, filters: dict[str, object]) -> list[dict[str, object]]:
        """Return records whose top-level fields equal every filter value."""
        return [
            record
            for record in self._iter_records()
            if all(record.get(k) == v for k, v in filters.items())
        ]

    def count(self) -> int:
        """Return the total number of records."""
        return sum(1 for _ in self._iter_records())

    def last_n(self, n: int) -> list[dict[str, object]]:
        """Return the ``n`` most recent records."""
        records = list(self._iter_records())
        return records[-n:] if n < len(records) else records

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _write(self, record: dict[str, object]) -> None:
        with self._lock:
            self._log_path.parent.mkdir(parents=True, exist_ok=True)
            with self._log_path.open("a", encoding="utf-8") as fh:
                fh.write(json.dumps(record, default=str) + "\n")

    def _iter_records(self) -> Iterator[dict[str, object]]:
        if not self._log_path.exists():
            return
        with self._lock:
            with self._log_path.open("r", encoding="utf-8") as fh:
                lines = fh.readlines()
        for number, line in enumerate(lines, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError:
                logger.warning("Skipping malformed audit record at %s:%d", self._log_path, number)

    @property
    def log_path(self) -> Path:
        """The filesystem path of the audit file."""
        return self._log_path

    @property
    def session_id(self) -> str:
        """The session identifier stamped on every record."""
        return self._session_id
