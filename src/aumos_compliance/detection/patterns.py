"""Built-in sensitive-data detectors.

Detectors are independent of jurisdiction.  Each entry is a tuple of
``(category, compiled_pattern)``; the position of an entry in
:data:`DEFAULT_DETECTORS` is its tie-break priority when two detectors
match the same span.

Digit runs are delimited by digit lookarounds instead of word boundaries,
so whether a run matches never depends on a neighbouring letter.
Splicing a placeholder next to an unmatched run cannot turn it into a
match on a second scan.
"""
from __future__ import annotations

import re
from enum import Enum


class SensitiveCategory(str, Enum):
    """Kinds of sensitive data the scanner recognises."""

    EMAIL = "EMAIL"
    NATIONAL_ID = "NATIONAL_ID"
    PHONE = "PHONE"
    PAYMENT_CARD = "PAYMENT_CARD"
    MEDICAL_RECORD = "MEDICAL_RECORD"
    PATIENT_ID = "PATIENT_ID"


# ---------------------------------------------------------------------------
# Email addresses
# ---------------------------------------------------------------------------
EMAIL = (
    SensitiveCategory.EMAIL,
    re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"),
)

# ---------------------------------------------------------------------------
# National identifiers (US Social Security Number form)
# ---------------------------------------------------------------------------
NATIONAL_ID = (
    SensitiveCategory.NATIONAL_ID,
    re.compile(r"(?<!\d)\d{3}-\d{2}-\d{4}(?!\d)"),
)

# ---------------------------------------------------------------------------
# Phone numbers, ten digits with optional '-' or '.' grouping
# ---------------------------------------------------------------------------
PHONE = (
    SensitiveCategory.PHONE,
    re.compile(r"(?<!\d)\d{3}[-.]?\d{3}[-.]?\d{4}(?!\d)"),
)

# ---------------------------------------------------------------------------
# Payment cards, sixteen digits with optional space or hyphen grouping
# ---------------------------------------------------------------------------
PAYMENT_CARD = (
    SensitiveCategory.PAYMENT_CARD,
    re.compile(r"(?<!\d)\d{4}[- ]?\d{4}[- ]?\d{4}[- ]?\d{4}(?!\d)"),
)

# ---------------------------------------------------------------------------
# Healthcare identifiers
# ---------------------------------------------------------------------------
MEDICAL_RECORD = (
    SensitiveCategory.MEDICAL_RECORD,
    re.compile(r"(?<![a-z])MRN[:\s]*\d{6,10}(?!\d)", re.IGNORECASE),
)

PATIENT_ID = (
    SensitiveCategory.PATIENT_ID,
    re.compile(r"(?<![a-z])PATIENT[\s_-]?ID[:\s]*\d{6,10}(?!\d)", re.IGNORECASE),
)

DEFAULT_DETECTORS: list[tuple[SensitiveCategory, re.Pattern[str]]] = [
    EMAIL,
    NATIONAL_ID,
    PHONE,
    PAYMENT_CARD,
    MEDICAL_RECORD,
    PATIENT_ID,
]
