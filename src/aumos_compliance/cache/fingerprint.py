"""Content fingerprints used as cache keys."""
from __future__ import annotations

import hashlib


def fingerprint(text: str | None, *parts: str) -> str:
    """Return a stable SHA-256 hex digest of ``text`` and any extra parts.

    Parts are length-prefixed so ``("ab", "c")`` and ``("a", "bc")``
    never collide.

    Example
    -------
    >>> fingerprint("Contact: a@b.com") == fingerprint("Contact: a@b.com")
    True
    """
    digest = hashlib.sha256()
    for chunk in (text or "", *parts):
        encoded = chunk.encode("utf-8", errors="surrogatepass")
        digest.update(str(len(encoded)).encode("ascii"))
        digest.update(b":")
        digest.update(encoded)
    return digest.hexdigest()
