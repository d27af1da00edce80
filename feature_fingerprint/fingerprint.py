from __future__ import annotations

import hashlib
from typing import Iterable, Protocol


SEPARATOR = ":"


class Fingerprinted(Protocol):
    fingerprint: str


def digest(text: str) -> str:
    """128-bit MD5 hex digest of ``text`` (content addressing, not security)."""
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def fingerprint_of(record: Fingerprinted) -> str:
    return record.fingerprint


def compose_fingerprint(fingerprints: Iterable[str]) -> str:
    """Combine child fingerprints, in order, into one parent fingerprint.

    The hex digests are joined with ``:`` and the joined string is hashed, so
    the result depends on order. An empty input yields ``digest("")``.
    """
    return digest(SEPARATOR.join(fingerprints))
