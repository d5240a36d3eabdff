"""Exception text normalization and fingerprinting."""

from __future__ import annotations

import hashlib


def normalize(text: str) -> str:
    """Lower-case and trim ``text``.

    Exact-match policy: inner whitespace is left untouched, so two messages
    are the same exception only if they differ in case or surrounding
    whitespace.
    """
    return text.lower().strip()


def fingerprint(normalized_text: str) -> str:
    """SHA-256 hex digest of already-normalized text."""
    return hashlib.sha256(normalized_text.encode("utf-8")).hexdigest()


def fingerprint_message(message: str) -> str:
    """Fingerprint of a raw message: ``fingerprint(normalize(message))``."""
    return fingerprint(normalize(message))


__all__ = ["fingerprint", "fingerprint_message", "normalize"]
