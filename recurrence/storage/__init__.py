"""Recurrence fingerprint storage layer."""

from recurrence.storage.base import FingerprintStore
from recurrence.storage.fingerprint import fingerprint, fingerprint_message, normalize
from recurrence.storage.memory_store import MemoryFingerprintStore
from recurrence.storage.redis_store import RedisFingerprintStore

__all__ = [
    "FingerprintStore",
    "MemoryFingerprintStore",
    "RedisFingerprintStore",
    "fingerprint",
    "fingerprint_message",
    "normalize",
]
