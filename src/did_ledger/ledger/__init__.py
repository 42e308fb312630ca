"""did_ledger.ledger — DID document persistence keyed by DID string."""
from __future__ import annotations

from did_ledger.ledger.registry import IdentityLedger
from did_ledger.ledger.store import FileStore, InMemoryStore, KeyValueStore

__all__ = [
    "FileStore",
    "IdentityLedger",
    "InMemoryStore",
    "KeyValueStore",
]
