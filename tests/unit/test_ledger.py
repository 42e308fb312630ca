"""Tests for did_ledger.ledger.registry — IdentityLedger CRUD."""
from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from did_ledger.did.document import DEFAULT_CONTEXT, DIDDocument, VerificationMethod
from did_ledger.errors import (
    IdentityAlreadyExistsError,
    IdentityNotFoundError,
    InvalidIdentifierSyntaxError,
    MalformedJsonError,
    StorageError,
)
from did_ledger.ledger.registry import IdentityLedger
from did_ledger.ledger.store import FileStore, InMemoryStore

DID = "did:example:123456"


class _FailingStore:
    """A store whose every operation fails like an unreachable ledger."""

    def get(self, key: str) -> bytes | None:
        raise StorageError("ledger unavailable")

    def put(self, key: str, value: bytes) -> None:
        raise StorageError("ledger unavailable")

    def delete(self, key: str) -> None:
        raise StorageError("ledger unavailable")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture()
def ledger(store: InMemoryStore) -> IdentityLedger:
    return IdentityLedger(store)


@pytest.fixture()
def populated_ledger(ledger: IdentityLedger) -> IdentityLedger:
    ledger.create(DID)
    return ledger


@pytest.fixture()
def replacement() -> DIDDocument:
    return DIDDocument(
        context=[DEFAULT_CONTEXT],
        id=DID,
        verification_method=(VerificationMethod(id="#key-1", type="JsonWebKey2020"),),
    )


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


class TestCreate:
    def test_returns_minimal_document(self, ledger: IdentityLedger) -> None:
        doc = ledger.create(DID)
        assert doc == DIDDocument.minimal(DID)

    def test_stores_w3c_json(self, ledger: IdentityLedger, store: InMemoryStore) -> None:
        ledger.create(DID)
        stored = store.get(DID)
        assert stored is not None
        assert json.loads(stored) == {"@context": [DEFAULT_CONTEXT], "id": DID}

    def test_duplicate_raises(self, populated_ledger: IdentityLedger) -> None:
        with pytest.raises(IdentityAlreadyExistsError, match="already exists"):
            populated_ledger.create(DID)

    def test_invalid_did_raises_and_stores_nothing(
        self, ledger: IdentityLedger, store: InMemoryStore
    ) -> None:
        with pytest.raises(InvalidIdentifierSyntaxError):
            ledger.create("did:example:123:")
        assert len(store) == 0

    def test_logs_creation(
        self, ledger: IdentityLedger, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="did_ledger.ledger.registry"):
            ledger.create(DID)
        assert DID in caplog.text

    def test_default_store_is_in_memory(self) -> None:
        ledger = IdentityLedger()
        ledger.create(DID)
        assert isinstance(ledger.store, InMemoryStore)
        assert DID in ledger


# ---------------------------------------------------------------------------
# read
# ---------------------------------------------------------------------------


class TestRead:
    def test_returns_stored_document(self, populated_ledger: IdentityLedger) -> None:
        assert populated_ledger.read(DID) == DIDDocument.minimal(DID)

    def test_missing_returns_none(self, ledger: IdentityLedger) -> None:
        assert ledger.read(DID) is None

    def test_normalizes_foreign_payload(
        self, ledger: IdentityLedger, store: InMemoryStore
    ) -> None:
        store.put(
            DID,
            json.dumps(
                {"id": DID, "authentication": ["#key-1", 5], "proof": [{"created": "x"}]}
            ).encode("utf-8"),
        )
        doc = ledger.read(DID)
        assert doc is not None
        assert len(doc.authentication) == 2
        assert doc.proof[0].created is None

    def test_corrupt_payload_raises(
        self, ledger: IdentityLedger, store: InMemoryStore
    ) -> None:
        store.put(DID, b"not json")
        with pytest.raises(MalformedJsonError):
            ledger.read(DID)


# ---------------------------------------------------------------------------
# update
# ---------------------------------------------------------------------------


class TestUpdate:
    def test_replaces_whole_document(
        self, populated_ledger: IdentityLedger, replacement: DIDDocument
    ) -> None:
        populated_ledger.update(DID, replacement)
        assert populated_ledger.read(DID) == replacement

    def test_missing_raises(
        self, ledger: IdentityLedger, replacement: DIDDocument
    ) -> None:
        with pytest.raises(IdentityNotFoundError, match="does not exist"):
            ledger.update(DID, replacement)

    def test_id_mismatch_raises(
        self, populated_ledger: IdentityLedger
    ) -> None:
        with pytest.raises(ValueError, match="does not match"):
            populated_ledger.update(DID, DIDDocument.minimal("did:example:other"))
        assert populated_ledger.read(DID) == DIDDocument.minimal(DID)


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------


class TestDelete:
    def test_removes_document(self, populated_ledger: IdentityLedger) -> None:
        populated_ledger.delete(DID)
        assert populated_ledger.read(DID) is None
        assert not populated_ledger.exists(DID)

    def test_missing_raises(self, ledger: IdentityLedger) -> None:
        with pytest.raises(IdentityNotFoundError):
            ledger.delete(DID)

    def test_can_recreate_after_delete(self, populated_ledger: IdentityLedger) -> None:
        populated_ledger.delete(DID)
        populated_ledger.create(DID)
        assert DID in populated_ledger


# ---------------------------------------------------------------------------
# Store failures and persistence
# ---------------------------------------------------------------------------


class TestStoreIntegration:
    def test_storage_errors_propagate(self) -> None:
        ledger = IdentityLedger(_FailingStore())
        with pytest.raises(StorageError):
            ledger.create(DID)
        with pytest.raises(StorageError):
            ledger.read(DID)
        with pytest.raises(StorageError):
            ledger.delete(DID)

    def test_file_store_round_trip(
        self, tmp_path: Path, replacement: DIDDocument
    ) -> None:
        path = tmp_path / "ledger.json"
        IdentityLedger(FileStore(path)).create(DID)
        IdentityLedger(FileStore(path)).update(DID, replacement)
        assert IdentityLedger(FileStore(path)).read(DID) == replacement

    def test_membership_rejects_non_strings(self, populated_ledger: IdentityLedger) -> None:
        assert 123 not in populated_ledger
