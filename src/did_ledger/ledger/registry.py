"""IdentityLedger — create, read, update, and delete DID documents by DID.

Documents are stored as compact JSON under their DID string. Reads run the
same decode and normalize path as any other payload, so a stored document
written by another implementation is accepted as long as its
``verificationMethod`` entries carry ids.

Concurrency control is left to the backing store: the ledger holds no state
of its own beyond a reference to it.
"""
from __future__ import annotations

import logging

from did_ledger.did.document import DIDDocument
from did_ledger.did.identifier import DID
from did_ledger.did.normalize import parse_document
from did_ledger.errors import IdentityAlreadyExistsError, IdentityNotFoundError
from did_ledger.ledger.store import InMemoryStore, KeyValueStore

logger = logging.getLogger(__name__)


class IdentityLedger:
    """DID document CRUD on top of a :class:`~did_ledger.ledger.store.KeyValueStore`.

    Parameters
    ----------
    store:
        The backing store. Defaults to a fresh :class:`InMemoryStore`.

    Example
    -------
    ::

        ledger = IdentityLedger()
        doc = ledger.create("did:example:123456")
        print(ledger.read("did:example:123456") == doc)  # True
    """

    def __init__(self, store: KeyValueStore | None = None) -> None:
        self._store: KeyValueStore = store if store is not None else InMemoryStore()

    @property
    def store(self) -> KeyValueStore:
        return self._store

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create(self, did: str) -> DIDDocument:
        """Store a minimal document for a new DID and return it.

        Parameters
        ----------
        did:
            The DID to create. Must match the DID grammar.

        Returns
        -------
        DIDDocument
            The stored document: ``id`` and the default ``@context`` only.

        Raises
        ------
        InvalidIdentifierSyntaxError
            If *did* is malformed.
        IdentityAlreadyExistsError
            If a document is already stored under *did*.
        StorageError
            If the store fails.
        """
        DID.parse(did)
        if self._store.get(did) is not None:
            raise IdentityAlreadyExistsError(did)

        document = DIDDocument.minimal(did)
        self._store.put(did, document.to_bytes())
        logger.info("Created identity %s", did)
        return document

    def read(self, did: str) -> DIDDocument | None:
        """Return the document stored under *did*, or ``None`` if there is none.

        Raises
        ------
        MalformedJsonError
            If the stored bytes are not a DID document payload.
        MissingRequiredFieldError
            If a stored ``verificationMethod`` entry lacks an ``id``.
        StorageError
            If the store fails.
        """
        payload = self._store.get(did)
        if payload is None:
            return None
        return parse_document(payload)

    def update(self, did: str, document: DIDDocument) -> DIDDocument:
        """Replace the document stored under *did*.

        The incoming ``document.id`` must match ``did``.

        Raises
        ------
        ValueError
            If ``document.id`` does not match ``did``.
        IdentityNotFoundError
            If nothing is stored under *did*.
        StorageError
            If the store fails.
        """
        if document.id != did:
            raise ValueError(
                f"document.id {document.id!r} does not match the target DID {did!r}."
            )
        if self._store.get(did) is None:
            raise IdentityNotFoundError(did)

        self._store.put(did, document.to_bytes())
        logger.info("Updated identity %s", did)
        return document

    def delete(self, did: str) -> None:
        """Remove the document stored under *did*.

        Raises
        ------
        IdentityNotFoundError
            If nothing is stored under *did*.
        StorageError
            If the store fails.
        """
        if self._store.get(did) is None:
            raise IdentityNotFoundError(did)
        self._store.delete(did)
        logger.info("Deleted identity %s", did)

    def exists(self, did: str) -> bool:
        """Return ``True`` if a document is stored under *did*."""
        return self._store.get(did) is not None

    def __contains__(self, did: object) -> bool:
        """Support ``"did:example:123" in ledger`` membership test."""
        return isinstance(did, str) and self.exists(did)
