"""did-ledger — W3C DID parsing, DID document normalization, and a
ledger-backed DID document store.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import did_ledger
>>> did_ledger.__version__
'0.1.0'

Quick start
-----------
::

    from did_ledger import DID, DIDURL, DIDDocument, IdentityLedger

    did = DID.parse("did:example:123456")
    url = DIDURL.parse("did:example:123456/path?a=1#frag")

    ledger = IdentityLedger()
    ledger.create(str(did))
    doc = ledger.read(str(did))
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ------------------------------------------------------------------
# Identifiers and documents
# ------------------------------------------------------------------
from did_ledger.did.document import (
    DEFAULT_CONTEXT,
    DIDDocument,
    Proof,
    Verification,
    VerificationMethod,
    VerificationRelationship,
)
from did_ledger.did.grammar import is_valid_did
from did_ledger.did.identifier import DID, DIDURL, ChainDID
from did_ledger.did.normalize import normalize, parse_document
from did_ledger.did.raw import RawDocument, decode_raw

# ------------------------------------------------------------------
# Errors
# ------------------------------------------------------------------
from did_ledger.errors import (
    DIDError,
    IdentityAlreadyExistsError,
    IdentityNotFoundError,
    InvalidIdentifierSyntaxError,
    InvalidUrlComponentError,
    MalformedJsonError,
    MissingRequiredFieldError,
    StorageError,
)

# ------------------------------------------------------------------
# Ledger
# ------------------------------------------------------------------
from did_ledger.ledger.registry import IdentityLedger
from did_ledger.ledger.store import FileStore, InMemoryStore, KeyValueStore

__all__ = [
    # version
    "__version__",
    # identifiers
    "ChainDID",
    "DID",
    "DIDURL",
    "is_valid_did",
    # documents
    "DEFAULT_CONTEXT",
    "DIDDocument",
    "Proof",
    "RawDocument",
    "Verification",
    "VerificationMethod",
    "VerificationRelationship",
    "decode_raw",
    "normalize",
    "parse_document",
    # errors
    "DIDError",
    "IdentityAlreadyExistsError",
    "IdentityNotFoundError",
    "InvalidIdentifierSyntaxError",
    "InvalidUrlComponentError",
    "MalformedJsonError",
    "MissingRequiredFieldError",
    "StorageError",
    # ledger
    "FileStore",
    "IdentityLedger",
    "InMemoryStore",
    "KeyValueStore",
]
