"""did_ledger.did — W3C DID Core identifiers and documents.

Submodules
----------
grammar
    The DID syntax grammar and :func:`is_valid_did`.
identifier
    DID, DIDURL, and the chain-qualified ChainDID variant.
raw
    RawDocument and :func:`decode_raw` for loosely typed JSON payloads.
normalize
    :func:`normalize`, turning a RawDocument into a DIDDocument.
document
    DIDDocument, VerificationMethod, Verification, VerificationRelationship,
    and Proof.

Quick start
-----------
::

    from did_ledger.did import DIDDocument, DIDURL

    url = DIDURL.parse("did:example:123/path?a=1&a=2#frag")
    print(url.did.method, dict(url.queries))  # example {'a': ('1', '2')}

    doc = DIDDocument.from_json(payload_bytes)
    for entry in doc.authentication:
        print(entry.method.id, entry.embedded)
"""
from __future__ import annotations

from did_ledger.did.document import (
    DEFAULT_CONTEXT,
    DIDDocument,
    Proof,
    Verification,
    VerificationMethod,
    VerificationRelationship,
)
from did_ledger.did.grammar import DID_PATTERN, is_valid_did
from did_ledger.did.identifier import DID, DIDURL, ChainDID, parse_did, parse_did_url
from did_ledger.did.normalize import normalize, parse_document
from did_ledger.did.raw import (
    EmbeddedEntry,
    OpaqueEntry,
    RawDocument,
    ReferenceEntry,
    decode_raw,
)

__all__ = [
    # grammar
    "DID_PATTERN",
    "is_valid_did",
    # identifier
    "ChainDID",
    "DID",
    "DIDURL",
    "parse_did",
    "parse_did_url",
    # raw
    "EmbeddedEntry",
    "OpaqueEntry",
    "RawDocument",
    "ReferenceEntry",
    "decode_raw",
    # normalize
    "normalize",
    "parse_document",
    # document
    "DEFAULT_CONTEXT",
    "DIDDocument",
    "Proof",
    "Verification",
    "VerificationMethod",
    "VerificationRelationship",
]
