#!/usr/bin/env python3
"""Example: Quickstart

Demonstrates the minimal setup for did-ledger: validate and parse a DID,
normalize a loosely formed DID document, and store it on an in-memory ledger.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install did-ledger
"""
from __future__ import annotations

import json

import did_ledger
from did_ledger import DIDURL, DIDDocument, IdentityLedger, is_valid_did


def main() -> None:
    print(f"did-ledger version: {did_ledger.__version__}")

    # Step 1: Validate and parse a DID URL
    did = "did:example:123456"
    print(f"{did} valid: {is_valid_did(did)}")
    url = DIDURL.parse(f"{did}/keys?versionId=1#key-1")
    print(f"method={url.method} path={url.path} query={dict(url.queries)} fragment={url.fragment}")

    # Step 2: Normalize a payload mixing references, embedded methods, and junk
    payload = {
        "@context": "https://www.w3.org/ns/did/v1",
        "id": did,
        "verificationMethod": [{"id": "#key-1", "type": "JsonWebKey2020"}],
        "authentication": ["#key-1", {"id": "#key-2"}, 42],
        "proof": [{"type": "Ed25519Signature2020", "created": "not-a-date"}],
    }
    document = DIDDocument.from_json(json.dumps(payload))
    print(f"authentication entries: {len(document.authentication)}")
    print(f"resolved #key-1: {document.resolve_verification_method('#key-1')}")

    # Step 3: Store and update it on a ledger
    ledger = IdentityLedger()
    ledger.create(did)
    ledger.update(did, document)
    print(ledger.read(did).to_json())

    print("\nQuickstart complete.")


if __name__ == "__main__":
    main()
