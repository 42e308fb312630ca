"""Tests for did_ledger.did.document — model, serialization, and round trips."""
from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from did_ledger.did.document import (
    DEFAULT_CONTEXT,
    DIDDocument,
    Proof,
    Verification,
    VerificationMethod,
    VerificationRelationship,
    format_timestamp,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def heterogeneous_payload() -> dict[str, object]:
    """A payload mixing every shape the normalizer has to cope with."""
    return {
        "@context": ["https://www.w3.org/ns/did/v1", {"@vocab": "https://example.com#"}],
        "id": "did:example:123",
        "alsoKnownAs": ["https://example.com/alice", 7],
        "verificationMethod": [
            {
                "id": "did:example:123#key-1",
                "type": "Ed25519VerificationKey2020",
                "controller": "did:example:123",
                "publicKeyMultibase": "z6MkhaXgBZDvotDkL5257faiztiGiC2QtKLGpbnnEGta2doK",
            },
            {"id": "#key-2", "value": "raw-key", "type": 9},
        ],
        "authentication": [
            "did:example:123#key-1",
            {"id": "#key-3", "type": "JsonWebKey2020"},
            42,
            "",
        ],
        "assertionMethod": [{"type": "no-id"}],
        "keyAgreement": ["#key-2"],
        "created": "2023-01-02T03:04:05Z",
        "updated": "2023-06-07T08:09:10.5+02:00",
        "proof": [
            {
                "type": "Ed25519Signature2020",
                "created": "bad",
                "creator": "did:example:123#key-1",
                "proofValue": "z3FXQjecWufY46",
                "domain": "example.com",
                "nonce": "abc",
                "proofPurpose": "assertionMethod",
            },
            "junk",
            None,
            {"created": "2024-02-29T12:00:00-07:00"},
        ],
    }


@pytest.fixture()
def document(heterogeneous_payload: dict[str, object]) -> DIDDocument:
    return DIDDocument.from_json(json.dumps(heterogeneous_payload))


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestDIDDocumentConstruction:
    def test_minimal_document(self) -> None:
        doc = DIDDocument.minimal("did:example:123")
        assert doc.id == "did:example:123"
        assert doc.context == [DEFAULT_CONTEXT]
        assert doc.verification_method == ()
        assert doc.created is None

    def test_documents_are_frozen(self) -> None:
        doc = DIDDocument.minimal("did:example:123")
        with pytest.raises(ValidationError):
            doc.id = "did:example:456"  # type: ignore[misc]

    def test_equality_is_by_value(self) -> None:
        assert DIDDocument.minimal("did:example:1") == DIDDocument.minimal("did:example:1")
        assert DIDDocument.minimal("did:example:1") != DIDDocument.minimal("did:example:2")

    def test_verifications_by_relationship(self, document: DIDDocument) -> None:
        assert (
            document.verifications(VerificationRelationship.AUTHENTICATION)
            == document.authentication
        )
        assert document.verifications(VerificationRelationship.GENERAL) == ()


class TestVerificationMethod:
    def test_relative_reference_is_computed_from_id(self) -> None:
        assert VerificationMethod(id="#key-1").is_relative_reference is True
        assert VerificationMethod(id="did:example:1#key-1").is_relative_reference is False
        assert VerificationMethod().is_relative_reference is False

    def test_to_dict_omits_absent_fields(self) -> None:
        method = VerificationMethod(id="#key-1", value=b"abc")
        assert method.to_dict() == {"id": "#key-1", "value": "abc"}


# ---------------------------------------------------------------------------
# resolve_verification_method
# ---------------------------------------------------------------------------


class TestResolveVerificationMethod:
    def test_absolute_id(self, document: DIDDocument) -> None:
        method = document.resolve_verification_method("did:example:123#key-1")
        assert method is not None
        assert method.type == "Ed25519VerificationKey2020"

    def test_relative_reference_matches_absolute_declaration(
        self, document: DIDDocument
    ) -> None:
        method = document.resolve_verification_method("#key-1")
        assert method is not None
        assert method.id == "did:example:123#key-1"

    def test_absolute_reference_matches_relative_declaration(
        self, document: DIDDocument
    ) -> None:
        method = document.resolve_verification_method("did:example:123#key-2")
        assert method is not None
        assert method.id == "#key-2"

    def test_unknown_id_returns_none(self, document: DIDDocument) -> None:
        assert document.resolve_verification_method("#key-9") is None

    def test_resolves_reference_entries(self, document: DIDDocument) -> None:
        reference = document.key_agreement[0]
        assert reference.embedded is False
        resolved = document.resolve_verification_method(reference.method.id)
        assert resolved is not None
        assert resolved.value == b"raw-key"


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


class TestSerialization:
    def test_minimal_document_json(self) -> None:
        data = json.loads(DIDDocument.minimal("did:example:123").to_json())
        assert data == {"@context": [DEFAULT_CONTEXT], "id": "did:example:123"}

    def test_to_bytes_is_compact_utf8(self) -> None:
        payload = DIDDocument.minimal("did:example:123").to_bytes()
        assert payload == b'{"@context":["https://www.w3.org/ns/did/v1"],"id":"did:example:123"}'

    def test_w3c_property_names(self, document: DIDDocument) -> None:
        data = document.to_dict()
        assert set(data) == {
            "@context",
            "id",
            "alsoKnownAs",
            "verificationMethod",
            "authentication",
            "assertionMethod",
            "keyAgreement",
            "created",
            "updated",
            "proof",
        }

    def test_verification_entry_forms(self, document: DIDDocument) -> None:
        data = document.to_dict()
        assert data["authentication"] == [
            "did:example:123#key-1",
            {"id": "#key-3", "type": "JsonWebKey2020"},
            {},
            "",
        ]
        assert data["assertionMethod"] == [{}]

    def test_zero_values_encode_as_empty_objects(self) -> None:
        assert Verification().to_json_value() == {}
        assert Proof().to_dict() == {}

    def test_reference_encodes_as_id(self) -> None:
        entry = Verification(
            method=VerificationMethod(id="#key-1"),
            relationship=VerificationRelationship.AUTHENTICATION,
        )
        assert entry.to_json_value() == "#key-1"

    def test_timestamps_are_rfc3339(self) -> None:
        stamp = datetime(2023, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert format_timestamp(stamp) == "2023-01-02T03:04:05+00:00"

    def test_naive_timestamp_is_treated_as_utc(self) -> None:
        assert format_timestamp(datetime(2023, 1, 2)) == "2023-01-02T00:00:00+00:00"

    @pytest.mark.parametrize("constant", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_context_is_not_encoded(self, constant: float) -> None:
        doc = DIDDocument(context=[constant], id="did:example:1")
        with pytest.raises(ValueError):
            doc.to_bytes()
        with pytest.raises(ValueError):
            doc.to_json()


# ---------------------------------------------------------------------------
# Round trips
# ---------------------------------------------------------------------------


class TestRoundTrip:
    def test_decode_normalize_encode_is_idempotent(self, document: DIDDocument) -> None:
        assert DIDDocument.from_json(document.to_bytes()) == document

    def test_pretty_json_round_trips(self, document: DIDDocument) -> None:
        assert DIDDocument.from_json(document.to_json()) == document

    def test_second_encoding_is_byte_identical(self, document: DIDDocument) -> None:
        once = document.to_bytes()
        twice = DIDDocument.from_json(once).to_bytes()
        assert once == twice

    def test_round_trip_keeps_index_alignment(self, document: DIDDocument) -> None:
        again = DIDDocument.from_json(document.to_bytes())
        assert len(again.authentication) == 4
        assert again.authentication[2] == Verification()
        assert len(again.proof) == 3
        assert again.proof[1] == Proof()

    def test_lone_surrogate_byte_fields_round_trip(self) -> None:
        payload = (
            b'{"verificationMethod":[{"id":"#k","value":"\\ud800abc"}],'
            b'"proof":[{"proofValue":"\\udfffz","nonce":"\\ud834"}]}'
        )
        doc = DIDDocument.from_json(payload)
        assert doc.verification_method[0].value == b"\xed\xa0\x80abc"
        assert doc.proof[0].proof_value == b"\xed\xbf\xbfz"
        assert doc.proof[0].nonce == b"\xed\xa0\xb4"
        assert DIDDocument.from_json(doc.to_bytes()) == doc

    def test_constructed_document_round_trips(self) -> None:
        doc = DIDDocument(
            context=DEFAULT_CONTEXT,
            id="did:example:abc",
            also_known_as=("did:web:example.com",),
            verification_method=(
                VerificationMethod(id="#k1", type="JsonWebKey2020", controller="did:example:abc"),
            ),
            authentication=(
                Verification(
                    method=VerificationMethod(id="#k1"),
                    relationship=VerificationRelationship.AUTHENTICATION,
                ),
            ),
            capability_delegation=(
                Verification(
                    method=VerificationMethod(id="#k2", public_key_multibase="zabc"),
                    relationship=VerificationRelationship.CAPABILITY_DELEGATION,
                    embedded=True,
                ),
            ),
            updated=datetime(2024, 5, 6, 7, 8, 9, 123000, tzinfo=timezone.utc),
            proof=(Proof(type="T", nonce=b"n"),),
        )
        assert DIDDocument.from_json(doc.to_bytes()) == doc
