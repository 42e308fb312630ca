"""DIDDocument — W3C DID Core data model.

The model is the strongly typed end product of
:func:`~did_ledger.did.normalize.normalize`. Documents are immutable values:
an update replaces the whole document.

JSON representation
-------------------
:meth:`DIDDocument.to_json` emits the W3C property names (``@context``,
``verificationMethod``, ``assertionMethod`` and so on). Absent values are
omitted rather than written as ``null``. Decoding the output with
:meth:`DIDDocument.from_json` yields a document equal to the original.

Specification reference
-----------------------
https://www.w3.org/TR/did-core/#data-model
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

DEFAULT_CONTEXT: str = "https://www.w3.org/ns/did/v1"


# ------------------------------------------------------------------
# Verification method
# ------------------------------------------------------------------


@dataclass(frozen=True)
class VerificationMethod:
    """A verification method declared in, or referenced from, a DID document.

    This is a structural container. ``value`` holds the raw bytes of the
    JSON string it was read from; no base64 or multibase decoding is done.

    Parameters
    ----------
    id:
        The method identifier, absolute (``did:example:123#key-1``) or
        relative to the document (``#key-1``).
    type:
        Key type, e.g. ``"Ed25519VerificationKey2020"``.
    controller:
        The DID that controls this key.
    value:
        Raw key material.
    public_key_multibase:
        Multibase-encoded public key, stored as given.
    """

    id: str = ""
    type: str | None = None
    controller: str | None = None
    value: bytes | None = None
    public_key_multibase: str | None = None

    @property
    def is_relative_reference(self) -> bool:
        """``True`` when ``id`` is a fragment relative to the document id."""
        return self.id.startswith("#")

    def to_dict(self) -> dict[str, object]:
        """Serialize to a W3C-compatible plain dictionary."""
        data: dict[str, object] = {}
        if self.id:
            data["id"] = self.id
        if self.type is not None:
            data["type"] = self.type
        if self.controller is not None:
            data["controller"] = self.controller
        if self.value is not None:
            data["value"] = self.value.decode("utf-8", errors="surrogatepass")
        if self.public_key_multibase is not None:
            data["publicKeyMultibase"] = self.public_key_multibase
        return data


# ------------------------------------------------------------------
# Verification relationships
# ------------------------------------------------------------------


class VerificationRelationship(str, Enum):
    """The document section a :class:`Verification` was declared in.

    Apart from ``GENERAL`` the values are the JSON property names.
    """

    GENERAL = "general"
    AUTHENTICATION = "authentication"
    ASSERTION_METHOD = "assertionMethod"
    CAPABILITY_DELEGATION = "capabilityDelegation"
    CAPABILITY_INVOCATION = "capabilityInvocation"
    KEY_AGREEMENT = "keyAgreement"


RELATIONSHIP_SECTIONS: tuple[VerificationRelationship, ...] = (
    VerificationRelationship.AUTHENTICATION,
    VerificationRelationship.ASSERTION_METHOD,
    VerificationRelationship.CAPABILITY_DELEGATION,
    VerificationRelationship.CAPABILITY_INVOCATION,
    VerificationRelationship.KEY_AGREEMENT,
)


@dataclass(frozen=True)
class Verification:
    """One entry of a verification relationship array.

    ``embedded`` is ``True`` when the entry was a full verification method
    object and ``False`` when it was a bare id reference, in which case only
    ``method.id`` is set and the method must be resolved elsewhere.

    ``Verification()`` is the zero value used for entries that were neither
    an object nor a string.
    """

    method: VerificationMethod = field(default_factory=VerificationMethod)
    relationship: VerificationRelationship = VerificationRelationship.GENERAL
    embedded: bool = False

    def to_json_value(self) -> object:
        if self.embedded:
            return self.method.to_dict()
        if self == Verification():
            return {}
        return self.method.id


# ------------------------------------------------------------------
# Proof
# ------------------------------------------------------------------


@dataclass(frozen=True)
class Proof:
    """A proof block attached to a DID document.

    Proofs are parsed, never verified. Any malformed field is absent.
    """

    type: str | None = None
    created: datetime | None = None
    creator: str | None = None
    proof_value: bytes | None = None
    domain: str | None = None
    nonce: bytes | None = None
    proof_purpose: str | None = None

    def to_dict(self) -> dict[str, object]:
        """Serialize to a W3C-compatible plain dictionary."""
        data: dict[str, object] = {}
        if self.type is not None:
            data["type"] = self.type
        if self.created is not None:
            data["created"] = format_timestamp(self.created)
        if self.creator is not None:
            data["creator"] = self.creator
        if self.proof_value is not None:
            data["proofValue"] = self.proof_value.decode(
                "utf-8", errors="surrogatepass"
            )
        if self.domain is not None:
            data["domain"] = self.domain
        if self.nonce is not None:
            data["nonce"] = self.nonce.decode("utf-8", errors="surrogatepass")
        if self.proof_purpose is not None:
            data["proofPurpose"] = self.proof_purpose
        return data


def format_timestamp(value: datetime) -> str:
    """Render *value* as RFC 3339. Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


# ------------------------------------------------------------------
# DID Document (Pydantic v2)
# ------------------------------------------------------------------


class DIDDocument(BaseModel):
    """A W3C DID Core DID document.

    Parameters
    ----------
    context:
        The ``@context`` value, passed through untouched.
    id:
        The DID subject.
    also_known_as:
        Other identifiers for the subject.
    verification_method:
        Verification methods declared by this document.
    authentication, assertion_method, capability_delegation,
    capability_invocation, key_agreement:
        Verification relationship entries, embedded or by reference.
    created, updated:
        Document timestamps.
    proof:
        Proof blocks, parsed but never verified.
    """

    model_config = ConfigDict(frozen=True)

    context: Any = None
    id: str = ""
    also_known_as: tuple[str, ...] = ()
    verification_method: tuple[VerificationMethod, ...] = ()
    authentication: tuple[Verification, ...] = ()
    assertion_method: tuple[Verification, ...] = ()
    capability_delegation: tuple[Verification, ...] = ()
    capability_invocation: tuple[Verification, ...] = ()
    key_agreement: tuple[Verification, ...] = ()
    created: datetime | None = None
    updated: datetime | None = None
    proof: tuple[Proof, ...] = ()

    @classmethod
    def minimal(cls, did: str) -> "DIDDocument":
        """Return a fresh document holding only *did* and the default context."""
        return cls(context=[DEFAULT_CONTEXT], id=did)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def verifications(
        self, relationship: VerificationRelationship
    ) -> tuple[Verification, ...]:
        """Return the entries declared under *relationship*."""
        sections = {
            VerificationRelationship.AUTHENTICATION: self.authentication,
            VerificationRelationship.ASSERTION_METHOD: self.assertion_method,
            VerificationRelationship.CAPABILITY_DELEGATION: self.capability_delegation,
            VerificationRelationship.CAPABILITY_INVOCATION: self.capability_invocation,
            VerificationRelationship.KEY_AGREEMENT: self.key_agreement,
        }
        return sections.get(relationship, ())

    def resolve_verification_method(self, method_id: str) -> VerificationMethod | None:
        """Return the declared VerificationMethod matching *method_id*, or None.

        A relative reference (``#key-1``) and its absolute form
        (``<document id>#key-1``) match each other.

        Parameters
        ----------
        method_id:
            The ``id`` to look up, relative or absolute.

        Returns
        -------
        VerificationMethod | None
            The matching method, or ``None`` if not found.
        """
        wanted = {method_id}
        if method_id.startswith("#"):
            wanted.add(self.id + method_id)
        elif self.id and method_id.startswith(self.id + "#"):
            wanted.add(method_id[len(self.id) :])
        for method in self.verification_method:
            if method.id in wanted:
                return method
        return None

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, object]:
        """Serialize to the W3C JSON shape as a plain dictionary."""
        data: dict[str, object] = {}
        if self.context is not None:
            data["@context"] = self.context
        if self.id:
            data["id"] = self.id
        if self.also_known_as:
            data["alsoKnownAs"] = list(self.also_known_as)
        if self.verification_method:
            data["verificationMethod"] = [vm.to_dict() for vm in self.verification_method]
        for relationship in RELATIONSHIP_SECTIONS:
            entries = self.verifications(relationship)
            if entries:
                data[relationship.value] = [entry.to_json_value() for entry in entries]
        if self.created is not None:
            data["created"] = format_timestamp(self.created)
        if self.updated is not None:
            data["updated"] = format_timestamp(self.updated)
        if self.proof:
            data["proof"] = [proof.to_dict() for proof in self.proof]
        return data

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize this document to a JSON string.

        Raises
        ------
        ValueError
            If ``context`` holds a non-finite float, which JSON cannot express.
        """
        return json.dumps(self.to_dict(), indent=indent, allow_nan=False)

    def to_bytes(self) -> bytes:
        """Serialize this document to compact UTF-8 JSON, as stored on the ledger."""
        payload = json.dumps(self.to_dict(), separators=(",", ":"), allow_nan=False)
        return payload.encode("utf-8")

    @classmethod
    def from_json(cls, data: str | bytes) -> "DIDDocument":
        """Decode and normalize a JSON payload.

        Raises
        ------
        MalformedJsonError
            If *data* is not a JSON object of the expected shape.
        MissingRequiredFieldError
            If a ``verificationMethod`` entry lacks an ``id``.
        """
        from did_ledger.did.normalize import parse_document

        return parse_document(data)
