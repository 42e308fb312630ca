"""Raw DID document decoding.

:func:`decode_raw` turns JSON bytes into a :class:`RawDocument`, a loosely
typed mirror of the DID document in which every variant-shaped field is kept
as an untyped JSON value. The only shape-sensing done here is classifying the
entries of the verification relationship arrays, which may be either a
verification method object or a bare id string::

    "authentication": [
        "did:example:123#key-1",                      -> ReferenceEntry
        {"id": "#key-2", "type": "JsonWebKey2020"},   -> EmbeddedEntry
        42                                             -> OpaqueEntry
    ]

Everything else is left for :func:`~did_ledger.did.normalize.normalize`.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from did_ledger.errors import MalformedJsonError


# ------------------------------------------------------------------
# Relationship entry variants
# ------------------------------------------------------------------


@dataclass(frozen=True)
class EmbeddedEntry:
    """A relationship entry given as a full verification method object."""

    body: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ReferenceEntry:
    """A relationship entry given as a bare verification method id."""

    id: str


@dataclass(frozen=True)
class OpaqueEntry:
    """A relationship entry that is neither an object nor a string."""


RawEntry = Union[EmbeddedEntry, ReferenceEntry, OpaqueEntry]

RELATIONSHIP_FIELDS: tuple[str, ...] = (
    "authentication",
    "assertion_method",
    "capability_delegation",
    "capability_invocation",
    "key_agreement",
)


def classify_entry(value: Any) -> RawEntry:
    """Map one JSON array element onto its relationship entry variant."""
    if isinstance(value, dict):
        return EmbeddedEntry(body=value)
    if isinstance(value, str):
        return ReferenceEntry(id=value)
    return OpaqueEntry()


# ------------------------------------------------------------------
# RawDocument (Pydantic v2)
# ------------------------------------------------------------------


class RawDocument(BaseModel):
    """Intermediate representation of a DID document payload.

    Unknown top-level properties are ignored. ``null`` relationship entries
    are dropped, and a relationship property that is not an array decodes
    to ``None``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    context: Any = Field(default=None, alias="@context")
    id: str | None = None
    also_known_as: Any = Field(default=None, alias="alsoKnownAs")
    verification_method: list[dict[str, Any] | None] | None = Field(
        default=None, alias="verificationMethod"
    )
    authentication: tuple[RawEntry, ...] | None = None
    assertion_method: tuple[RawEntry, ...] | None = Field(
        default=None, alias="assertionMethod"
    )
    capability_delegation: tuple[RawEntry, ...] | None = Field(
        default=None, alias="capabilityDelegation"
    )
    capability_invocation: tuple[RawEntry, ...] | None = Field(
        default=None, alias="capabilityInvocation"
    )
    key_agreement: tuple[RawEntry, ...] | None = Field(
        default=None, alias="keyAgreement"
    )
    created: Any = None
    updated: Any = None
    proof: Any = None

    @field_validator(*RELATIONSHIP_FIELDS, mode="before")
    @classmethod
    def classify_relationship_entries(cls, value: Any) -> tuple[RawEntry, ...] | None:
        """Classify each non-null array element into a :data:`RawEntry`."""
        if not isinstance(value, list):
            return None
        return tuple(classify_entry(item) for item in value if item is not None)

    def relationship_entries(self, field_name: str) -> tuple[RawEntry, ...]:
        """Return the classified entries of a relationship field, or ``()``."""
        entries: tuple[RawEntry, ...] | None = getattr(self, field_name)
        return entries or ()


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a valid JSON value")


def decode_raw(data: str | bytes) -> RawDocument:
    """Decode a JSON payload into a :class:`RawDocument`.

    Parameters
    ----------
    data:
        UTF-8 JSON bytes, or an already decoded string.

    Raises
    ------
    MalformedJsonError
        If *data* is not UTF-8 encoded, well-formed JSON (``NaN`` and
        ``Infinity`` are rejected), its top level is not an object,
        or a strictly typed property (``id``, ``verificationMethod``) has
        the wrong JSON type.
    """
    try:
        text = data.decode("utf-8") if isinstance(data, bytes) else data
        payload = json.loads(text, parse_constant=_reject_constant)
    except ValueError as exc:
        raise MalformedJsonError(f"failed to unmarshal did doc: {exc}") from exc

    if not isinstance(payload, dict):
        raise MalformedJsonError(
            f"failed to unmarshal did doc: expected a JSON object, "
            f"got {type(payload).__name__}"
        )

    try:
        return RawDocument.model_validate(payload)
    except ValidationError as exc:
        raise MalformedJsonError(f"failed to unmarshal did doc: {exc}") from exc
