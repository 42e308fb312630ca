"""Normalization of a :class:`~did_ledger.did.raw.RawDocument` into a
:class:`~did_ledger.did.document.DIDDocument`.

Parsing policy
--------------
DID method implementations diverge from the data model in practice, so the
normalizer prefers partial success over total failure:

- A ``verificationMethod`` entry without a non-empty string ``id`` is fatal
  (:class:`~did_ledger.errors.MissingRequiredFieldError`).
- Every other malformed field becomes absent, through
  :func:`parse_or_absent`.
- Malformed relationship and proof entries become zero values instead of
  being dropped, so array positions line up with the input.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, TypeVar

from did_ledger.did.document import (
    DIDDocument,
    Proof,
    Verification,
    VerificationMethod,
    VerificationRelationship,
)
from did_ledger.did.raw import (
    EmbeddedEntry,
    RawDocument,
    RawEntry,
    ReferenceEntry,
    decode_raw,
)
from did_ledger.errors import MissingRequiredFieldError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_RFC3339 = re.compile(
    r"(?P<year>[0-9]{4})-(?P<month>[0-9]{2})-(?P<day>[0-9]{2})T"
    r"(?P<hour>[0-9]{2}):(?P<minute>[0-9]{2}):(?P<second>[0-9]{2})"
    r"(?:\.(?P<fraction>[0-9]+))?"
    r"(?P<offset>Z|[+-][0-9]{2}:[0-9]{2})"
)

_RELATIONSHIP_BY_FIELD: dict[str, VerificationRelationship] = {
    "authentication": VerificationRelationship.AUTHENTICATION,
    "assertion_method": VerificationRelationship.ASSERTION_METHOD,
    "capability_delegation": VerificationRelationship.CAPABILITY_DELEGATION,
    "capability_invocation": VerificationRelationship.CAPABILITY_INVOCATION,
    "key_agreement": VerificationRelationship.KEY_AGREEMENT,
}


# ------------------------------------------------------------------
# Field parsers
# ------------------------------------------------------------------


def parse_or_absent(parser: Callable[[Any], T], value: Any, name: str = "") -> T | None:
    """Apply *parser* to *value*, returning ``None`` if it is absent or malformed.

    ``parser`` signals a malformed value by raising :class:`TypeError` or
    :class:`ValueError`.
    """
    if value is None:
        return None
    try:
        return parser(value)
    except (TypeError, ValueError) as exc:
        logger.debug("Dropping malformed field %s: %s", name or "<value>", exc)
        return None


def as_string(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected a string, got {type(value).__name__}")
    return value


def as_raw_bytes(value: Any) -> bytes:
    """Return the UTF-8 bytes of a JSON string. No base64 or multibase decoding.

    Lone surrogates, which JSON string escapes can express, are kept as their
    three-byte encoding so the value survives a round trip.
    """
    return as_string(value).encode("utf-8", errors="surrogatepass")


def parse_rfc3339(value: Any) -> datetime:
    """Parse an RFC 3339 ``date-time`` string into an aware datetime.

    Fractional seconds beyond microsecond precision are truncated.

    Raises
    ------
    ValueError
        If *value* is not an RFC 3339 timestamp or names an impossible date.
    """
    match = _RFC3339.fullmatch(as_string(value))
    if match is None:
        raise ValueError(f"not an RFC 3339 timestamp: {value!r}")

    offset = match.group("offset")
    if offset == "Z":
        tz = timezone.utc
    else:
        sign = 1 if offset[0] == "+" else -1
        hours, minutes = int(offset[1:3]), int(offset[4:6])
        if hours > 23 or minutes > 59:
            raise ValueError(f"invalid time zone offset in {value!r}")
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))

    fraction = match.group("fraction") or "0"
    return datetime(
        int(match.group("year")),
        int(match.group("month")),
        int(match.group("day")),
        int(match.group("hour")),
        int(match.group("minute")),
        int(match.group("second")),
        int(fraction[:6].ljust(6, "0")),
        tzinfo=tz,
    )


# ------------------------------------------------------------------
# Element normalizers
# ------------------------------------------------------------------


def normalize_verification_method(body: dict[str, Any] | None) -> VerificationMethod:
    """Build a VerificationMethod from a JSON object.

    Raises
    ------
    MissingRequiredFieldError
        If the object has no non-empty string ``id``.
    """
    body = body or {}
    method_id = parse_or_absent(as_string, body.get("id"), "id")
    if not method_id:
        raise MissingRequiredFieldError("id")
    return VerificationMethod(
        id=method_id,
        type=parse_or_absent(as_string, body.get("type"), "type"),
        controller=parse_or_absent(as_string, body.get("controller"), "controller"),
        value=parse_or_absent(as_raw_bytes, body.get("value"), "value"),
        public_key_multibase=parse_or_absent(
            as_string, body.get("publicKeyMultibase"), "publicKeyMultibase"
        ),
    )


def normalize_verification(
    entry: RawEntry, relationship: VerificationRelationship
) -> Verification:
    """Turn one classified relationship entry into a Verification."""
    if isinstance(entry, EmbeddedEntry):
        try:
            method = normalize_verification_method(entry.body)
        except MissingRequiredFieldError:
            logger.debug("Embedded %s entry has no id; using zero value", relationship.value)
            return Verification()
        return Verification(method=method, relationship=relationship, embedded=True)
    if isinstance(entry, ReferenceEntry):
        return Verification(
            method=VerificationMethod(id=entry.id),
            relationship=relationship,
            embedded=False,
        )
    logger.debug("Unrecognized %s entry; using zero value", relationship.value)
    return Verification()


def normalize_proof(value: Any) -> Proof:
    """Turn one proof array element into a Proof, or the zero Proof."""
    if not isinstance(value, dict):
        logger.debug("Proof entry is not an object; using zero value")
        return Proof()
    return Proof(
        type=parse_or_absent(as_string, value.get("type"), "proof.type"),
        created=parse_or_absent(parse_rfc3339, value.get("created"), "proof.created"),
        creator=parse_or_absent(as_string, value.get("creator"), "proof.creator"),
        proof_value=parse_or_absent(as_raw_bytes, value.get("proofValue"), "proof.proofValue"),
        domain=parse_or_absent(as_string, value.get("domain"), "proof.domain"),
        nonce=parse_or_absent(as_raw_bytes, value.get("nonce"), "proof.nonce"),
        proof_purpose=parse_or_absent(
            as_string, value.get("proofPurpose"), "proof.proofPurpose"
        ),
    )


def _string_list(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(item for item in value if isinstance(item, str))


def _proofs(value: Any) -> tuple[Proof, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(normalize_proof(item) for item in value if item is not None)


# ------------------------------------------------------------------
# Document
# ------------------------------------------------------------------


def normalize(raw: RawDocument) -> DIDDocument:
    """Convert a RawDocument into a DIDDocument.

    Parameters
    ----------
    raw:
        The decoded intermediate representation.

    Returns
    -------
    DIDDocument
        The normalized document.

    Raises
    ------
    MissingRequiredFieldError
        If a ``verificationMethod`` entry lacks an ``id``.
    """
    verification_methods = tuple(
        normalize_verification_method(body) for body in raw.verification_method or ()
    )
    relationships = {
        field_name: tuple(
            normalize_verification(entry, relationship)
            for entry in raw.relationship_entries(field_name)
        )
        for field_name, relationship in _RELATIONSHIP_BY_FIELD.items()
    }
    return DIDDocument(
        context=raw.context,
        id=raw.id or "",
        also_known_as=_string_list(raw.also_known_as),
        verification_method=verification_methods,
        created=parse_or_absent(parse_rfc3339, raw.created, "created"),
        updated=parse_or_absent(parse_rfc3339, raw.updated, "updated"),
        proof=_proofs(raw.proof),
        **relationships,
    )


def parse_document(data: str | bytes) -> DIDDocument:
    """Decode and normalize a JSON payload in one step."""
    return normalize(decode_raw(data))
