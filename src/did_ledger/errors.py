"""Exception hierarchy for did-ledger.

Every caller-facing failure derives from :class:`DIDError`. The four
validation failures also derive from :class:`ValueError` so that callers
that only care about "bad input" can catch that instead.

None of these are retried internally: parsing and normalization perform no
I/O, and store failures are reported to the caller as they happen.
"""
from __future__ import annotations


class DIDError(Exception):
    """Base exception for did-ledger errors."""


# ------------------------------------------------------------------
# Validation failures
# ------------------------------------------------------------------


class InvalidIdentifierSyntaxError(DIDError, ValueError):
    """Raised when a string does not conform to the DID syntax."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(
            f"invalid did: {value!r}. Make sure it conforms to the DID syntax: "
            "https://w3c.github.io/did-core/#did-syntax"
        )


class InvalidUrlComponentError(DIDError, ValueError):
    """Raised when the path, query, or fragment of a DID URL cannot be parsed."""

    def __init__(self, value: str, reason: str = "") -> None:
        self.value = value
        message = (
            f"failed to parse path, query, and fragment components of DID URL {value!r}"
        )
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class MalformedJsonError(DIDError, ValueError):
    """Raised when raw bytes cannot be decoded into a DID document payload."""


class MissingRequiredFieldError(DIDError, ValueError):
    """Raised when a verification method lacks a required field."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"{field} is required")


# ------------------------------------------------------------------
# Ledger failures
# ------------------------------------------------------------------


class StorageError(DIDError):
    """Raised when the underlying key-value store fails."""


class IdentityAlreadyExistsError(DIDError):
    """Raised when creating an identity whose DID is already stored."""

    def __init__(self, did: str) -> None:
        self.did = did
        super().__init__(f"the identity {did} already exists")


class IdentityNotFoundError(DIDError):
    """Raised when updating or deleting an identity that is not stored."""

    def __init__(self, did: str) -> None:
        self.did = did
        super().__init__(f"the identity {did} does not exist")
