"""DID and DID URL parsing.

DID format
----------
::

    did:<method>:<method-specific-id>

A DID URL extends a DID with an optional path, query, and fragment::

    did:example:123/path?service=files&version=2#key-1

Examples::

    >>> DID.parse("did:example:123:456").method_specific_id
    '123:456'
    >>> dict(DIDURL.parse("did:example:123?a=1&a=2").queries)
    {'a': ('1', '2')}

No percent-decoding is applied to the method-specific id: it is kept exactly
as it appears after the second colon.

Specification reference
-----------------------
https://www.w3.org/TR/did-core/#did-syntax
https://www.w3.org/TR/did-core/#did-url-syntax
"""
from __future__ import annotations

import re
import urllib.parse
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Sequence

from did_ledger.did.grammar import is_valid_did
from did_ledger.errors import InvalidIdentifierSyntaxError, InvalidUrlComponentError

DID_SCHEME: str = "did"

# Characters that start the path, query, or fragment of a DID URL.
_URL_TAIL_START = re.compile(r"[?/#]")
_BAD_PERCENT_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


# ------------------------------------------------------------------
# DID
# ------------------------------------------------------------------


@dataclass(frozen=True)
class DID:
    """A parsed, grammar-conformant Decentralized Identifier.

    Parameters
    ----------
    method:
        The DID method name (lowercase alphanumeric).
    method_specific_id:
        Everything after the second colon, verbatim.
    scheme:
        Always ``"did"``.
    """

    method: str
    method_specific_id: str
    scheme: str = DID_SCHEME

    @classmethod
    def parse(cls, candidate: str) -> "DID":
        """Parse *candidate* into a :class:`DID`.

        Raises
        ------
        InvalidIdentifierSyntaxError
            If *candidate* does not match the DID grammar.
        """
        if not is_valid_did(candidate):
            raise InvalidIdentifierSyntaxError(candidate)
        # The scheme token is only validated, never carried over.
        _, method, method_specific_id = candidate.split(":", 2)
        return cls(method=method, method_specific_id=method_specific_id)

    def __str__(self) -> str:
        return f"{self.scheme}:{self.method}:{self.method_specific_id}"


# ------------------------------------------------------------------
# DID URL
# ------------------------------------------------------------------


@dataclass(frozen=True)
class DIDURL:
    """A DID together with the path, query, and fragment that address a
    resource relative to its DID document.

    Parameters
    ----------
    did:
        The identifier portion.
    path:
        The path, only when the DID URL contains one (always starts with ``/``).
    queries:
        Query parameters; each key maps to its values in the order given.
        Stored as a read-only mapping of tuples.
    fragment:
        The fragment without its leading ``#``.
    """

    did: DID
    path: str | None = None
    queries: Mapping[str, tuple[str, ...]] = field(default_factory=dict, hash=False)
    fragment: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "queries", _freeze_queries(self.queries))

    @classmethod
    def parse(cls, candidate: str) -> "DIDURL":
        """Parse a DID URL into its components.

        Raises
        ------
        InvalidIdentifierSyntaxError
            If the DID portion is malformed.
        InvalidUrlComponentError
            If the path, query, or fragment portion cannot be parsed.
        """
        match = _URL_TAIL_START.search(candidate)
        if match is None:
            did_part, tail = candidate, ""
        else:
            did_part, tail = candidate[: match.start()], candidate[match.start() :]

        did = DID.parse(did_part)
        if not tail:
            return cls(did=did)

        has_path = tail.startswith("/")
        if not has_path:
            tail = "/" + tail

        path, queries, fragment = _parse_url_tail(tail)
        return cls(
            did=did,
            path=path if has_path else None,
            queries=queries,
            fragment=fragment or None,
        )

    @property
    def method(self) -> str:
        return self.did.method

    @property
    def method_specific_id(self) -> str:
        return self.did.method_specific_id

    def __str__(self) -> str:
        result = str(self.did)
        if self.path:
            result += urllib.parse.quote(self.path, safe="/:@!$&'()*+,;=%")
        if self.queries:
            result += "?" + urllib.parse.urlencode(self.queries, doseq=True)
        if self.fragment:
            result += "#" + urllib.parse.quote(self.fragment, safe="/?:@!$&'()*+,;=%")
        return result


def _freeze_queries(
    queries: Mapping[str, Sequence[str]]
) -> Mapping[str, tuple[str, ...]]:
    return MappingProxyType({key: tuple(values) for key, values in queries.items()})


def _parse_url_tail(tail: str) -> tuple[str, Mapping[str, Sequence[str]], str]:
    """Split a ``/``-rooted URL reference into decoded path, queries, and fragment."""
    if _CONTROL_CHARS.search(tail):
        raise InvalidUrlComponentError(tail, "invalid control character in URL")
    try:
        parts = urllib.parse.urlsplit(tail)
    except ValueError as exc:
        raise InvalidUrlComponentError(tail, str(exc)) from exc

    for component in (parts.path, parts.fragment):
        bad = _BAD_PERCENT_ESCAPE.search(component)
        if bad is not None:
            raise InvalidUrlComponentError(
                tail, f"invalid URL escape {component[bad.start() : bad.start() + 3]!r}"
            )

    queries = urllib.parse.parse_qs(parts.query, keep_blank_values=True)
    return (
        urllib.parse.unquote(parts.path),
        queries,
        urllib.parse.unquote(parts.fragment),
    )


def parse_did(candidate: str) -> DID:
    """Module-level alias for :meth:`DID.parse`."""
    return DID.parse(candidate)


def parse_did_url(candidate: str) -> DIDURL:
    """Module-level alias for :meth:`DIDURL.parse`."""
    return DIDURL.parse(candidate)


# ------------------------------------------------------------------
# Chain-qualified identifier
# ------------------------------------------------------------------


@dataclass(frozen=True)
class ChainDID:
    """A chain-qualified identifier of the form
    ``did:<method>[:<chain_id>]:<specific_id>[#<fragment>]``.

    This encoding is used by ledgers that namespace identifiers per chain
    (e.g. ``did:ethr:1:0xabc``). It is split positionally and is *not*
    validated against the DID grammar; use :class:`DID` for that.
    """

    method: str
    specific_id: str
    chain_id: str = ""
    fragment: str = ""
    scheme: str = DID_SCHEME

    @classmethod
    def from_string(cls, value: str) -> "ChainDID":
        """Split *value* into scheme, method, optional chain id, id, and fragment.

        With exactly three colon-separated parts there is no chain id; with
        four or more the third part is the chain id and the remainder is
        rejoined as the specific id.

        Raises
        ------
        InvalidIdentifierSyntaxError
            If *value* has fewer than three colon-separated parts.
        """
        base, _, fragment = value.partition("#")
        parts = base.split(":")
        if len(parts) < 3:
            raise InvalidIdentifierSyntaxError(value)
        if len(parts) == 3:
            return cls(
                scheme=parts[0],
                method=parts[1],
                specific_id=parts[2],
                fragment=fragment,
            )
        return cls(
            scheme=parts[0],
            method=parts[1],
            chain_id=parts[2],
            specific_id=":".join(parts[3:]),
            fragment=fragment,
        )

    def __str__(self) -> str:
        result = f"{self.scheme}:{self.method}"
        if self.chain_id:
            result += f":{self.chain_id}"
        result += f":{self.specific_id}"
        if self.fragment:
            result += f"#{self.fragment}"
        return result
