"""DID syntax grammar.

The grammar accepts ``did:<method>:<method-specific-id>`` where the method is
lowercase alphanumeric and the method-specific id may span several
colon-delimited segments and contain percent-encoded characters. The string
must not end in ``:``.

Reference: https://www.w3.org/TR/did-core/#did-syntax
"""
from __future__ import annotations

import re

_IDCHAR = r"a-zA-Z0-9\-_\."

# The published form is did:[a-z0-9]+:(:+|[:idchar]+)*[%:idchar]+[^:].
# The repeated group only ever matches characters that the following class
# also matches, so it collapses to the pattern below. The collapsed form
# accepts exactly the same strings and cannot backtrack exponentially.
DID_PATTERN: re.Pattern[str] = re.compile(
    rf"did:[a-z0-9]+:[%:{_IDCHAR}]+[^:]"
)


def is_valid_did(candidate: str) -> bool:
    """Return ``True`` if *candidate* matches the DID grammar.

    Never raises; any non-string or non-conforming input yields ``False``.
    """
    if not isinstance(candidate, str):
        return False
    return DID_PATTERN.fullmatch(candidate) is not None
