"""
Customer API — Identifier Codec
================================

What:  Converts between the external string form of a resource identifier
       (used in URLs and JSON bodies) and the internal `uuid.UUID` stored in
       the database.
How:   `decode` only accepts the canonical textual form that `encode`
       produces: 36 characters, lowercase hex, hyphens at positions 8, 13, 18
       and 23. Anything else raises InvalidIdentifierError before the store
       is ever queried.

    encode(decode(s)) == s   for every string s that decode accepts
"""

import re
import uuid

from customer_api.exceptions import InvalidIdentifierError

CANONICAL_LENGTH = 36

_CANONICAL_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"
)


def decode(external: str) -> uuid.UUID:
    """
    Parse an external identifier.

    uuid.UUID() alone would also accept braces, "urn:uuid:" prefixes,
    upper-case digits and hyphen-less strings, none of which round-trip.

    Raises:
        InvalidIdentifierError: `external` is not a canonical UUID string
    """
    if not isinstance(external, str) or not _CANONICAL_PATTERN.fullmatch(external):
        raise InvalidIdentifierError(external)
    return uuid.UUID(external)


def encode(internal: uuid.UUID) -> str:
    """Render an internal identifier in canonical external form."""
    return str(internal)
