"""
Customer API — Identifier Codec Unit Tests
===========================================

What:  encode/decode between external strings and internal UUIDs.

What we test:
    ✅ Canonical strings round-trip unchanged
    ✅ Non-canonical spellings are rejected, even when uuid.UUID would accept them
    ✅ Rejection raises InvalidIdentifierError (a 400-class ValidationError)
"""

import uuid

import pytest

from customer_api import identifiers
from customer_api.exceptions import InvalidIdentifierError, ValidationError


class TestDecode:

    @pytest.mark.parametrize("external", [
        "00000000-0000-0000-0000-000000000000",
        "123e4567-e89b-12d3-a456-426614174000",
        "ffffffff-ffff-ffff-ffff-ffffffffffff",
        str(uuid.uuid4()),
    ])
    def test_canonical_round_trip(self, external):
        assert identifiers.encode(identifiers.decode(external)) == external

    def test_decode_returns_uuid(self):
        value = identifiers.decode("123e4567-e89b-12d3-a456-426614174000")
        assert value == uuid.UUID("123e4567-e89b-12d3-a456-426614174000")

    @pytest.mark.parametrize("external", [
        "",
        "not-a-uuid",
        "123E4567-E89B-12D3-A456-426614174000",       # upper case
        "123e4567e89b12d3a456426614174000",           # no hyphens
        "{123e4567-e89b-12d3-a456-426614174000}",     # braces
        "urn:uuid:123e4567-e89b-12d3-a456-426614174000",
        "123e4567-e89b-12d3-a456-42661417400",        # too short
        "123e4567-e89b-12d3-a456-4266141740000",      # too long
        "123e4567-e89b-12d3-a456-42661417400g",       # bad alphabet
        " 123e4567-e89b-12d3-a456-426614174000",      # whitespace
        "507f1f77bcf86cd799439011",                   # other id formats
    ])
    def test_rejects_non_canonical(self, external):
        with pytest.raises(InvalidIdentifierError):
            identifiers.decode(external)

    def test_rejects_non_string(self):
        with pytest.raises(InvalidIdentifierError):
            identifiers.decode(12345)

    def test_invalid_identifier_is_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            identifiers.decode("nope")
        assert exc_info.value.field == "id"
        assert exc_info.value.errors[0]["type"] == "invalid_identifier"


class TestEncode:

    def test_encode_is_lowercase_canonical(self):
        value = uuid.UUID("123E4567-E89B-12D3-A456-426614174000")
        assert identifiers.encode(value) == "123e4567-e89b-12d3-a456-426614174000"
        assert len(identifiers.encode(value)) == identifiers.CANONICAL_LENGTH

    def test_encode_is_deterministic(self):
        value = uuid.uuid4()
        assert identifiers.encode(value) == identifiers.encode(value)
