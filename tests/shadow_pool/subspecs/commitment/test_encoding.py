"""
Tests for token, amount and address canonicalization.
"""

import pytest

from shadow_pool.subspecs.bn254.field import P, Fr
from shadow_pool.subspecs.commitment import (
    canonicalize_address,
    canonicalize_amount,
    canonicalize_token,
    recipient_to_field,
)
from shadow_pool.types import EncodingError


@pytest.mark.parametrize(
    "token, expected",
    [
        pytest.param("0x" + "0" * 40, 0, id="zero_address"),
        pytest.param("0x" + "0" * 64, 0, id="zero_word"),
        pytest.param("0x" + "ff" * 20, (1 << 160) - 1, id="max_address"),
        pytest.param(
            "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
            0xA0B86991C6218B36C1D19D4A2E9EB0CE3606EB48,
            id="mixed_case",
        ),
        pytest.param("0X" + "01" * 20, int("01" * 20, 16), id="upper_prefix"),
    ],
)
def test_canonical_tokens(token: str, expected: int) -> None:
    """Standard addresses and both zero forms are accepted."""
    assert canonicalize_token(token) == expected


@pytest.mark.parametrize(
    "token, match",
    [
        pytest.param("0x" + "1" * 64, "expected 40 hex digits, got 64", id="long_nonzero"),
        pytest.param("0x" + "1" * 41, "expected 40 hex digits, got 41", id="one_too_many"),
        pytest.param("0x1234", "expected 40 hex digits, got 4", id="short"),
        pytest.param("12" * 20, "missing 0x prefix", id="no_prefix"),
        pytest.param("0x" + "g" * 40, "not a hex string", id="not_hex"),
        pytest.param("0x", "not a hex string", id="empty"),
        pytest.param(None, "expected a 0x-prefixed hex string", id="none"),
        pytest.param(1234, "expected a 0x-prefixed hex string", id="int"),
    ],
)
def test_malformed_tokens(token: object, match: str) -> None:
    """Anything else is rejected, never truncated."""
    with pytest.raises(EncodingError, match=match) as exc_info:
        canonicalize_token(token)  # type: ignore[arg-type]
    assert exc_info.value.field_name == "token"


def test_address_rejects_wide_zero() -> None:
    """Only tokens accept the 32-byte zero word."""
    with pytest.raises(EncodingError, match="got 64"):
        canonicalize_address("0x" + "0" * 64)


@pytest.mark.parametrize(
    "amount, expected",
    [
        pytest.param(0, 0, id="zero"),
        pytest.param("1000000000000000000", 10**18, id="one_eth"),
        pytest.param("0x10", 16, id="hex"),
        pytest.param(P - 1, P - 1, id="max"),
    ],
)
def test_canonical_amounts(amount: int | str, expected: int) -> None:
    """Ints, decimal strings and hex strings are accepted."""
    assert canonicalize_amount(amount) == expected


@pytest.mark.parametrize(
    "amount, match",
    [
        pytest.param(-1, "must not be negative", id="negative"),
        pytest.param("-1", "not a decimal", id="negative_string"),
        pytest.param("1.5", "not a decimal", id="fraction"),
        pytest.param("", "not a decimal", id="empty"),
        pytest.param("abc", "not a decimal", id="letters"),
        pytest.param("١٢", "not a decimal", id="non_ascii_digits"),
        pytest.param(P, "does not fit", id="modulus"),
        pytest.param(str(2**256), "does not fit", id="huge"),
        pytest.param(True, "boolean", id="bool"),
        pytest.param(1.0, "expected an int", id="float"),
    ],
)
def test_malformed_amounts(amount: object, match: str) -> None:
    """Non-numeric, negative and oversized amounts are rejected."""
    with pytest.raises(EncodingError, match=match):
        canonicalize_amount(amount)  # type: ignore[arg-type]


def test_recipient_to_field() -> None:
    """Recipients become field elements bound into the proof."""
    assert recipient_to_field("0x" + "00" * 19 + "2a") == Fr(value=42)
    assert recipient_to_field(Fr(value=42)) == Fr(value=42)

    with pytest.raises(EncodingError, match="recipient"):
        recipient_to_field("0xdead")
    with pytest.raises(EncodingError, match="160-bit"):
        recipient_to_field(Fr(value=1 << 160))


def test_error_message_truncates_long_values() -> None:
    """Rejected values are shown, but not in full."""
    with pytest.raises(EncodingError) as exc_info:
        canonicalize_token("0x" + "1" * 200)
    assert len(exc_info.value.message) < 200
    assert exc_info.value.message.endswith("...)")
