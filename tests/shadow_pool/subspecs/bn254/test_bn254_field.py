"""
Tests for the BN254 scalar field Fr.
"""

import pytest
from pydantic import ValidationError

from shadow_pool.subspecs.bn254.field import P, P_BITS, P_BYTES, Fr


def test_constants() -> None:
    """Verify field constants."""
    assert P.bit_length() == P_BITS
    assert P_BYTES == 32
    assert P % 2 == 1


def test_base_field_arithmetic() -> None:
    """Arithmetic reduces modulo P."""
    a = Fr(value=5)
    b = Fr(value=10)

    assert a + b == Fr(value=15)
    assert b - a == Fr(value=5)
    assert a - b == Fr(value=P - 5)
    assert -a == Fr(value=P - 5)
    assert a * b == Fr(value=50)
    assert (a / b) * b == a
    assert Fr(value=P - 1) + Fr.one() == Fr.zero()

    assert a == Fr(value=5)
    assert a != b
    assert a != 5  # type: ignore[comparison-overlap]

    with pytest.raises(ZeroDivisionError, match="Cannot invert the zero element."):
        Fr.zero().inverse()


@pytest.mark.parametrize("value", [-1, P, P + 1, 2**256])
def test_out_of_range_values_are_rejected(value: int) -> None:
    """Construction never reduces silently."""
    with pytest.raises(ValidationError):
        Fr(value=value)


def test_reduce_is_explicit() -> None:
    """Only `reduce` accepts out-of-range integers."""
    assert Fr.reduce(P + 3) == Fr(value=3)
    assert Fr.reduce(-1) == Fr(value=P - 1)


def test_field_elements_are_immutable_and_hashable() -> None:
    """Elements are frozen and usable as dictionary keys."""
    a = Fr(value=7)
    with pytest.raises(ValidationError):
        a.value = 8  # type: ignore[misc]
    assert {a: "x"}[Fr(value=7)] == "x"


def test_bytes_protocol() -> None:
    """Encoding is 32-byte big-endian."""
    data = bytes(Fr(value=258))
    assert len(data) == P_BYTES
    assert data == b"\x00" * 30 + b"\x01\x02"
    assert Fr.from_bytes(data) == Fr(value=258)


@pytest.mark.parametrize(
    "data, match",
    [
        pytest.param(b"\x00" * 31, "Expected 32 bytes", id="short"),
        pytest.param(b"\x00" * 33, "Expected 32 bytes", id="long"),
        pytest.param(P.to_bytes(32, "big"), "exceeds field modulus", id="modulus"),
        pytest.param(b"\xff" * 32, "exceeds field modulus", id="all_ones"),
    ],
)
def test_from_bytes_rejects_malformed(data: bytes, match: str) -> None:
    """Wrong lengths and non-canonical values are rejected."""
    with pytest.raises(ValueError, match=match):
        Fr.from_bytes(data)


def test_hex_encoding() -> None:
    """Hex is 0x-prefixed and zero-padded to 64 digits."""
    assert Fr(value=255).to_hex() == "0x" + "0" * 62 + "ff"
    assert Fr.from_hex("0xff") == Fr(value=255)
    assert Fr.from_hex("0XFF") == Fr(value=255)
    assert Fr.from_hex(Fr(value=P - 1).to_hex()) == Fr(value=P - 1)


@pytest.mark.parametrize(
    "text",
    [
        pytest.param("ff", id="no_prefix"),
        pytest.param("0x", id="empty"),
        pytest.param("0x" + "1" * 65, id="too_long"),
        pytest.param("0xzz", id="not_hex"),
        pytest.param(hex(P), id="modulus"),
    ],
)
def test_from_hex_rejects_malformed(text: str) -> None:
    """Malformed or non-canonical hex is rejected."""
    with pytest.raises(ValueError):
        Fr.from_hex(text)


def test_list_serialization() -> None:
    """Lists are concatenated 32-byte words."""
    elements = [Fr(value=1), Fr(value=2), Fr(value=P - 1)]
    data = Fr.serialize_list(elements)
    assert len(data) == 3 * P_BYTES
    assert Fr.deserialize_list(data) == elements
    assert Fr.deserialize_list(b"") == []

    with pytest.raises(ValueError, match="multiple of 32"):
        Fr.deserialize_list(b"\x00" * 33)
