"""
Canonical field encodings for deposit parameters.

Token addresses, recipients and amounts arrive as user-facing strings. They
are validated and converted to integers here, before anything is hashed, so
a malformed input can never produce a commitment.
"""

from __future__ import annotations

import string

from shadow_pool.types import EncodingError

from ..bn254.field import P, Fr
from ..pool_config import TARGET_CONFIG, PoolConfig

_HEX_DIGITS = frozenset(string.hexdigits)


def _hex_digits(text: object, field_name: str) -> str:
    """Return the digits of a `0x`-prefixed hex string or raise `EncodingError`."""
    if not isinstance(text, str):
        raise EncodingError(field_name, "expected a 0x-prefixed hex string", text)

    if not text.startswith(("0x", "0X")):
        raise EncodingError(field_name, "missing 0x prefix", text)

    digits = text[2:]
    if not digits or not _HEX_DIGITS.issuperset(digits):
        raise EncodingError(field_name, "not a hex string", text)

    return digits


def canonicalize_address(
    address: str,
    field_name: str = "address",
    config: PoolConfig = TARGET_CONFIG,
) -> int:
    """
    Convert a chain address to its canonical 160-bit integer.

    Only standard-length addresses (`0x` followed by 40 hex digits, any case)
    are accepted. Longer inputs are rejected rather than truncated.

    Raises:
        EncodingError: If the address is not exactly 20 hex-encoded bytes.
    """
    digits = _hex_digits(address, field_name)

    if len(digits) != config.ADDRESS_HEX_LEN:
        raise EncodingError(
            field_name,
            f"expected {config.ADDRESS_HEX_LEN} hex digits, got {len(digits)}",
            address,
        )

    return int(digits, 16)


def canonicalize_token(token: str, config: PoolConfig = TARGET_CONFIG) -> int:
    """
    Convert a token address to the integer bound into the commitment.

    Native ETH is token 0. It may be given either as the zero address or as
    the 32-byte zero word some wallets emit.

    Raises:
        EncodingError: If the token is not a standard-length address or the
            32-byte zero word.
    """
    digits = _hex_digits(token, "token")

    if len(digits) == config.WIDE_ZERO_HEX_LEN and int(digits, 16) == 0:
        return 0

    return canonicalize_address(token, "token", config)


def canonicalize_amount(amount: int | str) -> int:
    """
    Convert an amount in base units (wei) to an integer below the field modulus.

    Accepts a non-negative int, a decimal string, or a `0x` hex string.
    Amounts are never reduced or truncated: anything that does not fit the
    field is rejected.

    Raises:
        EncodingError: If the amount is not numeric, negative, or not below P.
    """
    if isinstance(amount, bool):
        raise EncodingError("amount", "expected an integer, got a boolean", amount)

    if isinstance(amount, int):
        value = amount
    elif isinstance(amount, str):
        if amount.startswith(("0x", "0X")):
            value = int(_hex_digits(amount, "amount"), 16)
        elif amount.isascii() and amount.isdigit():
            value = int(amount, 10)
        else:
            raise EncodingError("amount", "not a decimal or hex integer", amount)
    else:
        raise EncodingError("amount", "expected an int or a numeric string", amount)

    if value < 0:
        raise EncodingError("amount", "must not be negative", amount)

    if value >= P:
        raise EncodingError("amount", "does not fit in the scalar field", amount)

    return value


def recipient_to_field(recipient: str | Fr, config: PoolConfig = TARGET_CONFIG) -> Fr:
    """Canonicalize a withdrawal recipient into the field element the circuit binds."""
    if isinstance(recipient, Fr):
        if recipient.value >= 1 << config.ADDRESS_BITS:
            raise EncodingError("recipient", "does not fit in a 160-bit address", recipient.value)
        return recipient
    return Fr(value=canonicalize_address(recipient, "recipient", config))
