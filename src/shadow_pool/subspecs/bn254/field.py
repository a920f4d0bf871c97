"""Core definition of the BN254 scalar field Fr."""

from typing import Self

from pydantic import Field

from shadow_pool.types import StrictBaseModel

# =================================================================
# Field Constants
#
# The scalar field of the BN254 curve. Noir circuits, the Barretenberg
# backend and the on-chain verifier all operate over this prime.
# =================================================================

P: int = 21888242871839275222246405745257275088548364400416034343698204186575808495617
"""The BN254 scalar field modulus."""

P_BITS: int = 254
"""The number of bits in the prime P."""

P_BYTES: int = 32
"""
The size of an encoded field element in bytes.

Elements cross the chain boundary as `bytes32`, so the encoding is fixed
at 32 bytes even though two high bits are always zero.
"""


# =================================================================
# Scalar Field Fr
#
# Every tree node, commitment, nullifier and secret is an Fr element.
# Construction rejects values outside [0, P): inputs are never silently
# reduced. Arithmetic results are reduced modulo P explicitly.
# =================================================================


class Fr(StrictBaseModel):
    """An element in the BN254 scalar field."""

    value: int = Field(ge=0, lt=P, description="Canonical field element value in the range [0, P)")

    @classmethod
    def zero(cls) -> Self:
        """The additive identity."""
        return cls(value=0)

    @classmethod
    def one(cls) -> Self:
        """The multiplicative identity."""
        return cls(value=1)

    @classmethod
    def reduce(cls, value: int) -> Self:
        """
        Build an element from an arbitrary integer by reducing it modulo P.

        Only for values that are field arithmetic results by construction
        (hash outputs, digests). User-supplied inputs go through the
        constructor, which rejects out-of-range values.
        """
        return cls(value=value % P)

    def __add__(self, other: Self) -> Self:
        """Field addition."""
        return self.__class__(value=(self.value + other.value) % P)

    def __sub__(self, other: Self) -> Self:
        """Field subtraction."""
        return self.__class__(value=(self.value - other.value) % P)

    def __neg__(self) -> Self:
        """Field negation."""
        return self.__class__(value=(-self.value) % P)

    def __mul__(self, other: Self) -> Self:
        """Field multiplication."""
        return self.__class__(value=(self.value * other.value) % P)

    def __pow__(self, exponent: int) -> Self:
        """Field exponentiation."""
        return self.__class__(value=pow(self.value, exponent, P))

    def inverse(self) -> Self:
        """Computes the multiplicative inverse."""
        if self.value == 0:
            raise ZeroDivisionError("Cannot invert the zero element.")
        # a^(P-2) is the multiplicative inverse of a in F_p
        return self ** (P - 2)

    def __truediv__(self, other: Self) -> Self:
        """Field division."""
        return self * other.inverse()

    def __bytes__(self) -> bytes:
        """
        Serialize the field element using Python's bytes protocol.

        Returns:
            32-byte big-endian representation, the `bytes32` ABI layout.

        Example:
            >>> len(bytes(Fr(value=42)))
            32
        """
        return self.value.to_bytes(P_BYTES, byteorder="big")

    @classmethod
    def from_bytes(cls, data: bytes) -> Self:
        """
        Deserialize a field element from its 32-byte big-endian encoding.

        Args:
            data: Exactly 32 bytes.

        Returns:
            Deserialized field element.

        Raises:
            ValueError: If data has incorrect length or is not a canonical field value.
        """
        if len(data) != P_BYTES:
            raise ValueError(f"Expected {P_BYTES} bytes, got {len(data)}")

        value = int.from_bytes(data, byteorder="big")

        if value >= P:
            raise ValueError(f"Value 0x{value:064x} exceeds field modulus")

        return cls(value=value)

    def to_hex(self) -> str:
        """Return the `0x`-prefixed, zero-padded 64 digit hex encoding."""
        return "0x" + bytes(self).hex()

    @classmethod
    def from_hex(cls, text: str) -> Self:
        """
        Parse a `0x`-prefixed hex string of at most 64 digits.

        Raises:
            ValueError: If the prefix is missing, the digits are not hex,
                the string is too long, or the value is not canonical.
        """
        if not text.startswith(("0x", "0X")):
            raise ValueError(f"Hex field element must start with 0x: {text!r}")

        digits = text[2:]
        if not 0 < len(digits) <= 2 * P_BYTES:
            raise ValueError(f"Hex field element must have 1 to 64 digits, got {len(digits)}")

        value = int(digits, 16)
        if value >= P:
            raise ValueError(f"Value {text} exceeds field modulus")

        return cls(value=value)

    @classmethod
    def serialize_list(cls, elements: list[Self]) -> bytes:
        """
        Serialize a list of field elements to concatenated 32-byte words.

        This is the flattened public-input layout produced by the proving
        backend and consumed by the on-chain verifier.
        """
        return b"".join(bytes(elem) for elem in elements)

    @classmethod
    def deserialize_list(cls, data: bytes) -> list[Self]:
        """
        Deserialize concatenated 32-byte words into field elements.

        Raises:
            ValueError: If the length is not a multiple of 32 or a word is not canonical.
        """
        if len(data) % P_BYTES != 0:
            raise ValueError(f"Expected a multiple of {P_BYTES} bytes, got {len(data)}")

        return [cls.from_bytes(data[i : i + P_BYTES]) for i in range(0, len(data), P_BYTES)]
