"""Deposit commitments, nullifier hashes and canonical input encodings."""

from .encoding import (
    canonicalize_address,
    canonicalize_amount,
    canonicalize_token,
    recipient_to_field,
)
from .rand import PROD_RAND, Rand
from .scheme import CommitmentScheme, DepositNote

__all__ = [
    "PROD_RAND",
    "CommitmentScheme",
    "DepositNote",
    "Rand",
    "canonicalize_address",
    "canonicalize_amount",
    "canonicalize_token",
    "recipient_to_field",
]
