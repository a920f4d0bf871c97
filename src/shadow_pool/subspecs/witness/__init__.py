"""Membership-proof witnesses."""

from .assembler import Witness, WitnessAssembler

__all__ = ["Witness", "WitnessAssembler"]
