"""Secure random field elements for nullifiers and secrets."""

import secrets
from typing import Callable

from shadow_pool.types import RandomnessError

from ..bn254.field import P, Fr

RandBelow = Callable[[int], int]
"""A source returning a uniform integer in `[0, n)`."""


class Rand:
    """
    Uniform sampler over the BN254 scalar field.

    The default source is `secrets.randbelow`, backed by the operating
    system CSPRNG. Tests may inject a deterministic or failing source.
    """

    def __init__(self, randbelow: RandBelow = secrets.randbelow):
        """Initializes with a uniform integer source."""
        self._randbelow = randbelow

    def field_element(self) -> Fr:
        """
        Draw one uniformly random field element.

        Raises:
            RandomnessError: If the source is unavailable or misbehaves.
        """
        try:
            value = self._randbelow(P)
        except (OSError, NotImplementedError) as exc:
            raise RandomnessError(f"Secure random source unavailable: {exc}") from exc

        if not 0 <= value < P:
            raise RandomnessError(f"Random source returned a value outside [0, P): {value}")

        return Fr(value=value)


PROD_RAND = Rand()
"""The operating-system backed sampler."""
