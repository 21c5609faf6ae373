"""Complex amplitude value type."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class Amplitude:
    """
    One complex amplitude of a basis state.

    State vectors are stored as complex tensors; this value type is what
    snapshots, the wire format and the renderer exchange.
    """

    real: float
    imaginary: float = 0.0

    ZERO: ClassVar["Amplitude"]
    ONE: ClassVar["Amplitude"]
    I: ClassVar["Amplitude"]

    @property
    def magnitude(self) -> float:
        """Return sqrt(real**2 + imaginary**2)."""
        return math.sqrt(self.real * self.real + self.imaginary * self.imaginary)

    @property
    def probability(self) -> float:
        """Return the Born-rule weight |amplitude|**2."""
        return self.real * self.real + self.imaginary * self.imaginary

    def conjugate(self) -> "Amplitude":
        return Amplitude(self.real, -self.imaginary)

    def to_complex(self) -> complex:
        return complex(self.real, self.imaginary)

    @classmethod
    def from_complex(cls, value: complex) -> "Amplitude":
        value = complex(value)
        return cls(float(value.real), float(value.imag))


Amplitude.ZERO = Amplitude(0.0, 0.0)
Amplitude.ONE = Amplitude(1.0, 0.0)
Amplitude.I = Amplitude(0.0, 1.0)
