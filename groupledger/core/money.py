"""
Fixed-precision money.

Amounts are held as integer cents so splitting and balance arithmetic never
drift. Conversion to and from ``Decimal`` happens only at the boundary.
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from groupledger.core.exceptions import InvalidAmount
from groupledger.core.utils import CENTS, qround


@dataclass(frozen=True, order=True)
class Money:
    cents: int = 0

    @classmethod
    def of(cls, value) -> "Money":
        """Build from a Decimal, int, float or numeric string (ROUND_HALF_UP to cents)."""
        if isinstance(value, Money):
            return value
        if isinstance(value, bool) or value is None:
            raise InvalidAmount(f"Not a valid amount: {value!r}")
        try:
            dec = value if isinstance(value, Decimal) else Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise InvalidAmount(f"Not a valid amount: {value!r}")
        if not dec.is_finite():
            raise InvalidAmount(f"Not a valid amount: {value!r}")
        return cls(int(qround(dec) / CENTS))

    @classmethod
    def from_cents(cls, cents: int) -> "Money":
        return cls(int(cents))

    @classmethod
    def zero(cls) -> "Money":
        return cls(0)

    def to_decimal(self) -> Decimal:
        return Decimal(self.cents) * CENTS

    @property
    def is_zero(self) -> bool:
        return self.cents == 0

    @property
    def is_positive(self) -> bool:
        return self.cents > 0

    @property
    def is_negative(self) -> bool:
        return self.cents < 0

    def __add__(self, other):
        if isinstance(other, Money):
            return Money(self.cents + other.cents)
        return NotImplemented

    def __radd__(self, other):
        # lets sum() start from 0
        if other == 0:
            return self
        return NotImplemented

    def __sub__(self, other):
        if isinstance(other, Money):
            return Money(self.cents - other.cents)
        return NotImplemented

    def __neg__(self):
        return Money(-self.cents)

    def __abs__(self):
        return Money(abs(self.cents))

    def __bool__(self):
        return self.cents != 0

    def __str__(self):
        return str(self.to_decimal())
