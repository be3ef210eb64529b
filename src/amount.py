from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Union

from exceptions import AmountOverflowError

SCALE = 4
UNITS_PER_WHOLE = 10 ** SCALE
_SMALLEST_UNIT = Decimal(1).scaleb(-SCALE)

# Signed 64-bit count of 1/10000 units.
MAX_UNITS = 2 ** 63 - 1
MIN_UNITS = -(2 ** 63)

# Anything with more integer digits than this is out of range before scaling.
_MAX_ADJUSTED_EXPONENT = 20


@dataclass(frozen=True, order=True)
class Amount:
    """
    Signed fixed-point money value with four fractional digits.
    Stored as an integer number of 1/10000 units, so arithmetic is exact.
    """

    units: int = 0

    def __post_init__(self):
        if not isinstance(self.units, int) or isinstance(self.units, bool):
            raise TypeError(f"units must be int, got {type(self.units).__name__}")
        if not MIN_UNITS <= self.units <= MAX_UNITS:
            raise AmountOverflowError(f"{self.units} units")

    @classmethod
    def zero(cls) -> "Amount":
        return cls(0)

    @classmethod
    def parse(cls, text: str) -> "Amount":
        """
        Parse a decimal string such as "1.5" or "-0.0001".

        Digits past the fourth fractional place are truncated toward zero.
        Raises ValueError for non-numeric or non-finite input.
        """
        try:
            value = Decimal(text.strip())
        except InvalidOperation as e:
            raise ValueError(f"Invalid amount: {text!r}") from e
        return cls.from_decimal(value)

    @classmethod
    def from_decimal(cls, value: Union[Decimal, int]) -> "Amount":
        if isinstance(value, int):
            value = Decimal(value)
        if not value.is_finite():
            raise ValueError(f"Invalid amount: {value}")
        if value.is_zero():
            return cls(0)
        if value.adjusted() > _MAX_ADJUSTED_EXPONENT:
            raise AmountOverflowError(str(value))
        if value.adjusted() < -SCALE:
            # entirely below the smallest unit
            return cls(0)

        truncated = value.quantize(_SMALLEST_UNIT, rounding=ROUND_DOWN)
        return cls(int(truncated.scaleb(SCALE)))

    @property
    def is_negative(self) -> bool:
        return self.units < 0

    @property
    def is_positive(self) -> bool:
        return self.units > 0

    def __add__(self, other: "Amount") -> "Amount":
        if not isinstance(other, Amount):
            return NotImplemented
        return Amount(self.units + other.units)

    def __sub__(self, other: "Amount") -> "Amount":
        if not isinstance(other, Amount):
            return NotImplemented
        return Amount(self.units - other.units)

    def __neg__(self) -> "Amount":
        return Amount(-self.units)

    def __str__(self) -> str:
        whole, fraction = divmod(abs(self.units), UNITS_PER_WHOLE)
        sign = "-" if self.units < 0 else ""
        return f"{sign}{whole}.{fraction:0{SCALE}d}"

    def __repr__(self) -> str:
        return f"Amount({self})"
