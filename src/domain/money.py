"""Money value object: an immutable, non-negative decimal amount."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from src.services.errors import ValidationError

CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """Convert int/float/str/Decimal to Decimal without float artefacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round2(value: Decimal) -> Decimal:
    """Round to 2 decimal places, halves away from zero."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True, order=True)
class Money:
    """Non-negative amount of currency.

    Construction with a negative value raises ValidationError, and so does a
    subtraction whose result would be negative.
    """

    amount: Decimal

    def __post_init__(self) -> None:
        amount = to_decimal(self.amount)
        if amount < 0:
            raise ValidationError(f"Money amount cannot be negative: {amount}")
        object.__setattr__(self, "amount", amount)

    @classmethod
    def zero(cls) -> "Money":
        return cls(Decimal("0"))

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.amount + other.amount)

    def __sub__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.amount - other.amount)

    def __str__(self) -> str:
        return str(self.amount)


__all__ = ["Money", "CENT", "round2", "to_decimal"]
