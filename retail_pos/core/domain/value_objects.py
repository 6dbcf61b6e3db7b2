"""
Base Value Object Classes

Value Objects are immutable domain primitives that have no identity.
They are compared by their values, not by reference.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Self

from retail_pos.core.domain.exceptions import ValidationException

CURRENCY_PLACES = 2
RATIO_PLACES = 4

CENTS = Decimal(1).scaleb(-CURRENCY_PLACES)
RATIO_QUANTUM = Decimal(1).scaleb(-RATIO_PLACES)


def to_decimal(value: Any, field: str = "amount") -> Decimal:
    """
    Convert an exact numeric input to Decimal.

    Binary floats are refused: currency and percentage inputs must arrive as
    exact decimals, strings or integers.
    """
    if isinstance(value, Money):
        return value.amount
    if isinstance(value, (bool, float)) or not isinstance(value, (Decimal, int, str)):
        raise ValidationException(
            f"{field} must be an exact decimal value, got {type(value).__name__}",
            field=field,
        )
    try:
        result = value if isinstance(value, Decimal) else Decimal(value)
    except InvalidOperation:
        raise ValidationException(f"{field} is not a valid decimal: {value!r}", field=field) from None
    if not result.is_finite():
        raise ValidationException(f"{field} must be finite", field=field)
    return result


@dataclass(frozen=True)
class ValueObject:
    """
    Base class for all value objects.

    Value objects are:
    - Immutable (frozen=True)
    - Compared by value (dataclass equality)
    - Have no identity
    """

    def __post_init__(self):
        """Override to add validation logic."""
        self._validate()

    def _validate(self) -> None:
        """Validate the value object. Override in subclasses."""
        pass


@dataclass(frozen=True, order=True)
class Money(ValueObject):
    """
    Fixed-point money with two fractional digits.

    Every constructed value is quantized half-up to cents. Intermediate
    results may be negative; totals, subtotals and change are clamped by the
    caller with ``Money.max(..., Money.zero())`` or ``clamp_zero()``.

    Example:
        ```python
        price = Money.of("10.00")
        line = price.multiply(3)                       # 30.00
        tax = line.multiply(Decimal("0.08"))           # 2.40
        change = Money.of("40.00").subtract(line.add(tax))  # 7.60
        ```
    """

    amount: Decimal

    def _validate(self) -> None:
        amount = to_decimal(self.amount)
        object.__setattr__(self, "amount", amount.quantize(CENTS, ROUND_HALF_UP))

    def add(self, other: "Money") -> "Money":
        return Money(self.amount + other.amount)

    def subtract(self, other: "Money") -> "Money":
        """Subtract, allowing a negative result."""
        return Money(self.amount - other.amount)

    def multiply(self, factor: int | Decimal) -> "Money":
        """Multiply by a quantity or a decimal rate, rounding half-up to cents."""
        return Money(self.amount * to_decimal(factor, field="factor"))

    def divide(
        self,
        divisor: "Money | int | Decimal",
        places: int = CURRENCY_PLACES,
        rounding: str = ROUND_HALF_UP,
    ) -> Decimal:
        """
        Divide by a number or by another Money.

        Returns a plain Decimal at the requested scale so ratios can keep four
        places (e.g. ``discount.divide(total, RATIO_PLACES)``).

        Raises:
            ZeroDivisionError: If the divisor is zero
        """
        value = to_decimal(divisor, field="divisor")
        if value == 0:
            raise ZeroDivisionError("Cannot divide money by zero")
        return (self.amount / value).quantize(Decimal(1).scaleb(-places), rounding)

    @staticmethod
    def max(a: "Money", b: "Money") -> "Money":
        return a if a.amount >= b.amount else b

    @staticmethod
    def min(a: "Money", b: "Money") -> "Money":
        return a if a.amount <= b.amount else b

    def clamp_zero(self) -> "Money":
        """Return ``max(0, self)``."""
        return Money.max(self, Money.zero())

    def is_negative(self) -> bool:
        return self.amount < 0

    def is_zero(self) -> bool:
        return self.amount == 0

    def is_positive(self) -> bool:
        return self.amount > 0

    def __str__(self) -> str:
        return f"{self.amount:.2f}"

    def __repr__(self) -> str:
        return f"Money(amount={self.amount})"

    @classmethod
    def zero(cls) -> "Money":
        return cls(amount=Decimal("0"))

    @classmethod
    def of(cls, value: "Money | Decimal | int | str") -> "Money":
        """Build Money from an exact value (Decimal, int or numeric string)."""
        if isinstance(value, Money):
            return value
        return cls(amount=to_decimal(value))


@dataclass(frozen=True)
class Percentage(ValueObject):
    """
    Percentage value object in the closed range [0, 100].

    ``apply_to`` rounds once, half-up to cents; ``as_ratio`` is the four-place
    ratio used for reporting.
    """

    value: Decimal
    min_value: Decimal = Decimal("0")
    max_value: Decimal = Decimal("100")

    def _validate(self) -> None:
        value = to_decimal(self.value, field="percentage")
        if value < self.min_value or value > self.max_value:
            raise ValidationException(
                f"Percentage must be between {self.min_value} and {self.max_value}",
                field="percentage",
                details={"value": str(value)},
            )
        object.__setattr__(self, "value", value)

    def as_ratio(self) -> Decimal:
        """Get percentage as a four-place ratio (0.0000 - 1.0000)."""
        return (self.value / Decimal("100")).quantize(RATIO_QUANTUM, ROUND_HALF_UP)

    def apply_to(self, amount: Money) -> Money:
        """Portion of ``amount`` this percentage represents: ``round(amount * value / 100, 2)``."""
        return Money(amount.amount * self.value / Decimal("100"))

    def __str__(self) -> str:
        return f"{self.value}%"


class StatusEnum(str, Enum):
    """
    Base class for status enums.

    Provides common functionality for all status value objects.
    """

    @classmethod
    def values(cls) -> list[str]:
        """Get all possible values."""
        return [e.value for e in cls]

    @classmethod
    def from_string(cls, value: str) -> Self:
        """Create from string value (case-insensitive)."""
        for member in cls:
            if member.value.lower() == value.lower():
                return member
        raise ValidationException(f"Invalid {cls.__name__}: {value}", field=cls.__name__)
