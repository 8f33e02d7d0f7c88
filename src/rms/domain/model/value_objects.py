"""Immutable values used by the Item and Order aggregates.

``Money`` holds a fee or payment in pesos, always rounded to cents.
``DateRange`` is the inclusive rental period an order occupies.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from functools import total_ordering

from rms.domain.exceptions import ValidationError

CENTS = Decimal("0.01")


@total_ordering
@dataclass(frozen=True)
class Money:
    """A non-negative amount, rounded half-up to cents on construction."""

    amount: Decimal
    currency: str = "MXN"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Amount must be a Decimal, not {type(self.amount).__name__}"
            )
        if self.amount < 0:
            raise ValidationError(f"Negative amounts are not allowed ({self.amount})")
        object.__setattr__(self, "amount", self.amount.quantize(CENTS, rounding=ROUND_HALF_UP))

    @classmethod
    def of(cls, value: str | int | float | Decimal) -> Money:
        """Parse user input such as ``"1500"`` or ``"99.90"``."""
        try:
            return cls(Decimal(str(value).strip()))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Not a valid amount: {value!r}") from exc

    @classmethod
    def zero(cls) -> Money:
        return cls(Decimal(0))

    def __add__(self, other: Money) -> Money:
        return Money(self.amount + self._peer(other).amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        remainder = self.amount - self._peer(other).amount
        if remainder < 0:
            raise ValidationError(f"Cannot subtract {other} from {self}: result would be negative")
        return Money(remainder, self.currency)

    def __lt__(self, other: Money) -> bool:
        return self.amount < self._peer(other).amount

    def percentage(self, percent: int) -> Money:
        return Money(self.amount * percent / 100, self.currency)

    @property
    def is_zero(self) -> bool:
        return not self.amount

    def __str__(self) -> str:
        return f"${self.amount}"

    def _peer(self, other: Money) -> Money:
        if other.currency != self.currency:
            raise ValidationError(f"Currency mismatch: {self.currency} vs {other.currency}")
        return other


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-date range ``[start, end]``; start never after end."""

    start: date
    end: date

    def __post_init__(self) -> None:
        for bound in (self.start, self.end):
            if not isinstance(bound, date):
                raise ValidationError(
                    f"Date range bounds must be dates, got {type(bound).__name__}"
                )
        if self.start > self.end:
            raise ValidationError(
                f"Delivery date {self.start.isoformat()} is after "
                f"due date {self.end.isoformat()}"
            )

    def overlaps(self, other: DateRange) -> bool:
        return self.start <= other.end and other.start <= self.end

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def __str__(self) -> str:
        return f"{self.start.isoformat()}..{self.end.isoformat()}"
