"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import ClassVar, Sequence

from stockroom.domain.exceptions import (
    InvalidFiscalIdChecksumError,
    InvalidFiscalIdFormatError,
    MoneyOutOfRangeError,
    ValidationError,
)

MAX_AMOUNT = Decimal("999999.99")
_CENTS = Decimal("0.01")


@dataclass(frozen=True, order=True)
class Money:
    """Bounded monetary amount in Brazilian reais.

    Uses Decimal to avoid floating-point rounding errors that would be
    unacceptable in financial calculations.  Amounts are kept at a scale
    of two decimal places and must stay within ``0 <= amount <= 999999.99``;
    every arithmetic result is validated again.
    """

    amount: Decimal

    ZERO: ClassVar[Money]

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if not self.amount.is_finite():
            raise ValidationError(f"Money amount must be finite, got {self.amount}")
        if self.amount < 0:
            raise MoneyOutOfRangeError(
                f"Money amount cannot be negative, got {self.amount}"
            )
        if self.amount > MAX_AMOUNT:
            raise MoneyOutOfRangeError(
                f"Money amount cannot exceed {MAX_AMOUNT}, got {self.amount}"
            )
        object.__setattr__(
            self, "amount", abs(self.amount).quantize(_CENTS, rounding=ROUND_HALF_UP)
        )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.amount + other.amount)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        result = self.amount - other.amount
        if result < 0:
            raise MoneyOutOfRangeError(
                "Money subtraction would result in a negative amount"
            )
        return Money(result)

    def __mul__(self, factor: int | Decimal) -> Money:
        if isinstance(factor, bool) or not isinstance(factor, (int, Decimal)):
            raise TypeError(
                f"Can only multiply Money by int or Decimal, got {type(factor).__name__}"
            )
        return Money(self.amount * factor)

    __rmul__ = __mul__

    def __truediv__(self, divisor: int | Decimal) -> Money:
        return self.divide(divisor)

    def multiply(self, scalar: int | str | Decimal) -> Money:
        """Scale by an arbitrary non-negative factor (e.g. a discount rate)."""
        return Money(self.amount * _to_decimal(scalar))

    def divide(self, scalar: int | str | Decimal) -> Money:
        divisor = _to_decimal(scalar)
        if divisor == 0:
            raise ValidationError("Cannot divide Money by zero")
        return Money(self.amount / divisor)

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    # --- Display --------------------------------------------------------------

    def format_localized(self) -> str:
        """Render as Brazilian currency, e.g. ``R$ 1.234,56``."""
        integral, cents = f"{self.amount:.2f}".split(".")
        grouped = f"{int(integral):,}".replace(",", ".")
        return f"R$ {grouped},{cents}"

    def format_plain(self) -> str:
        return f"{self.amount:.2f}"

    def __str__(self) -> str:
        return self.format_localized()

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def of(amount: str | float | int | Decimal) -> Money:
        """Convenient factory that coerces to Decimal safely."""
        return Money(_to_decimal(amount))


Money.ZERO = Money(Decimal("0"))


def _to_decimal(value: str | float | int | Decimal) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"Invalid money amount: {value!r}")
    try:
        return value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"Invalid money amount: {value!r}") from exc


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot order zero or negative items.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)


# ---------------------------------------------------------------------------
# Fiscal identity (CPF / CNPJ)
# ---------------------------------------------------------------------------


class FiscalIdType(Enum):
    INDIVIDUAL = "CPF"
    ORGANIZATION = "CNPJ"


_NON_DIGITS = re.compile(r"[^0-9]")

_WEIGHTS: dict[FiscalIdType, tuple[tuple[int, ...], tuple[int, ...]]] = {
    FiscalIdType.INDIVIDUAL: (
        tuple(range(10, 1, -1)),
        tuple(range(11, 1, -1)),
    ),
    FiscalIdType.ORGANIZATION: (
        (5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2),
        (6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2),
    ),
}

_LENGTHS = {11: FiscalIdType.INDIVIDUAL, 14: FiscalIdType.ORGANIZATION}


def check_digit(digits: str, weights: Sequence[int]) -> int:
    """Mod-11 verification digit of ``digits`` under ``weights``."""
    total = sum(int(d) * w for d, w in zip(digits, weights))
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


@dataclass(frozen=True)
class FiscalId:
    """A validated CPF (11 digits) or CNPJ (14 digits).

    ``digits`` is always the canonical, unformatted digit string.  Use
    ``FiscalId.of()`` to build one from user input that may contain dots,
    slashes or dashes.
    """

    digits: str

    def __post_init__(self) -> None:
        if (
            not isinstance(self.digits, str)
            or not self.digits.isascii()
            or not self.digits.isdigit()
        ):
            raise InvalidFiscalIdFormatError("Fiscal ID must contain only digits")
        kind = _LENGTHS.get(len(self.digits))
        if kind is None:
            raise InvalidFiscalIdFormatError(
                f"Fiscal ID must have 11 (CPF) or 14 (CNPJ) digits, "
                f"got {len(self.digits)}"
            )
        if len(set(self.digits)) == 1:
            raise InvalidFiscalIdChecksumError(
                f"Invalid {kind.value}: all digits are identical"
            )

        first, second = _WEIGHTS[kind]
        size = len(first)
        if check_digit(self.digits[:size], first) != int(self.digits[size]):
            raise InvalidFiscalIdChecksumError(
                f"Invalid {kind.value}: first check digit does not match"
            )
        if check_digit(self.digits[: size + 1], second) != int(self.digits[size + 1]):
            raise InvalidFiscalIdChecksumError(
                f"Invalid {kind.value}: second check digit does not match"
            )

    @property
    def kind(self) -> FiscalIdType:
        return _LENGTHS[len(self.digits)]

    @property
    def is_individual(self) -> bool:
        return self.kind is FiscalIdType.INDIVIDUAL

    @property
    def is_organization(self) -> bool:
        return self.kind is FiscalIdType.ORGANIZATION

    @property
    def formatted(self) -> str:
        d = self.digits
        if self.is_individual:
            return f"{d[:3]}.{d[3:6]}.{d[6:9]}-{d[9:]}"
        return f"{d[:2]}.{d[2:5]}.{d[5:8]}/{d[8:12]}-{d[12:]}"

    @property
    def masked(self) -> str:
        """Display form that reveals only the two check digits."""
        if self.is_individual:
            return f"***.***.***-{self.digits[9:]}"
        return f"**.***.***/****-{self.digits[12:]}"

    def __str__(self) -> str:
        return self.formatted

    @staticmethod
    def of(raw: str) -> FiscalId:
        """Strip formatting characters and validate."""
        if not isinstance(raw, str) or not raw.strip():
            raise InvalidFiscalIdFormatError("Fiscal ID is required")
        return FiscalId(_NON_DIGITS.sub("", raw))
