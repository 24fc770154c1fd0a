"""Sales models — departments, sale records and monetary coercion.

All monetary values use Decimal for exact arithmetic. No floats in finance.

A SalesRecord carries its status and date as informational fields only.
The salary computation includes every record attached to a seller,
whatever its status.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Union


Money = Union[Decimal, int, str]


class InvalidSaleAmount(ValueError):
    """A sale amount is negative."""


def to_decimal(value: Money, field_name: str = "value") -> Decimal:
    """Normalise an int, str or Decimal to Decimal.

    Raises:
        TypeError: If value is a float (or any other non-monetary type).
        ValueError: If a string does not parse as a finite decimal.
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(
            f"{field_name} must be Decimal, int or str, "
            f"got {type(value).__name__}"
        )
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(value)
        except InvalidOperation:
            raise ValueError(f"{field_name} is not a decimal: {value!r}") from None
    else:
        raise TypeError(
            f"{field_name} must be Decimal, int or str, "
            f"got {type(value).__name__}"
        )
    if not result.is_finite():
        raise ValueError(f"{field_name} must be finite, got {value!r}")
    return result


def check_sale_amount(amount: Decimal) -> Decimal:
    """Reject negative amounts before they reach a sum."""
    if amount < Decimal("0"):
        raise InvalidSaleAmount(f"Sale amount must be non-negative, got {amount}")
    return amount


class SaleStatus(str, enum.Enum):
    """Billing status of a sale. Carried, never filtered on."""
    PENDING = "pending"
    BILLED = "billed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Department:
    """A department sellers belong to. No behaviour."""
    department_id: int
    name: str


@dataclass(frozen=True)
class SalesRecord:
    """A single recorded sale.

    seller_id is a non-owning back-reference to the seller the record is
    attached to. It is None until the record is added to a seller.
    """
    record_id: int
    amount: Decimal
    status: SaleStatus
    date: datetime
    seller_id: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount, "amount"))
