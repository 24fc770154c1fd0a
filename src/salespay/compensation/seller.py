"""Seller aggregate — base salary, commission policy and sales ledger.

The seller owns its sales ledger. Each SalesRecord added through
add_sale() is bound back to the seller by id, so the association is
bidirectional without the record holding the seller object.

The aggregate is not thread-safe. Callers mutating one seller from
several threads must serialise add_sale() themselves.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

from salespay.compensation.engine import SalaryEngine
from salespay.compensation.ledger import SalesLedger
from salespay.models.commission import CommissionPolicy, SalaryBreakdown
from salespay.models.sales import Department, SalesRecord, to_decimal


_ENGINE = SalaryEngine()


@dataclass
class Seller:
    """A seller and everything needed to compute their salary.

    Mutable: sales are appended over time and the commission policy may
    be reassigned. Sales are never removed.
    """
    seller_id: int
    name: str
    email: str
    birth_date: date
    base_salary: Decimal
    department: Department
    commission: Optional[CommissionPolicy] = None
    _ledger: SalesLedger = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.base_salary = to_decimal(self.base_salary, "base_salary")
        if self.base_salary < Decimal("0"):
            raise ValueError(
                f"Base salary must be non-negative, got {self.base_salary}"
            )
        self._ledger = SalesLedger(self.seller_id)

    @property
    def sales(self) -> Tuple[SalesRecord, ...]:
        return self._ledger.records()

    @property
    def ledger(self) -> SalesLedger:
        return self._ledger

    def add_sale(self, record: SalesRecord) -> SalesRecord:
        """Append a sale and bind it to this seller.

        Returns:
            The record as stored, with seller_id set to this seller.

        Raises:
            ValueError: If the record is already bound to another seller.
            InvalidSaleAmount: If the amount is negative.
        """
        if record.seller_id is not None and record.seller_id != self.seller_id:
            raise ValueError(
                f"Sale {record.record_id} already belongs to seller "
                f"{record.seller_id}"
            )
        bound = dataclasses.replace(record, seller_id=self.seller_id)
        self._ledger.record(bound)
        return bound

    def assign_commission(self, policy: Optional[CommissionPolicy]) -> None:
        """Replace the commission policy. None removes commission."""
        self.commission = policy

    def salary_breakdown(self) -> SalaryBreakdown:
        return _ENGINE.compute_salary(
            self.base_salary,
            self.commission,
            self._ledger.amounts(),
            seller_id=self.seller_id,
        )

    def calculate_salary(self) -> Decimal:
        """Return base salary plus commission on every recorded sale."""
        return self.salary_breakdown().total
