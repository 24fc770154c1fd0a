"""Sales ledger — the append-only collection of a seller's recorded sales.

The ledger is the data source for salary computation. Each ledger
belongs to exactly one seller and only holds records bound to it.

Records are never removed or mutated once recorded. Insertion order is
preserved; duplicate amounts and duplicate record ids are allowed.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Tuple

from salespay.models.sales import SaleStatus, SalesRecord, check_sale_amount


class SalesLedger:
    """In-memory ledger of one seller's sales.

    Usage:
        ledger = SalesLedger(seller_id=4)
        ledger.record(sale)

        # For salary computation:
        amounts = ledger.amounts()
    """

    def __init__(self, seller_id: int) -> None:
        self._seller_id = seller_id
        self._records: List[SalesRecord] = []

    @property
    def seller_id(self) -> int:
        return self._seller_id

    def record(self, record: SalesRecord) -> None:
        """Append a sale bound to this ledger's seller.

        Raises:
            ValueError: If the record is bound to another seller.
            InvalidSaleAmount: If the amount is negative.
        """
        if record.seller_id != self._seller_id:
            raise ValueError(
                f"Sale {record.record_id} belongs to seller {record.seller_id}, "
                f"not {self._seller_id}"
            )
        check_sale_amount(record.amount)
        self._records.append(record)

    def records(self) -> Tuple[SalesRecord, ...]:
        """Return all records in insertion order."""
        return tuple(self._records)

    def amounts(self) -> Tuple[Decimal, ...]:
        """Return every sale amount, whatever its status."""
        return tuple(r.amount for r in self._records)

    def total(self) -> Decimal:
        return sum((r.amount for r in self._records), Decimal("0"))

    def records_with_status(self, status: SaleStatus) -> Tuple[SalesRecord, ...]:
        """Return records with the given status, in insertion order.

        Query helper only. Salary computation does not filter by status.
        """
        return tuple(r for r in self._records if r.status == status)

    @property
    def count(self) -> int:
        return len(self._records)
