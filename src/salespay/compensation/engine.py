"""Salary engine — combines base salary with the commission a policy yields.

The formula is the same for every policy:

    sales_total = Σ sale amounts (all statuses, any order)
    commission  = policy.compute(sale amounts)     (0 when no policy)
    salary      = base_salary + commission

The goal-based policy follows the same rule: when the goal is met the
seller receives base salary plus the two-bracket commission, and when it
is missed the seller receives base salary alone.

Invariants:
- salary == base_salary + Σ bracket commissions
- The computation is a pure fold: repeating it gives the same result
- Every computation produces a full published breakdown
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

from salespay.models.commission import (
    CommissionPolicy,
    NoCommission,
    SalaryBreakdown,
    total_sales,
)


class SalaryEngine:
    """Computes a seller's salary and its breakdown.

    Usage:
        engine = SalaryEngine()
        breakdown = engine.compute_salary(
            base_salary=Decimal("1000.0"),
            policy=TieredCommission.from_lists(["10000", "13000"], ["0.1", "0.15"]),
            amounts=[Decimal("80.0"), Decimal("590.5")],
        )
        breakdown.total  # Decimal("1067.05")
    """

    def compute_salary(
        self,
        base_salary: Decimal,
        policy: Optional[CommissionPolicy],
        amounts: Iterable[Decimal],
        seller_id: int = 0,
    ) -> SalaryBreakdown:
        """Compute the full salary breakdown.

        Args:
            base_salary: The seller's fixed compensation.
            policy: The assigned commission policy, or None for no commission.
            amounts: Every sale amount attached to the seller.
            seller_id: Recorded on the breakdown for auditing.

        Returns:
            A frozen SalaryBreakdown whose total is the salary.
        """
        if policy is None:
            policy = NoCommission()

        amounts = tuple(amounts)
        sales_total = total_sales(amounts)
        brackets = policy.brackets(sales_total)
        commission = sum((b.commission for b in brackets), Decimal("0"))

        return SalaryBreakdown(
            seller_id=seller_id,
            base_salary=base_salary,
            sales_total=sales_total,
            sale_count=len(amounts),
            policy_kind=policy.kind,
            brackets=brackets,
            commission=commission,
            total=base_salary + commission,
        )
