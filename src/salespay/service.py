"""Payroll service — facade over sellers, commission plans and the audit log.

This is the interface external collaborators call. It orchestrates:
- Seller registration with a named commission plan
- Plan reassignment
- Sale recording (append-only)
- Salary calculation with a full breakdown

All operations produce typed results. Domain errors are reported in the
result instead of raised. Audit events are appended before the state
change they describe; if the audit append fails, neither the service nor
the log is changed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from salespay.compensation.seller import Seller
from salespay.models.commission import SalaryBreakdown
from salespay.models.sales import (
    Department,
    InvalidSaleAmount,
    Money,
    SaleStatus,
    SalesRecord,
    check_sale_amount,
)
from salespay.persistence.event_log import EventKind, EventLog, PayrollEvent
from salespay.policy.resolver import PolicyResolver, policy_to_params


@dataclass
class ServiceResult:
    """Result of a service operation."""
    success: bool
    errors: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)


def _breakdown_payload(breakdown: SalaryBreakdown) -> dict[str, Any]:
    return {
        "base_salary": breakdown.base_salary,
        "sales_total": breakdown.sales_total,
        "sale_count": breakdown.sale_count,
        "policy_kind": breakdown.policy_kind,
        "commission": breakdown.commission,
        "total": breakdown.total,
        "brackets": [
            {"lower": b.lower, "amount": b.amount, "rate": b.rate, "commission": b.commission}
            for b in breakdown.brackets
        ],
    }


class PayrollService:
    """Payroll facade.

    Usage:
        resolver = PolicyResolver.from_config_dir(config_dir)
        service = PayrollService(resolver)

        service.register_seller(4, "Washington Elliot", "eli@example.com",
                                date(2010, 1, 15), Decimal("1000.0"),
                                Department(3, "Books"), plan="books_tiered")
        service.record_sale(4, record_id=1, amount=Decimal("80.0"))
        result = service.calculate_salary(4)
        result.data["salary"]

    Persistence of the audit trail (optional):
        service = PayrollService(resolver, event_log=EventLog(path))
    """

    def __init__(
        self,
        resolver: PolicyResolver,
        event_log: Optional[EventLog] = None,
    ) -> None:
        self._resolver = resolver
        self._event_log = event_log
        self._sellers: dict[int, Seller] = {}

    # ------------------------------------------------------------------
    # Sellers
    # ------------------------------------------------------------------

    def register_seller(
        self,
        seller_id: int,
        name: str,
        email: str,
        birth_date: date,
        base_salary: Money,
        department: Department,
        plan: Optional[str] = None,
    ) -> ServiceResult:
        """Register a seller, optionally with a named commission plan."""
        if seller_id in self._sellers:
            return ServiceResult(
                success=False, errors=[f"Seller already registered: {seller_id}"],
            )
        try:
            policy = self._resolver.policy(plan) if plan is not None else None
            seller = Seller(
                seller_id=seller_id,
                name=name,
                email=email,
                birth_date=birth_date,
                base_salary=base_salary,
                department=department,
                commission=policy,
            )
        except KeyError as e:
            return ServiceResult(success=False, errors=[str(e.args[0])])
        except (TypeError, ValueError) as e:
            return ServiceResult(success=False, errors=[str(e)])

        err = self._record_event(
            EventKind.SELLER_REGISTERED,
            seller_id,
            {
                "seller_id": seller_id,
                "department_id": department.department_id,
                "base_salary": seller.base_salary,
                "plan": plan,
            },
        )
        if err:
            return ServiceResult(success=False, errors=[err])

        self._sellers[seller_id] = seller
        return ServiceResult(success=True, data={"seller_id": seller_id})

    def get_seller(self, seller_id: int) -> Optional[Seller]:
        return self._sellers.get(seller_id)

    def assign_plan(self, seller_id: int, plan: Optional[str]) -> ServiceResult:
        """Replace a seller's commission plan. None removes commission."""
        seller = self._sellers.get(seller_id)
        if seller is None:
            return ServiceResult(success=False, errors=[f"Seller not found: {seller_id}"])
        try:
            policy = self._resolver.policy(plan) if plan is not None else None
        except KeyError as e:
            return ServiceResult(success=False, errors=[str(e.args[0])])

        err = self._record_event(
            EventKind.COMMISSION_ASSIGNED,
            seller_id,
            {
                "seller_id": seller_id,
                "plan": plan,
                "params": policy_to_params(policy) if policy is not None else None,
            },
        )
        if err:
            return ServiceResult(success=False, errors=[err])

        seller.assign_commission(policy)
        return ServiceResult(success=True, data={"seller_id": seller_id, "plan": plan})

    # ------------------------------------------------------------------
    # Sales
    # ------------------------------------------------------------------

    def record_sale(
        self,
        seller_id: int,
        record_id: int,
        amount: Money,
        status: SaleStatus = SaleStatus.BILLED,
        sale_date: Optional[datetime] = None,
    ) -> ServiceResult:
        """Append a sale to a seller's ledger."""
        seller = self._sellers.get(seller_id)
        if seller is None:
            return ServiceResult(success=False, errors=[f"Seller not found: {seller_id}"])
        try:
            record = SalesRecord(
                record_id=record_id,
                amount=amount,
                status=status,
                date=sale_date or datetime.now(timezone.utc),
                seller_id=seller_id,
            )
            check_sale_amount(record.amount)
        except (TypeError, ValueError) as e:
            return ServiceResult(success=False, errors=[str(e)])

        err = self._record_event(
            EventKind.SALE_RECORDED,
            seller_id,
            {
                "seller_id": seller_id,
                "record_id": record_id,
                "amount": record.amount,
                "status": record.status,
            },
        )
        if err:
            return ServiceResult(success=False, errors=[err])

        seller.add_sale(record)
        return ServiceResult(
            success=True,
            data={"seller_id": seller_id, "record_id": record_id, "sale_count": len(seller.sales)},
        )

    # ------------------------------------------------------------------
    # Salary
    # ------------------------------------------------------------------

    def calculate_salary(self, seller_id: int) -> ServiceResult:
        """Compute a seller's salary. The breakdown is recorded in the audit log."""
        seller = self._sellers.get(seller_id)
        if seller is None:
            return ServiceResult(success=False, errors=[f"Seller not found: {seller_id}"])
        try:
            breakdown = seller.salary_breakdown()
        except InvalidSaleAmount as e:
            return ServiceResult(success=False, errors=[str(e)])

        err = self._record_event(
            EventKind.SALARY_CALCULATED, seller_id, _breakdown_payload(breakdown),
        )
        if err:
            return ServiceResult(success=False, errors=[err])
        return ServiceResult(
            success=True,
            data={"salary": breakdown.total, "breakdown": breakdown},
        )

    def payroll(self) -> ServiceResult:
        """Compute every registered seller's salary, in seller id order."""
        breakdowns: dict[int, SalaryBreakdown] = {}
        for seller_id in sorted(self._sellers):
            result = self.calculate_salary(seller_id)
            if not result.success:
                return ServiceResult(
                    success=False,
                    errors=[f"Seller {seller_id}: {e}" for e in result.errors],
                )
            breakdowns[seller_id] = result.data["breakdown"]
        return ServiceResult(
            success=True,
            data={
                "breakdowns": breakdowns,
                "total": sum((b.total for b in breakdowns.values()), Decimal("0")),
            },
        )

    # ------------------------------------------------------------------
    # Audit trail
    # ------------------------------------------------------------------

    def _next_event_id(self) -> str:
        """Number events from the log itself so ids survive reloads and failed writes."""
        return f"EVT-{self._event_log.count + 1:08d}"

    def _record_event(
        self,
        kind: EventKind,
        seller_id: int,
        payload: dict[str, Any],
    ) -> Optional[str]:
        """Append an audit event. Returns error string or None.

        On failure the log is unchanged and the event id is not consumed.
        """
        if self._event_log is None:
            return None
        try:
            event = PayrollEvent.create(
                event_id=self._next_event_id(),
                event_kind=kind,
                seller_id=seller_id,
                payload=payload,
            )
            self._event_log.append(event)
        except (ValueError, OSError) as e:
            return f"Event log failure: {e}"
        return None
