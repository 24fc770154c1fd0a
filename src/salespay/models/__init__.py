"""Core data models for salespay."""

from salespay.models.commission import (
    BracketAllocation,
    CommissionPolicy,
    CommissionRule,
    InvalidPolicyParameters,
    NoCommission,
    PerGoalCommission,
    PerSaleCommission,
    PolicyKind,
    SalaryBreakdown,
    TieredCommission,
)
from salespay.models.sales import (
    Department,
    InvalidSaleAmount,
    SaleStatus,
    SalesRecord,
)

__all__ = [
    "BracketAllocation",
    "CommissionPolicy",
    "CommissionRule",
    "InvalidPolicyParameters",
    "NoCommission",
    "PerGoalCommission",
    "PerSaleCommission",
    "PolicyKind",
    "SalaryBreakdown",
    "TieredCommission",
    "Department",
    "InvalidSaleAmount",
    "SaleStatus",
    "SalesRecord",
]
