"""Compensation subsystem — seller aggregate, sales ledger, salary engine."""

from salespay.compensation.engine import SalaryEngine
from salespay.compensation.ledger import SalesLedger
from salespay.compensation.seller import Seller

__all__ = [
    "SalaryEngine",
    "SalesLedger",
    "Seller",
]
