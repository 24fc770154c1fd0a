"""Tests for the seller aggregate — proves salary = base salary + commission."""

import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from salespay.compensation.seller import Seller
from salespay.models.commission import (
    CommissionPolicy,
    NoCommission,
    PerGoalCommission,
    PerSaleCommission,
    PolicyKind,
    TieredCommission,
)
from salespay.models.sales import (
    Department,
    InvalidSaleAmount,
    SaleStatus,
    SalesRecord,
)


def _now() -> datetime:
    return datetime(2026, 2, 16, 12, 0, 0, tzinfo=timezone.utc)


def _make_seller(
    seller_id: int,
    base_salary: str,
    commission: Optional[CommissionPolicy] = None,
    department: Optional[Department] = None,
) -> Seller:
    return Seller(
        seller_id=seller_id,
        name=f"Seller {seller_id}",
        email=f"seller{seller_id}@sales.example.com",
        birth_date=date(1995, 12, 15),
        base_salary=Decimal(base_salary),
        department=department or Department(1, "Electronics"),
        commission=commission,
    )


def _make_sale(
    record_id: int,
    amount: str,
    days_ago: int = 0,
    status: SaleStatus = SaleStatus.BILLED,
    seller_id: Optional[int] = None,
) -> SalesRecord:
    return SalesRecord(
        record_id=record_id,
        amount=Decimal(amount),
        status=status,
        date=_now() - timedelta(days=days_ago),
        seller_id=seller_id,
    )


def _add_sales(seller: Seller, *amounts: str) -> None:
    for i, amount in enumerate(amounts, 1):
        seller.add_sale(_make_sale(i, amount, days_ago=i - 1))


def _books_tiers() -> TieredCommission:
    return TieredCommission.from_lists(
        [Decimal("10000.0"), Decimal("13000.0")],
        [Decimal("0.1"), Decimal("0.15")],
    )


def _electronics_goal() -> PerGoalCommission:
    return PerGoalCommission(Decimal("2500.0"), Decimal("0.15"), Decimal("0.13"))


# ===================================================================
# Reference scenarios
# ===================================================================

class TestSalaryScenarios:
    def test_no_commission_no_sales(self) -> None:
        seller = _make_seller(1, "3500.0")
        total = seller.calculate_salary()
        assert seller.sales == ()
        assert total == Decimal("3500.0")

    def test_per_sale_with_one_sale(self) -> None:
        seller = _make_seller(2, "1050.0", PerSaleCommission(Decimal("0.2")))
        _add_sales(seller, "350.0")
        assert seller.sales
        assert seller.calculate_salary() == Decimal("1120.0")

    def test_per_sale_with_two_sales(self) -> None:
        seller = _make_seller(2, "1050.0", PerSaleCommission(Decimal("0.2")))
        _add_sales(seller, "140.0", "220.0")
        assert seller.calculate_salary() == Decimal("1122.0")

    def test_per_goal_not_achieved(self) -> None:
        seller = _make_seller(3, "550.0", _electronics_goal())
        _add_sales(seller, "140.0")
        assert seller.calculate_salary() == Decimal("550.0")

    def test_per_goal_achieved_adds_base_salary(self) -> None:
        """Goal met: base salary plus the two-bracket commission."""
        seller = _make_seller(3, "550.0", _electronics_goal())
        _add_sales(seller, "140.0", "2450.0")
        commission = Decimal("2500.0") * Decimal("0.15") + Decimal("90.0") * Decimal("0.13")
        assert commission == Decimal("386.7")
        assert seller.calculate_salary() == Decimal("550.0") + commission
        assert seller.calculate_salary() == Decimal("936.7")

    def test_tiered_on_tier_one(self) -> None:
        seller = _make_seller(4, "1000.0", _books_tiers(), Department(3, "Books"))
        _add_sales(seller, "80.0", "590.5")
        assert seller.calculate_salary() == Decimal("1067.05")

    def test_tiered_on_tier_two(self) -> None:
        seller = _make_seller(5, "1000.0", _books_tiers(), Department(4, "TI"))
        _add_sales(seller, "9000.0", "5575.80", "8424.20")
        expected = (
            Decimal("1000.0")
            + Decimal("0.1") * (Decimal("8480.20") + Decimal("1519.8"))
            + Decimal("0.15") * (Decimal("9000.0") + Decimal("4000.0"))
        )
        assert seller.calculate_salary() == expected
        assert seller.calculate_salary() == Decimal("3950.0")


# ===================================================================
# Properties
# ===================================================================

class TestSalaryProperties:
    def test_no_policy_ignores_sales(self) -> None:
        seller = _make_seller(1, "3500.0")
        _add_sales(seller, "100.0", "20000.0")
        assert seller.calculate_salary() == Decimal("3500.0")

    def test_explicit_no_commission_ignores_sales(self) -> None:
        seller = _make_seller(1, "3500.0", NoCommission())
        _add_sales(seller, "100.0", "20000.0")
        assert seller.calculate_salary() == Decimal("3500.0")

    def test_per_sale_with_no_sales_is_base(self) -> None:
        seller = _make_seller(2, "1050.0", PerSaleCommission(Decimal("0.2")))
        assert seller.calculate_salary() == Decimal("1050.0")

    def test_idempotent(self) -> None:
        seller = _make_seller(5, "1000.0", _books_tiers())
        _add_sales(seller, "9000.0", "5575.80")
        assert seller.calculate_salary() == seller.calculate_salary()

    def test_order_independent(self) -> None:
        amounts = ("9000.0", "5575.80", "8424.20", "312.45")
        forward = _make_seller(5, "1000.0", _books_tiers())
        backward = _make_seller(6, "1000.0", _books_tiers())
        _add_sales(forward, *amounts)
        _add_sales(backward, *reversed(amounts))
        assert forward.calculate_salary() == backward.calculate_salary()

    def test_status_not_filtered(self) -> None:
        """Cancelled and pending sales still count towards commission."""
        seller = _make_seller(2, "1000.0", PerSaleCommission(Decimal("0.1")))
        seller.add_sale(_make_sale(1, "100", status=SaleStatus.CANCELLED))
        seller.add_sale(_make_sale(2, "100", status=SaleStatus.PENDING))
        assert seller.calculate_salary() == Decimal("1020.0")

    def test_duplicate_amounts_and_ids_allowed(self) -> None:
        seller = _make_seller(2, "0", PerSaleCommission(Decimal("0.5")))
        seller.add_sale(_make_sale(1, "10"))
        seller.add_sale(_make_sale(1, "10"))
        assert len(seller.sales) == 2
        assert seller.calculate_salary() == Decimal("10.0")

    def test_breakdown_matches_salary(self) -> None:
        seller = _make_seller(5, "1000.0", _books_tiers())
        _add_sales(seller, "9000.0", "5575.80", "8424.20")
        breakdown = seller.salary_breakdown()
        assert breakdown.seller_id == 5
        assert breakdown.total == seller.calculate_salary()
        assert breakdown.sales_total == Decimal("23000.00")
        assert breakdown.sale_count == 3
        assert breakdown.policy_kind == PolicyKind.TIERED


# ===================================================================
# Sales association
# ===================================================================

class TestAddSale:
    def test_binds_back_reference(self) -> None:
        seller = _make_seller(7, "1000.0")
        stored = seller.add_sale(_make_sale(1, "50"))
        assert stored.seller_id == 7
        assert seller.sales[0].seller_id == 7

    def test_preserves_insertion_order(self) -> None:
        seller = _make_seller(7, "1000.0")
        _add_sales(seller, "3", "1", "2")
        assert [s.amount for s in seller.sales] == [
            Decimal("3"), Decimal("1"), Decimal("2"),
        ]

    def test_record_already_bound_to_this_seller(self) -> None:
        seller = _make_seller(7, "1000.0")
        seller.add_sale(_make_sale(1, "50", seller_id=7))
        assert len(seller.sales) == 1

    def test_record_bound_to_other_seller_rejected(self) -> None:
        seller = _make_seller(7, "1000.0")
        with pytest.raises(ValueError, match="already belongs to seller 8"):
            seller.add_sale(_make_sale(1, "50", seller_id=8))
        assert seller.sales == ()

    def test_negative_amount_rejected(self) -> None:
        seller = _make_seller(7, "1000.0", PerSaleCommission(Decimal("0.2")))
        with pytest.raises(InvalidSaleAmount, match="non-negative"):
            seller.add_sale(_make_sale(1, "-10"))
        assert seller.sales == ()

    def test_sales_view_is_read_only(self) -> None:
        seller = _make_seller(7, "1000.0")
        _add_sales(seller, "10")
        assert isinstance(seller.sales, tuple)


class TestSellerConstruction:
    def test_negative_base_salary_rejected(self) -> None:
        with pytest.raises(ValueError, match="Base salary must be non-negative"):
            _make_seller(1, "-1")

    def test_float_base_salary_rejected(self) -> None:
        with pytest.raises(TypeError, match="base_salary"):
            Seller(
                seller_id=1, name="A", email="a@example.com",
                birth_date=date(1990, 1, 1), base_salary=3500.0,
                department=Department(1, "Electronics"),
            )

    def test_string_base_salary_normalised(self) -> None:
        seller = Seller(
            seller_id=1, name="A", email="a@example.com",
            birth_date=date(1990, 1, 1), base_salary="3500.0",
            department=Department(1, "Electronics"),
        )
        assert seller.base_salary == Decimal("3500.0")

    def test_reassign_commission(self) -> None:
        seller = _make_seller(2, "1000.0")
        _add_sales(seller, "100")
        seller.assign_commission(PerSaleCommission(Decimal("0.5")))
        assert seller.calculate_salary() == Decimal("1050.0")
        seller.assign_commission(None)
        assert seller.calculate_salary() == Decimal("1000.0")
