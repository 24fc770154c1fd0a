"""Commission policies — the closed set of rules that turn sales into commission.

Every policy is an immutable value object with one capability:

    commission = policy.compute(sale_amounts)

compute() sums the amounts and allocates the total across the policy's
brackets. Each bracket earns its own rate on the volume it covers:

    NoCommission        no brackets, commission is always zero
    PerSaleCommission   one open bracket at `rate`
    PerGoalCommission   nothing below the goal; once met, the goal earns
                        `rate_below` and the excess earns `rate_above`
    TieredCommission    consecutive brackets of width `tier_widths[i]` at
                        `tier_rates[i]`; the last rate applies to any
                        volume beyond the final width

Invariants:
- Policies are validated at construction; compute() never sees bad params
- Order of sales never changes the result
- commission == sum of bracket commissions
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal
from typing import (
    Any,
    ClassVar,
    Iterable,
    Protocol,
    Sequence,
    Tuple,
    Union,
    runtime_checkable,
)

from salespay.models.sales import check_sale_amount, to_decimal


_ZERO = Decimal("0")


class InvalidPolicyParameters(ValueError):
    """A commission policy was constructed with invalid parameters."""


class PolicyKind(str, enum.Enum):
    """Discriminator for the commission policy variants."""
    NONE = "none"
    PER_SALE = "per_sale"
    PER_GOAL = "per_goal"
    TIERED = "tiered"


@dataclass(frozen=True)
class BracketAllocation:
    """The share of sales volume that fell into one bracket.

    lower is the cumulative volume at which the bracket starts.
    """
    lower: Decimal
    amount: Decimal
    rate: Decimal
    commission: Decimal


def total_sales(sales: Iterable[Decimal]) -> Decimal:
    """Sum sale amounts, rejecting negatives."""
    return sum(
        (check_sale_amount(to_decimal(a, "sale amount")) for a in sales),
        _ZERO,
    )


def _non_negative(value: Any, field_name: str) -> Decimal:
    try:
        result = to_decimal(value, field_name)
    except (TypeError, ValueError) as e:
        raise InvalidPolicyParameters(str(e)) from None
    if result < _ZERO:
        raise InvalidPolicyParameters(
            f"{field_name} must be non-negative, got {result}"
        )
    return result


def _tier_values(values: Any, field_name: str) -> Tuple[Decimal, ...]:
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        raise InvalidPolicyParameters(
            f"{field_name} must be a sequence, got {type(values).__name__}"
        )
    return tuple(
        _non_negative(v, f"{field_name}[{i}]") for i, v in enumerate(values)
    )


def _checked_total(total: Any) -> Decimal:
    return check_sale_amount(to_decimal(total, "sales total"))


@runtime_checkable
class CommissionRule(Protocol):
    """Contract every commission policy implements.

    brackets() allocates a sales total; compute() sums sale amounts and
    returns the commission of those brackets.
    """

    kind: ClassVar[PolicyKind]

    def brackets(self, total: Decimal) -> Tuple[BracketAllocation, ...]:
        ...

    def compute(self, sales: Iterable[Decimal]) -> Decimal:
        ...


def _commission(rule: CommissionRule, sales: Iterable[Decimal]) -> Decimal:
    return sum((b.commission for b in rule.brackets(total_sales(sales))), _ZERO)


@dataclass(frozen=True)
class NoCommission:
    """Base salary only."""

    kind: ClassVar[PolicyKind] = PolicyKind.NONE

    def compute(self, sales: Iterable[Decimal]) -> Decimal:
        return _commission(self, sales)

    def brackets(self, total: Decimal) -> Tuple[BracketAllocation, ...]:
        _checked_total(total)
        return ()


@dataclass(frozen=True)
class PerSaleCommission:
    """A fixed fraction of every sale."""

    rate: Decimal
    kind: ClassVar[PolicyKind] = PolicyKind.PER_SALE

    def __post_init__(self) -> None:
        object.__setattr__(self, "rate", _non_negative(self.rate, "rate"))

    def compute(self, sales: Iterable[Decimal]) -> Decimal:
        return _commission(self, sales)

    def brackets(self, total: Decimal) -> Tuple[BracketAllocation, ...]:
        total = _checked_total(total)
        if total == _ZERO:
            return ()
        return (BracketAllocation(_ZERO, total, self.rate, total * self.rate),)


@dataclass(frozen=True)
class PerGoalCommission:
    """Commission only once the sales goal is met.

    Below the goal nothing is paid. At or above it the goal volume earns
    rate_below and only the excess earns rate_above.
    """

    goal: Decimal
    rate_below: Decimal
    rate_above: Decimal
    kind: ClassVar[PolicyKind] = PolicyKind.PER_GOAL

    def __post_init__(self) -> None:
        object.__setattr__(self, "goal", _non_negative(self.goal, "goal"))
        object.__setattr__(
            self, "rate_below", _non_negative(self.rate_below, "rate_below"),
        )
        object.__setattr__(
            self, "rate_above", _non_negative(self.rate_above, "rate_above"),
        )

    def is_met(self, total: Decimal) -> bool:
        return total >= self.goal

    def compute(self, sales: Iterable[Decimal]) -> Decimal:
        return _commission(self, sales)

    def brackets(self, total: Decimal) -> Tuple[BracketAllocation, ...]:
        total = _checked_total(total)
        if not self.is_met(total):
            return ()
        excess = total - self.goal
        return (
            BracketAllocation(
                _ZERO, self.goal, self.rate_below, self.goal * self.rate_below,
            ),
            BracketAllocation(
                self.goal, excess, self.rate_above, excess * self.rate_above,
            ),
        )


@dataclass(frozen=True)
class TieredCommission:
    """Progressive brackets, like income tax bands.

    tier_widths are per-tier increments, not cumulative thresholds:
    widths (10000, 13000) mean 0-10000 at tier_rates[0] and
    10000-23000 at tier_rates[1]. Volume beyond the sum of all widths
    is charged at the last rate.
    """

    tier_widths: Tuple[Decimal, ...]
    tier_rates: Tuple[Decimal, ...]
    kind: ClassVar[PolicyKind] = PolicyKind.TIERED

    def __post_init__(self) -> None:
        widths = _tier_values(self.tier_widths, "tier_widths")
        rates = _tier_values(self.tier_rates, "tier_rates")
        if not widths:
            raise InvalidPolicyParameters("Tiered commission needs at least one tier")
        if len(widths) != len(rates):
            raise InvalidPolicyParameters(
                f"Tier widths and rates differ in length: "
                f"{len(widths)} widths, {len(rates)} rates"
            )
        for i, width in enumerate(widths):
            if width == _ZERO:
                raise InvalidPolicyParameters(f"tier_widths[{i}] must be positive")
        object.__setattr__(self, "tier_widths", widths)
        object.__setattr__(self, "tier_rates", rates)

    @staticmethod
    def from_lists(
        tier_widths: Sequence, tier_rates: Sequence,
    ) -> TieredCommission:
        return TieredCommission(tier_widths, tier_rates)

    def compute(self, sales: Iterable[Decimal]) -> Decimal:
        return _commission(self, sales)

    def brackets(self, total: Decimal) -> Tuple[BracketAllocation, ...]:
        total = _checked_total(total)
        allocations = []
        remaining = total
        lower = _ZERO
        for width, rate in zip(self.tier_widths, self.tier_rates):
            if remaining == _ZERO:
                break
            allocated = min(remaining, width)
            allocations.append(
                BracketAllocation(lower, allocated, rate, allocated * rate)
            )
            remaining -= allocated
            lower += allocated

        # Open-ended final bracket
        if remaining > _ZERO:
            rate = self.tier_rates[-1]
            allocations.append(
                BracketAllocation(lower, remaining, rate, remaining * rate)
            )
        return tuple(allocations)


CommissionPolicy = Union[
    NoCommission, PerSaleCommission, PerGoalCommission, TieredCommission,
]


@dataclass(frozen=True)
class SalaryBreakdown:
    """Full derivation of a seller's salary.

    Invariant: total == base_salary + commission
    Invariant: commission == sum(b.commission for b in brackets)
    """
    seller_id: int
    base_salary: Decimal
    sales_total: Decimal
    sale_count: int
    policy_kind: PolicyKind
    brackets: Tuple[BracketAllocation, ...]
    commission: Decimal
    total: Decimal
