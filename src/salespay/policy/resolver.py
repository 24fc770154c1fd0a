"""Policy resolver — loads named commission plans from config.

Plans live in config/commission_plans.json:

    {
      "version": "1",
      "default_plan": "no_commission",
      "plans": {
        "clothing_per_sale": {"kind": "per_sale", "rate": "0.2"},
        ...
      }
    }

Numbers are parsed straight to Decimal (json parse_float=Decimal), so a
plan never passes through binary floating point. Every plan is built
and validated at load time.

Usage:
    resolver = PolicyResolver.from_config_dir(Path("config"))
    policy = resolver.policy("clothing_per_sale")
"""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import Any

from salespay.models.commission import (
    CommissionPolicy,
    InvalidPolicyParameters,
    NoCommission,
    PerGoalCommission,
    PerSaleCommission,
    PolicyKind,
    TieredCommission,
)


def policy_from_params(params: dict[str, Any]) -> CommissionPolicy:
    """Build a policy from a plan mapping with a 'kind' discriminator.

    Raises:
        InvalidPolicyParameters: If the kind is unknown or a parameter
            is missing or invalid.
    """
    try:
        kind = PolicyKind(params.get("kind"))
    except ValueError:
        raise InvalidPolicyParameters(
            f"Unknown commission kind: {params.get('kind')!r}"
        ) from None

    try:
        if kind == PolicyKind.NONE:
            return NoCommission()
        if kind == PolicyKind.PER_SALE:
            return PerSaleCommission(rate=params["rate"])
        if kind == PolicyKind.PER_GOAL:
            return PerGoalCommission(
                goal=params["goal"],
                rate_below=params["rate_below"],
                rate_above=params["rate_above"],
            )
        widths, rates = params["tier_widths"], params["tier_rates"]
        if not isinstance(widths, list) or not isinstance(rates, list):
            raise InvalidPolicyParameters(
                "tier_widths and tier_rates must be lists"
            )
        return TieredCommission.from_lists(widths, rates)
    except KeyError as e:
        raise InvalidPolicyParameters(
            f"Commission kind '{kind.value}' missing parameter {e.args[0]!r}"
        ) from None
    except TypeError as e:
        raise InvalidPolicyParameters(str(e)) from None


def policy_to_params(policy: CommissionPolicy) -> dict[str, Any]:
    """Inverse of policy_from_params. Decimals are kept as strings."""
    params: dict[str, Any] = {"kind": policy.kind.value}
    if isinstance(policy, PerSaleCommission):
        params["rate"] = str(policy.rate)
    elif isinstance(policy, PerGoalCommission):
        params["goal"] = str(policy.goal)
        params["rate_below"] = str(policy.rate_below)
        params["rate_above"] = str(policy.rate_above)
    elif isinstance(policy, TieredCommission):
        params["tier_widths"] = [str(w) for w in policy.tier_widths]
        params["tier_rates"] = [str(r) for r in policy.tier_rates]
    return params


class PolicyResolver:
    """Resolves named commission plans to validated policy values."""

    PLANS_FILENAME = "commission_plans.json"

    def __init__(self, plans_data: dict[str, Any]) -> None:
        self._data = plans_data
        self._validate()
        self._plans: dict[str, dict[str, Any]] = plans_data["plans"]
        self._policies: dict[str, CommissionPolicy] = {
            name: policy_from_params(params)
            for name, params in self._plans.items()
        }

    @classmethod
    def from_config_dir(cls, config_dir: Path) -> PolicyResolver:
        """Load plans from the canonical config directory.

        Raises:
            FileNotFoundError: If commission_plans.json does not exist.
            ValueError: If the file is structurally invalid.
            InvalidPolicyParameters: If any plan is invalid.
        """
        path = config_dir / cls.PLANS_FILENAME
        if not path.exists():
            raise FileNotFoundError(f"Commission plans not found: {path}")
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f, parse_float=Decimal)
        return cls(data)

    def _validate(self) -> None:
        if "version" not in self._data:
            raise ValueError("Commission plans missing 'version' field")
        plans = self._data.get("plans")
        if not isinstance(plans, dict):
            raise ValueError("Commission plans 'plans' must be a dict")
        for name, params in plans.items():
            if not isinstance(name, str) or not name.strip():
                raise ValueError(f"Invalid plan name: {name!r}")
            if not isinstance(params, dict):
                raise ValueError(
                    f"Plan '{name}' must be a dict, got {type(params).__name__}"
                )
        default = self._data.get("default_plan")
        if default is not None and default not in plans:
            raise ValueError(f"Default plan '{default}' is not defined")

    @property
    def version(self) -> str:
        return str(self._data["version"])

    def plan_names(self) -> list[str]:
        return sorted(self._plans)

    def has_plan(self, name: str) -> bool:
        return name in self._policies

    def policy(self, name: str) -> CommissionPolicy:
        """Return the policy for a named plan.

        Raises:
            KeyError: If the plan does not exist.
        """
        if name not in self._policies:
            raise KeyError(f"Unknown commission plan: {name}")
        return self._policies[name]

    def plan_params(self, name: str) -> dict[str, Any]:
        """Return the raw plan mapping as loaded."""
        if name not in self._plans:
            raise KeyError(f"Unknown commission plan: {name}")
        return dict(self._plans[name])

    def default_policy(self) -> CommissionPolicy:
        """Return the default plan's policy, or NoCommission if none is set."""
        default = self._data.get("default_plan")
        if default is None:
            return NoCommission()
        return self._policies[default]
