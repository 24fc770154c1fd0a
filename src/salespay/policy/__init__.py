"""Commission plan configuration."""

from salespay.policy.resolver import PolicyResolver, policy_from_params, policy_to_params

__all__ = ["PolicyResolver", "policy_from_params", "policy_to_params"]
