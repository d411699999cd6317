"""
Default Parameter Registry — the compile-time baseline of every configurable
category.

These values are always available, even before any evolution exists.
Approved evolutions override them field by field; they never replace them
wholesale.
"""

from typing import Dict

from evolution_kernel.errors import UnsupportedCategory
from evolution_kernel.models.parameters import (
    CredibilityRules,
    EvolutionCategory,
    ParameterSet,
    RolePermissions,
    VoteParameters,
)

DEFAULT_VOTE_PARAMETERS = VoteParameters()
DEFAULT_CREDIBILITY_RULES = CredibilityRules()
DEFAULT_ROLE_PERMISSIONS = RolePermissions()

_REGISTRY: Dict[EvolutionCategory, ParameterSet] = {
    EvolutionCategory.VOTE_PARAMETERS: DEFAULT_VOTE_PARAMETERS,
    EvolutionCategory.CREDIBILITY_RULES: DEFAULT_CREDIBILITY_RULES,
    EvolutionCategory.ROLE_PERMISSIONS: DEFAULT_ROLE_PERMISSIONS,
}


def defaults(category: EvolutionCategory) -> ParameterSet:
    """Return a private copy of the baseline for a configurable category."""
    baseline = _REGISTRY.get(EvolutionCategory(category))
    if baseline is None:
        raise UnsupportedCategory(
            f"Category '{EvolutionCategory(category).value}' has no parameter set"
        )
    return baseline.model_copy(deep=True)
