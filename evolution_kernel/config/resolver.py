"""
Config Resolver — the effective configuration of each category.

Behavioral Contract:
- Defaults alone when no evolution of the category is active
- Otherwise defaults merged with the most recently applied active evolution
- Several active evolutions violate the store invariant; the resolver does
  not trust persistence to prevent it. It logs the anomaly and lets the
  most recent one win (ties broken by id), so reads stay deterministic.
- Never errors for a configurable category
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Protocol

from evolution_kernel.config.merge import merge_overrides
from evolution_kernel.defaults.registry import defaults
from evolution_kernel.models.evolution import Evolution, EvolutionStatus
from evolution_kernel.models.parameters import (
    CredibilityRules,
    EvolutionCategory,
    ParameterSet,
    RolePermissions,
    VoteParameters,
)

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class EvolutionReader(Protocol):
    def list_by_category(
        self,
        category: EvolutionCategory,
        status: Optional[EvolutionStatus] = None,
    ) -> List[Evolution]:
        ...


def _recency_key(evolution: Evolution):
    return (evolution.applied_at or _EPOCH, evolution.id)


def select_current(evolutions: List[Evolution]) -> Optional[Evolution]:
    """Most recently applied evolution, ties broken by the greatest id."""
    if not evolutions:
        return None
    return max(evolutions, key=_recency_key)


class ConfigResolver:
    """Merges the default registry with the current active evolution."""

    def __init__(self, store: EvolutionReader):
        self.store = store

    def current_evolution(self, category: EvolutionCategory) -> Optional[Evolution]:
        """The active evolution of a category, if any."""
        category = EvolutionCategory(category)
        active = self.store.list_by_category(category, status=EvolutionStatus.ACTIVE)
        if len(active) > 1:
            logger.warning(
                "Multiple active evolutions for %s; using the most recent",
                category.value,
                extra={"category": category.value, "active_count": len(active)},
            )
        return select_current(active)

    def resolve(self, category: EvolutionCategory) -> ParameterSet:
        """Effective parameter set for a configurable category."""
        baseline = defaults(category)
        current = self.current_evolution(category)
        if current is None:
            return baseline
        return merge_overrides(baseline, current.overrides)

    def vote_parameters(self) -> VoteParameters:
        return self.resolve(EvolutionCategory.VOTE_PARAMETERS)

    def credibility_rules(self) -> CredibilityRules:
        return self.resolve(EvolutionCategory.CREDIBILITY_RULES)

    def role_permissions(self) -> RolePermissions:
        return self.resolve(EvolutionCategory.ROLE_PERMISSIONS)
