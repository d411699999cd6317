"""
Governance Service — the kernel's surface for the UI/API layer.

Wires the lifecycle, the resolver and the cohort matcher to the identity
provider so callers never pass identities around explicitly.
"""

import logging
from typing import Dict, List, Optional, Union

from pydantic import BaseModel

from evolution_kernel.cohort.matcher import CohortMatcher
from evolution_kernel.cohort.store import DecisionStore, SpecialEventStore
from evolution_kernel.config.resolver import ConfigResolver
from evolution_kernel.errors import NotFound
from evolution_kernel.evolution.lifecycle import EvolutionLifecycle
from evolution_kernel.evolution.store import EvolutionStore
from evolution_kernel.identity.directory import (
    ContextIdentityProvider,
    IdentityProvider,
    UserDirectory,
)
from evolution_kernel.models.cohort import CohortRule, Decision, SpecialEvent
from evolution_kernel.models.evolution import (
    EnrichedEvolution,
    Evolution,
    EvolutionStatus,
)
from evolution_kernel.models.parameters import (
    CredibilityRules,
    EvolutionCategory,
    RolePermissions,
    VoteParameters,
)
from evolution_kernel.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class GovernanceService:
    def __init__(
        self,
        users: UserDirectory,
        store: Optional[EvolutionStore] = None,
        decisions: Optional[DecisionStore] = None,
        special_events: Optional[SpecialEventStore] = None,
        identity_provider: Optional[IdentityProvider] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.store = store or EvolutionStore(self.settings.database_path)
        self.decisions = decisions or DecisionStore()
        self.special_events = special_events or SpecialEventStore()
        self.identity_provider = identity_provider or ContextIdentityProvider()
        self.lifecycle = EvolutionLifecycle(
            self.store, users, editor_role=self.settings.editor_role
        )
        self.resolver = ConfigResolver(self.store)
        self.matcher = CohortMatcher(
            self.decisions, default_limit=self.settings.default_match_limit
        )

    # === EVOLUTIONS ===

    def get_active_evolutions(
        self, category: Optional[EvolutionCategory] = None
    ) -> List[Evolution]:
        return self.lifecycle.list_active(category)

    def get_current_vote_parameters(self) -> VoteParameters:
        return self.resolver.vote_parameters()

    def get_current_credibility_rules(self) -> CredibilityRules:
        return self.resolver.credibility_rules()

    def get_current_role_permissions(self) -> RolePermissions:
        return self.resolver.role_permissions()

    def propose_evolution(
        self,
        category: EvolutionCategory,
        description: str,
        overrides: Optional[Union[BaseModel, dict]] = None,
        proposal_id: Optional[str] = None,
    ) -> str:
        return self.lifecycle.propose(
            category,
            description,
            overrides,
            self.identity_provider.current_identity(),
            originating_proposal_id=proposal_id,
        )

    def approve_and_apply_evolution(self, evolution_id: str) -> Dict[str, bool]:
        self.lifecycle.approve_and_apply(
            evolution_id, self.identity_provider.current_identity()
        )
        return {"success": True}

    def reject_evolution(self, evolution_id: str) -> Dict[str, bool]:
        self.lifecycle.reject(evolution_id, self.identity_provider.current_identity())
        return {"success": True}

    def get_all_evolutions(
        self,
        status: Optional[EvolutionStatus] = None,
        category: Optional[EvolutionCategory] = None,
        limit: Optional[int] = None,
    ) -> List[EnrichedEvolution]:
        if not limit or limit < 1:
            limit = self.settings.default_list_limit
        return self.lifecycle.list_all(status=status, category=category, limit=limit)

    # === COHORTS ===

    def preview_matching_decisions(
        self, cohort_rules: CohortRule, limit: Optional[int] = None
    ) -> List[Decision]:
        """Dry run of a rule against the current decisions. Persists nothing."""
        return self.matcher.match(cohort_rules, limit)

    def _special_event(self, special_event_id: str) -> SpecialEvent:
        event = self.special_events.get(special_event_id)
        if event is None:
            raise NotFound(f"Special event {special_event_id} not found")
        return event

    def get_decisions_for_special_event(
        self, special_event_id: str, limit: Optional[int] = None
    ) -> List[Decision]:
        event = self._special_event(special_event_id)
        return self.matcher.match(event.cohort_rules, limit)

    def matches_special_event(self, decision_id: str, special_event_id: str) -> bool:
        event = self._special_event(special_event_id)
        decision = self.decisions.get(decision_id)
        if decision is None:
            raise NotFound(f"Decision {decision_id} not found")
        matched = self.matcher.matches_single(event.cohort_rules, decision)
        logger.debug("Decision %s in %s: %s", decision_id, event.slug, matched)
        return matched

    def get_special_events(
        self, featured: Optional[bool] = None, active_only: bool = False
    ) -> List[SpecialEvent]:
        return self.special_events.list(featured=featured, active_only=active_only)

    def get_special_event_by_slug(self, slug: str) -> SpecialEvent:
        event = self.special_events.get_by_slug(slug)
        if event is None:
            raise NotFound(f"Special event '{slug}' not found")
        return event
