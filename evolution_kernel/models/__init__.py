"""Evolution Kernel data models."""

from evolution_kernel.models.cohort import (
    CohortRule,
    Decision,
    DecisionType,
    RuleOperator,
    Sentiment,
    SpecialEvent,
)
from evolution_kernel.models.evolution import (
    EnrichedEvolution,
    Evolution,
    EvolutionStatus,
    UserSummary,
)
from evolution_kernel.models.identity import User, UserRole
from evolution_kernel.models.parameters import (
    CONFIGURABLE_CATEGORIES,
    ContributeurOverride,
    ContributeurPermissions,
    CredibilityRules,
    CredibilityRulesOverride,
    EditeurOverride,
    EditeurPermissions,
    EvolutionCategory,
    ExplorateurOverride,
    ExplorateurPermissions,
    RolePermissions,
    RolePermissionsOverride,
    VoteParameters,
    VoteParametersOverride,
)

__all__ = [
    "CONFIGURABLE_CATEGORIES",
    "CohortRule",
    "ContributeurOverride",
    "ContributeurPermissions",
    "CredibilityRules",
    "CredibilityRulesOverride",
    "Decision",
    "DecisionType",
    "EditeurOverride",
    "EditeurPermissions",
    "EnrichedEvolution",
    "Evolution",
    "EvolutionCategory",
    "EvolutionStatus",
    "ExplorateurOverride",
    "ExplorateurPermissions",
    "RolePermissions",
    "RolePermissionsOverride",
    "RuleOperator",
    "Sentiment",
    "SpecialEvent",
    "User",
    "UserRole",
    "UserSummary",
    "VoteParameters",
    "VoteParametersOverride",
]
