"""Parameter Sets — the tunable configuration of each evolution category."""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


class EvolutionCategory(str, Enum):
    VOTE_PARAMETERS = "vote_parameters"
    CREDIBILITY_RULES = "credibility_rules"
    ROLE_PERMISSIONS = "role_permissions"
    CONTENT_RULES = "content_rules"    # No parameter set, description only
    OTHER = "other"                    # No parameter set, description only


CONFIGURABLE_CATEGORIES = (
    EvolutionCategory.VOTE_PARAMETERS,
    EvolutionCategory.CREDIBILITY_RULES,
    EvolutionCategory.ROLE_PERMISSIONS,
)

Percentage = Annotated[int, Field(ge=0, le=100)]


# --- Effective parameter sets ---

class VoteParameters(BaseModel):
    """Quorum, majority and duration rules for governance votes."""

    default_quorum: int = 10
    default_majority: int = 50              # Percentage, e.g. 50 for 50%
    default_duration_days: int = 7
    min_quorum: int = 1
    max_quorum: int = 1000
    min_majority: int = 1
    max_majority: int = 100
    min_duration_days: int = 1
    max_duration_days: int = 90
    # Per proposal type
    editorial_rules_quorum: int = 20
    editorial_rules_majority: int = 60
    ethical_charter_quorum: int = 50
    ethical_charter_majority: int = 75
    ethical_charter_extra_days: int = 7
    expert_nomination_quorum: int = 15
    category_addition_quorum: int = 15
    product_evolution_quorum: int = 20
    product_evolution_majority: int = 60

    def bounds_respected(self) -> bool:
        """min <= default <= max for quorum, majority and duration."""
        return (
            self.min_quorum <= self.default_quorum <= self.max_quorum
            and self.min_majority <= self.default_majority <= self.max_majority
            and self.min_duration_days <= self.default_duration_days <= self.max_duration_days
        )


class CredibilityRules(BaseModel):
    """
    Weighted contribution factors of the credibility score.

    Weights are bounded one by one. Their sum is deliberately not
    constrained to 100.
    """

    publication_weight: Percentage = 30
    sources_weight: Percentage = 20
    votes_weight: Percentage = 20
    corrections_weight: Percentage = 15
    expertise_weight: Percentage = 10
    behavior_weight: Percentage = 5
    # Thresholds
    high_quality_article_threshold: Percentage = 80
    high_quality_source_threshold: Percentage = 70


class ExplorateurPermissions(BaseModel):
    can_vote: bool = True
    can_comment: bool = True
    can_propose_sources: bool = True
    vote_weight: int = 1


class ContributeurPermissions(BaseModel):
    can_write_articles: bool = True
    can_vote_governance: bool = True
    can_fact_check: bool = True
    vote_weight: int = 1


class EditeurPermissions(BaseModel):
    can_validate_articles: bool = True
    can_arbitrate_debates: bool = True
    vote_weight: int = 4


class RolePermissions(BaseModel):
    """Capabilities and vote weight of each platform role."""

    explorateur: ExplorateurPermissions = ExplorateurPermissions()
    contributeur: ContributeurPermissions = ContributeurPermissions()
    editeur: EditeurPermissions = EditeurPermissions()


ParameterSet = Union[VoteParameters, CredibilityRules, RolePermissions]


# --- Override payloads (one variant per configurable category) ---

class VoteParametersOverride(BaseModel):
    category: Literal["vote_parameters"] = "vote_parameters"
    default_quorum: Optional[int] = None
    default_majority: Optional[int] = None
    default_duration_days: Optional[int] = None
    min_quorum: Optional[int] = None
    max_quorum: Optional[int] = None
    min_majority: Optional[int] = None
    max_majority: Optional[int] = None
    min_duration_days: Optional[int] = None
    max_duration_days: Optional[int] = None
    editorial_rules_quorum: Optional[int] = None
    editorial_rules_majority: Optional[int] = None
    ethical_charter_quorum: Optional[int] = None
    ethical_charter_majority: Optional[int] = None
    ethical_charter_extra_days: Optional[int] = None
    expert_nomination_quorum: Optional[int] = None
    category_addition_quorum: Optional[int] = None
    product_evolution_quorum: Optional[int] = None
    product_evolution_majority: Optional[int] = None


class CredibilityRulesOverride(BaseModel):
    category: Literal["credibility_rules"] = "credibility_rules"
    publication_weight: Optional[Percentage] = None
    sources_weight: Optional[Percentage] = None
    votes_weight: Optional[Percentage] = None
    corrections_weight: Optional[Percentage] = None
    expertise_weight: Optional[Percentage] = None
    behavior_weight: Optional[Percentage] = None
    high_quality_article_threshold: Optional[Percentage] = None
    high_quality_source_threshold: Optional[Percentage] = None


class ExplorateurOverride(BaseModel):
    can_vote: Optional[bool] = None
    can_comment: Optional[bool] = None
    can_propose_sources: Optional[bool] = None
    vote_weight: Optional[int] = None


class ContributeurOverride(BaseModel):
    can_write_articles: Optional[bool] = None
    can_vote_governance: Optional[bool] = None
    can_fact_check: Optional[bool] = None
    vote_weight: Optional[int] = None


class EditeurOverride(BaseModel):
    can_validate_articles: Optional[bool] = None
    can_arbitrate_debates: Optional[bool] = None
    vote_weight: Optional[int] = None


class RolePermissionsOverride(BaseModel):
    category: Literal["role_permissions"] = "role_permissions"
    explorateur: Optional[ExplorateurOverride] = None
    contributeur: Optional[ContributeurOverride] = None
    editeur: Optional[EditeurOverride] = None


ParameterOverride = Annotated[
    Union[VoteParametersOverride, CredibilityRulesOverride, RolePermissionsOverride],
    Field(discriminator="category"),
]
