"""Evolution — a proposed, possibly applied, change to a category's parameters."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, model_validator

from evolution_kernel.models.parameters import EvolutionCategory, ParameterOverride


class EvolutionStatus(str, Enum):
    PENDING = "pending"          # Awaiting an editor
    ACTIVE = "active"            # Applied, at most one per category
    REJECTED = "rejected"        # Terminal
    SUPERSEDED = "superseded"    # Terminal, replaced by a later active evolution


class Evolution(BaseModel):
    """
    One proposal to change a category's configuration.

    Only the override variant matching ``category`` may be attached.
    ``content_rules`` and ``other`` evolutions are descriptive and carry
    no payload.
    """

    id: str
    category: EvolutionCategory
    description: str
    overrides: Optional[ParameterOverride] = None
    status: EvolutionStatus = EvolutionStatus.PENDING
    proposed_by: str                        # User id
    proposal_id: Optional[str] = None       # Originating governance proposal
    approved_by: Optional[str] = None       # Also set on rejection
    approved_at: Optional[datetime] = None
    applied_by: Optional[str] = None
    applied_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="after")
    def _overrides_match_category(self) -> "Evolution":
        if self.overrides is not None and self.overrides.category != self.category.value:
            raise ValueError(
                f"Override payload for '{self.overrides.category}' "
                f"cannot be attached to a '{self.category.value}' evolution"
            )
        return self


class UserSummary(BaseModel):
    """Denormalized display identity of a user referenced by an evolution."""

    id: str
    email: str = ""
    name: str


class EnrichedEvolution(Evolution):
    proposer: Optional[UserSummary] = None
    approver: Optional[UserSummary] = None
    applier: Optional[UserSummary] = None
