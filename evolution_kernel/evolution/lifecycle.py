"""
Evolution Lifecycle — proposing, approving and rejecting parameter changes.

State machine:
    pending → active      (approve_and_apply)
    pending → rejected    (reject)
    active  → superseded  (a later sibling's approve_and_apply)

rejected and superseded are terminal. An active evolution is only ever
left through supersession: category configuration is never "unapplied".

Behavioral Contract:
- Anyone known to the platform may propose; only editors approve or reject
- Approval supersedes every other active evolution of the category and
  activates the target in the same store transaction
- Approving or rejecting a non-pending evolution fails with AlreadyProcessed
  and changes nothing
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional, Union
from uuid import uuid4

from pydantic import BaseModel

from evolution_kernel.errors import (
    AlreadyProcessed,
    EvolutionKernelError,
    Forbidden,
    NotFound,
    Unauthenticated,
    UserNotFound,
)
from evolution_kernel.evolution.store import EvolutionStore
from evolution_kernel.identity.directory import UserDirectory, summarize_user
from evolution_kernel.models.evolution import (
    EnrichedEvolution,
    Evolution,
    EvolutionStatus,
)
from evolution_kernel.models.identity import User
from evolution_kernel.models.parameters import EvolutionCategory

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EvolutionLifecycle:
    """Enforces the evolution state machine and the one-active-per-category rule."""

    def __init__(
        self,
        store: EvolutionStore,
        users: UserDirectory,
        editor_role: str = "editeur",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.users = users
        self.editor_role = editor_role
        self._clock = clock or _utcnow

    # --- Guards ---

    def _refuse(self, error: EvolutionKernelError, **context: Any) -> EvolutionKernelError:
        logger.warning(
            "Refused: %s", error.detail,
            extra={"error_code": error.code, **context},
        )
        return error

    def _authenticate(self, identity: Optional[str]) -> User:
        if not identity:
            raise self._refuse(Unauthenticated("Not authenticated"))
        user = self.users.lookup_user(identity)
        if user is None:
            raise self._refuse(UserNotFound("User not found"), actor=identity)
        return user

    def _require_editor(self, user: User, action: str, evolution_id: str) -> None:
        if user.role != self.editor_role:
            raise self._refuse(
                Forbidden(f"Only editors can {action} evolutions; user must be an editor"),
                actor=user.id,
                evolution_id=evolution_id,
            )

    def _get_pending(self, evolution_id: str, actor: str) -> Evolution:
        evolution = self.store.get(evolution_id)
        if evolution is None:
            raise self._refuse(
                NotFound(f"Evolution {evolution_id} not found"),
                actor=actor, evolution_id=evolution_id,
            )
        if evolution.status != EvolutionStatus.PENDING:
            raise self._refuse(
                AlreadyProcessed(
                    f"Evolution {evolution_id} has already been processed "
                    f"(status: {evolution.status.value})"
                ),
                actor=actor, evolution_id=evolution_id,
            )
        return evolution

    # --- Mutations ---

    def propose(
        self,
        category: EvolutionCategory,
        description: str,
        overrides: Optional[Union[BaseModel, dict]],
        identity: Optional[str],
        originating_proposal_id: Optional[str] = None,
    ) -> str:
        """Record a pending evolution. Returns its id."""
        proposer = self._authenticate(identity)
        category = EvolutionCategory(category)

        if isinstance(overrides, dict) and "category" not in overrides:
            overrides = {**overrides, "category": category.value}

        now = self._clock()
        evolution = Evolution(
            id=f"evo_{uuid4().hex[:12]}",
            category=category,
            description=description,
            overrides=overrides,
            status=EvolutionStatus.PENDING,
            proposed_by=proposer.id,
            proposal_id=originating_proposal_id,
            created_at=now,
            updated_at=now,
        )
        self.store.insert(evolution)
        logger.info(
            "Evolution proposed",
            extra={"evolution_id": evolution.id, "category": category.value, "actor": proposer.id},
        )
        return evolution.id

    def approve_and_apply(self, evolution_id: str, identity: Optional[str]) -> None:
        """Activate a pending evolution, superseding the category's current one."""
        approver = self._authenticate(identity)
        self._require_editor(approver, "approve and apply", evolution_id)

        with self.store.transaction():
            evolution = self._get_pending(evolution_id, approver.id)
            now = self._clock()

            superseded = 0
            for sibling in self.store.list_by_category(
                evolution.category, status=EvolutionStatus.ACTIVE
            ):
                if sibling.id == evolution.id:
                    continue
                self.store.update(sibling.model_copy(update={
                    "status": EvolutionStatus.SUPERSEDED,
                    "updated_at": now,
                }))
                superseded += 1

            self.store.update(evolution.model_copy(update={
                "status": EvolutionStatus.ACTIVE,
                "approved_at": now,
                "approved_by": approver.id,
                "applied_at": now,
                "applied_by": approver.id,
                "updated_at": now,
            }))

        logger.info(
            "Evolution applied (%d superseded)", superseded,
            extra={
                "evolution_id": evolution_id,
                "category": evolution.category.value,
                "actor": approver.id,
            },
        )

    def reject(self, evolution_id: str, identity: Optional[str]) -> None:
        """Close a pending evolution without applying it."""
        approver = self._authenticate(identity)
        self._require_editor(approver, "reject", evolution_id)

        with self.store.transaction():
            evolution = self._get_pending(evolution_id, approver.id)
            now = self._clock()
            self.store.update(evolution.model_copy(update={
                "status": EvolutionStatus.REJECTED,
                "approved_at": now,
                "approved_by": approver.id,
                "updated_at": now,
            }))

        logger.info(
            "Evolution rejected",
            extra={
                "evolution_id": evolution_id,
                "category": evolution.category.value,
                "actor": approver.id,
            },
        )

    # --- Reads ---

    def list_active(self, category: Optional[EvolutionCategory] = None) -> List[Evolution]:
        """Active evolutions, newest applied first."""
        return self.store.list_by_status(EvolutionStatus.ACTIVE, category=category)

    def list_all(
        self,
        status: Optional[EvolutionStatus] = None,
        category: Optional[EvolutionCategory] = None,
        limit: int = 50,
    ) -> List[EnrichedEvolution]:
        """Filtered evolutions, newest created first, with user summaries."""
        return [
            self._enrich(e)
            for e in self.store.list_all(status=status, category=category, limit=limit)
        ]

    def _enrich(self, evolution: Evolution) -> EnrichedEvolution:
        return EnrichedEvolution(
            **evolution.model_dump(),
            proposer=summarize_user(self.users, evolution.proposed_by),
            approver=summarize_user(self.users, evolution.approved_by),
            applier=summarize_user(self.users, evolution.applied_by),
        )
