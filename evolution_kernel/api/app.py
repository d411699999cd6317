"""
Evolution Kernel API — FastAPI endpoints.

Exposes the kernel's functionality via a REST API for:
- Evolution proposal, approval and rejection
- Effective parameter reads
- Cohort previews and special event membership

The authenticated caller is read from the X-User-Identity header.
"""

from typing import Optional

from fastapi import FastAPI, Header, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from evolution_kernel.errors import (
    AlreadyProcessed,
    EvolutionKernelError,
    Forbidden,
    NotFound,
    Unauthenticated,
    UserNotFound,
)
from evolution_kernel.identity.directory import (
    InMemoryUserDirectory,
    UserDirectory,
    bind_identity,
)
from evolution_kernel.models.cohort import CohortRule, Decision, SpecialEvent
from evolution_kernel.models.evolution import EvolutionStatus
from evolution_kernel.models.parameters import EvolutionCategory
from evolution_kernel.observability import setup_logging
from evolution_kernel.service import GovernanceService
from evolution_kernel.settings import Settings, get_settings


# --- Request/Response Models ---

class ProposeEvolutionRequest(BaseModel):
    category: EvolutionCategory
    description: str
    overrides: Optional[dict] = None
    proposal_id: Optional[str] = None


class PreviewRequest(BaseModel):
    cohort_rules: CohortRule
    limit: Optional[int] = Field(default=None, ge=0)     # 0 means the default


_STATUS_CODES = {
    Unauthenticated: 401,
    UserNotFound: 401,
    Forbidden: 403,
    NotFound: 404,
    AlreadyProcessed: 409,
}


# --- Application Factory ---

def create_app(
    service: Optional[GovernanceService] = None,
    users: Optional[UserDirectory] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="Evolution Kernel API",
        description="Governance configuration evolution and cohort matching",
        version="0.1.0",
    )

    gs = service or GovernanceService(
        users=users or InMemoryUserDirectory(),
        settings=settings,
    )
    app.state.service = gs

    @app.exception_handler(EvolutionKernelError)
    def kernel_error_handler(request: Request, exc: EvolutionKernelError):
        return JSONResponse(
            status_code=_STATUS_CODES.get(type(exc), 400),
            content={"detail": exc.detail, "error": exc.code},
        )

    @app.exception_handler(ValidationError)
    def payload_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc), "error": "invalid_payload"},
        )

    # === EVOLUTIONS ===

    @app.get("/evolutions/active")
    def get_active_evolutions(category: Optional[EvolutionCategory] = None):
        """Active evolutions, newest applied first."""
        return [e.model_dump(mode="json") for e in gs.get_active_evolutions(category)]

    @app.get("/evolutions")
    def get_all_evolutions(
        status: Optional[EvolutionStatus] = None,
        category: Optional[EvolutionCategory] = None,
        limit: Optional[int] = Query(default=None, ge=0),
    ):
        """All evolutions with proposer/approver/applier summaries."""
        evolutions = gs.get_all_evolutions(status=status, category=category, limit=limit)
        return [e.model_dump(mode="json") for e in evolutions]

    @app.post("/evolutions")
    def propose_evolution(
        req: ProposeEvolutionRequest,
        x_user_identity: Optional[str] = Header(default=None),
    ):
        """Propose a parameter change."""
        with bind_identity(x_user_identity):
            evolution_id = gs.propose_evolution(
                req.category, req.description, req.overrides, req.proposal_id
            )
        return {"evolution_id": evolution_id}

    @app.post("/evolutions/{evolution_id}/approve")
    def approve_evolution(
        evolution_id: str,
        x_user_identity: Optional[str] = Header(default=None),
    ):
        """Editor approves and applies an evolution."""
        with bind_identity(x_user_identity):
            return gs.approve_and_apply_evolution(evolution_id)

    @app.post("/evolutions/{evolution_id}/reject")
    def reject_evolution(
        evolution_id: str,
        x_user_identity: Optional[str] = Header(default=None),
    ):
        """Editor rejects an evolution."""
        with bind_identity(x_user_identity):
            return gs.reject_evolution(evolution_id)

    # === PARAMETERS ===

    @app.get("/parameters/vote")
    def get_vote_parameters():
        return gs.get_current_vote_parameters().model_dump(mode="json")

    @app.get("/parameters/credibility")
    def get_credibility_rules():
        return gs.get_current_credibility_rules().model_dump(mode="json")

    @app.get("/parameters/roles")
    def get_role_permissions():
        return gs.get_current_role_permissions().model_dump(mode="json")

    # === COHORTS ===

    @app.post("/cohorts/preview")
    def preview_matching_decisions(req: PreviewRequest):
        """Decisions a rule would select. Nothing is saved."""
        decisions = gs.preview_matching_decisions(req.cohort_rules, req.limit)
        return [d.model_dump(mode="json") for d in decisions]

    @app.post("/decisions/ingest")
    def ingest_decision(decision: Decision):
        """Manual decision load (for testing)."""
        gs.decisions.upsert(decision)
        return {"status": "ingested", "decision_id": decision.id}

    # === SPECIAL EVENTS ===

    @app.post("/special-events")
    def save_special_event(event: SpecialEvent):
        """Manual special event load (for testing)."""
        gs.special_events.upsert(event)
        return {"status": "saved", "special_event_id": event.id}

    @app.get("/special-events")
    def get_special_events(featured: Optional[bool] = None, active_only: bool = False):
        events = gs.get_special_events(featured=featured, active_only=active_only)
        return [e.model_dump(mode="json") for e in events]

    @app.get("/special-events/by-slug/{slug}")
    def get_special_event_by_slug(slug: str):
        return gs.get_special_event_by_slug(slug).model_dump(mode="json")

    @app.get("/special-events/{special_event_id}/decisions")
    def get_decisions_for_special_event(
        special_event_id: str, limit: Optional[int] = Query(default=None, ge=0)
    ):
        decisions = gs.get_decisions_for_special_event(special_event_id, limit)
        return [d.model_dump(mode="json") for d in decisions]

    @app.get("/special-events/{special_event_id}/matches/{decision_id}")
    def matches_special_event(special_event_id: str, decision_id: str):
        return {"matches": gs.matches_special_event(decision_id, special_event_id)}

    return app


# Default application instance
app = create_app()
