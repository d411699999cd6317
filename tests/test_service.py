"""Tests for the Governance Service facade."""

from datetime import datetime, timezone

import pytest

from evolution_kernel.errors import Forbidden, NotFound, Unauthenticated
from evolution_kernel.identity.directory import InMemoryUserDirectory, bind_identity
from evolution_kernel.models.cohort import CohortRule, Decision, Sentiment, SpecialEvent
from evolution_kernel.models.evolution import EvolutionStatus
from evolution_kernel.models.identity import User, UserRole
from evolution_kernel.models.parameters import EvolutionCategory
from evolution_kernel.service import GovernanceService
from evolution_kernel.settings import Settings

EDITOR = "editor@example.org"
CONTRIBUTOR = "contrib@example.org"
T0 = datetime(2026, 1, 10, tzinfo=timezone.utc)


@pytest.fixture
def service():
    users = InMemoryUserDirectory([
        User(id="user_ed", email=EDITOR, role=UserRole.EDITEUR),
        User(id="user_co", email=CONTRIBUTOR, role=UserRole.CONTRIBUTEUR),
    ])
    return GovernanceService(users=users, settings=Settings(default_list_limit=3))


def _seed_cohorts(service: GovernanceService) -> None:
    service.decisions.upsert(Decision(
        id="dec_budget",
        title="Budget 2026 announcement",
        sentiment=Sentiment.POSITIVE,
        date=T0,
        created_at=T0,
    ))
    service.decisions.upsert(Decision(
        id="dec_strike",
        title="Transport strike",
        sentiment=Sentiment.NEGATIVE,
        date=T0,
        created_at=T0,
    ))
    service.special_events.upsert(SpecialEvent(
        id="se_budget",
        slug="budget-2026",
        name="Budget 2026",
        cohort_rules=CohortRule(title_keywords=["budget"]),
        featured=True,
    ))


class TestEvolutionFacade:
    def test_defaults_before_any_evolution(self, service):
        assert service.get_current_vote_parameters().default_quorum == 10
        assert service.get_current_credibility_rules().publication_weight == 30
        assert service.get_current_role_permissions().editeur.vote_weight == 4
        assert service.get_active_evolutions() == []

    def test_quorum_override_scenario(self, service):
        with bind_identity(CONTRIBUTOR):
            evolution_id = service.propose_evolution(
                EvolutionCategory.VOTE_PARAMETERS,
                "Double the default quorum",
                {"default_quorum": 20},
            )
        with bind_identity(EDITOR):
            assert service.approve_and_apply_evolution(evolution_id) == {"success": True}

        params = service.get_current_vote_parameters()
        assert params.default_quorum == 20
        assert params.default_majority == 50
        assert [e.id for e in service.get_active_evolutions(EvolutionCategory.VOTE_PARAMETERS)] == [evolution_id]

    def test_non_editor_cannot_approve(self, service):
        with bind_identity(CONTRIBUTOR):
            evolution_id = service.propose_evolution(EvolutionCategory.OTHER, "x")
            with pytest.raises(Forbidden):
                service.approve_and_apply_evolution(evolution_id)
        [evolution] = service.get_all_evolutions()
        assert evolution.status == EvolutionStatus.PENDING

    def test_reject(self, service):
        with bind_identity(CONTRIBUTOR):
            evolution_id = service.propose_evolution(EvolutionCategory.OTHER, "x")
        with bind_identity(EDITOR):
            assert service.reject_evolution(evolution_id) == {"success": True}
        [evolution] = service.get_all_evolutions(status=EvolutionStatus.REJECTED)
        assert evolution.id == evolution_id

    def test_unbound_identity_is_unauthenticated(self, service):
        with pytest.raises(Unauthenticated):
            service.propose_evolution(EvolutionCategory.OTHER, "x")

    def test_list_limit_from_settings(self, service):
        with bind_identity(CONTRIBUTOR):
            for i in range(5):
                service.propose_evolution(EvolutionCategory.OTHER, f"e{i}")
        assert len(service.get_all_evolutions()) == 3
        assert len(service.get_all_evolutions(limit=5)) == 5
        assert len(service.get_all_evolutions(limit=-1)) == 3


class TestCohortFacade:
    def test_preview(self, service):
        _seed_cohorts(service)
        preview = service.preview_matching_decisions(
            CohortRule(title_keywords=["budget"], sentiment=[Sentiment.NEGATIVE])
        )
        assert preview == []
        preview = service.preview_matching_decisions(
            CohortRule(title_keywords=["budget"], sentiment=[Sentiment.NEGATIVE], operator="OR")
        )
        assert {d.id for d in preview} == {"dec_budget", "dec_strike"}

    def test_decisions_for_special_event(self, service):
        _seed_cohorts(service)
        decisions = service.get_decisions_for_special_event("se_budget")
        assert [d.id for d in decisions] == ["dec_budget"]

    def test_matches_special_event(self, service):
        _seed_cohorts(service)
        assert service.matches_special_event("dec_budget", "se_budget") is True
        assert service.matches_special_event("dec_strike", "se_budget") is False

    def test_missing_records(self, service):
        _seed_cohorts(service)
        with pytest.raises(NotFound):
            service.get_decisions_for_special_event("se_missing")
        with pytest.raises(NotFound):
            service.matches_special_event("dec_budget", "se_missing")
        with pytest.raises(NotFound):
            service.matches_special_event("dec_missing", "se_budget")
        with pytest.raises(NotFound):
            service.get_special_event_by_slug("missing")

    def test_special_event_listing(self, service):
        _seed_cohorts(service)
        assert [e.id for e in service.get_special_events(featured=True)] == ["se_budget"]
        assert service.get_special_event_by_slug("budget-2026").id == "se_budget"
