"""Tests for the Cohort Matcher and the decision / special event sources."""

from datetime import datetime, timedelta, timezone

import pytest

from evolution_kernel.cohort.matcher import CohortMatcher
from evolution_kernel.cohort.store import DecisionStore, SpecialEventStore
from evolution_kernel.models.cohort import (
    CohortRule,
    Decision,
    RuleOperator,
    Sentiment,
    SpecialEvent,
)

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _make_decision(index: int, title: str = "Budget vote", **overrides) -> Decision:
    fields = dict(
        id=f"dec_{index}",
        title=title,
        date=T0 + timedelta(days=index),
        created_at=T0 + timedelta(days=index),
    )
    fields.update(overrides)
    return Decision(**fields)


def _make_event(event_id: str, **overrides) -> SpecialEvent:
    fields = dict(
        id=event_id,
        slug=event_id.replace("_", "-"),
        name=event_id,
        cohort_rules=CohortRule(title_keywords=["budget"]),
    )
    fields.update(overrides)
    return SpecialEvent(**fields)


@pytest.fixture
def decisions():
    store = DecisionStore()
    for i in range(6):
        store.upsert(_make_decision(i))
    store.upsert(_make_decision(10, title="Flood response plan", sentiment=Sentiment.NEGATIVE))
    return store


class TestCohortMatcher:
    def test_matches_newest_first(self, decisions):
        matcher = CohortMatcher(decisions)
        matched = matcher.match(CohortRule(title_keywords=["budget"]))
        assert [d.id for d in matched] == ["dec_5", "dec_4", "dec_3", "dec_2", "dec_1", "dec_0"]

    def test_limit_truncates_in_order(self, decisions):
        matcher = CohortMatcher(decisions)
        matched = matcher.match(CohortRule(title_keywords=["budget"]), limit=2)
        assert [d.id for d in matched] == ["dec_5", "dec_4"]

    def test_default_limit(self, decisions):
        matcher = CohortMatcher(decisions, default_limit=3)
        assert len(matcher.match(CohortRule(title_keywords=["budget"]))) == 3

    def test_empty_rule_selects_nothing(self, decisions):
        assert CohortMatcher(decisions).match(CohortRule()) == []

    def test_or_rule(self, decisions):
        rule = CohortRule(
            title_contains="flood",
            sentiment=[Sentiment.NEGATIVE],
            operator=RuleOperator.OR,
        )
        assert [d.id for d in CohortMatcher(decisions).match(rule)] == ["dec_10"]

    def test_offset_free_bound_read_as_utc(self, decisions):
        rule = CohortRule.model_validate({
            "title_keywords": ["budget"],
            "decision_created_after": "2026-01-04T12:00:00",
        })
        matched = CohortMatcher(decisions).match(rule)
        assert [d.id for d in matched] == ["dec_5", "dec_4"]

    def test_negative_limit_uses_default(self, decisions):
        matcher = CohortMatcher(decisions, default_limit=3)
        assert len(matcher.match(CohortRule(title_keywords=["budget"]), limit=-1)) == 3

    def test_matches_single(self, decisions):
        matcher = CohortMatcher(decisions)
        rule = CohortRule(title_keywords=["budget"])
        assert matcher.matches_single(rule, decisions.get("dec_1")) is True
        assert matcher.matches_single(rule, decisions.get("dec_10")) is False


class TestDecisionStore:
    def test_order_ties_broken_by_created_at(self):
        store = DecisionStore()
        store.upsert(_make_decision(1, date=T0, created_at=T0))
        store.upsert(_make_decision(2, date=T0, created_at=T0 + timedelta(hours=1)))
        assert [d.id for d in store.list_by_date_desc()] == ["dec_2", "dec_1"]

    def test_upsert_replaces(self):
        store = DecisionStore()
        store.upsert(_make_decision(1))
        store.upsert(_make_decision(1, title="Renamed"))
        assert store.count() == 1
        assert store.get("dec_1").title == "Renamed"


class TestSpecialEventStore:
    def test_get_by_slug(self):
        store = SpecialEventStore()
        store.upsert(_make_event("budget_2026"))
        assert store.get_by_slug("budget-2026").id == "budget_2026"
        assert store.get_by_slug("missing") is None

    def test_sorted_by_priority_then_newest_start(self):
        store = SpecialEventStore()
        store.upsert(_make_event("low", priority=5, start_date=T0))
        store.upsert(_make_event("old", priority=1, start_date=T0))
        store.upsert(_make_event("new", priority=1, start_date=T0 + timedelta(days=3)))
        assert [e.id for e in store.list()] == ["new", "old", "low"]

    def test_featured_filter(self):
        store = SpecialEventStore()
        store.upsert(_make_event("a", featured=True))
        store.upsert(_make_event("b"))
        assert [e.id for e in store.list(featured=True)] == ["a"]
        assert [e.id for e in store.list(featured=False)] == ["b"]
        assert len(store.list()) == 2

    def test_active_only(self):
        store = SpecialEventStore()
        now = T0 + timedelta(days=10)
        store.upsert(_make_event("running", start_date=T0, end_date=T0 + timedelta(days=20)))
        store.upsert(_make_event("future", start_date=T0 + timedelta(days=15)))
        store.upsert(_make_event("ended", end_date=T0 + timedelta(days=5)))
        store.upsert(_make_event("open"))
        ids = {e.id for e in store.list(active_only=True, current_time=now)}
        assert ids == {"running", "open"}

    def test_offset_free_start_dates_sort_with_open_events(self):
        store = SpecialEventStore()
        store.upsert(SpecialEvent.model_validate({
            "id": "dated",
            "slug": "dated",
            "name": "Dated",
            "cohort_rules": {"title_keywords": ["budget"]},
            "start_date": "2026-01-01T00:00:00",
        }))
        store.upsert(_make_event("undated"))
        assert [e.id for e in store.list()] == ["dated", "undated"]
        assert {e.id for e in store.list(active_only=True, current_time=T0)} == {"dated", "undated"}

    def test_offset_free_current_time(self):
        store = SpecialEventStore()
        store.upsert(_make_event("running", start_date=T0))
        naive_now = datetime(2026, 1, 2)
        assert [e.id for e in store.list(active_only=True, current_time=naive_now)] == ["running"]
