"""Cohort Rules — predicates selecting content records into special events."""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, field_validator


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Offset-free timestamps are read as UTC; others are converted to it."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class RuleOperator(str, Enum):
    AND = "AND"
    OR = "OR"


class DecisionType(str, Enum):
    LAW = "law"
    SANCTION = "sanction"
    TAX = "tax"
    AGREEMENT = "agreement"
    POLICY = "policy"
    REGULATION = "regulation"
    CRISIS = "crisis"
    DISASTER = "disaster"
    CONFLICT = "conflict"
    DISCOVERY = "discovery"
    ELECTION = "election"
    ECONOMIC_EVENT = "economic_event"
    OTHER = "other"


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class Decision(BaseModel):
    """A content record owned by the content subsystem. Read-only here."""

    id: str
    title: str
    description: str = ""
    category_ids: List[str] = []
    type: DecisionType = DecisionType.OTHER
    decider: str = ""
    sentiment: Sentiment = Sentiment.NEUTRAL
    impacted_domains: List[str] = []        # Legacy, superseded by categories
    date: datetime                          # Ordering key for cohort listings
    created_at: datetime

    normalize_dates = field_validator("date", "created_at")(as_utc)


class CohortRule(BaseModel):
    """
    A bag of optional clauses combined with ``operator``.

    Empty lists and empty strings count as unset. A rule with no
    populated clause matches nothing.
    """

    category_ids: Optional[List[str]] = None
    title_keywords: Optional[List[str]] = None
    title_contains: Optional[str] = None
    description_keywords: Optional[List[str]] = None
    description_contains: Optional[str] = None
    decision_type: Optional[List[DecisionType]] = None
    decider: Optional[str] = None
    sentiment: Optional[List[Sentiment]] = None
    impacted_domains: Optional[List[str]] = None
    decision_created_after: Optional[datetime] = None
    decision_created_before: Optional[datetime] = None
    operator: RuleOperator = RuleOperator.AND

    normalize_bounds = field_validator(
        "decision_created_after", "decision_created_before"
    )(as_utc)


class SpecialEvent(BaseModel):
    """A featured grouping of decisions defined by a cohort rule."""

    id: str
    slug: str
    name: str
    description: str = ""
    cohort_rules: CohortRule
    featured: bool = False
    priority: int = 0                       # Lower sorts first
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    normalize_window = field_validator("start_date", "end_date")(as_utc)

    def is_running(self, current_time: datetime) -> bool:
        """Started (or no start) and not yet ended (or no end)."""
        current_time = as_utc(current_time)
        if self.start_date and self.start_date > current_time:
            return False
        if self.end_date and self.end_date < current_time:
            return False
        return True
