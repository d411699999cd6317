"""
Cohort Matcher — selects the decisions belonging to a cohort.

Used both for live classification of a single decision and for bulk
preview of a rule before it is saved on a special event.
"""

from typing import List, Optional

from evolution_kernel.cohort import rules
from evolution_kernel.cohort.store import DecisionStore
from evolution_kernel.models.cohort import CohortRule, Decision


class CohortMatcher:
    def __init__(self, decisions: DecisionStore, default_limit: int = 50):
        self.decisions = decisions
        self.default_limit = default_limit

    def match(self, rule: CohortRule, limit: Optional[int] = None) -> List[Decision]:
        """First ``limit`` matching decisions, newest first."""
        if not limit or limit < 1:
            limit = self.default_limit
        clauses = rules.compile_rule(rule)
        matched = []
        for decision in self.decisions.list_by_date_desc():
            if rules.evaluate(clauses, rule.operator, decision):
                matched.append(decision)
                if len(matched) >= limit:
                    break
        return matched

    def matches_single(self, rule: CohortRule, record: Decision) -> bool:
        return rules.matches(rule, record)
