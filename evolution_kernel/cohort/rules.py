"""
Rule Engine — fail-closed boolean evaluation of cohort rules.

A cohort rule compiles to a list of optional clauses, one per rule field.
Unset fields compile to ``None`` and take no part in the evaluation: they
are neither true nor false. The remaining predicates are folded with the
rule's operator. When nothing is left, the rule matches nothing.

Clause semantics:
    substring      case-insensitive containment
    keyword set    case-insensitive, any keyword is a substring
    membership     exact value inclusion
    overlap        any shared value (categories, legacy domains)
    bounds         inclusive >= / <= on the creation timestamp
"""

import operator as op
from datetime import datetime
from functools import reduce
from typing import Callable, Iterable, List, Optional, Sequence

from evolution_kernel.models.cohort import CohortRule, Decision, RuleOperator

Predicate = Callable[[Decision], bool]
Clause = Optional[Predicate]

_FOLDS = {
    RuleOperator.AND: (op.and_, True),
    RuleOperator.OR: (op.or_, False),
}


def evaluate(
    clauses: Iterable[Clause],
    operator: RuleOperator,
    record: Decision,
) -> bool:
    """Fold the populated clauses with AND/OR. No populated clause → False."""
    predicates = [c for c in clauses if c is not None]
    if not predicates:
        return False
    combine, identity = _FOLDS[RuleOperator(operator)]
    return reduce(lambda acc, pred: combine(acc, bool(pred(record))), predicates, identity)


# --- Clause builders ---

def contains(field: Callable[[Decision], str], needle: Optional[str]) -> Clause:
    if not needle:
        return None
    needle = needle.lower()
    return lambda d: needle in (field(d) or "").lower()


def any_keyword(field: Callable[[Decision], str], keywords: Optional[Sequence[str]]) -> Clause:
    if not keywords:
        return None
    lowered = [k.lower() for k in keywords]
    return lambda d: any(k in (field(d) or "").lower() for k in lowered)


def member_of(field: Callable[[Decision], object], allowed: Optional[Sequence]) -> Clause:
    if not allowed:
        return None
    allowed_set = set(allowed)
    return lambda d: field(d) in allowed_set


def overlaps(field: Callable[[Decision], Sequence], wanted: Optional[Sequence]) -> Clause:
    if not wanted:
        return None
    wanted_set = set(wanted)
    return lambda d: bool(field(d)) and not wanted_set.isdisjoint(field(d))


def created_after(bound: Optional[datetime]) -> Clause:
    if bound is None:
        return None
    return lambda d: d.created_at >= bound


def created_before(bound: Optional[datetime]) -> Clause:
    if bound is None:
        return None
    return lambda d: d.created_at <= bound


def compile_rule(rule: CohortRule) -> List[Clause]:
    """One clause per rule field, ``None`` where the field is unset."""
    return [
        overlaps(lambda d: d.category_ids, rule.category_ids),
        any_keyword(lambda d: d.title, rule.title_keywords),
        contains(lambda d: d.title, rule.title_contains),
        any_keyword(lambda d: d.description, rule.description_keywords),
        contains(lambda d: d.description, rule.description_contains),
        member_of(lambda d: d.type, rule.decision_type),
        contains(lambda d: d.decider, rule.decider),
        member_of(lambda d: d.sentiment, rule.sentiment),
        overlaps(lambda d: d.impacted_domains, rule.impacted_domains),
        created_after(rule.decision_created_after),
        created_before(rule.decision_created_before),
    ]


def matches(rule: CohortRule, record: Decision) -> bool:
    """Does ``record`` belong to the cohort described by ``rule``?"""
    return evaluate(compile_rule(rule), rule.operator, record)
