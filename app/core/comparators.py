# app/core/comparators.py

"""
Per-rule field comparison.

Each rule kind has its own scorer. All of them return a RuleEvaluation with a
score in [0, 1] and never raise for bad record data: missing fields,
non-numeric amounts and unparseable dates all score 0 with a reason.
"""

from typing import Any

from rapidfuzz.distance import Levenshtein

from app.models import ExactRule, FuzzyRule, RangeRule, MatchingRule, RuleEvaluation
from app.core.normalizers import is_missing, strictly_equal, to_amount, to_datetime, to_text
from app.config import get_settings

settings = get_settings()

DEFAULT_FUZZY_THRESHOLD = settings.default_fuzzy_threshold  # 0.80
RANGE_DECAY_FACTOR = settings.range_decay_factor  # 0.20
AMOUNT_TOLERANCE_DIVISOR = settings.amount_tolerance_divisor  # 10

# Below-threshold fuzzy similarity earns half credit
FUZZY_PARTIAL_CREDIT = 0.5

SECONDS_PER_DAY = 86_400

AMOUNT_FIELD = "amount"
DATE_FIELD_MARKER = "date"


def compare(rule: MatchingRule, source_value: Any, target_value: Any) -> RuleEvaluation:
    """Evaluate one rule against one (source, target) value pair."""
    if is_missing(source_value) or is_missing(target_value):
        return RuleEvaluation(
            rule=rule,
            score=0.0,
            reason=f"Field '{rule.field}' missing in source or target",
        )

    if isinstance(rule, ExactRule):
        if rule.field == AMOUNT_FIELD and rule.tolerance is not None:
            return _compare_amount(rule, source_value, target_value)
        return _compare_exact(rule, source_value, target_value)

    if isinstance(rule, FuzzyRule):
        return _compare_fuzzy(rule, source_value, target_value)

    if isinstance(rule, RangeRule):
        return _compare_range(rule, source_value, target_value)

    return _unsupported(rule)


# ============================================
# Exact
# ============================================

def _compare_exact(rule: ExactRule, source_value: Any, target_value: Any) -> RuleEvaluation:
    if strictly_equal(source_value, target_value):
        return RuleEvaluation(
            rule=rule,
            score=1.0,
            reason=f"Exact match: {source_value!r} == {target_value!r}",
            passed=True,
        )
    return RuleEvaluation(
        rule=rule,
        score=0.0,
        reason=f"No exact match: {source_value!r} != {target_value!r}",
    )


def _compare_amount(rule: ExactRule, source_value: Any, target_value: Any) -> RuleEvaluation:
    source_amount = to_amount(source_value)
    target_amount = to_amount(target_value)

    if source_amount is None or target_amount is None:
        return RuleEvaluation(
            rule=rule,
            score=0.0,
            reason=f"Amount could not be parsed: {source_value!r} / {target_value!r}",
        )

    tolerance = rule.tolerance
    diff = abs(source_amount - target_amount)

    if diff <= tolerance:
        return RuleEvaluation(
            rule=rule,
            score=1.0,
            reason=f"Amounts match within tolerance ({diff:g} <= {tolerance:g})",
            passed=True,
        )

    # Linear decay, reaching 0 at AMOUNT_TOLERANCE_DIVISOR x tolerance
    decay_span = tolerance * AMOUNT_TOLERANCE_DIVISOR
    score = max(0.0, 1 - diff / decay_span) if decay_span > 0 else 0.0

    return RuleEvaluation(
        rule=rule,
        score=score,
        reason=f"Amounts differ by {diff:g} (tolerance: {tolerance:g})",
    )


# ============================================
# Fuzzy
# ============================================

def similarity(a: str, b: str) -> float:
    """
    Case-insensitive normalized Levenshtein similarity.

    Returns 0.0 to 1.0; two empty strings are identical.
    """
    a = a.lower()
    b = b.lower()
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - Levenshtein.distance(a, b)) / longest


def _compare_fuzzy(rule: FuzzyRule, source_value: Any, target_value: Any) -> RuleEvaluation:
    sim = similarity(to_text(source_value), to_text(target_value))
    threshold = rule.threshold if rule.threshold is not None else DEFAULT_FUZZY_THRESHOLD

    if sim >= threshold:
        return RuleEvaluation(
            rule=rule,
            score=sim,
            reason=f"Fuzzy match: similarity {sim:.2f} >= threshold {threshold}",
            passed=True,
        )
    return RuleEvaluation(
        rule=rule,
        score=sim * FUZZY_PARTIAL_CREDIT,
        reason=f"Fuzzy match below threshold: similarity {sim:.2f} < {threshold}",
    )


# ============================================
# Range
# ============================================

def _compare_range(rule: RangeRule, source_value: Any, target_value: Any) -> RuleEvaluation:
    days = rule.days
    if DATE_FIELD_MARKER not in rule.field or days is None or days <= 0:
        return _unsupported(rule)

    source_date = to_datetime(source_value)
    target_date = to_datetime(target_value)

    if source_date is None or target_date is None:
        return RuleEvaluation(
            rule=rule,
            score=0.0,
            reason=f"Date could not be parsed: {source_value!r} / {target_value!r}",
        )

    diff_days = abs((source_date - target_date).total_seconds()) / SECONDS_PER_DAY

    if diff_days <= days:
        return RuleEvaluation(
            rule=rule,
            score=1 - (diff_days / days) * RANGE_DECAY_FACTOR,
            reason=f"Date range match: {diff_days:.1f} days <= {days:g} days",
            passed=True,
        )
    return RuleEvaluation(
        rule=rule,
        score=max(0.0, 1 - (diff_days - days) / days),
        reason=f"Date range exceeded: {diff_days:.1f} days > {days:g} days",
    )


def _unsupported(rule: MatchingRule) -> RuleEvaluation:
    kind = getattr(rule, "type", "unknown")
    return RuleEvaluation(
        rule=rule,
        score=0.0,
        reason=f"{kind.capitalize()} matching not supported for field '{rule.field}'",
    )
