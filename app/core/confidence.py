# app/core/confidence.py

"""
Confidence scoring for candidate pairs.

Score (0.0-1.0) = mean of per-rule scores, plus a bonus of 0.10 when more than
one exact rule passed, capped at 1.0.
"""

from typing import Iterable, Sequence

from app.models import (
    AccuracyMetrics,
    ConfidenceDistribution,
    ConfidenceFactors,
    ConfidenceScore,
    MatchCandidate,
    MatchingRule,
    RuleEvaluation,
)
from app.core.comparators import compare
from app.config import get_settings

settings = get_settings()

# Thresholds
EXACT_MATCH_BONUS = settings.exact_match_bonus  # 0.10
HIGH_CONFIDENCE = settings.high_confidence_threshold  # 0.95
MEDIUM_CONFIDENCE = settings.match_threshold  # 0.80


def aggregate(candidate: MatchCandidate, rules: Sequence[MatchingRule]) -> ConfidenceScore:
    """
    Score a candidate pair against a rule set.

    Rules are evaluated in order and every rule contributes exactly one
    breakdown entry, so len(breakdown) == len(rules).
    """
    breakdown: list[RuleEvaluation] = []
    exact_matches = 0
    fuzzy_matches = 0
    range_matches = 0

    for rule in rules:
        evaluation = compare(
            rule,
            candidate.source.get(rule.field),
            candidate.target.get(rule.field),
        )
        breakdown.append(evaluation)

        if evaluation.passed:
            if rule.type == "exact":
                exact_matches += 1
            elif rule.type == "fuzzy":
                fuzzy_matches += 1
            elif rule.type == "range":
                range_matches += 1

    return ConfidenceScore(
        score=score_breakdown(breakdown),
        breakdown=breakdown,
        factors=ConfidenceFactors(
            exact_matches=exact_matches,
            fuzzy_matches=fuzzy_matches,
            range_matches=range_matches,
            total_rules=len(rules),
        ),
    )


def score_breakdown(breakdown: Sequence[RuleEvaluation]) -> float:
    """Aggregate per-rule evaluations into a single score."""
    if not breakdown:
        return 0.0

    raw_score = sum(e.score for e in breakdown) / len(breakdown)

    exact_passes = sum(1 for e in breakdown if e.passed and e.rule.type == "exact")
    bonus = EXACT_MATCH_BONUS if exact_passes > 1 else 0.0

    return min(1.0, raw_score + bonus)


def confidence_distribution(scores: Iterable[float]) -> ConfidenceDistribution:
    """Bucket scores into high / medium / low."""
    distribution = ConfidenceDistribution()
    for score in scores:
        if score >= HIGH_CONFIDENCE:
            distribution.high += 1
        elif score >= MEDIUM_CONFIDENCE:
            distribution.medium += 1
        else:
            distribution.low += 1
    return distribution


def accuracy_metrics(scores: Sequence[float]) -> AccuracyMetrics:
    """
    Accuracy figures for a job's stored match confidences.

    Accuracy is the share of high-confidence matches.
    """
    distribution = confidence_distribution(scores)
    total = len(scores)
    accuracy = (distribution.high / total * 100) if total else 0.0

    if accuracy >= HIGH_CONFIDENCE * 100:
        badge = "high"
    elif accuracy >= MEDIUM_CONFIDENCE * 100:
        badge = "medium"
    else:
        badge = "low"

    return AccuracyMetrics(
        total_matches=total,
        high_confidence=distribution.high,
        medium_confidence=distribution.medium,
        low_confidence=distribution.low,
        average_confidence=(sum(scores) / total) if total else 0.0,
        accuracy_percentage=accuracy,
        badge=badge,
    )
