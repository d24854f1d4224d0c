# app/core/explain.py

"""
Human-readable narratives for confidence scores.
"""

from app.models import ConfidenceScore
from app.config import get_settings

settings = get_settings()

HIGH_CONFIDENCE = settings.high_confidence_threshold  # 0.95
MEDIUM_CONFIDENCE = settings.match_threshold  # 0.80
LOW_CONFIDENCE = settings.exception_severity_threshold  # 0.50

# Rules scoring below this are called out in previews
WEAK_RULE_SCORE = 0.5


def explain(confidence: ConfidenceScore) -> str:
    """Map a confidence score to a narrative."""
    score = confidence.score
    factors = confidence.factors
    percent = f"{score * 100:.1f}%"

    if score >= HIGH_CONFIDENCE:
        return (
            f"High confidence ({percent}): {factors.exact_matches} exact matches, "
            f"all rules satisfied."
        )
    elif score >= MEDIUM_CONFIDENCE:
        return (
            f"Medium confidence ({percent}): {factors.exact_matches} exact matches, "
            f"{factors.fuzzy_matches} fuzzy matches."
        )
    elif score >= LOW_CONFIDENCE:
        return (
            f"Low confidence ({percent}): Some matches found but not all rules "
            f"satisfied. Review recommended."
        )
    else:
        return f"Very low confidence ({percent}): Few matches found. Manual review required."


def recommend(confidence: ConfidenceScore) -> list[str]:
    """Suggest rule changes after previewing a rule set on sample data."""
    recommendations: list[str] = []

    if confidence.score < MEDIUM_CONFIDENCE:
        recommendations.append("Consider adding more matching fields to increase confidence")

    weak_rules = [e for e in confidence.breakdown if e.score < WEAK_RULE_SCORE]
    if weak_rules:
        recommendations.append(
            f"{len(weak_rules)} rule(s) have low confidence. "
            f"Consider adjusting tolerance or using fuzzy matching."
        )

    if confidence.factors.exact_matches == 0:
        recommendations.append(
            "No exact matches found. Consider adding at least one exact match rule for better accuracy"
        )

    return recommendations
