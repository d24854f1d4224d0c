# app/models/__init__.py

from app.models.rule import (
    ExactRule,
    FuzzyRule,
    RangeRule,
    MatchingRule,
    RuleKind,
    parse_rules,
    validate_rules,
    RuleError,
)
from app.models.confidence import (
    Record,
    RecordValue,
    MatchCandidate,
    RuleEvaluation,
    ConfidenceFactors,
    ConfidenceScore,
    ConfidenceDistribution,
    AccuracyMetrics,
)
from app.models.match import (
    Match,
    MatchException,
    ExceptionSeverity,
    BatchSummary,
    ReconciliationResult,
)

__all__ = [
    # Rules
    "ExactRule",
    "FuzzyRule",
    "RangeRule",
    "MatchingRule",
    "RuleKind",
    "parse_rules",
    "validate_rules",
    "RuleError",
    # Confidence
    "Record",
    "RecordValue",
    "MatchCandidate",
    "RuleEvaluation",
    "ConfidenceFactors",
    "ConfidenceScore",
    "ConfidenceDistribution",
    "AccuracyMetrics",
    # Match
    "Match",
    "MatchException",
    "ExceptionSeverity",
    "BatchSummary",
    "ReconciliationResult",
]
