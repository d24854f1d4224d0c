# app/models/confidence.py

from datetime import date, datetime
from typing import Any, Mapping, Union
from pydantic import BaseModel, ConfigDict, Field

from app.models.rule import MatchingRule


# A flat, already-normalized record from an adapter.
RecordValue = Union[str, int, float, bool, date, datetime, None]
Record = Mapping[str, Any]


# ============================================
# Candidate
# ============================================

class MatchCandidate(BaseModel):
    """A (source, target) pair under evaluation."""

    model_config = ConfigDict(frozen=True)

    source_id: str
    target_id: str
    source: dict[str, Any]
    target: dict[str, Any]


# ============================================
# Confidence Scoring
# ============================================

class RuleEvaluation(BaseModel):
    """Outcome of one rule against one candidate pair."""

    model_config = ConfigDict(frozen=True)

    rule: MatchingRule
    score: float = Field(ge=0, le=1)
    reason: str
    passed: bool = False


class ConfidenceFactors(BaseModel):
    model_config = ConfigDict(frozen=True)

    exact_matches: int = 0
    fuzzy_matches: int = 0
    range_matches: int = 0
    total_rules: int = 0


class ConfidenceScore(BaseModel):
    """Aggregated score with the per-rule breakdown it was derived from."""

    model_config = ConfigDict(frozen=True)

    score: float = Field(ge=0, le=1)
    breakdown: list[RuleEvaluation] = Field(default_factory=list)
    factors: ConfidenceFactors = Field(default_factory=ConfidenceFactors)


class ConfidenceDistribution(BaseModel):
    high: int = 0
    medium: int = 0
    low: int = 0


class AccuracyMetrics(BaseModel):
    """Accuracy figures for a job's stored matches."""

    total_matches: int
    high_confidence: int
    medium_confidence: int
    low_confidence: int
    average_confidence: float
    accuracy_percentage: float
    badge: str
