# app/models/match.py

from typing import Literal
from pydantic import BaseModel, ConfigDict, Field

from app.models.confidence import RuleEvaluation


# ============================================
# Match
# ============================================

class Match(BaseModel):
    """A source record paired with its best target."""

    model_config = ConfigDict(frozen=True)

    source_id: str
    target_id: str
    confidence: float = Field(ge=0, le=1)
    breakdown: list[RuleEvaluation] = Field(default_factory=list)
    source_index: int = Field(ge=0, description="Position of the source record in the batch")
    target_index: int = Field(ge=0, description="Position of the target record in the batch")


# ============================================
# Exception
# ============================================

ExceptionSeverity = Literal["low", "medium"]


class MatchException(BaseModel):
    """A source record that needs human review."""

    model_config = ConfigDict(frozen=True)

    source_id: str
    reason: str
    severity: ExceptionSeverity
    source_index: int = Field(ge=0, description="Position of the source record in the batch")


# ============================================
# Batch
# ============================================

class BatchSummary(BaseModel):
    """Summary of a reconciliation run."""

    model_config = ConfigDict(frozen=True)

    total: int
    matched: int
    unmatched: int
    accuracy: float = Field(description="Matched / total, as a percentage")
    average_confidence: float = Field(description="Mean match confidence, as a percentage")


class ReconciliationResult(BaseModel):
    """Result of a reconciliation run."""

    model_config = ConfigDict(frozen=True)

    matches: list[Match] = Field(default_factory=list)
    exceptions: list[MatchException] = Field(default_factory=list)
    summary: BatchSummary
