# app/core/__init__.py

from app.core.matching import reconcile, summarize
from app.core.confidence import (
    aggregate,
    score_breakdown,
    confidence_distribution,
    accuracy_metrics,
)
from app.core.comparators import compare, similarity
from app.core.explain import explain, recommend
from app.core.normalizers import (
    to_amount,
    to_datetime,
    to_text,
    record_id,
)

__all__ = [
    "reconcile",
    "summarize",
    "aggregate",
    "score_breakdown",
    "confidence_distribution",
    "accuracy_metrics",
    "compare",
    "similarity",
    "explain",
    "recommend",
    "to_amount",
    "to_datetime",
    "to_text",
    "record_id",
]
