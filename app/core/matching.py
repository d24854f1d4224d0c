# app/core/matching.py

"""
Core reconciliation engine.

For every source record, score every target record, keep the best candidate
and classify it as a Match or an Exception. Single pass, no blocking or
indexing: cost is O(|source| x |target| x |rules|).
"""

from datetime import datetime
from typing import NamedTuple, Optional, Sequence
import logging

from app.models import (
    BatchSummary,
    ConfidenceScore,
    Match,
    MatchCandidate,
    MatchException,
    MatchingRule,
    Record,
    ReconciliationResult,
)
from app.core.confidence import aggregate
from app.core.normalizers import record_id
from app.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

MATCH_THRESHOLD = settings.match_threshold  # 0.80
EXCEPTION_SEVERITY_THRESHOLD = settings.exception_severity_threshold  # 0.50

NO_TARGET_REASON = "No matching target found"


def reconcile(
    source_records: Sequence[Record],
    target_records: Sequence[Record],
    rules: Sequence[MatchingRule],
    match_threshold: Optional[float] = None,
) -> ReconciliationResult:
    """
    Main reconciliation function.

    Ties between equally scored targets go to the earliest one in
    `target_records`.
    """
    if match_threshold is None:
        match_threshold = MATCH_THRESHOLD

    start_time = datetime.now()
    matches: list[Match] = []
    exceptions: list[MatchException] = []

    logger.debug(
        "Reconciling %d source against %d target records with %d rules",
        len(source_records), len(target_records), len(rules),
    )

    for source_index, source in enumerate(source_records):
        source_id = record_id(source, settings.source_id_fields)
        best = _best_candidate(source, source_id, target_records, rules)

        if best is not None and best.confidence.score >= match_threshold:
            matches.append(Match(
                source_id=source_id,
                target_id=best.target_id,
                confidence=best.confidence.score,
                breakdown=best.confidence.breakdown,
                source_index=source_index,
                target_index=best.target_index,
            ))
        else:
            exceptions.append(_create_exception(source_id, source_index, best))

    summary = summarize(len(source_records), matches, exceptions)

    duration_ms = int((datetime.now() - start_time).total_seconds() * 1000)
    logger.info(
        "Reconciliation finished: %d matched, %d exceptions, %.1f%% accuracy (%d ms)",
        summary.matched, summary.unmatched, summary.accuracy, duration_ms,
    )

    return ReconciliationResult(matches=matches, exceptions=exceptions, summary=summary)


def summarize(
    total: int,
    matches: Sequence[Match],
    exceptions: Sequence[MatchException],
) -> BatchSummary:
    """Derive batch figures from match / exception counts."""
    matched = len(matches)
    average = (sum(m.confidence for m in matches) / matched) if matched else 0.0

    return BatchSummary(
        total=total,
        matched=matched,
        unmatched=len(exceptions),
        accuracy=(matched / total * 100) if total else 0.0,
        average_confidence=average * 100,
    )


class _Candidate(NamedTuple):
    target_id: str
    target_index: int
    confidence: ConfidenceScore


def _best_candidate(
    source: Record,
    source_id: str,
    target_records: Sequence[Record],
    rules: Sequence[MatchingRule],
) -> Optional[_Candidate]:
    """Highest-scoring target for a source record; first maximum wins."""
    best: Optional[_Candidate] = None

    for target_index, target in enumerate(target_records):
        target_id = record_id(target, settings.target_id_fields)
        confidence = aggregate(
            MatchCandidate(
                source_id=source_id,
                target_id=target_id,
                source=dict(source),
                target=dict(target),
            ),
            rules,
        )

        # Strict comparison keeps the earlier target on ties
        if best is None or confidence.score > best.confidence.score:
            best = _Candidate(target_id, target_index, confidence)

    return best


def _create_exception(
    source_id: str,
    source_index: int,
    best: Optional[_Candidate],
) -> MatchException:
    """Classify a source record that didn't reach the match threshold."""
    if best is None:
        return MatchException(
            source_id=source_id,
            reason=NO_TARGET_REASON,
            severity="medium",
            source_index=source_index,
        )

    score = best.confidence.score
    return MatchException(
        source_id=source_id,
        reason=f"Low confidence match ({score * 100:.1f}%)",
        severity="low" if score >= EXCEPTION_SEVERITY_THRESHOLD else "medium",
        source_index=source_index,
    )
