# app/routers/jobs.py

"""
Job reconciliation routes.

Runs the matching engine over posted records with a job's stored rule set and
optionally persists the results against a new execution.
"""

from datetime import datetime
from typing import Any, Optional
import asyncio
import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ValidationError

from app.database import get_job, save_execution, save_exceptions, save_matches
from app.core.matching import reconcile
from app.dependencies import get_current_user
from app.models import MatchingRule, ReconciliationResult, parse_rules

router = APIRouter()
logger = logging.getLogger(__name__)

# Jobs with a run in progress in this process
_active_runs: set[str] = set()


class JobReconcileRequest(BaseModel):
    source_records: list[dict[str, Any]]
    target_records: list[dict[str, Any]]
    persist: bool = True


def load_job_rules(job: dict) -> list[MatchingRule]:
    """Parse the matching rules stored on a job."""
    raw = (job.get("rules") or {}).get("matching") or []
    try:
        return parse_rules(raw)
    except ValidationError as e:
        logger.warning("Job %s has invalid matching rules: %s", job.get("id"), e)
        raise HTTPException(status_code=422, detail="Job matching rules are invalid")


# ============================================
# Run Reconciliation
# ============================================

@router.post("/{job_id}/reconcile")
async def run_job_reconciliation(
    job_id: str,
    request: JobReconcileRequest,
    user_id: str = Depends(get_current_user),
):
    """
    Run reconciliation for a job.

    1. Loads the job's rules
    2. Runs the matching engine
    3. Saves the execution, matches and exceptions if requested
    """
    job = await get_job(job_id, user_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")

    rules = load_job_rules(job)

    if job_id in _active_runs:
        raise HTTPException(status_code=409, detail="A reconciliation is already running for this job")

    _active_runs.add(job_id)
    try:
        start_time = datetime.now()
        # Runs in a worker thread; a second run of this job meanwhile gets 409
        result = await asyncio.to_thread(
            reconcile, request.source_records, request.target_records, rules,
        )
        duration_ms = int((datetime.now() - start_time).total_seconds() * 1000)

        execution_id = None
        if request.persist:
            execution_id = await _persist_results(job_id, request, result, duration_ms)
    finally:
        _active_runs.discard(job_id)

    return {
        "success": True,
        "job_id": job_id,
        "execution_id": execution_id,
        "summary": result.summary.model_dump(),
        "matches": [m.model_dump(mode="json") for m in result.matches],
        "exceptions": [e.model_dump(mode="json") for e in result.exceptions],
        "duration_ms": duration_ms,
    }


async def _persist_results(
    job_id: str,
    request: JobReconcileRequest,
    result: ReconciliationResult,
    duration_ms: int,
) -> Optional[str]:
    """Store a run; failures are logged, not raised."""
    execution_id = str(uuid.uuid4())

    try:
        await save_execution({
            "id": execution_id,
            "job_id": job_id,
            "status": "completed",
            "summary": result.summary.model_dump(),
            "duration_ms": duration_ms,
        })
        await save_matches(job_id, execution_id, [
            {
                "source_id": m.source_id,
                "target_id": m.target_id,
                "confidence": m.confidence,
                "breakdown": [e.model_dump(mode="json") for e in m.breakdown],
                "source_data": request.source_records[m.source_index],
                "target_data": request.target_records[m.target_index],
            }
            for m in result.matches
        ])
        await save_exceptions(job_id, execution_id, [
            {
                **e.model_dump(mode="json", exclude={"source_index"}),
                "source_data": request.source_records[e.source_index],
            }
            for e in result.exceptions
        ])
    except Exception:
        logger.exception("Failed to persist results for job %s", job_id)
        return None

    return execution_id
