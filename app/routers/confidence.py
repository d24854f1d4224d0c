# app/routers/confidence.py

"""
Confidence routes.

Explain a stored match's score and report accuracy across a job.
"""

from fastapi import APIRouter, Depends, HTTPException

from app.database import get_job, get_job_match_confidences, get_match
from app.core.confidence import aggregate, accuracy_metrics
from app.core.explain import explain
from app.dependencies import get_current_user
from app.models import MatchCandidate
from app.routers.jobs import load_job_rules

router = APIRouter()


@router.get("/matches/{match_id}/confidence")
async def get_match_confidence(
    match_id: str,
    user_id: str = Depends(get_current_user),
):
    """
    Recompute a match's confidence from its stored records and the job's
    current rules.
    """
    match = await get_match(match_id, user_id)
    if not match:
        raise HTTPException(status_code=404, detail="Match not found")

    job = await get_job(match["job_id"], user_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")

    confidence = aggregate(
        MatchCandidate(
            source_id=str(match["source_id"]),
            target_id=str(match["target_id"]),
            source=match.get("source_data") or {},
            target=match.get("target_data") or {},
        ),
        load_job_rules(job),
    )

    return {
        "data": {
            "match_id": match["id"],
            "confidence": {
                "score": confidence.score,
                "percentage": f"{confidence.score * 100:.1f}",
                "explanation": explain(confidence),
                "breakdown": [e.model_dump(mode="json") for e in confidence.breakdown],
                "factors": confidence.factors.model_dump(),
            },
        },
    }


@router.get("/jobs/{job_id}/accuracy")
async def get_job_accuracy(
    job_id: str,
    user_id: str = Depends(get_current_user),
):
    """Confidence distribution of a job's stored matches."""
    job = await get_job(job_id, user_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")

    confidences = await get_job_match_confidences(job_id)

    return {
        "data": {
            "job_id": job_id,
            "accuracy": accuracy_metrics(confidences).model_dump(),
        },
    }
