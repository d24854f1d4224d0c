# app/routers/rules.py

"""
Rule set routes.

Templates, single-pair previews and validation for matching rules.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from app.core.confidence import aggregate
from app.core.explain import explain, recommend
from app.core.matching import MATCH_THRESHOLD
from app.dependencies import get_current_user
from app.models import MatchCandidate, MatchingRule, validate_rules

router = APIRouter()


RULE_TEMPLATES = [
    {
        "id": "strict-exact-match",
        "name": "Strict Exact Match",
        "description": "High accuracy, requires exact matches on all fields",
        "rules": [
            {"field": "transaction_id", "type": "exact"},
            {"field": "amount", "type": "exact", "tolerance": 0.01},
            {"field": "date", "type": "exact"},
        ],
        "use_case": "High-value transactions requiring perfect accuracy",
    },
    {
        "id": "flexible-fuzzy-match",
        "name": "Flexible Fuzzy Match",
        "description": "Balanced accuracy with tolerance for variations",
        "rules": [
            {"field": "order_id", "type": "fuzzy", "threshold": 0.85},
            {"field": "amount", "type": "exact", "tolerance": 0.10},
            {"field": "date", "type": "range", "days": 2},
        ],
        "use_case": "E-commerce orders with payment variations",
    },
    {
        "id": "date-range-match",
        "name": "Date Range Match",
        "description": "Handles timing differences between platforms",
        "rules": [
            {"field": "transaction_id", "type": "exact"},
            {"field": "amount", "type": "exact", "tolerance": 0.01},
            {"field": "date", "type": "range", "days": 3},
        ],
        "use_case": "Multi-platform reconciliation with timing delays",
    },
]


class SampleData(BaseModel):
    source: dict[str, Any]
    target: dict[str, Any]


class PreviewRequest(BaseModel):
    rules: list[MatchingRule] = Field(default_factory=list)
    sample_data: Optional[SampleData] = None


class ValidateRequest(BaseModel):
    rules: list[Any]


# ============================================
# Templates
# ============================================

@router.get("/templates")
async def list_templates(
    user_id: str = Depends(get_current_user),
    use_case: Optional[str] = Query(None, description="Filter by use case text"),
):
    """List starter rule sets."""
    templates = RULE_TEMPLATES
    if use_case:
        templates = [t for t in templates if use_case.lower() in t["use_case"].lower()]

    return {
        "data": templates,
        "count": len(templates),
    }


# ============================================
# Preview
# ============================================

@router.post("/preview")
async def preview_rules(
    request: PreviewRequest,
    user_id: str = Depends(get_current_user),
):
    """Score one source/target sample against a rule set."""
    if request.sample_data is None:
        raise HTTPException(status_code=400, detail="Sample data required for preview")

    confidence = aggregate(
        MatchCandidate(
            source_id="preview-source",
            target_id="preview-target",
            source=request.sample_data.source,
            target=request.sample_data.target,
        ),
        request.rules,
    )

    return {
        "data": {
            "preview": {
                "source": request.sample_data.source,
                "target": request.sample_data.target,
                "confidence": confidence.score,
                "would_match": confidence.score >= MATCH_THRESHOLD,
                "breakdown": [e.model_dump(mode="json") for e in confidence.breakdown],
            },
            "insights": {
                "factors": confidence.factors.model_dump(),
                "explanation": explain(confidence),
                "recommendations": recommend(confidence),
            },
        },
    }


# ============================================
# Validation
# ============================================

@router.post("/validate")
async def validate_rule_set(
    request: ValidateRequest,
    user_id: str = Depends(get_current_user),
):
    """Check a rule set without running it."""
    rules, errors = validate_rules(request.rules)

    return {
        "valid": not errors,
        "rules": [r.model_dump() for r in rules],
        "errors": [e.model_dump() for e in errors],
    }
