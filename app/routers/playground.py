# app/routers/playground.py

"""
Playground routes.

No auth and no persistence: run the matching engine on posted sample data
and return the results directly.
"""

from typing import Any
import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from app.core.matching import reconcile
from app.core.confidence import confidence_distribution
from app.models import MatchingRule

router = APIRouter()
logger = logging.getLogger(__name__)


# ============================================
# Sample Data
# ============================================

PLAYGROUND_ADAPTERS = [
    {
        "id": "stripe",
        "name": "Stripe",
        "fields": ["charge_id", "amount", "currency", "date", "customer_email"],
        "sample_data": {
            "charge_id": "ch_abc123",
            "amount": 99.99,
            "currency": "USD",
            "date": "2026-01-15T10:00:00Z",
            "customer_email": "customer@example.com",
        },
    },
    {
        "id": "shopify",
        "name": "Shopify",
        "fields": ["order_id", "amount", "currency", "date", "customer_email"],
        "sample_data": {
            "order_id": "12345",
            "amount": 99.99,
            "currency": "USD",
            "date": "2026-01-15T10:00:00Z",
            "customer_email": "customer@example.com",
        },
    },
    {
        "id": "quickbooks",
        "name": "QuickBooks",
        "fields": ["transaction_id", "amount", "currency", "date", "customer_email"],
        "sample_data": {
            "transaction_id": "QB_TXN_456",
            "amount": 99.99,
            "currency": "USD",
            "date": "2026-01-15T10:00:00Z",
            "customer_email": "customer@example.com",
        },
    },
]

PLAYGROUND_EXAMPLES = [
    {
        "id": "shopify-stripe",
        "name": "Shopify → Stripe Reconciliation",
        "description": "Match Shopify orders with Stripe payments",
        "source_adapter": "shopify",
        "target_adapter": "stripe",
        "source_data": [
            {"order_id": "12345", "amount": 99.99, "currency": "USD", "date": "2026-01-15T10:00:00Z"},
            {"order_id": "12346", "amount": 149.50, "currency": "USD", "date": "2026-01-15T11:00:00Z"},
        ],
        "target_data": [
            {"charge_id": "ch_stripe_123", "order_id": "12345", "amount": 99.99, "currency": "USD", "date": "2026-01-15T10:01:00Z"},
            {"charge_id": "ch_stripe_124", "order_id": "12346", "amount": 149.50, "currency": "USD", "date": "2026-01-15T11:01:00Z"},
        ],
        "rules": [
            {"field": "order_id", "type": "exact"},
            {"field": "amount", "type": "exact", "tolerance": 0.01},
            {"field": "date", "type": "range", "days": 1},
        ],
    },
    {
        "id": "stripe-quickbooks",
        "name": "Stripe → QuickBooks Sync",
        "description": "Reconcile Stripe payments with QuickBooks transactions",
        "source_adapter": "stripe",
        "target_adapter": "quickbooks",
        "source_data": [
            {"charge_id": "ch_abc123", "amount": 199.99, "currency": "USD", "date": "2026-01-15T09:00:00Z", "customer_email": "customer@example.com"},
        ],
        "target_data": [
            {"transaction_id": "QB_TXN_456", "charge_id": "ch_abc123", "amount": 199.99, "currency": "USD", "date": "2026-01-15T09:05:00Z", "customer_email": "Customer@Example.com"},
        ],
        "rules": [
            {"field": "charge_id", "type": "exact"},
            {"field": "amount", "type": "exact", "tolerance": 0.01},
            {"field": "customer_email", "type": "fuzzy", "threshold": 0.9},
        ],
    },
]

KNOWN_ADAPTERS = {adapter["id"] for adapter in PLAYGROUND_ADAPTERS}


class PlaygroundRequest(BaseModel):
    source_adapter: str
    source_data: list[dict[str, Any]]
    target_adapter: str
    target_data: list[dict[str, Any]]
    rules: list[MatchingRule] = Field(default_factory=list)


# ============================================
# Examples & Adapters
# ============================================

@router.get("/playground/examples")
async def get_examples():
    """Pre-filled reconciliation examples."""
    return {
        "data": PLAYGROUND_EXAMPLES,
        "count": len(PLAYGROUND_EXAMPLES),
    }


@router.get("/playground/adapters")
async def get_adapters():
    """Adapter field schemas for building sample data."""
    return {
        "data": PLAYGROUND_ADAPTERS,
        "count": len(PLAYGROUND_ADAPTERS),
    }


# ============================================
# Simulated Reconciliation
# ============================================

@router.post("/playground/reconcile")
async def run_playground(request: PlaygroundRequest):
    """
    Run a reconciliation simulation.

    Nothing is stored; confidences come back as percentages.
    """
    for adapter in (request.source_adapter, request.target_adapter):
        if adapter not in KNOWN_ADAPTERS:
            raise HTTPException(
                status_code=400,
                detail=f"Unknown adapter '{adapter}'. Must be one of: {', '.join(sorted(KNOWN_ADAPTERS))}",
            )

    logger.debug("Playground run: %s -> %s", request.source_adapter, request.target_adapter)

    result = reconcile(request.source_data, request.target_data, request.rules)
    summary = result.summary
    distribution = confidence_distribution(m.confidence for m in result.matches)

    return {
        "data": {
            "summary": {
                "total": summary.total,
                "matched": summary.matched,
                "unmatched": summary.unmatched,
                "accuracy": round(summary.accuracy, 2),
                "average_confidence": round(summary.average_confidence, 2),
            },
            "matches": [
                {
                    **m.model_dump(mode="json"),
                    "confidence": round(m.confidence * 100, 2),
                }
                for m in result.matches
            ],
            "exceptions": [e.model_dump(mode="json") for e in result.exceptions],
            "visualization": {
                "match_rate": round(summary.accuracy, 2),
                "confidence_distribution": distribution.model_dump(),
            },
        },
        "playground": True,
        "message": "This is a simulation. Sign up to run real reconciliations.",
    }
