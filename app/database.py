# app/database.py

from functools import lru_cache

from supabase import create_client, Client
from app.config import get_settings

settings = get_settings()


@lru_cache()
def get_supabase() -> Client:
    """Public client (respects RLS)."""
    return create_client(settings.supabase_url, settings.supabase_anon_key)


@lru_cache()
def get_supabase_admin() -> Client:
    """Admin client (bypasses RLS - use carefully)."""
    return create_client(settings.supabase_url, settings.supabase_service_role_key)


# ============================================
# Jobs
# ============================================

async def get_job(job_id: str, user_id: str) -> dict | None:
    """Get a job owned by the user."""
    response = (
        get_supabase_admin().table("jobs")
        .select("*")
        .eq("id", job_id)
        .eq("user_id", user_id)
        .execute()
    )
    return response.data[0] if response.data else None


async def save_execution(execution: dict) -> dict | None:
    """Save a reconciliation run against a job."""
    response = get_supabase_admin().table("executions").insert(execution).execute()
    return response.data[0] if response.data else None


# ============================================
# Matches & exceptions
# ============================================

async def save_matches(job_id: str, execution_id: str, matches: list[dict]) -> int:
    """Save matches for an execution."""
    if not matches:
        return 0

    for match in matches:
        match["job_id"] = job_id
        match["execution_id"] = execution_id

    response = get_supabase_admin().table("matches").insert(matches).execute()
    return len(response.data) if response.data else 0


async def save_exceptions(job_id: str, execution_id: str, exceptions: list[dict]) -> int:
    """Save exceptions for an execution."""
    if not exceptions:
        return 0

    for exception in exceptions:
        exception["job_id"] = job_id
        exception["execution_id"] = execution_id

    response = get_supabase_admin().table("exceptions").insert(exceptions).execute()
    return len(response.data) if response.data else 0


async def get_match(match_id: str, user_id: str) -> dict | None:
    """Get a single match, scoped to jobs the user owns."""
    response = (
        get_supabase_admin().table("matches")
        .select("*, jobs!inner(user_id)")
        .eq("id", match_id)
        .eq("jobs.user_id", user_id)
        .execute()
    )
    return response.data[0] if response.data else None


async def get_job_match_confidences(job_id: str) -> list[float]:
    """Get the stored confidence of every match in a job."""
    response = (
        get_supabase_admin().table("matches")
        .select("confidence")
        .eq("job_id", job_id)
        .execute()
    )
    return [float(row["confidence"]) for row in response.data or []]
