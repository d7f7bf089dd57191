"""
Supabase PostgreSQL storage for submission records.
"""

import logging
from collections import Counter
from datetime import datetime
from typing import Any, Dict, Optional

from auth.supabase_client import get_service_role_client, get_supabase_client

logger = logging.getLogger(__name__)

SUBMISSIONS_TABLE = "submissions"


def save_submission(record: Dict[str, Any], access_token: Optional[str] = None, client=None) -> Dict[str, Any]:
    """
    Upsert a submission row keyed by ``application_id``.

    Returns:
        dict with success, application_id and error (on failure)
    """
    try:
        # Authenticated client so RLS can check auth.uid() against user_id.
        supabase = client or get_supabase_client(access_token=access_token)
        if not supabase:
            raise Exception("Could not initialize Supabase client")

        row = dict(record)
        row["updated_at"] = datetime.now().isoformat()
        supabase.table(SUBMISSIONS_TABLE).upsert(row, on_conflict="application_id").execute()
        logger.info(f"💾 Saved submission {row.get('application_id')} ({row.get('category')})")
        return {"success": True, "application_id": row.get("application_id")}
    except Exception as e:
        logger.error(f"❌ Error saving submission to Supabase: {e}")
        return {"success": False, "application_id": record.get("application_id"), "error": str(e)}


def get_submission_stats(client=None) -> Dict[str, Any]:
    """
    Count submissions per category and per status across all users.
    Uses the service role client; returns zero counts when unavailable.
    """
    stats: Dict[str, Any] = {"total_count": 0, "by_category": {}, "by_status": {}}
    try:
        supabase = client or get_service_role_client()
        if not supabase:
            logger.warning("⚠️ Service role key not set; submission stats unavailable")
            return stats
        result = supabase.table(SUBMISSIONS_TABLE).select("category, status").execute()
        rows = result.data or []
    except Exception as e:
        logger.warning(f"⚠️ Could not load submission stats: {e}")
        return stats

    stats["total_count"] = len(rows)
    stats["by_category"] = dict(Counter(row.get("category") for row in rows))
    stats["by_status"] = dict(Counter(row.get("status") for row in rows))
    return stats


def get_submission(application_id: str, access_token: Optional[str] = None, client=None) -> Optional[Dict[str, Any]]:
    """
    Fetch the submission row for an application id, or None if there is none.

    Errors propagate: callers use this to decide whether a write is allowed, so
    an unreadable table must not look like an empty one.
    """
    supabase = client or get_supabase_client(access_token=access_token)
    if not supabase:
        raise Exception("Could not initialize Supabase client")

    result = (
        supabase.table(SUBMISSIONS_TABLE)
        .select("application_id, user_id, category, status, submitted_at")
        .eq("application_id", application_id)
        .limit(1)
        .execute()
    )
    rows = result.data or []
    return rows[0] if rows else None
