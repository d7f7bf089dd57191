"""
Supabase-backed store for ``profiles`` and ``admins`` records.
Both tables are keyed by ``uid``; either record may be absent.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from auth.schema import AdminProfile, UserProfile
from auth.supabase_client import get_supabase_client

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"
ADMINS_TABLE = "admins"


class ProfileStore:
    """
    Reads and updates profile records.

    Reads return None when the row does not exist. Transport errors propagate
    so callers can decide how to degrade.
    """

    def __init__(self, client=None, access_token: Optional[str] = None):
        self._client = client
        self._access_token = access_token

    @property
    def client(self):
        if self._client is None:
            self._client = get_supabase_client(access_token=self._access_token)
            if self._client is None:
                raise Exception("Could not initialize Supabase client")
        return self._client

    def _fetch_one(self, table: str, uid: str) -> Optional[Dict[str, Any]]:
        result = self.client.table(table).select("*").eq("uid", uid).limit(1).execute()
        if result.data and len(result.data) > 0:
            return result.data[0]
        return None

    def get_profile(self, uid: str) -> Optional[UserProfile]:
        row = self._fetch_one(PROFILES_TABLE, uid)
        if row is None:
            return None
        return UserProfile.model_validate(row)

    def get_admin_profile(self, uid: str) -> Optional[AdminProfile]:
        row = self._fetch_one(ADMINS_TABLE, uid)
        if row is None:
            return None
        return AdminProfile.model_validate(row)

    def update_profile(self, uid: str, updates: Dict[str, Any]) -> None:
        """Patch a profile row; ``updated_at`` is always refreshed."""
        payload = dict(updates)
        payload["updated_at"] = datetime.now().isoformat()
        self.client.table(PROFILES_TABLE).update(payload).eq("uid", uid).execute()
        logger.info(f"Updated profile {uid}: {sorted(updates)}")
