"""
Latest-progress cache for in-flight submissions.

Snapshots go to Redis when REDIS_URL is reachable so any web worker can answer
a progress poll; otherwise they are kept in process memory with the same TTL.
Each snapshot remembers the user who started the submission, and only that
user can read it back.
"""

import json
import logging
import os
import time
from typing import Dict, Optional, Tuple

import redis

from submission.schema import SubmissionProgress

logger = logging.getLogger(__name__)

PROGRESS_TTL_SECONDS = int(os.environ.get("PROGRESS_TTL_SECONDS", "3600"))
KEY_PREFIX = "submission_progress"

_redis_client: Optional[redis.Redis] = None


def get_redis_client() -> Optional[redis.Redis]:
    """Return a shared Redis client, or None if unavailable."""
    global _redis_client
    if _redis_client is not None:
        return _redis_client

    redis_url = os.environ.get("REDIS_URL")
    if not redis_url:
        return None

    try:
        client = redis.Redis.from_url(redis_url, decode_responses=True)
        client.ping()
        _redis_client = client
        return client
    except redis.RedisError as e:
        logger.warning(f"⚠️ Redis progress cache unavailable: {e}")
        return None


class ProgressStore:
    """Keeps the most recent SubmissionProgress per application id."""

    def __init__(self, redis_client: Optional[redis.Redis] = None, ttl_seconds: int = PROGRESS_TTL_SECONDS):
        self._redis = redis_client
        self._ttl = ttl_seconds
        # application id -> (expires at, owner id, snapshot); used only without Redis
        self._local: Dict[str, Tuple[float, Optional[str], SubmissionProgress]] = {}

    @classmethod
    def from_env(cls) -> "ProgressStore":
        return cls(redis_client=get_redis_client())

    @staticmethod
    def _key(application_id: str) -> str:
        return f"{KEY_PREFIX}:{application_id}"

    def _remember(self, application_id: str, progress: SubmissionProgress, owner_id: Optional[str]) -> None:
        now = time.monotonic()
        for key in [k for k, (expires_at, _, _) in self._local.items() if expires_at <= now]:
            del self._local[key]
        self._local[application_id] = (now + self._ttl, owner_id, progress)

    def _recall(self, application_id: str) -> Optional[Tuple[Optional[str], SubmissionProgress]]:
        entry = self._local.get(application_id)
        if entry is None:
            return None
        expires_at, owner_id, progress = entry
        if expires_at <= time.monotonic():
            del self._local[application_id]
            return None
        return owner_id, progress

    def publish(self, application_id: str, progress: SubmissionProgress, owner_id: Optional[str] = None) -> None:
        if self._redis is not None:
            payload = json.dumps({"owner_id": owner_id, "progress": progress.model_dump(mode="json")})
            try:
                self._redis.setex(self._key(application_id), self._ttl, payload)
                return
            except redis.RedisError as e:
                logger.warning(f"⚠️ Redis progress write failed, keeping snapshot in memory: {e}")
        self._remember(application_id, progress, owner_id)

    def get(self, application_id: str, owner_id: Optional[str] = None) -> Optional[SubmissionProgress]:
        """
        Latest snapshot for ``application_id``. When the snapshot was published
        with an owner, callers asking as anyone else get None.
        """
        entry = None
        if self._redis is not None:
            try:
                raw = self._redis.get(self._key(application_id))
                if raw:
                    data = json.loads(raw)
                    entry = data.get("owner_id"), SubmissionProgress.model_validate(data["progress"])
            except redis.RedisError as e:
                logger.warning(f"⚠️ Redis progress read failed: {e}")
        if entry is None:
            entry = self._recall(application_id)
        if entry is None:
            return None

        stored_owner, progress = entry
        if stored_owner is not None and stored_owner != owner_id:
            return None
        return progress

    def clear(self, application_id: str) -> None:
        self._local.pop(application_id, None)
        if self._redis is None:
            return
        try:
            self._redis.delete(self._key(application_id))
        except redis.RedisError as e:
            logger.warning(f"⚠️ Redis progress delete failed: {e}")
