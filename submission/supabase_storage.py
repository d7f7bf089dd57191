"""
Supabase Storage for submission files.
Saves film, poster and proof files to the submissions bucket.
"""

import logging
import os
from typing import Dict, Optional

from auth.supabase_client import get_supabase_client
from storage3.exceptions import StorageApiError

logger = logging.getLogger(__name__)

BUCKET_NAME = os.environ.get("SUBMISSIONS_BUCKET", "film-submissions")

CONTENT_TYPE_MAP = {
    ".mp4": "video/mp4",
    ".mov": "video/quicktime",
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


def upload_file(
    file_bytes: bytes,
    file_path: str,
    content_type: Optional[str] = None,
    access_token: Optional[str] = None,
    client=None,
) -> Dict:
    """
    Upload a file to the Supabase Storage bucket.

    Args:
        file_bytes: File content as bytes
        file_path: Path within the bucket (e.g., "user/youth/app_id/film.mp4")
        content_type: MIME type
        access_token: Bearer token of the submitting user (storage RLS)
        client: Optional pre-built Supabase client

    Returns:
        dict with:
            - success: bool
            - url: Public URL if successful
            - path: Path in bucket
            - error: Error message if failed
    """
    try:
        supabase = client or get_supabase_client(access_token=access_token)
        if supabase is None:
            raise Exception("Could not initialize Supabase client")

        supabase.storage.from_(BUCKET_NAME).upload(
            path=file_path,
            file=file_bytes,
            file_options={
                "content-type": content_type or "application/octet-stream",
                "upsert": "true",  # a retried submission overwrites its earlier upload
            },
        )
        url = supabase.storage.from_(BUCKET_NAME).get_public_url(file_path)
        return {"success": True, "url": url, "path": file_path}
    except StorageApiError as e:
        logger.error(f"❌ Storage API error uploading {file_path}: {e}")
        return {"success": False, "error": getattr(e, "message", None) or str(e), "path": file_path}
    except Exception as e:
        logger.error(f"❌ Error uploading file to Supabase Storage: {e}")
        return {"success": False, "error": str(e), "path": file_path}


def build_submission_path(owner_user_id: str, category: str, application_id: str, slot: str, filename: str) -> str:
    """``<owner>/<category>/<application_id>/<slot><ext>``; slot drops its ``_file`` suffix."""
    ext = os.path.splitext(filename)[1].lower() or ".bin"
    name = slot[: -len("_file")] if slot.endswith("_file") else slot
    return f"{owner_user_id}/{category}/{application_id}/{name}{ext}"


def upload_submission_file(
    uploaded_file,
    *,
    owner_user_id: str,
    category: str,
    application_id: str,
    slot: str,
    access_token: Optional[str] = None,
) -> Dict:
    """Upload one slot of an entry form. Returns the ``upload_file`` result dict."""
    file_path = build_submission_path(owner_user_id, category, application_id, slot, uploaded_file.filename)
    ext = os.path.splitext(uploaded_file.filename)[1].lower()
    content_type = uploaded_file.content_type or CONTENT_TYPE_MAP.get(ext, "application/octet-stream")
    logger.info(f"⬆️ Uploading {slot} ({uploaded_file.size} bytes) -> {file_path}")
    return upload_file(
        file_bytes=uploaded_file.data,
        file_path=file_path,
        content_type=content_type,
        access_token=access_token,
    )
