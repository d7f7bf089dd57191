"""
Submission service: uploads an entry's files and persists its record.

Progress is reported through ``on_progress`` as full snapshots; a consumer
should keep only the latest one. There is no rollback: if the record write
fails after the uploads succeeded, the uploaded files stay in the bucket.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, Optional

from submission.categories import Category
from submission.schema import (
    FILE_SLOTS,
    PROGRESS_KEYS,
    ApplicationStatus,
    FileProgress,
    FutureFormData,
    SubmissionProgress,
    SubmissionResult,
    UnifiedFormData,
    WorldFormData,
    YouthFormData,
)
from submission.supabase_db import save_submission
from submission.supabase_storage import upload_submission_file

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[SubmissionProgress], None]

# Share of the overall percentage spent on uploads; the record write takes the rest.
UPLOAD_SHARE = 90


class SubmissionService:
    """
    Args:
        on_progress: callback receiving SubmissionProgress snapshots
        uploader: callable(uploaded_file, owner_user_id=, category=, application_id=, slot=,
            access_token=) -> {"success", "url", "path", "error"}
        recorder: callable(record, access_token=) -> {"success", "error"}
        access_token: bearer token of the submitting user
    """

    def __init__(
        self,
        on_progress: Optional[ProgressCallback] = None,
        uploader=upload_submission_file,
        recorder=save_submission,
        access_token: Optional[str] = None,
    ):
        self.on_progress = on_progress
        self.uploader = uploader
        self.recorder = recorder
        self.access_token = access_token

    def _report(self, stage: str, message: str, file_progress: FileProgress, percentage: int) -> None:
        if self.on_progress is None:
            return
        self.on_progress(
            SubmissionProgress(
                stage=stage,
                message=message,
                percentage=percentage,
                file_progress=file_progress.model_copy(),
            )
        )

    def submit_youth_form(self, form: YouthFormData) -> SubmissionResult:
        return self._submit(form)

    def submit_future_form(self, form: FutureFormData) -> SubmissionResult:
        return self._submit(form)

    def submit_world_form(self, form: WorldFormData) -> SubmissionResult:
        return self._submit(form)

    def submit(self, form: UnifiedFormData) -> SubmissionResult:
        """Dispatch to the category entry point."""
        entry_points = {
            Category.YOUTH: self.submit_youth_form,
            Category.FUTURE: self.submit_future_form,
            Category.WORLD: self.submit_world_form,
        }
        return entry_points[form.category](form)

    def _submit(self, form: UnifiedFormData) -> SubmissionResult:
        application_id = form.application_id
        category = form.category.value
        logger.info(f"📄 Submitting {category} entry {application_id} for user {form.user_id}")

        progress = FileProgress()
        self._report("uploading", "Preparing upload", progress, 0)

        uploads: Dict[str, Dict] = {}
        step = UPLOAD_SHARE // len(FILE_SLOTS)
        for index, slot in enumerate(FILE_SLOTS):
            key = PROGRESS_KEYS[slot]
            self._report("uploading", f"Uploading {key} file", progress, index * step)

            result = self.uploader(
                getattr(form, slot),
                owner_user_id=form.user_id,
                category=category,
                application_id=application_id,
                slot=slot,
                access_token=self.access_token,
            )
            if not result.get("success"):
                error = f"Failed to upload {key} file: {result.get('error') or 'unknown error'}"
                logger.error(f"❌ {application_id}: {error}")
                self._report("error", error, progress, index * step)
                return SubmissionResult(success=False, error=error)

            uploads[slot] = result
            setattr(progress, key, 100)
            self._report("uploading", f"Uploaded {key} file", progress, (index + 1) * step)

        self._report("saving", "Saving submission", progress, UPLOAD_SHARE)
        record = form.to_record()
        record["status"] = ApplicationStatus.SUBMITTED.value
        record["submitted_at"] = datetime.now().isoformat()
        for slot, result in uploads.items():
            uploaded = getattr(form, slot)
            record[slot] = {
                "path": result.get("path"),
                "url": result.get("url"),
                "filename": uploaded.filename,
                "size": uploaded.size,
            }

        saved = self.recorder(record, access_token=self.access_token)
        if not saved.get("success"):
            error = saved.get("error") or "Failed to save submission"
            self._report("error", error, progress, UPLOAD_SHARE)
            return SubmissionResult(success=False, error=error)

        self._report("complete", "Submission complete", progress, 100)
        logger.info(f"✅ Submission {application_id} complete")
        return SubmissionResult(success=True, submission_id=application_id)
