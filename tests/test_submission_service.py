"""
Unit tests for the submission service and its Supabase storage/database helpers.
"""

import os
from unittest.mock import MagicMock, patch

import pytest

from submission.service import SubmissionService
from submission.supabase_db import get_submission, get_submission_stats, save_submission
from submission.supabase_storage import BUCKET_NAME, build_submission_path, upload_file, upload_submission_file
from tests.conftest import make_form_data


class FakeUploader:
    def __init__(self, fail_slot=None):
        self.fail_slot = fail_slot
        self.calls = []

    def __call__(self, uploaded_file, **kwargs):
        self.calls.append(kwargs)
        slot = kwargs["slot"]
        if slot == self.fail_slot:
            return {"success": False, "error": "quota exceeded", "path": slot}
        path = f"{kwargs['owner_user_id']}/{kwargs['category']}/{kwargs['application_id']}/{slot}"
        return {"success": True, "path": path, "url": f"https://cdn.example.com/{path}"}


class FakeRecorder:
    def __init__(self, error=None):
        self.error = error
        self.records = []

    def __call__(self, record, access_token=None):
        self.records.append((record, access_token))
        if self.error:
            return {"success": False, "error": self.error}
        return {"success": True, "application_id": record["application_id"]}


class TestSubmissionService:

    def test_successful_submission(self):
        uploader, recorder, snapshots = FakeUploader(), FakeRecorder(), []
        service = SubmissionService(on_progress=snapshots.append, uploader=uploader, recorder=recorder, access_token="tok")
        form = make_form_data("future")

        result = service.submit(form)

        assert result.success is True
        assert result.submission_id == "future_1_abc"
        assert [c["slot"] for c in uploader.calls] == ["film_file", "poster_file", "proof_file"]
        assert all(c["access_token"] == "tok" for c in uploader.calls)

        record, token = recorder.records[0]
        assert token == "tok"
        assert record["status"] == "submitted"
        assert record["category"] == "future"
        assert record["submitted_at"]
        assert record["film_file"]["url"].endswith("film_file")
        assert record["poster_file"]["filename"] == "poster.jpg"
        assert record["proof_file"]["size"] == len(b"proof")

        assert snapshots[0].percentage == 0
        assert snapshots[-1].stage == "complete"
        assert snapshots[-1].percentage == 100
        assert snapshots[-1].file_progress.model_dump() == {"film": 100, "poster": 100, "proof": 100}
        percentages = [s.percentage for s in snapshots]
        assert percentages == sorted(percentages)

    def test_snapshots_are_independent_copies(self):
        snapshots = []
        SubmissionService(on_progress=snapshots.append, uploader=FakeUploader(), recorder=FakeRecorder()).submit(
            make_form_data()
        )
        assert snapshots[0].file_progress.film == 0

    def test_upload_failure_stops_before_record(self):
        uploader, recorder = FakeUploader(fail_slot="poster_file"), FakeRecorder()
        service = SubmissionService(uploader=uploader, recorder=recorder)

        result = service.submit_youth_form(make_form_data("youth"))

        assert result.success is False
        assert result.error == "Failed to upload poster file: quota exceeded"
        assert len(uploader.calls) == 2
        assert recorder.records == []

    def test_record_failure_is_returned(self):
        snapshots = []
        service = SubmissionService(
            on_progress=snapshots.append, uploader=FakeUploader(), recorder=FakeRecorder(error="duplicate key")
        )

        result = service.submit_world_form(make_form_data("world"))

        assert result.success is False
        assert result.error == "duplicate key"
        assert snapshots[-1].stage == "error"

    def test_no_progress_callback(self):
        service = SubmissionService(uploader=FakeUploader(), recorder=FakeRecorder())
        assert service.submit(make_form_data("world")).success is True


class TestSupabaseStorage:

    def test_build_submission_path(self):
        assert build_submission_path("u1", "youth", "youth_1_abc", "film_file", "My Film.MOV") == "u1/youth/youth_1_abc/film.mov"
        assert build_submission_path("u1", "world", "w", "proof_file", "noext") == "u1/world/w/proof.bin"

    def test_upload_file_success(self):
        client = MagicMock()
        client.storage.from_.return_value.get_public_url.return_value = "https://cdn.example.com/x"

        result = upload_file(b"data", "u1/youth/a/film.mp4", "video/mp4", client=client)

        assert result == {"success": True, "url": "https://cdn.example.com/x", "path": "u1/youth/a/film.mp4"}
        client.storage.from_.assert_called_with(BUCKET_NAME)
        upload_kwargs = client.storage.from_.return_value.upload.call_args.kwargs
        assert upload_kwargs["file_options"]["content-type"] == "video/mp4"

    def test_upload_file_error(self):
        client = MagicMock()
        client.storage.from_.return_value.upload.side_effect = Exception("Payload too large")

        result = upload_file(b"data", "u1/youth/a/film.mp4", client=client)

        assert result["success"] is False
        assert "Payload too large" in result["error"]

    @patch.dict(os.environ, {"SUPABASE_URL": "", "SUPABASE_ANON_KEY": ""})
    def test_upload_file_without_client(self):
        result = upload_file(b"data", "path")
        assert result["success"] is False
        assert "Could not initialize" in result["error"]

    @patch("submission.supabase_storage.upload_file")
    def test_upload_submission_file_guesses_content_type(self, mock_upload):
        mock_upload.return_value = {"success": True}
        form = make_form_data("youth")
        form.poster_file.content_type = None

        upload_submission_file(
            form.poster_file,
            owner_user_id="user-123",
            category="youth",
            application_id="youth_1_abc",
            slot="poster_file",
            access_token="tok",
        )

        kwargs = mock_upload.call_args.kwargs
        assert kwargs["file_path"] == "user-123/youth/youth_1_abc/poster.jpg"
        assert kwargs["content_type"] == "image/jpeg"
        assert kwargs["access_token"] == "tok"


class TestSupabaseDb:

    def test_save_submission_upserts_on_application_id(self):
        client = MagicMock()

        result = save_submission({"application_id": "youth_1_abc", "category": "youth"}, client=client)

        assert result == {"success": True, "application_id": "youth_1_abc"}
        client.table.assert_called_with("submissions")
        row, = client.table.return_value.upsert.call_args.args
        assert row["updated_at"]
        assert client.table.return_value.upsert.call_args.kwargs == {"on_conflict": "application_id"}

    def test_save_submission_error(self):
        client = MagicMock()
        client.table.return_value.upsert.return_value.execute.side_effect = Exception("new row violates row-level security")

        result = save_submission({"application_id": "a"}, client=client)

        assert result["success"] is False
        assert "row-level security" in result["error"]

    def test_get_submission(self):
        client = MagicMock()
        query = client.table.return_value.select.return_value.eq.return_value.limit.return_value
        query.execute.return_value.data = [{"application_id": "youth_1_abc", "status": "submitted"}]

        assert get_submission("youth_1_abc", client=client)["status"] == "submitted"
        client.table.return_value.select.return_value.eq.assert_called_once_with("application_id", "youth_1_abc")

        query.execute.return_value.data = []
        assert get_submission("youth_1_abc", client=client) is None

    def test_get_submission_errors_propagate(self):
        client = MagicMock()
        client.table.return_value.select.return_value.eq.return_value.limit.return_value.execute.side_effect = Exception("timeout")
        with pytest.raises(Exception, match="timeout"):
            get_submission("youth_1_abc", client=client)

    def test_submission_stats(self):
        client = MagicMock()
        client.table.return_value.select.return_value.execute.return_value.data = [
            {"category": "youth", "status": "submitted"},
            {"category": "youth", "status": "draft"},
            {"category": "world", "status": "submitted"},
        ]

        stats = get_submission_stats(client=client)

        assert stats == {
            "total_count": 3,
            "by_category": {"youth": 2, "world": 1},
            "by_status": {"submitted": 2, "draft": 1},
        }

    @patch.dict(os.environ, {"SUPABASE_URL": "", "SUPABASE_SERVICE_ROLE_KEY": ""})
    def test_submission_stats_without_service_key(self):
        assert get_submission_stats()["total_count"] == 0
