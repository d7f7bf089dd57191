"""
Flask application for the festival film submission gateway.

JSON API over the session, admin-access and entry-form components. Views are
returned as JSON descriptors; the browser client renders them.
"""

import json
import logging
import os
from functools import partial
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify, request, session
from werkzeug.utils import secure_filename

from auth.admin_access import AdminAccess
from auth.profile_store import ProfileStore
from auth.schema import SessionUser
from auth.session_provider import RedirectState, SessionProvider
from auth.supabase_client import get_supabase_client
from auth.user_utils import can_access_profile_protected_route, is_profile_complete
from submission.categories import Category, get_category_config
from submission.form_engine import FormView, SubmissionForm
from submission.progress import ProgressStore
from submission.schema import FILE_SLOTS, ApplicationStatus, UploadedFile, is_valid_application_id
from submission.service import SubmissionService
from submission.supabase_db import get_submission, get_submission_stats
from utils.navigation import HashNavigator

# Load environment variables from .env file (for local development)
load_dotenv()

app = Flask(__name__)
app.secret_key = os.environ.get("FLASK_SECRET_KEY", os.urandom(32))
app.logger.setLevel(logging.INFO)

# Film files are large; default cap is 2GB per request.
app.config["MAX_CONTENT_LENGTH"] = int(os.environ.get("MAX_UPLOAD_MB", "2048")) * 1024 * 1024

progress_store = ProgressStore.from_env()


def require_auth() -> bool:
    """Check if a user is signed in."""
    return bool(session.get("user_id"))


def current_user() -> Optional[SessionUser]:
    if not require_auth():
        return None
    return SessionUser(
        uid=session["user_id"],
        email=session.get("user_email"),
        email_verified=bool(session.get("email_verified")),
    )


def current_language() -> str:
    language = request.args.get("lang") or session.get("language") or "en"
    session["language"] = language
    return language


def get_profile_store() -> ProfileStore:
    return ProfileStore(access_token=session.get("access_token"))


def _parse_category(category: str) -> Optional[Category]:
    try:
        return Category(category)
    except ValueError:
        return None


def _requested_application_id(category: Category, payload: dict) -> Optional[str]:
    """The client's application id, if any. It becomes part of the storage path."""
    application_id = payload.get("application_id")
    if application_id is None:
        return None
    if not is_valid_application_id(str(application_id), get_category_config(category).application_prefix):
        raise ValueError(f"Invalid application id: {application_id}")
    return application_id


def _request_data() -> dict:
    return request.get_json(silent=True) or request.form.to_dict()


def _store_session(auth_response) -> None:
    user = auth_response.user
    session["user_id"] = user.id
    session["user_email"] = user.email
    session["email_verified"] = bool(getattr(user, "email_confirmed_at", None))
    session["access_token"] = auth_response.session.access_token if auth_response.session else None
    session["refresh_token"] = auth_response.session.refresh_token if auth_response.session else None


@app.route("/login", methods=["POST"])
def login():
    """Password sign-in; returns the post-login location chosen by the session provider."""
    supabase = get_supabase_client()
    if not supabase:
        return jsonify({"success": False, "error": "Authentication is not configured. Please set SUPABASE_URL and SUPABASE_ANON_KEY."}), 500

    data = _request_data()
    email = (data.get("email") or "").strip()
    password = (data.get("password") or "").strip()
    if not email or "@" not in email or not password:
        return jsonify({"success": False, "error": "Please enter a valid email address and password."}), 400

    try:
        response = supabase.auth.sign_in_with_password({"email": email, "password": password})
    except Exception as e:
        error_msg = str(e)
        app.logger.warning(f"Sign-in failed for {email}: {error_msg}")
        if "rate limit" in error_msg.lower():
            return jsonify({"success": False, "error": "Too many requests. Please wait a few minutes."}), 429
        return jsonify({"success": False, "error": "Invalid email or password."}), 401

    if not response.user:
        return jsonify({"success": False, "error": "Invalid email or password."}), 401

    _store_session(response)
    navigator = HashNavigator(data.get("location", ""))
    provider = SessionProvider(
        auth_client=supabase.auth,
        profile_store=get_profile_store(),
        navigator=navigator,
        redirect_state=session.get("redirect_state", RedirectState.AWAITING_REDIRECT.value),
    )
    provider.handle_auth_state_change("SIGNED_IN", response.session)
    session["redirect_state"] = provider.redirect_state.value

    return jsonify({
        "success": True,
        "user": provider.user.model_dump(),
        "profile": provider.user_profile.model_dump(mode="json") if provider.user_profile else None,
        "redirect_to": navigator.current_location,
    })


@app.route("/logout")
def logout():
    """Sign out and reset the one-time redirect."""
    supabase = get_supabase_client(access_token=session.get("access_token"))
    if supabase:
        provider = SessionProvider(supabase.auth, get_profile_store(), HashNavigator())
        try:
            provider.sign_out()
        except Exception as e:
            app.logger.warning(f"Supabase sign-out failed: {e}")
    session.clear()
    return jsonify({"success": True, "redirect_to": "#signin"})


@app.route("/api/session")
def api_session():
    user = current_user()
    if user is None:
        return jsonify({"authenticated": False, "user": None, "profile": None})

    try:
        profile = get_profile_store().get_profile(user.uid)
    except Exception as e:
        app.logger.error(f"Error loading profile for {user.uid}: {e}")
        return jsonify({"success": False, "error": "Could not load profile"}), 500

    return jsonify({
        "authenticated": True,
        "is_email_verified": user.email_verified,
        "user": user.model_dump(),
        "profile": profile.model_dump(mode="json") if profile else None,
        "is_profile_complete": is_profile_complete(profile),
        "can_access_protected_routes": can_access_profile_protected_route(profile),
    })


def _load_admin_access() -> AdminAccess:
    return AdminAccess(get_profile_store(), current_user()).load()


@app.route("/api/admin/status")
def admin_status():
    return jsonify(_load_admin_access().to_dict())


@app.route("/api/admin/refresh", methods=["POST"])
def admin_refresh():
    access = _load_admin_access()
    if not access.is_admin:
        return jsonify({"success": False, "error": "Not an administrator"}), 403
    access.refresh_admin_data()
    return jsonify(access.to_dict())


@app.route("/api/admin/dashboard")
def admin_dashboard():
    if not require_auth():
        return jsonify({"success": False, "error": "Not authenticated"}), 401
    access = _load_admin_access()
    if not access.check_permission("can_view_dashboard"):
        return jsonify({"success": False, "error": "Access denied"}), 403

    payload = access.to_dict()
    payload["stats"] = get_submission_stats() if access.check_permission("can_view_applications") else None
    return jsonify(payload)


def build_form(category: Category, application_id: Optional[str] = None) -> SubmissionForm:
    user = current_user()
    profile = None
    if user is not None:
        try:
            profile = get_profile_store().get_profile(user.uid)
        except Exception as e:
            app.logger.warning(f"Could not load profile for {user.uid}: {e}")
    return SubmissionForm(
        category,
        service_factory=partial(SubmissionService, access_token=session.get("access_token")),
        user=user,
        user_profile=profile,
        language=current_language(),
        application_id=application_id,
    )


def _apply_payload(form: SubmissionForm, payload: dict) -> None:
    if "is_thai_nationality" in payload:
        form.set_nationality_type(bool(payload["is_thai_nationality"]))
    if payload.get("nationality"):
        form.set_nationality(payload["nationality"])
    form.update_fields(payload.get("form") or {})


@app.route("/api/submit/<category>")
def submission_form(category: str):
    """Eligibility gate, then a prefilled draft."""
    parsed = _parse_category(category)
    if parsed is None:
        return jsonify({"success": False, "error": f"Unknown category: {category}"}), 404
    form = build_form(parsed)
    status = 403 if form.view is FormView.INELIGIBLE else 200
    return jsonify(form.render()), status


@app.route("/api/submit/<category>/validate", methods=["POST"])
def validate_submission(category: str):
    parsed = _parse_category(category)
    if parsed is None:
        return jsonify({"success": False, "error": f"Unknown category: {category}"}), 404

    payload = request.get_json(silent=True) or {}
    try:
        form = build_form(parsed, application_id=_requested_application_id(parsed, payload))
        _apply_payload(form, payload)
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400

    errors = form.validate_draft() if payload.get("mode") == "draft" else form.validate_full()
    return jsonify({"valid": not errors, "errors": errors})


def _upload_name(slot: str, raw_name: str) -> str:
    """
    Sanitized filename that keeps the original extension.

    secure_filename drops non-ASCII characters, so a Thai name such as
    "ภาพยนตร์.mp4" would come back as "mp4". Such names fall back to the slot
    name, e.g. "film.mp4".
    """
    extension = os.path.splitext(raw_name)[1].lower()
    name = secure_filename(raw_name)
    if not name or os.path.splitext(name)[1].lower() != extension:
        name = f"{slot[:-len('_file')]}{extension}"
    return name


def _uploaded_files() -> dict:
    files = {}
    for slot in FILE_SLOTS:
        storage = request.files.get(slot)
        if storage and storage.filename:
            files[slot] = UploadedFile(
                filename=_upload_name(slot, storage.filename),
                content_type=storage.mimetype,
                data=storage.read(),
            )
    return files


@app.route("/api/submit/<category>", methods=["POST"])
def submit_entry(category: str):
    """
    Multipart submission: a JSON ``payload`` field plus ``film_file``,
    ``poster_file`` and ``proof_file``. Without ``confirmed`` the response is the
    confirmation dialog; with it the entry is dispatched.
    """
    parsed = _parse_category(category)
    if parsed is None:
        return jsonify({"success": False, "error": f"Unknown category: {category}"}), 404

    try:
        payload = json.loads(request.form.get("payload") or "{}")
    except json.JSONDecodeError:
        return jsonify({"success": False, "error": "Malformed payload"}), 400

    try:
        application_id = _requested_application_id(parsed, payload)
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400

    form = build_form(parsed, application_id=application_id)
    if form.view is FormView.INELIGIBLE:
        return jsonify(form.ineligible_view()), 403

    try:
        _apply_payload(form, payload)
        for slot, uploaded in _uploaded_files().items():
            form.set_file(slot, uploaded)
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400

    if not form.submit():
        status = 401 if "authentication" in form.errors else 400
        return jsonify(form.render()), status

    if not payload.get("confirmed"):
        return jsonify(form.render())

    application_id = form.form_data.application_id
    try:
        existing = get_submission(application_id, access_token=session.get("access_token"))
    except Exception as e:
        app.logger.error(f"❌ Could not check status of {application_id}: {e}")
        return jsonify({"success": False, "error": "Could not verify application status"}), 500
    if existing and existing.get("status") == ApplicationStatus.SUBMITTED.value:
        app.logger.warning(f"⚠️ Refusing to overwrite submitted entry {application_id}")
        return jsonify({"success": False, "error": "This application has already been submitted"}), 409

    owner_id = form.user.uid
    progress_store.clear(application_id)
    result = form.confirm_submission(
        on_progress=partial(progress_store.publish, application_id, owner_id=owner_id)
    )
    if result.success:
        app.logger.info(f"✅ Entry {application_id} submitted by {form.user.uid}")
        return jsonify(form.render())
    app.logger.warning(f"❌ Entry {application_id} failed: {result.error}")
    return jsonify(form.render()), 500


@app.route("/api/submissions/<application_id>/progress")
def submission_progress(application_id: str):
    if not require_auth():
        return jsonify({"success": False, "error": "Not authenticated"}), 401
    progress = progress_store.get(application_id, owner_id=session["user_id"])
    if progress is None:
        return jsonify({"success": False, "error": "No submission in progress"}), 404
    return jsonify({"success": True, "progress": progress.model_dump(mode="json")})


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port, debug=False)
