"""
Entry-form state machine for one category.

Holds field values, the per-field error map, per-slot upload state and the
submission result, and decides which view the client should show:

    INELIGIBLE                      age gate failed; the form is never shown
    FORM -> CONFIRM -> SUBMITTING -> SUCCESS
                                  -> FORM (with a retryable error panel)
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from auth.schema import SessionUser, UserProfile
from submission.categories import ROLE_OPTIONS, SUBMISSION_DEADLINE, Category, get_category_config
from submission.messages import Messages
from submission.schema import (
    AGREEMENT_FIELDS,
    FILE_SLOTS,
    PROGRESS_KEYS,
    ApplicationStatus,
    CrewMember,
    FileUploadState,
    SubmissionProgress,
    SubmissionResult,
    UploadedFile,
    UploadStatus,
    apply_profile_prefill,
    new_form_data,
)
from submission.service import SubmissionService
from submission.validate import AgeEligibility, FormErrors, check_age_eligibility, validate_draft, validate_full
from utils.navigation import Route, location_for

logger = logging.getLogger(__name__)

# Fields the form itself owns; clients cannot overwrite them.
PROTECTED_FIELDS = frozenset({"category", "application_id", "user_id", "status", "created_at"})


class FormLockedError(Exception):
    """Raised when an edit is attempted after a successful submission or while submitting."""


class FormView(str, Enum):
    FORM = "form"
    CONFIRM = "confirm"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    INELIGIBLE = "ineligible"


class SubmissionForm:
    """
    Args:
        category: Category or its value
        service_factory: callable(on_progress) -> SubmissionService
        user: signed-in user, or None
        user_profile: the user's profile, or None
        language: "en" or "th"
        application_id: reuse an existing draft id (retries across requests)
    """

    def __init__(
        self,
        category,
        service_factory: Callable[..., SubmissionService] = SubmissionService,
        user: Optional[SessionUser] = None,
        user_profile: Optional[UserProfile] = None,
        language: str = "en",
        application_id: Optional[str] = None,
    ):
        self.category = Category(category)
        self.config = get_category_config(self.category)
        self.service_factory = service_factory
        self.user = user
        self.user_profile = user_profile
        self.messages = Messages(language)
        self.form_data = new_form_data(self.category, user, user_profile, application_id=application_id)
        self.is_thai_nationality = True
        self.errors: FormErrors = {}
        self.file_upload_states: Dict[str, FileUploadState] = {}
        self._reset_file_states()
        self.is_submitting = False
        self.progress: Optional[SubmissionProgress] = None
        self.result: Optional[SubmissionResult] = None
        self.show_confirm_dialog = False

    # -- derived state ------------------------------------------------------------

    @property
    def language(self) -> str:
        return self.messages.language

    @property
    def eligibility(self) -> AgeEligibility:
        age = self.user_profile.age if self.user_profile else None
        return check_age_eligibility(self.category, age)

    @property
    def is_submitted(self) -> bool:
        return bool(self.result and self.result.success)

    @property
    def is_editable(self) -> bool:
        return not self.is_submitted and not self.is_submitting

    @property
    def view(self) -> FormView:
        if self.is_submitted:
            return FormView.SUCCESS
        if not self.eligibility.eligible:
            return FormView.INELIGIBLE
        if self.show_confirm_dialog:
            return FormView.CONFIRM
        if self.is_submitting:
            return FormView.SUBMITTING
        return FormView.FORM

    # -- edits --------------------------------------------------------------------

    def _ensure_editable(self) -> None:
        if not self.is_editable:
            raise FormLockedError(f"Application {self.form_data.application_id} can no longer be edited")

    def _clear_error(self, key: str) -> None:
        self.errors.pop(key, None)

    def sync_profile(self, user: Optional[SessionUser], user_profile: Optional[UserProfile]) -> None:
        """Re-apply prefill after the session profile changed."""
        self.user = user
        self.user_profile = user_profile
        if self.is_editable and user is not None and user_profile is not None:
            apply_profile_prefill(self.form_data, user, user_profile)

    def set_field(self, name: str, value: Any) -> None:
        """Set a plain field. Files, agreements, genres, format and crew have dedicated setters."""
        self._ensure_editable()
        if name in PROTECTED_FIELDS or name not in type(self.form_data).model_fields:
            raise ValueError(f"Unknown or read-only field for {self.category.value} form: {name}")
        if name in FILE_SLOTS:
            self.set_file(name, value)
            return
        if name in AGREEMENT_FIELDS:
            self.set_agreement(name, bool(value))
            return
        setattr(self.form_data, name, value)
        self._clear_error(self.form_data.error_key_for(name))

    def update_fields(self, values: Dict[str, Any]) -> None:
        """Apply a mapping of client-supplied values through the matching setters."""
        for name, value in values.items():
            if name == "genres":
                self.set_genres(value or [])
            elif name == "format":
                self.set_format(value or None)
            elif name == "crew_members":
                self.set_crew_members(value or [])
            elif name == "nationality":
                self.set_nationality(value)
            elif name in PROTECTED_FIELDS:
                continue
            else:
                self.set_field(name, value)

    def set_genres(self, genres: Iterable[str]) -> None:
        self._ensure_editable()
        self.form_data.genres = list(genres)
        self._clear_error("genres")

    def set_format(self, film_format) -> None:
        self._ensure_editable()
        self.form_data.format = film_format
        self._clear_error("format")

    def set_crew_members(self, crew_members: List) -> None:
        self._ensure_editable()
        self.form_data.crew_members = [
            m if isinstance(m, CrewMember) else CrewMember.model_validate(m) for m in crew_members
        ]
        self._clear_error("crew_members")

    def set_agreement(self, name: str, checked: bool) -> None:
        self._ensure_editable()
        if name not in AGREEMENT_FIELDS:
            raise ValueError(f"Unknown agreement: {name}")
        setattr(self.form_data, name, checked)
        self._clear_error("agreements")

    def set_file(self, slot: str, uploaded: Optional[UploadedFile]) -> None:
        self._ensure_editable()
        if slot not in FILE_SLOTS:
            raise ValueError(f"Unknown file slot: {slot}")
        setattr(self.form_data, slot, uploaded)
        self._clear_error(slot)

    def set_nationality(self, nationality: str) -> None:
        """World entries keep the default nationality."""
        self._ensure_editable()
        if self.category is not Category.WORLD:
            self.form_data.nationality = nationality

    def set_nationality_type(self, is_thai: bool) -> None:
        """Switching to international clears every Thai-script name."""
        self._ensure_editable()
        self.is_thai_nationality = bool(is_thai)
        if self.is_thai_nationality:
            return
        form = self.form_data
        form.film_title_th = ""
        setattr(form, form.submitter_field("name_th"), "")
        form.crew_members = [m.model_copy(update={"full_name_th": None}) for m in form.crew_members]

    # -- validation ---------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def validate_draft(self) -> FormErrors:
        return validate_draft(
            self.form_data,
            authenticated=self.is_authenticated,
            is_thai_nationality=self.is_thai_nationality,
            language=self.language,
        )

    def validate_full(self) -> FormErrors:
        return validate_full(
            self.form_data,
            authenticated=self.is_authenticated,
            is_thai_nationality=self.is_thai_nationality,
            language=self.language,
        )

    # -- submission flow ----------------------------------------------------------

    def submit(self) -> bool:
        """Run full validation; on success open the confirmation dialog."""
        self._ensure_editable()
        errors = self.validate_full()
        if errors:
            self.errors = errors
            logger.info(f"Form {self.form_data.application_id} has {len(errors)} validation errors")
            return False
        self.errors = {}
        self.show_confirm_dialog = True
        return True

    def cancel_confirmation(self) -> None:
        self.show_confirm_dialog = False

    def _reset_file_states(self) -> None:
        self.file_upload_states = {slot: FileUploadState() for slot in FILE_SLOTS}

    def _on_progress(self, progress: SubmissionProgress) -> None:
        self.progress = progress
        if not progress.file_progress:
            return
        for slot in FILE_SLOTS:
            value = getattr(progress.file_progress, PROGRESS_KEYS[slot]) or 0
            status = UploadStatus.SUCCESS if value == 100 else UploadStatus.UPLOADING
            self.file_upload_states[slot] = FileUploadState(status=status, progress=value)

    def confirm_submission(self, on_progress: Optional[Callable[[SubmissionProgress], None]] = None) -> SubmissionResult:
        """
        Dispatch the entry to the submission service.

        ``on_progress`` receives the same snapshots the form applies to its own
        upload state. Service failures keep the data and leave a retryable error.
        """
        self._ensure_editable()
        if not self.show_confirm_dialog:
            raise RuntimeError("submit() must pass validation before the submission is confirmed")
        self.show_confirm_dialog = False
        self.result = None
        self.progress = None
        self._reset_file_states()
        self.is_submitting = True

        def report(progress: SubmissionProgress) -> None:
            self._on_progress(progress)
            if on_progress is not None:
                on_progress(progress)

        try:
            service = self.service_factory(on_progress=report)
            result = service.submit(self.form_data)
        except Exception as e:
            logger.error(f"Error submitting form {self.form_data.application_id}: {e}", exc_info=True)
            result = SubmissionResult(success=False, error=self.messages["submit_failed"])
            self.is_submitting = False
            self.result = result
            return result

        self.is_submitting = False
        self.result = result
        if result.success:
            self.form_data.status = ApplicationStatus.SUBMITTED
            self.file_upload_states = {
                slot: FileUploadState(status=UploadStatus.SUCCESS, progress=100) for slot in FILE_SLOTS
            }
        else:
            self.file_upload_states = {
                slot: state.model_copy(update={"status": UploadStatus.ERROR, "error": result.error})
                for slot, state in self.file_upload_states.items()
            }
        return result

    def retry(self) -> None:
        """Dismiss the error panel; entered values are kept."""
        if self.is_submitted:
            return
        self.result = None
        self.progress = None
        self.is_submitting = False

    # -- view descriptors -----------------------------------------------------------

    def confirmation_dialog(self) -> Dict[str, str]:
        m = self.messages
        return {
            "title": m["confirm_title"],
            "message": m["confirm_message"],
            "deadline": SUBMISSION_DEADLINE[self.language],
            "cancel": m["confirm_cancel"],
            "confirm": m["confirm_submit"],
        }

    def success_view(self) -> Dict[str, Any]:
        m = self.messages
        return {
            "view": FormView.SUCCESS.value,
            "title": m["success_title"],
            "message": m.format("success_message", submission_id=self.result.submission_id),
            "submission_id": self.result.submission_id,
            "actions": [
                {"label": m["go_to_applications"], "location": location_for(Route.MY_APPLICATIONS)},
                {"label": m["back_home"], "location": location_for(Route.HOME)},
            ],
        }

    def ineligible_view(self) -> Dict[str, Any]:
        m = self.messages
        eligibility = self.eligibility
        view: Dict[str, Any] = {
            "view": FormView.INELIGIBLE.value,
            "title": m["ineligible_title"],
            "message": m.format(
                "ineligible_message",
                age=eligibility.user_age,
                title=self.config.title,
                min_age=self.config.min_age,
                max_age=self.config.max_age,
            ),
            "user_age": eligibility.user_age,
            "suggested_category": None,
            "actions": [
                {"label": m["check_profile"], "location": location_for(Route.PROFILE_EDIT)},
                {"label": m["back_home"], "location": location_for(Route.HOME)},
            ],
        }
        suggested = eligibility.suggested_category
        if suggested is not None:
            view["suggested_category"] = suggested.value
            view["recommendation"] = {
                "title": m["recommended_title"],
                "message": m["recommended_message"],
                "category_name": get_category_config(suggested).ineligible_label[self.language],
                "label": m["go_to_recommended"],
                "location": location_for(Route.SUBMIT, {"category": suggested.value}),
            }
        return view

    def error_panel(self) -> Optional[Dict[str, str]]:
        if self.result is None or self.result.success:
            return None
        return {"title": self.messages["error_title"], "message": self.result.error, "retry": self.messages["retry"]}

    def authentication_panel(self) -> Optional[Dict[str, str]]:
        if "authentication" not in self.errors:
            return None
        return {
            "message": self.errors["authentication"],
            "label": self.messages["sign_in"],
            "location": location_for(Route.SIGNIN),
        }

    def form_view(self) -> Dict[str, Any]:
        return {
            "view": self.view.value,
            "category": self.category.value,
            "title": self.config.title,
            "logo_url": self.config.logo_url,
            "prize_amount": self.config.prize_amount[self.language],
            "age_range": {"min": self.config.min_age, "max": self.config.max_age},
            "proof_label": self.config.proof_label[self.language],
            "education_fields": list(self.config.education_fields),
            "role_options": list(ROLE_OPTIONS),
            "is_thai_nationality": self.is_thai_nationality,
            "form": self.form_data.to_record(),
            "errors": dict(self.errors),
            "file_upload_states": {slot: state.model_dump(mode="json") for slot, state in self.file_upload_states.items()},
            "progress": self.progress.model_dump(mode="json") if self.progress else None,
            "error_panel": self.error_panel(),
            "authentication_panel": self.authentication_panel(),
            "confirmation_dialog": self.confirmation_dialog() if self.show_confirm_dialog else None,
        }

    def render(self) -> Dict[str, Any]:
        """View descriptor for the current state."""
        view = self.view
        if view is FormView.SUCCESS:
            return self.success_view()
        if view is FormView.INELIGIBLE:
            return self.ineligible_view()
        return self.form_view()
