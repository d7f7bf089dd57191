"""
Data models for festival film submissions.
Uses Pydantic for validation and type safety.

Form data is a tagged union over the three categories; the ``category`` field
is the discriminator. Youth and Future entries carry a ``submitter_*`` block,
World entries a ``director_*`` block.
"""

import random
import re
import string
import time
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Annotated, ClassVar, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from submission.categories import Category, get_category_config

FILE_SLOTS: Tuple[str, ...] = ("film_file", "poster_file", "proof_file")
AGREEMENT_FIELDS: Tuple[str, ...] = ("agreement1", "agreement2", "agreement3", "agreement4")

# Generic submitter keys; errors are always reported under "submitter_<key>".
SUBMITTER_KEYS: Tuple[str, ...] = ("name", "name_th", "age", "phone", "email", "role", "custom_role")

APPLICATION_ID_PATTERN = re.compile(r"(youth|future|world)_(\d+)_([a-z0-9]{9})")


class ApplicationStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"


class FilmFormat(str, Enum):
    LIVE_ACTION = "live-action"
    ANIMATION = "animation"


class UploadStatus(str, Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    SUCCESS = "success"
    ERROR = "error"


class UploadedFile(BaseModel):
    """A file selected for one of the three upload slots."""
    filename: str
    content_type: Optional[str] = None
    data: bytes = Field(default=b"", repr=False)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        return Path(self.filename).suffix.lower()


class CrewMember(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    full_name: str
    full_name_th: Optional[str] = None
    role: str = ""
    custom_role: Optional[str] = None
    age: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    school_name: Optional[str] = None
    student_id: Optional[str] = None


def generate_application_id(prefix: str) -> str:
    """``<prefix>_<epoch millis>_<9 base36 chars>``"""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


def is_valid_application_id(application_id: str, prefix: str) -> bool:
    """Client-supplied ids end up in storage paths, so they must match the generated shape."""
    match = APPLICATION_ID_PATTERN.fullmatch(application_id or "")
    return bool(match) and match.group(1) == prefix


class BaseFormData(BaseModel):
    # JSON clients may send numbers for free-text fields such as duration.
    model_config = ConfigDict(validate_assignment=True, coerce_numbers_to_str=True)

    SUBMITTER_PREFIX: ClassVar[str] = "submitter"
    EDUCATION_FIELDS: ClassVar[Tuple[str, ...]] = ()

    user_id: Optional[str] = None
    application_id: str
    status: ApplicationStatus = ApplicationStatus.DRAFT
    created_at: datetime = Field(default_factory=datetime.now)
    nationality: str = "Thailand"

    # Film information
    film_title: str = ""
    film_title_th: Optional[str] = ""
    genres: List[str] = Field(default_factory=list)
    format: Optional[FilmFormat] = None
    duration: str = ""
    synopsis: str = ""
    chiangmai_connection: str = ""

    # Files
    film_file: Optional[UploadedFile] = None
    poster_file: Optional[UploadedFile] = None
    proof_file: Optional[UploadedFile] = None

    # Agreements
    agreement1: bool = False
    agreement2: bool = False
    agreement3: bool = False
    agreement4: bool = False

    crew_members: List[CrewMember] = Field(default_factory=list)

    def submitter_field(self, key: str) -> str:
        """Concrete field name for a generic submitter key, e.g. "name" -> "director_name"."""
        return f"{self.SUBMITTER_PREFIX}_{key}"

    def submitter_value(self, key: str) -> str:
        return getattr(self, self.submitter_field(key)) or ""

    def error_key_for(self, field_name: str) -> str:
        """Error key cleared when ``field_name`` is edited."""
        prefix = f"{self.SUBMITTER_PREFIX}_"
        if field_name.startswith(prefix) and field_name[len(prefix):] in SUBMITTER_KEYS:
            return f"submitter_{field_name[len(prefix):]}"
        return field_name

    def to_record(self) -> Dict:
        """Row payload for the submissions table; file contents are excluded."""
        return self.model_dump(mode="json", exclude=set(FILE_SLOTS))


class YouthFormData(BaseFormData):
    EDUCATION_FIELDS: ClassVar[Tuple[str, ...]] = ("school_name", "student_id")

    category: Literal[Category.YOUTH] = Category.YOUTH
    submitter_name: str = ""
    submitter_name_th: Optional[str] = ""
    submitter_age: str = ""
    submitter_phone: str = ""
    submitter_email: str = ""
    submitter_role: str = ""
    submitter_custom_role: Optional[str] = ""
    school_name: str = ""
    student_id: str = ""


class FutureFormData(BaseFormData):
    EDUCATION_FIELDS: ClassVar[Tuple[str, ...]] = ("university_name", "faculty", "university_id")

    category: Literal[Category.FUTURE] = Category.FUTURE
    submitter_name: str = ""
    submitter_name_th: Optional[str] = ""
    submitter_age: str = ""
    submitter_phone: str = ""
    submitter_email: str = ""
    submitter_role: str = ""
    submitter_custom_role: Optional[str] = ""
    university_name: str = ""
    faculty: str = ""
    university_id: str = ""


class WorldFormData(BaseFormData):
    SUBMITTER_PREFIX: ClassVar[str] = "director"

    category: Literal[Category.WORLD] = Category.WORLD
    director_name: str = ""
    director_name_th: Optional[str] = ""
    director_age: str = ""
    director_phone: str = ""
    director_email: str = ""
    director_role: str = ""
    director_custom_role: Optional[str] = ""


UnifiedFormData = Annotated[
    Union[YouthFormData, FutureFormData, WorldFormData],
    Field(discriminator="category"),
]

FORM_CLASSES = {
    Category.YOUTH: YouthFormData,
    Category.FUTURE: FutureFormData,
    Category.WORLD: WorldFormData,
}


def new_form_data(category, user=None, user_profile=None, application_id: Optional[str] = None) -> BaseFormData:
    """Fresh draft for ``category``, prefilled from the session user and profile."""
    category = Category(category)
    config = get_category_config(category)
    form = FORM_CLASSES[category](
        user_id=user.uid if user else None,
        application_id=application_id or generate_application_id(config.application_prefix),
    )
    apply_profile_prefill(form, user, user_profile)
    return form


def apply_profile_prefill(form: BaseFormData, user=None, user_profile=None) -> None:
    """Copy identity fields from the profile, keeping current values where the profile has none."""
    if user is not None:
        form.user_id = user.uid
        if user.email:
            setattr(form, form.submitter_field("email"), user.email)
    if user_profile is None:
        return
    if user_profile.full_name_en:
        setattr(form, form.submitter_field("name"), user_profile.full_name_en)
    if user_profile.full_name_th:
        setattr(form, form.submitter_field("name_th"), user_profile.full_name_th)
    if user_profile.age:
        setattr(form, form.submitter_field("age"), str(user_profile.age))
    if user_profile.phone_number:
        setattr(form, form.submitter_field("phone"), user_profile.phone_number)


class FileProgress(BaseModel):
    film: int = 0
    poster: int = 0
    proof: int = 0


# Maps form file slots to progress keys.
PROGRESS_KEYS: Dict[str, str] = {"film_file": "film", "poster_file": "poster", "proof_file": "proof"}


class SubmissionProgress(BaseModel):
    """Snapshot of an in-flight submission. Each report replaces the previous one."""
    stage: str = "preparing"
    message: str = ""
    percentage: int = 0
    file_progress: Optional[FileProgress] = None


class SubmissionResult(BaseModel):
    success: bool
    submission_id: Optional[str] = None
    error: Optional[str] = None


class FileUploadState(BaseModel):
    status: UploadStatus = UploadStatus.IDLE
    progress: int = 0
    error: Optional[str] = None
