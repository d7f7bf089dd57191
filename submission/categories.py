"""
Per-category configuration for the three competitions.
Compiled-in constants; nothing here is read from the environment.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Tuple


class Category(str, Enum):
    YOUTH = "youth"
    FUTURE = "future"
    WORLD = "world"


# A max age of 99 means the category has no upper bound.
UNBOUNDED_MAX_AGE = 99

SUBMISSION_DEADLINE = {
    "en": "Submission deadline: September 5, 2025 at 11:59 PM",
    "th": "กำหนดส่งผลงาน: 5 กันยายน 2025 เวลา 23:59 น.",
}

ROLE_OPTIONS = (
    "Director",
    "Producer",
    "Cinematographer",
    "Editor",
    "Sound Designer",
    "Production Designer",
    "Costume Designer",
    "Makeup Artist",
    "Screenwriter",
    "Composer",
    "Casting Director",
    "Visual Effects Supervisor",
    "Location Manager",
    "Script Supervisor",
    "Assistant Director",
    "Other",
)
OTHER_ROLE = "Other"

FILM_EXTENSIONS: FrozenSet[str] = frozenset({".mp4", ".mov"})
POSTER_EXTENSIONS: FrozenSet[str] = frozenset({".jpg", ".jpeg", ".png"})
IMAGE_EXTENSIONS: FrozenSet[str] = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp", ".heic", ".bmp", ".tif", ".tiff"})


@dataclass(frozen=True)
class CategoryConfig:
    category: Category
    title: str
    prize_amount: Dict[str, str]
    min_age: int
    max_age: int
    application_prefix: str
    education_fields: Tuple[str, ...]
    proof_label: Dict[str, str]
    proof_extensions: FrozenSet[str]
    logo_url: str
    ineligible_label: Dict[str, str] = field(default_factory=dict)

    @property
    def has_age_cap(self) -> bool:
        return self.max_age != UNBOUNDED_MAX_AGE

    def allowed_extensions(self, slot: str) -> FrozenSet[str]:
        if slot == "film_file":
            return FILM_EXTENSIONS
        if slot == "poster_file":
            return POSTER_EXTENSIONS
        return self.proof_extensions


_LOGO_BASE = "https://firebasestorage.googleapis.com/v0/b/cifan-c41c6.firebasestorage.app/o/site_files%2Ffest_logos%2F"

CATEGORY_CONFIGS: Dict[Category, CategoryConfig] = {
    Category.YOUTH: CategoryConfig(
        category=Category.YOUTH,
        title="Youth Fantastic Short Film Award",
        prize_amount={"th": "160,000 บาท", "en": "160,000 THB"},
        min_age=12,
        max_age=18,
        application_prefix="youth",
        education_fields=("school_name", "student_id"),
        proof_label={"th": "หลักฐานการเป็นนักเรียน", "en": "Student ID Proof"},
        proof_extensions=frozenset({".pdf", ".jpg", ".jpeg", ".png"}),
        logo_url=f"{_LOGO_BASE}Group%202.png?alt=media",
        ineligible_label={
            "th": "Youth Fantastic Short Film Award (อายุ 12-18 ปี)",
            "en": "Youth Fantastic Short Film Award (Ages 12-18)",
        },
    ),
    Category.FUTURE: CategoryConfig(
        category=Category.FUTURE,
        title="Future Fantastic Short Film Award",
        prize_amount={"th": "380,000 บาท", "en": "380,000 THB"},
        min_age=18,
        max_age=25,
        application_prefix="future",
        education_fields=("university_name", "faculty", "university_id"),
        proof_label={"th": "หลักฐานทางการศึกษา/บัตรประชาชน", "en": "Educational Proof/ID Card"},
        proof_extensions=IMAGE_EXTENSIONS | {".pdf"},
        logo_url=f"{_LOGO_BASE}Group%203.png?alt=media",
        ineligible_label={
            "th": "Future Fantastic Short Film Award (อายุ 18-25 ปี)",
            "en": "Future Fantastic Short Film Award (Ages 18-25)",
        },
    ),
    Category.WORLD: CategoryConfig(
        category=Category.WORLD,
        title="World Fantastic Short Film Award",
        prize_amount={"th": "460,000 บาท", "en": "460,000 THB"},
        min_age=18,
        max_age=UNBOUNDED_MAX_AGE,
        application_prefix="world",
        education_fields=(),
        proof_label={"th": "หลักฐานบัตรประชาชน/พาสปอร์ต", "en": "ID Card/Passport"},
        proof_extensions=IMAGE_EXTENSIONS | {".pdf"},
        logo_url=f"{_LOGO_BASE}Group%204.png?alt=media",
        ineligible_label={
            "th": "World Fantastic Short Film Award (อายุ 18+ ปี)",
            "en": "World Fantastic Short Film Award (Ages 18+)",
        },
    ),
}


def get_category_config(category) -> CategoryConfig:
    """Look up a config by Category or its string value; raises ValueError for unknown categories."""
    return CATEGORY_CONFIGS[Category(category)]
