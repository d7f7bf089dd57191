"""
Validation tests for draft/full rule sets and the age eligibility gate.
"""

import pytest

from submission.categories import Category
from submission.schema import UploadedFile
from submission.validate import (
    allowed_file,
    check_age_eligibility,
    parse_int,
    validate_age,
    validate_draft,
    validate_email,
    validate_full,
)
from tests.conftest import make_form_data


def test_complete_forms_pass_full_validation():
    for category in ("youth", "future", "world"):
        assert validate_full(make_form_data(category), authenticated=True) == {}


def test_unauthenticated_submit_flags_authentication():
    errors = validate_full(make_form_data(), authenticated=False)
    assert errors == {"authentication": "Please sign in before submitting your work"}


def test_draft_uses_draft_auth_message():
    errors = validate_draft(make_form_data(with_files=False), authenticated=False)
    assert errors["authentication"] == "Please sign in before saving draft"


def test_draft_ignores_files_agreements_and_film_details():
    form = make_form_data(
        "future", with_files=False, genres=[], format=None, duration="", synopsis="", agreement2=False
    )
    assert validate_draft(form, authenticated=True) == {}
    errors = validate_full(form, authenticated=True)
    assert {"genres", "format", "duration", "synopsis", "film_file", "poster_file", "proof_file", "agreements"} <= set(errors)


def test_draft_checks_identity_fields():
    form = make_form_data(film_title=" ", submitter_name="", submitter_email="not-an-email")
    errors = validate_draft(form, authenticated=True)
    assert errors["film_title"] == "This field is required"
    assert errors["submitter_name"] == "This field is required"
    assert errors["submitter_email"] == "Please enter a valid email address"


def test_thai_names_only_required_for_thai_nationality():
    form = make_form_data(film_title_th="", submitter_name_th="")
    errors = validate_full(form, authenticated=True)
    assert set(errors) == {"film_title_th", "submitter_name_th"}
    assert validate_full(form, authenticated=True, is_thai_nationality=False) == {}


def test_world_errors_use_submitter_keys():
    form = make_form_data("world", director_name="", director_phone="")
    errors = validate_full(form, authenticated=True)
    assert set(errors) == {"submitter_name", "submitter_phone"}


def test_other_role_requires_custom_role():
    errors = validate_full(make_form_data(submitter_role="Other"), authenticated=True)
    assert errors == {"submitter_custom_role": "This field is required"}
    assert validate_full(make_form_data(submitter_role="Other", submitter_custom_role="Stunt Coordinator"), authenticated=True) == {}


def test_missing_role():
    errors = validate_full(make_form_data(submitter_role=""), authenticated=True)
    assert "submitter_role" in errors


def test_education_fields_by_category():
    errors = validate_full(make_form_data("youth", school_name="", student_id=""), authenticated=True)
    assert set(errors) == {"school_name", "student_id"}
    errors = validate_full(make_form_data("future", faculty=""), authenticated=True)
    assert set(errors) == {"faculty"}


def test_duration_rules():
    assert validate_full(make_form_data(duration="12 minutes"), authenticated=True) == {}
    errors = validate_full(make_form_data(duration="0"), authenticated=True)
    assert errors["duration"] == "Please enter a valid duration"
    errors = validate_full(make_form_data(duration="about ten"), authenticated=True)
    assert errors["duration"] == "Please enter a valid duration"


def test_age_over_limit_reported_in_both_modes():
    form = make_form_data("youth", submitter_age="19")
    draft = validate_draft(form, authenticated=True)
    full = validate_full(form, authenticated=True)
    assert "19 years" in draft["age_over_limit"]
    assert "12-18" in full["age_over_limit"]
    assert full["submitter_age"] == "Age must be between 12 and 18 years"


def test_world_age_has_no_upper_bound():
    assert validate_full(make_form_data("world", director_age="87"), authenticated=True) == {}
    errors = validate_full(make_form_data("world", director_age="17"), authenticated=True)
    assert errors == {"submitter_age": "Age must be at least 18 years"}


def test_file_types_checked_per_slot():
    form = make_form_data(
        film_file=UploadedFile(filename="film.avi"),
        poster_file=UploadedFile(filename="poster.PNG"),
        proof_file=UploadedFile(filename="card.exe"),
    )
    errors = validate_full(form, authenticated=True)
    assert set(errors) == {"film_file", "proof_file"}
    assert ".mov" in errors["film_file"]


def test_agreements_all_required():
    errors = validate_full(make_form_data(agreement4=False), authenticated=True)
    assert errors == {"agreements": "Please accept all agreements"}


def test_thai_messages():
    errors = validate_full(make_form_data(film_title=""), authenticated=True, language="th")
    assert errors["film_title"] == "กรุณากรอกข้อมูลนี้"


@pytest.mark.parametrize(
    "category, age, eligible, suggested",
    [
        ("youth", 15, True, None),
        ("youth", 18, True, None),
        ("youth", 19, False, Category.FUTURE),
        ("youth", 30, False, Category.WORLD),
        ("future", 25, True, None),
        ("future", 30, False, Category.WORLD),
        ("world", 17, True, None),
        ("world", 95, True, None),
        ("youth", None, True, None),
        ("youth", 0, True, None),
    ],
)
def test_age_eligibility(category, age, eligible, suggested):
    result = check_age_eligibility(category, age)
    assert result.eligible is eligible
    assert result.suggested_category is suggested
    if not eligible:
        assert result.user_age == age


def test_helpers():
    assert parse_int("12 min") == 12
    assert parse_int(" 7") == 7
    assert parse_int("abc") is None
    assert validate_email("a@b.co") is True
    assert validate_email("a@b") is False
    assert validate_age(12, "youth") is True
    assert validate_age(11, "youth") is False
    assert validate_age(None, "world") is False
    assert allowed_file("clip.MOV", "film_file", "world") is True
    assert allowed_file("noext", "poster_file", "world") is False
    assert allowed_file("id.heic", "proof_file", "future") is True
    assert allowed_file("id.heic", "proof_file", "youth") is False


def test_unified_form_data_dispatches_on_category():
    from pydantic import TypeAdapter

    from submission.schema import UnifiedFormData, WorldFormData

    form = TypeAdapter(UnifiedFormData).validate_python({"category": "world", "application_id": "world_1_abc"})
    assert isinstance(form, WorldFormData)
    assert form.submitter_field("email") == "director_email"
    assert form.error_key_for("director_email") == "submitter_email"
