"""
Validation module: draft and full rule sets for entry forms, plus the age
eligibility gate evaluated before a form is shown.

Validators return a FormErrors dict (field key -> localized message); an empty
dict means the form passes.
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional

from submission.categories import OTHER_ROLE, Category, CategoryConfig, get_category_config
from submission.messages import Messages
from submission.schema import AGREEMENT_FIELDS, FILE_SLOTS, BaseFormData

FormErrors = Dict[str, str]

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_int(value) -> Optional[int]:
    """Leading-integer parse: "12" -> 12, "12 min" -> 12, "abc" -> None."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def validate_email(email: str) -> bool:
    return bool(email and EMAIL_PATTERN.match(email.strip()))


def validate_age(age: Optional[int], category) -> bool:
    """Submitter age rule: within [min, max] for capped categories, at least min otherwise."""
    if age is None:
        return False
    config = get_category_config(category)
    if age < config.min_age:
        return False
    if config.has_age_cap and age > config.max_age:
        return False
    return True


def allowed_file(filename: str, slot: str, category) -> bool:
    config = get_category_config(category)
    return "." in filename and ("." + filename.rsplit(".", 1)[1].lower()) in config.allowed_extensions(slot)


@dataclass(frozen=True)
class AgeEligibility:
    eligible: bool
    suggested_category: Optional[Category] = None
    user_age: Optional[int] = None


def check_age_eligibility(category, profile_age: Optional[int]) -> AgeEligibility:
    """
    Gate evaluated before the form renders.

    Users older than a capped category's maximum are turned away with a
    suggestion: Youth -> Future for ages 18-25, Youth/Future -> World above 25.
    A missing age never blocks.
    """
    category = Category(category)
    config = get_category_config(category)
    if not profile_age:
        return AgeEligibility(eligible=True)

    if config.has_age_cap and profile_age > config.max_age:
        suggested = None
        if category is Category.YOUTH and 18 <= profile_age <= 25:
            suggested = Category.FUTURE
        elif category in (Category.YOUTH, Category.FUTURE) and profile_age > 25:
            suggested = Category.WORLD
        return AgeEligibility(eligible=False, suggested_category=suggested, user_age=profile_age)

    return AgeEligibility(eligible=True)


def _blank(value) -> bool:
    return not (value or "").strip()


def _check_common(
    form: BaseFormData,
    config: CategoryConfig,
    messages: Messages,
    *,
    authenticated: bool,
    is_thai_nationality: bool,
    auth_message_key: str,
) -> FormErrors:
    """Checks shared by draft and full validation."""
    errors: FormErrors = {}

    if not authenticated or not form.user_id:
        errors["authentication"] = messages[auth_message_key]

    current_age = parse_int(form.submitter_value("age")) or 0
    if config.has_age_cap and current_age > config.max_age:
        errors["age_over_limit"] = messages.format(
            "age_over_limit", age=current_age, min_age=config.min_age, max_age=config.max_age
        )

    if _blank(form.film_title):
        errors["film_title"] = messages["required"]
    if is_thai_nationality and _blank(form.film_title_th):
        errors["film_title_th"] = messages["required"]

    if _blank(form.submitter_value("name")):
        errors["submitter_name"] = messages["required"]
    if is_thai_nationality and _blank(form.submitter_value("name_th")):
        errors["submitter_name_th"] = messages["required"]

    email = form.submitter_value("email")
    if _blank(email):
        errors["submitter_email"] = messages["required"]
    elif not validate_email(email):
        errors["submitter_email"] = messages["invalid_email"]

    return errors


def validate_draft(
    form: BaseFormData,
    *,
    authenticated: bool,
    is_thai_nationality: bool = True,
    language: str = "en",
) -> FormErrors:
    """Relaxed rules for saving an incomplete entry. Files and agreements are not required."""
    config = get_category_config(form.category)
    return _check_common(
        form,
        config,
        Messages(language),
        authenticated=authenticated,
        is_thai_nationality=is_thai_nationality,
        auth_message_key="auth_required_draft",
    )


def validate_full(
    form: BaseFormData,
    *,
    authenticated: bool,
    is_thai_nationality: bool = True,
    language: str = "en",
) -> FormErrors:
    """Complete rule set required before final submission."""
    config = get_category_config(form.category)
    messages = Messages(language)
    errors = _check_common(
        form,
        config,
        messages,
        authenticated=authenticated,
        is_thai_nationality=is_thai_nationality,
        auth_message_key="auth_required_submit",
    )

    # Film information
    if not form.genres:
        errors["genres"] = messages["required"]
    if not form.format:
        errors["format"] = messages["format_required"]
    if _blank(form.duration):
        errors["duration"] = messages["required"]
    else:
        duration = parse_int(form.duration)
        if duration is None or duration <= 0:
            errors["duration"] = messages["invalid_duration"]
    if _blank(form.synopsis):
        errors["synopsis"] = messages["required"]
    if _blank(form.chiangmai_connection):
        errors["chiangmai_connection"] = messages["required"]

    # Submitter block
    raw_age = form.submitter_value("age")
    if _blank(raw_age):
        errors["submitter_age"] = messages["required"]
    elif not validate_age(parse_int(raw_age), config.category):
        errors["submitter_age"] = messages.invalid_age(config)
    if _blank(form.submitter_value("phone")):
        errors["submitter_phone"] = messages["required"]
    role = form.submitter_value("role")
    if not role:
        errors["submitter_role"] = messages["required"]
    if role == OTHER_ROLE and _blank(form.submitter_value("custom_role")):
        errors["submitter_custom_role"] = messages["required"]

    # Education (Youth / Future only)
    for field_name in form.EDUCATION_FIELDS:
        if _blank(getattr(form, field_name)):
            errors[field_name] = messages["required"]

    # Files are required for final submission
    for slot in FILE_SLOTS:
        uploaded = getattr(form, slot)
        if uploaded is None:
            errors[slot] = messages["required"]
        elif not allowed_file(uploaded.filename, slot, config.category):
            extensions = ", ".join(sorted(config.allowed_extensions(slot)))
            errors[slot] = messages.format("invalid_file_type", extensions=extensions)

    if not all(getattr(form, name) for name in AGREEMENT_FIELDS):
        errors["agreements"] = messages["all_agreements_required"]

    return errors
