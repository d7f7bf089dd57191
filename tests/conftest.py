"""
Shared fakes for the auth and submission tests.
"""

from datetime import date

import pytest

from auth.schema import AdminProfile, SessionUser, UserProfile
from submission.categories import Category
from submission.schema import FORM_CLASSES, UploadedFile


class FakeProfileStore:
    """In-memory stand-in for ProfileStore. Set ``*_error`` to make reads raise."""

    def __init__(self, profiles=None, admins=None):
        self.profiles = dict(profiles or {})
        self.admins = dict(admins or {})
        self.profile_error = None
        self.admin_error = None
        self.update_error = None
        self.updates = []

    def get_profile(self, uid):
        if self.profile_error:
            raise self.profile_error
        return self.profiles.get(uid)

    def get_admin_profile(self, uid):
        if self.admin_error:
            raise self.admin_error
        return self.admins.get(uid)

    def update_profile(self, uid, updates):
        if self.update_error:
            raise self.update_error
        self.updates.append((uid, dict(updates)))
        self.profiles[uid] = self.profiles[uid].model_copy(update=updates)


def make_user(uid="user-123", email="filmmaker@example.com", email_verified=True):
    return SessionUser(uid=uid, email=email, email_verified=email_verified)


def make_profile(uid="user-123", **overrides):
    values = {
        "uid": uid,
        "email": "filmmaker@example.com",
        "email_verified": True,
        "full_name_en": "Somchai Jaidee",
        "full_name_th": "สมชาย ใจดี",
        "birth_date": date(2008, 4, 1),
        "age": 17,
        "phone_number": "0812345678",
    }
    values.update(overrides)
    return UserProfile(**values)


def make_admin_profile(uid="admin-1", admin_role="admin", admin_level="senior", **overrides):
    values = {
        "uid": uid,
        "email": "staff@example.com",
        "full_name_en": "Festival Staff",
        "admin_role": admin_role,
        "admin_level": admin_level,
    }
    values.update(overrides)
    return AdminProfile(**values)


def make_files(film="short.mp4", poster="poster.jpg", proof="student_card.pdf"):
    return {
        "film_file": UploadedFile(filename=film, content_type="video/mp4", data=b"film-bytes"),
        "poster_file": UploadedFile(filename=poster, content_type="image/jpeg", data=b"poster"),
        "proof_file": UploadedFile(filename=proof, content_type="application/pdf", data=b"proof"),
    }


@pytest.fixture
def profile_store():
    return FakeProfileStore()


def valid_form_values(category="youth", **overrides):
    """Field values that pass full validation for ``category`` (files excluded)."""
    prefix = "director" if category == "world" else "submitter"
    values = {
        "film_title": "The Night Market Ghost",
        "film_title_th": "ผีตลาดกลางคืน",
        "genres": ["Horror", "Fantasy"],
        "format": "live-action",
        "duration": "12",
        "synopsis": "A vendor discovers her customers are not alive.",
        "chiangmai_connection": "Shot in Warorot Market.",
        f"{prefix}_name": "Somchai Jaidee",
        f"{prefix}_name_th": "สมชาย ใจดี",
        f"{prefix}_age": {"youth": "16", "future": "21", "world": "34"}[category],
        f"{prefix}_phone": "0812345678",
        f"{prefix}_email": "filmmaker@example.com",
        f"{prefix}_role": "Director",
        "agreement1": True,
        "agreement2": True,
        "agreement3": True,
        "agreement4": True,
    }
    if category == "youth":
        values.update({"school_name": "Yupparaj Wittayalai", "student_id": "S-1024"})
    elif category == "future":
        values.update({"university_name": "Chiang Mai University", "faculty": "Fine Arts", "university_id": "640510"})
    values.update(overrides)
    return values


def make_form_data(category="youth", with_files=True, **overrides):
    values = valid_form_values(category, **overrides)
    if with_files:
        values = {**make_files(), **values}
    return FORM_CLASSES[Category(category)](user_id="user-123", application_id=f"{category}_1_abc", **values)
