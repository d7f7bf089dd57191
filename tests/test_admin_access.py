"""
Unit tests for admin access resolution.
"""

import logging

from auth import admin_access
from auth.admin_access import AdminAccess, AdminAccessState, AdminLevelView
from tests.conftest import FakeProfileStore, make_admin_profile, make_profile, make_user


def admin_setup(role="admin", admin_record=None):
    user = make_user(uid="admin-1", email="staff@example.com")
    store = FakeProfileStore(
        profiles={"admin-1": make_profile(uid="admin-1", email="staff@example.com", role=role)},
        admins={"admin-1": admin_record} if admin_record else {},
    )
    return user, store


class TestAdminAccessLoad:
    """State resolution in AdminAccess.load()."""

    def test_no_user_is_not_admin(self, profile_store):
        access = AdminAccess(profile_store, None).load()
        assert access.state is AdminAccessState.NOT_ADMIN
        assert access.is_admin is False
        assert access.is_loading is False
        assert not any(access.permissions.model_dump().values())

    def test_regular_profile_is_not_admin(self):
        store = FakeProfileStore(profiles={"user-123": make_profile()})
        access = AdminAccess(store, make_user()).load()
        assert access.state is AdminAccessState.NOT_ADMIN
        assert access.admin_profile is None

    def test_missing_profile_is_not_admin(self, profile_store):
        access = AdminAccess(profile_store, make_user()).load()
        assert access.state is AdminAccessState.NOT_ADMIN

    def test_profile_read_failure_is_not_admin(self, caplog):
        user, store = admin_setup()
        store.profile_error = RuntimeError("connection reset")
        with caplog.at_level(logging.ERROR):
            access = AdminAccess(store, user).load()
        assert access.state is AdminAccessState.NOT_ADMIN
        assert access.is_admin is False
        assert "connection reset" in caplog.text

    def test_detailed_admin_record(self):
        record = make_admin_profile(admin_role="admin", admin_level="director", is_profile_complete=False)
        user, store = admin_setup(admin_record=record)

        access = AdminAccess(store, user).load()

        assert access.state is AdminAccessState.ADMIN_DETAILED
        assert access.is_admin is True
        assert access.admin_profile.admin_level == "director"
        assert access.check_permission("can_approve_applications") is True
        # Completeness is recomputed from the profile's name and email.
        assert access.admin_profile.is_profile_complete is True

    def test_missing_admin_record_uses_fallback(self, caplog):
        user, store = admin_setup(role="admin")
        with caplog.at_level(logging.WARNING):
            access = AdminAccess(store, user).load()

        assert access.state is AdminAccessState.ADMIN_BASIC
        assert access.is_admin is True
        profile = access.admin_profile
        assert profile.admin_role == "admin"
        assert profile.admin_level == admin_access.FALLBACK_ADMIN_LEVEL
        assert profile.department == "Festival Management"
        assert profile.responsibility == "General Administration"
        assert profile.full_name_en == "Somchai Jaidee"
        assert "fallback level" in caplog.text

    def test_admin_record_read_failure_uses_fallback(self):
        user, store = admin_setup(role="super-admin")
        store.admin_error = RuntimeError("permission denied for table admins")

        access = AdminAccess(store, user).load()

        assert access.state is AdminAccessState.ADMIN_BASIC
        assert access.admin_profile.admin_role == "super-admin"
        assert access.check_permission("can_access_system_settings") is True

    def test_fallback_defaults_for_sparse_profile(self):
        user = make_user(uid="admin-2", email="x@example.com")
        store = FakeProfileStore(
            profiles={"admin-2": make_profile(uid="admin-2", role="admin", full_name_en=None, age=None, phone_number=None)}
        )
        access = AdminAccess(store, user).load()
        assert access.admin_profile.full_name_en == "Admin User"
        assert access.admin_profile.age == 30
        assert access.admin_profile.is_profile_complete is False

    def test_is_admin_published_before_detailed_lookup(self):
        record = make_admin_profile(admin_role="admin", admin_level="lead")
        user, store = admin_setup(admin_record=record)
        seen = []

        access = AdminAccess(store, user, on_change=lambda a: seen.append((a.is_admin, a.state)))
        access.load()

        assert seen[0] == (True, AdminAccessState.LOADING)
        assert seen[-1] == (True, AdminAccessState.ADMIN_DETAILED)


class TestAdminAccessRefresh:

    def test_refresh_applies_new_record(self):
        user, store = admin_setup(role="admin")
        access = AdminAccess(store, user).load()
        assert access.state is AdminAccessState.ADMIN_BASIC

        store.admins["admin-1"] = make_admin_profile(admin_role="moderator", admin_level="junior")
        access.refresh_admin_data()

        assert access.state is AdminAccessState.ADMIN_DETAILED
        assert access.check_permission("can_score_applications") is False

    def test_refresh_failure_is_logged_and_state_kept(self, caplog):
        record = make_admin_profile(admin_role="admin", admin_level="lead")
        user, store = admin_setup(admin_record=record)
        access = AdminAccess(store, user).load()
        store.admin_error = RuntimeError("timeout")

        with caplog.at_level(logging.ERROR):
            access.refresh_admin_data()

        assert access.state is AdminAccessState.ADMIN_DETAILED
        assert access.admin_profile.admin_level == "lead"
        assert access.is_loading is False
        assert "timeout" in caplog.text


class TestAdminAccessQueries:

    def test_unknown_permission_is_false(self):
        user, store = admin_setup(role="super-admin")
        access = AdminAccess(store, user).load()
        assert access.check_permission("can_do_anything") is False
        assert access.check_permission("to_dict") is False

    def test_has_any_permission(self):
        record = make_admin_profile(admin_role="moderator", admin_level="junior")
        user, store = admin_setup(admin_record=record)
        access = AdminAccess(store, user).load()
        assert access.has_any_permission(["can_manage_users", "can_flag_applications"]) is True
        assert access.has_any_permission(["can_manage_users", "can_export_data"]) is False
        assert access.has_any_permission([]) is False

    def test_admin_level_priority(self):
        cases = [
            (make_admin_profile(admin_role="super-admin", admin_level="junior"), AdminLevelView.SUPER),
            (make_admin_profile(admin_role="admin", admin_level="lead"), AdminLevelView.MANAGER),
            (make_admin_profile(admin_role="admin", admin_level="senior"), AdminLevelView.SCORER),
            (make_admin_profile(admin_role="moderator", admin_level="director"), AdminLevelView.SCORER),
            (make_admin_profile(admin_role="moderator", admin_level="junior"), AdminLevelView.VIEWER),
        ]
        for record, expected in cases:
            user, store = admin_setup(admin_record=record)
            assert AdminAccess(store, user).load().admin_level is expected

    def test_non_admin_level_is_viewer(self, profile_store):
        assert AdminAccess(profile_store, None).load().admin_level is AdminLevelView.VIEWER

    def test_to_dict(self):
        record = make_admin_profile(admin_role="admin", admin_level="director")
        user, store = admin_setup(admin_record=record)
        payload = AdminAccess(store, user).load().to_dict()
        assert payload["state"] == "admin_detailed"
        assert payload["admin_level"] == "manager"
        assert payload["permissions"]["can_manage_users"] is True
        assert payload["admin_profile"]["uid"] == "admin-1"
