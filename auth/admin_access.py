"""
Admin access resolution for a signed-in user.

AdminAccess reads the user's profile and admin records, decides whether the
user is an administrator, and exposes the derived permission vector.

States:
    LOADING -> NOT_ADMIN | ADMIN_BASIC | ADMIN_DETAILED

ADMIN_BASIC means the profile carries an admin role but no readable ``admins``
row exists; a default admin record is synthesized in that case.
"""

import logging
import os
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Optional

from auth.permissions import MANAGER_LEVELS, PERMISSION_NAMES, calculate_permissions, no_permissions
from auth.profile_store import ProfileStore
from auth.schema import AdminPermissions, AdminProfile, AdminRole, SessionUser, UserProfile
from auth.user_utils import ADMIN_ROLES

logger = logging.getLogger(__name__)

FALLBACK_ADMIN_LEVEL = os.environ.get("FALLBACK_ADMIN_LEVEL", "senior")
FALLBACK_DEPARTMENT = "Festival Management"
FALLBACK_RESPONSIBILITY = "General Administration"
FALLBACK_NAME = "Admin User"
FALLBACK_AGE = 30


class AdminAccessState(str, Enum):
    LOADING = "loading"
    NOT_ADMIN = "not_admin"
    ADMIN_BASIC = "admin_basic"
    ADMIN_DETAILED = "admin_detailed"


class AdminLevelView(str, Enum):
    """Coarse level used by the dashboard to pick a layout."""
    SUPER = "super"
    MANAGER = "manager"
    SCORER = "scorer"
    VIEWER = "viewer"


def build_fallback_admin_profile(user: SessionUser, profile: UserProfile) -> AdminProfile:
    """Synthesize an admin record for a profile that has an admin role but no ``admins`` row."""
    now = datetime.now()
    return AdminProfile(
        uid=user.uid,
        email=user.email,
        email_verified=user.email_verified,
        photo_url=user.photo_url,
        full_name_en=profile.full_name_en or user.display_name or FALLBACK_NAME,
        full_name_th=profile.full_name_th,
        birth_date=profile.birth_date,
        age=profile.age or FALLBACK_AGE,
        phone_number=profile.phone_number or "",
        admin_role=profile.role,
        admin_level=FALLBACK_ADMIN_LEVEL,
        department=FALLBACK_DEPARTMENT,
        responsibility=FALLBACK_RESPONSIBILITY,
        admin_since=now,
        permissions=[],
        last_active_at=now,
        is_profile_complete=_has_basic_info(profile),
        created_at=now,
        updated_at=now,
    )


def _has_basic_info(profile: UserProfile) -> bool:
    return bool(profile.full_name_en and profile.email)


class AdminAccess:
    """
    Admin status, profile and permissions for one session user.

    Args:
        profile_store: store used for ``profiles`` / ``admins`` reads
        user: the signed-in user, or None when there is no session
        on_change: optional callback invoked with this object after every
            state change (used by callers that stream status to a client)
    """

    def __init__(
        self,
        profile_store: ProfileStore,
        user: Optional[SessionUser],
        on_change: Optional[Callable[["AdminAccess"], None]] = None,
    ):
        self.profile_store = profile_store
        self.user = user
        self.on_change = on_change
        self.state = AdminAccessState.LOADING
        self.is_admin = False
        self.is_loading = True
        self.admin_profile: Optional[AdminProfile] = None
        self.permissions: AdminPermissions = no_permissions()

    def _notify(self) -> None:
        if self.on_change:
            self.on_change(self)

    def _set_not_admin(self) -> None:
        self.state = AdminAccessState.NOT_ADMIN
        self.is_admin = False
        self.admin_profile = None
        self.permissions = no_permissions()

    def _apply_admin_profile(self, admin_profile: AdminProfile, state: AdminAccessState) -> None:
        self.state = state
        self.admin_profile = admin_profile
        self.permissions = calculate_permissions(admin_profile)

    def load(self) -> "AdminAccess":
        """Resolve admin status. Never raises; failures degrade to NOT_ADMIN or ADMIN_BASIC."""
        self.is_loading = True
        try:
            self._load()
        finally:
            self.is_loading = False
            self._notify()
        return self

    def _load(self) -> None:
        if self.user is None:
            logger.debug("No session user; admin access denied")
            self._set_not_admin()
            return

        try:
            profile = self.profile_store.get_profile(self.user.uid)
        except Exception as e:
            logger.error(f"Error checking admin status for {self.user.uid}: {e}", exc_info=True)
            self._set_not_admin()
            return

        if profile is None or profile.role not in ADMIN_ROLES:
            logger.debug(f"User {self.user.uid} is not an admin (role={getattr(profile, 'role', None)})")
            self._set_not_admin()
            return

        # Admin role confirmed: expose it before the detailed lookup finishes.
        self.is_admin = True
        self._notify()

        try:
            admin_profile = self.profile_store.get_admin_profile(self.user.uid)
        except Exception as e:
            logger.warning(f"Could not read admin record for {self.user.uid}, using fallback profile: {e}")
            admin_profile = None

        if admin_profile is not None:
            admin_profile.is_profile_complete = _has_basic_info(profile)
            self._apply_admin_profile(admin_profile, AdminAccessState.ADMIN_DETAILED)
            logger.info(
                f"🔐 Admin {self.user.uid}: role={admin_profile.admin_role} level={admin_profile.admin_level}"
            )
            return

        logger.warning(
            f"⚠️ No admin record for {self.user.uid}; granting fallback level '{FALLBACK_ADMIN_LEVEL}'"
        )
        self._apply_admin_profile(build_fallback_admin_profile(self.user, profile), AdminAccessState.ADMIN_BASIC)

    def refresh_admin_data(self) -> None:
        """Re-read the admin record. Read failures are logged and leave state untouched."""
        if self.user is None:
            return
        self.is_loading = True
        try:
            admin_profile = self.profile_store.get_admin_profile(self.user.uid)
            if admin_profile is not None:
                self._apply_admin_profile(admin_profile, AdminAccessState.ADMIN_DETAILED)
        except Exception as e:
            logger.error(f"Error refreshing admin data for {self.user.uid}: {e}")
        finally:
            self.is_loading = False
            self._notify()

    def check_permission(self, permission: str) -> bool:
        if permission not in PERMISSION_NAMES:
            return False
        return bool(getattr(self.permissions, permission))

    def has_any_permission(self, permissions: Iterable[str]) -> bool:
        return any(self.check_permission(p) for p in permissions)

    @property
    def admin_level(self) -> AdminLevelView:
        profile = self.admin_profile
        if profile is None:
            return AdminLevelView.VIEWER
        if profile.admin_role == AdminRole.SUPER_ADMIN.value:
            return AdminLevelView.SUPER
        if profile.admin_role == AdminRole.ADMIN.value and profile.admin_level in MANAGER_LEVELS:
            return AdminLevelView.MANAGER
        if self.permissions.can_score_applications:
            return AdminLevelView.SCORER
        return AdminLevelView.VIEWER

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "is_admin": self.is_admin,
            "is_loading": self.is_loading,
            "admin_level": self.admin_level.value,
            "permissions": self.permissions.model_dump(),
            "admin_profile": self.admin_profile.model_dump(mode="json") if self.admin_profile else None,
        }
