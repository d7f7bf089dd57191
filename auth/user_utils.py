"""
Helpers for role checks, profile completeness and post-login routing.
"""

from datetime import date
from typing import Optional

from auth.schema import UserProfile, UserRole
from utils.navigation import Route

ADMIN_ROLES = frozenset({UserRole.ADMIN.value, UserRole.SUPER_ADMIN.value})


def is_admin_user(profile: Optional[UserProfile]) -> bool:
    """True for profiles whose role is admin or super-admin."""
    if not profile:
        return False
    return profile.role in ADMIN_ROLES


def _filled(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def is_profile_complete(profile: Optional[UserProfile]) -> bool:
    """
    Check completeness from actual field values.
    Admin users are always considered complete.
    """
    if not profile:
        return False
    if is_admin_user(profile):
        return True

    birth_date = profile.birth_date
    return (
        _filled(profile.full_name_en)
        and _filled(profile.email)
        and _filled(profile.phone_number)
        and birth_date is not None
        and 1900 < birth_date.year < date.today().year
    )


def get_post_auth_redirect_route(profile: Optional[UserProfile], fallback: Route = Route.PROFILE_EDIT) -> Route:
    """Admins land on the dashboard; everybody else on ``fallback``."""
    if is_admin_user(profile):
        return Route.ADMIN_DASHBOARD
    return fallback


def should_redirect_to_profile_setup(profile: Optional[UserProfile]) -> bool:
    if not profile or is_admin_user(profile):
        return False
    return not is_profile_complete(profile)


def can_access_profile_protected_route(profile: Optional[UserProfile]) -> bool:
    if not profile:
        return False
    return is_admin_user(profile) or is_profile_complete(profile)
