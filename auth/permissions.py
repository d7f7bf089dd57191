"""
Permission matrix for festival administrators.

The permission vector is a pure function of (admin_role, admin_level); no other
profile field is consulted.
"""

from typing import FrozenSet, List

from auth.schema import AdminLevel, AdminPermissions, AdminProfile, AdminRole

PERMISSION_NAMES: List[str] = list(AdminPermissions.model_fields.keys())

# Levels are matched against these literal sets; there is no ordering between levels.
MANAGER_LEVELS: FrozenSet[str] = frozenset({AdminLevel.DIRECTOR.value, AdminLevel.LEAD.value})
JUNIOR_LEVEL = AdminLevel.JUNIOR.value


def no_permissions() -> AdminPermissions:
    """All-false vector used when there is no admin session."""
    return AdminPermissions()


def base_permissions() -> AdminPermissions:
    """View-only access granted to any admin record, whatever its role."""
    return AdminPermissions(can_view_dashboard=True, can_view_applications=True)


def _value(field) -> str:
    return field.value if hasattr(field, "value") else str(field or "")


def calculate_permissions(profile: AdminProfile) -> AdminPermissions:
    """
    Map an admin record's (admin_role, admin_level) to capability flags.

    - super-admin: everything.
    - admin: scoring, export, reports and flagging; approve/manage users/delete
      only for director or lead; content and edits for everyone but junior.
    - moderator: scoring, export and reports unless junior; flagging always.
    - anything else: view-only.
    """
    role = _value(profile.admin_role)
    level = _value(profile.admin_level)

    if role == AdminRole.SUPER_ADMIN.value:
        return AdminPermissions(**{name: True for name in PERMISSION_NAMES})

    if role == AdminRole.ADMIN.value:
        is_manager = level in MANAGER_LEVELS
        return AdminPermissions(
            can_view_dashboard=True,
            can_view_applications=True,
            can_score_applications=True,
            can_approve_applications=is_manager,
            can_export_data=True,
            can_manage_users=is_manager,
            can_manage_content=level != JUNIOR_LEVEL,
            can_access_system_settings=False,
            can_generate_reports=True,
            can_flag_applications=True,
            can_delete_applications=is_manager,
            can_edit_applications=level != JUNIOR_LEVEL,
        )

    if role == AdminRole.MODERATOR.value:
        not_junior = level != JUNIOR_LEVEL
        return AdminPermissions(
            can_view_dashboard=True,
            can_view_applications=True,
            can_score_applications=not_junior,
            can_export_data=not_junior,
            can_generate_reports=not_junior,
            can_flag_applications=True,
        )

    return base_permissions()
