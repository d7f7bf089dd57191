"""
Data models for festival users and administrators.
Uses Pydantic for validation and type safety.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, List, Optional
from pydantic import BaseModel, Field


class UserRole(str, Enum):
    """Role stored on a profile record. Regular entrants have no role."""
    ADMIN = "admin"
    SUPER_ADMIN = "super-admin"


class AdminRole(str, Enum):
    ADMIN = "admin"
    SUPER_ADMIN = "super-admin"
    MODERATOR = "moderator"


class AdminLevel(str, Enum):
    JUNIOR = "junior"
    SENIOR = "senior"
    LEAD = "lead"
    DIRECTOR = "director"


class SessionUser(BaseModel):
    """The identity provider's view of the signed-in user."""
    uid: str
    email: Optional[str] = None
    email_verified: bool = False
    display_name: Optional[str] = None
    photo_url: Optional[str] = None

    @classmethod
    def from_supabase(cls, user: Any) -> "SessionUser":
        """Build from a gotrue ``User`` object (``email_confirmed_at`` marks verification)."""
        metadata = getattr(user, "user_metadata", None) or {}
        return cls(
            uid=user.id,
            email=getattr(user, "email", None),
            email_verified=bool(getattr(user, "email_confirmed_at", None)),
            display_name=metadata.get("full_name") or metadata.get("name"),
            photo_url=metadata.get("avatar_url"),
        )


class UserProfile(BaseModel):
    """
    Row of the ``profiles`` table.

    ``role`` is kept as a free string: anything other than "admin" or
    "super-admin" is treated as a regular entrant.
    """
    uid: str
    email: Optional[str] = None
    email_verified: bool = False
    full_name_en: Optional[str] = None
    full_name_th: Optional[str] = None
    birth_date: Optional[date] = None
    age: Optional[int] = None
    phone_number: Optional[str] = None
    photo_url: Optional[str] = None
    role: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AdminProfile(BaseModel):
    """Row of the ``admins`` table, or a synthesized stand-in for it."""
    uid: str
    email: Optional[str] = None
    email_verified: bool = False
    photo_url: Optional[str] = None
    full_name_en: str = "Admin User"
    full_name_th: Optional[str] = None
    birth_date: Optional[date] = None
    age: Optional[int] = None
    phone_number: str = ""
    admin_role: str
    admin_level: str
    department: Optional[str] = None
    responsibility: Optional[str] = None
    admin_since: Optional[datetime] = None
    permissions: List[str] = Field(default_factory=list)
    last_active_at: Optional[datetime] = None
    is_profile_complete: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AdminPermissions(BaseModel):
    """Capability flags derived from (admin_role, admin_level). Never persisted."""
    can_view_dashboard: bool = False
    can_view_applications: bool = False
    can_score_applications: bool = False
    can_approve_applications: bool = False
    can_export_data: bool = False
    can_manage_users: bool = False
    can_manage_content: bool = False
    can_access_system_settings: bool = False
    can_generate_reports: bool = False
    can_flag_applications: bool = False
    can_delete_applications: bool = False
    can_edit_applications: bool = False
