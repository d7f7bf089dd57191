"""
Auth package: session tracking, profile records and admin access.

Tests patch ``auth.supabase_client.create_client``; importing the submodule here
keeps it reachable as a package attribute for `unittest.mock.patch()`.
"""

from auth import supabase_client  # noqa: F401

__all__ = ["supabase_client"]
