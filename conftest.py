"""Pytest hooks for the festival submission gateway. Keep tests off real Supabase and Redis."""

import os


def pytest_configure(config):
    """Drop service credentials so nothing reaches a real project during the run."""
    for name in ("SUPABASE_URL", "SUPABASE_ANON_KEY", "SUPABASE_SERVICE_ROLE_KEY", "REDIS_URL"):
        if os.environ.pop(name, None):
            print(f"\nTip: {name} is ignored under pytest; tests patch the Supabase client instead.", end="")
