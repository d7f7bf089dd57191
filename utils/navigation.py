"""
Navigation service for hash-style locations.

Components never touch a global location string; they receive a Navigator and
call ``navigate(route, params)``.
"""

import logging
from enum import Enum
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class Route(str, Enum):
    HOME = "home"
    SIGNIN = "signin"
    PROFILE_EDIT = "profile/edit"
    PROFILE_SETUP = "profile/setup"
    ADMIN_DASHBOARD = "admin/dashboard"
    MY_APPLICATIONS = "my-applications"
    SUBMIT = "submit"


# Locations from which a freshly verified session gets redirected.
AUTH_ADJACENT_LOCATIONS = frozenset({"", "#", "#home", "#signin", "#profile/setup"})
AUTH_LOCATION_PREFIX = "#auth/"


def location_for(route: Route, params: Optional[Dict[str, str]] = None) -> str:
    """
    Build the hash location for a route.

    ``Route.SUBMIT`` requires a ``category`` param and yields ``#submit-<category>``.
    """
    route = Route(route)
    if route is Route.SUBMIT:
        category = (params or {}).get("category")
        if not category:
            raise ValueError("Route.SUBMIT requires a 'category' param")
        return f"#submit-{category}"
    return f"#{route.value}"


def is_auth_adjacent(location: Optional[str]) -> bool:
    location = location or ""
    return location in AUTH_ADJACENT_LOCATIONS or location.startswith(AUTH_LOCATION_PREFIX)


class Navigator:
    """Interface: a current location plus ``navigate``."""

    @property
    def current_location(self) -> str:
        raise NotImplementedError

    def navigate(self, route: Route, params: Optional[Dict[str, str]] = None) -> None:
        raise NotImplementedError


class HashNavigator(Navigator):
    """Holds a single hash location string, e.g. the one a browser client reported."""

    def __init__(self, location: str = ""):
        self._location = location or ""

    @property
    def current_location(self) -> str:
        return self._location

    def navigate(self, route: Route, params: Optional[Dict[str, str]] = None) -> None:
        target = location_for(route, params)
        logger.info(f"🧭 Navigating {self._location or '(empty)'} -> {target}")
        self._location = target
