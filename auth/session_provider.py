"""
Session tracking on top of the Supabase auth-state stream.

The provider keeps the current user and profile, syncs the stored
``email_verified`` flag, and decides the single post-login redirect.

Redirect state machine:
    AWAITING_REDIRECT --(user + profile + verified email)--> REDIRECTED
    REDIRECTED --(signed out)--> AWAITING_REDIRECT
"""

import logging
from enum import Enum
from typing import Any, Optional

from auth.profile_store import ProfileStore
from auth.schema import SessionUser, UserProfile
from auth.user_utils import (
    get_post_auth_redirect_route,
    is_admin_user,
    is_profile_complete,
    should_redirect_to_profile_setup,
)
from utils.navigation import Navigator, Route, is_auth_adjacent

logger = logging.getLogger(__name__)


class RedirectState(str, Enum):
    AWAITING_REDIRECT = "awaiting_redirect"
    REDIRECTED = "redirected"


class SessionProvider:
    """
    Current session user + profile for one client.

    Args:
        auth_client: object exposing ``on_auth_state_change(callback)`` and
            ``sign_out()`` (``supabase.auth`` in production)
        profile_store: store used to load and patch the profile
        navigator: navigation service used for the post-login redirect
        redirect_state: state restored from a previous request, if any
    """

    def __init__(
        self,
        auth_client: Any,
        profile_store: ProfileStore,
        navigator: Navigator,
        redirect_state: RedirectState = RedirectState.AWAITING_REDIRECT,
    ):
        self.auth_client = auth_client
        self.profile_store = profile_store
        self.navigator = navigator
        self.redirect_state = RedirectState(redirect_state)
        self.user: Optional[SessionUser] = None
        self.user_profile: Optional[UserProfile] = None
        self.loading = True
        self._subscription = None

    # -- subscription lifecycle -------------------------------------------------

    def start(self) -> None:
        """Subscribe to the auth-state stream. Only one subscription is kept."""
        if self._subscription is not None:
            return
        self._subscription = self.auth_client.on_auth_state_change(self.handle_auth_state_change)

    def stop(self) -> None:
        if self._subscription is None:
            return
        self._subscription.unsubscribe()
        self._subscription = None

    # -- events -----------------------------------------------------------------

    def handle_auth_state_change(self, event: str, session: Any) -> None:
        """Process one emission of the auth stream (``event`` is informational)."""
        raw_user = getattr(session, "user", None) if session is not None else None
        logger.debug(f"Auth event {event}: user={'yes' if raw_user else 'no'}")

        if raw_user is None:
            self.user = None
            self.user_profile = None
            self.redirect_state = RedirectState.AWAITING_REDIRECT
            self.loading = False
            return

        self.user = raw_user if isinstance(raw_user, SessionUser) else SessionUser.from_supabase(raw_user)
        self.user_profile = self._load_profile()
        self._sync_email_verified()
        self.loading = False
        self._maybe_redirect()

    def _load_profile(self) -> Optional[UserProfile]:
        try:
            return self.profile_store.get_profile(self.user.uid)
        except Exception as e:
            logger.error(f"Error loading profile for {self.user.uid}: {e}")
            return None

    def _sync_email_verified(self) -> None:
        profile = self.user_profile
        if profile is None or profile.email_verified == self.user.email_verified:
            return
        try:
            self.profile_store.update_profile(self.user.uid, {"email_verified": self.user.email_verified})
            self.user_profile = self.profile_store.get_profile(self.user.uid)
        except Exception as e:
            logger.error(f"Error updating email verification status for {self.user.uid}: {e}")

    def _maybe_redirect(self) -> None:
        if self.redirect_state is RedirectState.REDIRECTED:
            return
        if not (self.user and self.user_profile and self.user.email_verified):
            return

        self.redirect_state = RedirectState.REDIRECTED
        if not is_auth_adjacent(self.navigator.current_location):
            return

        profile = self.user_profile
        if is_admin_user(profile):
            logger.info("Admin user detected, navigating to admin dashboard")
            self.navigator.navigate(get_post_auth_redirect_route(profile))
        elif should_redirect_to_profile_setup(profile):
            logger.info("Profile incomplete, redirecting to profile setup")
            self.navigator.navigate(Route.PROFILE_SETUP)
        else:
            self.navigator.navigate(get_post_auth_redirect_route(profile))

    # -- helpers ----------------------------------------------------------------

    def refresh_user_profile(self) -> Optional[UserProfile]:
        if self.user is not None:
            self.user_profile = self._load_profile()
        return self.user_profile

    def sign_out(self) -> None:
        self.auth_client.sign_out()
        self.handle_auth_state_change("SIGNED_OUT", None)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_email_verified(self) -> bool:
        return bool(self.user and self.user.email_verified)

    @property
    def is_profile_complete(self) -> bool:
        return is_profile_complete(self.user_profile)
