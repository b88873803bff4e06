"""
Session service.

Owns the signed-in Identity of one client. Active operations (login,
register, logout) go through the auth provider; every auth-state event
the provider emits re-resolves the profile, so the identity also follows
sign-outs that happen elsewhere.
"""

import logging

from models.profile import ROLE_USER, create_profile, get_identity
from models.store import AuthError, RemoteError
from services.auth_provider import SIGNED_OUT

logger = logging.getLogger(__name__)


class SessionService:
    """Signed-in identity for one client."""

    def __init__(self, auth_provider):
        self.auth = auth_provider
        self.identity = None
        self._listeners = []
        self._auth_subscription = auth_provider.on_auth_state_change(self._handle_auth_event)

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    def add_listener(self, callback):
        """
        Register callback(identity) for identity changes.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(callback)

        def remove():
            if callback in self._listeners:
                self._listeners.remove(callback)
        return remove

    def login(self, email: str, password: str) -> bool:
        """
        Sign in with email and password.

        Returns:
            bool: True if signed in; False on any rejection
        """
        try:
            self.auth.sign_in_with_password(email, password)
        except AuthError as e:
            logger.warning(f'Login rejected for {email}: {e}')
            return False
        except RemoteError as e:
            logger.error(f'Error signing in {email}: {e}', exc_info=True)
            return False

        return self.identity is not None

    def register(self, name: str, email: str, password: str) -> bool:
        """
        Create an account and its user profile, then sign in.

        If the profile cannot be created the auth account is deleted again
        so the email stays available.

        Returns:
            bool: True if the account exists and is signed in
        """
        try:
            account = self.auth.sign_up(email, password)
        except RemoteError as e:
            logger.warning(f'Sign-up rejected for {email}: {e}')
            return False

        try:
            create_profile(account['id'], name, role=ROLE_USER)
        except RemoteError as e:
            logger.error(f'Error creating profile for {email}: {e}', exc_info=True)
            try:
                self.auth.delete_user(account['id'])
            except RemoteError as cleanup_error:
                logger.error(
                    f'Error removing orphaned account {account["id"]}: {cleanup_error}',
                    exc_info=True
                )
            return False

        return self.login(email, password)

    def restore(self, user_id: str) -> bool:
        """Resolve the identity of a browser that is already signed in."""
        try:
            self.auth.restore_session(user_id)
        except RemoteError as e:
            logger.error(f'Error restoring session {user_id}: {e}', exc_info=True)
            return False
        return self.identity is not None

    def logout(self, everywhere: bool = False) -> None:
        """Sign out. Safe to call when nobody is signed in."""
        self.auth.sign_out(scope='global' if everywhere else 'local')
        self._set_identity(None)

    def close(self) -> None:
        self._auth_subscription.unsubscribe()
        self._listeners = []

    def _handle_auth_event(self, event: str, session: dict) -> None:
        logger.debug(f'Auth event {event}')
        if event == SIGNED_OUT or session is None:
            self._set_identity(None)
            return

        try:
            identity = get_identity(session['user_id'])
        except (RemoteError, ValueError) as e:
            logger.error(f'Error loading profile {session["user_id"]}: {e}', exc_info=True)
            identity = None

        if identity is None:
            logger.warning(f'No profile for account {session["user_id"]}')
        self._set_identity(identity)

    def _set_identity(self, identity) -> None:
        if identity == self.identity:
            return
        self.identity = identity
        for callback in list(self._listeners):
            callback(identity)
