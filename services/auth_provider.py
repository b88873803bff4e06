"""
Auth provider client.

One instance per client context, holding that client's auth session and
emitting auth-state events (sign-in, sign-out, refresh) to its listeners.
Account-wide sign-out travels over the change feed's 'auth' topic so every
client signed in to the same account hears about it.
"""

import logging

from models import auth_account
from models.store import AuthError
from utils.datetime_helpers import utc_timestamp
from utils.realtime import EVENT_DELETE

logger = logging.getLogger(__name__)

AUTH_TOPIC = 'auth'

INITIAL_SESSION = 'INITIAL_SESSION'
SIGNED_IN = 'SIGNED_IN'
SIGNED_OUT = 'SIGNED_OUT'
TOKEN_REFRESHED = 'TOKEN_REFRESHED'
USER_UPDATED = 'USER_UPDATED'


class AuthStateSubscription:
    """Handle returned by AuthProvider.on_auth_state_change()."""

    def __init__(self, provider, callback):
        self.provider = provider
        self.callback = callback

    def unsubscribe(self) -> None:
        if self.callback in self.provider._listeners:
            self.provider._listeners.remove(self.callback)


class AuthProvider:
    """Auth session for a single client."""

    def __init__(self, change_feed):
        self.change_feed = change_feed
        self.session = None
        self._listeners = []
        self._account_subscription = change_feed.subscribe(
            AUTH_TOPIC, self._on_account_event, event=EVENT_DELETE
        )

    def on_auth_state_change(self, callback) -> AuthStateSubscription:
        """
        Register callback(event, session) for auth-state changes.
        session is None after a sign-out.
        """
        self._listeners.append(callback)
        return AuthStateSubscription(self, callback)

    def get_session(self) -> dict:
        return self.session

    def sign_in_with_password(self, email: str, password: str) -> dict:
        """
        Start a session from credentials.

        Returns:
            Session dict {'user_id', 'email', 'signed_in_at'}

        Raises:
            AuthError: If the credentials are rejected
            RemoteError: If the store fails
        """
        account = auth_account.verify_credentials(email, password)
        if account is None:
            raise AuthError('Invalid login credentials')

        auth_account.mark_signed_in(account['id'])
        self._start_session(account)
        self._emit(SIGNED_IN)
        return self.session

    def sign_up(self, email: str, password: str) -> dict:
        """
        Create an auth account. Does not start a session.

        Returns:
            dict: {'id', 'email'}
        """
        return auth_account.create_account(email, password)

    def delete_user(self, user_id: str) -> bool:
        """Remove an auth account (used to undo a partial registration)."""
        deleted = auth_account.delete_account(user_id)
        if self.session and self.session['user_id'] == user_id:
            self._end_session()
        return deleted

    def restore_session(self, user_id: str) -> dict:
        """
        Resume the session of an already signed-in browser.

        Returns:
            Session dict, or None if the account no longer exists
        """
        account = auth_account.get_account_by_id(user_id)
        if account is None:
            logger.warning(f'Cannot restore session: account {user_id} not found')
            self._end_session()
            return None

        self._start_session(account)
        self._emit(INITIAL_SESSION)
        return self.session

    def refresh_session(self) -> dict:
        """Renew the current session and announce it."""
        if self.session is None:
            raise AuthError('No active session')
        self.session['refreshed_at'] = utc_timestamp()
        self._emit(TOKEN_REFRESHED)
        return self.session

    def sign_out(self, scope: str = 'local') -> None:
        """
        End the session.

        Args:
            scope: 'local' ends this client's session; 'global' ends every
                session of the account
        """
        if scope not in ('local', 'global'):
            raise ValueError(f'Unknown sign-out scope: {scope}')

        if scope == 'global' and self.session is not None:
            self.change_feed.publish(AUTH_TOPIC, EVENT_DELETE, {'user_id': self.session['user_id']})
        self._end_session()

    def close(self) -> None:
        """Detach from the change feed."""
        self._account_subscription.unsubscribe()
        self._listeners = []

    def _start_session(self, account: dict) -> None:
        self.session = {
            'user_id': account['id'],
            'email': account['email'],
            'signed_in_at': utc_timestamp()
        }

    def _end_session(self) -> None:
        if self.session is None:
            return
        self.session = None
        self._emit(SIGNED_OUT)

    def _on_account_event(self, event, record) -> None:
        if self.session and record and record.get('user_id') == self.session['user_id']:
            logger.info(f'Session of {self.session["email"]} revoked')
            self._end_session()

    def _emit(self, event: str) -> None:
        for callback in list(self._listeners):
            callback(event, self.session)
