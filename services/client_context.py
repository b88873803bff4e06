"""
Per-browser client state.

A ClientContext bundles what one signed-in browser holds: its auth
session, identity, synchronized collections, status tracker and pending
notifications. Contexts live in the app's ClientRegistry, keyed by the
client id stored in the Flask session cookie.
"""

import logging
import threading
import time
import uuid

from flask import session
from flask_login import current_user, logout_user

from services.auth_provider import AuthProvider
from services.session_service import SessionService
from services.sync_service import DataSyncService
from utils.notifications import NotificationCenter, StatusTracker, has_pending_reservations

logger = logging.getLogger(__name__)

CLIENT_ID_KEY = 'client_id'


class ClientContext:
    """State container for one browser session."""

    def __init__(self, client_id: str, change_feed, app=None, notification_duration: int = 5):
        self.client_id = client_id
        self.auth = AuthProvider(change_feed)
        self.session = SessionService(self.auth)
        self.sync = DataSyncService(change_feed, app=app)
        self.tracker = StatusTracker()
        self.notifications = NotificationCenter(default_duration=notification_duration)
        self.has_pending = False
        self.revoked = False
        self._signing_out = False
        self.last_seen = time.monotonic()

        self.session.add_listener(self._on_identity_change)
        self.sync.add_listener(self._on_reservations)

    @property
    def identity(self):
        return self.session.identity

    def logout(self, everywhere: bool = False) -> None:
        self._signing_out = True
        try:
            self.session.logout(everywhere=everywhere)
        finally:
            self._signing_out = False

    def close(self) -> None:
        """Release subscriptions held by this context."""
        self.sync.stop()
        self.session.close()
        self.auth.close()

    def _on_identity_change(self, identity) -> None:
        self.tracker.reset()
        self.has_pending = False
        if identity is None:
            self.sync.stop()
            if not self._signing_out:
                self.revoked = True
            return

        self.revoked = False
        self.sync.start(identity)

    def _on_reservations(self, reservations: list) -> None:
        identity = self.session.identity
        if identity is None:
            return

        if identity.is_admin:
            self.has_pending = has_pending_reservations(reservations)

        for notification_type, message in self.tracker.observe(reservations, identity):
            self.notifications.add(notification_type, message)


class ClientRegistry:
    """
    Lock-guarded map of client id -> ClientContext.

    Contexts not seen for idle_timeout seconds are closed on the next
    open(), so browsers that never sign out do not keep their feed
    subscriptions forever.
    """

    def __init__(self, change_feed, app=None, notification_duration: int = 5,
                 idle_timeout: float = None, clock=time.monotonic):
        self.change_feed = change_feed
        self.app = app
        self.notification_duration = notification_duration
        self.idle_timeout = idle_timeout
        self._clock = clock
        self._clients = {}
        self._lock = threading.Lock()

    def open(self, client_id: str) -> ClientContext:
        """Get the context for a client id, creating it on first use."""
        self.evict_idle()
        with self._lock:
            context = self._clients.get(client_id)
            if context is None:
                context = ClientContext(
                    client_id, self.change_feed, app=self.app,
                    notification_duration=self.notification_duration
                )
                self._clients[client_id] = context
                logger.debug(f'Client context {client_id} opened')
            context.last_seen = self._clock()
            return context

    def evict_idle(self) -> int:
        """
        Close contexts idle for longer than idle_timeout.

        Returns:
            int: Number of contexts closed
        """
        if not self.idle_timeout:
            return 0

        cutoff = self._clock() - self.idle_timeout
        with self._lock:
            expired = [cid for cid, ctx in self._clients.items() if ctx.last_seen < cutoff]
            contexts = [self._clients.pop(cid) for cid in expired]

        for context in contexts:
            context.close()
            logger.debug(f'Client context {context.client_id} evicted after inactivity')
        return len(contexts)

    def get(self, client_id: str) -> ClientContext:
        with self._lock:
            return self._clients.get(client_id)

    def close(self, client_id: str) -> bool:
        with self._lock:
            context = self._clients.pop(client_id, None)
        if context is None:
            return False
        context.close()
        logger.debug(f'Client context {client_id} closed')
        return True

    def __len__(self):
        with self._lock:
            return len(self._clients)


def current_client() -> ClientContext:
    """
    Context of the browser making the current request.

    A browser whose Flask-Login session survived a server restart gets a
    fresh context with its identity restored.
    """
    from extensions import realtime

    client_id = session.get(CLIENT_ID_KEY)
    if not client_id:
        client_id = uuid.uuid4().hex
        session[CLIENT_ID_KEY] = client_id

    context = realtime.clients.open(client_id)
    if current_user.is_authenticated and context.identity is None and not context.revoked:
        context.session.restore(current_user.get_id())
    return context


def end_revoked_session() -> None:
    """
    Sign the browser out of Flask-Login when its auth session was revoked
    from another client.
    """
    from extensions import realtime

    client_id = session.get(CLIENT_ID_KEY)
    if not client_id:
        return

    context = realtime.clients.get(client_id)
    if context is not None and context.revoked:
        logger.info(f'Client {client_id} signed out by a global sign-out')
        realtime.clients.close(client_id)
        session.pop(CLIENT_ID_KEY, None)
        logout_user()


def release_anonymous_client(context: ClientContext) -> None:
    """Drop the context of a browser that failed to sign in."""
    from extensions import realtime

    if context.identity is not None:
        return
    realtime.clients.close(context.client_id)
    session.pop(CLIENT_ID_KEY, None)
