"""
Reservation status notifications.

Two halves:
- the diff engine: pure functions comparing the last observed status of
  each reservation with a fresh snapshot, plus StatusTracker which keeps
  that last-observed map between refreshes;
- NotificationCenter: the ephemeral, auto-dismissing notifications a
  client polls for.
"""

import threading
import time
import uuid

from utils.messages import get_message

NOTIFICATION_TYPES = ('success', 'error', 'warning', 'info')
DEFAULT_DURATION = 5


# =============================================================================
# DIFF ENGINE
# =============================================================================

def snapshot_statuses(reservations: list) -> dict:
    """Map every reservation id to its current status."""
    return {r['id']: r['status'] for r in reservations}


def diff_reservation_statuses(previous: dict, reservations: list, user_id: str) -> list:
    """
    Find pending -> approved/rejected edges on one user's reservations.

    Args:
        previous: id -> last observed status
        reservations: Fresh reservation collection
        user_id: Only reservations owned by this id are considered

    Returns:
        List of (type, message) tuples, one per transition
    """
    notifications = []
    for reservation in reservations:
        if reservation['user_id'] != user_id:
            continue
        if previous.get(reservation['id']) != 'pending':
            continue

        status = reservation['status']
        if status == 'approved':
            notifications.append((
                'success',
                get_message('reservation_approved_notice', facility=reservation['facility_name'])
            ))
        elif status == 'rejected':
            notifications.append((
                'error',
                get_message(
                    'reservation_rejected_notice',
                    facility=reservation['facility_name'],
                    note=reservation.get('admin_note') or get_message('no_admin_note')
                )
            ))
    return notifications


def has_pending_reservations(reservations: list) -> bool:
    """Admin badge: any reservation still waiting for a decision."""
    return any(r['status'] == 'pending' for r in reservations)


class StatusTracker:
    """Last-observed status per reservation id for one signed-in user."""

    def __init__(self):
        self.last_statuses = {}
        self._lock = threading.Lock()

    def observe(self, reservations: list, identity) -> list:
        """
        Compare a refreshed collection against the last observation.

        Only user-role identities are tracked, and an empty collection is
        not recorded. Stale ids of deleted reservations stay until reset().

        Returns:
            List of (type, message) tuples to show
        """
        if identity is None or identity.role != 'user' or not reservations:
            return []

        with self._lock:
            notifications = diff_reservation_statuses(self.last_statuses, reservations, identity.id)
            self.last_statuses = snapshot_statuses(reservations)
        return notifications

    def reset(self) -> None:
        with self._lock:
            self.last_statuses = {}


# =============================================================================
# NOTIFICATION CENTER
# =============================================================================

class NotificationCenter:
    """
    Queue of ephemeral notifications for one client.
    Entries expire after their duration; nothing is persisted.
    """

    def __init__(self, default_duration: int = DEFAULT_DURATION, clock=time.time):
        self.default_duration = default_duration
        self._clock = clock
        self._items = []
        self._lock = threading.Lock()

    def add(self, notification_type: str, message: str, duration: int = None) -> dict:
        """
        Queue a notification.

        Args:
            notification_type: success, error, warning or info
            message: Text shown to the user
            duration: Seconds before auto-dismiss (default_duration if None)

        Returns:
            The queued notification dict
        """
        if notification_type not in NOTIFICATION_TYPES:
            raise ValueError(f'Unknown notification type: {notification_type}')

        notification = {
            'id': uuid.uuid4().hex,
            'type': notification_type,
            'message': message,
            'duration': duration or self.default_duration,
            'created_at': self._clock()
        }
        with self._lock:
            self._items.append(notification)
        return notification

    def show_success(self, message: str, duration: int = None) -> dict:
        return self.add('success', message, duration)

    def show_error(self, message: str, duration: int = None) -> dict:
        return self.add('error', message, duration)

    def show_warning(self, message: str, duration: int = None) -> dict:
        return self.add('warning', message, duration)

    def show_info(self, message: str, duration: int = None) -> dict:
        return self.add('info', message, duration)

    def dismiss(self, notification_id: str) -> bool:
        """Remove a notification before it expires."""
        with self._lock:
            before = len(self._items)
            self._items = [n for n in self._items if n['id'] != notification_id]
            return len(self._items) < before

    def active(self, now: float = None) -> list:
        """Drop expired notifications and return the rest, oldest first."""
        now = self._clock() if now is None else now
        with self._lock:
            self._items = [n for n in self._items if now < n['created_at'] + n['duration']]
            return list(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items = []
