"""
Tests for the status-change diff engine and the notification center.
"""

import pytest
import threading
from datetime import datetime

from models.profile import Identity
from utils.notifications import (
    NotificationCenter,
    StatusTracker,
    diff_reservation_statuses,
    has_pending_reservations,
    snapshot_statuses,
)


def _identity(user_id='u1', role='user'):
    return Identity({
        'id': user_id, 'name': 'Test Person', 'email': f'{user_id}@campus.edu',
        'role': role, 'created_at': datetime(2024, 1, 1)
    })


def _res(reservation_id, status, user_id='u1', facility_name='Main Auditorium', admin_note=None):
    return {
        'id': reservation_id, 'user_id': user_id, 'status': status,
        'facility_name': facility_name, 'admin_note': admin_note
    }


class TestDiffReservationStatuses:
    """Only pending -> terminal edges on the user's own reservations notify."""

    def test_approval_notifies_success(self):
        notifications = diff_reservation_statuses(
            {'r1': 'pending'}, [_res('r1', 'approved')], 'u1'
        )

        assert len(notifications) == 1
        notification_type, message = notifications[0]
        assert notification_type == 'success'
        assert 'Main Auditorium' in message
        assert 'APPROVED' in message

    def test_rejection_includes_note(self):
        notifications = diff_reservation_statuses(
            {'r1': 'pending'}, [_res('r1', 'rejected', admin_note='Hall under repair')], 'u1'
        )

        assert notifications[0][0] == 'error'
        assert 'REJECTED' in notifications[0][1]
        assert 'Hall under repair' in notifications[0][1]

    def test_rejection_without_note_uses_fallback(self):
        notifications = diff_reservation_statuses(
            {'r1': 'pending'}, [_res('r1', 'rejected')], 'u1'
        )

        assert 'No note provided.' in notifications[0][1]

    def test_other_users_reservations_ignored(self):
        notifications = diff_reservation_statuses(
            {'r1': 'pending'}, [_res('r1', 'approved', user_id='u2')], 'u1'
        )
        assert notifications == []

    def test_unknown_previous_status_ignored(self):
        assert diff_reservation_statuses({}, [_res('r1', 'approved')], 'u1') == []

    def test_unchanged_status_ignored(self):
        assert diff_reservation_statuses(
            {'r1': 'approved'}, [_res('r1', 'approved')], 'u1'
        ) == []
        assert diff_reservation_statuses(
            {'r1': 'pending'}, [_res('r1', 'pending')], 'u1'
        ) == []

    def test_one_notification_per_transition(self):
        previous = {'r1': 'pending', 'r2': 'pending', 'r3': 'pending'}
        reservations = [_res('r1', 'approved'), _res('r2', 'rejected'), _res('r3', 'pending')]

        notifications = diff_reservation_statuses(previous, reservations, 'u1')

        assert [n[0] for n in notifications] == ['success', 'error']


class TestSnapshotHelpers:
    """Snapshots and the admin pending badge."""

    def test_snapshot_covers_every_reservation(self):
        reservations = [_res('r1', 'pending'), _res('r2', 'approved', user_id='u2')]
        assert snapshot_statuses(reservations) == {'r1': 'pending', 'r2': 'approved'}

    def test_has_pending(self):
        assert has_pending_reservations([_res('r1', 'approved'), _res('r2', 'pending')])
        assert not has_pending_reservations([_res('r1', 'approved')])
        assert not has_pending_reservations([])


class TestStatusTracker:
    """The tracker keeps the last observation between refreshes."""

    def test_first_observation_is_silent(self):
        tracker = StatusTracker()
        assert tracker.observe([_res('r1', 'approved')], _identity()) == []
        assert tracker.last_statuses == {'r1': 'approved'}

    def test_transition_notifies_once(self):
        tracker = StatusTracker()
        identity = _identity()
        tracker.observe([_res('r1', 'pending')], identity)

        first = tracker.observe([_res('r1', 'approved')], identity)
        second = tracker.observe([_res('r1', 'approved')], identity)

        assert len(first) == 1
        assert second == []

    def test_admins_are_not_tracked(self):
        tracker = StatusTracker()
        admin = _identity('a1', role='admin')
        tracker.observe([_res('r1', 'pending', user_id='a1')], admin)

        assert tracker.observe([_res('r1', 'approved', user_id='a1')], admin) == []
        assert tracker.last_statuses == {}

    def test_empty_collection_not_recorded(self):
        tracker = StatusTracker()
        identity = _identity()
        tracker.observe([_res('r1', 'pending')], identity)
        tracker.observe([], identity)

        assert tracker.last_statuses == {'r1': 'pending'}
        assert len(tracker.observe([_res('r1', 'rejected')], identity)) == 1

    def test_snapshot_includes_other_users(self):
        tracker = StatusTracker()
        tracker.observe([_res('r1', 'pending'), _res('r2', 'pending', user_id='u2')], _identity())
        assert set(tracker.last_statuses) == {'r1', 'r2'}

    def test_concurrent_refreshes_notify_once(self):
        """Refreshes delivered from several writer threads report a transition once."""
        tracker = StatusTracker()
        identity = _identity()
        tracker.observe([_res('r1', 'pending')], identity)

        barrier = threading.Barrier(8)
        results = []

        def refresh():
            barrier.wait()
            results.extend(tracker.observe([_res('r1', 'approved')], identity))

        threads = [threading.Thread(target=refresh) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 1

    def test_reset(self):
        tracker = StatusTracker()
        identity = _identity()
        tracker.observe([_res('r1', 'pending')], identity)
        tracker.reset()

        assert tracker.observe([_res('r1', 'approved')], identity) == []


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestNotificationCenter:
    """Ephemeral notifications with auto-dismiss."""

    def test_show_helpers_set_type(self):
        center = NotificationCenter()
        center.show_success('a')
        center.show_error('b')
        center.show_warning('c')
        center.show_info('d')

        assert [n['type'] for n in center.active()] == ['success', 'error', 'warning', 'info']

    def test_default_duration(self):
        center = NotificationCenter(default_duration=5)
        assert center.show_info('hello')['duration'] == 5

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            NotificationCenter().add('fatal', 'boom')

    def test_expired_notifications_pruned(self):
        clock = FakeClock()
        center = NotificationCenter(default_duration=5, clock=clock)
        center.show_info('short')
        center.show_info('long', duration=30)

        clock.now += 10

        assert [n['message'] for n in center.active()] == ['long']

    def test_dismiss(self):
        center = NotificationCenter()
        notification = center.show_success('done')

        assert center.dismiss(notification['id']) is True
        assert center.dismiss(notification['id']) is False
        assert center.active() == []

    def test_clear(self):
        center = NotificationCenter()
        center.show_info('x')
        center.clear()
        assert center.active() == []
