"""
Data synchronization service.

Keeps one client's in-memory facility and reservation collections in step
with the store. Every mutation is a remote write followed by a full
re-fetch, and every reservation change event from the change feed triggers
the same re-fetch; event payloads are never applied locally.
"""

import logging

from flask import current_app, has_app_context

from models import facility as facility_model
from models import reservation as reservation_model
from models.reservation_lifecycle import (
    STATUS_APPROVED,
    STATUS_PENDING,
    STATUS_REJECTED,
    InvalidStatusTransitionError,
    ReservationConflictError,
    ReservationValidationError,
    build_reservation_payload,
    can_cancel,
    find_conflicts,
    require_rejection_note,
    validate_status_transition,
)
from models.store import RemoteError, RowMappingError
from utils.realtime import EVENT_ANY

logger = logging.getLogger(__name__)

RECENT_RESERVATIONS_LIMIT = 5


class DataSyncService:
    """Facility and reservation collections for one client."""

    def __init__(self, change_feed, app=None):
        self.change_feed = change_feed
        self.app = app
        self.facilities = []
        self.reservations = []
        self.identity = None
        self._subscription = None
        self._listeners = []

    # -------------------------------------------------------------------------
    # Subscription lifecycle
    # -------------------------------------------------------------------------

    @property
    def is_subscribed(self) -> bool:
        return self._subscription is not None

    def start(self, identity) -> None:
        """
        Load both collections and subscribe to reservation changes.

        Calling start again for the same identity neither re-fetches nor
        subscribes a second time.
        """
        if self._subscription is not None and identity == self.identity:
            return
        if self._subscription is not None:
            self.stop()

        self.identity = identity
        self.refresh_facilities()
        self.refresh_reservations()
        self._subscription = self.change_feed.subscribe(
            reservation_model.RESERVATIONS_TABLE, self._on_reservation_change, event=EVENT_ANY
        )
        logger.debug(f'Reservation subscription opened for {identity}')

    def stop(self) -> None:
        """Unsubscribe and forget the reservation collection."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
            logger.debug(f'Reservation subscription closed for {self.identity}')
        self.identity = None
        self.reservations = []

    def add_listener(self, callback):
        """
        Register callback(reservations) run after each reservation refresh.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(callback)

        def remove():
            if callback in self._listeners:
                self._listeners.remove(callback)
        return remove

    def _on_reservation_change(self, event, record) -> None:
        logger.debug(f'Reservation change {event}, re-fetching')
        if self.app is not None and not has_app_context():
            with self.app.app_context():
                self.refresh_reservations()
        else:
            self.refresh_reservations()

    # -------------------------------------------------------------------------
    # Fetching
    # -------------------------------------------------------------------------

    def refresh_facilities(self) -> list:
        """Replace the facility collection. Errors keep the previous one."""
        try:
            self.facilities = facility_model.get_all_facilities()
        except (RemoteError, RowMappingError) as e:
            logger.error(f'Error fetching facilities: {e}', exc_info=True)
        return self.facilities

    def refresh_reservations(self) -> list:
        """Replace the reservation collection and notify listeners."""
        try:
            self.reservations = reservation_model.get_all_reservations()
        except (RemoteError, RowMappingError) as e:
            logger.error(f'Error fetching reservations: {e}', exc_info=True)
            return self.reservations

        for callback in list(self._listeners):
            callback(self.reservations)
        return self.reservations

    # -------------------------------------------------------------------------
    # Facilities
    # -------------------------------------------------------------------------

    def add_facility(self, data: dict) -> bool:
        try:
            facility_id = facility_model.create_facility(data)
        except (RemoteError, ValueError) as e:
            logger.error(f'Error adding facility: {e}', exc_info=True)
            return False

        logger.info(f'Facility {facility_id} created')
        self.refresh_facilities()
        return True

    def update_facility(self, facility_id: str, updates: dict) -> bool:
        try:
            updated = facility_model.update_facility(facility_id, updates)
        except (RemoteError, ValueError) as e:
            logger.error(f'Error updating facility {facility_id}: {e}', exc_info=True)
            return False

        if not updated:
            logger.warning(f'Facility {facility_id} not found for update')
            return False
        self.refresh_facilities()
        return True

    def delete_facility(self, facility_id: str) -> bool:
        try:
            deleted = facility_model.delete_facility(facility_id)
        except RemoteError as e:
            logger.error(f'Error deleting facility {facility_id}: {e}', exc_info=True)
            return False

        if not deleted:
            logger.warning(f'Facility {facility_id} not found for delete')
            return False
        self.refresh_facilities()
        return True

    def get_facility(self, facility_id: str) -> dict:
        for facility in self.facilities:
            if facility['id'] == facility_id:
                return facility
        return None

    def search_facilities(self, query: str = '') -> list:
        """Case-insensitive match on name or location."""
        query = (query or '').strip().lower()
        if not query:
            return list(self.facilities)
        return [
            f for f in self.facilities
            if query in f['name'].lower() or query in f['location'].lower()
        ]

    # -------------------------------------------------------------------------
    # Reservations
    # -------------------------------------------------------------------------

    def add_reservation(self, facility: dict, data: dict, on_success=None, today=None) -> bool:
        """
        Submit a booking request for the signed-in identity.

        Args:
            facility: Facility record being booked
            data: date, start_time, end_time, purpose
            on_success: Optional callable run after the re-fetch
            today: Optional lower bound for the booking date

        Returns:
            bool: True if the reservation was stored

        Raises:
            ReservationValidationError: If the request breaks a booking rule
        """
        if self.identity is None:
            raise ReservationValidationError('Please sign in to make a reservation')

        payload = build_reservation_payload(self.identity, facility, data, today=today)

        try:
            reservation_id = reservation_model.create_reservation(payload)
        except RemoteError as e:
            logger.error(f'Error adding reservation: {e}', exc_info=True)
            return False

        logger.info(f'Reservation {reservation_id} submitted by {self.identity.email}')
        self.refresh_reservations()
        if on_success:
            on_success()
        return True

    def update_reservation_status(self, reservation_id: str, status: str,
                                  admin_note: str = None, on_success=None) -> bool:
        """Write a status (and note) with no lifecycle checks."""
        try:
            reservation_model.update_reservation_status(reservation_id, status, admin_note)
        except RemoteError as e:
            logger.error(f'Error updating reservation {reservation_id}: {e}', exc_info=True)
            return False

        self.refresh_reservations()
        if on_success:
            on_success()
        return True

    def approve_reservation(self, reservation_id: str, admin_note: str = None,
                            on_success=None) -> bool:
        """
        Approve a pending reservation.

        Raises:
            InvalidStatusTransitionError: If it is no longer pending
            ReservationConflictError: If an approved booking overlaps it
        """
        return self._decide(reservation_id, STATUS_APPROVED, admin_note, on_success)

    def reject_reservation(self, reservation_id: str, admin_note: str, on_success=None) -> bool:
        """
        Reject a pending reservation with a reason.

        Raises:
            ReservationValidationError: If the note is empty
            InvalidStatusTransitionError: If it is no longer pending
        """
        admin_note = require_rejection_note(admin_note)
        return self._decide(reservation_id, STATUS_REJECTED, admin_note, on_success)

    def _decide(self, reservation_id, status, admin_note, on_success) -> bool:
        self.refresh_reservations()
        reservation = self.get_reservation(reservation_id)
        if reservation is None:
            raise RemoteError(f'Reservation {reservation_id} not found')

        if not validate_status_transition(reservation['status'], status):
            logger.info(f'Reservation {reservation_id} already {status}')
            if on_success:
                on_success()
            return True

        if status == STATUS_APPROVED and current_app.config.get('ENFORCE_APPROVAL_CONFLICTS', True):
            conflicts = find_conflicts(reservation, self.reservations)
            if conflicts:
                raise ReservationConflictError(
                    'This time slot is already taken by an approved reservation', conflicts
                )

        if admin_note is not None:
            admin_note = admin_note.strip() or None
        return self.update_reservation_status(reservation_id, status, admin_note, on_success)

    def delete_reservation(self, reservation_id: str) -> None:
        """
        Delete a reservation.

        Raises:
            RemoteError: If the delete is rejected
        """
        reservation_model.delete_reservation(reservation_id)
        logger.info(f'Reservation {reservation_id} deleted')
        self.refresh_reservations()

    def cancel_reservation(self, reservation_id: str) -> None:
        """
        Owner cancellation of a pending reservation.

        Raises:
            InvalidStatusTransitionError: If it is not the caller's pending reservation
            RemoteError: If the reservation is unknown or the delete is rejected
        """
        reservation = self.get_reservation(reservation_id)
        if reservation is None:
            self.refresh_reservations()
            reservation = self.get_reservation(reservation_id)
        if reservation is None:
            raise RemoteError(f'Reservation {reservation_id} not found')
        if not can_cancel(reservation, self.identity):
            raise InvalidStatusTransitionError('Only your own pending reservations can be cancelled')
        self.delete_reservation(reservation_id)

    def get_reservation(self, reservation_id: str) -> dict:
        for reservation in self.reservations:
            if reservation['id'] == reservation_id:
                return reservation
        return None

    def get_user_reservations(self, user_id: str) -> list:
        return [r for r in self.reservations if r['user_id'] == user_id]

    def get_facility_reservations(self, facility_id: str) -> list:
        return [r for r in self.reservations if r['facility_id'] == facility_id]

    def get_reservation_stats(self) -> dict:
        """Counts for the admin dashboard plus the most recent reservations."""
        return {
            'total_facilities': len(self.facilities),
            'total_reservations': len(self.reservations),
            'pending': len([r for r in self.reservations if r['status'] == STATUS_PENDING]),
            'approved': len([r for r in self.reservations if r['status'] == STATUS_APPROVED]),
            'rejected': len([r for r in self.reservations if r['status'] == STATUS_REJECTED]),
            'recent': self.reservations[:RECENT_RESERVATIONS_LIMIT]
        }

    def group_reservations_by_status(self) -> dict:
        return {
            status: [r for r in self.reservations if r['status'] == status]
            for status in (STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED)
        }
