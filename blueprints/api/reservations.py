"""
Reservation API routes: a user's own bookings, submission and cancellation.
"""

from flask import current_app, request
from flask_login import login_required, current_user

from models.reservation_lifecycle import (
    InvalidStatusTransitionError,
    ReservationValidationError,
    available_actions,
)
from models.store import RemoteError
from services.client_context import current_client
from utils.api_response import api_success, api_error
from utils.datetime_helpers import get_today
from utils.helpers import serialize_record
from utils.messages import get_message

RESERVATION_FIELDS = ('date', 'start_time', 'end_time', 'purpose')


def reservation_to_json(reservation: dict, identity) -> dict:
    """Reservation record plus the actions this identity may take on it."""
    data = serialize_record(reservation)
    data['actions'] = available_actions(reservation, identity)
    return data


def register_routes(bp):
    """Register reservation API routes on the blueprint."""

    @bp.route('/reservations/mine')
    @login_required
    def my_reservations():
        """Reservations of the signed-in user, newest first."""
        context = current_client()
        reservations = context.sync.get_user_reservations(current_user.id)

        return api_success(
            data=[reservation_to_json(r, context.identity) for r in reservations],
            count=len(reservations)
        )

    @bp.route('/reservations', methods=['POST'])
    @login_required
    def create_reservation():
        """
        Submit a booking request.

        Body (JSON): facility_id, date (YYYY-MM-DD), start_time, end_time, purpose
        """
        data = request.get_json(silent=True) or {}
        context = current_client()

        facility = context.sync.get_facility(data.get('facility_id'))
        if facility is None:
            context.sync.refresh_facilities()
            facility = context.sync.get_facility(data.get('facility_id'))
        if facility is None:
            return api_error(get_message('facility_not_found'), status=404)
        if facility['status'] != 'available':
            return api_error(get_message('facility_unavailable'), status=400)

        message = get_message('reservation_created')
        try:
            created = context.sync.add_reservation(
                facility,
                {field: data.get(field) for field in RESERVATION_FIELDS},
                on_success=lambda: context.notifications.show_success(message),
                today=get_today()
            )
        except ReservationValidationError as e:
            context.notifications.show_error(str(e))
            return api_error(str(e), status=400)

        if not created:
            context.notifications.show_error(get_message('reservation_create_failed'))
            return api_error(get_message('reservation_create_failed'), status=500)

        current_app.logger.info(f'Reservation submitted for {facility["name"]} by {current_user.email}')
        return api_success(message=message, status=201)

    @bp.route('/reservations/<reservation_id>', methods=['DELETE'])
    @login_required
    def cancel_reservation(reservation_id):
        """Cancel one of the user's own pending reservations."""
        context = current_client()
        try:
            context.sync.cancel_reservation(reservation_id)
        except InvalidStatusTransitionError:
            return api_error(get_message('reservation_cancel_not_allowed'), status=403)
        except RemoteError as e:
            current_app.logger.error(f'Error cancelling reservation {reservation_id}: {e}', exc_info=True)
            context.notifications.show_error(get_message('reservation_cancel_failed'))
            return api_error(get_message('reservation_cancel_failed'), status=404)

        context.notifications.show_success(get_message('reservation_cancelled'))
        return api_success(message=get_message('reservation_cancelled'))
