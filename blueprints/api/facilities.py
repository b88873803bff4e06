"""
Facility API routes: listing, search and detail.
"""

from flask import current_app, request
from flask_login import login_required

from services.client_context import current_client
from utils.api_response import api_success, api_error
from utils.helpers import serialize_record, serialize_records
from utils.messages import get_message

# Reservation fields visible to any signed-in user on a facility's schedule
SCHEDULE_FIELDS = ('id', 'date', 'start_time', 'end_time', 'status')


def facility_to_json(facility: dict) -> dict:
    """Facility record with the default image filled in."""
    data = serialize_record(facility)
    if not data['image']:
        data['image'] = current_app.config['DEFAULT_FACILITY_IMAGE']
    return data


def register_routes(bp):
    """Register facility API routes on the blueprint."""

    @bp.route('/facilities')
    @login_required
    def facility_list():
        """
        Facilities, newest first.

        Query params:
            q: Case-insensitive filter on name or location (optional)
        """
        context = current_client()
        facilities = context.sync.search_facilities(request.args.get('q', ''))

        return api_success(
            data=[facility_to_json(f) for f in facilities],
            count=len(facilities)
        )

    @bp.route('/facilities/<facility_id>')
    @login_required
    def facility_detail(facility_id):
        """Facility plus the schedule of its reservations."""
        context = current_client()
        facility = context.sync.get_facility(facility_id)
        if facility is None:
            context.sync.refresh_facilities()
            facility = context.sync.get_facility(facility_id)
        if facility is None:
            return api_error(get_message('facility_not_found'), status=404)

        schedule = [
            {field: r[field] for field in SCHEDULE_FIELDS}
            for r in context.sync.get_facility_reservations(facility_id)
        ]

        return api_success(data={
            'facility': facility_to_json(facility),
            'reservations': serialize_records(schedule)
        })
