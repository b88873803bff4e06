"""
Admin routes for reservation decisions and facility management.
Every route requires the 'admin' role.
"""

from flask import Blueprint, current_app, request
from flask_login import login_required, current_user

from blueprints.admin.forms import DecisionForm, FacilityForm
from blueprints.admin.services import build_facility_data
from blueprints.api.facilities import facility_to_json
from blueprints.api.reservations import reservation_to_json
from models.reservation_lifecycle import (
    InvalidStatusTransitionError,
    ReservationConflictError,
    ReservationValidationError,
)
from models.store import RemoteError, StorageError
from services.client_context import current_client
from utils.api_response import api_success, api_error
from utils.decorators import role_required
from utils.helpers import first_form_error, serialize_records
from utils.messages import get_message
from utils.storage import upload_image

admin_bp = Blueprint('admin', __name__)


def _request_body():
    """JSON body, or the form for multipart/urlencoded posts."""
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form


# =============================================================================
# DASHBOARD
# =============================================================================

@admin_bp.route('/dashboard')
@login_required
@role_required('admin')
def dashboard():
    """Summary statistics and the five most recent reservations."""
    context = current_client()
    stats = context.sync.get_reservation_stats()
    stats['recent'] = serialize_records(stats['recent'])

    return api_success(data=stats, has_pending=context.has_pending)


# =============================================================================
# RESERVATIONS
# =============================================================================

@admin_bp.route('/reservations')
@login_required
@role_required('admin')
def reservations():
    """All reservations grouped by status, newest first."""
    context = current_client()
    grouped = context.sync.group_reservations_by_status()

    return api_success(data={
        status: [reservation_to_json(r, context.identity) for r in items]
        for status, items in grouped.items()
    }, has_pending=context.has_pending)


@admin_bp.route('/reservations/<reservation_id>/approve', methods=['POST'])
@login_required
@role_required('admin')
def reservation_approve(reservation_id):
    """
    Approve a pending reservation.

    Body (optional): admin_note
    """
    form = DecisionForm()
    if not form.validate_on_submit():
        return api_error(first_form_error(form) or get_message('invalid_value'), status=400)

    context = current_client()
    try:
        approved = context.sync.approve_reservation(reservation_id, admin_note=form.admin_note.data)
    except ReservationConflictError as e:
        context.notifications.show_error(str(e))
        return api_error(str(e), status=409, conflicts=serialize_records(e.conflicts))
    except InvalidStatusTransitionError as e:
        context.notifications.show_error(str(e))
        return api_error(str(e), status=409)
    except RemoteError:
        return api_error(get_message('reservation_not_found'), status=404)

    if not approved:
        context.notifications.show_error(get_message('reservation_update_failed'))
        return api_error(get_message('reservation_update_failed'), status=500)

    current_app.logger.info(f'Reservation {reservation_id} approved by {current_user.email}')
    context.notifications.show_success(get_message('reservation_approved'))
    return api_success(message=get_message('reservation_approved'))


@admin_bp.route('/reservations/<reservation_id>/reject', methods=['POST'])
@login_required
@role_required('admin')
def reservation_reject(reservation_id):
    """
    Reject a pending reservation.

    Body: admin_note (required)
    """
    form = DecisionForm()
    if not form.validate_on_submit():
        return api_error(first_form_error(form) or get_message('invalid_value'), status=400)

    note = (form.admin_note.data or '').strip()
    if not note:
        return api_error(get_message('rejection_note_required'), status=400)

    context = current_client()
    try:
        rejected = context.sync.reject_reservation(reservation_id, note)
    except ReservationValidationError as e:
        return api_error(str(e), status=400)
    except InvalidStatusTransitionError as e:
        context.notifications.show_error(str(e))
        return api_error(str(e), status=409)
    except RemoteError:
        return api_error(get_message('reservation_not_found'), status=404)

    if not rejected:
        context.notifications.show_error(get_message('reservation_update_failed'))
        return api_error(get_message('reservation_update_failed'), status=500)

    current_app.logger.info(f'Reservation {reservation_id} rejected by {current_user.email}')
    context.notifications.show_success(get_message('reservation_rejected'))
    return api_success(message=get_message('reservation_rejected'))


# =============================================================================
# FACILITIES
# =============================================================================

@admin_bp.route('/facilities', methods=['POST'])
@login_required
@role_required('admin')
def facility_create():
    """Create a facility."""
    form = FacilityForm()
    if not form.validate_on_submit():
        return api_error(first_form_error(form) or get_message('facility_fields_required'), status=400)

    context = current_client()
    if not context.sync.add_facility(build_facility_data(form, _request_body())):
        context.notifications.show_error(get_message('facility_save_failed'))
        return api_error(get_message('facility_save_failed'), status=500)

    context.notifications.show_success(get_message('facility_created'))
    return api_success(message=get_message('facility_created'), status=201)


@admin_bp.route('/facilities/<facility_id>', methods=['PUT'])
@login_required
@role_required('admin')
def facility_update(facility_id):
    """Replace a facility's editable fields."""
    context = current_client()
    if context.sync.get_facility(facility_id) is None:
        context.sync.refresh_facilities()
    if context.sync.get_facility(facility_id) is None:
        return api_error(get_message('facility_not_found'), status=404)

    form = FacilityForm()
    if not form.validate_on_submit():
        return api_error(first_form_error(form) or get_message('facility_fields_required'), status=400)

    if not context.sync.update_facility(facility_id, build_facility_data(form, _request_body())):
        context.notifications.show_error(get_message('facility_save_failed'))
        return api_error(get_message('facility_save_failed'), status=500)

    context.notifications.show_success(get_message('facility_updated'))
    return api_success(
        data=facility_to_json(context.sync.get_facility(facility_id)),
        message=get_message('facility_updated')
    )


@admin_bp.route('/facilities/<facility_id>', methods=['DELETE'])
@login_required
@role_required('admin')
def facility_delete(facility_id):
    """Delete a facility. Its reservations stay, shown as 'Unknown Facility'."""
    context = current_client()
    if not context.sync.delete_facility(facility_id):
        return api_error(get_message('facility_not_found'), status=404)

    context.notifications.show_success(get_message('facility_deleted'))
    return api_success(message=get_message('facility_deleted'))


@admin_bp.route('/facilities/image', methods=['POST'])
@login_required
@role_required('admin')
def facility_image_upload():
    """
    Upload a facility image.

    Form: image (file)

    Returns:
        JSON with the public URL to store as the facility image
    """
    try:
        url = upload_image(request.files.get('image'))
    except ValueError as e:
        max_mb = current_app.config['MAX_IMAGE_SIZE'] // (1024 * 1024)
        return api_error(get_message(str(e), max_mb=max_mb), status=400)
    except StorageError as e:
        return api_error(get_message('upload_failed', error=str(e)), status=500)

    return api_success(data={'url': url}, message=get_message('image_uploaded'), status=201)
