"""
Reservation lifecycle rules.
Pure validation for booking requests, status transitions, cancellation,
and approval conflicts. Nothing here touches the data store.
"""

import re
from datetime import date, datetime


# =============================================================================
# CONSTANTS
# =============================================================================

STATUS_PENDING = 'pending'
STATUS_APPROVED = 'approved'
STATUS_REJECTED = 'rejected'

RESERVATION_STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED)
TERMINAL_STATUSES = (STATUS_APPROVED, STATUS_REJECTED)

# Bookable window, inclusive on both ends
BOOKING_WINDOW_START = '05:00'
BOOKING_WINDOW_END = '21:00'

_TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


class ReservationValidationError(ValueError):
    """A booking request or admin action failed a lifecycle rule."""


class InvalidStatusTransitionError(ValueError):
    """The requested status change is not allowed from the current status."""


class ReservationConflictError(ValueError):
    """Approving would overlap an already approved reservation."""

    def __init__(self, message: str, conflicts: list = None):
        super().__init__(message)
        self.conflicts = conflicts or []


# =============================================================================
# BOOKING REQUESTS
# =============================================================================

def is_time_in_range(value: str) -> bool:
    """
    Check that an 'HH:MM' string falls inside the bookable window.

    Zero-padded 24h strings compare the same lexicographically as numerically.
    """
    return BOOKING_WINDOW_START <= value <= BOOKING_WINDOW_END


def format_local_date(value) -> str:
    """
    Build the persisted 'YYYY-MM-DD' string from local calendar components.

    Aware datetimes keep their own offset's calendar day; they are never
    normalized to UTC first.

    Args:
        value: date, datetime (naive or aware), or ISO date/datetime string

    Returns:
        str: 'YYYY-MM-DD'

    Raises:
        ReservationValidationError: If the value is not a date
    """
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip())
        except ValueError:
            raise ReservationValidationError(f'Invalid date: {value}')

    if not isinstance(value, date):
        raise ReservationValidationError(f'Invalid date: {value!r}')

    return f'{value.year:04d}-{value.month:02d}-{value.day:02d}'


def validate_reservation_request(booking_date, start_time: str, end_time: str,
                                 purpose: str, today: date = None) -> None:
    """
    Validate a booking request before anything is submitted.

    Args:
        booking_date: Requested calendar date (date, datetime or ISO string)
        start_time: 'HH:MM'
        end_time: 'HH:MM'
        purpose: Free text purpose
        today: If given, dates before it are refused

    Raises:
        ReservationValidationError: On the first rule that fails
    """
    if not booking_date or not start_time or not end_time:
        raise ReservationValidationError('Please complete all reservation details')
    if not isinstance(purpose, str) or not purpose.strip():
        raise ReservationValidationError('Please complete all reservation details')

    for value in (start_time, end_time):
        if not isinstance(value, str) or not _TIME_PATTERN.match(value):
            raise ReservationValidationError(f'Invalid time: {value}')

    if not is_time_in_range(start_time) or not is_time_in_range(end_time):
        raise ReservationValidationError(
            f'Reservations are only available from {BOOKING_WINDOW_START} to {BOOKING_WINDOW_END}'
        )

    if start_time >= end_time:
        raise ReservationValidationError('End time must be later than start time')

    if today is not None:
        requested = date.fromisoformat(format_local_date(booking_date))
        if requested < today:
            raise ReservationValidationError('Reservations cannot be made for past dates')


def build_reservation_payload(identity, facility: dict, data: dict, today: date = None) -> dict:
    """
    Validate a request and build the insert payload.

    Args:
        identity: Requesting Identity
        facility: Facility record being booked
        data: date, start_time, end_time, purpose
        today: Optional lower bound for the date

    Returns:
        dict: Store payload with status 'pending'
    """
    validate_reservation_request(
        data.get('date'), data.get('start_time'), data.get('end_time'),
        data.get('purpose'), today=today
    )

    return {
        'user_id': identity.id,
        'facility_id': facility['id'],
        'date': format_local_date(data['date']),
        'start_time': data['start_time'],
        'end_time': data['end_time'],
        'purpose': data['purpose'].strip(),
        'status': STATUS_PENDING
    }


# =============================================================================
# STATUS TRANSITIONS
# =============================================================================

VALID_TRANSITIONS = {
    STATUS_PENDING: (STATUS_APPROVED, STATUS_REJECTED),
    STATUS_APPROVED: (),
    STATUS_REJECTED: (),
}


def validate_status_transition(current_status: str, new_status: str) -> bool:
    """
    Check an admin status change.

    Re-applying the current terminal status is accepted as a no-op.

    Returns:
        bool: True if the status actually changes, False for a no-op

    Raises:
        InvalidStatusTransitionError: If the transition is not allowed
    """
    if new_status not in TERMINAL_STATUSES:
        raise InvalidStatusTransitionError(
            f'Status can only be set to {" or ".join(TERMINAL_STATUSES)}'
        )
    if current_status not in VALID_TRANSITIONS:
        raise InvalidStatusTransitionError(f'Unknown current status: {current_status}')

    if current_status == new_status:
        return False

    if new_status not in VALID_TRANSITIONS[current_status]:
        raise InvalidStatusTransitionError(
            f'Cannot change a {current_status} reservation to {new_status}'
        )
    return True


def require_rejection_note(note: str) -> str:
    """
    Rejections must explain themselves.

    Returns:
        str: The stripped note

    Raises:
        ReservationValidationError: If the note is empty or whitespace
    """
    if note is None or not str(note).strip():
        raise ReservationValidationError('Please provide a reason for the rejection')
    return str(note).strip()


def can_cancel(reservation: dict, identity) -> bool:
    """Owners may cancel only while the reservation is still pending."""
    if identity is None:
        return False
    return reservation['user_id'] == identity.id and reservation['status'] == STATUS_PENDING


def available_actions(reservation: dict, identity) -> list:
    """Actions a view may offer for a reservation."""
    if identity is None:
        return []
    if identity.is_admin:
        return ['approve', 'reject'] if reservation['status'] == STATUS_PENDING else []
    return ['cancel'] if can_cancel(reservation, identity) else []


# =============================================================================
# CONFLICTS
# =============================================================================

def times_overlap(a_start: str, a_end: str, b_start: str, b_end: str) -> bool:
    """Half-open overlap: 09:00-10:00 and 10:00-11:00 do not overlap."""
    return a_start < b_end and b_start < a_end


def find_conflicts(reservation: dict, reservations: list) -> list:
    """
    Approved reservations that would clash with approving this one.

    Args:
        reservation: Candidate reservation record
        reservations: Current collection

    Returns:
        List of conflicting reservation records
    """
    return [
        other for other in reservations
        if other['id'] != reservation['id']
        and other['status'] == STATUS_APPROVED
        and other['facility_id'] == reservation['facility_id']
        and other['date'] == reservation['date']
        and times_overlap(reservation['start_time'], reservation['end_time'],
                          other['start_time'], other['end_time'])
    ]
