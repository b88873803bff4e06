"""
Tests for reservation lifecycle rules.

Covers booking window validation, local date formatting, payload building,
admin status transitions, rejection notes, cancellation rights and
overlap detection. All functions under test are pure.
"""

import pytest
from datetime import date, datetime, timedelta, timezone

from models.profile import Identity
from models.reservation_lifecycle import (
    InvalidStatusTransitionError,
    ReservationValidationError,
    available_actions,
    build_reservation_payload,
    can_cancel,
    find_conflicts,
    format_local_date,
    is_time_in_range,
    require_rejection_note,
    times_overlap,
    validate_reservation_request,
    validate_status_transition,
)


def _identity(user_id='u1', role='user'):
    return Identity({
        'id': user_id,
        'name': 'Test Person',
        'email': f'{user_id}@campus.edu',
        'role': role,
        'created_at': datetime(2024, 1, 1, 8, 0)
    })


def _reservation(reservation_id='r1', status='pending', user_id='u1', facility_id='f1',
                 booking_date=date(2024, 5, 10), start='09:00', end='11:00'):
    return {
        'id': reservation_id,
        'user_id': user_id,
        'user_name': 'Test Person',
        'facility_id': facility_id,
        'facility_name': 'Main Auditorium',
        'date': booking_date,
        'start_time': start,
        'end_time': end,
        'purpose': 'Seminar',
        'status': status,
        'admin_note': None,
        'created_at': datetime(2024, 5, 1, 8, 0)
    }


class TestBookingWindow:
    """Time range checks on zero-padded HH:MM strings."""

    def test_window_bounds_are_inclusive(self):
        assert is_time_in_range('05:00')
        assert is_time_in_range('21:00')
        assert is_time_in_range('12:30')

    def test_outside_window(self):
        assert not is_time_in_range('04:59')
        assert not is_time_in_range('21:01')
        assert not is_time_in_range('23:00')

    def test_valid_request_passes(self):
        validate_reservation_request(date(2024, 5, 10), '09:00', '11:00', 'Seminar')

    def test_start_before_window_rejected(self):
        with pytest.raises(ReservationValidationError, match='05:00 to 21:00'):
            validate_reservation_request(date(2024, 5, 10), '04:30', '06:00', 'Seminar')

    def test_end_after_window_rejected(self):
        with pytest.raises(ReservationValidationError, match='05:00 to 21:00'):
            validate_reservation_request(date(2024, 5, 10), '20:00', '21:30', 'Seminar')

    def test_full_window_allowed(self):
        validate_reservation_request(date(2024, 5, 10), '05:00', '21:00', 'Seminar')

    def test_end_equal_to_start_rejected(self):
        with pytest.raises(ReservationValidationError, match='later than start'):
            validate_reservation_request(date(2024, 5, 10), '10:00', '10:00', 'Seminar')

    def test_end_before_start_rejected(self):
        with pytest.raises(ReservationValidationError, match='later than start'):
            validate_reservation_request(date(2024, 5, 10), '11:00', '10:00', 'Seminar')

    def test_malformed_time_rejected(self):
        with pytest.raises(ReservationValidationError, match='Invalid time'):
            validate_reservation_request(date(2024, 5, 10), '9:00', '11:00', 'Seminar')

    def test_non_string_time_rejected(self):
        with pytest.raises(ReservationValidationError, match='Invalid time'):
            validate_reservation_request(date(2024, 5, 10), 900, '11:00', 'Seminar')


class TestMissingFields:
    """Every booking field is required."""

    @pytest.mark.parametrize('booking_date,start,end,purpose', [
        (None, '09:00', '10:00', 'Seminar'),
        (date(2024, 5, 10), '', '10:00', 'Seminar'),
        (date(2024, 5, 10), '09:00', None, 'Seminar'),
        (date(2024, 5, 10), '09:00', '10:00', ''),
        (date(2024, 5, 10), '09:00', '10:00', '   '),
        (date(2024, 5, 10), '09:00', '10:00', 12345),
        (date(2024, 5, 10), '09:00', '10:00', ['Seminar']),
    ])
    def test_absent_field_rejected(self, booking_date, start, end, purpose):
        with pytest.raises(ReservationValidationError, match='complete all'):
            validate_reservation_request(booking_date, start, end, purpose)


class TestPastDates:
    """Dates before today are refused only when today is supplied."""

    def test_past_date_rejected(self):
        with pytest.raises(ReservationValidationError, match='past dates'):
            validate_reservation_request(
                date(2024, 5, 9), '09:00', '10:00', 'Seminar', today=date(2024, 5, 10)
            )

    def test_today_allowed(self):
        validate_reservation_request(
            date(2024, 5, 10), '09:00', '10:00', 'Seminar', today=date(2024, 5, 10)
        )

    def test_no_lower_bound_without_today(self):
        validate_reservation_request(date(2000, 1, 1), '09:00', '10:00', 'Seminar')


class TestFormatLocalDate:
    """Dates are formatted from their own calendar components."""

    def test_date(self):
        assert format_local_date(date(2024, 3, 7)) == '2024-03-07'

    def test_naive_datetime_late_evening(self):
        assert format_local_date(datetime(2024, 3, 7, 23, 30)) == '2024-03-07'

    def test_aware_datetime_ahead_of_utc_keeps_local_day(self):
        jakarta = timezone(timedelta(hours=7))
        # 00:30 local on the 8th is still the 7th in UTC
        assert format_local_date(datetime(2024, 3, 8, 0, 30, tzinfo=jakarta)) == '2024-03-08'

    def test_iso_string(self):
        assert format_local_date('2024-03-07') == '2024-03-07'

    def test_unsupported_value(self):
        with pytest.raises(ReservationValidationError):
            format_local_date(12345)


class TestBuildPayload:
    """Insert payload for a new booking request."""

    def test_payload_is_pending_with_local_date(self):
        facility = {'id': 'f1', 'name': 'Main Auditorium'}
        payload = build_reservation_payload(_identity(), facility, {
            'date': datetime(2024, 5, 10, 22, 45),
            'start_time': '09:00',
            'end_time': '10:30',
            'purpose': '  Club meeting  '
        })

        assert payload == {
            'user_id': 'u1',
            'facility_id': 'f1',
            'date': '2024-05-10',
            'start_time': '09:00',
            'end_time': '10:30',
            'purpose': 'Club meeting',
            'status': 'pending'
        }

    def test_invalid_request_builds_nothing(self):
        with pytest.raises(ReservationValidationError):
            build_reservation_payload(_identity(), {'id': 'f1'}, {
                'date': date(2024, 5, 10), 'start_time': '22:00',
                'end_time': '23:00', 'purpose': 'Late'
            })


class TestStatusTransitions:
    """Admin decisions move pending reservations to a terminal status."""

    def test_pending_to_approved(self):
        assert validate_status_transition('pending', 'approved') is True

    def test_pending_to_rejected(self):
        assert validate_status_transition('pending', 'rejected') is True

    def test_reapplying_terminal_status_is_noop(self):
        assert validate_status_transition('approved', 'approved') is False
        assert validate_status_transition('rejected', 'rejected') is False

    def test_terminal_cannot_flip(self):
        with pytest.raises(InvalidStatusTransitionError):
            validate_status_transition('approved', 'rejected')
        with pytest.raises(InvalidStatusTransitionError):
            validate_status_transition('rejected', 'approved')

    def test_pending_is_not_a_target(self):
        with pytest.raises(InvalidStatusTransitionError):
            validate_status_transition('approved', 'pending')
        with pytest.raises(InvalidStatusTransitionError):
            validate_status_transition('pending', 'pending')

    def test_unknown_current_status(self):
        with pytest.raises(InvalidStatusTransitionError):
            validate_status_transition('archived', 'approved')


class TestRejectionNote:
    """Rejections need a non-blank reason."""

    def test_note_is_stripped(self):
        assert require_rejection_note('  Room double-booked ') == 'Room double-booked'

    @pytest.mark.parametrize('note', [None, '', '   \n'])
    def test_blank_note_rejected(self, note):
        with pytest.raises(ReservationValidationError):
            require_rejection_note(note)


class TestCancellation:
    """Owners may cancel only their own pending reservations."""

    def test_owner_pending(self):
        assert can_cancel(_reservation(), _identity('u1'))

    def test_owner_decided(self):
        assert not can_cancel(_reservation(status='approved'), _identity('u1'))
        assert not can_cancel(_reservation(status='rejected'), _identity('u1'))

    def test_other_user(self):
        assert not can_cancel(_reservation(), _identity('u2'))

    def test_anonymous(self):
        assert not can_cancel(_reservation(), None)

    def test_available_actions(self):
        admin = _identity('a1', role='admin')
        assert available_actions(_reservation(), admin) == ['approve', 'reject']
        assert available_actions(_reservation(status='approved'), admin) == []
        assert available_actions(_reservation(), _identity('u1')) == ['cancel']
        assert available_actions(_reservation(), _identity('u2')) == []


class TestConflicts:
    """Overlap with approved reservations on the same facility and day."""

    def test_touching_ranges_do_not_overlap(self):
        assert not times_overlap('09:00', '10:00', '10:00', '11:00')

    def test_nested_ranges_overlap(self):
        assert times_overlap('09:00', '12:00', '10:00', '11:00')

    def test_finds_only_approved_same_slot(self):
        candidate = _reservation('r1')
        others = [
            candidate,
            _reservation('r2', status='approved', start='10:00', end='12:00'),
            _reservation('r3', status='pending', start='10:00', end='12:00'),
            _reservation('r4', status='approved', facility_id='f2'),
            _reservation('r5', status='approved', booking_date=date(2024, 5, 11)),
            _reservation('r6', status='approved', start='11:00', end='12:00'),
        ]

        conflicts = find_conflicts(candidate, others)

        assert [c['id'] for c in conflicts] == ['r2']
