"""
Reservation data access functions.
Handles reservation reads with denormalized names, writes, and change
publication on the reservations table.
"""

import sqlite3
from datetime import date

from database import get_db
from models.store import RemoteError, new_id, publish_change, require_fields
from utils.datetime_helpers import parse_timestamp, utc_timestamp
from utils.realtime import EVENT_DELETE, EVENT_INSERT, EVENT_UPDATE

RESERVATIONS_TABLE = 'reservations'

RESERVATION_ROW_FIELDS = (
    'id', 'user_id', 'facility_id', 'date', 'start_time', 'end_time',
    'purpose', 'status', 'created_at'
)

UNKNOWN_USER = 'Unknown User'
UNKNOWN_FACILITY = 'Unknown Facility'

_SELECT_WITH_NAMES = '''
    SELECT r.*, f.name AS facility_name, p.name AS user_name
    FROM reservations r
    LEFT JOIN facilities f ON f.id = r.facility_id
    LEFT JOIN profiles p ON p.id = r.user_id
'''


def map_reservation_row(row) -> dict:
    """
    Map a reservations row (joined with facility and profile names).

    Raises:
        RowMappingError: If a required column is missing
    """
    require_fields(row, RESERVATION_ROW_FIELDS, 'Reservation')

    keys = row.keys()
    facility_name = row['facility_name'] if 'facility_name' in keys else None
    user_name = row['user_name'] if 'user_name' in keys else None

    return {
        'id': row['id'],
        'user_id': row['user_id'],
        'user_name': user_name or UNKNOWN_USER,
        'facility_id': row['facility_id'],
        'facility_name': facility_name or UNKNOWN_FACILITY,
        'date': date.fromisoformat(row['date']),
        'start_time': row['start_time'],
        'end_time': row['end_time'],
        'purpose': row['purpose'],
        'status': row['status'],
        'admin_note': row['admin_note'] if 'admin_note' in keys else None,
        'created_at': parse_timestamp(row['created_at'])
    }


def get_all_reservations() -> list:
    """
    Get every reservation, newest first.

    Returns:
        List of reservation records

    Raises:
        RemoteError: If the query fails
    """
    db = get_db()
    try:
        cursor = db.execute(_SELECT_WITH_NAMES + ' ORDER BY r.created_at DESC, r.rowid DESC')
        rows = cursor.fetchall()
    except sqlite3.Error as e:
        raise RemoteError(f'Could not load reservations: {e}') from e
    return [map_reservation_row(row) for row in rows]


def create_reservation(payload: dict) -> str:
    """
    Insert a reservation.

    Args:
        payload: user_id, facility_id, date ('YYYY-MM-DD'), start_time,
            end_time, purpose, status

    Returns:
        str: New reservation id

    Raises:
        RemoteError: If the insert is rejected
    """
    db = get_db()
    reservation_id = new_id()
    record = {
        'id': reservation_id,
        'user_id': payload.get('user_id'),
        'facility_id': payload.get('facility_id'),
        'date': payload.get('date'),
        'start_time': payload.get('start_time'),
        'end_time': payload.get('end_time'),
        'purpose': payload.get('purpose'),
        'status': payload.get('status', 'pending'),
        'admin_note': None,
        'created_at': utc_timestamp()
    }

    try:
        db.execute('''
            INSERT INTO reservations (
                id, user_id, facility_id, date, start_time, end_time,
                purpose, status, admin_note, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ''', (
            record['id'], record['user_id'], record['facility_id'], record['date'],
            record['start_time'], record['end_time'], record['purpose'],
            record['status'], record['admin_note'], record['created_at']
        ))
        db.commit()
    except sqlite3.Error as e:
        db.rollback()
        raise RemoteError(f'Could not create reservation: {e}') from e

    publish_change(RESERVATIONS_TABLE, EVENT_INSERT, record)
    return reservation_id


def update_reservation_status(reservation_id: str, status: str, admin_note: str = None) -> None:
    """
    Set status and admin note on a reservation.

    Raises:
        RemoteError: If the reservation does not exist or the update is rejected
    """
    db = get_db()
    try:
        cursor = db.execute('''
            UPDATE reservations
            SET status = ?, admin_note = ?
            WHERE id = ?
        ''', (status, admin_note, reservation_id))
        db.commit()
    except sqlite3.Error as e:
        db.rollback()
        raise RemoteError(f'Could not update reservation: {e}') from e

    if cursor.rowcount == 0:
        raise RemoteError(f'Reservation {reservation_id} not found')

    publish_change(RESERVATIONS_TABLE, EVENT_UPDATE, {
        'id': reservation_id, 'status': status, 'admin_note': admin_note
    })


def delete_reservation(reservation_id: str) -> None:
    """
    Delete a reservation.

    Raises:
        RemoteError: If the reservation does not exist or the delete is rejected
    """
    db = get_db()
    try:
        cursor = db.execute('DELETE FROM reservations WHERE id = ?', (reservation_id,))
        db.commit()
    except sqlite3.Error as e:
        db.rollback()
        raise RemoteError(f'Could not delete reservation: {e}') from e

    if cursor.rowcount == 0:
        raise RemoteError(f'Reservation {reservation_id} not found')

    publish_change(RESERVATIONS_TABLE, EVENT_DELETE, {'id': reservation_id})
