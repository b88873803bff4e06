"""
Facility data access functions.
Handles facility CRUD and the mapping from store rows to facility records.
"""

import json
import sqlite3

from database import get_db
from models.store import RemoteError, new_id, require_fields
from utils.datetime_helpers import parse_timestamp, utc_timestamp

FACILITY_STATUSES = ('available', 'unavailable', 'maintenance')

FACILITY_ROW_FIELDS = (
    'id', 'name', 'capacity', 'location', 'status', 'description', 'features', 'created_at'
)

# Record field -> column
UPDATABLE_FIELDS = {
    'name': 'name',
    'capacity': 'capacity',
    'location': 'location',
    'status': 'status',
    'description': 'description',
    'image': 'image_url',
    'features': 'features',
}


def map_facility_row(row) -> dict:
    """
    Map a facilities row to a facility record.

    Raises:
        RowMappingError: If a required column is missing
    """
    require_fields(row, FACILITY_ROW_FIELDS, 'Facility')

    features = row['features']
    if isinstance(features, str):
        features = json.loads(features) if features else []

    return {
        'id': row['id'],
        'name': row['name'],
        'capacity': int(row['capacity']),
        'location': row['location'],
        'status': row['status'],
        'description': row['description'],
        'image': row['image_url'] or '',
        'features': list(features),
        'created_at': parse_timestamp(row['created_at'])
    }


def _validate_fields(data: dict) -> None:
    """Reject values the store would refuse."""
    if 'status' in data and data['status'] not in FACILITY_STATUSES:
        raise ValueError(f'Invalid facility status: {data["status"]}')
    if 'capacity' in data:
        try:
            capacity = int(data['capacity'])
        except (TypeError, ValueError):
            raise ValueError('Capacity must be a whole number')
        if capacity <= 0:
            raise ValueError('Capacity must be greater than zero')
    if 'features' in data and not isinstance(data['features'], (list, tuple)):
        raise ValueError('Features must be a list')


def get_all_facilities() -> list:
    """
    Get all facilities, newest first.

    Returns:
        List of facility records

    Raises:
        RemoteError: If the query fails
    """
    db = get_db()
    try:
        cursor = db.execute('''
            SELECT * FROM facilities
            ORDER BY created_at DESC, rowid DESC
        ''')
        rows = cursor.fetchall()
    except sqlite3.Error as e:
        raise RemoteError(f'Could not load facilities: {e}') from e
    return [map_facility_row(row) for row in rows]


def get_facility_by_id(facility_id: str) -> dict:
    """Get a single facility record, or None."""
    db = get_db()
    try:
        row = db.execute('SELECT * FROM facilities WHERE id = ?', (facility_id,)).fetchone()
    except sqlite3.Error as e:
        raise RemoteError(f'Could not load facility: {e}') from e
    return map_facility_row(row) if row else None


def create_facility(data: dict) -> str:
    """
    Insert a facility.

    Args:
        data: name, capacity, location, status, description, image, features

    Returns:
        str: New facility id

    Raises:
        ValueError: If a field value is invalid
        RemoteError: If the insert is rejected
    """
    _validate_fields(data)

    db = get_db()
    facility_id = new_id()
    try:
        db.execute('''
            INSERT INTO facilities (
                id, name, capacity, location, status, description,
                image_url, features, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        ''', (
            facility_id,
            data['name'],
            int(data['capacity']),
            data['location'],
            data.get('status', 'available'),
            data.get('description', ''),
            data.get('image') or None,
            json.dumps(list(data.get('features', []))),
            utc_timestamp()
        ))
        db.commit()
    except (sqlite3.Error, KeyError) as e:
        db.rollback()
        raise RemoteError(f'Could not create facility: {e}') from e

    return facility_id


def update_facility(facility_id: str, updates: dict) -> bool:
    """
    Update facility fields.

    Args:
        facility_id: Facility id
        updates: Partial record; 'id' and 'created_at' are ignored

    Returns:
        bool: True if the facility existed

    Raises:
        ValueError: On unknown fields or invalid values
        RemoteError: If the update is rejected
    """
    updates = {k: v for k, v in updates.items() if k not in ('id', 'created_at')}
    unknown = set(updates) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValueError(f'Unknown facility fields: {", ".join(sorted(unknown))}')
    if not updates:
        return get_facility_by_id(facility_id) is not None

    _validate_fields(updates)

    assignments = []
    values = []
    for field, value in updates.items():
        if field == 'features':
            value = json.dumps(list(value))
        elif field == 'capacity':
            value = int(value)
        assignments.append(f'{UPDATABLE_FIELDS[field]} = ?')
        values.append(value)
    values.append(facility_id)

    db = get_db()
    try:
        cursor = db.execute(
            f'UPDATE facilities SET {", ".join(assignments)} WHERE id = ?',
            values
        )
        db.commit()
    except sqlite3.Error as e:
        db.rollback()
        raise RemoteError(f'Could not update facility: {e}') from e

    return cursor.rowcount > 0


def delete_facility(facility_id: str) -> bool:
    """
    Delete a facility. Reservations referencing it are left in place.

    Returns:
        bool: True if a row was deleted
    """
    db = get_db()
    try:
        cursor = db.execute('DELETE FROM facilities WHERE id = ?', (facility_id,))
        db.commit()
    except sqlite3.Error as e:
        db.rollback()
        raise RemoteError(f'Could not delete facility: {e}') from e
    return cursor.rowcount > 0
