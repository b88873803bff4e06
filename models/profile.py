"""
Profile model and data access functions.
Handles the identity record paired with each auth account and the
Flask-Login integration.
"""

import sqlite3

from database import get_db
from models.store import RemoteError, require_fields
from utils.datetime_helpers import parse_timestamp, utc_timestamp

ROLE_USER = 'user'
ROLE_ADMIN = 'admin'
VALID_ROLES = (ROLE_USER, ROLE_ADMIN)

PROFILE_FIELDS = ('id', 'name', 'email', 'role', 'created_at')


class Identity:
    """
    Signed-in identity.
    Wraps a mapped profile dictionary with the properties Flask-Login needs.
    """

    def __init__(self, profile: dict):
        """
        Initialize Identity from a mapped profile.

        Args:
            profile: Dictionary produced by map_profile_row()
        """
        self.id = profile['id']
        self.name = profile['name']
        self.email = profile['email']
        self.role = profile['role']
        self.created_at = profile['created_at']

    @property
    def is_admin(self):
        return self.role == ROLE_ADMIN

    @property
    def is_authenticated(self):
        """Required by Flask-Login."""
        return True

    @property
    def is_active(self):
        """Required by Flask-Login."""
        return True

    @property
    def is_anonymous(self):
        """Required by Flask-Login."""
        return False

    def get_id(self):
        """Required by Flask-Login."""
        return str(self.id)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

    def __eq__(self, other):
        if not isinstance(other, Identity):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f'<Identity {self.email} ({self.role})>'


def map_profile_row(row) -> dict:
    """
    Map a profiles row (joined with its auth account email) to a profile dict.

    Raises:
        RowMappingError: If a required column is missing
    """
    require_fields(row, PROFILE_FIELDS, 'Profile')

    role = row['role']
    if role not in VALID_ROLES:
        raise ValueError(f'Unknown role "{role}" for profile {row["id"]}')

    return {
        'id': row['id'],
        'name': row['name'],
        'email': row['email'],
        'role': role,
        'created_at': parse_timestamp(row['created_at'])
    }


def get_profile(user_id: str) -> dict:
    """
    Get profile by auth account id.

    Args:
        user_id: Auth account / profile id

    Returns:
        Profile dict or None if no profile row exists

    Raises:
        RemoteError: If the query fails
    """
    db = get_db()
    try:
        row = db.execute('''
            SELECT p.id, p.name, p.role, p.created_at, a.email
            FROM profiles p
            JOIN auth_accounts a ON a.id = p.id
            WHERE p.id = ?
        ''', (user_id,)).fetchone()
    except sqlite3.Error as e:
        raise RemoteError(f'Could not load profile: {e}') from e
    return map_profile_row(row) if row else None


def get_identity(user_id: str) -> Identity:
    """Resolve an Identity for an account id, or None."""
    profile = get_profile(user_id)
    return Identity(profile) if profile else None


def create_profile(user_id: str, name: str, role: str = ROLE_USER) -> None:
    """
    Create the profile row for a freshly created auth account.

    Raises:
        RemoteError: If the insert is rejected
    """
    if role not in VALID_ROLES:
        raise ValueError(f'Unknown role "{role}"')

    db = get_db()
    try:
        db.execute('''
            INSERT INTO profiles (id, name, role, created_at)
            VALUES (?, ?, ?, ?)
        ''', (user_id, name, role, utc_timestamp()))
        db.commit()
    except sqlite3.Error as e:
        db.rollback()
        raise RemoteError(f'Could not create profile: {e}') from e

