"""
Auth account data access.
Stores sign-in credentials separately from profiles, the way the hosted
auth provider keeps its own user records.
"""

import sqlite3

from werkzeug.security import generate_password_hash, check_password_hash

from database import get_db
from models.store import AuthError, RemoteError, new_id
from utils.datetime_helpers import utc_timestamp


def get_account_by_email(email: str) -> dict:
    """
    Get auth account by email (case-insensitive).

    Args:
        email: Email to search for

    Returns:
        Account dict or None if not found

    Raises:
        RemoteError: If the query fails
    """
    db = get_db()
    try:
        row = db.execute('''
            SELECT * FROM auth_accounts WHERE lower(email) = lower(?)
        ''', (email,)).fetchone()
    except sqlite3.Error as e:
        raise RemoteError(f'Could not load auth account: {e}') from e
    return dict(row) if row else None


def get_account_by_id(account_id: str) -> dict:
    """Get auth account by id, or None."""
    db = get_db()
    try:
        row = db.execute('SELECT * FROM auth_accounts WHERE id = ?', (account_id,)).fetchone()
    except sqlite3.Error as e:
        raise RemoteError(f'Could not load auth account: {e}') from e
    return dict(row) if row else None


def create_account(email: str, password: str) -> dict:
    """
    Create a new auth account.

    Args:
        email: Account email (unique)
        password: Plain text password (will be hashed)

    Returns:
        dict: {'id': ..., 'email': ...}

    Raises:
        AuthError: If the email is already registered
        RemoteError: On any other store failure
    """
    db = get_db()
    account_id = new_id()
    email = email.strip().lower()

    try:
        db.execute('''
            INSERT INTO auth_accounts (id, email, password_hash, created_at)
            VALUES (?, ?, ?, ?)
        ''', (account_id, email, generate_password_hash(password), utc_timestamp()))
        db.commit()
    except sqlite3.IntegrityError as e:
        db.rollback()
        raise AuthError('Email is already registered') from e
    except sqlite3.Error as e:
        db.rollback()
        raise RemoteError(f'Could not create auth account: {e}') from e

    return {'id': account_id, 'email': email}


def verify_credentials(email: str, password: str) -> dict:
    """
    Check an email/password pair.

    Returns:
        Account dict if the credentials match, None otherwise
    """
    if not email or not password:
        return None

    account = get_account_by_email(email.strip())
    if account is None:
        return None
    if not check_password_hash(account['password_hash'], password):
        return None
    return account


def mark_signed_in(account_id: str) -> None:
    """Record the last sign-in timestamp."""
    db = get_db()
    try:
        db.execute('''
            UPDATE auth_accounts SET last_sign_in_at = ? WHERE id = ?
        ''', (utc_timestamp(), account_id))
        db.commit()
    except sqlite3.Error as e:
        db.rollback()
        raise RemoteError(f'Could not update sign-in time: {e}') from e


def delete_account(account_id: str) -> bool:
    """
    Delete an auth account (and its profile through the cascade).

    Returns:
        bool: True if a row was deleted
    """
    db = get_db()
    try:
        cursor = db.execute('DELETE FROM auth_accounts WHERE id = ?', (account_id,))
        db.commit()
    except sqlite3.Error as e:
        db.rollback()
        raise RemoteError(f'Could not delete auth account: {e}') from e
    return cursor.rowcount > 0
