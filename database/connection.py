"""
Database connection management.

Each app context gets its own SQLite connection (gunicorn runs several
threads in one process), closed again on teardown.
"""

import os
import sqlite3
from flask import g, current_app

# Seconds a writer waits on a locked database before failing
BUSY_TIMEOUT = 10


def _connect(db_path: str) -> sqlite3.Connection:
    db_dir = os.path.dirname(db_path)
    if db_dir and not os.path.exists(db_dir):
        os.makedirs(db_dir)

    conn = sqlite3.connect(
        db_path,
        timeout=BUSY_TIMEOUT,
        detect_types=sqlite3.PARSE_DECLTYPES
    )
    conn.row_factory = sqlite3.Row
    # Profiles cascade from auth accounts, reservations from profiles
    conn.execute('PRAGMA foreign_keys = ON')
    conn.execute('PRAGMA journal_mode = WAL')
    return conn


def get_db():
    """
    Connection for the current app context.

    Returns:
        sqlite3.Connection with sqlite3.Row rows
    """
    if 'db' not in g:
        g.db = _connect(current_app.config.get('DATABASE_PATH', 'instance/campus_reservations.db'))
    return g.db


def close_db(e=None):
    """Close the app context's connection (Flask teardown hook)."""
    db = g.pop('db', None)
    if db is not None:
        db.close()


def init_db(seed: bool = True):
    """
    Recreate the schema from scratch.

    WARNING: drops every table first.

    Args:
        seed: Insert the administrator account and sample facilities
    """
    from database.schema import drop_tables, create_tables, create_indexes
    from database.seed import seed_database

    db = get_db()

    drop_tables(db)
    create_tables(db)
    create_indexes(db)

    if seed:
        seed_database(db)

    db.commit()
    current_app.logger.info('Database initialized at %s', current_app.config.get('DATABASE_PATH'))
