"""
Database schema definitions.
Table creation, indexes, and structure management.
"""


def drop_tables(db):
    """Drop all existing tables."""
    # Disable foreign key constraints before dropping
    db.execute('PRAGMA foreign_keys = OFF')

    tables = [
        'reservations',
        'facilities',
        'profiles',
        'auth_accounts'
    ]

    for table in tables:
        db.execute(f'DROP TABLE IF EXISTS {table}')

    # Re-enable foreign key constraints
    db.execute('PRAGMA foreign_keys = ON')


def create_tables(db):
    """Create all database tables."""

    # 1. Auth records (one per registered email)
    db.execute('''
        CREATE TABLE auth_accounts (
            id TEXT PRIMARY KEY,
            email TEXT UNIQUE NOT NULL,
            password_hash TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            last_sign_in_at TIMESTAMP
        )
    ''')

    # 2. Profiles share their id with the auth record
    db.execute('''
        CREATE TABLE profiles (
            id TEXT PRIMARY KEY REFERENCES auth_accounts(id) ON DELETE CASCADE,
            name TEXT NOT NULL,
            role TEXT NOT NULL DEFAULT 'user' CHECK (role IN ('user', 'admin')),
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 3. Facilities
    db.execute('''
        CREATE TABLE facilities (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            capacity INTEGER NOT NULL CHECK (capacity > 0),
            location TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'available'
                CHECK (status IN ('available', 'unavailable', 'maintenance')),
            description TEXT NOT NULL DEFAULT '',
            image_url TEXT,
            features TEXT NOT NULL DEFAULT '[]',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 4. Reservations (facility_id is a weak reference, no cascade)
    db.execute('''
        CREATE TABLE reservations (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            facility_id TEXT NOT NULL,
            date TEXT NOT NULL,
            start_time TEXT NOT NULL,
            end_time TEXT NOT NULL,
            purpose TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'pending'
                CHECK (status IN ('pending', 'approved', 'rejected')),
            admin_note TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')


def create_indexes(db):
    """Create indexes for common lookups."""
    db.execute('CREATE INDEX IF NOT EXISTS idx_reservations_user ON reservations(user_id)')
    db.execute('CREATE INDEX IF NOT EXISTS idx_reservations_facility_date ON reservations(facility_id, date)')
    db.execute('CREATE INDEX IF NOT EXISTS idx_reservations_status ON reservations(status)')
    db.execute('CREATE INDEX IF NOT EXISTS idx_facilities_created ON facilities(created_at)')
