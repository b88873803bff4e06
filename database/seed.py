"""
Database seed data.
Initial data population for fresh database installations.
"""

import json
import os
import uuid

from werkzeug.security import generate_password_hash


def seed_database(db):
    """Insert initial seed data."""

    # 1. Administrator account and profile
    admin_id = str(uuid.uuid4())
    admin_email = os.environ.get('ADMIN_EMAIL', 'admin@campus.edu')
    admin_password = os.environ.get('ADMIN_PASSWORD', 'admin123')

    db.execute('''
        INSERT INTO auth_accounts (id, email, password_hash)
        VALUES (?, ?, ?)
    ''', (admin_id, admin_email, generate_password_hash(admin_password)))

    db.execute('''
        INSERT INTO profiles (id, name, role)
        VALUES (?, ?, 'admin')
    ''', (admin_id, 'Administrator'))

    # 2. Sample facilities
    facilities_data = [
        ('Main Auditorium', 300, 'Building A, Ground Floor', 'available',
         'Large hall for seminars, ceremonies and guest lectures.',
         ['Projector', 'Sound system', 'Air conditioning']),
        ('Computer Lab 2', 40, 'Building C, 2nd Floor', 'available',
         'Lab with 40 workstations for practical classes.',
         ['40 PCs', 'Projector', 'Whiteboard']),
        ('Futsal Court', 20, 'Sports Complex', 'maintenance',
         'Indoor court, temporarily closed for floor repairs.',
         ['Changing rooms', 'Lighting']),
    ]

    for name, capacity, location, status, description, features in facilities_data:
        db.execute('''
            INSERT INTO facilities (id, name, capacity, location, status, description, image_url, features)
            VALUES (?, ?, ?, ?, ?, ?, NULL, ?)
        ''', (str(uuid.uuid4()), name, capacity, location, status, description, json.dumps(features)))
