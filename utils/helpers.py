"""
Miscellaneous utility helper functions.
Provides common functionality used across the application.
"""

import os
import random
import string
from datetime import date, datetime


def generate_unique_code(length: int = 8) -> str:
    """Generate a random lowercase code, e.g. for storage object names."""
    return ''.join(random.choices(string.ascii_lowercase + string.digits, k=length))


def get_file_extension(filename: str) -> str:
    """
    Get file extension from filename.

    Args:
        filename: Filename

    Returns:
        Extension without dot (lowercase)
    """
    if not filename:
        return ''

    return os.path.splitext(filename)[1][1:].lower()


def serialize_record(record: dict) -> dict:
    """
    Make a domain record JSON-friendly.
    Dates become 'YYYY-MM-DD', datetimes become ISO 8601.
    """
    result = {}
    for key, value in record.items():
        if isinstance(value, datetime):
            result[key] = value.isoformat()
        elif isinstance(value, date):
            result[key] = value.isoformat()
        else:
            result[key] = value
    return result


def serialize_records(records: list) -> list:
    """Serialize a list of domain records."""
    return [serialize_record(r) for r in records]


def first_form_error(form) -> str:
    """First validation message of a WTForms form, or None."""
    for errors in form.errors.values():
        if errors:
            return errors[0]
    return None
