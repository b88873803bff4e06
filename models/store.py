"""
Shared helpers for the data store layer.

Defines the error taxonomy for remote operations, the row mapping guard,
and change publication after committed writes.
"""

import uuid


class RemoteError(Exception):
    """A read or write against the data store was rejected or failed."""


class AuthError(RemoteError):
    """The auth provider rejected a sign-in, sign-up, or session operation."""


class StorageError(RemoteError):
    """The object storage rejected an upload."""


class RowMappingError(ValueError):
    """A store row is missing a field the domain record requires."""


def new_id() -> str:
    """Generate a store identifier (UUID4 string)."""
    return str(uuid.uuid4())


def require_fields(row, fields: tuple, entity: str) -> None:
    """
    Fail fast when a row lacks required columns.

    Args:
        row: sqlite3.Row or dict
        fields: Column names that must be present and not NULL
        entity: Entity name for the error message

    Raises:
        RowMappingError: On the first missing or NULL column
    """
    keys = row.keys()
    for field in fields:
        if field not in keys or row[field] is None:
            raise RowMappingError(f'{entity} row is missing required field "{field}"')


def publish_change(table: str, event: str, record: dict) -> None:
    """Announce a committed write on the change feed."""
    from extensions import realtime

    realtime.feed.publish(table, event, record)
