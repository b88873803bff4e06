"""
Object storage for facility images.

Files live under STORAGE_ROOT/<bucket>/ and are served back through the
public object route; the public URL is what gets persisted as a
facility's image_url.
"""

import logging
import os
import time

from flask import current_app, url_for

from models.store import StorageError
from utils.helpers import generate_unique_code, get_file_extension

logger = logging.getLogger(__name__)


def validate_image(file_storage, max_size: int) -> int:
    """
    Check an uploaded file before storing it.

    Args:
        file_storage: werkzeug FileStorage
        max_size: Maximum size in bytes

    Returns:
        int: File size in bytes

    Raises:
        ValueError: If the file is missing, not an image, or too large
    """
    if file_storage is None or not file_storage.filename:
        raise ValueError('no_file')

    mimetype = file_storage.mimetype or ''
    if not mimetype.startswith('image/'):
        raise ValueError('invalid_file_type')

    stream = file_storage.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)

    if size > max_size:
        raise ValueError('file_too_large')
    return size


def bucket_path(bucket: str = None) -> str:
    """Absolute directory of a bucket, created on first use."""
    bucket = bucket or current_app.config['STORAGE_BUCKET']
    root = current_app.config['STORAGE_ROOT']
    if not os.path.isabs(root):
        root = os.path.join(current_app.root_path, root)
    path = os.path.join(root, bucket)
    os.makedirs(path, exist_ok=True)
    return path


def object_name_for(filename: str) -> str:
    """Unique object name: '<epoch-ms>-<random>.<ext>'."""
    ext = get_file_extension(filename) or 'bin'
    return f'{int(time.time() * 1000)}-{generate_unique_code(length=7)}.{ext}'


def upload_image(file_storage) -> str:
    """
    Validate and store an image in the facility bucket.

    Args:
        file_storage: werkzeug FileStorage from request.files

    Returns:
        str: Public URL of the stored object

    Raises:
        ValueError: If validation fails (message key in MESSAGES)
        StorageError: If the file could not be written
    """
    validate_image(file_storage, current_app.config['MAX_IMAGE_SIZE'])

    bucket = current_app.config['STORAGE_BUCKET']
    name = object_name_for(file_storage.filename)

    try:
        file_storage.save(os.path.join(bucket_path(bucket), name))
    except OSError as e:
        logger.error(f'Error uploading image {name}: {e}', exc_info=True)
        raise StorageError(str(e)) from e

    logger.info(f'Stored image {bucket}/{name}')
    return public_url(bucket, name)


def public_url(bucket: str, name: str) -> str:
    """Public URL for a stored object."""
    return url_for('storage.public_object', bucket=bucket, path=name)
