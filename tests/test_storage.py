"""
Tests for facility image storage.
"""

import io
import os
import re
import pytest

from werkzeug.datastructures import FileStorage

from models.store import StorageError
from utils.storage import bucket_path, object_name_for, upload_image, validate_image


def _file(content=b'\x89PNG fake image', filename='photo.PNG', content_type='image/png'):
    return FileStorage(stream=io.BytesIO(content), filename=filename, content_type=content_type)


class TestValidateImage:
    """Uploads must be images no larger than the limit."""

    def test_valid_image_returns_size(self):
        assert validate_image(_file(b'12345'), max_size=10) == 5

    def test_missing_file(self):
        with pytest.raises(ValueError, match='no_file'):
            validate_image(None, max_size=10)
        with pytest.raises(ValueError, match='no_file'):
            validate_image(_file(filename=''), max_size=10)

    def test_non_image_rejected(self):
        with pytest.raises(ValueError, match='invalid_file_type'):
            validate_image(_file(filename='notes.pdf', content_type='application/pdf'), max_size=100)

    def test_too_large_rejected(self):
        with pytest.raises(ValueError, match='file_too_large'):
            validate_image(_file(b'x' * 11), max_size=10)

    def test_size_limit_is_inclusive(self):
        assert validate_image(_file(b'x' * 10), max_size=10) == 10


class TestUploadImage:
    """Stored objects get unique names and a public URL."""

    def test_object_name_format(self):
        assert re.match(r'^\d+-[a-z0-9]{7}\.png$', object_name_for('Photo.PNG'))

    def test_upload_stores_file(self, app):
        with app.test_request_context():
            url = upload_image(_file(b'image-bytes'))
            name = url.rsplit('/', 1)[1]

            assert url.startswith('/storage/v1/object/public/facility-images/')
            with open(os.path.join(bucket_path(), name), 'rb') as stored:
                assert stored.read() == b'image-bytes'

    def test_write_failure_raises_storage_error(self, app, monkeypatch):
        def failing_save(self, dst, buffer_size=16384):
            raise OSError('disk full')

        monkeypatch.setattr(FileStorage, 'save', failing_save)

        with app.test_request_context():
            with pytest.raises(StorageError):
                upload_image(_file())

    def test_public_url_serves_object(self, app, client):
        with app.test_request_context():
            url = upload_image(_file(b'served-bytes'))

        response = client.get(url)

        assert response.status_code == 200
        assert response.data == b'served-bytes'
        response.close()

    def test_other_buckets_not_public(self, client):
        response = client.get('/storage/v1/object/public/secrets/key.txt')
        assert response.status_code == 404
