"""
Public object storage routes.
Serves uploaded facility images back under their public URL.
"""

from flask import abort, current_app, send_from_directory

from utils.storage import bucket_path


def register_routes(bp):
    """Register public object routes on the blueprint."""

    @bp.route('/object/public/<bucket>/<path:path>')
    def public_object(bucket, path):
        """Stream a stored object. Only the configured bucket is public."""
        if bucket != current_app.config['STORAGE_BUCKET']:
            abort(404)
        return send_from_directory(bucket_path(bucket), path)
