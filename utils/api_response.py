"""
JSON envelope for every endpoint.

    Success:  {"success": true, "data": {...}, "message": "...", "count": 3}
    Error:    {"success": false, "error": "...", "conflicts": [...]}

Usage:
    from utils.api_response import api_success, api_error

    return api_success(data=facility_to_json(facility), status=201)
    return api_error(get_message('facility_not_found'), status=404)
"""

from flask import jsonify
from typing import Any


def api_success(
    data: Any = None,
    message: str | None = None,
    status: int = 200,
    **extra_fields: Any
) -> tuple:
    """
    Build a success response.

    Args:
        data: Payload under the 'data' key (dict or list).
        message: Optional user-facing message.
        status: HTTP status code (default 200).
        **extra_fields: Extra top-level fields (e.g. count, has_pending).

    Returns:
        Tuple of (Response, status_code)
    """
    response = {'success': True}

    if data is not None:
        response['data'] = data

    if message:
        response['message'] = message

    if extra_fields:
        response.update(extra_fields)

    return jsonify(response), status


def api_error(error: str, status: int = 400, **extra_fields: Any) -> tuple:
    """
    Build an error response.

    Args:
        error: User-facing error message.
        status: HTTP status code (default 400).
        **extra_fields: Extra top-level fields (e.g. conflicts).
    """
    response = {'success': False, 'error': error}

    if extra_fields:
        response.update(extra_fields)

    return jsonify(response), status
