"""
Business logic for facility management.
Turns a validated facility form into the record the store expects.
"""

from utils.validators import parse_features, sanitize_input


def build_facility_data(form, body: dict) -> dict:
    """
    Facility record from a validated FacilityForm.

    Args:
        form: Validated FacilityForm
        body: Raw request body (form or JSON); 'features' may be a list
            or a comma-separated string

    Returns:
        dict: name, capacity, location, status, description, image, features
    """
    features = body.get('features')
    if hasattr(body, 'getlist') and len(body.getlist('features')) > 1:
        features = body.getlist('features')

    return {
        'name': sanitize_input(form.name.data, max_length=200),
        'capacity': form.capacity.data,
        'location': sanitize_input(form.location.data, max_length=200),
        'status': form.status.data,
        'description': sanitize_input(form.description.data),
        'image': sanitize_input(form.image.data),
        'features': parse_features(features)
    }
