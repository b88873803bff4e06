"""Admin services package."""

from blueprints.admin.services.facility_service import build_facility_data  # noqa: F401
