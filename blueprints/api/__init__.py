"""
API routes package.
Split into smaller modules by entity for maintainability.
"""

from flask import Blueprint

# Create the API blueprint
api_bp = Blueprint('api', __name__)

# Public object storage, mounted at /storage/v1
storage_bp = Blueprint('storage', __name__)

# Import and register routes from submodules
from blueprints.api import health
from blueprints.api import facilities
from blueprints.api import reservations
from blueprints.api import notifications
from blueprints.api import storage

# Register all route functions on the blueprints
health.register_routes(api_bp)
facilities.register_routes(api_bp)
reservations.register_routes(api_bp)
notifications.register_routes(api_bp)
storage.register_routes(storage_bp)
