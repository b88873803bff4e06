"""WSGI entry point for production deployment (see gunicorn.conf.py)."""
import os
from app import create_app

# One worker process: client contexts and the change feed live in memory
application = create_app(os.environ.get('FLASK_ENV', 'production'))
