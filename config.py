"""
Flask application configuration classes.
Provides configuration for development, production, and testing environments.
"""

import os
from datetime import timedelta


class Config:
    """Base configuration class with common settings."""

    # Secret key for session management and CSRF protection
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Database configuration (stands in for the hosted Postgres tables)
    DATABASE_PATH = os.environ.get('DATABASE_PATH') or 'instance/campus_reservations.db'

    # Security settings
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = 3600  # CSRF token expires after 1 hour
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = False  # Set to True in production with HTTPS
    PERMANENT_SESSION_LIFETIME = timedelta(
        hours=int(os.environ.get('SESSION_TIMEOUT_HOURS', 8))
    )

    # Object storage for facility images
    STORAGE_ROOT = os.environ.get('STORAGE_ROOT') or 'instance/storage'
    STORAGE_BUCKET = 'facility-images'
    MAX_IMAGE_SIZE = int(os.environ.get('MAX_IMAGE_SIZE', 5 * 1024 * 1024))  # 5MB
    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH', 8 * 1024 * 1024))
    DEFAULT_FACILITY_IMAGE = os.environ.get('DEFAULT_FACILITY_IMAGE') or (
        'https://images.unsplash.com/photo-1497366216548-37526070297c?w=800&q=80'
    )

    # Client notifications auto-dismiss after this many seconds
    NOTIFICATION_DURATION = int(os.environ.get('NOTIFICATION_DURATION', 5))

    # Refuse approving a reservation that overlaps an approved one
    ENFORCE_APPROVAL_CONFLICTS = os.environ.get(
        'ENFORCE_APPROVAL_CONFLICTS', 'true'
    ).lower() == 'true'

    # Registration
    MIN_PASSWORD_LENGTH = 6

    # Timezone used to decide what "today" is for booking dates
    TIMEZONE = os.environ.get('TIMEZONE') or 'Asia/Jakarta'

    # Application settings
    APP_NAME = 'Campus Reservations'
    APP_VERSION = '1.0.0'


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG = True
    TESTING = False
    SESSION_COOKIE_SECURE = False
    WTF_CSRF_SSL_STRICT = False


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = os.environ.get('SESSION_COOKIE_SECURE', 'true').lower() == 'true'
    WTF_CSRF_SSL_STRICT = SESSION_COOKIE_SECURE

    SECRET_KEY = os.environ.get('SECRET_KEY') or Config.SECRET_KEY
    DATABASE_PATH = os.environ.get('DATABASE_PATH') or Config.DATABASE_PATH

    PREFERRED_URL_SCHEME = 'https' if SESSION_COOKIE_SECURE else 'http'

    @classmethod
    def validate(cls) -> None:
        """Validate that required production environment variables are set."""
        secret_key = os.environ.get('SECRET_KEY')
        if not secret_key:
            raise ValueError("SECRET_KEY environment variable must be set in production")
        if len(secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters in production")
        if not os.environ.get('DATABASE_PATH'):
            raise ValueError("DATABASE_PATH environment variable must be set in production")


class TestConfig(Config):
    """Testing environment configuration."""

    TESTING = True
    DEBUG = True
    WTF_CSRF_ENABLED = False  # Disable CSRF for tests
    DATABASE_PATH = os.environ.get('DATABASE_PATH', 'instance/test_campus_reservations.db')
    STORAGE_ROOT = os.environ.get('STORAGE_ROOT', 'instance/test_storage')
    SECRET_KEY = 'test-secret-key'


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'test': TestConfig,
    'default': DevelopmentConfig
}
