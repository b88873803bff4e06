"""
Campus Reservations - Facility booking and approval
Flask application factory and initialization
"""

import os
import click
import logging
from flask import Flask, g
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Import configuration
from config import config

# Import extensions
from extensions import login_manager, csrf, realtime

# Import database functions
from database import close_db, init_db


def create_app(config_name=None):
    """
    Application factory for Flask app.

    Args:
        config_name: Configuration name ('development', 'production', 'test')

    Returns:
        Flask application instance
    """
    # Determine config
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    config_class = config[config_name]
    if config_name == 'production':
        config_class.validate()

    # Create Flask app
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config_class)

    # Initialize extensions
    initialize_extensions(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Register CLI commands
    register_cli_commands(app)

    # Register request hooks
    register_request_hooks(app)

    # Register teardown handlers
    register_teardown_handlers(app)

    # Configure logging
    configure_logging(app)

    return app


def initialize_extensions(app):
    """Initialize Flask extensions."""
    # Initialize Flask-Login
    login_manager.init_app(app)
    # Initialize CSRF Protection
    csrf.init_app(app)
    # Change feed and client registry
    realtime.init_app(app)


def register_blueprints(app):
    """Register Flask blueprints."""
    # Import blueprints
    from blueprints.auth.routes import auth_bp
    from blueprints.admin.routes import admin_bp
    from blueprints.api import api_bp, storage_bp

    # Register blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp, url_prefix='/admin')
    app.register_blueprint(api_bp, url_prefix='/api')
    app.register_blueprint(storage_bp, url_prefix='/storage/v1')

    # Set default route
    @app.route('/')
    def index():
        """Service description."""
        from utils.api_response import api_success

        return api_success(data={
            'name': app.config.get('APP_NAME'),
            'version': app.config.get('APP_VERSION')
        })


def register_error_handlers(app):
    """Register error handlers."""
    from utils.api_response import api_error

    @app.errorhandler(400)
    def bad_request_error(error):
        """Handle 400 errors (including CSRF failures)."""
        return api_error(getattr(error, 'description', None) or 'Bad request', status=400)

    @app.errorhandler(404)
    def not_found_error(error):
        """Handle 404 errors."""
        return api_error('Not found', status=404)

    @app.errorhandler(413)
    def too_large_error(error):
        """Handle uploads over MAX_CONTENT_LENGTH."""
        return api_error('Request is too large', status=413)

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        # Rollback database on error
        db = g.get('db')
        if db:
            db.rollback()
        return api_error('Internal server error', status=500)

    @app.errorhandler(403)
    def forbidden_error(error):
        """Handle 403 errors."""
        from utils.messages import get_message

        return api_error(get_message('permission_denied'), status=403)


def register_cli_commands(app):
    """Register Flask CLI commands."""

    @app.cli.command('init-db')
    @click.option('--no-seed', is_flag=True, help='Skip the administrator account and sample facilities.')
    def init_db_command(no_seed):
        """Initialize database with schema and seed data."""
        click.echo('Initializing database...')
        with app.app_context():
            init_db(seed=not no_seed)
        click.echo('Database initialized successfully!')

    @app.cli.command('create-admin')
    @click.argument('name')
    @click.argument('email')
    @click.password_option()
    def create_admin_command(name, email, password):
        """Create a new administrator account."""
        from models.auth_account import create_account, delete_account
        from models.profile import ROLE_ADMIN, create_profile
        from models.store import RemoteError
        from utils.validators import validate_email, validate_password

        if not validate_email(email):
            click.echo(f'Invalid email: {email}', err=True)
            return

        is_valid, error = validate_password(password, app.config['MIN_PASSWORD_LENGTH'])
        if not is_valid:
            click.echo(error, err=True)
            return

        with app.app_context():
            try:
                account = create_account(email, password)
            except RemoteError as e:
                click.echo(f'Error creating account: {str(e)}', err=True)
                return

            try:
                create_profile(account['id'], name, role=ROLE_ADMIN)
            except RemoteError as e:
                delete_account(account['id'])
                click.echo(f'Error creating profile: {str(e)}', err=True)
                return

            click.echo(f'Administrator created successfully! ID: {account["id"]}')


def register_request_hooks(app):
    """Register per-request hooks."""

    @app.before_request
    def sync_revoked_sessions():
        """Drop Flask-Login sessions revoked by a global sign-out."""
        from services.client_context import end_revoked_session

        end_revoked_session()


def register_teardown_handlers(app):
    """Register teardown handlers."""

    @app.teardown_appcontext
    def teardown_db(error):
        """Close database connection at end of request."""
        close_db(error)


def configure_logging(app):
    """Configure application logging."""
    if not app.debug and not app.testing:
        # Production logging
        if not os.path.exists('logs'):
            os.mkdir('logs')

        file_handler = logging.FileHandler('logs/campus_reservations.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        logging.getLogger().addHandler(file_handler)
        logging.getLogger().setLevel(logging.INFO)

        app.logger.setLevel(logging.INFO)
        app.logger.info('Campus Reservations startup')
    else:
        # Development logging
        app.logger.setLevel(logging.DEBUG)


# Create application instance for development server
if __name__ == '__main__':
    app = create_app()
    # host='0.0.0.0' allows access from other devices on the network
    app.run(host='0.0.0.0', debug=True)
