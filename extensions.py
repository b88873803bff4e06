"""
Flask extensions initialization.
Extensions are initialized here and then initialized with the app in app.py.
"""

from flask import current_app
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect

from utils.realtime import ChangeFeed


class Realtime:
    """
    Change feed and client registry of an application.

    Both live in app.extensions so every app (and every test app) gets
    its own feed.
    """

    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        from services.client_context import ClientRegistry

        feed = ChangeFeed()
        app.extensions['realtime'] = {
            'feed': feed,
            'clients': ClientRegistry(
                feed, app=app,
                notification_duration=app.config.get('NOTIFICATION_DURATION', 5),
                idle_timeout=app.config['PERMANENT_SESSION_LIFETIME'].total_seconds()
            )
        }

    @property
    def feed(self) -> ChangeFeed:
        return current_app.extensions['realtime']['feed']

    @property
    def clients(self):
        return current_app.extensions['realtime']['clients']


# Initialize Flask-Login
login_manager = LoginManager()

# Initialize CSRF Protection
csrf = CSRFProtect()

# Change feed and per-browser client state
realtime = Realtime()

# Configure Login Manager
login_manager.login_message = 'Please sign in to continue'
login_manager.login_message_category = 'warning'


@login_manager.user_loader
def load_user(user_id):
    """
    Load identity by account id for Flask-Login.

    Args:
        user_id: The account id as a string

    Returns:
        Identity or None if the profile is gone or cannot be read
    """
    from models.profile import get_identity
    from models.store import RemoteError

    try:
        return get_identity(user_id)
    except RemoteError as e:
        current_app.logger.error(f'Error loading user {user_id}: {e}', exc_info=True)
        return None


@login_manager.unauthorized_handler
def unauthorized():
    """JSON 401 instead of a login redirect."""
    from utils.api_response import api_error
    from utils.messages import get_message

    return api_error(get_message('login_required'), status=401)
