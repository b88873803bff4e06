"""
Authentication routes: login, registration, logout, session.
Handles sign-in through the client's session service and keeps
Flask-Login in step with it.
"""

from flask import Blueprint, current_app, request, session
from flask_login import login_user, logout_user, login_required, current_user
from flask_wtf.csrf import generate_csrf

from blueprints.auth.forms import LoginForm, RegisterForm
from extensions import realtime
from services.client_context import CLIENT_ID_KEY, current_client, release_anonymous_client
from utils.api_response import api_success, api_error
from utils.helpers import first_form_error
from utils.messages import get_message

auth_bp = Blueprint('auth', __name__)


def _session_payload(context) -> dict:
    identity = context.identity
    return {
        'user': identity.to_dict() if identity else None,
        'has_pending': context.has_pending
    }


@auth_bp.route('/csrf-token')
def csrf_token():
    """Token for the X-CSRFToken header of state-changing requests."""
    return api_success(data={'csrf_token': generate_csrf()})


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Sign in with email and password.

    Body (form or JSON): email, password, remember_me
    """
    form = LoginForm()
    if not form.validate_on_submit():
        return api_error(first_form_error(form) or get_message('invalid_value'), status=400)

    context = current_client()
    if not context.session.login(form.email.data, form.password.data):
        context.notifications.show_error(get_message('invalid_credentials'))
        release_anonymous_client(context)
        return api_error(get_message('invalid_credentials'), status=401)

    identity = context.identity
    login_user(identity, remember=form.remember_me.data)
    current_app.logger.info(f'User {identity.email} signed in')

    message = get_message('login_success', name=identity.name)
    context.notifications.show_success(message)
    return api_success(data=_session_payload(context), message=message)


@auth_bp.route('/register', methods=['POST'])
def register():
    """
    Create a user account and sign in.

    Body (form or JSON): name, email, password
    """
    form = RegisterForm()
    if not form.validate_on_submit():
        return api_error(first_form_error(form) or get_message('invalid_value'), status=400)

    context = current_client()
    if not context.session.register(form.name.data.strip(), form.email.data, form.password.data):
        context.notifications.show_error(get_message('register_failed'))
        release_anonymous_client(context)
        return api_error(get_message('register_failed'), status=400)

    identity = context.identity
    login_user(identity)
    current_app.logger.info(f'User {identity.email} registered')

    message = get_message('register_success', app_name=current_app.config['APP_NAME'])
    context.notifications.show_success(message)
    return api_success(data=_session_payload(context), message=message, status=201)


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    """
    Sign out.

    Body (optional JSON): {"everywhere": true} also signs out every other
    browser of the account.
    """
    data = request.get_json(silent=True) or {}
    everywhere = bool(data.get('everywhere', False))

    context = current_client()
    context.logout(everywhere=everywhere)
    logout_user()

    realtime.clients.close(context.client_id)
    session.pop(CLIENT_ID_KEY, None)
    return api_success(message=get_message('logout_success'))


@auth_bp.route('/session')
def current_session():
    """Identity of this browser, or null when signed out."""
    if not current_user.is_authenticated:
        return api_success(data={'user': None, 'has_pending': False})

    return api_success(data=_session_payload(current_client()))
