"""
Authentication forms using Flask-WTF.
Provides login and registration forms with CSRF protection.
Both accept form posts and JSON bodies.
"""

from flask import current_app
from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, BooleanField
from wtforms.validators import DataRequired, Email, Length, ValidationError

from utils.messages import get_message
from utils.validators import validate_password as check_password_rules


class LoginForm(FlaskForm):
    """Login form with email and password."""

    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Email(message='Invalid email format')
    ])

    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required')
    ])

    remember_me = BooleanField('Remember me')


class RegisterForm(FlaskForm):
    """Self-service registration for the 'user' role."""

    name = StringField('Full name', validators=[
        DataRequired(message='Name is required'),
        Length(max=200)
    ])

    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Email(message='Invalid email format')
    ])

    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required')
    ])

    def validate_password(self, field):
        min_length = current_app.config.get('MIN_PASSWORD_LENGTH', 6)
        is_valid, _ = check_password_rules(field.data, min_length=min_length)
        if not is_valid:
            raise ValidationError(get_message('password_too_short', min_length=min_length))
