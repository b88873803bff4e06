"""
Admin forms using Flask-WTF.
"""

from flask_wtf import FlaskForm
from wtforms import StringField, IntegerField, SelectField, TextAreaField
from wtforms.validators import DataRequired, NumberRange, Optional, Length

from models.facility import FACILITY_STATUSES


class FacilityForm(FlaskForm):
    """Create or edit a facility. Features are read from the raw body."""

    name = StringField('Name', validators=[
        DataRequired(message='Name is required'),
        Length(max=200)
    ])

    capacity = IntegerField('Capacity', validators=[
        DataRequired(message='Capacity is required'),
        NumberRange(min=1, message='Capacity must be greater than zero')
    ])

    location = StringField('Location', validators=[
        DataRequired(message='Location is required'),
        Length(max=200)
    ])

    status = SelectField('Status', choices=[(s, s.capitalize()) for s in FACILITY_STATUSES],
                         default='available')

    description = TextAreaField('Description', validators=[Optional()])

    image = StringField('Image URL', validators=[Optional(), Length(max=500)])


class DecisionForm(FlaskForm):
    """Admin note sent with an approval or rejection."""

    admin_note = TextAreaField('Admin note', validators=[Optional(), Length(max=1000)])
