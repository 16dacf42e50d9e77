"""
WTForms for the application.
Only the two location search flows submit forms.
"""
from flask_wtf import FlaskForm
from wtforms import FloatField, HiddenField, IntegerField, StringField, SubmitField
from wtforms.validators import DataRequired, Length, NumberRange, Optional

class PlaceSearchForm(FlaskForm):
    """Address chosen from the autocomplete suggestions."""
    address = StringField(
        'Location',
        validators=[
            Optional(),
            Length(max=200, message="Location must be at most 200 characters")
        ],
        render_kw={
            'autocomplete': 'off',
            'class': 'form-control'
        }
    )
    place_id = HiddenField(
        validators=[DataRequired(message="Please choose a location from the suggestions")]
    )
    submit = SubmitField('Search')

class LocateForm(FlaskForm):
    """Position (or geolocation error) reported by the browser."""
    latitude = FloatField(validators=[Optional(), NumberRange(min=-90, max=90)])
    longitude = FloatField(validators=[Optional(), NumberRange(min=-180, max=180)])
    error_code = IntegerField(validators=[Optional()])
    # "0" when navigator.geolocation is missing
    supported = HiddenField(default='1')
    submit = SubmitField('Use my current location')
