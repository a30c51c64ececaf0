from decimal import Decimal
from wtforms import BooleanField, DecimalField, SelectField, StringField
from wtforms.validators import Length, NumberRange, Optional
from models.users import User
from utils.api import ApiForm


class SettingsForm(ApiForm):
    """Every field is optional; only the ones sent are changed"""
    currency = StringField('Currency', validators=[
        Optional(), Length(min=3, max=3, message='Currency must be a 3-letter code')
    ])
    monthly_budget = DecimalField('Monthly budget', validators=[
        Optional(), NumberRange(min=Decimal('0.01'), message='Monthly budget must be positive')
    ])
    dark_mode = SelectField('Dark mode', choices=list(User.DARK_MODES), validators=[Optional()])
    email_reminders = BooleanField('Email reminders')
    reminder_frequency = SelectField('Reminder frequency', choices=list(User.REMINDER_FREQUENCIES),
                                     validators=[Optional()])
