from decimal import Decimal
from wtforms import DecimalField, IntegerField, StringField
from wtforms.validators import DataRequired, InputRequired, Length, NumberRange
from utils.api import ApiForm


class RecurringForm(ApiForm):
    name = StringField('Name', validators=[DataRequired(message='Name is required'), Length(max=100)])
    type = StringField('Type', validators=[DataRequired(message='Type is required'), Length(max=60)])
    amount = DecimalField('Amount', validators=[
        InputRequired(message='Amount is required'),
        NumberRange(min=Decimal('0.01'), message='Amount must be positive')
    ])
    due_day = IntegerField('Due day', validators=[
        InputRequired(message='Due day is required'),
        NumberRange(min=1, max=31, message='Due day must be between 1 and 31')
    ])

    def values(self):
        return {
            'name': self.name.data,
            'type': self.type.data,
            'amount': self.amount.data,
            'due_day': self.due_day.data,
        }
