from decimal import Decimal
from wtforms import DateField, DecimalField, IntegerField, StringField
from wtforms.validators import DataRequired, InputRequired, Length, NumberRange
from utils.api import ApiForm


class EmiForm(ApiForm):
    name = StringField('Name', validators=[DataRequired(message='Name is required'), Length(max=100)])
    amount = DecimalField('Amount', validators=[
        InputRequired(message='Amount is required'),
        NumberRange(min=Decimal('0.01'), message='Amount must be positive')
    ])
    emi_type = StringField('EMI type', validators=[DataRequired(message='EMI type is required')])
    due_day = IntegerField('Due day', validators=[
        InputRequired(message='Due day is required'),
        NumberRange(min=1, max=31, message='Due day must be between 1 and 31')
    ])
    start_date = DateField('Start date', format='%Y-%m-%d',
                           validators=[InputRequired(message='Start date is required')])
    end_date = DateField('End date', format='%Y-%m-%d',
                         validators=[InputRequired(message='End date is required')])

    def values(self):
        return {
            'name': self.name.data,
            'amount': self.amount.data,
            'emi_type': self.emi_type.data,
            'due_day': self.due_day.data,
            'start_date': self.start_date.data,
            'end_date': self.end_date.data,
        }
