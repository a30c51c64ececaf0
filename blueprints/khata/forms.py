from decimal import Decimal
from wtforms import DateField, DecimalField, IntegerField, SelectField, StringField
from wtforms.validators import DataRequired, InputRequired, Length, NumberRange, Optional
from utils.api import ApiForm, Omittable


class TransactionForm(ApiForm):
    """Money lent to or borrowed from a person"""
    person_id = IntegerField('Person', validators=[InputRequired(message='Person is required')])
    type = SelectField('Type', choices=[('lend', 'Lend'), ('borrow', 'Borrow')],
                       validators=[InputRequired(message='Type is required')])
    amount = DecimalField('Amount', validators=[
        InputRequired(message='Amount is required'),
        NumberRange(min=Decimal('0.01'), message='Amount must be positive')
    ])
    due_date = DateField('Due date', format='%Y-%m-%d', validators=[Optional()])
    note = StringField('Note', validators=[Optional(), Length(max=300)])


class SettlementForm(ApiForm):
    """Omit amount to settle the whole remaining balance"""
    amount = DecimalField('Amount', validators=[
        Omittable(),
        NumberRange(min=Decimal('0.01'), message='Invalid settlement amount')
    ])
    date = DateField('Date', format='%Y-%m-%d', validators=[Optional()])


class PersonForm(ApiForm):
    name = StringField('Name', validators=[
        DataRequired(message='Name is required'),
        Length(min=1, max=80, message='Name must be between 1 and 80 characters')
    ])
