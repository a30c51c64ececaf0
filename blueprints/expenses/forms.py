from decimal import Decimal
from wtforms import DateField, DecimalField, IntegerField, SelectField, StringField
from wtforms.validators import InputRequired, Length, NumberRange, Optional
from utils.api import ApiForm


class ExpenseForm(ApiForm):
    amount = DecimalField('Amount', validators=[
        InputRequired(message='Amount is required'),
        NumberRange(min=Decimal('0.01'), message='Amount must be positive')
    ])
    date = DateField('Date', format='%Y-%m-%d', validators=[InputRequired(message='Date is required')])
    type_id = IntegerField('Type', validators=[InputRequired(message='Type is required')])
    note = StringField('Note', validators=[Optional(), Length(max=300)])


class ExpenseFilterForm(ApiForm):
    """Query-string filters shared by the list and category summary"""
    date_from = DateField('From', format='%Y-%m-%d', validators=[Optional()])
    date_to = DateField('To', format='%Y-%m-%d', validators=[Optional()])
    type_id = IntegerField('Type', validators=[Optional()])
    search = StringField('Search', validators=[Optional()])
    min_amount = DecimalField('Min amount', validators=[Optional()])
    max_amount = DecimalField('Max amount', validators=[Optional()])
    sort = SelectField('Sort', choices=['date_desc', 'date_asc', 'amount_desc', 'amount_asc'],
                       default='date_desc', validate_choice=False)
    page = IntegerField('Page', default=1, validators=[
        Optional(), NumberRange(min=1, message='Page must be at least 1')
    ])
    limit = IntegerField('Limit', validators=[
        Optional(), NumberRange(min=1, max=100, message='Limit must be between 1 and 100')
    ])

    def filters(self):
        return {
            'date_from': self.date_from.data,
            'date_to': self.date_to.data,
            'type_id': self.type_id.data,
            'search': (self.search.data or '').strip() or None,
            'min_amount': self.min_amount.data,
            'max_amount': self.max_amount.data,
        }
