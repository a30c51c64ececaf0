from decimal import Decimal
from wtforms import DecimalField, IntegerField
from wtforms.validators import InputRequired, NumberRange
from utils.api import ApiForm


class CategoryBudgetForm(ApiForm):
    type_id = IntegerField('Type', validators=[InputRequired(message='Type is required')])
    amount = DecimalField('Amount', validators=[
        InputRequired(message='Amount is required'),
        NumberRange(min=Decimal('0.01'), message='Amount must be positive')
    ])
