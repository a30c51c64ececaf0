from wtforms import DateField, IntegerField, SelectField, StringField
from wtforms.validators import InputRequired, Length, NumberRange, Optional
from utils.api import ApiForm

ITEM_TYPES = [('emi', 'EMI'), ('recurring', 'Recurring')]


class PaidMarkForm(ApiForm):
    item_type = SelectField('Item type', choices=ITEM_TYPES,
                            validators=[InputRequired(message='Item type is required')])
    item_id = IntegerField('Item', validators=[InputRequired(message='Item is required')])
    # Zero-based: 0 = January
    month = IntegerField('Month', validators=[
        InputRequired(message='Month is required'),
        NumberRange(min=0, max=11, message='Month must be between 0 and 11')
    ])
    year = IntegerField('Year', validators=[
        InputRequired(message='Year is required'),
        NumberRange(min=2000, message='Year must be 2000 or later')
    ])
    paid_date = DateField('Paid date', format='%Y-%m-%d',
                          validators=[InputRequired(message='Paid date is required')])
    note = StringField('Note', validators=[Optional(), Length(max=300)])


class PaidMarkQueryForm(ApiForm):
    month = IntegerField('Month', validators=[Optional(), NumberRange(min=0, max=11)])
    year = IntegerField('Year', validators=[Optional()])


class PaidMarkCheckForm(ApiForm):
    item_type = SelectField('Item type', choices=ITEM_TYPES,
                            validators=[InputRequired(message='Missing query params')])
    item_id = IntegerField('Item', validators=[InputRequired(message='Missing query params')])
    month = IntegerField('Month', validators=[InputRequired(message='Missing query params')])
    year = IntegerField('Year', validators=[InputRequired(message='Missing query params')])
