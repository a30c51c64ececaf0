from wtforms import StringField
from wtforms.validators import DataRequired, Length, Optional
from utils.api import ApiForm


class ExpenseTypeForm(ApiForm):
    name = StringField('Name', validators=[
        DataRequired(message='Type name is required'),
        Length(max=60, message='Type name must be at most 60 characters')
    ])
    icon = StringField('Icon', validators=[Optional(), Length(max=50)])


class EmiTypeForm(ApiForm):
    name = StringField('Name', validators=[
        DataRequired(message='EMI type must be at least 2 characters'),
        Length(min=2, max=60, message='EMI type must be at least 2 characters')
    ])
