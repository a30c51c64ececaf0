from wtforms import IntegerField
from wtforms.validators import NumberRange, Optional
from utils.api import ApiForm


class CategoryReportForm(ApiForm):
    month = IntegerField('Month', validators=[
        Optional(), NumberRange(min=0, max=11, message='Month must be between 0 and 11')
    ])
    year = IntegerField('Year', validators=[Optional(), NumberRange(min=2000)])
