"""
Authentication Forms
Validation for the register and login JSON bodies
"""
from flask import current_app
from wtforms import StringField, PasswordField, BooleanField
from wtforms.validators import DataRequired, Email, Length, ValidationError
from utils.api import ApiForm


class LoginForm(ApiForm):
    """Login credentials"""
    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Email(message='Invalid email address')
    ])
    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required')
    ])
    remember = BooleanField('Remember Me')


class RegisterForm(ApiForm):
    """New account"""
    name = StringField('Name', validators=[
        DataRequired(message='Name is required'),
        Length(min=1, max=100, message='Name must be at most 100 characters')
    ])
    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Email(message='Invalid email address')
    ])
    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required')
    ])

    def validate_password(self, field):
        min_length = current_app.config.get('PASSWORD_MIN_LENGTH', 8)
        if len(field.data or '') < min_length:
            raise ValidationError(f'Password must be at least {min_length} characters')
