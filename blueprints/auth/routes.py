"""
Authentication Routes
Register, login and logout with account lockout and login rate limiting
"""
from datetime import datetime, timezone
from flask import current_app
from flask_login import login_user, logout_user, current_user, login_required
from flask_wtf.csrf import generate_csrf
from . import auth_bp
from .forms import LoginForm, RegisterForm
from extensions import db, limiter
from models.users import User
from services.exceptions import DuplicateName
from services.type_service import TypeService
from utils.api import json_response, error_response


@auth_bp.route('/api/auth/csrf-token')
def csrf_token():
    """Token for the X-CSRFToken header of subsequent writes"""
    return json_response({'csrf_token': generate_csrf()})


@auth_bp.route('/api/auth/register', methods=['POST'])
@limiter.limit("5 per minute")
def register():
    """Create an account and give it the default expense and EMI types"""
    form = RegisterForm.from_json().validate_or_raise()
    email = form.email.data.strip().lower()

    if User.query.filter_by(email=email).first():
        raise DuplicateName('Email already in use')

    user = User(
        name=form.name.data.strip(),
        email=email,
        currency=current_app.config.get('DEFAULT_CURRENCY', 'INR'),
    )
    user.set_password(form.password.data)
    try:
        db.session.add(user)
        db.session.flush()
        TypeService.seed_default_types(user.id)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(f'Registered user {user.id}')
    return json_response({'id': user.id, 'email': user.email}, 201)


@auth_bp.route('/api/auth/login', methods=['POST'])
@limiter.limit("10 per minute")  # Rate limit login attempts
def login():
    """Session login with lockout after repeated failures"""
    form = LoginForm.from_json().validate_or_raise()
    email = form.email.data.strip().lower()

    user = User.query.filter_by(email=email).first()
    if user is None:
        # Generic error to prevent user enumeration
        return error_response('Invalid email or password', 401)

    if user.is_locked():
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        minutes_left = int((user.locked_until - now).total_seconds() / 60) + 1
        return error_response(
            f'Account temporarily locked due to multiple failed login attempts. '
            f'Try again in {minutes_left} minutes.', 423
        )

    if not user.is_active:
        return error_response('This account has been deactivated.', 403)

    if not user.check_password(form.password.data):
        user.record_failed_login()
        max_attempts = current_app.config.get('MAX_LOGIN_ATTEMPTS', 5)
        remaining = max(0, max_attempts - user.failed_login_attempts)
        if remaining > 0:
            return error_response(
                f'Invalid email or password. {remaining} attempts remaining before lockout.', 401
            )
        return error_response('Account locked due to too many failed attempts.', 423)

    login_user(user, remember=form.remember.data)
    user.update_last_login()
    user.reset_failed_logins()
    return json_response(user.to_dict())


@auth_bp.route('/api/auth/logout', methods=['POST'])
def logout():
    logout_user()
    return json_response({'logged_out': True})


@auth_bp.route('/api/auth/me')
@login_required
def me():
    return json_response(current_user.to_dict())
