"""
Tests for the User model and SettingsService: password hashing, login
lockout and preferences.
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from extensions import db
from services.exceptions import ValidationFailed
from services.settings_service import SettingsService


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

class TestPasswordHashing:
    def test_correct_password_accepted(self, app, user):
        assert user.check_password('TestPass1!') is True

    def test_wrong_password_rejected(self, app, user):
        assert user.check_password('WrongPass99!') is False

    def test_password_is_hashed(self, app, user):
        assert user.password_hash != 'TestPass1!', \
            "password_hash must store a hash, not the plain-text password"


# ---------------------------------------------------------------------------
# Login lockout
# ---------------------------------------------------------------------------

class TestLoginLockout:
    def test_account_not_locked_initially(self, app, user):
        assert user.is_locked() is False

    def test_lockout_applied_after_max_attempts(self, app, user):
        max_attempts = app.config['MAX_LOGIN_ATTEMPTS']
        for _ in range(max_attempts):
            user.record_failed_login()

        assert user.is_locked() is True
        assert user.locked_until is not None

    def test_failed_attempts_below_threshold_do_not_lock(self, app, user):
        max_attempts = app.config['MAX_LOGIN_ATTEMPTS']
        for _ in range(max_attempts - 1):
            user.record_failed_login()

        assert user.is_locked() is False

    def test_reset_clears_lockout(self, app, user):
        max_attempts = app.config['MAX_LOGIN_ATTEMPTS']
        for _ in range(max_attempts):
            user.record_failed_login()

        assert user.is_locked() is True

        user.reset_failed_logins()

        assert user.is_locked() is False
        assert user.failed_login_attempts == 0
        assert user.locked_until is None

    def test_expired_lockout_is_not_locked(self, app, user):
        """A locked_until timestamp in the past should not count as locked."""
        user.locked_until = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(minutes=1)
        db.session.commit()

        assert user.is_locked() is False


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------

class TestSettings:
    def test_defaults(self, as_user):
        assert SettingsService.get_settings() == {
            'email': 'alice@smartexpense.app',
            'currency': 'INR',
            'monthly_budget': None,
            'dark_mode': 'auto',
            'email_reminders': False,
            'reminder_frequency': '3_days_before',
        }

    def test_partial_update_leaves_other_fields(self, as_user):
        SettingsService.update_settings(dark_mode='dark')
        settings = SettingsService.update_settings(currency='usd', monthly_budget=Decimal('25000'))

        assert settings['currency'] == 'USD'
        assert settings['monthly_budget'] == 25000.0
        assert settings['dark_mode'] == 'dark'

    def test_none_clears_monthly_budget(self, as_user):
        SettingsService.update_settings(monthly_budget=Decimal('25000'))
        assert SettingsService.update_settings(monthly_budget=None)['monthly_budget'] is None

    @pytest.mark.parametrize('kwargs', [
        {'currency': 'RUPEE'},
        {'monthly_budget': Decimal('0')},
        {'dark_mode': 'sepia'},
        {'reminder_frequency': 'hourly'},
    ])
    def test_invalid_values_rejected(self, as_user, kwargs):
        with pytest.raises(ValidationFailed):
            SettingsService.update_settings(**kwargs)
