"""
User preferences: currency, overall monthly budget, appearance and reminder
options.  Only the fields passed in are changed.
"""
from flask import current_app
from extensions import db
from models.users import User
from services.exceptions import NotFound, ValidationFailed
from utils import db_helpers

_UNSET = object()


class SettingsService:

    @staticmethod
    def _current_user():
        user_id = db_helpers.get_user_id()
        user = db.session.get(User, user_id) if user_id is not None else None
        if user is None:
            raise NotFound('User not found')
        return user

    @staticmethod
    def get_settings():
        return SettingsService._current_user().settings_dict()

    @staticmethod
    def update_settings(currency=_UNSET, monthly_budget=_UNSET, dark_mode=_UNSET,
                        email_reminders=_UNSET, reminder_frequency=_UNSET):
        """
        Update the given preferences.  ``monthly_budget=None`` clears the
        budget; any other value must be positive.
        """
        user = SettingsService._current_user()

        if currency is not _UNSET:
            currency = (currency or current_app.config.get('DEFAULT_CURRENCY', 'INR')).strip().upper()
            if len(currency) != 3:
                raise ValidationFailed('Currency must be a 3-letter code')
            user.currency = currency
        if monthly_budget is not _UNSET:
            if monthly_budget is not None and monthly_budget <= 0:
                raise ValidationFailed('Monthly budget must be positive')
            user.monthly_budget = monthly_budget
        if dark_mode is not _UNSET:
            if dark_mode not in User.DARK_MODES:
                raise ValidationFailed('Dark mode must be auto, light or dark')
            user.dark_mode = dark_mode
        if email_reminders is not _UNSET:
            user.email_reminders = bool(email_reminders)
        if reminder_frequency is not _UNSET:
            if reminder_frequency not in User.REMINDER_FREQUENCIES:
                raise ValidationFailed('Invalid reminder frequency')
            user.reminder_frequency = reminder_frequency

        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        current_app.logger.info(f'Updated settings for user {user.id}')
        return user.settings_dict()
