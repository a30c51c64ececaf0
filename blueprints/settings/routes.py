from flask import request
from . import settings_bp
from .forms import SettingsForm
from services.settings_service import SettingsService
from utils.api import json_response


@settings_bp.route('/api/settings')
def index():
    return json_response(SettingsService.get_settings())


@settings_bp.route('/api/settings', methods=['PUT'])
def update():
    form = SettingsForm.from_json().validate_or_raise()
    body = request.get_json(silent=True) or {}

    changes = {}
    for name in ('currency', 'monthly_budget', 'dark_mode', 'email_reminders', 'reminder_frequency'):
        if form.has(name):
            changes[name] = form[name].data
    # An explicit null clears the overall budget
    if 'monthly_budget' in body and body['monthly_budget'] is None:
        changes['monthly_budget'] = None

    return json_response(SettingsService.update_settings(**changes))
