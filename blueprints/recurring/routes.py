from . import recurring_bp
from .forms import RecurringForm
from services.recurring_service import RecurringService
from utils.api import json_response


@recurring_bp.route('/api/recurring')
def index():
    return json_response(RecurringService.list_recurring())


@recurring_bp.route('/api/recurring', methods=['POST'])
def create():
    form = RecurringForm.from_json().validate_or_raise()
    payment = RecurringService.create_recurring(**form.values())
    return json_response(RecurringService.describe(payment), 201)


@recurring_bp.route('/api/recurring/<int:recurring_id>', methods=['PUT'])
def update(recurring_id):
    form = RecurringForm.from_json().validate_or_raise()
    payment = RecurringService.update_recurring(recurring_id, **form.values())
    return json_response(RecurringService.describe(payment))


@recurring_bp.route('/api/recurring/<int:recurring_id>', methods=['DELETE'])
def delete(recurring_id):
    RecurringService.delete_recurring(recurring_id)
    return json_response({'id': recurring_id})
