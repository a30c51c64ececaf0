"""
Expense type and EMI type management
"""
from . import types_bp
from .forms import ExpenseTypeForm, EmiTypeForm
from services.type_service import TypeService
from utils.api import json_response


@types_bp.route('/api/expense-types')
def expense_types():
    return json_response(TypeService.list_expense_types())


@types_bp.route('/api/expense-types', methods=['POST'])
def create_expense_type():
    form = ExpenseTypeForm.from_json().validate_or_raise()
    expense_type = TypeService.create_expense_type(form.name.data, form.icon.data or None)
    return json_response(expense_type.to_dict(), 201)


@types_bp.route('/api/expense-types/<int:type_id>', methods=['PUT'])
def update_expense_type(type_id):
    form = ExpenseTypeForm.from_json().validate_or_raise()
    expense_type = TypeService.update_expense_type(type_id, form.name.data)
    return json_response(expense_type.to_dict())


@types_bp.route('/api/expense-types/<int:type_id>', methods=['DELETE'])
def delete_expense_type(type_id):
    TypeService.delete_expense_type(type_id)
    return json_response({'id': type_id})


@types_bp.route('/api/emi-types')
def emi_types():
    return json_response(TypeService.list_emi_types())


@types_bp.route('/api/emi-types', methods=['POST'])
def create_emi_type():
    form = EmiTypeForm.from_json().validate_or_raise()
    emi_type = TypeService.create_emi_type(form.name.data)
    return json_response(emi_type.to_dict(), 201)


@types_bp.route('/api/emi-types/<int:type_id>', methods=['PUT'])
def update_emi_type(type_id):
    """Rename; EMIs filed under the old name follow"""
    form = EmiTypeForm.from_json().validate_or_raise()
    emi_type = TypeService.update_emi_type(type_id, form.name.data)
    return json_response(emi_type.to_dict())


@types_bp.route('/api/emi-types/<int:type_id>', methods=['DELETE'])
def delete_emi_type(type_id):
    TypeService.delete_emi_type(type_id)
    return json_response({'id': type_id})
