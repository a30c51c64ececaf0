from . import budgets_bp
from .forms import CategoryBudgetForm
from services.budget_service import BudgetService
from utils.api import json_response


@budgets_bp.route('/api/category-budgets')
def index():
    return json_response([budget.to_dict() for budget in BudgetService.list_budgets()])


@budgets_bp.route('/api/category-budgets', methods=['POST', 'PUT'])
def save():
    """Create or replace the budget for an expense type"""
    form = CategoryBudgetForm.from_json().validate_or_raise()
    budget = BudgetService.upsert_budget(form.type_id.data, form.amount.data)
    return json_response(budget.to_dict(), 201)


@budgets_bp.route('/api/category-budgets/status')
def status():
    return json_response(BudgetService.get_budget_status())


@budgets_bp.route('/api/category-budgets/alerts')
def alerts():
    return json_response(BudgetService.check_budget_alerts())
