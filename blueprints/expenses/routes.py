from . import expenses_bp
from .forms import ExpenseForm, ExpenseFilterForm
from services.expense_service import ExpenseService, SORT_ORDERS
from utils.api import json_response


@expenses_bp.route('/api/expenses')
def index():
    """Paginated, filtered expense list"""
    form = ExpenseFilterForm.from_args().validate_or_raise()
    sort = form.sort.data if form.sort.data in SORT_ORDERS else 'date_desc'
    data = ExpenseService.list_expenses(
        page=form.page.data or 1,
        limit=form.limit.data,
        sort=sort,
        **form.filters()
    )
    return json_response(data)


@expenses_bp.route('/api/expenses', methods=['POST'])
def create():
    form = ExpenseForm.from_json().validate_or_raise()
    expense = ExpenseService.create_expense(
        amount=form.amount.data,
        date=form.date.data,
        type_id=form.type_id.data,
        note=form.note.data or None,
    )
    return json_response(expense.to_dict(), 201)


@expenses_bp.route('/api/expenses/<int:expense_id>', methods=['DELETE'])
def delete(expense_id):
    ExpenseService.delete_expense(expense_id)
    return json_response({'id': expense_id})


@expenses_bp.route('/api/expenses/category-summary')
def category_summary():
    """Per-category totals over the same filters as the list"""
    form = ExpenseFilterForm.from_args().validate_or_raise()
    filters = form.filters()
    data = ExpenseService.category_summary(
        date_from=filters['date_from'],
        date_to=filters['date_to'],
        type_id=filters['type_id'],
        search=filters['search'],
    )
    return json_response(data)
