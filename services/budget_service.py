"""
Budget Service
==============
Per-category monthly budgets and the overall monthly budget stored on the
user's settings.

A category budget is compared against the current calendar month's expenses
of that type.  Budgets at or above BUDGET_ALERT_PERCENT of their limit (or
over it) are reported by check_budget_alerts().
"""
from datetime import date
from flask import current_app
from extensions import db
from models.budgets import CategoryBudget
from models.expense_types import ExpenseType
from models.expenses import Expense
from models.users import User
from services.aggregation import percentage, to_decimal, ZERO
from services.cycle_service import CycleService
from services.exceptions import ValidationFailed
from utils import db_helpers
from utils.db_helpers import user_query, user_get_or_404, set_user_id


class BudgetService:

    @staticmethod
    def list_budgets():
        return user_query(CategoryBudget).join(ExpenseType).order_by(ExpenseType.name.asc()).all()

    @staticmethod
    def upsert_budget(type_id, amount):
        """Create or replace the budget for one expense type."""
        if amount is None or amount <= 0:
            raise ValidationFailed('Amount must be positive')
        expense_type = user_get_or_404(ExpenseType, type_id, 'Expense type')

        budget = user_query(CategoryBudget).filter_by(type_id=expense_type.id).first()
        try:
            if budget is None:
                budget = set_user_id(CategoryBudget(type_id=expense_type.id, amount=amount))
                db.session.add(budget)
            else:
                budget.amount = amount
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        current_app.logger.info(f'Budget for type {expense_type.id} set to {amount}')
        return budget

    @staticmethod
    def _month_spend_by_type(today):
        start, end = CycleService.month_bounds(today.year, today.month - 1)
        rows = user_query(Expense).with_entities(Expense.type_id, db.func.sum(Expense.amount)) \
            .filter(Expense.date >= start, Expense.date <= end) \
            .group_by(Expense.type_id).all()
        return {type_id: to_decimal(total) for type_id, total in rows}

    @staticmethod
    def get_budget_status(today=None):
        """
        Spent vs allocated for every category budget in the current month.

        Returns:
            list[dict] — ``type_id, type, allocated, spent, remaining,
            percentage, over_budget`` per budget.
        """
        today = today or date.today()
        spent_by_type = BudgetService._month_spend_by_type(today)

        status = []
        for budget in BudgetService.list_budgets():
            allocated = to_decimal(budget.amount)
            spent = spent_by_type.get(budget.type_id, ZERO)
            status.append({
                'budget_id': budget.id,
                'type_id': budget.type_id,
                'type': budget.type.name if budget.type else None,
                'allocated': float(allocated),
                'spent': float(spent),
                'remaining': float(allocated - spent),
                'percentage': float(percentage(spent, allocated)),
                'over_budget': spent > allocated,
            })
        return status

    @staticmethod
    def check_budget_alerts(today=None):
        """
        Budgets close to or over their limit.

        Category budgets are included at ``BUDGET_ALERT_PERCENT`` or more.  The
        overall monthly budget from the user's settings is checked the same
        way against total spending this month.
        """
        today = today or date.today()
        threshold = current_app.config.get('BUDGET_ALERT_PERCENT', 80)

        alerts = []
        for item in BudgetService.get_budget_status(today):
            if item['percentage'] >= threshold:
                alerts.append({**item, 'scope': 'category',
                               'level': 'over' if item['over_budget'] else 'warning'})

        user_id = db_helpers.get_user_id()
        user = db.session.get(User, user_id) if user_id is not None else None
        if user is not None and user.monthly_budget:
            allocated = to_decimal(user.monthly_budget)
            spent = sum(BudgetService._month_spend_by_type(today).values(), ZERO)
            pct = percentage(spent, allocated)
            if pct >= threshold:
                alerts.append({
                    'scope': 'overall',
                    'type': None,
                    'allocated': float(allocated),
                    'spent': float(spent),
                    'remaining': float(allocated - spent),
                    'percentage': float(pct),
                    'over_budget': spent > allocated,
                    'level': 'over' if spent > allocated else 'warning',
                })

        if alerts:
            current_app.logger.debug(f'{len(alerts)} budget alert(s) for {today:%Y-%m}')
        return alerts
