"""
Expense Service
===============
Manual expenses plus the filtered, paginated expense list and its
per-category summary.

Filters (all optional, combined with AND):
  date_from / date_to   — inclusive date range
  type_id               — one expense type
  search                — case-insensitive substring of the note
  min_amount/max_amount — inclusive amount range (list only)

Sort keys: date_desc (default), date_asc, amount_desc, amount_asc.
"""
from flask import current_app
from extensions import db
from models.expense_types import ExpenseType
from models.expenses import Expense
from services.aggregation import category_breakdown
from services.exceptions import ValidationFailed
from utils.db_helpers import user_query, user_get_or_404, set_user_id

SORT_ORDERS = {
    'date_desc': (Expense.date.desc(), Expense.id.desc()),
    'date_asc': (Expense.date.asc(), Expense.id.asc()),
    'amount_desc': (Expense.amount.desc(), Expense.id.desc()),
    'amount_asc': (Expense.amount.asc(), Expense.id.asc()),
}


class ExpenseService:

    @staticmethod
    def create_expense(amount, date, type_id, note=None):
        if amount is None or amount <= 0:
            raise ValidationFailed('Amount must be positive')
        expense_type = user_get_or_404(ExpenseType, type_id, 'Expense type')

        expense = set_user_id(Expense(
            amount=amount,
            date=date,
            type_id=expense_type.id,
            note=note,
            source='manual',
        ))
        try:
            db.session.add(expense)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return expense

    @staticmethod
    def delete_expense(expense_id):
        expense = user_get_or_404(Expense, expense_id, 'Expense')
        try:
            db.session.delete(expense)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        current_app.logger.info(f'Deleted expense {expense_id}')
        return expense_id

    @staticmethod
    def filtered_query(date_from=None, date_to=None, type_id=None, search=None,
                       min_amount=None, max_amount=None):
        """Current user's expenses narrowed by the given filters."""
        query = user_query(Expense)
        if date_from is not None:
            query = query.filter(Expense.date >= date_from)
        if date_to is not None:
            query = query.filter(Expense.date <= date_to)
        if type_id is not None:
            query = query.filter(Expense.type_id == type_id)
        if search:
            query = query.filter(Expense.note.ilike(f'%{search}%'))
        if min_amount is not None:
            query = query.filter(Expense.amount >= min_amount)
        if max_amount is not None:
            query = query.filter(Expense.amount <= max_amount)
        return query

    @staticmethod
    def list_expenses(page=1, limit=None, sort='date_desc', **filters):
        """
        One page of expenses.

        Returns:
            dict — ``{'items': [...], 'pagination': {page, limit, total, total_pages}}``
        """
        if limit is None:
            limit = current_app.config.get('EXPENSES_PER_PAGE', 20)
        max_limit = current_app.config.get('EXPENSES_MAX_PER_PAGE', 100)
        if page < 1:
            raise ValidationFailed('Page must be at least 1')
        if not 1 <= limit <= max_limit:
            raise ValidationFailed(f'Limit must be between 1 and {max_limit}')

        query = ExpenseService.filtered_query(**filters)
        total = query.count()
        items = query.order_by(*SORT_ORDERS.get(sort, SORT_ORDERS['date_desc'])) \
            .offset((page - 1) * limit).limit(limit).all()

        return {
            'items': [expense.to_dict() for expense in items],
            'pagination': {
                'page': page,
                'limit': limit,
                'total': total,
                'total_pages': (total + limit - 1) // limit,
            },
        }

    @staticmethod
    def category_summary(date_from=None, date_to=None, type_id=None, search=None):
        """Totals and percentage share per expense type over the filtered expenses."""
        filtered = ExpenseService.filtered_query(
            date_from=date_from, date_to=date_to, type_id=type_id, search=search
        ).subquery()

        rows = db.session.query(
            filtered.c.type_id,
            ExpenseType.name,
            db.func.sum(filtered.c.amount),
        ).outerjoin(
            ExpenseType, ExpenseType.id == filtered.c.type_id
        ).group_by(filtered.c.type_id, ExpenseType.name).all()

        return [
            {**item, 'total_amount': float(item['total_amount']), 'percentage': float(item['percentage'])}
            for item in category_breakdown(rows)
        ]
