"""
Report Service
==============
Read-only summaries for the reports page.

  category_report()  — spending per expense type for one month
  monthly_trend()    — total spending per month, zero-filled, oldest first
  emi_summary()      — EMI load per month plus overall EMI / recurring totals
"""
from datetime import date
from dateutil.relativedelta import relativedelta
from flask import current_app
from extensions import db
from models.emis import EMI
from models.expense_types import ExpenseType
from models.expenses import Expense
from models.recurring import RecurringPayment
from services.aggregation import to_decimal, ZERO
from services.cycle_service import CycleService
from utils.db_helpers import user_query


def _month_starts(today, count):
    """First day of the last *count* months, oldest first, ending with today's month."""
    current = CycleService.start_of_month(today)
    return [current - relativedelta(months=offset) for offset in range(count - 1, -1, -1)]


class ReportService:

    @staticmethod
    def category_report(month=None, year=None):
        """``[{'name', 'value'}]`` for a zero-based month, largest first."""
        today = date.today()
        month = today.month - 1 if month is None else month
        year = today.year if year is None else year
        start, end = CycleService.month_bounds(year, month)

        rows = user_query(Expense).with_entities(
            Expense.type_id, ExpenseType.name, db.func.sum(Expense.amount)
        ).outerjoin(ExpenseType, ExpenseType.id == Expense.type_id) \
            .filter(Expense.date >= start, Expense.date <= end) \
            .group_by(Expense.type_id, ExpenseType.name).all()

        data = [{'name': name or 'Unknown', 'value': float(to_decimal(total))} for _, name, total in rows]
        data.sort(key=lambda item: item['value'], reverse=True)
        return data

    @staticmethod
    def monthly_trend(today=None, months=None):
        """Spending per month labelled ``"Mon yy"`` (e.g. ``"Jan 24"``)."""
        today = today or date.today()
        months = months or current_app.config.get('TREND_MONTHS', 6)
        starts = _month_starts(today, months)
        range_end = CycleService.month_bounds(today.year, today.month - 1)[1]

        totals = {}
        expenses = user_query(Expense).with_entities(Expense.date, Expense.amount) \
            .filter(Expense.date >= starts[0], Expense.date <= range_end).all()
        for expense_date, amount in expenses:
            key = (expense_date.year, expense_date.month)
            totals[key] = totals.get(key, ZERO) + to_decimal(amount)

        return [
            {'month': start.strftime('%b %y'), 'total': float(totals.get((start.year, start.month), ZERO))}
            for start in starts
        ]

    @staticmethod
    def emi_summary(today=None, months=None):
        """
        EMI load for each of the last *months* months (``YYYY-MM``).

        An EMI counts towards a month when it started on or before the month's
        last day and ends on or after its first day.
        """
        today = today or date.today()
        months = months or current_app.config.get('EMI_SUMMARY_MONTHS', 12)
        emis = user_query(EMI).all()

        monthly = []
        for start in _month_starts(today, months):
            _, end = CycleService.month_bounds(start.year, start.month - 1)
            active = [emi for emi in emis if emi.start_date <= end and emi.end_date >= start]
            monthly.append({
                'month': start.strftime('%Y-%m'),
                'total': float(sum((to_decimal(emi.amount) for emi in active), ZERO)),
                'count': len(active),
            })

        total_recurring = user_query(RecurringPayment).with_entities(
            db.func.sum(RecurringPayment.amount)
        ).scalar()

        return {
            'monthly_emi': monthly,
            'total_emi': float(sum((to_decimal(emi.amount) for emi in emis), ZERO)),
            'total_recurring': float(to_decimal(total_recurring)),
        }
