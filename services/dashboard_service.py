"""
Dashboard Service
=================
Figures and reminders for the dashboard.

  get_stats()              — spending this month vs last month, budget,
                             khata totals and fixed monthly outflow
  get_payment_reminders()  — what is still to be paid this month
  get_collect_reminders()  — money lent that is due back within a week

Reminder urgency
----------------
  0  overdue
  1  due today
  2  due within 3 days
  3  later

Reminders are sorted by urgency, then by due date.
"""
from datetime import date, timedelta
from dateutil.relativedelta import relativedelta
from flask import current_app
from extensions import db
from models.emis import EMI
from models.expenses import Expense
from models.paid_marks import PaidMark
from models.recurring import RecurringPayment
from models.transactions import Transaction
from models.users import User
from services.aggregation import delta_percent, outstanding, outstanding_totals, to_decimal, ZERO
from services.cycle_service import CycleService
from utils import db_helpers
from utils.db_helpers import user_query


def urgency(due_date, today):
    days = (due_date - today).days
    if days < 0:
        return 0
    if days == 0:
        return 1
    if days <= 3:
        return 2
    return 3


class DashboardService:

    @staticmethod
    def _spend_between(start, end):
        total = user_query(Expense).with_entities(db.func.sum(Expense.amount)) \
            .filter(Expense.date >= start, Expense.date <= end).scalar()
        return to_decimal(total)

    @staticmethod
    def get_stats(today=None):
        today = today or date.today()
        month_start, month_end = CycleService.month_bounds(today.year, today.month - 1)
        prev = month_start - relativedelta(months=1)
        prev_start, prev_end = CycleService.month_bounds(prev.year, prev.month - 1)

        this_month = DashboardService._spend_between(month_start, month_end)
        last_month = DashboardService._spend_between(prev_start, prev_end)

        totals = outstanding_totals(
            user_query(Transaction).filter(Transaction.settled.is_(False)).all()
        )

        emi_total = to_decimal(user_query(EMI).with_entities(db.func.sum(EMI.amount)).scalar())
        recurring_total = to_decimal(
            user_query(RecurringPayment).with_entities(db.func.sum(RecurringPayment.amount)).scalar()
        )

        user_id = db_helpers.get_user_id()
        user = db.session.get(User, user_id) if user_id is not None else None
        monthly_budget = user.monthly_budget if user is not None else None

        return {
            'this_month_spend': float(this_month),
            'last_month_spend': float(last_month),
            'delta_percent': float(delta_percent(this_month, last_month)),
            'monthly_budget': float(monthly_budget) if monthly_budget is not None else None,
            'to_collect': float(totals['lend']),
            'to_pay': float(totals['borrow']),
            'fixed_outflow': float(emi_total + recurring_total),
        }

    @staticmethod
    def get_payment_reminders(today=None):
        """
        Unpaid EMI and recurring cycles for this month plus unsettled borrows.

        EMIs are only included while active this month.  Due dates use the
        due day clamped into the current month.  Borrows are included when
        due between the start of this month and a grace period after its end.
        """
        today = today or date.today()
        month = today.month - 1
        month_start, month_end = CycleService.month_bounds(today.year, month)
        grace = current_app.config.get('BORROW_REMINDER_GRACE_DAYS', 7)

        paid = {
            (mark.item_type, mark.item_id)
            for mark in user_query(PaidMark).filter_by(month=month, year=today.year).all()
        }

        reminders = []

        emis = user_query(EMI).filter(EMI.start_date <= month_end, EMI.end_date >= month_start).all()
        for emi in emis:
            if ('emi', emi.id) in paid:
                continue
            due = CycleService.cycle_date(today.year, month, emi.due_day)
            reminders.append(DashboardService._reminder('emi', emi.id, emi.name, emi.amount, due, today))

        for payment in user_query(RecurringPayment).all():
            if ('recurring', payment.id) in paid:
                continue
            due = CycleService.cycle_date(today.year, month, payment.due_day)
            reminders.append(DashboardService._reminder(
                'recurring', payment.id, payment.name, payment.amount, due, today
            ))

        borrows = user_query(Transaction).filter(
            Transaction.type == 'borrow',
            Transaction.settled.is_(False),
            Transaction.parent_id.is_(None),
            Transaction.due_date >= month_start,
            Transaction.due_date <= month_end + timedelta(days=grace),
        ).all()
        for txn in borrows:
            reminders.append(DashboardService._reminder(
                'borrow', txn.id, f'Return to {txn.person.name}', outstanding(txn), txn.due_date, today
            ))

        reminders.sort(key=lambda r: (r['urgency'], r['due_date']))
        return reminders

    @staticmethod
    def _reminder(kind, item_id, title, amount, due, today):
        return {
            'id': f'{kind}:{item_id}',
            'kind': kind,
            'item_id': item_id,
            'title': title,
            'amount': float(to_decimal(amount)),
            'due_date': due.isoformat(),
            'urgency': urgency(due, today),
        }

    @staticmethod
    def get_collect_reminders(today=None):
        """Unsettled lends due in the next COLLECT_REMINDER_DAYS days, soonest first."""
        today = today or date.today()
        window = current_app.config.get('COLLECT_REMINDER_DAYS', 7)

        lends = user_query(Transaction).filter(
            Transaction.type == 'lend',
            Transaction.settled.is_(False),
            Transaction.parent_id.is_(None),
            Transaction.due_date >= today,
            Transaction.due_date <= today + timedelta(days=window),
        ).order_by(Transaction.due_date.asc(), Transaction.id.asc()).all()

        return [
            {
                'id': txn.id,
                'person_id': txn.person_id,
                'person_name': txn.person.name,
                'amount': float(max(outstanding(txn), ZERO)),
                'due_date': txn.due_date.isoformat(),
                'due_in_days': (txn.due_date - today).days,
            }
            for txn in lends
        ]
