"""
Recurring payments: open-ended monthly bills such as rent or subscriptions.
Unlike EMIs they have no end date; the next due date follows the most recent
paid mark (see CycleService.recurring_next_due).
"""
from datetime import date
from flask import current_app
from extensions import db
from models.recurring import RecurringPayment
from services.cycle_service import CycleService
from services.exceptions import ValidationFailed
from utils.db_helpers import user_query, user_get_or_404, set_user_id


class RecurringService:

    @staticmethod
    def _apply(payment, name, type, amount, due_day):
        if not (name or '').strip():
            raise ValidationFailed('Name is required')
        if not (type or '').strip():
            raise ValidationFailed('Type is required')
        if amount is None or amount <= 0:
            raise ValidationFailed('Amount must be positive')
        if not 1 <= due_day <= 31:
            raise ValidationFailed('Due day must be between 1 and 31')

        payment.name = name.strip()
        payment.type = type.strip()
        payment.amount = amount
        payment.due_day = due_day
        return payment

    @staticmethod
    def create_recurring(name, type, amount, due_day):
        payment = RecurringService._apply(set_user_id(RecurringPayment()), name, type, amount, due_day)
        try:
            db.session.add(payment)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        current_app.logger.info(f'Created recurring payment {payment.id}')
        return payment

    @staticmethod
    def update_recurring(recurring_id, name, type, amount, due_day):
        payment = user_get_or_404(RecurringPayment, recurring_id, 'Recurring payment')
        RecurringService._apply(payment, name, type, amount, due_day)
        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return payment

    @staticmethod
    def delete_recurring(recurring_id):
        payment = user_get_or_404(RecurringPayment, recurring_id, 'Recurring payment')
        try:
            db.session.delete(payment)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        current_app.logger.info(f'Deleted recurring payment {recurring_id}')
        return recurring_id

    @staticmethod
    def describe(payment, today=None):
        today = today or date.today()
        window = current_app.config.get('MARK_PAID_WINDOW_DAYS', 7)
        latest = CycleService.latest_mark(payment.paid_marks)
        next_due_at = CycleService.recurring_next_due(payment.due_day, latest, today)

        data = payment.to_dict()
        data['paid_marks'] = [mark.to_dict() for mark in payment.paid_marks]
        data.update(CycleService.due_summary(next_due_at, today, window))
        return data

    @staticmethod
    def list_recurring(today=None):
        payments = user_query(RecurringPayment).order_by(RecurringPayment.due_day.asc(),
                                                         RecurringPayment.id.asc()).all()
        return [RecurringService.describe(payment, today) for payment in payments]
