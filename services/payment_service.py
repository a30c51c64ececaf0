"""
Payment Service
===============
Marking one monthly cycle of an EMI or recurring payment as paid.

Marking a cycle paid writes two rows in a single database transaction:

  * an Expense for the plan's amount, dated on the paid date, filed under the
    expense type matching the plan's type (EMI type name / recurring type),
    falling back to "Other" and creating "Other" if the user has deleted it;
  * a PaidMark for ``(item_type, item_id, month, year)`` linked to that
    expense.

A cycle can only be marked once; the unique constraint on PaidMark backs up
the explicit duplicate check.
"""
from flask import current_app
from sqlalchemy.exc import IntegrityError
from extensions import db
from models.emis import EMI
from models.expense_types import ExpenseType
from models.expenses import Expense
from models.paid_marks import PaidMark
from models.recurring import RecurringPayment
from services.exceptions import DuplicatePaymentMark, ValidationFailed
from utils.db_helpers import user_query, user_get_or_404, set_user_id

FALLBACK_EXPENSE_TYPE = 'Other'


class PaymentService:
    """Paid marks for EMI and recurring-payment cycles."""

    @staticmethod
    def find_mark(item_type, item_id, month, year):
        return user_query(PaidMark).filter_by(
            item_type=item_type, item_id=item_id, month=month, year=year
        ).first()

    @staticmethod
    def check_paid(item_type, item_id, month, year):
        """Returns ``(paid, mark_or_None)`` for one cycle."""
        mark = PaymentService.find_mark(item_type, item_id, month, year)
        return mark is not None, mark

    @staticmethod
    def list_marks(month=None, year=None):
        """Paid marks, newest first, optionally limited to one month and/or year."""
        query = user_query(PaidMark)
        if month is not None:
            query = query.filter(PaidMark.month == month)
        if year is not None:
            query = query.filter(PaidMark.year == year)
        return query.order_by(PaidMark.created_at.desc(), PaidMark.id.desc()).all()

    @staticmethod
    def resolve_expense_type(preferred_name):
        """
        Expense type for a payment: the one named like *preferred_name*
        (case-insensitive), else "Other", else a newly created "Other".

        The new type is added to the session but not committed.
        """
        if preferred_name:
            preferred = user_query(ExpenseType).filter(
                db.func.lower(ExpenseType.name) == preferred_name.strip().lower()
            ).first()
            if preferred:
                return preferred

        fallback = user_query(ExpenseType).filter_by(name=FALLBACK_EXPENSE_TYPE).first()
        if fallback:
            return fallback

        created = set_user_id(ExpenseType(name=FALLBACK_EXPENSE_TYPE, is_default=True))
        db.session.add(created)
        db.session.flush()
        current_app.logger.info(f'Created missing "{FALLBACK_EXPENSE_TYPE}" expense type')
        return created

    @staticmethod
    def mark_paid(item_type, item_id, month, year, paid_date, note=None):
        """
        Mark cycle ``(year, month)`` of an EMI / recurring payment as paid.

        Args:
            item_type: 'emi' or 'recurring'.
            item_id:   ID of the EMI or RecurringPayment.
            month:     zero-based month (0 = January).
            year:      four-digit year.
            paid_date: date the payment was made (becomes the expense date).
            note:      expense note; defaults to "EMI payment" / "RECURRING payment".

        Returns:
            (PaidMark, Expense)

        Raises:
            ValidationFailed:     bad item type or cycle.
            DuplicatePaymentMark: the cycle is already marked paid.
            NotFound:             the EMI / recurring payment does not exist.
        """
        if item_type not in PaidMark.ITEM_TYPES:
            raise ValidationFailed('Item type must be emi or recurring')
        if not 0 <= month <= 11 or year < 2000:
            raise ValidationFailed('Invalid month or year')

        if PaymentService.find_mark(item_type, item_id, month, year) is not None:
            raise DuplicatePaymentMark()

        if item_type == 'emi':
            item = user_get_or_404(EMI, item_id, 'EMI')
            preferred_type = item.emi_type
        else:
            item = user_get_or_404(RecurringPayment, item_id, 'Recurring payment')
            preferred_type = item.type

        try:
            expense_type = PaymentService.resolve_expense_type(preferred_type)

            expense = set_user_id(Expense(
                amount=item.amount,
                date=paid_date,
                type_id=expense_type.id,
                note=note if note is not None else f'{item_type.upper()} payment',
                source=item_type,
                source_id=item.id,
            ))
            db.session.add(expense)
            db.session.flush()

            mark = set_user_id(PaidMark(
                item_type=item_type,
                item_id=item.id,
                month=month,
                year=year,
                paid_date=paid_date,
                note=note,
                expense_id=expense.id,
                emi_id=item.id if item_type == 'emi' else None,
                recurring_id=item.id if item_type == 'recurring' else None,
            ))
            db.session.add(mark)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise DuplicatePaymentMark()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(
            f'Marked {item_type} {item.id} paid for {year}-{month + 1:02d} (expense {expense.id})'
        )
        return mark, expense
