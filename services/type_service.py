"""
Type Service
============
Expense types (categories for expenses) and EMI types (categories for EMIs).

Names are unique per user, compared case-insensitively.  A type that is still
referenced cannot be deleted.  EMIs store their type by name, so renaming an
EMI type rewrites the name on every matching EMI in the same transaction.
"""
from flask import current_app
from extensions import db
from models.emis import EMI
from models.expense_types import ExpenseType, EmiType
from models.expenses import Expense
from services.exceptions import DuplicateName, InUse, ValidationFailed
from utils.db_helpers import user_query, user_get_or_404, set_user_id

DEFAULT_EXPENSE_TYPES = [
    'Food',
    'Petrol',
    'Pet',
    'Travel',
    'Grocery',
    'Online Shopping',
    'Rent',
    'Maintenance',
    'Medical',
    'Entertainment',
    'Utilities',
    'Other',
]

DEFAULT_EMI_TYPES = [
    'Home Loan',
    'Car Loan',
    'Personal Loan',
    'Education Loan',
    'Credit Card',
    'Other',
]


def _same_name(column, name):
    return db.func.lower(column) == name.lower()


class TypeService:

    @staticmethod
    def seed_default_types(user_id):
        """
        Give *user_id* the default expense and EMI types.

        Each set is only added when the user has none of that kind yet, so it
        is safe to run repeatedly.  Adds to the session without committing.

        Returns:
            (int, int) — expense types and EMI types created.
        """
        created_expense = created_emi = 0
        if ExpenseType.query.filter_by(user_id=user_id).count() == 0:
            for name in DEFAULT_EXPENSE_TYPES:
                db.session.add(ExpenseType(user_id=user_id, name=name, is_default=True))
                created_expense += 1
        if EmiType.query.filter_by(user_id=user_id).count() == 0:
            for name in DEFAULT_EMI_TYPES:
                db.session.add(EmiType(user_id=user_id, name=name, is_default=True))
                created_emi += 1
        return created_expense, created_emi

    # ------------------------------------------------------------------
    # Expense types
    # ------------------------------------------------------------------

    @staticmethod
    def list_expense_types():
        """Expense types with their expense counts, defaults first then by name."""
        counts = dict(
            user_query(Expense).with_entities(Expense.type_id, db.func.count(Expense.id))
            .group_by(Expense.type_id).all()
        )
        types = user_query(ExpenseType).order_by(ExpenseType.is_default.desc(), ExpenseType.name.asc()).all()
        return [t.to_dict(expense_count=counts.get(t.id, 0)) for t in types]

    @staticmethod
    def create_expense_type(name, icon=None):
        name = (name or '').strip()
        if not name:
            raise ValidationFailed('Type name is required')
        if len(name) > 60:
            raise ValidationFailed('Type name must be at most 60 characters')
        if user_query(ExpenseType).filter(_same_name(ExpenseType.name, name)).first():
            raise DuplicateName('Type name already exists')

        expense_type = set_user_id(ExpenseType(name=name, icon=icon, is_default=False))
        try:
            db.session.add(expense_type)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return expense_type

    @staticmethod
    def update_expense_type(type_id, name):
        name = (name or '').strip()
        if not name:
            raise ValidationFailed('Type name is required')
        expense_type = user_get_or_404(ExpenseType, type_id, 'Expense type')
        duplicate = user_query(ExpenseType).filter(
            ExpenseType.id != expense_type.id, _same_name(ExpenseType.name, name)
        ).first()
        if duplicate:
            raise DuplicateName('Type name already exists')

        expense_type.name = name
        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return expense_type

    @staticmethod
    def delete_expense_type(type_id):
        expense_type = user_get_or_404(ExpenseType, type_id, 'Expense type')
        if user_query(Expense).filter_by(type_id=expense_type.id).count() > 0:
            raise InUse('Cannot delete expense type linked to expenses')
        try:
            db.session.delete(expense_type)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        current_app.logger.info(f'Deleted expense type {type_id}')
        return type_id

    # ------------------------------------------------------------------
    # EMI types
    # ------------------------------------------------------------------

    @staticmethod
    def list_emi_types():
        """EMI types with the number of EMIs filed under each (matched by name)."""
        counts = {}
        for emi_type, count in user_query(EMI).with_entities(EMI.emi_type, db.func.count(EMI.id)) \
                .group_by(EMI.emi_type).all():
            counts[emi_type.lower()] = counts.get(emi_type.lower(), 0) + count
        types = user_query(EmiType).order_by(EmiType.is_default.desc(), EmiType.name.asc()).all()
        return [t.to_dict(emi_count=counts.get(t.name.lower(), 0)) for t in types]

    @staticmethod
    def _check_emi_type_name(name):
        name = (name or '').strip()
        if len(name) < 2:
            raise ValidationFailed('EMI type must be at least 2 characters')
        if len(name) > 60:
            raise ValidationFailed('EMI type must be at most 60 characters')
        return name

    @staticmethod
    def create_emi_type(name):
        name = TypeService._check_emi_type_name(name)
        if user_query(EmiType).filter(_same_name(EmiType.name, name)).first():
            raise DuplicateName('EMI type already exists')

        emi_type = set_user_id(EmiType(name=name, is_default=False))
        try:
            db.session.add(emi_type)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return emi_type

    @staticmethod
    def update_emi_type(type_id, name):
        """Rename an EMI type and every EMI filed under its old name."""
        name = TypeService._check_emi_type_name(name)
        emi_type = user_get_or_404(EmiType, type_id, 'EMI type')
        duplicate = user_query(EmiType).filter(
            EmiType.id != emi_type.id, _same_name(EmiType.name, name)
        ).first()
        if duplicate:
            raise DuplicateName('EMI type already exists')

        old_name = emi_type.name
        renamed = 0
        try:
            emi_type.name = name
            if old_name != name:
                renamed = user_query(EMI).filter(_same_name(EMI.emi_type, old_name)).update(
                    {'emi_type': name}, synchronize_session=False
                )
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(f'Renamed EMI type "{old_name}" to "{name}" on {renamed} EMI(s)')
        return emi_type

    @staticmethod
    def delete_emi_type(type_id):
        emi_type = user_get_or_404(EmiType, type_id, 'EMI type')
        if user_query(EMI).filter(_same_name(EMI.emi_type, emi_type.name)).count() > 0:
            raise InUse("This EMI type is used and can't be deleted.")
        try:
            db.session.delete(emi_type)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        current_app.logger.info(f'Deleted EMI type {type_id}')
        return type_id
