"""
EMI Service
===========
Create, update, delete and list EMIs (fixed-term installment plans).

An EMI's type must be one of the user's configured EMI types.  The match is
case-insensitive and the type's canonical spelling is stored on the EMI.
``total_emis`` is derived from the start and end dates on every write.

List and detail views are decorated with cycle information from
CycleService: paid count, next unpaid due date, days until it and whether the
"mark as paid" action should be offered.
"""
from datetime import date
from flask import current_app
from extensions import db
from models.emis import EMI
from models.expense_types import EmiType
from services.cycle_service import CycleService
from services.exceptions import ValidationFailed
from utils.db_helpers import user_query, user_get_or_404, set_user_id


class EmiService:

    @staticmethod
    def resolve_emi_type(name):
        """Canonical EmiType for *name* (case-insensitive) or ValidationFailed."""
        name = (name or '').strip()
        emi_type = None
        if name:
            emi_type = user_query(EmiType).filter(db.func.lower(EmiType.name) == name.lower()).first()
        if emi_type is None:
            raise ValidationFailed('Invalid EMI type. Please select a configured EMI type.')
        return emi_type

    @staticmethod
    def _apply(emi, name, amount, emi_type, due_day, start_date, end_date):
        if not (name or '').strip():
            raise ValidationFailed('Name is required')
        if amount is None or amount <= 0:
            raise ValidationFailed('Amount must be positive')
        if not 1 <= due_day <= 31:
            raise ValidationFailed('Due day must be between 1 and 31')

        emi.name = name.strip()
        emi.amount = amount
        emi.emi_type = EmiService.resolve_emi_type(emi_type).name
        emi.due_day = due_day
        emi.start_date = start_date
        emi.end_date = end_date
        emi.total_emis = CycleService.installment_count(start_date, end_date)
        return emi

    @staticmethod
    def create_emi(name, amount, emi_type, due_day, start_date, end_date):
        emi = EmiService._apply(set_user_id(EMI()), name, amount, emi_type, due_day, start_date, end_date)
        try:
            db.session.add(emi)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        current_app.logger.info(f'Created EMI {emi.id} ({emi.total_emis} installments)')
        return emi

    @staticmethod
    def update_emi(emi_id, name, amount, emi_type, due_day, start_date, end_date):
        emi = user_get_or_404(EMI, emi_id, 'EMI')
        EmiService._apply(emi, name, amount, emi_type, due_day, start_date, end_date)
        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return emi

    @staticmethod
    def delete_emi(emi_id):
        """Delete an EMI; its paid marks go with it, the expenses they created stay."""
        emi = user_get_or_404(EMI, emi_id, 'EMI')
        try:
            db.session.delete(emi)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        current_app.logger.info(f'Deleted EMI {emi_id}')
        return emi_id

    @staticmethod
    def describe(emi, today=None):
        """EMI as a dict with its paid marks and next-due fields."""
        today = today or date.today()
        window = current_app.config.get('MARK_PAID_WINDOW_DAYS', 7)
        paid_cycles = CycleService.paid_cycles_from_marks(emi.paid_marks)
        next_due_at = CycleService.next_due(emi, paid_cycles, today)

        data = emi.to_dict()
        data['paid_marks'] = [mark.to_dict() for mark in emi.paid_marks]
        data['paid_count'] = len(paid_cycles)
        data.update(CycleService.due_summary(next_due_at, today, window))
        return data

    @staticmethod
    def list_emis(today=None):
        emis = user_query(EMI).order_by(EMI.created_at.desc(), EMI.id.desc()).all()
        return [EmiService.describe(emi, today) for emi in emis]

    @staticmethod
    def get_emi_detail(emi_id, today=None):
        """Describe one EMI and attach its schedule grouped by month."""
        emi = user_get_or_404(EMI, emi_id, 'EMI')
        data = EmiService.describe(emi, today)
        schedule = CycleService.schedule_for(emi, CycleService.paid_cycles_from_marks(emi.paid_marks))
        data['schedule'] = [
            {
                'cycle_key': group['cycle_key'],
                'year': group['year'],
                'month': group['month'],
                'entries': [_serialize_entry(entry) for entry in group['entries']],
            }
            for group in CycleService.group_by_month(schedule)
        ]
        return data


def _serialize_entry(entry):
    return {
        'cycle_index': entry['cycle_index'],
        'year': entry['year'],
        'month': entry['month'],
        'due_date': entry['due_date'].isoformat(),
        'paid': entry['paid'],
        'paid_date': entry['paid_date'].isoformat() if entry['paid_date'] else None,
    }
