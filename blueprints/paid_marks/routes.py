from . import paid_marks_bp
from .forms import PaidMarkForm, PaidMarkQueryForm, PaidMarkCheckForm
from services.payment_service import PaymentService
from utils.api import json_response


@paid_marks_bp.route('/api/paid-marks')
def index():
    form = PaidMarkQueryForm.from_args().validate_or_raise()
    marks = PaymentService.list_marks(month=form.month.data, year=form.year.data)
    return json_response([mark.to_dict() for mark in marks])


@paid_marks_bp.route('/api/paid-marks', methods=['POST'])
def create():
    """Mark one cycle paid; also records the matching expense"""
    form = PaidMarkForm.from_json().validate_or_raise()
    mark, expense = PaymentService.mark_paid(
        item_type=form.item_type.data,
        item_id=form.item_id.data,
        month=form.month.data,
        year=form.year.data,
        paid_date=form.paid_date.data,
        note=form.note.data or None,
    )
    return json_response({'paid_mark': mark.to_dict(), 'expense': expense.to_dict()}, 201)


@paid_marks_bp.route('/api/paid-marks/check')
def check():
    form = PaidMarkCheckForm.from_args().validate_or_raise()
    paid, mark = PaymentService.check_paid(
        form.item_type.data, form.item_id.data, form.month.data, form.year.data
    )
    return json_response({'paid': paid, 'paid_mark': mark.to_dict() if mark else None})
