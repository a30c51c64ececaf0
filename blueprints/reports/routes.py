from . import reports_bp
from .forms import CategoryReportForm
from services.report_service import ReportService
from utils.api import json_response


@reports_bp.route('/api/reports/category')
def category():
    """Spending per category; defaults to the current month"""
    form = CategoryReportForm.from_args().validate_or_raise()
    return json_response(ReportService.category_report(form.month.data, form.year.data))


@reports_bp.route('/api/reports/monthly')
def monthly():
    return json_response(ReportService.monthly_trend())


@reports_bp.route('/api/reports/summary')
def summary():
    return json_response(ReportService.emi_summary())
