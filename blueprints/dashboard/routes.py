from . import dashboard_bp
from services.dashboard_service import DashboardService
from utils.api import json_response


@dashboard_bp.route('/api/dashboard/stats')
def stats():
    return json_response(DashboardService.get_stats())


@dashboard_bp.route('/api/dashboard/reminders')
def reminders():
    """Unpaid EMIs, bills and borrows for this month, most urgent first"""
    return json_response(DashboardService.get_payment_reminders())


@dashboard_bp.route('/api/dashboard/collect-reminders')
def collect_reminders():
    return json_response(DashboardService.get_collect_reminders())
