"""
Dashboard routes
"""

from flask import Blueprint
from flask_login import login_required
from loan_inventory.presentation.routes.rbac import admin_required
from loan_inventory.presentation.routes.responses import query_int, success
from loan_inventory.services.core.dashboard_service import DashboardService

bp = Blueprint('dashboard', __name__)


@bp.route('/dashboard', methods=['GET'])
@login_required
def overview():
    return success({
        'stats': DashboardService.get_stats(),
        'recent_loans': DashboardService.recent_loans(query_int('recent_limit', 10)),
        'low_stock': DashboardService.low_stock(),
    })


@bp.route('/dashboard/stats', methods=['GET'])
@login_required
def stats():
    return success(DashboardService.get_stats())


@bp.route('/dashboard/recent-loans', methods=['GET'])
@login_required
def recent_loans():
    return success(DashboardService.recent_loans(query_int('limit', 10)))


@bp.route('/dashboard/low-stock', methods=['GET'])
@login_required
def low_stock():
    return success(DashboardService.low_stock(query_int('threshold')))


@bp.route('/dashboard/refresh', methods=['POST'])
@login_required
@admin_required
def refresh():
    return success(DashboardService.refresh(), message='Statistiques du tableau de bord actualisées')
