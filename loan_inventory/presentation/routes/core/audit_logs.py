"""
Audit log routes (ADMIN, read-only)
"""

from flask import Blueprint
from flask_login import login_required
from loan_inventory.buisness.core.audit_trail import AuditTrail
from loan_inventory.presentation.routes.rbac import admin_required
from loan_inventory.presentation.routes.responses import query_int, success

bp = Blueprint('audit_logs', __name__)


def _serialize(entries):
    return [entry.to_dict() for entry in entries]


@bp.route('/audit-logs', methods=['GET'])
@login_required
@admin_required
def recent_audit_logs():
    return success(_serialize(AuditTrail.recent(query_int('limit'))))


@bp.route('/audit-logs/user/<int:user_id>', methods=['GET'])
@login_required
@admin_required
def audit_logs_for_user(user_id):
    return success(_serialize(AuditTrail.for_user(user_id, query_int('limit'))))


@bp.route('/audit-logs/<string:table_name>/<string:record_id>', methods=['GET'])
@login_required
@admin_required
def audit_logs_for_record(table_name, record_id):
    return success(_serialize(AuditTrail.for_record(table_name, record_id, query_int('limit'))))
