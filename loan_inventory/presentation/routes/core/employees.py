"""
Employee routes
Reads are open to any authenticated user; writes need ADMIN or GESTIONNAIRE.
"""

from flask import Blueprint, request
from flask_login import current_user, login_required
from loan_inventory.buisness.core.employee_context import EmployeeContext
from loan_inventory.buisness.core.errors import ValidationError
from loan_inventory.logger import get_logger
from loan_inventory.presentation.routes.rbac import manager_required
from loan_inventory.presentation.routes.responses import created, json_body, success
from loan_inventory.services.core.employee_service import EmployeeService

bp = Blueprint('employees', __name__)
logger = get_logger("loan_inventory.routes.employees")


@bp.route('/employees', methods=['GET'])
@login_required
def list_employees():
    return success(EmployeeService.get_list_data(request))


@bp.route('/employees/<int:employee_id>', methods=['GET'])
@login_required
def get_employee(employee_id):
    return success(EmployeeContext(employee_id).to_dict(include_loans=True))


@bp.route('/employees', methods=['POST'])
@login_required
@manager_required
def create_employee():
    employee_context = EmployeeContext.create(json_body(), created_by_id=current_user.id)
    return created(employee_context.to_dict(), message='Employé créé avec succès')


@bp.route('/employees/bulk', methods=['POST'])
@login_required
@manager_required
def bulk_create_employees():
    data = json_body()
    rows = data.get('employees')
    if not isinstance(rows, list):
        raise ValidationError('Le champ employees doit être un tableau')
    result = EmployeeContext.bulk_create(rows, created_by_id=current_user.id)
    logger.info(f"Bulk import by user {current_user.id}: {result['created']} created, "
                f"{result['skipped']} skipped, {len(result['errors'])} errors")
    return created(result, message=f"{result['created']} employé(s) créé(s)")


@bp.route('/employees/<int:employee_id>', methods=['PATCH', 'PUT'])
@login_required
@manager_required
def update_employee(employee_id):
    employee_context = EmployeeContext(employee_id).update(json_body(), updated_by_id=current_user.id)
    return success(employee_context.to_dict(), message='Employé mis à jour avec succès')


@bp.route('/employees/<int:employee_id>', methods=['DELETE'])
@login_required
@manager_required
def delete_employee(employee_id):
    EmployeeContext(employee_id).delete(deleted_by_id=current_user.id)
    return success(message='Employé supprimé avec succès')
