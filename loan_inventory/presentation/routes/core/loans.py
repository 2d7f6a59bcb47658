"""
Loan routes
Lifecycle: open, add/remove lines, pickup signature, return signature, close.
Deleted loans are soft-deleted: reads answer 404, changes answer 400.
"""

from flask import Blueprint, request
from flask_login import current_user, login_required
from loan_inventory.buisness.core.loan_context import LoanContext
from loan_inventory.buisness.core.validation import parse_id_list
from loan_inventory.logger import get_logger
from loan_inventory.presentation.routes.rbac import admin_required, manager_required
from loan_inventory.presentation.routes.responses import created, json_body, success
from loan_inventory.services.core.loan_service import LoanService

bp = Blueprint('loans', __name__)
logger = get_logger("loan_inventory.routes.loans")


def _loan_for_change(loan_id):
    """Load a loan for a mutation; soft-deleted loans are refused by the context guards"""
    return LoanContext(loan_id, include_deleted=True)


def _signature_payload():
    """Multipart `file` upload or JSON `signature` data URL"""
    file = request.files.get('file')
    if file is not None:
        return None, file
    if request.is_json:
        return json_body().get('signature'), None
    return request.form.get('signature'), None


@bp.route('/loans', methods=['GET'])
@login_required
def list_loans():
    return success(LoanService.get_list_data(request))


@bp.route('/loans/<int:loan_id>', methods=['GET'])
@login_required
def get_loan(loan_id):
    return success(LoanContext(loan_id).to_dict())


@bp.route('/loans', methods=['POST'])
@login_required
@manager_required
def create_loan():
    context = LoanContext.create(json_body().get('employee_id'), created_by_id=current_user.id)
    return created(context.to_dict(), message='Prêt créé avec succès')


@bp.route('/loans/<int:loan_id>/lines', methods=['POST'])
@login_required
@manager_required
def add_loan_line(loan_id):
    data = json_body()
    context = _loan_for_change(loan_id)
    context.add_line(
        asset_item_id=data.get('asset_item_id'),
        stock_item_id=data.get('stock_item_id'),
        quantity=data.get('quantity'),
        user_id=current_user.id,
    )
    return created(context.to_dict(), message='Article ajouté au prêt')


@bp.route('/loans/<int:loan_id>/lines/<int:line_id>', methods=['DELETE'])
@login_required
@manager_required
def remove_loan_line(loan_id, line_id):
    result = _loan_for_change(loan_id).remove_line(line_id, user_id=current_user.id)
    return success(message=result['message'])


@bp.route('/loans/<int:loan_id>/pickup-signature', methods=['POST'])
@login_required
@manager_required
def upload_pickup_signature(loan_id):
    base64_data, file = _signature_payload()
    context = _loan_for_change(loan_id).upload_pickup_signature(base64_data=base64_data, file=file,
                                                                user_id=current_user.id)
    return success(context.to_dict(), message='Signature de retrait enregistrée')


@bp.route('/loans/<int:loan_id>/return-signature', methods=['POST'])
@login_required
@manager_required
def upload_return_signature(loan_id):
    base64_data, file = _signature_payload()
    context = _loan_for_change(loan_id).upload_return_signature(base64_data=base64_data, file=file,
                                                                user_id=current_user.id)
    return success(context.to_dict(), message='Signature de retour enregistrée')


@bp.route('/loans/<int:loan_id>/pickup-signature', methods=['DELETE'])
@login_required
@admin_required
def delete_pickup_signature(loan_id):
    context = _loan_for_change(loan_id).delete_pickup_signature(user_id=current_user.id)
    return success(context.to_dict(), message='Signature de retrait supprimée')


@bp.route('/loans/<int:loan_id>/return-signature', methods=['DELETE'])
@login_required
@admin_required
def delete_return_signature(loan_id):
    context = _loan_for_change(loan_id).delete_return_signature(user_id=current_user.id)
    return success(context.to_dict(), message='Signature de retour supprimée')


@bp.route('/loans/<int:loan_id>/close', methods=['PATCH'])
@login_required
@manager_required
def close_loan(loan_id):
    context = _loan_for_change(loan_id).close(user_id=current_user.id)
    return success(context.to_dict(), message='Prêt fermé avec succès')


@bp.route('/loans/<int:loan_id>', methods=['DELETE'])
@login_required
@manager_required
def delete_loan(loan_id):
    result = _loan_for_change(loan_id).delete(user_id=current_user.id)
    return success(message=result['message'])


@bp.route('/loans/batch-delete', methods=['POST'])
@login_required
@admin_required
def batch_delete_loans():
    ids = parse_id_list(json_body().get('ids'), 'prêts')
    result = LoanContext.batch_delete(ids, user_id=current_user.id)
    return success(result, message=result['message'])
