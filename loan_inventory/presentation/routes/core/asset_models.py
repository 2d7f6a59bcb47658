"""
Asset model routes
Creating or updating a model with a quantity also creates its items or stock.
"""

from flask import Blueprint, request
from flask_login import current_user, login_required
from loan_inventory.buisness.core.asset_model_context import AssetModelContext
from loan_inventory.buisness.core.validation import parse_id_list
from loan_inventory.presentation.routes.rbac import admin_required, manager_required
from loan_inventory.presentation.routes.responses import created, json_body, success
from loan_inventory.services.core.asset_model_service import AssetModelService

bp = Blueprint('asset_models', __name__)


@bp.route('/asset-models', methods=['GET'])
@login_required
def list_asset_models():
    return success(AssetModelService.get_list_data(request))


@bp.route('/asset-models/<int:asset_model_id>', methods=['GET'])
@login_required
def get_asset_model(asset_model_id):
    return success(AssetModelContext(asset_model_id).to_dict(include_items=True))


@bp.route('/asset-models', methods=['POST'])
@login_required
@manager_required
def create_asset_model():
    result = AssetModelContext.create(json_body(), created_by_id=current_user.id)
    return created(result, message="Modèle d'équipement créé avec succès")


@bp.route('/asset-models/<int:asset_model_id>', methods=['PATCH', 'PUT'])
@login_required
@manager_required
def update_asset_model(asset_model_id):
    result = AssetModelContext(asset_model_id).update(json_body(), updated_by_id=current_user.id)
    return success(result, message="Modèle d'équipement mis à jour avec succès")


@bp.route('/asset-models/<int:asset_model_id>', methods=['DELETE'])
@login_required
@manager_required
def delete_asset_model(asset_model_id):
    result = AssetModelContext(asset_model_id).delete(deleted_by_id=current_user.id)
    return success(result, message=result['message'])


@bp.route('/asset-models/batch-delete', methods=['POST'])
@login_required
@admin_required
def batch_delete_asset_models():
    ids = parse_id_list(json_body().get('ids'), 'modèles')
    result = AssetModelContext.batch_delete(ids, deleted_by_id=current_user.id)
    return success(result, message=result['message'])
