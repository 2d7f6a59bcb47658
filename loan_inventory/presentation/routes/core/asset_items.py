"""
Asset item routes, including sequential-tag bulk creation
"""

from flask import Blueprint, request
from flask_login import current_user, login_required
from loan_inventory.buisness.core.asset_item_context import AssetItemContext
from loan_inventory.logger import get_logger
from loan_inventory.presentation.routes.rbac import manager_required
from loan_inventory.presentation.routes.responses import created, json_body, success
from loan_inventory.services.core.asset_item_service import AssetItemService

bp = Blueprint('asset_items', __name__)
logger = get_logger("loan_inventory.routes.asset_items")


@bp.route('/asset-items', methods=['GET'])
@login_required
def list_asset_items():
    return success(AssetItemService.get_list_data(request))


@bp.route('/asset-items/<int:asset_item_id>', methods=['GET'])
@login_required
def get_asset_item(asset_item_id):
    return success(AssetItemContext(asset_item_id).to_dict(include_history=True))


@bp.route('/asset-items', methods=['POST'])
@login_required
@manager_required
def create_asset_item():
    context = AssetItemContext.create(json_body(), created_by_id=current_user.id)
    return created(context.to_dict(), message="Article d'équipement créé avec succès")


@bp.route('/asset-items/bulk/preview', methods=['GET'])
@login_required
@manager_required
def preview_bulk_asset_items():
    return success(AssetItemContext.preview_bulk(request.args.get('tag_prefix'), request.args.get('quantity')))


@bp.route('/asset-items/bulk', methods=['POST'])
@login_required
@manager_required
def bulk_create_asset_items():
    data = json_body()
    items = AssetItemContext.create_bulk(
        asset_model_id=data.get('asset_model_id'),
        tag_prefix=data.get('tag_prefix'),
        quantity=data.get('quantity'),
        status=data.get('status'),
        notes=data.get('notes'),
        created_by_id=current_user.id,
    )
    return created([item.to_dict() for item in items], message=f"{len(items)} article(s) créé(s) avec succès")


@bp.route('/asset-items/<int:asset_item_id>', methods=['PATCH', 'PUT'])
@login_required
@manager_required
def update_asset_item(asset_item_id):
    context = AssetItemContext(asset_item_id).update(json_body(), updated_by_id=current_user.id)
    return success(context.to_dict(), message="Article d'équipement mis à jour avec succès")


@bp.route('/asset-items/<int:asset_item_id>/status', methods=['PATCH'])
@login_required
@manager_required
def update_asset_item_status(asset_item_id):
    context = AssetItemContext(asset_item_id).update_status(json_body().get('status'),
                                                            updated_by_id=current_user.id)
    return success(context.to_dict(), message='Statut mis à jour avec succès')


@bp.route('/asset-items/<int:asset_item_id>', methods=['DELETE'])
@login_required
@manager_required
def delete_asset_item(asset_item_id):
    AssetItemContext(asset_item_id).delete(deleted_by_id=current_user.id)
    return success(message="Article d'équipement supprimé avec succès")
