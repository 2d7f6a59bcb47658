"""
Consumable stock routes
"""

from flask import Blueprint, request
from flask_login import current_user, login_required
from loan_inventory.buisness.core.stock_item_context import StockItemContext
from loan_inventory.presentation.routes.rbac import manager_required
from loan_inventory.presentation.routes.responses import created, json_body, success
from loan_inventory.services.core.stock_item_service import StockItemService

bp = Blueprint('stock_items', __name__)


@bp.route('/stock-items', methods=['GET'])
@login_required
def list_stock_items():
    return success(StockItemService.get_list_data(request))


@bp.route('/stock-items/<int:stock_item_id>', methods=['GET'])
@login_required
def get_stock_item(stock_item_id):
    return success(StockItemContext(stock_item_id).to_dict())


@bp.route('/stock-items', methods=['POST'])
@login_required
@manager_required
def create_stock_item():
    context = StockItemContext.create(json_body(), created_by_id=current_user.id)
    return created(context.to_dict(), message='Article de stock créé avec succès')


@bp.route('/stock-items/<int:stock_item_id>', methods=['PATCH', 'PUT'])
@login_required
@manager_required
def update_stock_item(stock_item_id):
    context = StockItemContext(stock_item_id).update(json_body(), updated_by_id=current_user.id)
    return success(context.to_dict(), message='Article de stock mis à jour avec succès')


@bp.route('/stock-items/<int:stock_item_id>/quantity', methods=['PATCH'])
@login_required
@manager_required
def adjust_stock_quantity(stock_item_id):
    context = StockItemContext(stock_item_id).adjust_quantity(json_body().get('delta'),
                                                              updated_by_id=current_user.id)
    return success(context.to_dict(), message='Quantité ajustée avec succès')


@bp.route('/stock-items/<int:stock_item_id>', methods=['DELETE'])
@login_required
@manager_required
def delete_stock_item(stock_item_id):
    StockItemContext(stock_item_id).delete(deleted_by_id=current_user.id)
    return success(message='Article de stock supprimé avec succès')
