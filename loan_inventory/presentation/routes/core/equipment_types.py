"""
Equipment type routes
"""

from flask import Blueprint
from flask_login import current_user, login_required
from loan_inventory.buisness.core.equipment_type_context import EquipmentTypeContext
from loan_inventory.presentation.routes.rbac import admin_required
from loan_inventory.presentation.routes.responses import created, json_body, success
from loan_inventory.services.core.equipment_type_service import EquipmentTypeService

bp = Blueprint('equipment_types', __name__)


@bp.route('/equipment-types', methods=['GET'])
@login_required
def list_equipment_types():
    return success(EquipmentTypeService.get_list_data())


@bp.route('/equipment-types/<int:type_id>', methods=['GET'])
@login_required
def get_equipment_type(type_id):
    return success(EquipmentTypeContext(type_id).to_dict())


@bp.route('/equipment-types', methods=['POST'])
@login_required
@admin_required
def create_equipment_type():
    context = EquipmentTypeContext.create(json_body(), created_by_id=current_user.id)
    return created(context.to_dict(), message="Type d'équipement créé avec succès")


@bp.route('/equipment-types/<int:type_id>', methods=['PATCH', 'PUT'])
@login_required
@admin_required
def update_equipment_type(type_id):
    context = EquipmentTypeContext(type_id).update(json_body(), updated_by_id=current_user.id)
    return success(context.to_dict(), message="Type d'équipement mis à jour avec succès")


@bp.route('/equipment-types/<int:type_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_equipment_type(type_id):
    EquipmentTypeContext(type_id).delete(deleted_by_id=current_user.id)
    return success(message="Type d'équipement supprimé avec succès")
