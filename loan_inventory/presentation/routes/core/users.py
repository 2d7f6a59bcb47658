"""
User management routes (ADMIN)
"""

from flask import Blueprint, request
from flask_login import current_user, login_required
from loan_inventory.buisness.core.errors import ForbiddenError
from loan_inventory.buisness.core.user_context import UserContext
from loan_inventory.data.core.constants import Role
from loan_inventory.logger import get_logger
from loan_inventory.presentation.routes.rbac import admin_required
from loan_inventory.presentation.routes.responses import created, json_body, success
from loan_inventory.services.core.user_service import UserService

bp = Blueprint('users', __name__)
logger = get_logger("loan_inventory.routes.users")


@bp.route('/users', methods=['GET'])
@login_required
@admin_required
def list_users():
    return success(UserService.get_list_data(request))


@bp.route('/users/<int:user_id>', methods=['GET'])
@login_required
@admin_required
def get_user(user_id):
    return success(UserContext(user_id).to_dict())


@bp.route('/users', methods=['POST'])
@login_required
@admin_required
def create_user():
    data = json_body()
    user_context = UserContext.create(
        email=data.get('email'),
        password=data.get('password'),
        role=data.get('role'),
        created_by_id=current_user.id,
    )
    return created(user_context.to_dict(), message='Utilisateur créé avec succès')


@bp.route('/users/<int:user_id>', methods=['PATCH', 'PUT'])
@login_required
@admin_required
def update_user(user_id):
    data = json_body()
    user_context = UserContext(user_id).update(
        updated_by_id=current_user.id,
        email=data.get('email'),
        role=data.get('role'),
        is_active=data.get('is_active'),
    )
    return success(user_context.to_dict(), message='Utilisateur mis à jour avec succès')


@bp.route('/users/<int:user_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_user(user_id):
    UserContext(user_id).delete(deleted_by_id=current_user.id)
    return success(message='Utilisateur supprimé avec succès')


@bp.route('/users/<int:user_id>/password', methods=['PATCH'])
@login_required
def change_password(user_id):
    """The account owner or an admin; both must give the current password"""
    if current_user.id != user_id and current_user.role != Role.ADMIN:
        logger.warning(f"User {current_user.id} tried to change the password of user {user_id}")
        raise ForbiddenError()
    data = json_body()
    UserContext(user_id).change_password(data.get('current_password'), data.get('new_password'))
    return success(message='Mot de passe modifié avec succès')
