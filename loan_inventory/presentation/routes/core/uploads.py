"""
Signature file serving, authenticated users only
"""

from flask import Blueprint, send_file
from flask_login import login_required
from loan_inventory.buisness.core.errors import NotFoundError
from loan_inventory.buisness.core.signature_storage import resolve_signature_path

bp = Blueprint('uploads', __name__)


@bp.route('/uploads/signatures/<path:filename>', methods=['GET'])
@login_required
def signature_file(filename):
    path = resolve_signature_path(filename)
    if path is None:
        raise NotFoundError('Fichier non trouvé')
    response = send_file(path)
    response.headers['Cache-Control'] = 'private, no-store'
    return response
