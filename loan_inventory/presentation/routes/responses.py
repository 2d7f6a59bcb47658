"""
JSON envelope helpers shared by the API blueprints
"""

from flask import jsonify, request
from loan_inventory.buisness.core.errors import ValidationError


def success(data=None, status=200, message=None):
    payload = {'success': True}
    if data is not None:
        payload['data'] = data
    if message:
        payload['message'] = message
    return jsonify(payload), status


def created(data=None, message=None):
    return success(data, status=201, message=message)


def json_body():
    """Return the request JSON object, {} when the body is empty"""
    if not request.data:
        return {}
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Le corps de la requête doit être un objet JSON')
    return data


def query_int(name, default=None):
    value = request.args.get(name)
    if value is None or value == '':
        return default
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f'Le paramètre {name} doit être un nombre entier')
