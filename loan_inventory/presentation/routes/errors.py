"""
Error handlers producing the {"success": false, "error": ...} envelope
"""

from flask import jsonify, request
from sqlalchemy.exc import IntegrityError
from flask_wtf.csrf import CSRFError
from werkzeug.exceptions import HTTPException, NotFound, RequestEntityTooLarge
from loan_inventory import db
from loan_inventory.buisness.core.errors import AppError
from loan_inventory.logger import get_logger
from loan_inventory.utils.logging_sanitizer import sanitize_exception_message, sanitize_form_data

logger = get_logger("loan_inventory.routes.errors")


def _error_response(message, status, details=None):
    payload = {'success': False, 'error': message}
    if details:
        payload['details'] = details
    return jsonify(payload), status


def register_error_handlers(app):

    @app.errorhandler(AppError)
    def handle_app_error(error):
        if error.status_code >= 500:
            logger.error(f"{request.method} {request.path} failed: {error.message}")
        else:
            logger.info(f"{request.method} {request.path} -> {error.status_code}: {error.message}")
        db.session.rollback()
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(error):
        db.session.rollback()
        logger.warning(f"Integrity error on {request.method} {request.path}: {sanitize_exception_message(error.orig)}")
        return _error_response('Conflit avec une donnée existante', 409)

    @app.errorhandler(NotFound)
    def handle_not_found(error):
        if request.url_rule is None:
            return _error_response(f'Route {request.method} {request.path} non trouvée', 404)
        return _error_response(error.description or 'Ressource non trouvée', 404)

    @app.errorhandler(CSRFError)
    def handle_csrf_error(error):
        logger.warning(f"CSRF check failed on {request.method} {request.path}: {error.description}")
        return _error_response('Jeton CSRF manquant ou invalide', 400)

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(error):
        return _error_response('Fichier trop volumineux', 413)

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return _error_response(error.description or error.name, error.code)

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        db.session.rollback()
        logger.error(f"Unhandled error on {request.method} {request.path}: {sanitize_exception_message(error)} "
                     f"(args={sanitize_form_data(request.args)}, form={sanitize_form_data(request.form)})",
                     exc_info=True)
        return _error_response('Erreur interne du serveur', 500)
