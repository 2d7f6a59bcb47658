"""
Application error hierarchy.

Business contexts raise these exceptions; the error handlers registered in
create_app() turn them into {"success": false, "error": ...} JSON responses
carrying the matching HTTP status code.
"""


class AppError(Exception):
    """Base class for errors that map onto an HTTP status code"""

    status_code = 500

    def __init__(self, message, status_code=None, details=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_dict(self):
        payload = {'success': False, 'error': self.message}
        if self.details:
            payload['details'] = self.details
        return payload


class ValidationError(AppError, ValueError):
    """Business rule violation or invalid input (400)"""
    status_code = 400


class UnauthorizedError(AppError):
    status_code = 401

    def __init__(self, message='Authentification requise', details=None):
        super().__init__(message, details=details)


class ForbiddenError(AppError):
    status_code = 403

    def __init__(self, message='Accès refusé', details=None):
        super().__init__(message, details=details)


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409
