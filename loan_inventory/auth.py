"""
Authentication blueprint

Clients authenticate either with the Flask-Login session cookie set by
/login, or with an `Authorization: Bearer <token>` header carrying a signed
access token. Refresh tokens are only accepted by /refresh.
"""

from flask import Blueprint, current_app, request
from flask_login import current_user, login_required, login_user, logout_user
from flask_wtf.csrf import generate_csrf
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from loan_inventory import db, limiter, login_manager
from loan_inventory.buisness.core.errors import UnauthorizedError
from loan_inventory.buisness.core.user_context import UserContext
from loan_inventory.data.core.user_info.user import User
from loan_inventory.logger import get_logger
from loan_inventory.presentation.routes.responses import created, json_body, success

logger = get_logger("loan_inventory.auth")
auth = Blueprint('auth', __name__)

ACCESS_SALT = 'loan-inventory-access'
REFRESH_SALT = 'loan-inventory-refresh'


def _serializer(salt):
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=salt)


def issue_tokens(user):
    payload = {'uid': user.id, 'role': user.role}
    return {
        'access_token': _serializer(ACCESS_SALT).dumps(payload),
        'refresh_token': _serializer(REFRESH_SALT).dumps({'uid': user.id}),
        'token_type': 'Bearer',
        'expires_in': current_app.config['TOKEN_MAX_AGE'],
    }


def load_user_from_token(token, salt=ACCESS_SALT, max_age=None):
    """Return the active User a token was issued for, or None"""
    if max_age is None:
        max_age = current_app.config['TOKEN_MAX_AGE']
    try:
        payload = _serializer(salt).loads(token, max_age=max_age)
    except SignatureExpired:
        logger.debug("Expired token rejected")
        return None
    except BadSignature:
        logger.warning("Invalid token rejected")
        return None
    user = db.session.get(User, payload.get('uid'))
    if user is None or not user.is_active:
        return None
    return user


def init_auth(app):
    """Hook token authentication and JSON 401 responses into Flask-Login"""

    @login_manager.request_loader
    def load_user_from_request(req):
        header = req.headers.get('Authorization', '')
        if header.startswith('Bearer '):
            return load_user_from_token(header[len('Bearer '):].strip())
        return None

    @login_manager.unauthorized_handler
    def unauthorized():
        raise UnauthorizedError()


def _auth_payload(user):
    data = {'user': user.to_dict(include_audit_fields=False)}
    data.update(issue_tokens(user))
    return data


@auth.route('/register', methods=['POST'])
@limiter.limit("10 per hour")
def register():
    data = json_body()
    requested_by = current_user if current_user.is_authenticated else None
    user_context = UserContext.register(
        email=data.get('email'),
        password=data.get('password'),
        role=data.get('role'),
        requested_by=requested_by,
    )
    logger.info(f"Registered user {user_context.user_id} ({user_context.user.role})")
    return created(_auth_payload(user_context.user), message='Compte créé avec succès')


@auth.route('/login', methods=['POST'])
@limiter.limit("20 per 15 minutes")
def login():
    data = json_body()
    user_context = UserContext.authenticate(data.get('email'), data.get('password'))
    login_user(user_context.user)
    logger.info(f"Successful login for user {user_context.user_id}")
    return success(_auth_payload(user_context.user))


@auth.route('/refresh', methods=['POST'])
def refresh():
    data = json_body()
    token = data.get('refresh_token')
    if not token:
        raise UnauthorizedError('Refresh token requis')
    user = load_user_from_token(token, salt=REFRESH_SALT,
                                max_age=current_app.config['REFRESH_TOKEN_MAX_AGE'])
    if user is None:
        raise UnauthorizedError('Refresh token invalide ou expiré')
    return success(issue_tokens(user))


@auth.route('/logout', methods=['POST'])
def logout():
    if current_user.is_authenticated:
        logger.info(f"User logged out: {current_user.id}")
    logout_user()
    return success(message='Déconnexion réussie')


@auth.route('/me', methods=['GET'])
@login_required
def me():
    return success(current_user.to_dict())


@auth.route('/csrf', methods=['GET'])
def csrf_token():
    return success({'csrf_token': generate_csrf()})
