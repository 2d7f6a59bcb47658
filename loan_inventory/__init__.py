from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import os
from loan_inventory.logger import get_logger

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
csrf = CSRFProtect()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["2000 per day", "300 per hour"],
    storage_uri="memory://"  # Use Redis in production for distributed systems
)


def _env_flag(name, default):
    return os.environ.get(name, default).lower() in ('true', '1', 'yes', 'on')


def create_app(config_overrides=None):
    from pathlib import Path

    base_dir = Path(__file__).parent.parent

    app = Flask(__name__, static_folder=None)

    logger = get_logger("loan_inventory")
    logger.info("Initializing Flask application")

    # SECURITY: Require SECRET_KEY - no fallback
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY')

    # Prefer an explicit DATABASE_URL; otherwise store the SQLite database
    # inside the project's `instance/` directory.
    db_env = os.environ.get('DATABASE_URL')
    if db_env:
        app.config['SQLALCHEMY_DATABASE_URI'] = db_env
    else:
        instance_dir = base_dir / 'instance'
        instance_dir.mkdir(parents=True, exist_ok=True)
        default_db_path = instance_dir / 'loan_inventory.db'
        app.config['SQLALCHEMY_DATABASE_URI'] = f"sqlite:///{str(default_db_path.resolve())}"
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # Signature uploads
    app.config['UPLOAD_FOLDER'] = os.environ.get('UPLOAD_FOLDER', str(base_dir / 'uploads'))
    app.config['MAX_SIGNATURE_SIZE'] = int(os.environ.get('MAX_SIGNATURE_SIZE', str(5 * 1024 * 1024)))
    app.config['MAX_CONTENT_LENGTH'] = int(os.environ.get('MAX_CONTENT_LENGTH', str(10 * 1024 * 1024)))

    # Bearer tokens (seconds)
    app.config['TOKEN_MAX_AGE'] = int(os.environ.get('TOKEN_MAX_AGE', '900'))
    app.config['REFRESH_TOKEN_MAX_AGE'] = int(os.environ.get('REFRESH_TOKEN_MAX_AGE', str(7 * 24 * 3600)))

    # HTTPS and cookies; secure by default, disable for local HTTP development
    app.config['ENABLE_HTTPS'] = _env_flag('ENABLE_HTTPS', 'True')
    app.config['SESSION_COOKIE_SECURE'] = _env_flag('SESSION_COOKIE_SECURE', 'True')
    app.config['SESSION_COOKIE_HTTPONLY'] = True
    app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'
    app.config['PERMANENT_SESSION_LIFETIME'] = int(os.environ.get('PERMANENT_SESSION_LIFETIME', '3600'))
    app.config['REMEMBER_COOKIE_SECURE'] = app.config['SESSION_COOKIE_SECURE']
    app.config['REMEMBER_COOKIE_HTTPONLY'] = True

    # CSRF is checked by enforce_csrf() below, only for cookie-authenticated requests
    app.config['WTF_CSRF_CHECK_DEFAULT'] = False
    app.config['WTF_CSRF_TIME_LIMIT'] = None

    app.config['RATELIMIT_ENABLED'] = _env_flag('RATELIMIT_ENABLED', 'True')
    app.config['LOW_STOCK_THRESHOLD'] = int(os.environ.get('LOW_STOCK_THRESHOLD', '5'))
    app.config['DASHBOARD_CACHE_SECONDS'] = int(os.environ.get('DASHBOARD_CACHE_SECONDS', '60'))
    app.config['JSON_SORT_KEYS'] = False

    if config_overrides:
        app.config.update(config_overrides)

    if not app.config['SECRET_KEY']:
        logger.critical("SECRET_KEY not set in environment! Application cannot start.")
        raise RuntimeError("SECRET_KEY environment variable is required")

    if app.config['ENABLE_HTTPS']:
        logger.info("HTTPS enforcement enabled")
    else:
        logger.warning("HTTPS enforcement DISABLED - acceptable for development only")

    # Initialize extensions with app
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)
    app.json.ensure_ascii = False
    app.json.sort_keys = False

    logger.debug("Extensions initialized")

    # Import models to ensure they're registered with SQLAlchemy
    from loan_inventory.data import core  # noqa: F401

    logger.debug("Models imported and registered")

    from loan_inventory.auth import auth, init_auth
    from loan_inventory.presentation.routes import init_app as init_routes
    from loan_inventory.presentation.routes.errors import register_error_handlers

    init_auth(app)
    app.register_blueprint(auth, url_prefix='/api/auth')
    init_routes(app)
    register_error_handlers(app)

    @app.before_request
    def enforce_csrf():
        """Check the CSRF token of mutating requests authenticated by session cookie"""
        from flask import request

        if not app.config.get('WTF_CSRF_ENABLED', True):
            return None
        if request.method not in ('POST', 'PUT', 'PATCH', 'DELETE'):
            return None
        if request.headers.get('Authorization', '').startswith('Bearer '):
            return None
        if request.endpoint in ('auth.login', 'auth.register', 'auth.refresh'):
            return None
        csrf.protect()
        return None

    @app.after_request
    def set_security_headers(response):
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Referrer-Policy'] = 'no-referrer'
        response.headers['Content-Security-Policy'] = "default-src 'none'; img-src 'self' data:; frame-ancestors 'none'"
        if app.config.get('ENABLE_HTTPS'):
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response

    logger.info("Flask application initialization complete")

    return app
