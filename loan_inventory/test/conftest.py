"""
Pytest configuration and fixtures for the loan inventory API

The app is created once per session; each test gets an empty schema.
HTTP tests use the role clients below, which authenticate with bearer tokens.
"""
import os

import pytest

os.environ.setdefault('SECRET_KEY', 'test_secret_key_for_loan_inventory_tests')
# The first-admin bootstrap must not create an account behind the tests
os.environ.pop('ADMIN_USER_EMAIL', None)
os.environ.pop('ADMIN_USER_PASSWORD', None)

from loan_inventory import create_app  # noqa: E402
from loan_inventory import db as _db  # noqa: E402
from loan_inventory.build import insert_critical_data  # noqa: E402

PASSWORD = 'Password1!'
TINY_PNG = (
    'data:image/png;base64,'
    'iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8BQDwAEhQGAhKmMIQAAAABJRU5ErkJggg=='
)


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create Flask application for testing"""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'WTF_CSRF_ENABLED': False,
        'RATELIMIT_ENABLED': False,
        'ENABLE_HTTPS': False,
        'SESSION_COOKIE_SECURE': False,
        'DASHBOARD_CACHE_SECONDS': 0,
        'UPLOAD_FOLDER': str(tmp_path_factory.mktemp('uploads')),
    })
    return app


@pytest.fixture(autouse=True)
def fresh_schema(app):
    """Drop and recreate every table, with the default equipment types"""
    with app.app_context():
        _db.drop_all()
        _db.create_all()
        insert_critical_data()
    yield
    with app.app_context():
        _db.session.remove()


@pytest.fixture
def app_ctx(app):
    """Application context for tests that call the business layer directly"""
    with app.app_context():
        yield app


@pytest.fixture(scope='function')
def client(app):
    """Anonymous test client"""
    return app.test_client()


def make_user(app, email, role, password=PASSWORD):
    """Create a user and return (user_id, access_token)"""
    from loan_inventory.auth import issue_tokens
    from loan_inventory.buisness.core.user_context import UserContext

    with app.app_context():
        user = UserContext.create(email, password, role=role).user
        return user.id, issue_tokens(user)['access_token']


def bearer_client(app, token):
    test_client = app.test_client()
    test_client.environ_base['HTTP_AUTHORIZATION'] = f'Bearer {token}'
    return test_client


@pytest.fixture
def admin_client(app):
    user_id, token = make_user(app, 'admin@example.com', 'ADMIN')
    test_client = bearer_client(app, token)
    test_client.user_id = user_id
    return test_client


@pytest.fixture
def manager_client(app):
    user_id, token = make_user(app, 'gestion@example.com', 'GESTIONNAIRE')
    test_client = bearer_client(app, token)
    test_client.user_id = user_id
    return test_client


@pytest.fixture
def reader_client(app):
    user_id, token = make_user(app, 'lecture@example.com', 'LECTURE')
    test_client = bearer_client(app, token)
    test_client.user_id = user_id
    return test_client


# Data helpers going through the API

def create_employee(test_client, **overrides):
    payload = {'first_name': 'Jean', 'last_name': 'Dupont', 'email': 'jean.dupont@example.com', 'dept': 'IT'}
    payload.update(overrides)
    response = test_client.post('/api/employees', json=payload)
    assert response.status_code == 201, response.get_json()
    return response.get_json()['data']


def create_asset_model(test_client, **overrides):
    payload = {'type': 'Clavier', 'brand': 'Logitech', 'model_name': 'K120'}
    payload.update(overrides)
    response = test_client.post('/api/asset-models', json=payload)
    assert response.status_code == 201, response.get_json()
    return response.get_json()['data']


def create_asset_item(test_client, asset_model_id, **overrides):
    payload = {'asset_model_id': asset_model_id, 'asset_tag': 'KB-001', 'serial': 'SN-001'}
    payload.update(overrides)
    response = test_client.post('/api/asset-items', json=payload)
    assert response.status_code == 201, response.get_json()
    return response.get_json()['data']


def create_stock_item(test_client, asset_model_id, quantity=10):
    response = test_client.post('/api/stock-items', json={'asset_model_id': asset_model_id, 'quantity': quantity})
    assert response.status_code == 201, response.get_json()
    return response.get_json()['data']


def create_loan(test_client, employee_id):
    response = test_client.post('/api/loans', json={'employee_id': employee_id})
    assert response.status_code == 201, response.get_json()
    return response.get_json()['data']
