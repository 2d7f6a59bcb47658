"""
Test the logging sanitizer utility.
Passwords, tokens and similar values must never reach the logs or the audit trail.
"""

from werkzeug.datastructures import ImmutableMultiDict
from loan_inventory.utils.logging_sanitizer import (
    SENSITIVE_FIELDS, sanitize_dict, sanitize_exception_message, sanitize_form_data
)


def test_sanitize_dict():
    test_data = {
        'email': 'admin@example.com',
        'password': 'Secret123!',
        'role': 'ADMIN',
    }
    result = sanitize_dict(test_data)
    assert result['email'] == 'admin@example.com', "Email should not be redacted"
    assert result['password'] == '[REDACTED]', "Password should be redacted"
    assert result['role'] == 'ADMIN'

    test_data = {
        'current_password': 'a',
        'new_password': 'b',
        'access_token': 'c',
        'refresh_token': 'd',
        'password_hash': 'e',
    }
    result = sanitize_dict(test_data)
    assert set(result.values()) == {'[REDACTED]'}, "Every credential field should be redacted"


def test_sanitize_dict_case_insensitive():
    result = sanitize_dict({'Password': 'x', 'PASSWORD': 'y', 'Token': 'z'})
    assert all(value == '[REDACTED]' for value in result.values())


def test_sanitize_dict_nested():
    test_data = {
        'user': {'email': 'a@b.fr', 'password': 'Secret123!'},
        'rows': [{'token': 'abc', 'dept': 'IT'}, 'plain'],
    }
    result = sanitize_dict(test_data)
    assert result['user']['password'] == '[REDACTED]', "Nested password should be redacted"
    assert result['user']['email'] == 'a@b.fr'
    assert result['rows'][0] == {'token': '[REDACTED]', 'dept': 'IT'}
    assert result['rows'][1] == 'plain'
    assert test_data['user']['password'] == 'Secret123!', "Input must not be modified"


def test_sanitize_dict_empty_and_custom_text():
    assert sanitize_dict({}) == {}
    assert sanitize_dict(None) is None
    assert sanitize_dict({'secret': 'x'}, redact_text='***') == {'secret': '***'}


def test_sanitize_form_data():
    form = ImmutableMultiDict([('email', 'a@b.fr'), ('password', 'Secret123!')])
    result = sanitize_form_data(form)
    assert result == {'email': 'a@b.fr', 'password': '[REDACTED]'}


def test_sanitize_exception_message():
    assert sanitize_exception_message(ValueError('bad password for user')) == 'bad password for user'
    message = sanitize_exception_message(ValueError('login failed: password=Secret123! email=a@b.fr'))
    assert 'Secret123!' not in message
    assert 'password=[REDACTED]' in message
    assert 'email=a@b.fr' in message
    message = sanitize_exception_message(RuntimeError('{"refresh_token": "abc.def"}'))
    assert 'abc.def' not in message


def test_bearer_tokens_and_signatures_masked():
    message = sanitize_exception_message(ValueError('header Authorization: Bearer eyJ1.sig rejected'))
    assert 'eyJ1.sig' not in message
    result = sanitize_dict({'note': 'Bearer abc123', 'signature': 'data:image/png;base64,iVBORw0KGgo='})
    assert result['note'] == 'Bearer [REDACTED]'
    assert result['signature'].startswith('[IMAGE DATA')


def test_sensitive_fields_cover_tokens():
    for field in ('password', 'access_token', 'refresh_token', 'authorization', 'csrf_token'):
        assert field in SENSITIVE_FIELDS
