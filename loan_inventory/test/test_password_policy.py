"""
Password policy enforcement: 8-128 characters with upper-case, lower-case,
digit and special character.
"""

import pytest
from loan_inventory.buisness.core.errors import ValidationError
from loan_inventory.buisness.core.user_context import UserContext
from loan_inventory.data.core.user_info.password_validator import PasswordValidator


@pytest.mark.parametrize('password, expected', [
    ('short', False),
    ('NoDigit!', False),
    ('nouppercase1!', False),
    ('NOLOWERCASE1!', False),
    ('NoSpecialChar1', False),
    ('Aa1!' * 33, False),
    ('ValidPass1!', True),
    ('AnotherValid99@', True),
])
def test_password_complexity(password, expected):
    is_valid, error = PasswordValidator.validate(password)
    assert is_valid is expected
    assert (error is None) is expected


def test_missing_password():
    is_valid, error = PasswordValidator.validate(None)
    assert not is_valid
    assert error == 'Le mot de passe est requis'


def test_weak_password_rejected_on_create(app_ctx):
    with pytest.raises(ValidationError) as excinfo:
        UserContext.create('weak@example.com', 'weakpass')
    assert excinfo.value.status_code == 400
    assert excinfo.value.details[0]['field'] == 'password'


def test_password_is_hashed(app_ctx):
    user = UserContext.create('hash@example.com', 'ValidPass1!').user
    assert user.password_hash != 'ValidPass1!'
    assert user.check_password('ValidPass1!')
    assert not user.check_password('ValidPass2!')
    assert 'password_hash' not in user.to_dict()
