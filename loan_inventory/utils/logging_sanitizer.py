"""
Logging Sanitizer Utility

Scrubs request data before it is logged or stored in the audit trail:
credential fields are redacted, bearer tokens are masked and signature
images sent as data URLs are replaced by a short marker.
"""

import re
from typing import Any, Dict
from werkzeug.datastructures import MultiDict


REDACTED = '[REDACTED]'

# Keys whose values never reach the logs or audit records
SENSITIVE_FIELDS = {
    'password',
    'password_hash',
    'confirm_password',
    'current_password',
    'new_password',
    'secret',
    'secret_key',
    'token',
    'access_token',
    'refresh_token',
    'authorization',
    'csrf_token',
    'session',
}

BEARER_PATTERN = re.compile(r'(Bearer\s+)[\w.~+/=-]+', re.IGNORECASE)
DATA_URL_PATTERN = re.compile(r'data:image/[\w.+-]+;base64,[A-Za-z0-9+/=\s]+', re.IGNORECASE)
# key=value or "key": "value" pairs where the key is sensitive
ASSIGNMENT_PATTERN = re.compile(
    r'''(["']?(?:%s)["']?\s*[:=]\s*)(["']?)[^"',\s)}]+\2''' % '|'.join(sorted(SENSITIVE_FIELDS, key=len, reverse=True)),
    re.IGNORECASE,
)


def is_sensitive_key(key: Any) -> bool:
    return isinstance(key, str) and key.lower() in SENSITIVE_FIELDS


def sanitize_value(value: Any) -> Any:
    """Shorten signature data URLs and mask bearer tokens inside strings"""
    if not isinstance(value, str):
        return value
    if value[:11].lower() == 'data:image/':
        return f'[IMAGE DATA {len(value)} chars]'
    return BEARER_PATTERN.sub(r'\1' + REDACTED, value)


def sanitize_dict(data: Dict[str, Any], redact_text: str = REDACTED) -> Dict[str, Any]:
    """
    Return a sanitized copy of a dictionary.

    Nested dictionaries and lists are walked recursively; the input is not modified.

    Example:
        >>> sanitize_dict({'email': 'a@b.fr', 'password': 'Secret1!'})
        {'email': 'a@b.fr', 'password': '[REDACTED]'}
    """
    if not data:
        return data

    sanitized = {}
    for key, value in data.items():
        if is_sensitive_key(key):
            sanitized[key] = redact_text
        else:
            sanitized[key] = _sanitize_any(value, redact_text)
    return sanitized


def _sanitize_any(value: Any, redact_text: str) -> Any:
    if isinstance(value, dict):
        return sanitize_dict(value, redact_text)
    if isinstance(value, (list, tuple)):
        return [_sanitize_any(item, redact_text) for item in value]
    return sanitize_value(value)


def sanitize_form_data(form_data: MultiDict, redact_text: str = REDACTED) -> Dict[str, Any]:
    """Sanitize request.form or request.args; repeated keys keep their first value"""
    return sanitize_dict(form_data.to_dict(), redact_text)


def sanitize_exception_message(exception: Exception) -> str:
    """
    Exception text safe for the logs.

    Values assigned to sensitive keys, bearer tokens and data URLs are
    masked; the rest of the message is kept.
    """
    message = str(exception)
    message = DATA_URL_PATTERN.sub('[IMAGE DATA]', message)
    message = BEARER_PATTERN.sub(r'\1' + REDACTED, message)
    return ASSIGNMENT_PATTERN.sub(r'\1' + REDACTED, message)
