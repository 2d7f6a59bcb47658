"""
Input validation helpers used by the business contexts.

Each helper raises ValidationError with a message ready to be shown to the
API client.
"""

import re
from typing import Any, Dict, Optional
from loan_inventory.buisness.core.errors import ValidationError

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def clean_string(value: Any) -> Optional[str]:
    """Strip a string value; empty strings become None"""
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    value = value.strip()
    return value or None


def require_string(data: Dict[str, Any], field: str, label: str,
                   min_length: int = 1, max_length: int = 255) -> str:
    value = clean_string(data.get(field))
    if value is None:
        raise ValidationError(f'{label} est requis', details=[{'field': field, 'message': 'requis'}])
    if len(value) < min_length or len(value) > max_length:
        raise ValidationError(
            f'{label} doit contenir entre {min_length} et {max_length} caractères',
            details=[{'field': field, 'message': 'longueur invalide'}]
        )
    return value


def optional_string(data: Dict[str, Any], field: str, label: str, max_length: int = 255) -> Optional[str]:
    value = clean_string(data.get(field))
    if value is not None and len(value) > max_length:
        raise ValidationError(
            f'{label} ne peut pas dépasser {max_length} caractères',
            details=[{'field': field, 'message': 'trop long'}]
        )
    return value


def normalize_email(value: Any, required: bool = True) -> Optional[str]:
    email = clean_string(value)
    if email is None:
        if required:
            raise ValidationError("L'email est requis", details=[{'field': 'email', 'message': 'requis'}])
        return None
    email = email.lower()
    if len(email) > 255 or not EMAIL_PATTERN.match(email):
        raise ValidationError('Email invalide', details=[{'field': 'email', 'message': 'format invalide'}])
    return email


def parse_int(value: Any, label: str, minimum: Optional[int] = None,
              maximum: Optional[int] = None, required: bool = True) -> Optional[int]:
    if value is None or value == '':
        if required:
            raise ValidationError(f'{label} est requis')
        return None
    if isinstance(value, bool):
        raise ValidationError(f'{label} doit être un nombre entier')
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{label} doit être un nombre entier')
    if isinstance(value, float) and value != number:
        raise ValidationError(f'{label} doit être un nombre entier')
    if minimum is not None and number < minimum:
        raise ValidationError(f'{label} doit être supérieur ou égal à {minimum}')
    if maximum is not None and number > maximum:
        raise ValidationError(f'{label} doit être inférieur ou égal à {maximum}')
    return number


def require_choice(value: Any, choices, label: str) -> str:
    if value not in choices:
        raise ValidationError(f"{label} invalide. Valeurs acceptées : {', '.join(choices)}")
    return value


def parse_id_list(values: Any, label: str = 'identifiants', max_items: int = 100):
    if values is None:
        values = []
    if not isinstance(values, list):
        raise ValidationError(f'La liste des {label} doit être un tableau')
    ids = [parse_int(value, 'Identifiant', minimum=1) for value in values]
    if len(ids) > max_items:
        raise ValidationError(f'Maximum {max_items} éléments par opération')
    # Preserve order, drop duplicates
    return list(dict.fromkeys(ids))
