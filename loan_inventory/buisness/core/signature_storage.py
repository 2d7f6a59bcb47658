"""
Signature image storage

Signatures arrive either as a base64 data URL (canvas capture) or as an
uploaded file, and are written under <UPLOAD_FOLDER>/signatures. Only PNG
and JPEG images are accepted, recognised by their leading bytes.
"""

import base64
import binascii
import re
import secrets
import time
from pathlib import Path
from typing import Optional
from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename
from loan_inventory.buisness.core.errors import ValidationError
from loan_inventory.logger import get_logger

logger = get_logger("loan_inventory.buisness.core.signature_storage")

URL_PREFIX = '/uploads/signatures/'
DATA_URL_PATTERN = re.compile(r'^data:image/[\w.+-]+;base64,', re.IGNORECASE)
PNG_MAGIC = b'\x89PNG\r\n\x1a\n'
JPEG_MAGIC = b'\xff\xd8\xff'
INVALID_TYPE = 'Type de fichier non autorisé. Seuls PNG et JPG sont acceptés.'


def signatures_dir() -> Path:
    return Path(current_app.config['UPLOAD_FOLDER']) / 'signatures'


def detect_extension(content: bytes) -> str:
    if content.startswith(PNG_MAGIC):
        return 'png'
    if content.startswith(JPEG_MAGIC):
        return 'jpg'
    raise ValidationError(INVALID_TYPE)


def decode_data_url(data: str) -> bytes:
    payload = DATA_URL_PATTERN.sub('', data.strip(), count=1)
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError('Signature invalide : encodage base64 incorrect')


def read_signature(base64_data: Optional[str] = None, file: Optional[FileStorage] = None) -> bytes:
    """
    Return the raw image bytes from whichever source was provided.

    Raises:
        ValidationError: No signature, empty or oversized image, unsupported type
    """
    if file is not None and file.filename:
        if file.mimetype not in ('image/png', 'image/jpeg', 'image/jpg'):
            raise ValidationError(INVALID_TYPE)
        content = file.read()
    elif base64_data:
        if not isinstance(base64_data, str):
            raise ValidationError('Signature invalide')
        content = decode_data_url(base64_data)
    else:
        raise ValidationError('Aucune signature fournie')

    if not content:
        raise ValidationError('Signature vide')
    if len(content) > current_app.config['MAX_SIGNATURE_SIZE']:
        raise ValidationError('Fichier trop volumineux (5 Mo maximum)')
    return content


def save_signature(content: bytes) -> str:
    """Write the image and return its public URL"""
    extension = detect_extension(content)
    filename = f"{int(time.time() * 1000)}-{secrets.token_hex(8)}-signature.{extension}"
    directory = signatures_dir()
    directory.mkdir(parents=True, exist_ok=True)
    (directory / filename).write_bytes(content)
    logger.info(f"Saved signature {filename} ({len(content)} bytes)")
    return URL_PREFIX + filename


def resolve_signature_path(filename: str) -> Optional[Path]:
    """Path of a stored signature, or None for unsafe or unknown names"""
    safe_name = secure_filename(filename)
    if not safe_name or safe_name != filename:
        return None
    path = signatures_dir() / safe_name
    return path if path.is_file() else None


def delete_signature(url: Optional[str]) -> None:
    """Remove a stored signature file; missing files are ignored"""
    if not url or not url.startswith(URL_PREFIX):
        return
    path = resolve_signature_path(url[len(URL_PREFIX):])
    if path is None:
        return
    try:
        path.unlink()
        logger.info(f"Deleted signature file {path.name}")
    except OSError as e:
        logger.warning(f"Could not delete signature file {path.name}: {e}")
