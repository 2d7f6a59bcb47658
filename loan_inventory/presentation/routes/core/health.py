"""
Health check route (public)
"""

from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from loan_inventory import db, limiter
from loan_inventory.data.core.user_created_base import utcnow
from loan_inventory.logger import get_logger

bp = Blueprint('health', __name__)
logger = get_logger("loan_inventory.routes.health")


@bp.route('/health', methods=['GET'])
@limiter.exempt
def health():
    database = 'ok'
    try:
        db.session.execute(text('SELECT 1'))
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Health check database query failed: {e}")
        database = 'error'

    payload = {
        'status': 'ok' if database == 'ok' else 'error',
        'database': database,
        'timestamp': utcnow().isoformat(),
    }
    return jsonify(payload), 200 if database == 'ok' else 503
