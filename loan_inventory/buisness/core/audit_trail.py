"""
Audit trail
Records who changed what on every mutating business operation.

Recording never interrupts the operation it describes: failures are logged
and the pending audit row is discarded.
"""

from typing import Any, Dict, List, Optional
from flask import has_request_context, request
from flask_login import current_user
from loan_inventory import db
from loan_inventory.data.core.audit_log import AuditLog
from loan_inventory.logger import get_logger
from loan_inventory.utils.logging_sanitizer import sanitize_dict

logger = get_logger("loan_inventory.buisness.core.audit_trail")

MAX_LIMIT = 500


class AuditTrail:

    @staticmethod
    def _request_user_id() -> Optional[int]:
        if has_request_context() and current_user and current_user.is_authenticated:
            return current_user.id
        return None

    @staticmethod
    def record(action: str, table_name: str, record_id,
               old_values: Optional[Dict[str, Any]] = None,
               new_values: Optional[Dict[str, Any]] = None,
               user_id: Optional[int] = None) -> Optional[AuditLog]:
        """
        Persist one audit entry in its own transaction.

        Args:
            action: CREATE, UPDATE or DELETE
            table_name: Table of the changed record
            record_id: Primary key of the changed record
            old_values: State before the change
            new_values: State after the change
            user_id: Acting user; defaults to the authenticated user

        Returns:
            The AuditLog row, or None when recording failed
        """
        if user_id is None:
            user_id = AuditTrail._request_user_id()

        ip_address = None
        user_agent = None
        if has_request_context():
            ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
            if ip_address:
                ip_address = ip_address.split(',')[0].strip()[:45]
            user_agent = (request.headers.get('User-Agent') or '')[:255] or None

        try:
            entry = AuditLog(
                user_id=user_id,
                action=action,
                table_name=table_name,
                record_id=str(record_id),
                old_values=sanitize_dict(old_values) if old_values else None,
                new_values=sanitize_dict(new_values) if new_values else None,
                ip_address=ip_address,
                user_agent=user_agent,
            )
            db.session.add(entry)
            db.session.commit()
            return entry
        except Exception as e:
            db.session.rollback()
            logger.error(f"Failed to record audit entry {action} {table_name}:{record_id}: {e}")
            return None

    @staticmethod
    def _clamp(limit: Optional[int], default: int = 50) -> int:
        if not limit or limit < 1:
            return default
        return min(limit, MAX_LIMIT)

    @staticmethod
    def for_record(table_name: str, record_id, limit: Optional[int] = None) -> List[AuditLog]:
        return (AuditLog.query
                .filter_by(table_name=table_name, record_id=str(record_id))
                .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
                .limit(AuditTrail._clamp(limit))
                .all())

    @staticmethod
    def for_user(user_id: int, limit: Optional[int] = None) -> List[AuditLog]:
        return (AuditLog.query
                .filter_by(user_id=user_id)
                .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
                .limit(AuditTrail._clamp(limit))
                .all())

    @staticmethod
    def recent(limit: Optional[int] = None) -> List[AuditLog]:
        return (AuditLog.query
                .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
                .limit(AuditTrail._clamp(limit))
                .all())
