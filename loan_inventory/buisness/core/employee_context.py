"""
Employee Context (Core)
Business rules for the people equipment is lent to.

Handles:
- Creation (single and bulk import) with case-insensitive email uniqueness
- Updates
- Deletion, refused while the employee still has loans on record
"""

from typing import Any, Dict, List, Optional, Union
from loan_inventory import db
from loan_inventory.buisness.core.audit_trail import AuditTrail
from loan_inventory.buisness.core.errors import (
    AppError, ConflictError, NotFoundError, ValidationError
)
from loan_inventory.buisness.core.validation import (
    normalize_email, optional_string, parse_int, require_string
)
from loan_inventory.data.core.constants import AuditAction, LoanStatus
from loan_inventory.data.core.employee import Employee
from loan_inventory.data.core.loan_info.loan import Loan
from loan_inventory.data.core.loan_info.loan_line import LoanLine
from loan_inventory.data.core.user_info.user import User
from loan_inventory.logger import get_logger

logger = get_logger("loan_inventory.buisness.core.employee_context")

EMAIL_CONFLICT = 'Un employé avec cet email existe déjà'
MAX_BULK_ROWS = 1000


class EmployeeContext:
    """
    Core context manager for employee operations.
    """

    def __init__(self, employee: Union[Employee, int]):
        if isinstance(employee, int):
            self._employee = db.session.get(Employee, employee)
            if self._employee is None:
                raise NotFoundError('Employé non trouvé')
        else:
            self._employee = employee
        self._employee_id = self._employee.id

    @property
    def employee(self) -> Employee:
        return self._employee

    @property
    def employee_id(self) -> int:
        return self._employee_id

    def recent_loans(self, limit: int = 10) -> List[Loan]:
        """Most recent non-deleted loans, newest first"""
        return (Loan.query
                .filter(Loan.employee_id == self._employee_id, Loan.deleted_at.is_(None))
                .order_by(Loan.opened_at.desc(), Loan.id.desc())
                .limit(limit)
                .all())

    def to_dict(self, include_loans: bool = False) -> Dict[str, Any]:
        result = self._employee.to_dict()
        if include_loans:
            result['loans'] = [loan.to_dict() for loan in self.recent_loans()]
        return result

    @staticmethod
    def _clean(data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
        """Validate incoming employee fields; partial=True only checks present keys"""
        cleaned = {}
        if not partial or 'first_name' in data:
            cleaned['first_name'] = require_string(data, 'first_name', 'Le prénom', max_length=100)
        if not partial or 'last_name' in data:
            cleaned['last_name'] = require_string(data, 'last_name', 'Le nom', max_length=100)
        if 'email' in data:
            cleaned['email'] = normalize_email(data.get('email'), required=False)
        if 'dept' in data:
            cleaned['dept'] = optional_string(data, 'dept', 'Le département', max_length=100)
        if 'manager_id' in data:
            manager_id = parse_int(data.get('manager_id'), 'Le manager', minimum=1, required=False)
            if manager_id is not None and db.session.get(User, manager_id) is None:
                raise ValidationError('Manager non trouvé')
            cleaned['manager_id'] = manager_id
        return cleaned

    @staticmethod
    def _email_taken(email: Optional[str], exclude_id: Optional[int] = None) -> bool:
        if not email:
            return False
        existing = Employee.query.filter(db.func.lower(Employee.email) == email.lower()).first()
        return existing is not None and existing.id != exclude_id

    @classmethod
    def create(cls, data: Dict[str, Any], created_by_id: Optional[int] = None,
               commit: bool = True) -> 'EmployeeContext':
        """
        Create an employee.

        Raises:
            ValidationError: Missing or invalid fields
            ConflictError: Email already used by another employee
        """
        cleaned = cls._clean(data)
        if cls._email_taken(cleaned.get('email')):
            raise ConflictError(EMAIL_CONFLICT)

        employee = Employee.create_from_dict(cleaned, user_id=created_by_id, commit=commit)
        if commit:
            AuditTrail.record(AuditAction.CREATE, 'employees', employee.id,
                              new_values=employee.to_dict(), user_id=created_by_id)
        return cls(employee)

    @classmethod
    def bulk_create(cls, rows: List[Dict[str, Any]], created_by_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Import many employees at once.

        Rows whose email already exists, or repeats an earlier row of the same
        batch (case-insensitive), are skipped. Invalid rows are reported and do
        not stop the import.

        Returns:
            {'created': int, 'skipped': int, 'errors': [{'row', 'data', 'error'}]}
        """
        if not isinstance(rows, list) or not rows:
            raise ValidationError('Au moins un employé doit être fourni')
        if len(rows) > MAX_BULK_ROWS:
            raise ValidationError(f'Maximum {MAX_BULK_ROWS} employés par import')

        emails = [str(row.get('email')).strip().lower()
                  for row in rows if isinstance(row, dict) and row.get('email')]
        existing = set()
        if emails:
            existing = {
                email.lower() for (email,) in
                db.session.query(Employee.email)
                .filter(db.func.lower(Employee.email).in_(emails))
                .all()
            }

        created = 0
        skipped = 0
        errors = []
        seen = set()

        for index, row in enumerate(rows, start=1):
            try:
                if not isinstance(row, dict):
                    raise ValidationError('Ligne invalide')
                cleaned = cls._clean(row)
                email = cleaned.get('email')
                if email and (email in existing or email in seen):
                    skipped += 1
                    continue

                db.session.add(Employee.from_dict(cleaned, user_id=created_by_id))
                if email:
                    seen.add(email)
                created += 1
            except AppError as e:
                errors.append({'row': index, 'data': row, 'error': e.message})

        db.session.commit()
        logger.info(f"Bulk employee import: {created} created, {skipped} skipped, {len(errors)} errors")
        if created:
            AuditTrail.record(AuditAction.CREATE, 'employees', 'bulk',
                              new_values={'created': created, 'skipped': skipped},
                              user_id=created_by_id)

        return {'created': created, 'skipped': skipped, 'errors': errors}

    def update(self, data: Dict[str, Any], updated_by_id: Optional[int] = None,
               commit: bool = True) -> 'EmployeeContext':
        """
        Raises:
            ConflictError: New email already used by another employee
        """
        cleaned = self._clean(data, partial=True)
        if self._email_taken(cleaned.get('email'), exclude_id=self._employee_id):
            raise ConflictError(EMAIL_CONFLICT)

        old_values = self._employee.to_dict()
        self._employee.apply_dict(cleaned, user_id=updated_by_id)
        if commit:
            db.session.commit()
            logger.info(f"Updated employee {self._employee_id}")
            AuditTrail.record(AuditAction.UPDATE, 'employees', self._employee_id,
                              old_values=old_values, new_values=self._employee.to_dict(),
                              user_id=updated_by_id)
        return self

    def delete(self, deleted_by_id: Optional[int] = None) -> None:
        """
        Delete the employee.

        Soft-deleted loans are purged together with the employee; any other
        loan keeps the employee in place.

        Raises:
            ValidationError: The employee has active or closed loans
        """
        loans = Loan.query.filter(Loan.employee_id == self._employee_id).all()
        kept = [loan for loan in loans if loan.deleted_at is None]
        active = sum(1 for loan in kept if loan.status == LoanStatus.OPEN)
        closed = len(kept) - active

        if active and closed:
            raise ValidationError(
                f"Impossible de supprimer cet employé : il a {active} prêt(s) actif(s) "
                f"et {closed} prêt(s) fermé(s) dans l'historique"
            )
        if active:
            raise ValidationError(f"Impossible de supprimer cet employé : il a {active} prêt(s) actif(s)")
        if closed:
            raise ValidationError(
                f"Impossible de supprimer cet employé : il a {closed} prêt(s) dans l'historique"
            )

        old_values = self._employee.to_dict()
        soft_deleted_ids = [loan.id for loan in loans]
        if soft_deleted_ids:
            LoanLine.query.filter(LoanLine.loan_id.in_(soft_deleted_ids)).delete(synchronize_session=False)
            Loan.query.filter(Loan.id.in_(soft_deleted_ids)).delete(synchronize_session=False)
        db.session.delete(self._employee)
        db.session.commit()
        logger.info(f"Deleted employee {self._employee_id} ({len(soft_deleted_ids)} soft-deleted loans purged)")
        AuditTrail.record(AuditAction.DELETE, 'employees', self._employee_id,
                          old_values=old_values, user_id=deleted_by_id)
