"""
Loan Context (Core)
The loan lifecycle:

    OPEN -> lines added/removed -> pickup signature -> return signature -> CLOSED

Adding a line reserves the equipment (asset item PRETE, stock `loaned`
incremented); removing it, closing the loan or deleting an open loan gives
the equipment back. A soft-deleted loan stays in the database for history
but rejects every further change.
"""

from typing import Any, Dict, List, Optional, Union
from werkzeug.datastructures import FileStorage
from loan_inventory import db
from loan_inventory.buisness.core import signature_storage
from loan_inventory.buisness.core.audit_trail import AuditTrail
from loan_inventory.buisness.core.errors import NotFoundError, ValidationError
from loan_inventory.buisness.core.validation import parse_int
from loan_inventory.data.core.asset_info.asset_item import AssetItem
from loan_inventory.data.core.asset_info.stock_item import StockItem
from loan_inventory.data.core.constants import AssetStatus, AuditAction, LoanStatus
from loan_inventory.data.core.employee import Employee
from loan_inventory.data.core.loan_info.loan import Loan
from loan_inventory.data.core.loan_info.loan_line import LoanLine
from loan_inventory.data.core.user_created_base import utcnow
from loan_inventory.logger import get_logger

logger = get_logger("loan_inventory.buisness.core.loan_context")

MAX_BATCH_DELETE = 100
PICKUP = 'pickup'
RETURN = 'return'


class LoanContext:
    """
    Core context manager for loan operations.

    Provides a clean interface for:
    - Opening loans for an employee
    - Adding and removing loan lines with the matching stock movements
    - Recording and clearing pickup / return signatures
    - Closing, soft-deleting and batch-deleting loans
    """

    def __init__(self, loan: Union[Loan, int], include_deleted: bool = False):
        """
        Initialize LoanContext with a Loan instance or loan ID.

        Args:
            loan: Loan instance or ID
            include_deleted: Accept soft-deleted loans (default: treated as missing)

        Raises:
            NotFoundError: If the loan does not exist (or is soft-deleted)
        """
        if isinstance(loan, int):
            self._loan = db.session.get(Loan, loan)
            if self._loan is None or (self._loan.deleted_at is not None and not include_deleted):
                raise NotFoundError('Prêt non trouvé')
        else:
            self._loan = loan
        self._loan_id = self._loan.id

    @property
    def loan(self) -> Loan:
        return self._loan

    @property
    def loan_id(self) -> int:
        return self._loan_id

    @property
    def lines(self) -> List[LoanLine]:
        return self._loan.lines

    def to_dict(self) -> Dict[str, Any]:
        result = self._loan.to_dict()
        result['employee'] = self._loan.employee.to_dict() if self._loan.employee else None
        created_by = self._loan.created_by
        result['created_by'] = (
            {'id': created_by.id, 'email': created_by.email, 'role': created_by.role}
            if created_by else None
        )
        lines = []
        for line in self._loan.lines:
            line_dict = line.to_dict(include_audit_fields=False)
            line_dict['asset_item'] = (line.asset_item.to_dict(include_relationships=['asset_model'])
                                       if line.asset_item else None)
            line_dict['stock_item'] = (line.stock_item.to_dict(include_relationships=['asset_model'])
                                       if line.stock_item else None)
            lines.append(line_dict)
        result['lines'] = lines
        return result

    # Guards

    def _ensure_not_deleted(self, message: str = 'Ce prêt a été supprimé') -> None:
        if self._loan.deleted_at is not None:
            raise ValidationError(message)

    def _ensure_open(self, message: str) -> None:
        self._ensure_not_deleted()
        if self._loan.status == LoanStatus.CLOSED:
            raise ValidationError(message)

    # Equipment movements, never committed here

    def _release_lines(self) -> None:
        """Give back every asset item and stock unit held by this loan"""
        for line in self._loan.lines:
            self._release_line(line)

    @staticmethod
    def _release_line(line: LoanLine) -> None:
        if line.asset_item is not None:
            line.asset_item.status = AssetStatus.EN_STOCK
        if line.stock_item is not None:
            line.stock_item.loaned = max(0, (line.stock_item.loaned or 0) - (line.quantity or 0))

    # Lifecycle

    @classmethod
    def create(cls, employee_id, created_by_id: Optional[int] = None) -> 'LoanContext':
        """
        Open a loan for an employee.

        Raises:
            NotFoundError: The employee does not exist
        """
        employee_id = parse_int(employee_id, "L'employé", minimum=1)
        if db.session.get(Employee, employee_id) is None:
            raise NotFoundError('Employé non trouvé')

        loan = Loan.create_from_dict(
            {'employee_id': employee_id, 'status': LoanStatus.OPEN, 'opened_at': utcnow()},
            user_id=created_by_id,
        )
        logger.info(f"Opened loan {loan.id} for employee {employee_id}")
        AuditTrail.record(AuditAction.CREATE, 'loans', loan.id,
                          new_values=loan.to_dict(), user_id=created_by_id)
        return cls(loan)

    def add_line(self, asset_item_id=None, stock_item_id=None, quantity=None,
                 user_id: Optional[int] = None) -> LoanLine:
        """
        Add an asset item or a quantity of a stock item to the loan.

        Raises:
            ValidationError: Loan closed/deleted, no (or two) targets, item not
                available, or not enough stock
            NotFoundError: Asset item or stock item does not exist
        """
        self._ensure_open("Impossible d'ajouter des articles à un prêt fermé")

        if not asset_item_id and not stock_item_id:
            raise ValidationError("Vous devez spécifier soit un article d'équipement soit un article de stock")
        if asset_item_id and stock_item_id:
            raise ValidationError("Une ligne de prêt concerne soit un article d'équipement soit un article de stock")

        if asset_item_id:
            asset_item = db.session.get(AssetItem, parse_int(asset_item_id, "L'article d'équipement", minimum=1))
            if asset_item is None:
                raise NotFoundError("Article d'équipement non trouvé")
            if asset_item.status != AssetStatus.EN_STOCK:
                raise ValidationError("Cet article n'est pas disponible")

            line = LoanLine(loan_id=self._loan_id, asset_item_id=asset_item.id, quantity=1,
                            created_by_id=user_id, updated_by_id=user_id)
            asset_item.status = AssetStatus.PRETE
            description = f"asset item {asset_item.id}"
        else:
            stock_item = db.session.get(StockItem, parse_int(stock_item_id, "L'article de stock", minimum=1))
            if stock_item is None:
                raise NotFoundError('Article de stock non trouvé')
            quantity = parse_int(quantity, 'La quantité', minimum=1, required=False) or 1
            if stock_item.available < quantity:
                raise ValidationError('Quantité insuffisante en stock')

            line = LoanLine(loan_id=self._loan_id, stock_item_id=stock_item.id, quantity=quantity,
                            created_by_id=user_id, updated_by_id=user_id)
            stock_item.loaned = (stock_item.loaned or 0) + quantity
            description = f"{quantity} x stock item {stock_item.id}"

        db.session.add(line)
        db.session.commit()
        db.session.refresh(self._loan)
        logger.info(f"Loan {self._loan_id}: added {description}")
        AuditTrail.record(AuditAction.CREATE, 'loan_lines', line.id,
                          new_values=line.to_dict(), user_id=user_id)
        return line

    def remove_line(self, line_id, user_id: Optional[int] = None) -> Dict[str, str]:
        """
        Raises:
            ValidationError: Loan closed or deleted
            NotFoundError: The line does not belong to this loan
        """
        self._ensure_open('Impossible de modifier un prêt fermé')

        line = db.session.get(LoanLine, parse_int(line_id, 'La ligne de prêt', minimum=1))
        if line is None or line.loan_id != self._loan_id:
            raise NotFoundError('Ligne de prêt non trouvée')

        old_values = line.to_dict()
        self._release_line(line)
        db.session.delete(line)
        db.session.commit()
        db.session.refresh(self._loan)
        logger.info(f"Loan {self._loan_id}: removed line {old_values['id']}")
        AuditTrail.record(AuditAction.DELETE, 'loan_lines', old_values['id'],
                          old_values=old_values, user_id=user_id)
        return {'message': 'Ligne de prêt supprimée avec succès'}

    def upload_signature(self, kind: str, base64_data: Optional[str] = None,
                         file: Optional[FileStorage] = None,
                         user_id: Optional[int] = None) -> 'LoanContext':
        """
        Store a pickup or return signature.

        Raises:
            ValidationError: Loan deleted or closed, signature missing or
                invalid, or a return signature before the pickup signature
        """
        self._ensure_not_deleted('Impossible de signer un prêt supprimé')
        if self._loan.status == LoanStatus.CLOSED:
            raise ValidationError('Impossible de signer un prêt fermé')
        if kind == RETURN and not self._loan.pickup_signature_url:
            raise ValidationError('La signature de retrait doit être enregistrée avant la signature de retour')

        content = signature_storage.read_signature(base64_data=base64_data, file=file)
        url = signature_storage.save_signature(content)

        previous_url = getattr(self._loan, f'{kind}_signature_url')
        setattr(self._loan, f'{kind}_signature_url', url)
        setattr(self._loan, f'{kind}_signed_at', utcnow())
        self._loan.updated_by_id = user_id
        db.session.commit()
        signature_storage.delete_signature(previous_url)

        logger.info(f"Loan {self._loan_id}: {kind} signature recorded")
        AuditTrail.record(AuditAction.UPDATE, 'loans', self._loan_id,
                          new_values={f'{kind}_signature_url': url}, user_id=user_id)
        return self

    def upload_pickup_signature(self, base64_data=None, file=None, user_id=None) -> 'LoanContext':
        return self.upload_signature(PICKUP, base64_data=base64_data, file=file, user_id=user_id)

    def upload_return_signature(self, base64_data=None, file=None, user_id=None) -> 'LoanContext':
        return self.upload_signature(RETURN, base64_data=base64_data, file=file, user_id=user_id)

    def delete_signature(self, kind: str, user_id: Optional[int] = None) -> 'LoanContext':
        """
        Clear a signature and remove its file.

        Raises:
            ValidationError: Loan deleted
        """
        self._ensure_not_deleted('Impossible de modifier un prêt supprimé')

        url = getattr(self._loan, f'{kind}_signature_url')
        setattr(self._loan, f'{kind}_signature_url', None)
        setattr(self._loan, f'{kind}_signed_at', None)
        self._loan.updated_by_id = user_id
        db.session.commit()
        signature_storage.delete_signature(url)

        logger.info(f"Loan {self._loan_id}: {kind} signature cleared")
        AuditTrail.record(AuditAction.UPDATE, 'loans', self._loan_id,
                          old_values={f'{kind}_signature_url': url},
                          new_values={f'{kind}_signature_url': None}, user_id=user_id)
        return self

    def delete_pickup_signature(self, user_id=None) -> 'LoanContext':
        return self.delete_signature(PICKUP, user_id=user_id)

    def delete_return_signature(self, user_id=None) -> 'LoanContext':
        return self.delete_signature(RETURN, user_id=user_id)

    def close(self, user_id: Optional[int] = None) -> 'LoanContext':
        """
        Close the loan and give all equipment back, in one transaction.

        Raises:
            ValidationError: Already closed, deleted, or no pickup signature
        """
        self._ensure_not_deleted('Impossible de fermer un prêt supprimé')
        if self._loan.status == LoanStatus.CLOSED:
            raise ValidationError('Ce prêt est déjà fermé')
        if not self._loan.pickup_signature_url:
            raise ValidationError('La signature de retrait est requise avant de fermer le prêt')

        try:
            self._release_lines()
            self._loan.status = LoanStatus.CLOSED
            self._loan.closed_at = utcnow()
            self._loan.updated_by_id = user_id
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info(f"Closed loan {self._loan_id} ({len(self._loan.lines)} lines returned)")
        AuditTrail.record(AuditAction.UPDATE, 'loans', self._loan_id,
                          old_values={'status': LoanStatus.OPEN},
                          new_values={'status': LoanStatus.CLOSED}, user_id=user_id)
        return self

    def _soft_delete(self, user_id: Optional[int]) -> None:
        if self._loan.status == LoanStatus.OPEN:
            self._release_lines()
        self._loan.deleted_at = utcnow()
        self._loan.deleted_by_id = user_id

    def delete(self, user_id: Optional[int] = None) -> Dict[str, str]:
        """
        Soft-delete the loan. An open loan gives its equipment back first.

        Raises:
            ValidationError: Already deleted
        """
        if self._loan.deleted_at is not None:
            raise ValidationError('Prêt déjà supprimé')

        try:
            self._soft_delete(user_id)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info(f"Soft-deleted loan {self._loan_id}")
        AuditTrail.record(AuditAction.DELETE, 'loans', self._loan_id,
                          old_values={'status': self._loan.status}, user_id=user_id)
        return {'message': 'Prêt supprimé avec succès'}

    @classmethod
    def batch_delete(cls, loan_ids, user_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Soft-delete several loans at once.

        Raises:
            ValidationError: Empty or oversized selection
            NotFoundError: None of the ids match a non-deleted loan
        """
        if not loan_ids:
            raise ValidationError('Au moins un prêt doit être sélectionné')
        if len(loan_ids) > MAX_BATCH_DELETE:
            raise ValidationError(f'Maximum {MAX_BATCH_DELETE} prêts par suppression groupée')

        loans = Loan.query.filter(Loan.id.in_(loan_ids), Loan.deleted_at.is_(None)).all()
        if not loans:
            raise NotFoundError('Aucun prêt trouvé avec les IDs fournis')

        try:
            for loan in loans:
                cls(loan)._soft_delete(user_id)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        deleted_ids = [loan.id for loan in loans]
        logger.info(f"Batch soft-deleted loans {deleted_ids}")
        AuditTrail.record(AuditAction.DELETE, 'loans', 'batch',
                          old_values={'ids': deleted_ids}, user_id=user_id)
        return {
            'deleted_count': len(loans),
            'message': f'{len(loans)} prêt(s) supprimé(s) avec succès',
        }
