"""
Asset Item Context (Core)
Provides a clean interface for managing individually tracked equipment units.

Handles:
- Creation and update with unique asset tag / serial number
- Status changes
- Deletion (refused while the item is lent)
- Sequential tag generation for bulk creation (KB-001, KB-002, ...)
"""

import re
from typing import Any, Dict, List, Optional, Union
from loan_inventory import db
from loan_inventory.buisness.core.audit_trail import AuditTrail
from loan_inventory.buisness.core.errors import ConflictError, NotFoundError, ValidationError
from loan_inventory.buisness.core.validation import (
    optional_string, parse_int, require_choice, require_string
)
from loan_inventory.data.core.asset_info.asset_item import AssetItem
from loan_inventory.data.core.asset_info.asset_model import AssetModel
from loan_inventory.data.core.constants import AssetStatus, AuditAction
from loan_inventory.data.core.loan_info.loan_line import LoanLine
from loan_inventory.logger import get_logger

logger = get_logger("loan_inventory.buisness.core.asset_item_context")

TAG_CONFLICT = "Ce numéro d'inventaire existe déjà"
SERIAL_CONFLICT = 'Ce numéro de série existe déjà'
MAX_BULK_QUANTITY = 100


def get_asset_model(asset_model_id) -> AssetModel:
    asset_model = db.session.get(AssetModel, asset_model_id)
    if asset_model is None:
        raise NotFoundError("Modèle d'équipement non trouvé")
    return asset_model


class AssetItemContext:
    """
    Core context manager for asset item operations.

    Provides a clean interface for:
    - Accessing the item, its model and its loan history
    - Creating items one by one or in sequential-tag batches
    - Updating, changing status and deleting items
    """

    def __init__(self, asset_item: Union[AssetItem, int]):
        """
        Initialize AssetItemContext with an AssetItem instance or ID.

        Raises:
            NotFoundError: If no item has this ID
        """
        if isinstance(asset_item, int):
            self._asset_item = db.session.get(AssetItem, asset_item)
            if self._asset_item is None:
                raise NotFoundError("Article d'équipement non trouvé")
        else:
            self._asset_item = asset_item
        self._asset_item_id = self._asset_item.id

    @property
    def asset_item(self) -> AssetItem:
        return self._asset_item

    @property
    def asset_item_id(self) -> int:
        return self._asset_item_id

    def loan_history(self, limit: int = 20) -> List[LoanLine]:
        """Loan lines referencing this item, newest first"""
        return (LoanLine.query
                .filter(LoanLine.asset_item_id == self._asset_item_id)
                .order_by(LoanLine.id.desc())
                .limit(limit)
                .all())

    def to_dict(self, include_history: bool = False) -> Dict[str, Any]:
        result = self._asset_item.to_dict(include_relationships=['asset_model'])
        if include_history:
            history = []
            for line in self.loan_history():
                loan = line.loan
                if loan.deleted_at is not None:
                    continue
                history.append({
                    'loan_id': loan.id,
                    'status': loan.status,
                    'opened_at': loan.opened_at.isoformat() if loan.opened_at else None,
                    'closed_at': loan.closed_at.isoformat() if loan.closed_at else None,
                    'employee': loan.employee.to_dict() if loan.employee else None,
                })
            result['loan_history'] = history
        return result

    # Uniqueness checks

    @staticmethod
    def _check_unique(asset_tag: Optional[str], serial: Optional[str], exclude_id: Optional[int] = None) -> None:
        if asset_tag:
            existing = AssetItem.query.filter_by(asset_tag=asset_tag).first()
            if existing and existing.id != exclude_id:
                raise ConflictError(TAG_CONFLICT)
        if serial:
            existing = AssetItem.query.filter_by(serial=serial).first()
            if existing and existing.id != exclude_id:
                raise ConflictError(SERIAL_CONFLICT)

    @staticmethod
    def _clean(data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
        cleaned = {}
        if not partial or 'asset_model_id' in data:
            cleaned['asset_model_id'] = parse_int(data.get('asset_model_id'), "Le modèle d'équipement", minimum=1)
        if 'asset_tag' in data:
            cleaned['asset_tag'] = optional_string(data, 'asset_tag', "Le numéro d'inventaire", max_length=100)
        if 'serial' in data:
            cleaned['serial'] = optional_string(data, 'serial', 'Le numéro de série', max_length=100)
        if 'status' in data or not partial:
            cleaned['status'] = require_choice(data.get('status') or AssetStatus.EN_STOCK,
                                               AssetStatus.ALL, 'Statut')
        if 'notes' in data:
            cleaned['notes'] = optional_string(data, 'notes', 'Les notes', max_length=2000)
        return cleaned

    @classmethod
    def create(cls, data: Dict[str, Any], created_by_id: Optional[int] = None) -> 'AssetItemContext':
        """
        Create one asset item.

        Raises:
            NotFoundError: Asset model does not exist
            ConflictError: Asset tag or serial number already used
        """
        cleaned = cls._clean(data)
        get_asset_model(cleaned['asset_model_id'])
        cls._check_unique(cleaned.get('asset_tag'), cleaned.get('serial'))

        asset_item = AssetItem.create_from_dict(cleaned, user_id=created_by_id)
        AuditTrail.record(AuditAction.CREATE, 'asset_items', asset_item.id,
                          new_values=asset_item.to_dict(), user_id=created_by_id)
        return cls(asset_item)

    def update(self, data: Dict[str, Any], updated_by_id: Optional[int] = None) -> 'AssetItemContext':
        """
        Raises:
            NotFoundError: New asset model does not exist
            ConflictError: New asset tag or serial number already used
        """
        cleaned = self._clean(data, partial=True)
        if 'asset_model_id' in cleaned:
            get_asset_model(cleaned['asset_model_id'])
        self._check_unique(cleaned.get('asset_tag'), cleaned.get('serial'), exclude_id=self._asset_item_id)

        old_values = self._asset_item.to_dict()
        self._asset_item.apply_dict(cleaned, user_id=updated_by_id)
        db.session.commit()
        logger.info(f"Updated asset item {self._asset_item_id}")
        AuditTrail.record(AuditAction.UPDATE, 'asset_items', self._asset_item_id,
                          old_values=old_values, new_values=self._asset_item.to_dict(),
                          user_id=updated_by_id)
        return self

    def update_status(self, status: str, updated_by_id: Optional[int] = None) -> 'AssetItemContext':
        status = require_choice(status, AssetStatus.ALL, 'Statut')
        old_status = self._asset_item.status
        self._asset_item.status = status
        self._asset_item.updated_by_id = updated_by_id
        db.session.commit()
        logger.info(f"Asset item {self._asset_item_id} status {old_status} -> {status}")
        AuditTrail.record(AuditAction.UPDATE, 'asset_items', self._asset_item_id,
                          old_values={'status': old_status}, new_values={'status': status},
                          user_id=updated_by_id)
        return self

    def delete(self, deleted_by_id: Optional[int] = None) -> None:
        """
        Delete the item. Loan lines that referenced it keep their history with
        a null item.

        Raises:
            ValidationError: The item is currently lent
        """
        if self._asset_item.status == AssetStatus.PRETE:
            raise ValidationError('Impossible de supprimer un article actuellement prêté')

        old_values = self._asset_item.to_dict()
        LoanLine.query.filter(LoanLine.asset_item_id == self._asset_item_id).update(
            {'asset_item_id': None}, synchronize_session='fetch'
        )
        db.session.delete(self._asset_item)
        db.session.commit()
        logger.info(f"Deleted asset item {self._asset_item_id}")
        AuditTrail.record(AuditAction.DELETE, 'asset_items', self._asset_item_id,
                          old_values=old_values, user_id=deleted_by_id)

    # Sequential tags

    @staticmethod
    def next_tag_number(prefix: str) -> int:
        """Highest numeric suffix among tags starting with prefix, plus one"""
        pattern = re.compile(r'^' + re.escape(prefix) + r'(\d+)$')
        tags = (db.session.query(AssetItem.asset_tag)
                .filter(AssetItem.asset_tag.startswith(prefix, autoescape=True))
                .all())
        highest = 0
        for (tag,) in tags:
            match = pattern.match(tag or '')
            if match:
                highest = max(highest, int(match.group(1)))
        return highest + 1

    @staticmethod
    def build_tags(prefix: str, start_number: int, quantity: int) -> List[str]:
        return [f"{prefix}{number:03d}" for number in range(start_number, start_number + quantity)]

    @staticmethod
    def _check_quantity(quantity) -> int:
        try:
            quantity = int(quantity)
        except (TypeError, ValueError):
            raise ValidationError(f'La quantité doit être entre 1 et {MAX_BULK_QUANTITY}')
        if quantity < 1 or quantity > MAX_BULK_QUANTITY:
            raise ValidationError(f'La quantité doit être entre 1 et {MAX_BULK_QUANTITY}')
        return quantity

    @classmethod
    def preview_bulk(cls, prefix: str, quantity) -> Dict[str, Any]:
        """
        Tags a bulk creation would use.

        Returns:
            {'tags': [...], 'conflicts': [...], 'start_number': int}
        """
        if not prefix or not str(prefix).strip():
            raise ValidationError('Le préfixe est requis')
        prefix = str(prefix).strip()
        quantity = cls._check_quantity(quantity)

        start_number = cls.next_tag_number(prefix)
        tags = cls.build_tags(prefix, start_number, quantity)
        conflicts = [tag for (tag,) in
                     db.session.query(AssetItem.asset_tag).filter(AssetItem.asset_tag.in_(tags)).all()]
        return {'tags': tags, 'conflicts': sorted(conflicts), 'start_number': start_number}

    @classmethod
    def create_bulk(cls, asset_model_id, tag_prefix: str, quantity, status: Optional[str] = None,
                    notes: Optional[str] = None, created_by_id: Optional[int] = None,
                    commit: bool = True) -> List[AssetItem]:
        """
        Create `quantity` items of one model with sequential tags.

        All items are created or none.

        Raises:
            NotFoundError: Asset model does not exist
            ValidationError: Quantity outside 1-100 or invalid status
            ConflictError: Some generated tags already exist
        """
        asset_model = get_asset_model(asset_model_id)
        quantity = cls._check_quantity(quantity)
        status = require_choice(status or AssetStatus.EN_STOCK, AssetStatus.ALL, 'Statut')
        prefix = require_string({'tag_prefix': tag_prefix}, 'tag_prefix', 'Le préfixe', max_length=20)

        preview = cls.preview_bulk(prefix, quantity)
        if preview['conflicts']:
            raise ConflictError(f"Les tags suivants existent déjà: {', '.join(preview['conflicts'])}")

        items = AssetItem.bulk_create_from_dicts(
            [
                {
                    'asset_model_id': asset_model.id,
                    'asset_tag': tag,
                    'serial': None,
                    'status': status,
                    'notes': notes,
                }
                for tag in preview['tags']
            ],
            user_id=created_by_id,
            commit=commit,
        )
        logger.info(f"Created {len(items)} asset items {preview['tags'][0]}..{preview['tags'][-1]} "
                    f"for model {asset_model.id}")
        if commit:
            AuditTrail.record(AuditAction.CREATE, 'asset_items', 'bulk',
                              new_values={'asset_model_id': asset_model.id, 'tags': preview['tags']},
                              user_id=created_by_id)
        return items
