"""
Asset Model Context (Core)
Catalog entries (type, brand, model name) and the units created from them.

Handles:
- Model creation, optionally creating the initial units: tagged asset items
  for equipment types, one stock item for consumable types
- Model update, optionally adding more units
- Deletion cascading to items and stock, refused while anything is lent
"""

from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Union
from loan_inventory import db
from loan_inventory.buisness.core.asset_item_context import AssetItemContext
from loan_inventory.buisness.core.audit_trail import AuditTrail
from loan_inventory.buisness.core.equipment_type_context import EquipmentTypeContext
from loan_inventory.buisness.core.errors import NotFoundError, ValidationError
from loan_inventory.buisness.core.stock_item_context import StockItemContext
from loan_inventory.buisness.core.validation import parse_int, require_string
from loan_inventory.data.core.asset_info.asset_item import AssetItem
from loan_inventory.data.core.asset_info.asset_model import AssetModel
from loan_inventory.data.core.asset_info.stock_item import StockItem
from loan_inventory.data.core.constants import (
    AssetStatus, AuditAction, is_consumable_type, tag_prefix_for_type
)
from loan_inventory.data.core.loan_info.loan_line import LoanLine
from loan_inventory.logger import get_logger

logger = get_logger("loan_inventory.buisness.core.asset_model_context")

MAX_BATCH_DELETE = 100


class AssetModelContext:
    """
    Core context manager for asset model operations.
    """

    def __init__(self, asset_model: Union[AssetModel, int]):
        if isinstance(asset_model, int):
            self._asset_model = db.session.get(AssetModel, asset_model)
            if self._asset_model is None:
                raise NotFoundError("Modèle d'équipement non trouvé")
        else:
            self._asset_model = asset_model
        self._asset_model_id = self._asset_model.id

    @property
    def asset_model(self) -> AssetModel:
        return self._asset_model

    @property
    def asset_model_id(self) -> int:
        return self._asset_model_id

    @property
    def is_consumable(self) -> bool:
        return is_consumable_type(self._asset_model.type)

    @property
    def available_count(self) -> int:
        """Asset items ready to be lent"""
        return self._asset_model.items.filter(AssetItem.status == AssetStatus.EN_STOCK).count()

    @property
    def item_count(self) -> int:
        return self._asset_model.items.count()

    def stock_totals(self) -> Dict[str, int]:
        quantity, loaned = (db.session.query(
            db.func.coalesce(db.func.sum(StockItem.quantity), 0),
            db.func.coalesce(db.func.sum(StockItem.loaned), 0),
        ).filter(StockItem.asset_model_id == self._asset_model_id).one())
        return {'quantity': int(quantity), 'loaned': int(loaned), 'available': int(quantity) - int(loaned)}

    def to_dict(self, include_items: bool = False) -> Dict[str, Any]:
        result = self._asset_model.to_dict()
        result['is_consumable'] = self.is_consumable
        result['available_count'] = self.available_count
        result['item_count'] = self.item_count
        result['stock'] = self.stock_totals()
        if include_items:
            result['items'] = [item.to_dict() for item in self._asset_model.items.order_by(AssetItem.asset_tag)]
            result['stock_items'] = [stock.to_dict() for stock in self._asset_model.stock_items]
        return result

    @staticmethod
    def _clean(data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
        cleaned = {}
        if not partial or 'type' in data:
            cleaned['type'] = require_string(data, 'type', 'Le type', min_length=2, max_length=50)
            if not EquipmentTypeContext.exists(cleaned['type']):
                raise ValidationError(f"Type d'équipement inconnu : {cleaned['type']}")
        if not partial or 'brand' in data:
            cleaned['brand'] = require_string(data, 'brand', 'La marque', max_length=100)
        if not partial or 'model_name' in data:
            cleaned['model_name'] = require_string(data, 'model_name', 'Le nom du modèle', max_length=100)
        return cleaned

    def _add_units(self, quantity: int, notes: str, user_id: Optional[int],
                   stock_notes: Optional[str] = None) -> Dict[str, Any]:
        """Create `quantity` more units for this model without committing"""
        created = {'asset_items': [], 'stock_item': None}
        if self.is_consumable:
            stock_item = self._asset_model.stock_items.first()
            if stock_item is not None:
                stock_item.quantity += quantity
                stock_item.notes = f"Stock augmenté de {quantity}"
                stock_item.updated_by_id = user_id
                db.session.flush()
            else:
                stock_item = StockItemContext.create(
                    {'asset_model_id': self._asset_model_id, 'quantity': quantity, 'notes': stock_notes or notes},
                    created_by_id=user_id,
                    commit=False,
                ).stock_item
            created['stock_item'] = stock_item
        else:
            created['asset_items'] = AssetItemContext.create_bulk(
                self._asset_model_id,
                tag_prefix_for_type(self._asset_model.type),
                quantity,
                status=AssetStatus.EN_STOCK,
                notes=notes,
                created_by_id=user_id,
                commit=False,
            )
        return created

    @staticmethod
    def _serialize_created(created: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'asset_items': [item.to_dict() for item in created['asset_items']],
            'stock_item': created['stock_item'].to_dict() if created['stock_item'] else None,
        }

    @classmethod
    def create(cls, data: Dict[str, Any], created_by_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Create a model and, when `quantity` is given, its first units.

        Returns:
            {'asset_model': dict, 'created': {'asset_items': [...], 'stock_item': dict|None}}
        """
        cleaned = cls._clean(data)
        quantity = parse_int(data.get('quantity'), 'La quantité', minimum=0, required=False) or 0

        try:
            asset_model = AssetModel.create_from_dict(cleaned, user_id=created_by_id, commit=False)
            context = cls(asset_model)
            created = {'asset_items': [], 'stock_item': None}
            if quantity > 0:
                created = context._add_units(
                    quantity,
                    f"Créé automatiquement depuis le modèle {asset_model.brand} {asset_model.model_name}",
                    created_by_id,
                )
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info(f"Created asset model {asset_model.id} ({asset_model.type}) with "
                    f"{len(created['asset_items'])} items, stock={bool(created['stock_item'])}")
        AuditTrail.record(AuditAction.CREATE, 'asset_models', asset_model.id,
                          new_values=dict(asset_model.to_dict(), quantity=quantity),
                          user_id=created_by_id)
        return {'asset_model': context.to_dict(), 'created': cls._serialize_created(created)}

    def update(self, data: Dict[str, Any], updated_by_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Update model fields and/or add `quantity` more units.

        When only a quantity is supplied the model fields are left untouched.
        """
        quantity = parse_int(data.get('quantity'), 'La quantité', minimum=0, required=False) or 0
        fields = {key: value for key, value in data.items() if key != 'quantity'}
        old_values = self._asset_model.to_dict()
        created = {'asset_items': [], 'stock_item': None}

        try:
            if fields:
                self._asset_model.apply_dict(self._clean(fields, partial=True), user_id=updated_by_id)
            if quantity > 0:
                today = date.today().strftime('%d/%m/%Y')
                created = self._add_units(quantity, f"Ajouté le {today}", updated_by_id,
                                          stock_notes=f"Créé le {today}")
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info(f"Updated asset model {self._asset_model_id} (+{quantity} units)")
        AuditTrail.record(AuditAction.UPDATE, 'asset_models', self._asset_model_id,
                          old_values=old_values,
                          new_values=dict(self._asset_model.to_dict(), quantity_added=quantity),
                          user_id=updated_by_id)
        return {'asset_model': self.to_dict(), 'created': self._serialize_created(created)}

    @staticmethod
    def _check_nothing_lent(model_ids: Iterable[int], label: str) -> None:
        model_ids = list(model_ids)
        lent_items = AssetItem.query.filter(AssetItem.asset_model_id.in_(model_ids),
                                            AssetItem.status == AssetStatus.PRETE).count()
        if lent_items:
            raise ValidationError(
                f"Impossible de supprimer {label} : {lent_items} équipement(s) sont actuellement prêtés"
            )
        lent_stock = (db.session.query(db.func.coalesce(db.func.sum(StockItem.loaned), 0))
                      .filter(StockItem.asset_model_id.in_(model_ids)).scalar())
        if lent_stock:
            raise ValidationError(
                f"Impossible de supprimer {label} : {lent_stock} article(s) de stock sont actuellement prêtés"
            )

    @staticmethod
    def _cascade_delete(model_ids: List[int]) -> Dict[str, int]:
        """Delete models with their items and stock; loan lines keep a null reference"""
        item_ids = [item_id for (item_id,) in
                    db.session.query(AssetItem.id).filter(AssetItem.asset_model_id.in_(model_ids)).all()]
        stock_ids = [stock_id for (stock_id,) in
                     db.session.query(StockItem.id).filter(StockItem.asset_model_id.in_(model_ids)).all()]
        if item_ids:
            LoanLine.query.filter(LoanLine.asset_item_id.in_(item_ids)).update(
                {'asset_item_id': None}, synchronize_session=False)
        if stock_ids:
            LoanLine.query.filter(LoanLine.stock_item_id.in_(stock_ids)).update(
                {'stock_item_id': None}, synchronize_session=False)
        items_deleted = AssetItem.query.filter(AssetItem.asset_model_id.in_(model_ids)).delete(
            synchronize_session=False)
        stock_deleted = StockItem.query.filter(StockItem.asset_model_id.in_(model_ids)).delete(
            synchronize_session=False)
        models_deleted = AssetModel.query.filter(AssetModel.id.in_(model_ids)).delete(
            synchronize_session=False)
        db.session.commit()
        db.session.expire_all()
        return {
            'models_deleted': models_deleted,
            'asset_items_deleted': items_deleted,
            'stock_items_deleted': stock_deleted,
        }

    def delete(self, deleted_by_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Raises:
            ValidationError: Some items or stock units of this model are lent
        """
        self._check_nothing_lent([self._asset_model_id], 'ce modèle')
        old_values = self._asset_model.to_dict()
        counts = self._cascade_delete([self._asset_model_id])
        logger.info(f"Deleted asset model {self._asset_model_id}: {counts}")
        AuditTrail.record(AuditAction.DELETE, 'asset_models', self._asset_model_id,
                          old_values=old_values, user_id=deleted_by_id)
        return {
            'message': "Modèle d'équipement supprimé avec succès",
            'asset_items_deleted': counts['asset_items_deleted'],
            'stock_items_deleted': counts['stock_items_deleted'],
        }

    @classmethod
    def batch_delete(cls, model_ids, deleted_by_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Raises:
            ValidationError: Empty or oversized selection, or something is lent
            NotFoundError: None of the ids exist
        """
        if not model_ids:
            raise ValidationError('Au moins un modèle doit être sélectionné')
        if len(model_ids) > MAX_BATCH_DELETE:
            raise ValidationError(f'Maximum {MAX_BATCH_DELETE} modèles par suppression groupée')

        found = [model_id for (model_id,) in
                 db.session.query(AssetModel.id).filter(AssetModel.id.in_(model_ids)).all()]
        if not found:
            raise NotFoundError('Aucun modèle trouvé avec les IDs fournis')

        cls._check_nothing_lent(found, 'ces modèles')
        counts = cls._cascade_delete(found)
        logger.info(f"Batch deleted asset models {found}: {counts}")
        AuditTrail.record(AuditAction.DELETE, 'asset_models', 'batch',
                          old_values={'ids': found}, user_id=deleted_by_id)
        result = {'message': f"{counts['models_deleted']} modèle(s) supprimé(s) avec succès"}
        result.update(counts)
        return result
