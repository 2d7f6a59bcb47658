"""
Stock Item Context (Core)
Consumables tracked by quantity. `loaned` counts the units currently out on
open loans; `quantity - loaned` is what can still be lent.
"""

from typing import Any, Dict, Optional, Union
from loan_inventory import db
from loan_inventory.buisness.core.asset_item_context import get_asset_model
from loan_inventory.buisness.core.audit_trail import AuditTrail
from loan_inventory.buisness.core.errors import NotFoundError, ValidationError
from loan_inventory.buisness.core.validation import optional_string, parse_int
from loan_inventory.data.core.asset_info.stock_item import StockItem
from loan_inventory.data.core.constants import AuditAction
from loan_inventory.data.core.loan_info.loan_line import LoanLine
from loan_inventory.logger import get_logger

logger = get_logger("loan_inventory.buisness.core.stock_item_context")


class StockItemContext:

    def __init__(self, stock_item: Union[StockItem, int]):
        if isinstance(stock_item, int):
            self._stock_item = db.session.get(StockItem, stock_item)
            if self._stock_item is None:
                raise NotFoundError('Article de stock non trouvé')
        else:
            self._stock_item = stock_item
        self._stock_item_id = self._stock_item.id

    @property
    def stock_item(self) -> StockItem:
        return self._stock_item

    @property
    def stock_item_id(self) -> int:
        return self._stock_item_id

    def to_dict(self) -> Dict[str, Any]:
        return self._stock_item.to_dict(include_relationships=['asset_model'])

    @classmethod
    def create(cls, data: Dict[str, Any], created_by_id: Optional[int] = None,
               commit: bool = True) -> 'StockItemContext':
        """
        Raises:
            NotFoundError: Asset model does not exist
            ValidationError: Negative quantity
        """
        asset_model_id = parse_int(data.get('asset_model_id'), "Le modèle d'équipement", minimum=1)
        get_asset_model(asset_model_id)
        quantity = parse_int(data.get('quantity', 0), 'La quantité', minimum=0)
        notes = optional_string(data, 'notes', 'Les notes', max_length=2000)

        stock_item = StockItem.create_from_dict(
            {'asset_model_id': asset_model_id, 'quantity': quantity, 'loaned': 0, 'notes': notes},
            user_id=created_by_id,
            commit=commit,
        )
        if commit:
            AuditTrail.record(AuditAction.CREATE, 'stock_items', stock_item.id,
                              new_values=stock_item.to_dict(), user_id=created_by_id)
        return cls(stock_item)

    def update(self, data: Dict[str, Any], updated_by_id: Optional[int] = None) -> 'StockItemContext':
        """
        Raises:
            ValidationError: Quantity negative or below the loaned count
        """
        cleaned = {}
        if 'asset_model_id' in data:
            cleaned['asset_model_id'] = parse_int(data.get('asset_model_id'), "Le modèle d'équipement", minimum=1)
            get_asset_model(cleaned['asset_model_id'])
        if 'quantity' in data:
            cleaned['quantity'] = self._check_quantity(parse_int(data.get('quantity'), 'La quantité'))
        if 'notes' in data:
            cleaned['notes'] = optional_string(data, 'notes', 'Les notes', max_length=2000)

        old_values = self._stock_item.to_dict()
        self._stock_item.apply_dict(cleaned, user_id=updated_by_id)
        db.session.commit()
        logger.info(f"Updated stock item {self._stock_item_id}")
        AuditTrail.record(AuditAction.UPDATE, 'stock_items', self._stock_item_id,
                          old_values=old_values, new_values=self._stock_item.to_dict(),
                          user_id=updated_by_id)
        return self

    def _check_quantity(self, quantity: int) -> int:
        if quantity < 0:
            raise ValidationError('La quantité ne peut pas être négative')
        if quantity < (self._stock_item.loaned or 0):
            raise ValidationError(
                f'La quantité ne peut pas être inférieure au nombre d\'unités prêtées ({self._stock_item.loaned})'
            )
        return quantity

    def adjust_quantity(self, delta, updated_by_id: Optional[int] = None) -> 'StockItemContext':
        """
        Add (positive delta) or remove (negative delta) units.

        Raises:
            ValidationError: Resulting quantity negative or below the loaned count
        """
        delta = parse_int(delta, "L'ajustement")
        old_quantity = self._stock_item.quantity
        self._stock_item.quantity = self._check_quantity(old_quantity + delta)
        self._stock_item.updated_by_id = updated_by_id
        db.session.commit()
        logger.info(f"Stock item {self._stock_item_id} quantity {old_quantity} -> {self._stock_item.quantity}")
        AuditTrail.record(AuditAction.UPDATE, 'stock_items', self._stock_item_id,
                          old_values={'quantity': old_quantity},
                          new_values={'quantity': self._stock_item.quantity},
                          user_id=updated_by_id)
        return self

    def delete(self, deleted_by_id: Optional[int] = None) -> None:
        """
        Delete the stock item; loan lines keep their history with a null item.

        Raises:
            ValidationError: Units are still out on open loans
        """
        if self._stock_item.loaned:
            raise ValidationError(
                f'Impossible de supprimer cet article : {self._stock_item.loaned} unité(s) actuellement prêtée(s)'
            )

        old_values = self._stock_item.to_dict()
        LoanLine.query.filter(LoanLine.stock_item_id == self._stock_item_id).update(
            {'stock_item_id': None}, synchronize_session='fetch'
        )
        db.session.delete(self._stock_item)
        db.session.commit()
        logger.info(f"Deleted stock item {self._stock_item_id}")
        AuditTrail.record(AuditAction.DELETE, 'stock_items', self._stock_item_id,
                          old_values=old_values, user_id=deleted_by_id)
