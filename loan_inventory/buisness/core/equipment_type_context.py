"""
Equipment Type Context (Core)
Reference list of equipment types that asset models are classified under.
"""

from typing import Any, Dict, Optional, Union
from loan_inventory import db
from loan_inventory.buisness.core.audit_trail import AuditTrail
from loan_inventory.buisness.core.errors import NotFoundError, ValidationError
from loan_inventory.buisness.core.validation import require_string
from loan_inventory.data.core.asset_info.asset_model import AssetModel
from loan_inventory.data.core.asset_info.equipment_type import EquipmentType
from loan_inventory.data.core.constants import AuditAction
from loan_inventory.logger import get_logger

logger = get_logger("loan_inventory.buisness.core.equipment_type_context")

NAME_CONFLICT = 'Un type avec ce nom existe déjà'


class EquipmentTypeContext:

    def __init__(self, equipment_type: Union[EquipmentType, int]):
        if isinstance(equipment_type, int):
            self._equipment_type = db.session.get(EquipmentType, equipment_type)
            if self._equipment_type is None:
                raise NotFoundError("Type d'équipement non trouvé")
        else:
            self._equipment_type = equipment_type
        self._equipment_type_id = self._equipment_type.id

    @property
    def equipment_type(self) -> EquipmentType:
        return self._equipment_type

    @property
    def model_count(self) -> int:
        return AssetModel.query.filter_by(type=self._equipment_type.name).count()

    def to_dict(self) -> Dict[str, Any]:
        result = self._equipment_type.to_dict()
        result['model_count'] = self.model_count
        return result

    @staticmethod
    def exists(name: str) -> bool:
        return EquipmentType.query.filter_by(name=name).first() is not None

    @staticmethod
    def _clean_name(data: Dict[str, Any]) -> str:
        return require_string(data, 'name', 'Le nom du type', min_length=2, max_length=50)

    @classmethod
    def create(cls, data: Dict[str, Any], created_by_id: Optional[int] = None) -> 'EquipmentTypeContext':
        """
        Raises:
            ValidationError: Name missing, outside 2-50 characters, or already used
        """
        name = cls._clean_name(data)
        if cls.exists(name):
            raise ValidationError(NAME_CONFLICT)

        equipment_type = EquipmentType.create_from_dict({'name': name}, user_id=created_by_id)
        AuditTrail.record(AuditAction.CREATE, 'equipment_types', equipment_type.id,
                          new_values=equipment_type.to_dict(), user_id=created_by_id)
        return cls(equipment_type)

    def update(self, data: Dict[str, Any], updated_by_id: Optional[int] = None) -> 'EquipmentTypeContext':
        """
        Rename the type. Asset models filed under the old name follow the rename.
        """
        if 'name' not in data:
            return self

        name = self._clean_name(data)
        old_name = self._equipment_type.name
        if name == old_name:
            return self

        existing = EquipmentType.query.filter_by(name=name).first()
        if existing and existing.id != self._equipment_type_id:
            raise ValidationError(NAME_CONFLICT)

        old_values = self._equipment_type.to_dict()
        self._equipment_type.apply_dict({'name': name}, user_id=updated_by_id)
        renamed = AssetModel.query.filter_by(type=old_name).update({'type': name}, synchronize_session='fetch')
        db.session.commit()
        logger.info(f"Renamed equipment type '{old_name}' to '{name}' ({renamed} models updated)")
        AuditTrail.record(AuditAction.UPDATE, 'equipment_types', self._equipment_type_id,
                          old_values=old_values, new_values=self._equipment_type.to_dict(),
                          user_id=updated_by_id)
        return self

    def delete(self, deleted_by_id: Optional[int] = None) -> None:
        """
        Raises:
            ValidationError: The type is still used by asset models
        """
        count = self.model_count
        if count > 0:
            raise ValidationError(
                f"Impossible de supprimer ce type : il est utilisé par {count} modèle(s) d'équipement"
            )

        old_values = self._equipment_type.to_dict()
        db.session.delete(self._equipment_type)
        db.session.commit()
        logger.info(f"Deleted equipment type {old_values['name']}")
        AuditTrail.record(AuditAction.DELETE, 'equipment_types', self._equipment_type_id,
                          old_values=old_values, user_id=deleted_by_id)
