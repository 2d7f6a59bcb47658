"""
Equipment Type Service
Equipment types are a short reference list, returned whole with their model counts.
"""

from typing import Any, Dict, List
from sqlalchemy import func
from loan_inventory import db
from loan_inventory.data.core.asset_info.asset_model import AssetModel
from loan_inventory.data.core.asset_info.equipment_type import EquipmentType


class EquipmentTypeService:

    @staticmethod
    def get_model_counts() -> Dict[str, int]:
        """
        Returns:
            Dict mapping type name to the number of asset models using it
        """
        rows = db.session.query(AssetModel.type, func.count(AssetModel.id)).group_by(AssetModel.type).all()
        return {type_name: count for type_name, count in rows}

    @staticmethod
    def get_list_data() -> List[Dict[str, Any]]:
        counts = EquipmentTypeService.get_model_counts()
        result = []
        for equipment_type in EquipmentType.query.order_by(EquipmentType.name).all():
            data = equipment_type.to_dict()
            data['model_count'] = counts.get(equipment_type.name, 0)
            result.append(data)
        return result
