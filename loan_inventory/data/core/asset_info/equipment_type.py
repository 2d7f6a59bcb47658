from loan_inventory import db
from loan_inventory.data.core.user_created_base import UserCreatedBase


class EquipmentType(UserCreatedBase):
    __tablename__ = 'equipment_types'

    name = db.Column(db.String(50), unique=True, nullable=False)

    def __repr__(self):
        return f'<EquipmentType {self.name}>'
