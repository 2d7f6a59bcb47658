from loan_inventory import db
from loan_inventory.data.core.user_created_base import UserCreatedBase


class StockItem(UserCreatedBase):
    """Consumable tracked by quantity; `loaned` units are out on open loans"""
    __tablename__ = 'stock_items'

    asset_model_id = db.Column(db.Integer, db.ForeignKey('asset_models.id', ondelete='CASCADE'),
                               nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    loaned = db.Column(db.Integer, nullable=False, default=0)
    notes = db.Column(db.Text, nullable=True)

    asset_model = db.relationship('AssetModel', back_populates='stock_items')

    @property
    def available(self):
        return (self.quantity or 0) - (self.loaned or 0)

    def to_dict(self, include_relationships=False, include_audit_fields=True):
        result = super().to_dict(include_relationships, include_audit_fields)
        result['available'] = self.available
        return result

    def __repr__(self):
        return f'<StockItem {self.id} qty={self.quantity} loaned={self.loaned}>'
