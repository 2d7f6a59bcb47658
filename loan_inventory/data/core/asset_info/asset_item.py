from loan_inventory import db
from loan_inventory.data.core.constants import AssetStatus
from loan_inventory.data.core.user_created_base import UserCreatedBase


class AssetItem(UserCreatedBase):
    """Individually tracked equipment unit"""
    __tablename__ = 'asset_items'

    asset_model_id = db.Column(db.Integer, db.ForeignKey('asset_models.id', ondelete='CASCADE'),
                               nullable=False, index=True)
    asset_tag = db.Column(db.String(100), unique=True, nullable=True)
    serial = db.Column(db.String(100), unique=True, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=AssetStatus.EN_STOCK, index=True)
    notes = db.Column(db.Text, nullable=True)

    asset_model = db.relationship('AssetModel', back_populates='items')

    @property
    def is_available(self):
        return self.status == AssetStatus.EN_STOCK

    def __repr__(self):
        return f'<AssetItem {self.asset_tag or self.id}>'
