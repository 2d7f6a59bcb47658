from loan_inventory import db
from loan_inventory.data.core.user_created_base import UserCreatedBase


class AssetModel(UserCreatedBase):
    """Catalog entry (type, brand, model name) instantiated by asset and stock items"""
    __tablename__ = 'asset_models'

    type = db.Column(db.String(50), nullable=False, index=True)
    brand = db.Column(db.String(100), nullable=False)
    model_name = db.Column(db.String(100), nullable=False)

    items = db.relationship('AssetItem', back_populates='asset_model',
                            cascade='all, delete-orphan', lazy='dynamic')
    stock_items = db.relationship('StockItem', back_populates='asset_model',
                                  cascade='all, delete-orphan', lazy='dynamic')

    def __repr__(self):
        return f'<AssetModel {self.brand} {self.model_name}>'
