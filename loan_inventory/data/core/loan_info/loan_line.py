from loan_inventory import db
from loan_inventory.data.core.user_created_base import UserCreatedBase


class LoanLine(UserCreatedBase):
    """One asset item or a quantity of one stock item lent within a loan"""
    __tablename__ = 'loan_lines'

    loan_id = db.Column(db.Integer, db.ForeignKey('loans.id', ondelete='CASCADE'), nullable=False, index=True)
    asset_item_id = db.Column(db.Integer, db.ForeignKey('asset_items.id', ondelete='SET NULL'),
                              nullable=True, index=True)
    stock_item_id = db.Column(db.Integer, db.ForeignKey('stock_items.id', ondelete='SET NULL'),
                              nullable=True, index=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)

    loan = db.relationship('Loan', back_populates='lines')
    asset_item = db.relationship('AssetItem')
    stock_item = db.relationship('StockItem')

    def __repr__(self):
        return f'<LoanLine {self.id} loan={self.loan_id}>'
