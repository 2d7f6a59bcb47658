from loan_inventory import db
from loan_inventory.data.core.constants import LoanStatus
from loan_inventory.data.core.user_created_base import UserCreatedBase, utcnow


class Loan(UserCreatedBase):
    __tablename__ = 'loans'

    employee_id = db.Column(db.Integer, db.ForeignKey('employees.id'), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default=LoanStatus.OPEN, index=True)
    opened_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    closed_at = db.Column(db.DateTime, nullable=True)
    pickup_signature_url = db.Column(db.String(255), nullable=True)
    pickup_signed_at = db.Column(db.DateTime, nullable=True)
    return_signature_url = db.Column(db.String(255), nullable=True)
    return_signed_at = db.Column(db.DateTime, nullable=True)
    deleted_at = db.Column(db.DateTime, nullable=True, index=True)
    deleted_by_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True)

    employee = db.relationship('Employee', back_populates='loans')
    deleted_by = db.relationship('User', foreign_keys=[deleted_by_id])
    lines = db.relationship('LoanLine', back_populates='loan', cascade='all, delete-orphan',
                            order_by='LoanLine.id')

    @property
    def is_open(self):
        return self.status == LoanStatus.OPEN

    @property
    def is_deleted(self):
        return self.deleted_at is not None

    def __repr__(self):
        return f'<Loan {self.id} {self.status}>'
