from loan_inventory import db
from loan_inventory.data.core.user_created_base import UserCreatedBase


class Employee(UserCreatedBase):
    __tablename__ = 'employees'

    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=True, index=True)
    dept = db.Column(db.String(100), nullable=True)
    manager_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True)

    manager = db.relationship('User', foreign_keys=[manager_id])
    loans = db.relationship('Loan', back_populates='employee', lazy='dynamic')

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f'<Employee {self.full_name}>'
