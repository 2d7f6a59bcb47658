from loan_inventory import db
from loan_inventory.buisness.core.data_insertion_mixin import DataInsertionMixin
from loan_inventory.data.core.user_created_base import utcnow


class AuditLog(DataInsertionMixin, db.Model):
    __tablename__ = 'audit_logs'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True)
    action = db.Column(db.String(20), nullable=False)
    table_name = db.Column(db.String(50), nullable=False)
    record_id = db.Column(db.String(50), nullable=False)
    old_values = db.Column(db.JSON, nullable=True)
    new_values = db.Column(db.JSON, nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, index=True)

    user = db.relationship('User')

    __table_args__ = (
        db.Index('ix_audit_logs_table_record', 'table_name', 'record_id'),
    )

    def __repr__(self):
        return f'<AuditLog {self.action} {self.table_name}:{self.record_id}>'
